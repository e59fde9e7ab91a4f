from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="EWBI_", env_file=".env", extra="ignore", populate_by_name=True
    )

    app_name: str = "ewbi-operator"
    env: str = "dev"

    # Partner API clients
    insecure_skip_verify: bool = Field(default=False, validation_alias="INSECURE_SKIP_VERIFY")
    client_id_header: str = Field(default="X-Client-ID", validation_alias="CLIENT_ID_HEADER")
    partner_timeout: float = Field(default=30.0, validation_alias="PARTNER_TIMEOUT")

    # Requeue contract
    guest_requeue_delay: float = Field(default=5.0, validation_alias="GUEST_REQUEUE_DELAY")
    poll_interval: float = Field(default=3.0, validation_alias="POLL_INTERVAL")

    # Scheduler backoff for failed reconciles
    retry_base_delay: float = Field(default=1.0, validation_alias="RETRY_BASE_DELAY")
    retry_max_delay: float = Field(default=60.0, validation_alias="RETRY_MAX_DELAY")
    max_concurrent_reconciles: int = Field(
        default=4, validation_alias="MAX_CONCURRENT_RECONCILES"
    )

    # Observability
    log_level: str = "INFO"
    log_json: bool = Field(default=True, validation_alias="LOG_JSON")


settings = Settings()
