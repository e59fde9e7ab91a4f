"""ApplicationInstance: an onboarded application instantiated in a zone."""

from __future__ import annotations

from enum import Enum
from typing import ClassVar

from pydantic import Field

from ewbi.core.model import ResourceModel
from ewbi.core.model.meta import Phase, Resource

APPLICATION_INSTANCE_FINALIZER = "applicationinstance.opg.ewbi.finalizer.nby.one"


class ApplicationInstanceState(str, Enum):
    PENDING = "Pending"
    READY = "Ready"
    FAILED = "Failed"
    TERMINATING = "Terminating"


class ZoneInfo(ResourceModel):
    zone_id: str = Field(default="", alias="zoneId")
    flavour_id: str = Field(default="", alias="flavourId")
    resource_consumption: str = Field(default="", alias="resourceConsumption")
    res_pool: str = Field(default="", alias="resPool")


class AccessPoint(ResourceModel):
    """Where an exposed interface of the instance can be reached."""

    port: int = 0
    fqdn: str = ""
    ipv4_addresses: list[str] = Field(default_factory=list, alias="ipv4Addresses")
    ipv6_addresses: list[str] = Field(default_factory=list, alias="ipv6Addresses")


class ApplicationInstanceSpec(ResourceModel):
    app_provider_id: str = Field(default="", alias="appProviderId")
    app_id: str = Field(default="", alias="appId")
    app_version: str = Field(default="", alias="appVersion")
    zone_info: ZoneInfo = Field(default_factory=ZoneInfo, alias="zoneInfo")
    call_back_link: str = Field(default="", alias="callBackLink")


class ApplicationInstanceStatus(ResourceModel):
    phase: Phase | None = None
    state: ApplicationInstanceState | None = None
    error_msg: str = Field(default="", alias="errorMsg")
    access_points: dict[str, list[AccessPoint]] = Field(
        default_factory=dict,
        alias="accessPoints",
        description="Access points keyed by interface id",
    )


class ApplicationInstance(Resource):
    kind: ClassVar[str] = "ApplicationInstance"
    finalizer: ClassVar[str] = APPLICATION_INSTANCE_FINALIZER

    spec: ApplicationInstanceSpec = Field(default_factory=ApplicationInstanceSpec)
    status: ApplicationInstanceStatus = Field(default_factory=ApplicationInstanceStatus)
