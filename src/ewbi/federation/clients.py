"""Process-wide cache of partner clients.

One PartnerClient per federation external id, created on first use and
reused by every reconciler. Entries are never evicted; ``aclose()``
releases the underlying connections at shutdown.
"""

from __future__ import annotations

import logging
import threading

import httpx

from ewbi.config import Settings
from ewbi.federation.partner import PartnerClient

logger = logging.getLogger(__name__)


class PartnerClientRegistry:
    """Thread-safe map of federation id to PartnerClient."""

    def __init__(
        self,
        insecure_skip_verify: bool = False,
        client_id_header: str = "X-Client-ID",
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.insecure_skip_verify = insecure_skip_verify
        self.client_id_header = client_id_header
        self.timeout = timeout
        self._transport = transport
        self._clients: dict[str, PartnerClient] = {}
        self._lock = threading.Lock()

    @classmethod
    def from_settings(
        cls, settings: Settings, transport: httpx.AsyncBaseTransport | None = None
    ) -> PartnerClientRegistry:
        return cls(
            insecure_skip_verify=settings.insecure_skip_verify,
            client_id_header=settings.client_id_header,
            timeout=settings.partner_timeout,
            transport=transport,
        )

    def get_or_create(self, federation_id: str, url: str, caller_id: str) -> PartnerClient:
        """Return the client for a federation, creating it on first use.

        Later calls return the cached client even if url or caller_id differ.
        """
        client = self._clients.get(federation_id)
        if client is not None:
            return client

        with self._lock:
            client = self._clients.get(federation_id)
            if client is None:
                client = PartnerClient(
                    url,
                    caller_id,
                    client_id_header=self.client_id_header,
                    verify=not self.insecure_skip_verify,
                    timeout=self.timeout,
                    transport=self._transport,
                )
                self._clients[federation_id] = client
                logger.info(f"Created partner client for federation {federation_id} at {url}")
            return client

    def set(self, federation_id: str, client: PartnerClient) -> None:
        """Install or replace the client for a federation."""
        with self._lock:
            self._clients[federation_id] = client

    def __contains__(self, federation_id: object) -> bool:
        return federation_id in self._clients

    def __len__(self) -> int:
        return len(self._clients)

    async def aclose(self) -> None:
        """Close every cached client."""
        with self._lock:
            clients = list(self._clients.values())
        for client in clients:
            await client.aclose()
        logger.info(f"Closed {len(clients)} partner clients")
