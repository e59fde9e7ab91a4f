"""Generic reconcile state machine shared by every resource kind.

One pass, entered with the key of a changed object:

1. Fetch the object; a missing object means there is nothing to do.
2. Resolve the parent Federation (context-id label + relation label).
   Failure marks the object as Error and is raised to the scheduler.
3. Not deleting and no finalizer yet: add the finalizer, persist, stop.
   The next pass does the remote work, so the finalizer is durable before
   any partner side effect exists.
4. Deleting: guest objects are deleted on the partner first (2xx or 404
   confirm), then the finalizer is removed.
5. Otherwise guest objects are created/synced on the partner and host
   objects converge to Ready from local observation.

Subclasses implement the kind-specific partner calls and status mapping.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import ClassVar, Generic, TypeVar
from uuid import uuid4

from ewbi.config import Settings
from ewbi.config import settings as default_settings
from ewbi.core.model import Federation, ObjectKey, Phase, Resource
from ewbi.errors import FederationResolutionError, PartnerTransportError
from ewbi.federation.clients import PartnerClientRegistry
from ewbi.federation.directory import FederationDirectory
from ewbi.federation.outcome import Outcome, classify, is_deletion_confirmed
from ewbi.federation.partner import PartnerClient, PartnerResponse
from ewbi.observability.logging import LogContext
from ewbi.store.base import ConflictError, NotFoundError, ObjectStore

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=Resource)


@dataclass(frozen=True)
class Result:
    """Outcome of one reconcile pass as seen by the scheduler."""

    requeue_after: float | None = None

    @property
    def requeue(self) -> bool:
        return self.requeue_after is not None


class ResourceReconciler(ABC, Generic[R]):
    """Base reconciler for one resource kind."""

    resource: ClassVar[type[Resource]]

    # Federation reconciles itself instead of resolving a parent
    resolves_parent: ClassVar[bool] = True

    def __init__(
        self,
        store: ObjectStore,
        clients: PartnerClientRegistry,
        directory: FederationDirectory | None = None,
        settings: Settings | None = None,
    ) -> None:
        self.store = store
        self.clients = clients
        self.directory = directory or FederationDirectory(store)
        self.settings = settings or default_settings

    @property
    def kind(self) -> str:
        return self.resource.kind

    @property
    def finalizer(self) -> str:
        return self.resource.finalizer

    @property
    def retry_delay(self) -> float:
        return self.settings.guest_requeue_delay

    async def reconcile(self, key: ObjectKey) -> Result:
        """Run one reconcile pass for the object stored under ``key``."""
        with LogContext(
            kind=self.kind,
            namespace=key.namespace,
            name=key.name,
            reconcile_id=uuid4().hex[:8],
        ):
            logger.debug(f"Starting reconcile for {self.kind} {key}")
            try:
                obj: R = await self.store.get(self.resource, key)  # type: ignore[assignment]
            except NotFoundError:
                logger.info(f"{self.kind} {key} not found, nothing to do")
                return Result()
            return await self._reconcile(obj)

    async def _reconcile(self, obj: R) -> Result:
        federation = await self._resolve_parent(obj)

        if not obj.is_being_deleted:
            if obj.add_finalizer(self.finalizer):
                await self.store.update(obj)
                logger.info(f"Added finalizer {self.finalizer}")
                return Result()
        else:
            return await self._finalize(obj, federation)

        if obj.is_guest:
            client = self.client_for(federation)
            try:
                return await self.sync_guest(obj, federation, client)
            except PartnerTransportError as e:
                logger.error(f"Partner sync failed: {e}")
                self.mark_error(obj, str(e))
                await self.write_status(obj)
                raise

        if self.observe_host(obj):
            await self.write_status(obj)
        return Result()

    async def _resolve_parent(self, obj: R) -> Federation:
        if not self.resolves_parent:
            return obj  # type: ignore[return-value]
        try:
            federation = await self.directory.resolve_for(obj)
        except FederationResolutionError as e:
            logger.error(f"{self.kind} must have exactly one parent federation: {e}")
            self.mark_error(obj, str(e))
            await self.write_status(obj)
            raise
        logger.debug(f"Resolved parent federation {federation.key}")
        return federation

    async def _finalize(self, obj: R, federation: Federation) -> Result:
        if not obj.has_finalizer(self.finalizer):
            return Result()

        if obj.is_guest:
            client = self.client_for(federation)
            try:
                response = await self.delete_guest(obj, federation, client)
            except PartnerTransportError as e:
                logger.error(f"Partner delete failed: {e}")
                self.mark_error(obj, str(e))
                await self.write_status(obj)
                raise
            if response is None:
                logger.info("Nothing to delete on the partner")
            elif not is_deletion_confirmed(response.status_code):
                logger.warning(
                    f"Partner did not confirm deletion: status {response.status_code}, "
                    f"detail {response.detail!r}; keeping finalizer"
                )
                return Result(requeue_after=self.retry_delay)
            else:
                logger.info("Partner confirmed deletion")

        obj.remove_finalizer(self.finalizer)
        await self.store.update(obj)
        logger.info(f"Removed finalizer {self.finalizer}")
        return Result()

    def client_for(self, federation: Federation) -> PartnerClient:
        return self.clients.get_or_create(
            federation.external_id, federation.partner_url, federation.caller_id
        )

    async def write_status(self, obj: R, required: bool = False) -> None:
        """Persist the status subresource.

        Failures are logged and swallowed unless ``required`` is set.
        """
        try:
            await self.store.update_status(obj)
        except (ConflictError, NotFoundError) as e:
            if required:
                raise
            logger.warning(f"Error updating {self.kind} status: {e}")

    async def handle_response(
        self,
        obj: R,
        operation: str,
        response: PartnerResponse,
        on_success: Callable[[], Awaitable[Result]],
        transient_delay: float | None = None,
        exists_ok: bool = False,
    ) -> Result:
        """Apply the uniform reaction to a partner response.

        Args:
            obj: Object the call was made for
            operation: Partner operation name, for logging
            response: The partner response
            on_success: Invoked for 2xx responses
            transient_delay: Requeue delay for transient problems; defaults
                to the fixed retry delay, skipped once the object is Ready
            exists_ok: The call creates the object; a 409 before the object
                is Ready means an earlier create went through and is
                handled like a success
        """
        detail = response.detail
        outcome = classify(response.status_code, detail)

        if outcome is Outcome.SUCCESS:
            logger.info(f"{operation}: partner answered {response.status_code}")
            return await on_success()

        if outcome is Outcome.PERMANENT_REJECTION:
            message = detail or f"{operation} rejected with status {response.status_code}"
            logger.error(f"{operation} rejected: {message}")
            self.mark_error(obj, message)
            await self.write_status(obj)
            return Result(requeue_after=self.retry_delay)

        ready = obj.status.phase == Phase.READY  # type: ignore[attr-defined]

        if exists_ok and response.status_code == 409 and not ready:
            logger.info(f"{operation}: object already exists on the partner")
            return await on_success()

        if outcome is Outcome.TRANSIENT_PROBLEM:
            logger.info(
                f"{operation}: response with error {response.status_code}",
                extra={"detail": detail},
            )
            if transient_delay is not None:
                return Result(requeue_after=transient_delay)
            if ready:
                return Result()
            return Result(requeue_after=self.retry_delay)

        logger.warning(
            f"{operation}: unexpected status code {response.status_code}",
            extra={"body": response.content.decode("utf-8", errors="replace")},
        )
        self.mark_unclassified(obj)
        await self.write_status(obj)
        return Result(requeue_after=self.retry_delay)

    def mark_error(self, obj: R, message: str | None = None) -> None:
        """Record a failure on the object status (not persisted)."""
        obj.status.phase = Phase.ERROR  # type: ignore[attr-defined]

    def mark_unclassified(self, obj: R) -> None:
        """Record an unexpected partner answer (not persisted)."""
        self.mark_error(obj)

    def observe_host(self, obj: R) -> bool:
        """Converge a host object from local observation.

        Returns:
            True when the status changed and must be persisted
        """
        if obj.status.phase == Phase.READY:  # type: ignore[attr-defined]
            return False
        obj.status.phase = Phase.READY  # type: ignore[attr-defined]
        return True

    @abstractmethod
    async def sync_guest(self, obj: R, federation: Federation, client: PartnerClient) -> Result:
        """Create or sync the object on the partner."""
        ...

    @abstractmethod
    async def delete_guest(
        self, obj: R, federation: Federation, client: PartnerClient
    ) -> PartnerResponse | None:
        """Delete the object on the partner.

        Returns:
            The partner response, or None when there is nothing to delete
        """
        ...
