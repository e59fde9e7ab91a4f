"""Reconcile scheduler.

Runs the registered reconcilers against store change notifications:
- At most one reconcile in flight per (kind, key); changes arriving
  meanwhile are coalesced into one follow-up pass
- Different keys are reconciled concurrently by a bounded set of workers
- ``Result.requeue_after`` schedules a later pass
- Raised errors are retried with exponential backoff

Example:
    manager = ControllerManager(store)
    manager.register(FileReconciler(store, clients))

    async with manager:
        await asyncio.Event().wait()
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from types import TracebackType

from ewbi.config import Settings
from ewbi.controllers.base import ResourceReconciler
from ewbi.core.model import ObjectKey
from ewbi.federation.clients import PartnerClientRegistry
from ewbi.store.base import ObjectStore

logger = logging.getLogger(__name__)

WorkItem = tuple[str, ObjectKey]


@dataclass
class ManagerConfig:
    """Scheduler configuration."""

    max_concurrent_reconciles: int = 4

    # Backoff for failed reconciles
    retry_base_delay: float = 1.0
    retry_max_delay: float = 60.0

    @classmethod
    def from_settings(cls, settings: Settings) -> ManagerConfig:
        return cls(
            max_concurrent_reconciles=settings.max_concurrent_reconciles,
            retry_base_delay=settings.retry_base_delay,
            retry_max_delay=settings.retry_max_delay,
        )

    def backoff(self, failures: int) -> float:
        """Delay before retry number ``failures`` (1-based)."""
        return min(self.retry_base_delay * (2 ** (failures - 1)), self.retry_max_delay)


class ControllerManager:
    """Drives reconcilers from store notifications and requeue requests."""

    def __init__(
        self,
        store: ObjectStore,
        config: ManagerConfig | None = None,
        clients: PartnerClientRegistry | None = None,
    ) -> None:
        self.store = store
        self.config = config or ManagerConfig()
        self.clients = clients
        self._reconcilers: dict[str, ResourceReconciler] = {}  # type: ignore[type-arg]
        self._queue: asyncio.Queue[WorkItem] = asyncio.Queue()
        self._queued: set[WorkItem] = set()
        self._active: set[WorkItem] = set()
        self._dirty: set[WorkItem] = set()
        self._failures: dict[WorkItem, int] = {}
        self._timers: dict[WorkItem, asyncio.TimerHandle] = {}
        self._workers: list[asyncio.Task[None]] = []
        self._running = False
        store.add_listener(self.enqueue)

    def register(self, reconciler: ResourceReconciler) -> None:  # type: ignore[type-arg]
        """Register the reconciler for its resource kind."""
        self._reconcilers[reconciler.kind] = reconciler
        logger.info(f"Registered reconciler for kind: {reconciler.kind}")

    @property
    def kinds(self) -> list[str]:
        return list(self._reconcilers)

    def enqueue(self, kind: str, key: ObjectKey) -> None:
        """Schedule a reconcile pass for an object."""
        if kind not in self._reconcilers:
            return
        item = (kind, key)
        if item in self._queued:
            return
        if item in self._active:
            self._dirty.add(item)
            return
        self._queued.add(item)
        self._queue.put_nowait(item)

    def enqueue_after(self, kind: str, key: ObjectKey, delay: float) -> None:
        """Schedule a reconcile pass after ``delay`` seconds.

        An earlier pending request for the same object is replaced.
        """
        item = (kind, key)
        timer = self._timers.pop(item, None)
        if timer is not None:
            timer.cancel()
        loop = asyncio.get_running_loop()
        self._timers[item] = loop.call_later(delay, self._fire, item)

    def _fire(self, item: WorkItem) -> None:
        self._timers.pop(item, None)
        self.enqueue(*item)

    @property
    def pending_count(self) -> int:
        """Number of passes waiting for a worker."""
        return self._queue.qsize()

    @property
    def delayed_count(self) -> int:
        """Number of passes waiting for their requeue delay."""
        return len(self._timers)

    async def start(self) -> None:
        """Start the workers and enqueue every existing object."""
        if self._running:
            return
        self._running = True

        for kind, reconciler in self._reconcilers.items():
            for obj in await self.store.list(reconciler.resource):
                self.enqueue(kind, obj.key)

        for i in range(self.config.max_concurrent_reconciles):
            self._workers.append(asyncio.create_task(self._worker_loop(), name=f"reconciler-{i}"))
        logger.info(
            f"Controller manager started with {self.config.max_concurrent_reconciles} workers"
        )

    async def stop(self) -> None:
        """Stop the workers, drop pending timers and close partner clients."""
        logger.info(
            f"Stopping controller manager, dropping {self.pending_count} queued "
            f"and {self.delayed_count} delayed passes"
        )
        self._running = False

        for timer in self._timers.values():
            timer.cancel()
        self._timers.clear()

        for task in self._workers:
            task.cancel()
        if self._workers:
            await asyncio.gather(*self._workers, return_exceptions=True)
        self._workers.clear()

        if self.clients is not None:
            await self.clients.aclose()

        logger.info("Controller manager stopped")

    async def drain(self) -> None:
        """Wait until every queued pass has been processed."""
        await self._queue.join()

    async def _worker_loop(self) -> None:
        while self._running:
            try:
                item = await self._queue.get()
            except asyncio.CancelledError:
                break

            self._queued.discard(item)
            self._active.add(item)
            try:
                await self.process(*item)
            finally:
                self._active.discard(item)
                self._queue.task_done()
                if item in self._dirty:
                    self._dirty.discard(item)
                    self.enqueue(*item)

    async def process(self, kind: str, key: ObjectKey) -> None:
        """Run one reconcile pass and schedule the follow-up it asks for."""
        reconciler = self._reconcilers[kind]
        item = (kind, key)

        try:
            result = await reconciler.reconcile(key)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            failures = self._failures.get(item, 0) + 1
            self._failures[item] = failures
            delay = self.config.backoff(failures)
            logger.error(
                f"Reconcile of {kind} {key} failed (attempt {failures}), "
                f"retrying in {delay:.1f}s: {e}"
            )
            self.enqueue_after(kind, key, delay)
            return

        self._failures.pop(item, None)
        if result.requeue_after is not None:
            self.enqueue_after(kind, key, result.requeue_after)

    async def __aenter__(self) -> ControllerManager:
        await self.start()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.stop()
