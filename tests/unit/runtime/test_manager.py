"""Tests for the reconcile scheduler."""

import asyncio

import pytest
from fakes import eventually

from ewbi.config import Settings
from ewbi.controllers.base import Result
from ewbi.core.model import File, ObjectKey, ObjectMeta
from ewbi.runtime.manager import ControllerManager, ManagerConfig
from ewbi.store.memory import InMemoryStore

KEY = ObjectKey("default", "file-a")


class RecordingReconciler:
    """Stand-in reconciler recording every pass."""

    resource = File
    kind = "File"

    def __init__(self, results: list[Result] | None = None, failures: int = 0) -> None:
        self.calls: list[ObjectKey] = []
        self.results = list(results or [])
        self.failures = failures
        self.entered = asyncio.Event()
        self.gate: asyncio.Event | None = None

    async def reconcile(self, key: ObjectKey) -> Result:
        self.calls.append(key)
        self.entered.set()
        if self.gate is not None:
            await self.gate.wait()
        if self.failures:
            self.failures -= 1
            raise RuntimeError("boom")
        return self.results.pop(0) if self.results else Result()


def fast_config() -> ManagerConfig:
    return ManagerConfig(max_concurrent_reconciles=2, retry_base_delay=0.01, retry_max_delay=0.05)


class TestManagerConfig:
    """Tests for ManagerConfig."""

    def test_backoff_doubles_up_to_cap(self) -> None:
        """Retry delays grow exponentially and are capped."""
        config = ManagerConfig(retry_base_delay=1.0, retry_max_delay=10.0)

        assert [config.backoff(n) for n in range(1, 6)] == [1.0, 2.0, 4.0, 8.0, 10.0]

    def test_from_settings(self, settings: Settings) -> None:
        """Config values come from settings."""
        config = ManagerConfig.from_settings(settings)

        assert config.max_concurrent_reconciles == 2
        assert config.retry_base_delay == 0.01
        assert config.retry_max_delay == 0.05


class TestEnqueue:
    """Tests for queueing without running workers."""

    def test_duplicate_enqueue_is_coalesced(self, store: InMemoryStore) -> None:
        """The same object is queued once."""
        manager = ControllerManager(store, fast_config())
        manager.register(RecordingReconciler())

        manager.enqueue("File", KEY)
        manager.enqueue("File", KEY)
        manager.enqueue("File", ObjectKey("default", "file-b"))

        assert manager.pending_count == 2

    def test_unknown_kind_is_ignored(self, store: InMemoryStore) -> None:
        """Notifications for unregistered kinds are dropped."""
        manager = ControllerManager(store, fast_config())

        manager.enqueue("Artefact", KEY)

        assert manager.pending_count == 0

    @pytest.mark.asyncio
    async def test_store_changes_are_enqueued(self, store: InMemoryStore) -> None:
        """Store writes notify the manager."""
        manager = ControllerManager(store, fast_config())
        manager.register(RecordingReconciler())

        await store.create(File(metadata=ObjectMeta(name="file-a")))

        assert manager.pending_count == 1


class TestProcess:
    """Tests for the follow-up scheduling of a single pass."""

    @pytest.mark.asyncio
    async def test_requeue_after_schedules_pass(self, store: InMemoryStore) -> None:
        """A requested requeue arms a timer."""
        manager = ControllerManager(store, fast_config())
        manager.register(RecordingReconciler([Result(requeue_after=30.0)]))

        await manager.process("File", KEY)

        assert manager.delayed_count == 1
        await manager.stop()
        assert manager.delayed_count == 0

    @pytest.mark.asyncio
    async def test_no_requeue_schedules_nothing(self, store: InMemoryStore) -> None:
        """A finished pass leaves no timer."""
        manager = ControllerManager(store, fast_config())
        manager.register(RecordingReconciler())

        await manager.process("File", KEY)

        assert manager.delayed_count == 0

    @pytest.mark.asyncio
    async def test_failure_schedules_retry(self, store: InMemoryStore) -> None:
        """A raising pass is retried later."""
        manager = ControllerManager(store, fast_config())
        manager.register(RecordingReconciler(failures=1))

        await manager.process("File", KEY)

        assert manager.delayed_count == 1
        await manager.stop()


class TestRunningManager:
    """Tests with running workers."""

    @pytest.mark.asyncio
    async def test_start_reconciles_existing_objects(self, store: InMemoryStore) -> None:
        """Objects present at startup get a pass."""
        await store.create(File(metadata=ObjectMeta(name="file-a")))
        reconciler = RecordingReconciler()
        manager = ControllerManager(store, fast_config())
        manager.register(reconciler)

        async with manager:
            await manager.drain()

        assert reconciler.calls == [KEY]

    @pytest.mark.asyncio
    async def test_requeue_runs_again(self, store: InMemoryStore) -> None:
        """A pass asking for a requeue runs again after the delay."""
        reconciler = RecordingReconciler([Result(requeue_after=0.01)])
        manager = ControllerManager(store, fast_config())
        manager.register(reconciler)

        async def twice() -> bool:
            return len(reconciler.calls) >= 2

        async with manager:
            await store.create(File(metadata=ObjectMeta(name="file-a")))
            await eventually(twice)

        assert reconciler.calls == [KEY, KEY]

    @pytest.mark.asyncio
    async def test_failures_are_retried(self, store: InMemoryStore) -> None:
        """A failing pass is retried with backoff until it succeeds."""
        reconciler = RecordingReconciler(failures=2)
        manager = ControllerManager(store, fast_config())
        manager.register(reconciler)

        async def recovered() -> bool:
            return len(reconciler.calls) >= 3

        async with manager:
            await store.create(File(metadata=ObjectMeta(name="file-a")))
            await eventually(recovered)
            await asyncio.sleep(0.1)

        assert len(reconciler.calls) == 3

    @pytest.mark.asyncio
    async def test_changes_during_pass_coalesce(self, store: InMemoryStore) -> None:
        """Changes arriving during a pass cause exactly one follow-up pass."""
        reconciler = RecordingReconciler()
        reconciler.gate = asyncio.Event()
        manager = ControllerManager(store, fast_config())
        manager.register(reconciler)

        async def followed_up() -> bool:
            return len(reconciler.calls) >= 2

        async with manager:
            await store.create(File(metadata=ObjectMeta(name="file-a")))
            await reconciler.entered.wait()
            manager.enqueue("File", KEY)
            manager.enqueue("File", KEY)
            reconciler.gate.set()
            await eventually(followed_up)
            await asyncio.sleep(0.05)

        assert reconciler.calls == [KEY, KEY]

    @pytest.mark.asyncio
    async def test_keys_run_concurrently(self, store: InMemoryStore) -> None:
        """Different objects are reconciled in parallel."""
        reconciler = RecordingReconciler()
        reconciler.gate = asyncio.Event()
        manager = ControllerManager(store, fast_config())
        manager.register(reconciler)

        async def both_started() -> bool:
            return len(reconciler.calls) == 2

        async with manager:
            await store.create(File(metadata=ObjectMeta(name="file-a")))
            await store.create(File(metadata=ObjectMeta(name="file-b")))
            await eventually(both_started)
            reconciler.gate.set()
            await manager.drain()

        assert set(reconciler.calls) == {KEY, ObjectKey("default", "file-b")}
