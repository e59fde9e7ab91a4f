"""End-to-end tests of the wired operator against the fake partner."""

import pytest
from fakes import (
    CONTEXT_ID,
    FEDERATION_ID,
    FakePartner,
    child_meta,
    eventually,
    guest_federation,
)

from ewbi.config import Settings
from ewbi.core.model import (
    ALL_KINDS,
    Application,
    ApplicationSpec,
    ApplicationState,
    ComponentSpecRef,
    ObjectKey,
    Phase,
)
from ewbi.main import create_manager
from ewbi.store.base import NotFoundError
from ewbi.store.memory import InMemoryStore

APP_KEY = ObjectKey("default", "app-1")


class TestCreateManager:
    """Tests for operator wiring."""

    def test_registers_every_kind(self, store: InMemoryStore, settings: Settings) -> None:
        """One reconciler per resource kind is registered."""
        manager = create_manager(store, settings)

        assert sorted(manager.kinds) == sorted(kind.kind for kind in ALL_KINDS)
        assert manager.config.max_concurrent_reconciles == 2


class TestOperator:
    """Full lifecycle through the scheduler."""

    @pytest.mark.asyncio
    async def test_application_lifecycle(
        self, store: InMemoryStore, partner: FakePartner, settings: Settings
    ) -> None:
        """An application is onboarded, then deboarded on deletion."""
        partner.with_federation(FEDERATION_ID, CONTEXT_ID, "zone-001")
        await store.create(guest_federation())
        manager = create_manager(store, settings, transport=partner.transport)

        async def onboarded() -> bool:
            app = await store.get(Application, APP_KEY)
            return app.status.state == ApplicationState.ONBOARDED

        async def removed() -> bool:
            try:
                await store.get(Application, APP_KEY)
            except NotFoundError:
                return True
            return False

        async with manager:
            await store.create(
                Application(
                    metadata=child_meta("app-1", "app-001"),
                    spec=ApplicationSpec(
                        component_specs=[ComponentSpecRef(artefact_id="artefact-001")]
                    ),
                )
            )
            await eventually(onboarded)
            app = await store.get(Application, APP_KEY)
            assert app.status.phase == Phase.READY
            assert app.has_finalizer(Application.finalizer)

            await store.delete(Application, APP_KEY)
            await eventually(removed)

        assert partner.apps == set()
        assert len(partner.calls_to("onboard_application")) >= 1
        assert len(partner.calls_to("delete_app")) == 1
