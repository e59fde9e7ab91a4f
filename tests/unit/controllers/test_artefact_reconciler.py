"""Tests for the Artefact reconciler."""

import httpx
import orjson
import pytest
from fakes import (
    CONTEXT_ID,
    FEDERATION_ID,
    FakePartner,
    child_meta,
    guest_federation,
    host_federation,
)

from ewbi.config import Settings
from ewbi.controllers.artefact import ArtefactReconciler, build_upload_form
from ewbi.core.model import (
    Artefact,
    ArtefactSpec,
    ArtefactState,
    CommandLine,
    ComponentSpec,
    ComputeResourceProfile,
    ExposedInterface,
    ObjectKey,
    Phase,
)
from ewbi.federation.clients import PartnerClientRegistry
from ewbi.store.base import NotFoundError
from ewbi.store.memory import InMemoryStore

KEY = ObjectKey("default", "artefact-1")


def make_artefact(relation: str = "guest") -> Artefact:
    return Artefact(
        metadata=child_meta(
            "artefact-1", "artefact-001", relation=relation, finalizer=Artefact.finalizer
        ),
        spec=ArtefactSpec(
            app_provider_id="provider-1",
            artefact_name="nginx",
            artefact_version="1.0",
            virt_type="VM_TYPE",
            descriptor_type="COMPONENTSPEC",
            component_spec=[
                ComponentSpec(
                    name="web",
                    images=["file-001"],
                    num_of_instances=1,
                    restart_policy="RESTART_POLICY_ALWAYS",
                    command_line_params=CommandLine(command=["nginx"], args=["-g", "daemon off;"]),
                    compute_resource_profile=ComputeResourceProfile(
                        cpu_arch_type="ISA_X86_64", num_cpu="2", memory=1024
                    ),
                    exposed_interfaces=[
                        ExposedInterface(
                            interface_id="http",
                            protocol="TCP",
                            port=80,
                            visibility_type="VISIBILITY_EXTERNAL",
                        )
                    ],
                )
            ],
        ),
    )


@pytest.fixture
def reconciler(
    store: InMemoryStore, clients: PartnerClientRegistry, settings: Settings
) -> ArtefactReconciler:
    return ArtefactReconciler(store, clients, settings=settings)


class TestBuildUploadForm:
    """Tests for the UploadArtefact form mapping."""

    def test_component_mapping(self) -> None:
        """Components are mapped field by field, interfaces included."""
        form = build_upload_form(make_artefact())
        component = form.component_spec[0].to_wire()

        assert form.artefact_id == "artefact-001"
        assert form.artefact_virt_type == "VM_TYPE"
        assert component["componentName"] == "web"
        assert component["commandLineParams"] == {
            "command": ["nginx"],
            "commandArgs": ["-g", "daemon off;"],
        }
        assert component["computeResourceProfile"]["numCPU"] == "2"
        assert component["exposedInterfaces"] == [
            {
                "interfaceId": "http",
                "commProtocol": "TCP",
                "commPort": 80,
                "visibilityType": "VISIBILITY_EXTERNAL",
            }
        ]


class TestGuestArtefact:
    """Upload and readiness polling against the fake partner."""

    @pytest.fixture(autouse=True)
    async def federation(self, store: InMemoryStore, partner: FakePartner):
        partner.with_federation(FEDERATION_ID, CONTEXT_ID, "zone-001")
        return await store.create(guest_federation())

    @pytest.mark.asyncio
    async def test_upload_sends_form(
        self, store: InMemoryStore, partner: FakePartner, reconciler: ArtefactReconciler
    ) -> None:
        """The artefact is uploaded as a multipart form."""
        await store.create(make_artefact())

        await reconciler.reconcile(KEY)

        call = partner.calls_to("upload_artefact")[0]
        assert call.form_field("artefactId") == "artefact-001"
        assert call.form_field("artefactName") == "nginx"
        assert orjson.loads(call.form_field("componentSpec"))[0]["images"] == ["file-001"]

    @pytest.mark.asyncio
    async def test_upload_200_is_ready(
        self, store: InMemoryStore, reconciler: ArtefactReconciler
    ) -> None:
        """A synchronous upload makes the artefact Ready at once."""
        await store.create(make_artefact())

        result = await reconciler.reconcile(KEY)

        stored = await store.get(Artefact, KEY)
        assert not result.requeue
        assert stored.status.phase == Phase.READY
        assert stored.status.state == ArtefactState.READY

    @pytest.mark.asyncio
    async def test_upload_202_polls_until_ready(
        self, store: InMemoryStore, partner: FakePartner, reconciler: ArtefactReconciler
    ) -> None:
        """An accepted upload is Pending until GetArtefact answers 200."""
        partner.artefact_upload_status = 202
        await store.create(make_artefact())

        first = await reconciler.reconcile(KEY)
        pending = await store.get(Artefact, KEY)
        second = await reconciler.reconcile(KEY)

        stored = await store.get(Artefact, KEY)
        assert first.requeue_after == 3.0
        assert pending.status.phase == Phase.READY
        assert pending.status.state == ArtefactState.PENDING
        assert not second.requeue
        assert stored.status.state == ArtefactState.READY
        assert len(partner.calls_to("upload_artefact")) == 1
        assert partner.calls_to("get_artefact")[0].params["id"] == "artefact-001"

    @pytest.mark.asyncio
    async def test_poll_not_found_retries_at_poll_interval(
        self, store: InMemoryStore, partner: FakePartner, reconciler: ArtefactReconciler
    ) -> None:
        """A processing artefact not yet readable keeps polling."""
        partner.artefact_upload_status = 202
        partner.respond("get_artefact", httpx.Response(404, json={"detail": "not yet"}))
        await store.create(make_artefact())
        await reconciler.reconcile(KEY)

        result = await reconciler.reconcile(KEY)

        stored = await store.get(Artefact, KEY)
        assert result.requeue_after == 3.0
        assert stored.status.state == ArtefactState.PENDING

    @pytest.mark.asyncio
    async def test_unclassified_marks_error(
        self, store: InMemoryStore, partner: FakePartner, reconciler: ArtefactReconciler
    ) -> None:
        """An unexpected status puts phase and state into Error."""
        partner.respond("upload_artefact", httpx.Response(500, json={"detail": "disk full"}))
        await store.create(make_artefact())

        result = await reconciler.reconcile(KEY)

        stored = await store.get(Artefact, KEY)
        assert result.requeue_after == 5.0
        assert stored.status.phase == Phase.ERROR
        assert stored.status.state == ArtefactState.ERROR

    @pytest.mark.asyncio
    async def test_failed_poll_recovers(
        self, store: InMemoryStore, partner: FakePartner, reconciler: ArtefactReconciler
    ) -> None:
        """After an unexpected poll answer the artefact still reaches Ready."""
        partner.artefact_upload_status = 202
        await store.create(make_artefact())
        await reconciler.reconcile(KEY)
        partner.respond("get_artefact", httpx.Response(500, json={"detail": "boom"}))
        await reconciler.reconcile(KEY)
        failed = await store.get(Artefact, KEY)
        partner.overrides.clear()

        results = [await reconciler.reconcile(KEY) for _ in range(2)]

        stored = await store.get(Artefact, KEY)
        assert failed.status.phase == Phase.ERROR
        assert [c.operation for c in partner.calls] == [
            "upload_artefact",
            "get_artefact",
            "upload_artefact",
            "get_artefact",
        ]
        assert results[0].requeue_after == 3.0
        assert not results[1].requeue
        assert stored.status.phase == Phase.READY
        assert stored.status.state == ArtefactState.READY

    @pytest.mark.asyncio
    async def test_errored_pending_artefact_keeps_polling(
        self, store: InMemoryStore, partner: FakePartner, reconciler: ArtefactReconciler
    ) -> None:
        """A rejected poll leaves state Pending, so the next pass polls again."""
        partner.artefact_upload_status = 202
        await store.create(make_artefact())
        await reconciler.reconcile(KEY)
        partner.respond("get_artefact", httpx.Response(500, json={"detail": "artefact not found"}))
        await reconciler.reconcile(KEY)
        partner.overrides.clear()

        result = await reconciler.reconcile(KEY)

        stored = await store.get(Artefact, KEY)
        assert not result.requeue
        assert len(partner.calls_to("upload_artefact")) == 1
        assert len(partner.calls_to("get_artefact")) == 2
        assert stored.status.phase == Phase.READY
        assert stored.status.state == ArtefactState.READY

    @pytest.mark.asyncio
    async def test_existing_remote_artefact_is_adopted(
        self, store: InMemoryStore, partner: FakePartner, reconciler: ArtefactReconciler
    ) -> None:
        """A 409 on the first upload is polled like an accepted upload."""
        partner.artefacts.add("artefact-001")
        await store.create(make_artefact())

        first = await reconciler.reconcile(KEY)
        second = await reconciler.reconcile(KEY)

        stored = await store.get(Artefact, KEY)
        assert first.requeue_after == 3.0
        assert not second.requeue
        assert stored.status.phase == Phase.READY
        assert stored.status.state == ArtefactState.READY

    @pytest.mark.asyncio
    async def test_delete_removes_remote_artefact(
        self, store: InMemoryStore, partner: FakePartner, reconciler: ArtefactReconciler
    ) -> None:
        """Deletion removes the artefact on the partner first."""
        await store.create(make_artefact())
        await reconciler.reconcile(KEY)

        await store.delete(Artefact, KEY)
        await reconciler.reconcile(KEY)

        assert partner.artefacts == set()
        with pytest.raises(NotFoundError):
            await store.get(Artefact, KEY)


class TestHostArtefact:
    """Host side artefacts."""

    @pytest.mark.asyncio
    async def test_first_observation(
        self, store: InMemoryStore, partner: FakePartner, reconciler: ArtefactReconciler
    ) -> None:
        """A host artefact turns Ready with state Pending."""
        await store.create(host_federation())
        await store.create(make_artefact(relation="host"))

        await reconciler.reconcile(KEY)

        stored = await store.get(Artefact, KEY)
        assert stored.status.phase == Phase.READY
        assert stored.status.state == ArtefactState.PENDING
        assert partner.calls == []
