"""Tests for resource models and label conventions."""

from fakes import child_meta

from ewbi.core.labels import (
    EXTERNAL_ID_LABEL,
    FEDERATION_RELATION_LABEL,
    FederationRelation,
    is_guest_resource,
    relation_of,
)
from ewbi.core.model import (
    Application,
    ApplicationInstance,
    Federation,
    File,
    ObjectKey,
    ObjectMeta,
)


class TestRelation:
    """Tests for federation relation labels."""

    def test_guest_label(self) -> None:
        """Only the exact value guest marks a guest resource."""
        assert is_guest_resource({FEDERATION_RELATION_LABEL: "guest"})
        assert not is_guest_resource({FEDERATION_RELATION_LABEL: "Guest"})
        assert not is_guest_resource({})

    def test_anything_else_is_host(self) -> None:
        """Missing or unknown relations count as host."""
        assert relation_of({}) is FederationRelation.HOST
        assert relation_of({FEDERATION_RELATION_LABEL: "host"}) is FederationRelation.HOST
        assert relation_of({FEDERATION_RELATION_LABEL: "peer"}) is FederationRelation.HOST
        assert relation_of({FEDERATION_RELATION_LABEL: "guest"}) is FederationRelation.GUEST


class TestResource:
    """Tests for the common resource envelope."""

    def test_identity_from_labels(self) -> None:
        """External id, context id and relation are read from labels."""
        file = File(metadata=child_meta("file-1", "file-001", context_id="ctx-9"))

        assert file.key == ObjectKey("default", "file-1")
        assert str(file.key) == "default/file-1"
        assert file.external_id == "file-001"
        assert file.federation_context_id == "ctx-9"
        assert file.is_guest

    def test_missing_labels(self) -> None:
        """Unlabelled objects have empty identifiers."""
        file = File(metadata=ObjectMeta(name="bare"))

        assert file.external_id == ""
        assert file.federation_context_id == ""
        assert not file.is_guest

    def test_finalizer_helpers(self) -> None:
        """Adding and removing finalizers reports whether anything changed."""
        file = File(metadata=ObjectMeta(name="f"))

        assert file.add_finalizer(File.finalizer)
        assert not file.add_finalizer(File.finalizer)
        assert file.has_finalizer(File.finalizer)
        assert file.remove_finalizer(File.finalizer)
        assert not file.remove_finalizer(File.finalizer)
        assert file.metadata.finalizers == []

    def test_finalizer_names(self) -> None:
        """Each kind carries its own finalizer."""
        assert Federation.finalizer == "federation.opg.ewbi.finalizer.nby.one"
        assert Application.finalizer == "app.opg.ewbi.finalizer.nby.one"
        assert ApplicationInstance.finalizer == "applicationinstance.opg.ewbi.finalizer.nby.one"

    def test_manifest_aliases(self) -> None:
        """Models validate from camelCase manifests."""
        app = Application.model_validate(
            {
                "metadata": {
                    "name": "app-1",
                    "labels": {EXTERNAL_ID_LABEL: "app-001"},
                },
                "spec": {
                    "appProviderId": "provider-1",
                    "componentSpecs": [{"artefactId": "artefact-001"}],
                    "qoSProfile": {"latencyConstraints": "LOW", "usersPerAppInst": 5},
                },
                "status": {"phase": "Ready", "state": "Onboarded"},
                "unknownField": True,
            }
        )

        assert app.spec.component_specs[0].artefact_id == "artefact-001"
        assert app.spec.qos_profile.users_per_app_inst == 5
        assert app.status.state.value == "Onboarded"

    def test_federation_context_id_prefers_status(self) -> None:
        """A federation's context id is its status value, else its label."""
        federation = Federation.model_validate(
            {
                "metadata": {
                    "name": "fed",
                    "labels": {"opg.ewbi.nby.one/federation-context-id": "ctx-label"},
                }
            }
        )
        assert federation.context_id == "ctx-label"

        federation.status.federation_context_id = "ctx-status"
        assert federation.context_id == "ctx-status"

    def test_deep_copy_is_independent(self) -> None:
        """Copies share no mutable state."""
        file = File(metadata=child_meta("file-1", "file-001"))
        copy = file.deep_copy()

        copy.metadata.labels["extra"] = "x"

        assert "extra" not in file.metadata.labels
