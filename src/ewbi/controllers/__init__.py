"""Per-kind reconcilers built on the generic state machine in ``base``."""

from ewbi.controllers.application import ApplicationReconciler
from ewbi.controllers.application_instance import ApplicationInstanceReconciler
from ewbi.controllers.artefact import ArtefactReconciler
from ewbi.controllers.availability_zone import AvailabilityZoneReconciler
from ewbi.controllers.base import ResourceReconciler, Result
from ewbi.controllers.federation import FederationReconciler
from ewbi.controllers.file import FileReconciler

RECONCILERS: tuple[type[ResourceReconciler], ...] = (  # type: ignore[type-arg]
    FederationReconciler,
    AvailabilityZoneReconciler,
    FileReconciler,
    ArtefactReconciler,
    ApplicationReconciler,
    ApplicationInstanceReconciler,
)

__all__ = [
    "RECONCILERS",
    "ApplicationInstanceReconciler",
    "ApplicationReconciler",
    "ArtefactReconciler",
    "AvailabilityZoneReconciler",
    "FederationReconciler",
    "FileReconciler",
    "ResourceReconciler",
    "Result",
]
