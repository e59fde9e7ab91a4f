"""Resource models for the ewbi control plane.

Every kind follows the declarative-store layout: ``metadata`` carries
identity, labels and finalizers, ``spec`` the desired state and ``status``
the observed state. Field aliases are the camelCase names used in manifests.

All models use Pydantic v2 and can be built from either the Python field
names or their aliases.
"""

from pydantic import BaseModel


class ResourceModel(BaseModel):
    """Base model for all resource documents.

    Note: extra="ignore" keeps older operators working when manifests carry
    fields added by newer schema versions.
    """

    model_config = {
        "extra": "ignore",
        "populate_by_name": True,
        "validate_default": True,
    }


# Import order matters, ResourceModel must be defined first
# ruff: noqa: E402
from ewbi.core.model.application import (
    AppMetaData,
    Application,
    ApplicationSpec,
    ApplicationState,
    ApplicationStatus,
    ComponentSpecRef,
    QoSProfile,
)
from ewbi.core.model.application_instance import (
    AccessPoint,
    ApplicationInstance,
    ApplicationInstanceSpec,
    ApplicationInstanceState,
    ApplicationInstanceStatus,
    ZoneInfo,
)
from ewbi.core.model.artefact import (
    Artefact,
    ArtefactSpec,
    ArtefactState,
    ArtefactStatus,
    CommandLine,
    ComponentSpec,
    ComputeResourceProfile,
    ExposedInterface,
)
from ewbi.core.model.availability_zone import (
    AvailabilityZone,
    AvailabilityZoneSpec,
    AvailabilityZoneStatus,
)
from ewbi.core.model.federation import (
    Federation,
    FederationCredentials,
    FederationSpec,
    FederationState,
    FederationStatus,
    MobileNetworkCodes,
    Origin,
    Partner,
    ZoneDetails,
)
from ewbi.core.model.file import (
    File,
    FileSpec,
    FileState,
    FileStatus,
    Image,
    OperatingSystem,
    Repo,
)
from ewbi.core.model.meta import ObjectKey, ObjectMeta, Phase, Resource

MANAGED_KINDS: tuple[type[Resource], ...] = (
    AvailabilityZone,
    File,
    Artefact,
    Application,
    ApplicationInstance,
)

ALL_KINDS: tuple[type[Resource], ...] = (Federation, *MANAGED_KINDS)

__all__ = [
    "ALL_KINDS",
    "MANAGED_KINDS",
    "AccessPoint",
    "AppMetaData",
    "Application",
    "ApplicationInstance",
    "ApplicationInstanceSpec",
    "ApplicationInstanceState",
    "ApplicationInstanceStatus",
    "ApplicationSpec",
    "ApplicationState",
    "ApplicationStatus",
    "Artefact",
    "ArtefactSpec",
    "ArtefactState",
    "ArtefactStatus",
    "AvailabilityZone",
    "AvailabilityZoneSpec",
    "AvailabilityZoneStatus",
    "CommandLine",
    "ComponentSpec",
    "ComponentSpecRef",
    "ComputeResourceProfile",
    "ExposedInterface",
    "Federation",
    "FederationCredentials",
    "FederationSpec",
    "FederationState",
    "FederationStatus",
    "File",
    "FileSpec",
    "FileState",
    "FileStatus",
    "Image",
    "MobileNetworkCodes",
    "ObjectKey",
    "ObjectMeta",
    "OperatingSystem",
    "Origin",
    "Partner",
    "Phase",
    "QoSProfile",
    "Repo",
    "Resource",
    "ResourceModel",
    "ZoneDetails",
    "ZoneInfo",
]
