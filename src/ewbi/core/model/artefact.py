"""Artefact: a deployable descriptor referencing uploaded images.

Artefact creation on the partner is asynchronous: the upload answers 202
and the artefact becomes readable once the partner processed it.
"""

from __future__ import annotations

from enum import Enum
from typing import ClassVar

from pydantic import Field

from ewbi.core.model import ResourceModel
from ewbi.core.model.meta import Phase, Resource

ARTEFACT_FINALIZER = "artefact.opg.ewbi.finalizer.nby.one"


class ArtefactState(str, Enum):
    PENDING = "Pending"
    READY = "Ready"
    ERROR = "Error"
    UNKNOWN = "Unknown"


class CommandLine(ResourceModel):
    command: list[str] = Field(default_factory=list)
    args: list[str] = Field(default_factory=list)


class ComputeResourceProfile(ResourceModel):
    cpu_arch_type: str = Field(default="", alias="cpuArchType")
    cpu_exclusivity: bool = Field(default=False, alias="cpuExclusivity")
    memory: int = 0
    num_cpu: str = Field(default="", alias="numCPU")


class ExposedInterface(ResourceModel):
    port: int = 0
    protocol: str = ""
    interface_id: str = Field(default="", alias="interfaceId")
    visibility_type: str = Field(default="", alias="visibilityType")


class ComponentSpec(ResourceModel):
    """One workload component of an artefact."""

    name: str = ""
    command_line_params: CommandLine = Field(default_factory=CommandLine, alias="commandLineParams")
    images: list[str] = Field(default_factory=list)
    num_of_instances: int = Field(default=0, alias="numOfInstances")
    restart_policy: str = Field(default="", alias="restartPolicy")
    compute_resource_profile: ComputeResourceProfile = Field(
        default_factory=ComputeResourceProfile, alias="computeResourceProfile"
    )
    exposed_interfaces: list[ExposedInterface] = Field(
        default_factory=list, alias="exposedInterfaces"
    )


class ArtefactSpec(ResourceModel):
    app_provider_id: str = Field(default="", alias="appProviderId")
    artefact_name: str = Field(default="", alias="artefactName")
    artefact_version: str = Field(default="", alias="artefactVersion")
    descriptor_type: str = Field(default="", alias="descriptorType")
    virt_type: str = Field(default="", alias="virtType")
    component_spec: list[ComponentSpec] = Field(default_factory=list, alias="componentSpec")


class ArtefactStatus(ResourceModel):
    phase: Phase | None = None
    state: ArtefactState | None = None


class Artefact(Resource):
    kind: ClassVar[str] = "Artefact"
    finalizer: ClassVar[str] = ARTEFACT_FINALIZER

    spec: ArtefactSpec = Field(default_factory=ArtefactSpec)
    status: ArtefactStatus = Field(default_factory=ArtefactStatus)
