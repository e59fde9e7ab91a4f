"""Application: onboarding of an application built from artefacts."""

from __future__ import annotations

from enum import Enum
from typing import ClassVar

from pydantic import Field

from ewbi.core.model import ResourceModel
from ewbi.core.model.meta import Phase, Resource

APPLICATION_FINALIZER = "app.opg.ewbi.finalizer.nby.one"


class ApplicationState(str, Enum):
    PENDING = "Pending"
    ONBOARDED = "Onboarded"
    DEBOARDING = "Deboarding"
    FAILED = "Failed"
    REMOVED = "Removed"


class ComponentSpecRef(ResourceModel):
    artefact_id: str = Field(alias="artefactId")


class AppMetaData(ResourceModel):
    access_token: str = Field(default="", alias="accessToken")
    name: str = ""
    mobility_support: bool = Field(default=False, alias="mobilitySupport")
    version: str = ""


class QoSProfile(ResourceModel):
    provisioning: bool = False
    latency_constraints: str = Field(default="", alias="latencyConstraints")
    multi_user_clients: str = Field(default="", alias="multiUserClients")
    users_per_app_inst: int = Field(default=0, alias="usersPerAppInst")


class ApplicationSpec(ResourceModel):
    app_provider_id: str = Field(default="", alias="appProviderId")
    component_specs: list[ComponentSpecRef] = Field(default_factory=list, alias="componentSpecs")
    app_meta_data: AppMetaData = Field(default_factory=AppMetaData, alias="appMetaData")
    qos_profile: QoSProfile = Field(default_factory=QoSProfile, alias="qoSProfile")
    status_link: str = Field(default="", alias="statusLink")


class ApplicationStatus(ResourceModel):
    phase: Phase | None = None
    state: ApplicationState | None = None
    error_msg: str = Field(default="", alias="errorMsg")


class Application(Resource):
    kind: ClassVar[str] = "Application"
    finalizer: ClassVar[str] = APPLICATION_FINALIZER

    spec: ApplicationSpec = Field(default_factory=ApplicationSpec)
    status: ApplicationStatus = Field(default_factory=ApplicationStatus)
