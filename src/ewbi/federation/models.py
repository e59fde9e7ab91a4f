"""Wire models of the OPG EWBI federation API.

Only the subset of the partner API the reconcilers exchange is modelled.
Field names are the camelCase names used on the wire; documents are
serialised with ``to_wire()`` which drops unset optional members.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class WireModel(BaseModel):
    """Base model for partner API documents."""

    model_config = {
        "extra": "ignore",
        "populate_by_name": True,
    }

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class ProblemDetails(WireModel):
    """RFC 7807 problem document returned on every error status."""

    type: str | None = None
    title: str | None = None
    status: int | None = None
    detail: str | None = None
    instance: str | None = None


# -----------------------------------------------------------------------------
# Federation management
# -----------------------------------------------------------------------------


class MobileNetworkIds(WireModel):
    mcc: str | None = None
    mncs: list[str] | None = None


class CallbackCredentials(WireModel):
    token_url: str = Field(default="", alias="tokenUrl")
    client_id: str = Field(default="", alias="clientId")


class FederationRequestData(WireModel):
    orig_op_federation_id: str = Field(alias="origOPFederationId")
    orig_op_country_code: str | None = Field(default=None, alias="origOPCountryCode")
    orig_op_mobile_network_codes: MobileNetworkIds | None = Field(
        default=None, alias="origOPMobileNetworkCodes"
    )
    orig_op_fixed_network_codes: list[str] | None = Field(
        default=None, alias="origOPFixedNetworkCodes"
    )
    initial_date: datetime | None = Field(default=None, alias="initialDate")
    partner_status_link: str = Field(default="", alias="partnerStatusLink")
    partner_callback_credentials: CallbackCredentials | None = Field(
        default=None, alias="partnerCallbackCredentials"
    )


class ZoneDetails(WireModel):
    zone_id: str = Field(alias="zoneId")
    geolocation: str = ""
    geography_details: str = Field(default="", alias="geographyDetails")


class FederationResponseData(WireModel):
    federation_context_id: str | None = Field(default=None, alias="federationContextId")
    partner_op_federation_id: str | None = Field(default=None, alias="partnerOPFederationId")
    partner_op_country_code: str | None = Field(default=None, alias="partnerOPCountryCode")
    offered_availability_zones: list[ZoneDetails] | None = Field(
        default=None, alias="offeredAvailabilityZones"
    )


class ZoneRegistrationRequestData(WireModel):
    accepted_availability_zones: list[str] = Field(alias="acceptedAvailabilityZones")
    avail_zone_notif_link: str | None = Field(default=None, alias="availZoneNotifLink")


# -----------------------------------------------------------------------------
# Files and artefacts (multipart forms)
# -----------------------------------------------------------------------------


class OSType(WireModel):
    architecture: str = ""
    distribution: str = ""
    version: str = ""
    license: str = ""

    def is_empty(self) -> bool:
        return not (self.architecture or self.distribution or self.version or self.license)


class ObjectRepoLocation(WireModel):
    repo_url: str | None = Field(default=None, alias="repoURL")
    user_name: str | None = Field(default=None, alias="userName")
    password: str | None = None
    token: str | None = None


class UploadFileForm(WireModel):
    app_provider_id: str = Field(default="", alias="appProviderId")
    file_id: str = Field(default="", alias="fileId")
    file_name: str = Field(default="", alias="fileName")
    file_description: str | None = Field(default=None, alias="fileDescription")
    file_version_info: str = Field(default="", alias="fileVersionInfo")
    file_type: str = Field(default="", alias="fileType")
    checksum: str | None = None
    img_ins_set_arch: str = Field(default="", alias="imgInsSetArch")
    img_os_type: OSType = Field(default_factory=OSType, alias="imgOSType")
    repo_type: str | None = Field(default=None, alias="repoType")
    file_repo_location: ObjectRepoLocation | None = Field(default=None, alias="fileRepoLocation")


class CommandLineParams(WireModel):
    command: list[str] = Field(default_factory=list)
    command_args: list[str] | None = Field(default=None, alias="commandArgs")


class ComputeResourceInfo(WireModel):
    cpu_arch_type: str = Field(default="", alias="cpuArchType")
    num_cpu: str = Field(default="", alias="numCPU")
    memory: int = 0
    cpu_exclusivity: bool | None = Field(default=None, alias="cpuExclusivity")


class InterfaceDetails(WireModel):
    interface_id: str = Field(alias="interfaceId")
    comm_protocol: str = Field(default="", alias="commProtocol")
    comm_port: int = Field(default=0, alias="commPort")
    visibility_type: str = Field(default="", alias="visibilityType")


class ComponentSpec(WireModel):
    component_name: str = Field(default="", alias="componentName")
    images: list[str] = Field(default_factory=list)
    num_of_instances: int = Field(default=0, alias="numOfInstances")
    restart_policy: str = Field(default="", alias="restartPolicy")
    command_line_params: CommandLineParams | None = Field(default=None, alias="commandLineParams")
    exposed_interfaces: list[InterfaceDetails] | None = Field(
        default=None, alias="exposedInterfaces"
    )
    compute_resource_profile: ComputeResourceInfo = Field(
        default_factory=ComputeResourceInfo, alias="computeResourceProfile"
    )


class UploadArtefactForm(WireModel):
    app_provider_id: str = Field(default="", alias="appProviderId")
    artefact_id: str = Field(default="", alias="artefactId")
    artefact_name: str = Field(default="", alias="artefactName")
    artefact_description: str | None = Field(default=None, alias="artefactDescription")
    artefact_version_info: str = Field(default="", alias="artefactVersionInfo")
    artefact_virt_type: str = Field(default="", alias="artefactVirtType")
    artefact_descriptor_type: str = Field(default="", alias="artefactDescriptorType")
    component_spec: list[ComponentSpec] = Field(default_factory=list, alias="componentSpec")


# -----------------------------------------------------------------------------
# Application onboarding and lifecycle
# -----------------------------------------------------------------------------


class AppComponentSpec(WireModel):
    artefact_id: str = Field(alias="artefactId")
    component_name: str | None = Field(default=None, alias="componentName")
    service_name_nb: str | None = Field(default=None, alias="serviceNameNB")
    service_name_ew: str | None = Field(default=None, alias="serviceNameEW")


class AppMetaData(WireModel):
    app_name: str = Field(default="", alias="appName")
    version: str = ""
    access_token: str = Field(default="", alias="accessToken")
    mobility_support: bool | None = Field(default=None, alias="mobilitySupport")


class AppQoSProfile(WireModel):
    latency_constraints: str = Field(default="", alias="latencyConstraints")
    multi_user_clients: str | None = Field(default=None, alias="multiUserClients")
    no_of_users_per_app_inst: int | None = Field(default=None, alias="noOfUsersPerAppInst")
    app_provisioning: bool | None = Field(default=None, alias="appProvisioning")


class OnboardApplicationRequest(WireModel):
    app_id: str = Field(alias="appId")
    app_provider_id: str = Field(default="", alias="appProviderId")
    app_meta_data: AppMetaData = Field(default_factory=AppMetaData, alias="appMetaData")
    app_qos_profile: AppQoSProfile = Field(default_factory=AppQoSProfile, alias="appQoSProfile")
    app_component_specs: list[AppComponentSpec] = Field(
        default_factory=list, alias="appComponentSpecs"
    )
    app_status_callback_link: str = Field(default="", alias="appStatusCallbackLink")


class InstallAppZoneInfo(WireModel):
    zone_id: str = Field(alias="zoneId")
    flavour_id: str = Field(default="", alias="flavourId")
    resource_consumption: str | None = Field(default=None, alias="resourceConsumption")
    res_pool: str | None = Field(default=None, alias="resPool")


class InstallAppRequest(WireModel):
    app_id: str = Field(alias="appId")
    app_version: str = Field(default="", alias="appVersion")
    app_provider_id: str = Field(default="", alias="appProviderId")
    app_instance_id: str = Field(alias="appInstanceId")
    zone_info: InstallAppZoneInfo = Field(alias="zoneInfo")
    app_inst_callback_link: str = Field(default="", alias="appInstCallbackLink")


class InstanceState(str, Enum):
    PENDING = "PENDING"
    READY = "READY"
    FAILED = "FAILED"
    TERMINATING = "TERMINATING"


class ServiceEndpoint(WireModel):
    port: int = 0
    fqdn: str | None = None
    ipv4_addresses: list[str] | None = Field(default=None, alias="ipv4Addresses")
    ipv6_addresses: list[str] | None = Field(default=None, alias="ipv6Addresses")


class AccessPointInfo(WireModel):
    interface_id: str = Field(alias="interfaceId")
    access_points: ServiceEndpoint = Field(alias="accessPoints")


class AppInstanceDetails(WireModel):
    app_instance_state: InstanceState | None = Field(default=None, alias="appInstanceState")
    accesspoint_info: list[AccessPointInfo] = Field(default_factory=list, alias="accesspointInfo")
    reason: str | None = None
