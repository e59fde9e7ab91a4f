"""Federation: the relationship with one partner operator platform.

The guest side creates the federation on the partner and records the
returned federation context id, the sole correlation handle for every
managed resource that belongs to it.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import ClassVar

from pydantic import Field

from ewbi.core.model import ResourceModel
from ewbi.core.model.meta import Phase, Resource

FEDERATION_FINALIZER = "federation.opg.ewbi.finalizer.nby.one"


class FederationState(str, Enum):
    FAILED = "Failed"
    TEMPORARY_FAILURE = "TemporaryFailure"
    AVAILABLE = "Available"
    LOCKED = "Locked"
    NOT_AVAILABLE = "NotAvailable"


class MobileNetworkCodes(ResourceModel):
    mcc: str = ""
    mncs: list[str] = Field(default_factory=list)


class Origin(ResourceModel):
    """Identity of the originating operator platform."""

    country_code: str = Field(default="", alias="countryCode")
    fixed_network_codes: list[str] = Field(default_factory=list, alias="fixedNetworkCodes")
    mobile_network_codes: MobileNetworkCodes = Field(
        default_factory=MobileNetworkCodes, alias="mobileNetworkCodes"
    )


class FederationCredentials(ResourceModel):
    client_id: str = Field(default="", alias="clientId")
    token_url: str = Field(default="", alias="tokenUrl")


class Partner(ResourceModel):
    callback_credentials: FederationCredentials = Field(
        default_factory=FederationCredentials, alias="callbackCredentials"
    )
    status_link: str = Field(default="", alias="statusLink")


class ZoneDetails(ResourceModel):
    """An availability zone as offered by the partner."""

    geography_details: str = Field(default="", alias="geographyDetails")
    geolocation: str = ""
    zone_id: str = Field(default="", alias="zoneId")


class FederationSpec(ResourceModel):
    initial_date: datetime | None = Field(default=None, alias="initialDate")
    origin_op: Origin = Field(default_factory=Origin, alias="originOP")
    partner: Partner = Field(default_factory=Partner)
    offered_availability_zones: list[ZoneDetails] = Field(
        default_factory=list, alias="offeredAvailabilityZones"
    )
    accepted_availability_zones: list[str] = Field(
        default_factory=list,
        alias="acceptedAvailabilityZones",
        description="Zone ids subscribed on the partner",
    )
    guest_partner_credentials: FederationCredentials = Field(
        default_factory=FederationCredentials,
        alias="guestPartnerCredentials",
        description="Partner API base url (tokenUrl) and caller identity (clientId)",
    )


class FederationStatus(ResourceModel):
    federation_context_id: str = Field(default="", alias="federationContextId")
    state: FederationState | None = None
    phase: Phase | None = None
    offered_availability_zones: list[ZoneDetails] = Field(
        default_factory=list, alias="offeredAvailabilityZones"
    )


class Federation(Resource):
    kind: ClassVar[str] = "Federation"
    finalizer: ClassVar[str] = FEDERATION_FINALIZER

    spec: FederationSpec = Field(default_factory=FederationSpec)
    status: FederationStatus = Field(default_factory=FederationStatus)

    @property
    def context_id(self) -> str:
        """Effective context id: the status value, else the context-id label."""
        return self.status.federation_context_id or self.federation_context_id

    @property
    def partner_url(self) -> str:
        return self.spec.guest_partner_credentials.token_url

    @property
    def caller_id(self) -> str:
        return self.spec.guest_partner_credentials.client_id
