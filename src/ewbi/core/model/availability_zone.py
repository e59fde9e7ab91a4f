"""AvailabilityZone: an edge zone offered by the partner."""

from __future__ import annotations

from typing import ClassVar

from pydantic import Field

from ewbi.core.model import ResourceModel
from ewbi.core.model.meta import Phase, Resource

AVAILABILITY_ZONE_FINALIZER = "availabilityzone.opg.ewbi.finalizer.nby.one"


class AvailabilityZoneSpec(ResourceModel):
    geography_details: str = Field(default="", alias="geographyDetails")
    geolocation: str = ""
    zone_id: str = Field(default="", alias="zoneId")


class AvailabilityZoneStatus(ResourceModel):
    phase: Phase | None = None
    flavours_supported: list[str] = Field(default_factory=list, alias="flavoursSupported")
    reserved_compute_resources: str = Field(default="", alias="reservedComputeResources")
    compute_resource_quota_limits: str = Field(default="", alias="computeResourceQuotaLimits")
    latency: str = ""


class AvailabilityZone(Resource):
    kind: ClassVar[str] = "AvailabilityZone"
    finalizer: ClassVar[str] = AVAILABILITY_ZONE_FINALIZER

    spec: AvailabilityZoneSpec = Field(default_factory=AvailabilityZoneSpec)
    status: AvailabilityZoneStatus = Field(default_factory=AvailabilityZoneStatus)

    @property
    def zone_id(self) -> str:
        """Zone id as known by the partner; falls back to the external id label."""
        return self.spec.zone_id or self.external_id
