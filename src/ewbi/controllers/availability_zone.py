"""AvailabilityZone reconciler.

A guest zone is Ready once its parent federation accepted it. Zone
subscriptions belong to the Federation, so deleting a zone object only
releases the local finalizer and leaves the partner subscription alone.
"""

from __future__ import annotations

from ewbi.controllers.base import ResourceReconciler, Result
from ewbi.core.model import AvailabilityZone, Federation, Phase
from ewbi.federation.partner import PartnerClient


class AvailabilityZoneReconciler(ResourceReconciler[AvailabilityZone]):
    resource = AvailabilityZone

    async def sync_guest(
        self, obj: AvailabilityZone, federation: Federation, client: PartnerClient
    ) -> Result:
        accepted = obj.zone_id in federation.spec.accepted_availability_zones
        phase = Phase.READY if accepted else Phase.PENDING
        if obj.status.phase != phase:
            obj.status.phase = phase
            await self.write_status(obj)
        if accepted:
            return Result()
        return Result(requeue_after=self.settings.poll_interval)

    async def delete_guest(
        self, obj: AvailabilityZone, federation: Federation, client: PartnerClient
    ) -> None:
        return None
