"""Federation reconciler.

A guest Federation negotiates availability zones with the partner in two
passes:

1. Create-or-refresh the federation. The answer carries the offered zones
   and the federation context id. When the offered zone ids and the local
   state are unchanged nothing is written; otherwise the offer is persisted
   and the pass ends, so acceptance always sees a durable offer.
2. Accept the offered zone. Only a single offered zone is accepted; zero
   or several offered zones leave acceptance untouched. The accepted zone
   is desired state and goes into the spec.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from ewbi.controllers.base import ResourceReconciler, Result
from ewbi.core.model import Federation, FederationState, Phase, ZoneDetails
from ewbi.federation.models import (
    CallbackCredentials,
    FederationRequestData,
    FederationResponseData,
    MobileNetworkIds,
    ZoneRegistrationRequestData,
)
from ewbi.federation.partner import PartnerClient, PartnerResponse

logger = logging.getLogger(__name__)


def build_federation_request(obj: Federation) -> FederationRequestData:
    origin = obj.spec.origin_op
    partner = obj.spec.partner
    return FederationRequestData(
        orig_op_federation_id=obj.external_id,
        orig_op_country_code=origin.country_code,
        orig_op_mobile_network_codes=MobileNetworkIds(
            mcc=origin.mobile_network_codes.mcc,
            mncs=list(origin.mobile_network_codes.mncs),
        ),
        orig_op_fixed_network_codes=list(origin.fixed_network_codes),
        initial_date=obj.spec.initial_date,
        partner_status_link=partner.status_link,
        partner_callback_credentials=CallbackCredentials(
            client_id=partner.callback_credentials.client_id,
            token_url=partner.callback_credentials.token_url,
        ),
    )


def same_zone_ids(current: Sequence[ZoneDetails], offered: Sequence[ZoneDetails]) -> bool:
    """Compare offers by zone id; order is irrelevant, cardinality is not."""
    if len(current) != len(offered):
        return False
    known = {z.zone_id for z in current}
    return all(z.zone_id in known for z in offered)


class FederationReconciler(ResourceReconciler[Federation]):
    resource = Federation
    resolves_parent = False

    async def sync_guest(
        self, obj: Federation, federation: Federation, client: PartnerClient
    ) -> Result:
        response = await client.create_federation(build_federation_request(obj))
        updated = False

        async def offered() -> Result:
            nonlocal updated
            updated = await self._record_offer(obj, response.parse(FederationResponseData))
            return Result()

        result = await self.handle_response(obj, "CreateFederation", response, offered)
        if not response.is_success or updated:
            return result
        return await self._accept_zone(obj, client)

    async def _record_offer(self, obj: Federation, data: FederationResponseData) -> bool:
        zones = [
            ZoneDetails(
                zone_id=z.zone_id,
                geolocation=z.geolocation,
                geography_details=z.geography_details,
            )
            for z in data.offered_availability_zones or []
        ]
        status = obj.status
        if (
            same_zone_ids(status.offered_availability_zones, zones)
            and status.state == FederationState.AVAILABLE
            and status.phase == Phase.READY
        ):
            logger.debug("Offered availability zones unchanged")
            return False

        status.offered_availability_zones = zones
        status.state = FederationState.AVAILABLE
        status.phase = Phase.READY
        context_id = data.federation_context_id
        if context_id and not status.federation_context_id:
            status.federation_context_id = context_id
        elif context_id and context_id != status.federation_context_id:
            logger.warning(
                f"Partner returned context id {context_id}, "
                f"keeping {status.federation_context_id}"
            )
        await self.write_status(obj, required=True)
        logger.info(
            f"Recorded {len(zones)} offered zones for context {status.federation_context_id}"
        )
        return True

    async def _accept_zone(self, obj: Federation, client: PartnerClient) -> Result:
        offered = obj.status.offered_availability_zones
        if len(offered) != 1:
            logger.info(f"{len(offered)} zones offered, none accepted")
            return Result()

        zone_id = offered[0].zone_id
        if zone_id in obj.spec.accepted_availability_zones:
            return Result()

        response = await client.zone_subscribe(
            obj.context_id, ZoneRegistrationRequestData(accepted_availability_zones=[zone_id])
        )

        async def accepted() -> Result:
            obj.spec.accepted_availability_zones = [zone_id]
            await self.store.update(obj)
            logger.info(f"Accepted availability zone {zone_id}")
            return Result()

        return await self.handle_response(obj, "ZoneSubscribe", response, accepted)

    async def delete_guest(
        self, obj: Federation, federation: Federation, client: PartnerClient
    ) -> PartnerResponse | None:
        context_id = obj.status.federation_context_id
        if not context_id:
            logger.info("Federation was never created on the partner")
            return None
        return await client.delete_federation(context_id)
