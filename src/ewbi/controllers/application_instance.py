"""ApplicationInstance reconciler.

InstallApp is asynchronous on the partner. After a successful install the
instance is Pending and the reconciler polls GetAppInstanceDetails every
poll interval until the partner reports READY (access points recorded) or
FAILED (error surfaced, polling stops).
"""

from __future__ import annotations

import logging

from ewbi.controllers.base import ResourceReconciler, Result
from ewbi.core.model import (
    AccessPoint,
    ApplicationInstance,
    ApplicationInstanceState,
    Federation,
    Phase,
)
from ewbi.federation.models import (
    AppInstanceDetails,
    InstallAppRequest,
    InstallAppZoneInfo,
    InstanceState,
)
from ewbi.federation.partner import PartnerClient, PartnerResponse

logger = logging.getLogger(__name__)


def build_install_request(obj: ApplicationInstance) -> InstallAppRequest:
    spec = obj.spec
    zone = spec.zone_info
    return InstallAppRequest(
        app_id=spec.app_id,
        app_version=spec.app_version,
        app_provider_id=spec.app_provider_id,
        app_instance_id=obj.external_id,
        zone_info=InstallAppZoneInfo(
            zone_id=zone.zone_id,
            flavour_id=zone.flavour_id,
            resource_consumption=zone.resource_consumption or None,
            res_pool=zone.res_pool or None,
        ),
        app_inst_callback_link=spec.call_back_link,
    )


def access_points_of(details: AppInstanceDetails) -> dict[str, list[AccessPoint]]:
    """Group the partner's access point info by interface id."""
    grouped: dict[str, list[AccessPoint]] = {}
    for info in details.accesspoint_info:
        endpoint = info.access_points
        grouped.setdefault(info.interface_id, []).append(
            AccessPoint(
                port=endpoint.port,
                fqdn=endpoint.fqdn or "",
                ipv4_addresses=endpoint.ipv4_addresses or [],
                ipv6_addresses=endpoint.ipv6_addresses or [],
            )
        )
    return grouped


class ApplicationInstanceReconciler(ResourceReconciler[ApplicationInstance]):
    resource = ApplicationInstance

    async def sync_guest(
        self, obj: ApplicationInstance, federation: Federation, client: PartnerClient
    ) -> Result:
        state = obj.status.state
        if state == ApplicationInstanceState.FAILED:
            # Terminal until the instance is recreated
            return Result()
        # Pending and Terminating mean the install went through; keep polling
        # even after a pass that left the phase in Error
        if state in (ApplicationInstanceState.PENDING, ApplicationInstanceState.TERMINATING):
            return await self._poll(obj, federation, client)

        response = await client.install_app(federation.context_id, build_install_request(obj))

        async def installed() -> Result:
            obj.status.phase = Phase.READY
            obj.status.state = ApplicationInstanceState.PENDING
            obj.status.error_msg = ""
            await self.write_status(obj)
            return Result(requeue_after=self.settings.poll_interval)

        return await self.handle_response(
            obj, "InstallApp", response, installed, exists_ok=True
        )

    async def _poll(
        self, obj: ApplicationInstance, federation: Federation, client: PartnerClient
    ) -> Result:
        response = await client.get_app_instance_details(
            federation.context_id,
            obj.spec.app_id,
            obj.external_id,
            obj.spec.zone_info.zone_id,
        )

        async def observed() -> Result:
            details = response.parse(AppInstanceDetails)
            remote_state = details.app_instance_state

            if remote_state == InstanceState.FAILED:
                obj.status.phase = Phase.ERROR
                obj.status.state = ApplicationInstanceState.FAILED
                obj.status.error_msg = (
                    details.reason or "application instance failed on the partner"
                )
                await self.write_status(obj)
                logger.error(f"Application instance failed: {obj.status.error_msg}")
                return Result()

            # A readable instance clears errors left by earlier polls
            obj.status.phase = Phase.READY
            obj.status.error_msg = ""

            if remote_state == InstanceState.READY:
                obj.status.state = ApplicationInstanceState.READY
                obj.status.access_points = access_points_of(details)
                await self.write_status(obj)
                logger.info("Application instance is ready on the partner")
                return Result()

            if remote_state == InstanceState.TERMINATING:
                obj.status.state = ApplicationInstanceState.TERMINATING
            await self.write_status(obj)
            return Result(requeue_after=self.settings.poll_interval)

        return await self.handle_response(
            obj,
            "GetAppInstanceDetails",
            response,
            observed,
            transient_delay=self.settings.poll_interval,
        )

    async def delete_guest(
        self, obj: ApplicationInstance, federation: Federation, client: PartnerClient
    ) -> PartnerResponse:
        return await client.remove_app(
            federation.context_id,
            obj.spec.app_id,
            obj.external_id,
            obj.spec.zone_info.zone_id,
        )

    def mark_error(self, obj: ApplicationInstance, message: str | None = None) -> None:
        obj.status.phase = Phase.ERROR
        if message:
            obj.status.error_msg = message

    def observe_host(self, obj: ApplicationInstance) -> bool:
        if obj.status.phase == Phase.READY:
            return False
        obj.status.phase = Phase.READY
        if obj.status.state is None:
            obj.status.state = ApplicationInstanceState.PENDING
        return True
