"""Application reconciler: onboards guest applications on the partner."""

from __future__ import annotations

from ewbi.controllers.base import ResourceReconciler, Result
from ewbi.core.model import Application, ApplicationState, Federation, Phase
from ewbi.federation.models import (
    AppComponentSpec,
    AppMetaData,
    AppQoSProfile,
    OnboardApplicationRequest,
)
from ewbi.federation.partner import PartnerClient, PartnerResponse


def build_onboard_request(obj: Application) -> OnboardApplicationRequest:
    spec = obj.spec
    qos = spec.qos_profile
    return OnboardApplicationRequest(
        app_id=obj.external_id,
        app_provider_id=spec.app_provider_id,
        app_meta_data=AppMetaData(
            app_name=spec.app_meta_data.name,
            version=spec.app_meta_data.version,
            access_token=spec.app_meta_data.access_token,
            mobility_support=spec.app_meta_data.mobility_support,
        ),
        app_qos_profile=AppQoSProfile(
            latency_constraints=qos.latency_constraints,
            multi_user_clients=qos.multi_user_clients or None,
            no_of_users_per_app_inst=qos.users_per_app_inst,
            app_provisioning=qos.provisioning,
        ),
        app_component_specs=[
            AppComponentSpec(artefact_id=c.artefact_id) for c in spec.component_specs
        ],
        app_status_callback_link=spec.status_link,
    )


class ApplicationReconciler(ResourceReconciler[Application]):
    resource = Application

    async def sync_guest(
        self, obj: Application, federation: Federation, client: PartnerClient
    ) -> Result:
        response = await client.onboard_application(
            federation.context_id, build_onboard_request(obj)
        )

        async def onboarded() -> Result:
            obj.status.phase = Phase.READY
            obj.status.state = ApplicationState.ONBOARDED
            obj.status.error_msg = ""
            await self.write_status(obj)
            return Result()

        return await self.handle_response(
            obj, "OnboardApplication", response, onboarded, exists_ok=True
        )

    async def delete_guest(
        self, obj: Application, federation: Federation, client: PartnerClient
    ) -> PartnerResponse:
        return await client.delete_app(federation.context_id, obj.external_id)

    def mark_error(self, obj: Application, message: str | None = None) -> None:
        obj.status.phase = Phase.ERROR
        if message:
            obj.status.error_msg = message

    def mark_unclassified(self, obj: Application) -> None:
        self.mark_error(obj)
        obj.status.state = ApplicationState.FAILED
