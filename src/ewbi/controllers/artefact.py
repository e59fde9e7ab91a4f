"""Artefact reconciler.

Upload answers 202 while the partner processes the artefact. The pass that
uploaded leaves state Pending and asks to be requeued after the poll
interval; later passes poll GetArtefact until it answers 200.
"""

from __future__ import annotations

import logging

from ewbi.controllers.base import ResourceReconciler, Result
from ewbi.core.model import Artefact, ArtefactState, Federation, Phase
from ewbi.core.model.artefact import ComponentSpec as ComponentSpecResource
from ewbi.federation.models import (
    CommandLineParams,
    ComponentSpec,
    ComputeResourceInfo,
    InterfaceDetails,
    UploadArtefactForm,
)
from ewbi.federation.partner import PartnerClient, PartnerResponse

logger = logging.getLogger(__name__)


def _component(spec: ComponentSpecResource) -> ComponentSpec:
    profile = spec.compute_resource_profile
    return ComponentSpec(
        component_name=spec.name,
        images=list(spec.images),
        num_of_instances=spec.num_of_instances,
        restart_policy=spec.restart_policy,
        command_line_params=CommandLineParams(
            command=list(spec.command_line_params.command),
            command_args=list(spec.command_line_params.args),
        ),
        exposed_interfaces=[
            InterfaceDetails(
                interface_id=i.interface_id,
                comm_protocol=i.protocol,
                comm_port=i.port,
                visibility_type=i.visibility_type,
            )
            for i in spec.exposed_interfaces
        ],
        compute_resource_profile=ComputeResourceInfo(
            cpu_arch_type=profile.cpu_arch_type,
            num_cpu=profile.num_cpu,
            memory=profile.memory,
            cpu_exclusivity=profile.cpu_exclusivity,
        ),
    )


def build_upload_form(obj: Artefact) -> UploadArtefactForm:
    spec = obj.spec
    return UploadArtefactForm(
        app_provider_id=spec.app_provider_id,
        artefact_id=obj.external_id,
        artefact_name=spec.artefact_name,
        artefact_version_info=spec.artefact_version,
        artefact_virt_type=spec.virt_type,
        artefact_descriptor_type=spec.descriptor_type,
        component_spec=[_component(c) for c in spec.component_spec],
    )


class ArtefactReconciler(ResourceReconciler[Artefact]):
    resource = Artefact

    async def sync_guest(
        self, obj: Artefact, federation: Federation, client: PartnerClient
    ) -> Result:
        # A persisted Pending state means the upload went through, whatever
        # error the last poll left in the phase
        if obj.status.state == ArtefactState.PENDING:
            return await self._poll(obj, federation, client)

        response = await client.upload_artefact(federation.context_id, build_upload_form(obj))

        async def uploaded() -> Result:
            obj.status.phase = Phase.READY
            if response.status_code == 200:
                obj.status.state = ArtefactState.READY
                await self.write_status(obj)
                return Result()
            obj.status.state = ArtefactState.PENDING
            await self.write_status(obj)
            return Result(requeue_after=self.settings.poll_interval)

        return await self.handle_response(
            obj, "UploadArtefact", response, uploaded, exists_ok=True
        )

    async def _poll(self, obj: Artefact, federation: Federation, client: PartnerClient) -> Result:
        response = await client.get_artefact(federation.context_id, obj.external_id)

        async def observed() -> Result:
            obj.status.phase = Phase.READY
            if response.status_code != 200:
                await self.write_status(obj)
                return Result(requeue_after=self.settings.poll_interval)
            obj.status.state = ArtefactState.READY
            await self.write_status(obj)
            logger.info("Artefact is ready on the partner")
            return Result()

        return await self.handle_response(
            obj,
            "GetArtefact",
            response,
            observed,
            transient_delay=self.settings.poll_interval,
        )

    async def delete_guest(
        self, obj: Artefact, federation: Federation, client: PartnerClient
    ) -> PartnerResponse:
        return await client.remove_artefact(federation.context_id, obj.external_id)

    def mark_unclassified(self, obj: Artefact) -> None:
        obj.status.phase = Phase.ERROR
        obj.status.state = ArtefactState.ERROR

    def observe_host(self, obj: Artefact) -> bool:
        if obj.status.phase == Phase.READY:
            return False
        obj.status.phase = Phase.READY
        if obj.status.state is None:
            obj.status.state = ArtefactState.PENDING
        return True
