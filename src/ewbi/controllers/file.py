"""File reconciler: uploads guest files to the partner repository."""

from __future__ import annotations

from ewbi.controllers.base import ResourceReconciler, Result
from ewbi.core.model import Federation, File, FileState, Phase
from ewbi.federation.models import ObjectRepoLocation, OSType, UploadFileForm
from ewbi.federation.partner import PartnerClient, PartnerResponse


def build_upload_form(obj: File) -> UploadFileForm:
    spec = obj.spec
    repo = spec.repo_location
    location = None
    if repo.url or repo.username or repo.password or repo.token:
        location = ObjectRepoLocation(
            repo_url=repo.url or None,
            user_name=repo.username or None,
            password=repo.password or None,
            token=repo.token or None,
        )
    os = spec.image.os
    return UploadFileForm(
        app_provider_id=spec.app_provider_id,
        file_id=obj.external_id,
        file_name=spec.file_name,
        file_version_info=spec.file_version,
        file_type=spec.file_type,
        img_ins_set_arch=spec.image.instruction_set_architecture,
        img_os_type=OSType(
            architecture=os.architecture,
            distribution=os.distribution,
            version=os.version,
            license=os.license,
        ),
        repo_type=repo.type or None,
        file_repo_location=location,
    )


class FileReconciler(ResourceReconciler[File]):
    resource = File

    async def sync_guest(self, obj: File, federation: Federation, client: PartnerClient) -> Result:
        response = await client.upload_file(federation.context_id, build_upload_form(obj))

        async def created() -> Result:
            obj.status.phase = Phase.READY
            # 202 means the partner is still fetching; 200 and 409 mean it has the file
            accepted = response.status_code == 202
            obj.status.state = FileState.PENDING if accepted else FileState.READY
            await self.write_status(obj)
            return Result()

        return await self.handle_response(
            obj, "UploadFile", response, created, exists_ok=True
        )

    async def delete_guest(
        self, obj: File, federation: Federation, client: PartnerClient
    ) -> PartnerResponse:
        return await client.remove_file(federation.context_id, obj.external_id)

    def mark_unclassified(self, obj: File) -> None:
        obj.status.phase = Phase.ERROR
        obj.status.state = FileState.ERROR

    def observe_host(self, obj: File) -> bool:
        if obj.status.phase == Phase.READY:
            return False
        obj.status.phase = Phase.READY
        if obj.status.state is None:
            obj.status.state = FileState.PENDING
        return True
