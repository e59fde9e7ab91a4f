"""HTTP client for one partner operator platform.

Wraps an httpx.AsyncClient bound to the partner's base URL. Every request
carries the caller identity header. Responses are returned as-is: callers
classify the status code themselves (see ``ewbi.federation.outcome``).
Only failures that never produced a response raise.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, TypeVar
from urllib.parse import quote

import httpx
import orjson
from pydantic import BaseModel, ValidationError

from ewbi.errors import PartnerTransportError
from ewbi.federation import multipart
from ewbi.federation.models import (
    FederationRequestData,
    InstallAppRequest,
    OnboardApplicationRequest,
    ProblemDetails,
    UploadArtefactForm,
    UploadFileForm,
    WireModel,
    ZoneRegistrationRequestData,
)

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

JSON_CONTENT_TYPE = "application/json"


def _segment(value: str) -> str:
    return quote(value, safe="")


@dataclass(frozen=True)
class PartnerResponse:
    """Status code and raw body of a partner response."""

    status_code: int
    content: bytes = b""

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300

    def json(self) -> Any:
        if not self.content:
            return None
        return orjson.loads(self.content)

    def parse(self, model: type[M]) -> M:
        """Validate the body against a wire model.

        Raises:
            PartnerTransportError: If the body does not match the model
        """
        try:
            return model.model_validate(self.json() or {})
        except (orjson.JSONDecodeError, ValidationError) as e:
            raise PartnerTransportError(
                f"decode {model.__name__}", f"unexpected response body: {e}"
            ) from e

    def problem(self) -> ProblemDetails | None:
        """Problem document of an error response, if the body carries one."""
        try:
            data = self.json()
        except orjson.JSONDecodeError:
            return None
        if not isinstance(data, dict):
            return None
        try:
            return ProblemDetails.model_validate(data)
        except ValidationError:
            return None

    @property
    def detail(self) -> str | None:
        problem = self.problem()
        return problem.detail if problem else None


class PartnerClient:
    """Client for the OPG EWBI federation API of one partner.

    Example:
        client = PartnerClient("https://partner.example/operatorplatform/federation/v1",
                               caller_id="guest-op")
        response = await client.create_federation(request)
        if response.is_success:
            data = response.parse(FederationResponseData)
    """

    def __init__(
        self,
        base_url: str,
        caller_id: str,
        *,
        client_id_header: str = "X-Client-ID",
        verify: bool = True,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url
        self.caller_id = caller_id
        self.client_id_header = client_id_header
        self._client = httpx.AsyncClient(
            base_url=base_url,
            verify=verify,
            timeout=timeout,
            transport=transport,
            event_hooks={"request": [self._add_caller_id]},
        )

    async def _add_caller_id(self, request: httpx.Request) -> None:
        request.headers[self.client_id_header] = self.caller_id

    async def aclose(self) -> None:
        await self._client.aclose()

    @property
    def is_closed(self) -> bool:
        return self._client.is_closed

    async def _request(
        self,
        operation: str,
        method: str,
        path: str,
        *,
        body: WireModel | None = None,
        content: bytes | None = None,
        content_type: str | None = None,
    ) -> PartnerResponse:
        headers: dict[str, str] = {}
        if body is not None:
            content = orjson.dumps(body.to_wire())
            content_type = JSON_CONTENT_TYPE
        if content_type:
            headers["Content-Type"] = content_type

        try:
            response = await self._client.request(method, path, content=content, headers=headers)
        except httpx.RequestError as e:
            logger.warning(f"{operation} against {self.base_url} failed: {e}")
            raise PartnerTransportError(operation, str(e) or type(e).__name__) from e

        logger.debug(f"{operation}: {method} {path} -> {response.status_code}")
        return PartnerResponse(response.status_code, response.content)

    # -------------------------------------------------------------------------
    # Federation management
    # -------------------------------------------------------------------------

    async def create_federation(self, request: FederationRequestData) -> PartnerResponse:
        return await self._request("CreateFederation", "POST", "/partner", body=request)

    async def delete_federation(self, context_id: str) -> PartnerResponse:
        return await self._request(
            "DeleteFederationDetails", "DELETE", f"/{_segment(context_id)}/partner"
        )

    async def zone_subscribe(
        self, context_id: str, request: ZoneRegistrationRequestData
    ) -> PartnerResponse:
        return await self._request(
            "ZoneSubscribe", "POST", f"/{_segment(context_id)}/zones", body=request
        )

    # -------------------------------------------------------------------------
    # Files and artefacts
    # -------------------------------------------------------------------------

    async def upload_file(self, context_id: str, form: UploadFileForm) -> PartnerResponse:
        content, content_type = multipart.encode_upload_file(form)
        return await self._request(
            "UploadFile",
            "POST",
            f"/{_segment(context_id)}/files",
            content=content,
            content_type=content_type,
        )

    async def remove_file(self, context_id: str, file_id: str) -> PartnerResponse:
        return await self._request(
            "RemoveFile", "DELETE", f"/{_segment(context_id)}/files/{_segment(file_id)}"
        )

    async def upload_artefact(self, context_id: str, form: UploadArtefactForm) -> PartnerResponse:
        content, content_type = multipart.encode_upload_artefact(form)
        return await self._request(
            "UploadArtefact",
            "POST",
            f"/{_segment(context_id)}/artefact",
            content=content,
            content_type=content_type,
        )

    async def get_artefact(self, context_id: str, artefact_id: str) -> PartnerResponse:
        return await self._request(
            "GetArtefact", "GET", f"/{_segment(context_id)}/artefact/{_segment(artefact_id)}"
        )

    async def remove_artefact(self, context_id: str, artefact_id: str) -> PartnerResponse:
        return await self._request(
            "RemoveArtefact",
            "DELETE",
            f"/{_segment(context_id)}/artefact/{_segment(artefact_id)}",
        )

    # -------------------------------------------------------------------------
    # Applications
    # -------------------------------------------------------------------------

    async def onboard_application(
        self, context_id: str, request: OnboardApplicationRequest
    ) -> PartnerResponse:
        return await self._request(
            "OnboardApplication",
            "POST",
            f"/{_segment(context_id)}/application/onboarding",
            body=request,
        )

    async def delete_app(self, context_id: str, app_id: str) -> PartnerResponse:
        return await self._request(
            "DeleteApp",
            "DELETE",
            f"/{_segment(context_id)}/application/onboarding/app/{_segment(app_id)}",
        )

    async def install_app(self, context_id: str, request: InstallAppRequest) -> PartnerResponse:
        return await self._request(
            "InstallApp", "POST", f"/{_segment(context_id)}/application/lcm", body=request
        )

    def _instance_path(self, context_id: str, app_id: str, instance_id: str, zone_id: str) -> str:
        return (
            f"/{_segment(context_id)}/application/lcm/app/{_segment(app_id)}"
            f"/instance/{_segment(instance_id)}/zone/{_segment(zone_id)}"
        )

    async def get_app_instance_details(
        self, context_id: str, app_id: str, instance_id: str, zone_id: str
    ) -> PartnerResponse:
        return await self._request(
            "GetAppInstanceDetails",
            "GET",
            self._instance_path(context_id, app_id, instance_id, zone_id),
        )

    async def remove_app(
        self, context_id: str, app_id: str, instance_id: str, zone_id: str
    ) -> PartnerResponse:
        return await self._request(
            "RemoveApp",
            "DELETE",
            self._instance_path(context_id, app_id, instance_id, zone_id),
        )
