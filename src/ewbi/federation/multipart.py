"""multipart/form-data bodies for file and artefact uploads.

The partner API takes structured members (OS descriptor, repository
location, component specs) as JSON text inside a single form field, and
scalar members only when they carry a value.
"""

from __future__ import annotations

import io
from collections.abc import Iterable

import httpx
import orjson
from python_multipart import parse_form

from ewbi.federation.models import UploadArtefactForm, UploadFileForm

FormFields = Iterable[tuple[str, str | None]]


def _json_text(value: object) -> str:
    return orjson.dumps(value).decode()


def encode(fields: FormFields) -> tuple[bytes, str]:
    """Encode form fields as multipart/form-data.

    Empty or missing values are skipped.

    Returns:
        Tuple of (body, content type including the boundary)

    Raises:
        ValueError: If no field carries a value
    """
    parts = [(name, (None, value.encode("utf-8"))) for name, value in fields if value]
    if not parts:
        raise ValueError("multipart form has no non-empty fields")
    # Parts without a filename are plain form fields
    request = httpx.Request("POST", "http://form.invalid/", files=parts)
    return request.read(), request.headers["Content-Type"]


def encode_upload_file(form: UploadFileForm) -> tuple[bytes, str]:
    """Encode the UploadFile form."""
    repo_location = None
    if form.file_repo_location is not None:
        repo_location = _json_text(form.file_repo_location.to_wire())
    os_type = None
    if not form.img_os_type.is_empty():
        os_type = _json_text(form.img_os_type.to_wire())

    return encode(
        [
            ("appProviderId", form.app_provider_id),
            ("checksum", form.checksum),
            ("fileDescription", form.file_description),
            ("fileId", form.file_id),
            ("fileName", form.file_name),
            ("fileRepoLocation", repo_location),
            ("fileType", form.file_type),
            ("fileVersionInfo", form.file_version_info),
            ("imgInsSetArch", form.img_ins_set_arch),
            ("imgOSType", os_type),
            ("repoType", form.repo_type),
        ]
    )


def encode_upload_artefact(form: UploadArtefactForm) -> tuple[bytes, str]:
    """Encode the UploadArtefact form."""
    component_spec = None
    if form.component_spec:
        component_spec = _json_text([c.to_wire() for c in form.component_spec])

    return encode(
        [
            ("appProviderId", form.app_provider_id),
            ("artefactDescription", form.artefact_description),
            ("artefactId", form.artefact_id),
            ("artefactName", form.artefact_name),
            ("artefactVersionInfo", form.artefact_version_info),
            ("artefactVirtType", form.artefact_virt_type),
            ("artefactDescriptorType", form.artefact_descriptor_type),
            ("componentSpec", component_spec),
        ]
    )


def read_form_fields(body: bytes, content_type: str) -> dict[str, str]:
    """Decode every part of a multipart body as text.

    Raises:
        ValueError: If the content type is not multipart
    """
    if not content_type.lower().startswith("multipart/"):
        raise ValueError(f"invalid content type '{content_type}': not a multipart type")

    values: dict[str, str] = {}

    def on_field(field) -> None:  # type: ignore[no-untyped-def]
        name = field.field_name.decode("utf-8")
        values[name] = (field.value or b"").decode("utf-8")

    def on_file(file) -> None:  # type: ignore[no-untyped-def]
        # A part sent with a filename still carries a text value
        file.file_object.seek(0)
        values[file.field_name.decode("utf-8")] = file.file_object.read().decode("utf-8")

    parse_form(
        {"Content-Type": content_type.encode(), "Content-Length": str(len(body)).encode()},
        io.BytesIO(body),
        on_field,
        on_file,
    )
    return values


def read_form_field(body: bytes, content_type: str, name: str) -> str:
    """Decode one field of a multipart body.

    Raises:
        ValueError: If the body is not multipart or the field is absent
    """
    values = read_form_fields(body, content_type)
    if name not in values:
        raise ValueError(f"field '{name}' not found in multipart data")
    return values[name]
