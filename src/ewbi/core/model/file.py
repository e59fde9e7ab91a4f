"""File: an image or binary uploaded to the partner's repository."""

from __future__ import annotations

from enum import Enum
from typing import ClassVar

from pydantic import Field

from ewbi.core.model import ResourceModel
from ewbi.core.model.meta import Phase, Resource

FILE_FINALIZER = "file.opg.ewbi.finalizer.nby.one"


class FileState(str, Enum):
    PENDING = "Pending"
    READY = "Ready"
    ERROR = "Error"
    UNKNOWN = "Unknown"


class Repo(ResourceModel):
    """Where the partner fetches the file from."""

    type: str = ""
    url: str = ""
    password: str = ""
    token: str = ""
    username: str = ""


class OperatingSystem(ResourceModel):
    architecture: str = ""
    distribution: str = ""
    license: str = ""
    version: str = ""


class Image(ResourceModel):
    instruction_set_architecture: str = Field(default="", alias="instructionSetArchitecture")
    os: OperatingSystem = Field(default_factory=OperatingSystem)


class FileSpec(ResourceModel):
    app_provider_id: str = Field(default="", alias="appProviderId")
    file_name: str = Field(default="", alias="fileName")
    file_version: str = Field(default="", alias="fileVersion")
    file_type: str = Field(default="", alias="fileType")
    repo_location: Repo = Field(default_factory=Repo, alias="repoLocation")
    image: Image = Field(default_factory=Image)


class FileStatus(ResourceModel):
    phase: Phase | None = None
    state: FileState | None = None


class File(Resource):
    kind: ClassVar[str] = "File"
    finalizer: ClassVar[str] = FILE_FINALIZER

    spec: FileSpec = Field(default_factory=FileSpec)
    status: FileStatus = Field(default_factory=FileStatus)
