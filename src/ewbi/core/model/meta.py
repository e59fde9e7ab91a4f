"""Object metadata and the common resource envelope."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import ClassVar

from pydantic import Field

from ewbi.core.labels import (
    EXTERNAL_ID_LABEL,
    FEDERATION_CONTEXT_ID_LABEL,
    FederationRelation,
    is_guest_resource,
    relation_of,
)
from ewbi.core.model import ResourceModel


class Phase(str, Enum):
    """Reconcile phase reported by every kind."""

    PENDING = "Pending"
    READY = "Ready"
    ERROR = "Error"
    UNKNOWN = "Unknown"


@dataclass(frozen=True)
class ObjectKey:
    """Namespace-scoped identity of a stored object."""

    namespace: str
    name: str

    def __str__(self) -> str:
        return f"{self.namespace}/{self.name}"


class ObjectMeta(ResourceModel):
    """Identity, labels and lifecycle markers of a stored object."""

    name: str
    namespace: str = "default"
    labels: dict[str, str] = Field(default_factory=dict)
    annotations: dict[str, str] = Field(default_factory=dict)
    finalizers: list[str] = Field(default_factory=list)
    deletion_timestamp: datetime | None = Field(default=None, alias="deletionTimestamp")
    creation_timestamp: datetime | None = Field(default=None, alias="creationTimestamp")
    resource_version: str = Field(default="", alias="resourceVersion")
    generation: int = 0


class Resource(ResourceModel):
    """Envelope shared by all kinds.

    Subclasses declare ``spec`` and ``status`` and set ``kind`` and
    ``finalizer``.
    """

    kind: ClassVar[str] = ""
    finalizer: ClassVar[str] = ""

    metadata: ObjectMeta

    @property
    def key(self) -> ObjectKey:
        return ObjectKey(self.metadata.namespace, self.metadata.name)

    @property
    def labels(self) -> dict[str, str]:
        return self.metadata.labels

    @property
    def relation(self) -> FederationRelation:
        return relation_of(self.metadata.labels)

    @property
    def is_guest(self) -> bool:
        return is_guest_resource(self.metadata.labels)

    @property
    def external_id(self) -> str:
        """Identifier the partner knows this resource by."""
        return self.metadata.labels.get(EXTERNAL_ID_LABEL, "")

    @property
    def federation_context_id(self) -> str:
        return self.metadata.labels.get(FEDERATION_CONTEXT_ID_LABEL, "")

    @property
    def is_being_deleted(self) -> bool:
        return self.metadata.deletion_timestamp is not None

    def has_finalizer(self, finalizer: str) -> bool:
        return finalizer in self.metadata.finalizers

    def add_finalizer(self, finalizer: str) -> bool:
        """Add a finalizer; returns False when it was already present."""
        if finalizer in self.metadata.finalizers:
            return False
        self.metadata.finalizers.append(finalizer)
        return True

    def remove_finalizer(self, finalizer: str) -> bool:
        """Remove a finalizer; returns False when it was absent."""
        if finalizer not in self.metadata.finalizers:
            return False
        self.metadata.finalizers = [f for f in self.metadata.finalizers if f != finalizer]
        return True

    def deep_copy(self) -> Resource:
        return self.model_copy(deep=True)
