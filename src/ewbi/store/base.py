"""Object store interface.

The reconcilers only need a small slice of a declarative object store:
get/list with label and field selectors, spec and status writes with
optimistic concurrency, deletion that honours finalizers, and change
notification so the scheduler can enqueue affected keys.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping
from typing import TypeVar

from ewbi.core.model import ObjectKey, Resource
from ewbi.errors import EwbiError

R = TypeVar("R", bound=Resource)

# Maps an object to the values it is indexed under for one field
IndexFunc = Callable[[Resource], list[str]]

# Receives the kind name and key of every object that changed
StoreListener = Callable[[str, ObjectKey], None]


class NotFoundError(EwbiError):
    """The object does not exist in the store."""

    def __init__(self, kind: str, key: ObjectKey) -> None:
        self.kind = kind
        self.key = key
        super().__init__(f"{kind} '{key}' not found")


class ConflictError(EwbiError):
    """A write lost an optimistic concurrency race or the object already exists."""

    def __init__(self, kind: str, key: ObjectKey, reason: str) -> None:
        self.kind = kind
        self.key = key
        self.reason = reason
        super().__init__(f"{kind} '{key}': {reason}")


class ObjectStore(ABC):
    """Abstract object store interface."""

    @abstractmethod
    async def get(self, kind: type[R], key: ObjectKey) -> R:
        """Fetch one object.

        Raises:
            NotFoundError: If no object of that kind exists under the key
        """
        ...

    @abstractmethod
    async def list(
        self,
        kind: type[R],
        namespace: str | None = None,
        labels: Mapping[str, str] | None = None,
        fields: Mapping[str, str] | None = None,
    ) -> list[R]:
        """List objects matching every label and every indexed field value.

        Args:
            kind: Resource class to list
            namespace: Restrict to one namespace; None lists all of them
            labels: Exact-match label selector
            fields: Field selector; each field must have a registered index

        Returns:
            Matching objects ordered by key
        """
        ...

    @abstractmethod
    async def create(self, obj: R) -> R:
        """Store a new object.

        Raises:
            ConflictError: If an object with the same key exists
        """
        ...

    @abstractmethod
    async def update(self, obj: R) -> R:
        """Write metadata and spec; the stored status is kept.

        Removing the last finalizer of an object being deleted removes it.

        Raises:
            NotFoundError: If the object is gone
            ConflictError: If ``obj`` carries a stale resource version
        """
        ...

    @abstractmethod
    async def update_status(self, obj: R) -> R:
        """Write the status subresource; metadata and spec are kept.

        Raises:
            NotFoundError: If the object is gone
            ConflictError: If ``obj`` carries a stale resource version
        """
        ...

    @abstractmethod
    async def delete(self, kind: type[Resource], key: ObjectKey) -> None:
        """Request deletion.

        Objects holding finalizers only get a deletion timestamp and stay
        until their last finalizer is removed.

        Raises:
            NotFoundError: If the object does not exist
        """
        ...

    @abstractmethod
    def register_index(self, kind: type[Resource], field: str, func: IndexFunc) -> None:
        """Register a field index usable in ``list(fields=...)``."""
        ...

    @abstractmethod
    def add_listener(self, listener: StoreListener) -> None:
        """Register a callback invoked after every effective change."""
        ...
