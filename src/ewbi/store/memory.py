"""In-memory object store.

Suitable for tests and single-process deployments. Objects are kept as
deep copies so callers never share state with the store, and every
effective write bumps a store-wide resource version.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any

from ewbi.core.model import ObjectKey, Resource
from ewbi.store.base import (
    ConflictError,
    IndexFunc,
    NotFoundError,
    ObjectStore,
    R,
    StoreListener,
)

logger = logging.getLogger(__name__)


def _comparable(obj: Resource) -> dict[str, Any]:
    data = obj.model_dump(mode="json")
    data["metadata"].pop("resource_version", None)
    return data


class InMemoryStore(ObjectStore):
    """Dictionary-backed store keyed by (kind, namespace/name).

    All operations complete without awaiting, so each one is atomic with
    respect to other coroutines on the same event loop.
    """

    def __init__(self) -> None:
        self._objects: dict[tuple[str, ObjectKey], Resource] = {}
        self._indexes: dict[tuple[str, str], IndexFunc] = {}
        self._listeners: list[StoreListener] = []
        self._version = 0

    def register_index(self, kind: type[Resource], field: str, func: IndexFunc) -> None:
        self._indexes[(kind.kind, field)] = func

    def add_listener(self, listener: StoreListener) -> None:
        self._listeners.append(listener)

    async def get(self, kind: type[R], key: ObjectKey) -> R:
        stored = self._objects.get((kind.kind, key))
        if stored is None:
            raise NotFoundError(kind.kind, key)
        return stored.model_copy(deep=True)  # type: ignore[return-value]

    async def list(
        self,
        kind: type[R],
        namespace: str | None = None,
        labels: Mapping[str, str] | None = None,
        fields: Mapping[str, str] | None = None,
    ) -> list[R]:
        index_funcs: dict[str, IndexFunc] = {}
        for field in fields or {}:
            func = self._indexes.get((kind.kind, field))
            if func is None:
                raise ValueError(f"no index registered for {kind.kind} field '{field}'")
            index_funcs[field] = func

        matches: list[R] = []
        for (kind_name, key), stored in sorted(
            self._objects.items(), key=lambda item: (item[0][1].namespace, item[0][1].name)
        ):
            if kind_name != kind.kind:
                continue
            if namespace is not None and key.namespace != namespace:
                continue
            if labels and any(stored.labels.get(k) != v for k, v in labels.items()):
                continue
            if fields and any(
                value not in index_funcs[field](stored) for field, value in fields.items()
            ):
                continue
            matches.append(stored.model_copy(deep=True))  # type: ignore[arg-type]
        return matches

    async def create(self, obj: R) -> R:
        slot = (obj.kind, obj.key)
        if slot in self._objects:
            raise ConflictError(obj.kind, obj.key, "object already exists")

        stored = obj.model_copy(deep=True)
        stored.metadata.creation_timestamp = datetime.now(UTC)
        stored.metadata.deletion_timestamp = None
        stored.metadata.generation = 1
        self._commit(slot, stored)
        obj.metadata.resource_version = stored.metadata.resource_version
        return stored.model_copy(deep=True)

    async def update(self, obj: R) -> R:
        current = self._current(obj)

        candidate = current.model_copy(
            update={
                "metadata": obj.metadata.model_copy(
                    deep=True,
                    update={
                        # Server-owned fields
                        "deletion_timestamp": current.metadata.deletion_timestamp,
                        "creation_timestamp": current.metadata.creation_timestamp,
                        "generation": current.metadata.generation,
                    },
                ),
                "spec": obj.spec.model_copy(deep=True),  # type: ignore[attr-defined]
            }
        )
        if candidate.spec != current.spec:  # type: ignore[attr-defined]
            candidate.metadata.generation += 1
        return self._write(obj, current, candidate)

    async def update_status(self, obj: R) -> R:
        current = self._current(obj)
        candidate = current.model_copy(
            update={"status": obj.status.model_copy(deep=True)}  # type: ignore[attr-defined]
        )
        return self._write(obj, current, candidate)

    async def delete(self, kind: type[Resource], key: ObjectKey) -> None:
        slot = (kind.kind, key)
        stored = self._objects.get(slot)
        if stored is None:
            raise NotFoundError(kind.kind, key)

        if not stored.metadata.finalizers:
            self._remove(slot)
            return
        if stored.is_being_deleted:
            return

        updated = stored.model_copy(deep=True)
        updated.metadata.deletion_timestamp = datetime.now(UTC)
        self._commit(slot, updated)

    def _current(self, obj: Resource) -> Resource:
        stored = self._objects.get((obj.kind, obj.key))
        if stored is None:
            raise NotFoundError(obj.kind, obj.key)
        version = obj.metadata.resource_version
        if version and version != stored.metadata.resource_version:
            raise ConflictError(
                obj.kind,
                obj.key,
                f"resource version {version} is stale, "
                f"current is {stored.metadata.resource_version}",
            )
        return stored

    def _write(self, obj: R, current: Resource, candidate: Resource) -> R:
        slot = (obj.kind, obj.key)

        if _comparable(candidate) == _comparable(current):
            # No-op writes neither bump the version nor notify
            return current.model_copy(deep=True)  # type: ignore[return-value]

        if candidate.is_being_deleted and not candidate.metadata.finalizers:
            self._remove(slot)
            return candidate.model_copy(deep=True)  # type: ignore[return-value]

        self._commit(slot, candidate)
        obj.metadata.resource_version = candidate.metadata.resource_version
        return candidate.model_copy(deep=True)  # type: ignore[return-value]

    def _commit(self, slot: tuple[str, ObjectKey], obj: Resource) -> None:
        self._version += 1
        obj.metadata.resource_version = str(self._version)
        self._objects[slot] = obj
        self._notify(*slot)

    def _remove(self, slot: tuple[str, ObjectKey]) -> None:
        del self._objects[slot]
        logger.debug(f"Removed {slot[0]} {slot[1]}")
        self._notify(*slot)

    def _notify(self, kind: str, key: ObjectKey) -> None:
        for listener in self._listeners:
            try:
                listener(kind, key)
            except Exception:
                logger.exception(f"Store listener failed for {kind} {key}")
