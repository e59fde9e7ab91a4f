"""Object store for ewbi resources.

- ObjectStore: interface the reconcilers and the scheduler depend on
- InMemoryStore: dictionary-backed implementation with finalizer semantics
"""

from ewbi.store.base import (
    ConflictError,
    IndexFunc,
    NotFoundError,
    ObjectStore,
    StoreListener,
)
from ewbi.store.memory import InMemoryStore

__all__ = [
    "ConflictError",
    "IndexFunc",
    "InMemoryStore",
    "NotFoundError",
    "ObjectStore",
    "StoreListener",
]
