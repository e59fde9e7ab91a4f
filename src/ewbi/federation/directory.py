"""Resolution of a managed resource's parent Federation."""

from __future__ import annotations

import logging

from ewbi.core.labels import (
    FEDERATION_RELATION_LABEL,
    FEDERATION_STATUS_CONTEXT_ID_FIELD,
    FederationRelation,
)
from ewbi.core.model import Federation, Resource
from ewbi.errors import FederationResolutionError
from ewbi.store.base import ObjectStore

logger = logging.getLogger(__name__)


def federation_context_id_index(obj: Resource) -> list[str]:
    """Index a Federation by its effective context id.

    The status context id wins; a guest federation that has not been
    created yet is found through its context-id label instead.
    """
    if not isinstance(obj, Federation):
        return []
    context_id = obj.context_id
    return [context_id] if context_id else []


def register_indexes(store: ObjectStore) -> None:
    store.register_index(
        Federation, FEDERATION_STATUS_CONTEXT_ID_FIELD, federation_context_id_index
    )


class FederationDirectory:
    """Looks up the unique Federation a resource belongs to."""

    def __init__(self, store: ObjectStore, namespace: str | None = None) -> None:
        self.store = store
        self.namespace = namespace

    async def resolve(self, context_id: str, relation: FederationRelation) -> Federation:
        """Find the Federation with this context id on the given side.

        Raises:
            FederationResolutionError: Unless exactly one Federation matches
        """
        matches = await self.store.list(
            Federation,
            namespace=self.namespace,
            labels={FEDERATION_RELATION_LABEL: relation.value},
            fields={FEDERATION_STATUS_CONTEXT_ID_FIELD: context_id},
        )
        if len(matches) != 1:
            logger.info(
                f"Expected one {relation.value} federation for context id "
                f"'{context_id}', found {len(matches)}"
            )
            raise FederationResolutionError(context_id, relation.value, actual=len(matches))
        return matches[0]

    async def resolve_for(self, obj: Resource) -> Federation:
        return await self.resolve(obj.federation_context_id, obj.relation)
