"""Label, field and relation conventions shared by every resource kind.

Relationships between resources are carried as labels on the generic
object metadata:

- federation-context-id: points a managed resource at its parent Federation
- federation-relation: ``guest`` resources are pushed to the partner,
  ``host`` resources mirror what the partner created
- id: the identifier used when talking to the partner, independent of the
  local object name
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from typing import Final

GROUP: Final[str] = "opg.ewbi.nby.one"

FEDERATION_CONTEXT_ID_LABEL: Final[str] = f"{GROUP}/federation-context-id"
FEDERATION_RELATION_LABEL: Final[str] = f"{GROUP}/federation-relation"
EXTERNAL_ID_LABEL: Final[str] = f"{GROUP}/id"

# Field index resolving a Federation by its effective context id
FEDERATION_STATUS_CONTEXT_ID_FIELD: Final[str] = ".status.federationContextId"


class FederationRelation(str, Enum):
    """Which side of the federation this control plane plays."""

    GUEST = "guest"
    HOST = "host"


def is_guest_resource(labels: Mapping[str, str]) -> bool:
    """True only when the relation label is present and equals ``guest``."""
    return labels.get(FEDERATION_RELATION_LABEL) == FederationRelation.GUEST.value


def relation_of(labels: Mapping[str, str]) -> FederationRelation:
    """Relation of a resource; anything but ``guest`` counts as host."""
    if is_guest_resource(labels):
        return FederationRelation.GUEST
    return FederationRelation.HOST
