"""Federation with partner operator platforms over the OPG EWBI API.

Provides:
- PartnerClient: httpx client for one partner
- PartnerClientRegistry: process-wide client cache keyed by federation
- FederationDirectory: parent Federation lookup for managed resources
- classify: response classification shared by every reconciler
- multipart: form-data codec for file and artefact uploads
"""

from ewbi.federation.clients import PartnerClientRegistry
from ewbi.federation.directory import (
    FederationDirectory,
    federation_context_id_index,
    register_indexes,
)
from ewbi.federation.outcome import (
    NOT_FOUND_SENTINELS,
    TRANSIENT_STATUS_CODES,
    Outcome,
    classify,
    is_deletion_confirmed,
)
from ewbi.federation.partner import PartnerClient, PartnerResponse

__all__ = [
    "NOT_FOUND_SENTINELS",
    "TRANSIENT_STATUS_CODES",
    "FederationDirectory",
    "Outcome",
    "PartnerClient",
    "PartnerClientRegistry",
    "PartnerResponse",
    "classify",
    "federation_context_id_index",
    "is_deletion_confirmed",
    "register_indexes",
]
