"""Classification of partner responses.

Every partner call ends in exactly one of four outcomes, and every
reconciler reacts to them the same way:

- SUCCESS: 2xx, the partner accepted the request
- PERMANENT_REJECTION: retrying the same request will not help
- TRANSIENT_PROBLEM: log and try again later without touching status
- UNCLASSIFIED: anything else, surfaced as an error state
"""

from __future__ import annotations

from enum import Enum

TRANSIENT_STATUS_CODES: frozenset[int] = frozenset({401, 404, 409, 422, 503, 520})

# TODO: drop once the partner answers 400 instead of 500 for missing references
NOT_FOUND_SENTINELS: frozenset[str] = frozenset(
    {"artefact not found", "application not found", "file not found"}
)


class Outcome(str, Enum):
    SUCCESS = "success"
    PERMANENT_REJECTION = "permanent_rejection"
    TRANSIENT_PROBLEM = "transient_problem"
    UNCLASSIFIED = "unclassified"


def classify(status_code: int, detail: str | None = None) -> Outcome:
    """Classify a partner response.

    Args:
        status_code: HTTP status returned by the partner
        detail: ``detail`` of the problem document, if any

    Returns:
        The outcome the reconcilers act on
    """
    if 200 <= status_code < 300:
        return Outcome.SUCCESS
    if status_code == 400:
        return Outcome.PERMANENT_REJECTION
    if status_code == 500 and detail in NOT_FOUND_SENTINELS:
        return Outcome.PERMANENT_REJECTION
    if status_code in TRANSIENT_STATUS_CODES:
        return Outcome.TRANSIENT_PROBLEM
    return Outcome.UNCLASSIFIED


def is_deletion_confirmed(status_code: int) -> bool:
    """A remote delete is done once the partner answers 2xx or 404."""
    return 200 <= status_code < 300 or status_code == 404
