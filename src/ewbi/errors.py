"""Error taxonomy for the ewbi reconcilers.

Reconcile passes raise these to the scheduler, which retries with backoff:
- FederationResolutionError: the parent federation is not uniquely resolvable
- PartnerTransportError: the partner could not be reached or answered garbage
"""

from __future__ import annotations


class EwbiError(Exception):
    """Base class for all ewbi errors."""


class FederationResolutionError(EwbiError):
    """A managed resource does not resolve to exactly one Federation."""

    def __init__(self, context_id: str, relation: str, actual: int, expected: int = 1) -> None:
        self.context_id = context_id
        self.relation = relation
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"unexpected number of {relation} federations for context id "
            f"'{context_id}': expected {expected}, got {actual}"
        )


class PartnerTransportError(EwbiError):
    """The request never produced a usable partner response."""

    def __init__(self, operation: str, reason: str) -> None:
        self.operation = operation
        self.reason = reason
        super().__init__(f"{operation} failed: {reason}")
