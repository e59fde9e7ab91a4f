"""Observability module for the ewbi operator.

Provides JSON structured logging with reconcile context.
"""

from ewbi.observability.logging import (
    ConsoleFormatter,
    JsonFormatter,
    LogContext,
    configure_logging,
    current_context,
    kind_var,
    name_var,
    namespace_var,
    reconcile_id_var,
)

__all__ = [
    "ConsoleFormatter",
    "JsonFormatter",
    "LogContext",
    "configure_logging",
    "current_context",
    "kind_var",
    "name_var",
    "namespace_var",
    "reconcile_id_var",
]
