"""Structured logging for the reconcilers.

Every record emitted while a reconcile pass runs carries the kind,
namespace and name of the object being reconciled plus a short reconcile
id, so the passes of one object can be followed in aggregated logs.

Usage:
    from ewbi.observability.logging import LogContext, configure_logging

    configure_logging(json_format=True, level="INFO")

    with LogContext(kind="File", namespace="opg", name="file-001"):
        logger.info("starting reconcile")
"""

from __future__ import annotations

import contextvars
import logging
import sys
from datetime import datetime, timezone
from typing import Any

import orjson

reconcile_id_var: contextvars.ContextVar[str] = contextvars.ContextVar("reconcile_id", default="")
kind_var: contextvars.ContextVar[str] = contextvars.ContextVar("kind", default="")
namespace_var: contextvars.ContextVar[str] = contextvars.ContextVar("namespace", default="")
name_var: contextvars.ContextVar[str] = contextvars.ContextVar("name", default="")

_CONTEXT_VARS: dict[str, contextvars.ContextVar[str]] = {
    "reconcile_id": reconcile_id_var,
    "kind": kind_var,
    "namespace": namespace_var,
    "name": name_var,
}

# Attributes every LogRecord has; anything else came in through ``extra=``
_RECORD_ATTRS = frozenset(vars(logging.LogRecord("", logging.INFO, "", 0, "", (), None))) | {
    "message",
    "asctime",
}


def current_context() -> dict[str, str]:
    """Return the non-empty reconcile context values."""
    return {key: var.get() for key, var in _CONTEXT_VARS.items() if var.get()}


def _extra_fields(record: logging.LogRecord) -> dict[str, Any]:
    return {
        key: value
        for key, value in record.__dict__.items()
        if key not in _RECORD_ATTRS and not key.startswith("_")
    }


class JsonFormatter(logging.Formatter):
    """One JSON object per line.

    {"timestamp": "...", "level": "INFO", "logger": "ewbi.controllers.file",
     "message": "UploadFile: partner answered 202", "kind": "File",
     "namespace": "opg", "name": "file-001", "reconcile_id": "3f2a9c1e"}

    Values orjson cannot serialize are rendered with ``str``.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}:{record.funcName}:{record.lineno}",
        }
        entry.update(current_context())
        entry.update(_extra_fields(record))

        if record.exc_info and record.exc_info[0] is not None:
            entry["error"] = {
                "type": record.exc_info[0].__name__,
                "traceback": self.formatException(record.exc_info),
            }

        return orjson.dumps(entry, default=str, option=orjson.OPT_NON_STR_KEYS).decode()


class ConsoleFormatter(logging.Formatter):
    """Single-line format for local runs.

    2026-01-10 12:34:56 | INFO     | ewbi.controllers.file | message | File opg/file-001
    """

    LEVEL_COLORS = {
        logging.DEBUG: "\033[36m",
        logging.INFO: "\033[32m",
        logging.WARNING: "\033[33m",
        logging.ERROR: "\033[31m",
        logging.CRITICAL: "\033[35m",
    }
    RESET = "\033[0m"

    def __init__(self, use_colors: bool = True) -> None:
        super().__init__(datefmt="%Y-%m-%d %H:%M:%S")
        self.use_colors = use_colors and sys.stderr.isatty()

    def format(self, record: logging.LogRecord) -> str:
        level = f"{record.levelname:8}"
        if self.use_colors:
            level = f"{self.LEVEL_COLORS.get(record.levelno, '')}{level}{self.RESET}"

        parts = [self.formatTime(record, self.datefmt), level, record.name, record.getMessage()]
        if kind_var.get():
            parts.append(f"{kind_var.get()} {namespace_var.get()}/{name_var.get()}")

        line = " | ".join(parts)
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


def configure_logging(
    json_format: bool = True,
    level: str = "INFO",
    use_colors: bool = True,
) -> None:
    """Install a single stderr handler on the root logger.

    Args:
        json_format: Emit JSON lines instead of the console format
        level: Root log level name
        use_colors: Colorize levels in the console format
    """
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JsonFormatter() if json_format else ConsoleFormatter(use_colors))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level.upper())

    # Partner calls are logged by the reconcilers themselves
    for noisy in ("httpx", "httpcore"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


class LogContext:
    """Bind reconcile context variables for the duration of a block.

    Unknown keys are ignored.
    """

    def __init__(self, **values: str) -> None:
        self.values = values
        self._tokens: list[tuple[contextvars.ContextVar[str], contextvars.Token[str]]] = []

    def __enter__(self) -> LogContext:
        for key, value in self.values.items():
            var = _CONTEXT_VARS.get(key)
            if var is not None:
                self._tokens.append((var, var.set(value)))
        return self

    def __exit__(self, *exc: object) -> None:
        for var, token in reversed(self._tokens):
            var.reset(token)
        self._tokens.clear()
