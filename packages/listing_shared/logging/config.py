"""Stdout logging for the listing content cache runtime.

Each record carries three layers of structure: process fields seeded at
startup (service, environment, primary origin), fields bound for the current
request through ``log_context`` (the cache key), and per-record origin fields
passed as ``extra=`` by the fetch engine. JSON output keeps them as keys; plain
output appends them as sorted ``key=value`` pairs.
"""

from __future__ import annotations

import json
import logging
import sys
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any

from . import fields
from .context import bind_context, get_context

# Loggers that report every upstream request at INFO.
_CHATTY_LOGGERS = ("httpx", "httpcore")


def structured_fields(record: logging.LogRecord) -> dict[str, str]:
    """Merge bound context with the per-record origin fields of ``record``."""
    merged = dict(getattr(record, "context", None) or {})
    for name in fields.RECORD_FIELDS:
        value = getattr(record, name, None)
        if value is not None:
            merged[name] = str(value)
    return merged


class ContextFilter(logging.Filter):
    """Snapshot the current logging context onto each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        setattr(record, "context", get_context())
        return True


class JsonFormatter(logging.Formatter):
    """One JSON object per line; structured fields become top-level keys."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            fields.TIMESTAMP: datetime.now(UTC).isoformat(),
            fields.LEVEL: record.levelname,
            fields.LOGGER: record.name,
            fields.MESSAGE: record.getMessage(),
            **structured_fields(record),
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str, separators=(",", ":"))


class PlainFormatter(logging.Formatter):
    """Terminal-friendly lines for local runs and the CLI."""

    def __init__(self) -> None:
        super().__init__(
            fmt="%(asctime)s %(levelname)s %(name)s %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S%z",
        )

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        structured = structured_fields(record)
        if not structured:
            return message
        suffix = " ".join(f"{key}={value}" for key, value in sorted(structured.items()))
        return f"{message} {suffix}"


def configure_logging(
    *,
    level: str = "INFO",
    json_output: bool = True,
    seed: Mapping[str, object] | None = None,
) -> None:
    """Install one stdout handler on the root logger and seed process fields.

    Reconfiguring replaces the previous handler. Unless ``level`` is DEBUG the
    httpx request loggers are held at WARNING.
    """
    normalized = level.upper()
    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(normalized)

    handler = logging.StreamHandler(stream=sys.stdout)
    handler.setLevel(normalized)
    handler.addFilter(ContextFilter())
    handler.setFormatter(JsonFormatter() if json_output else PlainFormatter())
    root.addHandler(handler)

    chatty_level = logging.DEBUG if normalized == "DEBUG" else logging.WARNING
    for name in _CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(chatty_level)

    bind_context(**{key: value for key, value in (seed or {}).items() if value})


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a logger from Python's standard logging hierarchy."""
    return logging.getLogger(name)
