"""Public logging API for listing content services.

Wraps Python's ``logging`` module with stdout defaults and structured context
propagation.
"""

from . import fields
from .config import (
    ContextFilter,
    JsonFormatter,
    PlainFormatter,
    configure_logging,
    get_logger,
    structured_fields,
)
from .context import bind_context, clear_context, get_context, log_context

__all__ = [
    "fields",
    "ContextFilter",
    "JsonFormatter",
    "PlainFormatter",
    "bind_context",
    "clear_context",
    "configure_logging",
    "get_context",
    "get_logger",
    "log_context",
    "structured_fields",
]
