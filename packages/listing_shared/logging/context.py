"""Context propagation helpers for structured logging.

The context lives in a ``contextvars.ContextVar`` so fields bound inside one
asyncio task (for example the cache key of the request being served) do not
leak into concurrently running tasks.
"""

from __future__ import annotations

from contextvars import ContextVar, Token
from types import TracebackType
from typing import Mapping

_LOG_CONTEXT: ContextVar[dict[str, str]] = ContextVar(
    "listing_log_context", default={}
)

def get_context() -> dict[str, str]:
    """Return a shallow copy of current logging context."""
    return dict(_LOG_CONTEXT.get())

def bind_context(**values: object) -> None:
    """Bind stringified values into the current logging context; skip ``None``."""
    if not values:
        return
    current = _LOG_CONTEXT.get().copy()
    for key, value in values.items():
        if value is None:
            continue
        current[str(key)] = str(value)
    _LOG_CONTEXT.set(current)

def clear_context(*keys: str) -> None:
    """Clear selected keys or the entire logging context."""
    if not keys:
        _LOG_CONTEXT.set({})
        return
    current = _LOG_CONTEXT.get().copy()
    for key in keys:
        current.pop(key, None)
    _LOG_CONTEXT.set(current)


class log_context:
    """Bind logging context for a block and restore the previous context on exit."""

    def __init__(self, values: Mapping[str, object]) -> None:
        self._values = dict(values)
        self._token: Token[dict[str, str]] | None = None

    def __enter__(self) -> None:
        self._token = _LOG_CONTEXT.set(_LOG_CONTEXT.get().copy())
        bind_context(**self._values)

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if self._token is not None:
            _LOG_CONTEXT.reset(self._token)
            self._token = None
