"""Cache key and logical path normalization."""

from __future__ import annotations

import re
from urllib.parse import parse_qsl, urlencode, urlsplit

_REPEATED_SLASHES = re.compile(r"/{2,}")


def split_logical_path(logical_path: str) -> tuple[str, str]:
    """Return ``(path, query)`` with a canonical path and sorted query string.

    Scheme and host are discarded so the result is origin independent.
    """
    parts = urlsplit(logical_path.strip())
    path = _REPEATED_SLASHES.sub("/", parts.path or "/")
    if not path.startswith("/"):
        path = f"/{path}"
    if len(path) > 1:
        path = path.rstrip("/")
    query = urlencode(sorted(parse_qsl(parts.query, keep_blank_values=True)))
    return path, query


def normalize_logical_path(logical_path: str) -> str:
    """Return the canonical ``path[?query]`` form of one logical request."""
    path, query = split_logical_path(logical_path)
    return f"{path}?{query}" if query else path


def cache_key(method: str, logical_path: str) -> str:
    """Compose the cache key, e.g. ``GET:/properties?page=1``."""
    return f"{method.upper()}:{normalize_logical_path(logical_path)}"


def key_path(key: str) -> str:
    """Return the path portion of a cache key, without method or query."""
    _, _, logical = key.partition(":")
    path, _, _ = logical.partition("?")
    return path
