"""Domain contracts for Content Cache Service payloads."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, JsonValue


class SourceOrigin(str, Enum):
    """Which kind of candidate satisfied a request."""

    PRIMARY = "primary"
    FALLBACK = "fallback"


class Freshness(str, Enum):
    """Age classification of a cache entry at read time."""

    FRESH = "fresh"
    STALE = "stale"
    EXPIRED = "expired"


class CacheStatus(str, Enum):
    """How a read was satisfied."""

    HIT = "hit"
    STALE = "stale"
    MISS = "miss"
    BYPASS = "bypass"
    DEGRADED = "degraded"


class CacheEntry(BaseModel):
    """One cached upstream response. Replaced whole, never mutated."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    key: str
    payload: JsonValue
    fetched_at: datetime
    source_origin: SourceOrigin
    origin_url: str = ""


class FetchResult(BaseModel):
    """Outcome of one successful failover walk."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    payload: JsonValue
    source_origin: SourceOrigin
    origin_url: str


class ReadResult(BaseModel):
    """Payload handed back to route handlers."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    payload: JsonValue
    source_origin: SourceOrigin
    origin_url: str
    cache_status: CacheStatus
    degraded: bool = False
    fetched_at: datetime | None = None


class CacheStats(BaseModel):
    """Diagnostic snapshot of the cache store."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    size: int
    keys: list[str]
    fresh: int = 0
    stale: int = 0
    expired: int = 0


class ClearResult(BaseModel):
    """Result of an administrative clear."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    removed_count: int
    tag: str


class RefreshFailure(BaseModel):
    """One background refresh failure recorded for observability."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    key: str
    error_type: str
    message: str
    occurred_at: datetime


class OriginProbe(BaseModel):
    """Reachability of one origin for a diagnostic path."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    origin_url: str
    source_origin: SourceOrigin
    ok: bool
    detail: str
