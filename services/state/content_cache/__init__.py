"""Content Cache Service native package exports."""

from services.state.content_cache.component import SERVICE_COMPONENT_ID
from services.state.content_cache.config import (
    ContentCacheSettings,
    resolve_content_cache_settings,
)
from services.state.content_cache.domain import (
    CacheEntry,
    CacheStats,
    CacheStatus,
    ClearResult,
    FetchResult,
    Freshness,
    OriginProbe,
    ReadResult,
    RefreshFailure,
    SourceOrigin,
)
from services.state.content_cache.engine import FetchEngine
from services.state.content_cache.errors import (
    AllOriginsFailedError,
    ContentCacheError,
    OriginFailure,
    OriginRejectedError,
    OriginUnreachableError,
)
from services.state.content_cache.implementation import DefaultContentCacheService
from services.state.content_cache.origins import OriginCandidate, OriginResolver
from services.state.content_cache.service import (
    ContentCacheService,
    build_content_cache_service,
)
from services.state.content_cache.store import CacheStore

__all__ = [
    "SERVICE_COMPONENT_ID",
    "AllOriginsFailedError",
    "CacheEntry",
    "CacheStats",
    "CacheStatus",
    "CacheStore",
    "ClearResult",
    "ContentCacheError",
    "ContentCacheService",
    "ContentCacheSettings",
    "DefaultContentCacheService",
    "FetchEngine",
    "FetchResult",
    "Freshness",
    "OriginCandidate",
    "OriginFailure",
    "OriginProbe",
    "OriginRejectedError",
    "OriginResolver",
    "OriginUnreachableError",
    "ReadResult",
    "RefreshFailure",
    "SourceOrigin",
    "build_content_cache_service",
    "resolve_content_cache_settings",
]
