"""Concrete Content Cache Service implementation."""

from __future__ import annotations

import asyncio
from collections import deque
from functools import partial
from typing import Any

import httpx

from packages.listing_shared.logging import fields, get_logger, log_context
from services.state.content_cache.config import ContentCacheSettings
from services.state.content_cache.domain import (
    CacheEntry,
    CacheStats,
    CacheStatus,
    ClearResult,
    Freshness,
    OriginProbe,
    ReadResult,
    RefreshFailure,
)
from services.state.content_cache.engine import FetchEngine
from services.state.content_cache.errors import AllOriginsFailedError
from services.state.content_cache.keys import cache_key, normalize_logical_path
from services.state.content_cache.service import ContentCacheService
from services.state.content_cache.store import ALL_TAG, CacheStore, Clock, utc_now

_LOGGER = get_logger(__name__)

_READ_METHOD = "GET"


class DefaultContentCacheService(ContentCacheService):
    """Stale-while-revalidate cache over a failover fetch engine.

    Concurrent misses on the same key are not coalesced; each caller performs
    its own fetch. Background refreshes are limited to one per key and run as
    detached tasks whose failures land in ``refresh_failures()``.
    """

    def __init__(
        self,
        *,
        store: CacheStore,
        engine: FetchEngine,
        refresh_error_history: int = 50,
    ) -> None:
        self._store = store
        self._engine = engine
        self._refreshing: dict[str, asyncio.Task[None]] = {}
        self._refresh_failures: deque[RefreshFailure] = deque(
            maxlen=refresh_error_history
        )

    @classmethod
    def from_settings(
        cls,
        settings: ContentCacheSettings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        clock: Clock = utc_now,
    ) -> DefaultContentCacheService:
        """Build the service with its own store, resolver and HTTP client."""
        return cls(
            store=CacheStore.from_settings(settings, clock=clock),
            engine=FetchEngine.from_settings(settings, transport=transport),
            refresh_error_history=settings.refresh_error_history,
        )

    @property
    def store(self) -> CacheStore:
        return self._store

    @property
    def primary_origin(self) -> str:
        return self._engine.resolver.primary_origin

    async def read(self, logical_path: str, *, no_cache: bool = False) -> ReadResult:
        """Serve fresh hits directly, stale hits plus a refresh, misses live."""
        key = cache_key(_READ_METHOD, logical_path)
        with log_context({fields.CACHE_KEY: key}):
            if not no_cache:
                cached = self._store.get(key)
                if cached is not None:
                    freshness = self._store.classify(cached)
                    if freshness is Freshness.FRESH:
                        return _from_entry(cached, CacheStatus.HIT)
                    if freshness is Freshness.STALE:
                        self._schedule_refresh(key, logical_path)
                        return _from_entry(cached, CacheStatus.STALE)
                    _LOGGER.debug("cache entry expired: key=%s", key)

            try:
                result = await self._engine.fetch_with_failover(logical_path)
            except AllOriginsFailedError:
                if no_cache:
                    raise
                fallback = self._store.get(key)
                if fallback is None:
                    raise
                return self._degraded(fallback)

            entry = self._store.set(
                key,
                result.payload,
                result.source_origin,
                origin_url=result.origin_url,
            )
            return _from_entry(
                entry, CacheStatus.BYPASS if no_cache else CacheStatus.MISS
            )

    async def forward(
        self,
        method: str,
        logical_path: str,
        *,
        json: Any = None,
    ) -> ReadResult:
        """Send a mutating request through failover and invalidate its path."""
        if method.upper() == _READ_METHOD:
            return await self.read(logical_path)

        result = await self._engine.fetch_with_failover(
            logical_path,
            method=method,
            json=json,
            headers={"Content-Type": "application/json"},
        )
        path = normalize_logical_path(logical_path).partition("?")[0]
        removed = self._store.invalidate_prefix(path)
        if removed:
            _LOGGER.info(
                "invalidated cached reads after write: method=%s path=%s removed=%s",
                method.upper(),
                path,
                removed,
            )
        return ReadResult(
            payload=result.payload,
            source_origin=result.source_origin,
            origin_url=result.origin_url,
            cache_status=CacheStatus.BYPASS,
        )

    def clear_cache(self, tag: str | None = None) -> ClearResult:
        """Remove all entries, or only the entries of one category tag."""
        normalized = (tag or ALL_TAG).strip() or ALL_TAG
        removed = self._store.clear(normalized)
        _LOGGER.info("cache cleared: tag=%s removed=%s", normalized, removed)
        return ClearResult(removed_count=removed, tag=normalized)

    def stats(self) -> CacheStats:
        return self._store.stats()

    def refresh_failures(self) -> tuple[RefreshFailure, ...]:
        return tuple(self._refresh_failures)

    @property
    def pending_refreshes(self) -> int:
        return len(self._refreshing)

    async def probe_origins(self, logical_path: str = "/") -> list[OriginProbe]:
        return await self._engine.probe_origins(logical_path)

    async def drain_refreshes(self) -> None:
        """Wait for in-flight refreshes, including ones scheduled while waiting."""
        while self._refreshing:
            await asyncio.gather(*self._refreshing.values(), return_exceptions=True)
            # Done callbacks run on the next loop iteration.
            await asyncio.sleep(0)

    async def aclose(self) -> None:
        """Cancel outstanding refreshes and close the engine's HTTP client."""
        tasks = list(self._refreshing.values())
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._refreshing.clear()
        await self._engine.aclose()

    def _schedule_refresh(self, key: str, logical_path: str) -> None:
        """Start a detached refresh unless one is already running for ``key``."""
        if key in self._refreshing:
            return
        task = asyncio.create_task(
            self._refresh(key, logical_path), name=f"content-cache-refresh:{key}"
        )
        self._refreshing[key] = task
        task.add_done_callback(partial(self._on_refresh_done, key))

    async def _refresh(self, key: str, logical_path: str) -> None:
        result = await self._engine.fetch_with_failover(logical_path)
        self._store.set(
            key,
            result.payload,
            result.source_origin,
            origin_url=result.origin_url,
        )
        _LOGGER.debug(
            "background refresh stored: key=%s origin=%s", key, result.origin_url
        )

    def _on_refresh_done(self, key: str, task: asyncio.Task[None]) -> None:
        """Record refresh failures; never re-raise into the event loop."""
        if self._refreshing.get(key) is task:
            del self._refreshing[key]
        if task.cancelled():
            return
        exc = task.exception()
        if exc is None:
            return
        _LOGGER.warning(
            "background refresh failed: key=%s exception_type=%s",
            key,
            type(exc).__name__,
            exc_info=exc,
        )
        self._refresh_failures.append(
            RefreshFailure(
                key=key,
                error_type=type(exc).__name__,
                message=str(exc),
                occurred_at=self._store.now(),
            )
        )

    def _degraded(self, entry: CacheEntry) -> ReadResult:
        """Serve a cached entry after every origin failed."""
        if self._store.classify(entry) is not Freshness.EXPIRED:
            # Another request stored a usable entry while this one was failing.
            return _from_entry(entry, CacheStatus.HIT)
        _LOGGER.warning(
            "serving expired entry after all origins failed: key=%s fetched_at=%s",
            entry.key,
            entry.fetched_at.isoformat(),
            extra={fields.CACHE_STATUS: CacheStatus.DEGRADED.value},
        )
        return _from_entry(entry, CacheStatus.DEGRADED, degraded=True)


def _from_entry(
    entry: CacheEntry, status: CacheStatus, *, degraded: bool = False
) -> ReadResult:
    return ReadResult(
        payload=entry.payload,
        source_origin=entry.source_origin,
        origin_url=entry.origin_url,
        cache_status=status,
        degraded=degraded,
        fetched_at=entry.fetched_at,
    )
