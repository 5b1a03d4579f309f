"""Authoritative in-process Python API for the Content Cache Service."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

import httpx

from packages.listing_shared.config import ListingSettings
from services.state.content_cache.domain import (
    CacheStats,
    ClearResult,
    OriginProbe,
    ReadResult,
    RefreshFailure,
)


class ContentCacheService(ABC):
    """Public API for cached, failover-backed content API reads."""

    @property
    @abstractmethod
    def primary_origin(self) -> str:
        """Primary origin base URL for diagnostics."""

    @abstractmethod
    async def read(self, logical_path: str, *, no_cache: bool = False) -> ReadResult:
        """Read one logical path through the cache.

        Raises ``AllOriginsFailedError`` when no origin answers and no cached
        entry can stand in.
        """

    @abstractmethod
    async def forward(
        self,
        method: str,
        logical_path: str,
        *,
        json: Any = None,
    ) -> ReadResult:
        """Send one request upstream without caching it."""

    @abstractmethod
    def clear_cache(self, tag: str | None = None) -> ClearResult:
        """Remove all entries or the entries of one category."""

    @abstractmethod
    def stats(self) -> CacheStats:
        """Return a diagnostic snapshot of cache contents."""

    @abstractmethod
    def refresh_failures(self) -> tuple[RefreshFailure, ...]:
        """Return recent background refresh failures, oldest first."""

    @abstractmethod
    async def probe_origins(self, logical_path: str = "/") -> list[OriginProbe]:
        """Check every candidate origin once for ``logical_path``."""

    @abstractmethod
    async def drain_refreshes(self) -> None:
        """Wait until in-flight background refreshes have settled."""

    @abstractmethod
    async def aclose(self) -> None:
        """Cancel background work and release network resources."""


def build_content_cache_service(
    *,
    settings: ListingSettings,
    transport: httpx.AsyncBaseTransport | None = None,
) -> ContentCacheService:
    """Build the default Content Cache implementation from typed settings."""
    from services.state.content_cache.config import resolve_content_cache_settings
    from services.state.content_cache.implementation import (
        DefaultContentCacheService,
    )

    return DefaultContentCacheService.from_settings(
        resolve_content_cache_settings(settings),
        transport=transport,
    )
