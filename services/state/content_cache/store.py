"""In-memory cache store with freshness classification."""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from datetime import UTC, datetime, timedelta
from fnmatch import fnmatchcase

from pydantic import JsonValue

from services.state.content_cache.config import ContentCacheSettings
from services.state.content_cache.domain import (
    CacheEntry,
    CacheStats,
    Freshness,
    SourceOrigin,
)
from services.state.content_cache.keys import key_path, split_logical_path

Clock = Callable[[], datetime]

ALL_TAG = "all"


def utc_now() -> datetime:
    """Return the current timezone-aware UTC time."""
    return datetime.now(UTC)


class CacheStore:
    """Process-local mapping from cache key to ``CacheEntry``.

    Entries are immutable, so ``set`` swaps in a complete replacement and a
    reader never observes a partially written entry. Entries past the stale
    window are kept; callers decide whether an expired entry is usable.
    """

    def __init__(
        self,
        *,
        fresh_window: timedelta,
        stale_window: timedelta,
        clock: Clock = utc_now,
        categories: Mapping[str, Sequence[str]] | None = None,
    ) -> None:
        if stale_window <= fresh_window:
            raise ValueError("stale_window must be greater than fresh_window")
        self.fresh_window = fresh_window
        self.stale_window = stale_window
        self._clock = clock
        self._categories = {
            tag.lower(): tuple(patterns) for tag, patterns in (categories or {}).items()
        }
        self._entries: dict[str, CacheEntry] = {}

    @classmethod
    def from_settings(
        cls, settings: ContentCacheSettings, *, clock: Clock = utc_now
    ) -> CacheStore:
        """Build a store from content cache settings."""
        return cls(
            fresh_window=timedelta(seconds=settings.fresh_window_seconds),
            stale_window=timedelta(seconds=settings.stale_window_seconds),
            clock=clock,
            categories=settings.categories,
        )

    def now(self) -> datetime:
        """Return the store clock's current time."""
        return self._clock()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def get(self, key: str) -> CacheEntry | None:
        """Return the entry for ``key`` regardless of its age, or ``None``."""
        return self._entries.get(key)

    def set(
        self,
        key: str,
        payload: JsonValue,
        source_origin: SourceOrigin,
        *,
        origin_url: str = "",
    ) -> CacheEntry:
        """Store a new entry stamped with the current time, replacing any other."""
        entry = CacheEntry(
            key=key,
            payload=payload,
            fetched_at=self._clock(),
            source_origin=source_origin,
            origin_url=origin_url,
        )
        self._entries[key] = entry
        return entry

    def classify(self, entry: CacheEntry, now: datetime | None = None) -> Freshness:
        """Classify ``entry`` as fresh, stale or expired at ``now``."""
        age = (now or self._clock()) - entry.fetched_at
        if age < self.fresh_window:
            return Freshness.FRESH
        if age < self.stale_window:
            return Freshness.STALE
        return Freshness.EXPIRED

    def clear(self, tag: str | None = None) -> int:
        """Remove every entry, or the entries matching ``tag``; return the count.

        A configured category tag matches keys whose path fits one of its glob
        patterns. Any other tag matches keys whose path contains it.
        """
        normalized = (tag or ALL_TAG).strip().lower() or ALL_TAG
        if normalized == ALL_TAG:
            removed = len(self._entries)
            self._entries.clear()
            return removed
        return self._remove_where(lambda key: self._matches_tag(key, normalized))

    def invalidate_prefix(self, logical_path: str) -> int:
        """Remove entries whose path is ``logical_path`` or lies beneath it."""
        prefix, _ = split_logical_path(logical_path)

        def _under(key: str) -> bool:
            path = key_path(key)
            return prefix == "/" or path == prefix or path.startswith(f"{prefix}/")

        return self._remove_where(_under)

    def stats(self, now: datetime | None = None) -> CacheStats:
        """Return size, sorted keys and per-freshness counts."""
        moment = now or self._clock()
        counts = {item: 0 for item in Freshness}
        for entry in self._entries.values():
            counts[self.classify(entry, moment)] += 1
        return CacheStats(
            size=len(self._entries),
            keys=sorted(self._entries),
            fresh=counts[Freshness.FRESH],
            stale=counts[Freshness.STALE],
            expired=counts[Freshness.EXPIRED],
        )

    def _matches_tag(self, key: str, tag: str) -> bool:
        path = key_path(key)
        patterns = self._categories.get(tag)
        if patterns is None:
            return tag in path.lower()
        return any(fnmatchcase(path, pattern) for pattern in patterns)

    def _remove_where(self, predicate: Callable[[str], bool]) -> int:
        doomed = [key for key in self._entries if predicate(key)]
        for key in doomed:
            del self._entries[key]
        return len(doomed)
