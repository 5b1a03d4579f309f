"""Static resolution of candidate origins for one logical request."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from services.state.content_cache.config import DEFAULT_ORIGIN, ContentCacheSettings
from services.state.content_cache.domain import SourceOrigin
from services.state.content_cache.keys import split_logical_path


@dataclass(frozen=True)
class OriginCandidate:
    """One base URL to try, tagged with the role it plays for this request."""

    base_url: str
    source_origin: SourceOrigin


def _clean(origin: str) -> str:
    return origin.strip().rstrip("/")


def _https_twin(origin: str) -> str | None:
    if origin.startswith("http://"):
        return "https://" + origin[len("http://") :]
    return None


class OriginResolver:
    """Produce the ordered candidate list: primary first, then fallbacks.

    Resolution never touches the network and never fails. ``path_origins``
    maps a path prefix to a full replacement origin list; the longest prefix
    matching on a path segment boundary wins. With ``prefer_https`` every
    ``http://`` origin is preceded by its ``https://`` twin, which keeps the
    role of the origin it was derived from.
    """

    def __init__(
        self,
        *,
        primary_origin: str | None = None,
        fallback_origins: Sequence[str] = (),
        path_origins: Mapping[str, Sequence[str]] | None = None,
        prefer_https: bool = False,
    ) -> None:
        default = self._ordered([primary_origin or "", *fallback_origins])
        self._default = default or [DEFAULT_ORIGIN]
        self._overrides: list[tuple[str, list[str]]] = []
        for prefix, origins in (path_origins or {}).items():
            ordered = self._ordered(origins)
            if not ordered:
                continue
            normalized_prefix, _ = split_logical_path(prefix)
            self._overrides.append((normalized_prefix, ordered))
        self._overrides.sort(key=lambda item: len(item[0]), reverse=True)
        self._prefer_https = prefer_https

    @classmethod
    def from_settings(cls, settings: ContentCacheSettings) -> OriginResolver:
        """Build a resolver from content cache settings."""
        return cls(
            primary_origin=settings.primary_origin,
            fallback_origins=settings.fallback_origins,
            path_origins=settings.path_origins,
            prefer_https=settings.prefer_https,
        )

    @property
    def primary_origin(self) -> str:
        """Primary origin used when no path override applies."""
        return self._default[0]

    @staticmethod
    def is_primary(index: int) -> bool:
        """Return whether position ``index`` of an origin list is the primary."""
        return index == 0

    def resolve(self, logical_path: str) -> list[str]:
        """Return candidate base URLs in the order they should be tried."""
        return [item.base_url for item in self.resolve_candidates(logical_path)]

    def resolve_candidates(self, logical_path: str) -> list[OriginCandidate]:
        """Return tagged candidates in the order they should be tried."""
        origins = self._origins_for(logical_path)
        candidates: list[OriginCandidate] = []
        seen: set[str] = set()
        for index, origin in enumerate(origins):
            primary = self.is_primary(index)
            role = SourceOrigin.PRIMARY if primary else SourceOrigin.FALLBACK
            expanded = [origin]
            if self._prefer_https:
                twin = _https_twin(origin)
                if twin is not None:
                    expanded = [twin, origin]
            for url in expanded:
                if url in seen:
                    continue
                seen.add(url)
                candidates.append(OriginCandidate(base_url=url, source_origin=role))
        return candidates

    def _origins_for(self, logical_path: str) -> list[str]:
        path, _ = split_logical_path(logical_path)
        for prefix, origins in self._overrides:
            if prefix == "/" or path == prefix or path.startswith(f"{prefix}/"):
                return origins
        return self._default

    @staticmethod
    def _ordered(origins: Sequence[str]) -> list[str]:
        """Strip, drop blanks and de-duplicate preserving first occurrence."""
        ordered: list[str] = []
        for origin in origins:
            cleaned = _clean(origin)
            if cleaned and cleaned not in ordered:
                ordered.append(cleaned)
        return ordered
