"""Pydantic settings for Content Cache Service behavior."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from packages.listing_shared.config import ListingSettings, resolve_component_settings
from services.state.content_cache.component import SERVICE_COMPONENT_ID

DEFAULT_ORIGIN = "http://localhost/wp-json"

DEFAULT_CATEGORIES: dict[str, tuple[str, ...]] = {
    "properties": (
        "/wp/v2/property",
        "/wp/v2/property/*",
        "/properties",
        "/properties/*",
    ),
    "listings": ("/wp/v2/property", "/properties"),
    "details": ("/wp/v2/property/*", "/properties/*"),
    "neighborhoods": ("/wp/v2/neighborhood*", "/neighborhoods*"),
    "posts": ("/wp/v2/posts*",),
}


def _split_csv(value: object) -> object:
    """Accept comma-separated origin lists from environment variables."""
    if isinstance(value, str):
        return tuple(item.strip() for item in value.split(",") if item.strip())
    return value


class ContentCacheSettings(BaseModel):
    """Origins, freshness windows and timeouts for the content cache."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    primary_origin: str = DEFAULT_ORIGIN
    fallback_origins: tuple[str, ...] = ()
    path_origins: dict[str, tuple[str, ...]] = Field(default_factory=dict)
    prefer_https: bool = False
    fresh_window_seconds: float = Field(default=15 * 60, gt=0)
    stale_window_seconds: float = Field(default=60 * 60, gt=0)
    request_timeout_seconds: float = Field(default=15.0, gt=0)
    refresh_error_history: int = Field(default=50, gt=0)
    categories: dict[str, tuple[str, ...]] = Field(
        default_factory=lambda: dict(DEFAULT_CATEGORIES)
    )

    @field_validator("primary_origin", mode="before")
    @classmethod
    def _strip_primary(cls, value: object) -> object:
        """Treat a blank primary origin as unset."""
        if value is None:
            return DEFAULT_ORIGIN
        if isinstance(value, str):
            return value.strip() or DEFAULT_ORIGIN
        return value

    @field_validator("fallback_origins", mode="before")
    @classmethod
    def _split_fallbacks(cls, value: object) -> object:
        return _split_csv(value)

    @model_validator(mode="after")
    def _require_ordered_windows(self) -> ContentCacheSettings:
        """Reject a stale window that does not extend past the fresh window."""
        if self.stale_window_seconds <= self.fresh_window_seconds:
            raise ValueError(
                "stale_window_seconds must be greater than fresh_window_seconds"
            )
        return self


def resolve_content_cache_settings(settings: ListingSettings) -> ContentCacheSettings:
    """Resolve settings from ``components.service.content_cache``."""
    return resolve_component_settings(
        settings=settings,
        component_id=SERVICE_COMPONENT_ID,
        model=ContentCacheSettings,
    )
