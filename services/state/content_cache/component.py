"""Component declaration for the Content Cache Service."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from packages.listing_shared.config import ListingSettings
    from services.state.content_cache.service import ContentCacheService

SERVICE_COMPONENT_ID = "service_content_cache"


def build_component(*, settings: ListingSettings) -> ContentCacheService:
    """Build the concrete runtime instance for this service component."""
    from services.state.content_cache.service import build_content_cache_service

    return build_content_cache_service(settings=settings)
