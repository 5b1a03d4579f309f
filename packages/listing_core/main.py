"""Process entrypoint for the listing content HTTP runtime."""

from __future__ import annotations

import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import APIRouter, FastAPI

from packages.listing_shared.config import ListingSettings, load_settings
from packages.listing_shared.http import create_app, run_app
from packages.listing_shared.logging import configure_logging, fields, get_logger
from services.state.content_cache.api import register_routes
from services.state.content_cache.component import build_component
from services.state.content_cache.config import resolve_content_cache_settings
from services.state.content_cache.service import ContentCacheService

_LOGGER = get_logger(__name__)

CONFIG_FILE_ENV = "LISTING_CONFIG_FILE"


def build_app(
    settings: ListingSettings,
    *,
    service: ContentCacheService | None = None,
) -> FastAPI:
    """Create the FastAPI app with the content cache routes registered.

    The cache service lives for the lifetime of the app and is closed on
    shutdown.
    """
    cache_service = service or build_component(settings=settings)

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        _LOGGER.info(
            "content cache runtime started: primary_origin=%s",
            cache_service.primary_origin,
        )
        try:
            yield
        finally:
            await cache_service.aclose()
            _LOGGER.info("content cache runtime stopped")

    app = create_app(
        title="Listing Content Cache",
        cors_allow_origins=settings.server.cors_allow_origins,
        lifespan=lifespan,
    )
    router = APIRouter()
    register_routes(router=router, service=cache_service)
    app.include_router(router)
    app.state.content_cache = cache_service
    return app


def load_runtime_settings(config_path: Path | None = None) -> ListingSettings:
    """Load settings from ``config_path`` or the ``LISTING_CONFIG_FILE`` env var."""
    if config_path is None:
        configured = os.getenv(CONFIG_FILE_ENV, "").strip()
        config_path = Path(configured) if configured else None
    return load_settings(config_path=config_path)


def main(config_path: Path | None = None) -> None:
    """Load settings, configure logging and serve until interrupted."""
    settings = load_runtime_settings(config_path)
    configure_logging(
        level=settings.logging.level,
        json_output=settings.logging.json_output,
        seed={
            fields.SERVICE: settings.logging.service,
            fields.ENVIRONMENT: settings.logging.environment,
            fields.PRIMARY_ORIGIN: resolve_content_cache_settings(settings).primary_origin,
        },
    )
    app = build_app(settings)
    run_app(
        app,
        host=settings.server.host,
        port=settings.server.port,
        log_level=settings.logging.level.lower(),
    )


if __name__ == "__main__":
    main()
