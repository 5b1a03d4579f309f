"""HTTP adapter routes for the Content Cache Service."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Query, Request
from fastapi.responses import JSONResponse

from packages.listing_shared.http import InvalidBodyError, read_json_body
from packages.listing_shared.logging import get_logger
from services.state.content_cache.domain import ReadResult
from services.state.content_cache.errors import AllOriginsFailedError
from services.state.content_cache.service import ContentCacheService

_LOGGER = get_logger(__name__)

PROXY_METHODS = ["GET", "POST", "PUT", "DELETE"]
_TRUTHY = {"1", "true", "yes", "on"}


def register_routes(*, router: APIRouter, service: ContentCacheService) -> None:
    """Register cache administration, content proxy and health routes."""

    async def get_cache_stats() -> dict[str, Any]:
        return {"success": True, "stats": service.stats().model_dump(mode="json")}

    async def clear_cache(request: Request) -> JSONResponse:
        try:
            body = await read_json_body(request, allow_empty=True)
        except InvalidBodyError as exc:
            return JSONResponse({"success": False, "error": str(exc)}, status_code=400)
        if body is not None and not isinstance(body, dict):
            return JSONResponse(
                {"success": False, "error": "Body must be a JSON object"},
                status_code=400,
            )

        cache_type = (body or {}).get("cacheType") or "all"
        result = service.clear_cache(str(cache_type))
        return JSONResponse(
            {
                "success": True,
                "message": f"Successfully cleared {result.removed_count} cached items",
                "result": {
                    "removedCount": result.removed_count,
                    "cacheType": result.tag,
                },
            }
        )

    async def proxy_content(
        request: Request,
        path: str | None = Query(default=None),
        no_cache: str | None = Query(default=None, alias="no-cache"),
    ) -> JSONResponse:
        if path is None or not path.strip():
            return JSONResponse({"error": "Missing path parameter"}, status_code=400)

        method = request.method.upper()
        try:
            if method == "GET":
                result = await service.read(
                    path, no_cache=(no_cache or "").lower() in _TRUTHY
                )
            else:
                body = await read_json_body(request, allow_empty=True)
                result = await service.forward(method, path, json=body)
        except InvalidBodyError as exc:
            return JSONResponse({"error": str(exc), "path": path}, status_code=400)
        except AllOriginsFailedError as exc:
            return JSONResponse(
                {
                    "error": "Failed to fetch from content API",
                    "message": exc.message,
                    "path": exc.logical_path or path,
                    "failures": exc.summary(),
                },
                status_code=502,
            )
        return JSONResponse(result.payload, headers=_cache_headers(result))

    async def health() -> dict[str, Any]:
        return {"status": "healthy", "primaryOrigin": service.primary_origin}

    router.add_api_route("/api/cache", get_cache_stats, methods=["GET"])
    router.add_api_route("/api/cache", clear_cache, methods=["POST"])
    router.add_api_route("/api/wordpress", proxy_content, methods=PROXY_METHODS)
    router.add_api_route("/health", health, methods=["GET"])
    _LOGGER.debug("content cache routes registered")


def _cache_headers(result: ReadResult) -> dict[str, str]:
    headers = {
        "X-Cache-Status": result.cache_status.value,
        "X-Cache-Origin": result.source_origin.value,
        "X-Cache-Degraded": "true" if result.degraded else "false",
    }
    if result.fetched_at is not None:
        headers["X-Cache-Fetched-At"] = result.fetched_at.isoformat()
    return headers
