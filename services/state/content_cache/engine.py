"""Fetch-and-refresh engine: walks candidate origins until one succeeds."""

from __future__ import annotations

from collections.abc import Mapping
from time import perf_counter
from typing import Any

import httpx

from packages.listing_shared.http import (
    AsyncHttpClient,
    HttpJsonDecodeError,
    HttpRequestError,
    HttpResponseError,
    HttpTimeoutError,
)
from packages.listing_shared.logging import fields, get_logger
from services.state.content_cache.config import ContentCacheSettings
from services.state.content_cache.domain import FetchResult, OriginProbe
from services.state.content_cache.errors import (
    AllOriginsFailedError,
    OriginFailure,
    OriginRejectedError,
    OriginUnreachableError,
)
from services.state.content_cache.keys import normalize_logical_path
from services.state.content_cache.origins import OriginCandidate, OriginResolver

_LOGGER = get_logger(__name__)


class FetchEngine:
    """Issue one logical request against the resolved origins, in order.

    Each candidate gets exactly one attempt bounded by ``timeout_seconds``.
    There is no backoff between candidates and no retry of a failed one.
    """

    def __init__(
        self,
        *,
        resolver: OriginResolver,
        client: AsyncHttpClient,
        timeout_seconds: float = 15.0,
    ) -> None:
        self._resolver = resolver
        self._client = client
        self._timeout_seconds = timeout_seconds

    @classmethod
    def from_settings(
        cls,
        settings: ContentCacheSettings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> FetchEngine:
        """Build an engine and its owned HTTP client from settings."""
        return cls(
            resolver=OriginResolver.from_settings(settings),
            client=AsyncHttpClient(
                timeout_seconds=settings.request_timeout_seconds,
                transport=transport,
            ),
            timeout_seconds=settings.request_timeout_seconds,
        )

    @property
    def resolver(self) -> OriginResolver:
        return self._resolver

    async def aclose(self) -> None:
        """Release the HTTP client."""
        await self._client.aclose()

    async def fetch_with_failover(
        self,
        logical_path: str,
        *,
        method: str = "GET",
        json: Any = None,
        headers: Mapping[str, str] | None = None,
    ) -> FetchResult:
        """Return the first successful decoded payload across all candidates.

        Raises:
            AllOriginsFailedError: every candidate timed out, was unreachable,
                answered with a non-success status or an undecodable body.
        """
        normalized = normalize_logical_path(logical_path)
        candidates = self._resolver.resolve_candidates(normalized)
        failures: list[OriginFailure] = []
        for attempt, candidate in enumerate(candidates, start=1):
            try:
                payload = await self._attempt(
                    candidate,
                    normalized,
                    method=method,
                    json=json,
                    headers=headers,
                )
            except OriginFailure as failure:
                _LOGGER.warning(
                    "origin attempt failed: attempt=%s/%s error_type=%s error=%s",
                    attempt,
                    len(candidates),
                    type(failure).__name__,
                    failure.message,
                    extra=_attempt_fields(
                        method, normalized, candidate, attempt, failure
                    ),
                )
                failures.append(failure)
                continue
            return FetchResult(
                payload=payload,
                source_origin=candidate.source_origin,
                origin_url=candidate.base_url,
            )

        _LOGGER.error(
            "all origins failed: method=%s path=%s candidates=%s",
            method.upper(),
            normalized,
            len(candidates),
        )
        raise AllOriginsFailedError(
            message=f"All {len(candidates)} origins failed for {method.upper()} {normalized}",
            logical_path=normalized,
            failures=tuple(failures),
        )

    async def probe_origins(self, logical_path: str = "/") -> list[OriginProbe]:
        """Attempt ``logical_path`` against every candidate and report each outcome."""
        normalized = normalize_logical_path(logical_path)
        results: list[OriginProbe] = []
        for candidate in self._resolver.resolve_candidates(normalized):
            started = perf_counter()
            try:
                await self._attempt(candidate, normalized, method="GET")
            except OriginFailure as failure:
                results.append(
                    OriginProbe(
                        origin_url=candidate.base_url,
                        source_origin=candidate.source_origin,
                        ok=False,
                        detail=failure.message,
                    )
                )
                continue
            elapsed_ms = int((perf_counter() - started) * 1000)
            results.append(
                OriginProbe(
                    origin_url=candidate.base_url,
                    source_origin=candidate.source_origin,
                    ok=True,
                    detail=f"ok in {elapsed_ms}ms",
                )
            )
        return results

    async def _attempt(
        self,
        candidate: OriginCandidate,
        logical_path: str,
        *,
        method: str,
        json: Any = None,
        headers: Mapping[str, str] | None = None,
    ) -> Any:
        """Run one bounded request and translate client errors to origin failures."""
        url = f"{candidate.base_url}{logical_path}"
        kwargs: dict[str, Any] = {"timeout_seconds": self._timeout_seconds}
        if json is not None:
            kwargs["json"] = json
        if headers:
            kwargs["headers"] = dict(headers)
        try:
            return await self._client.request_json(method, url, **kwargs)
        except HttpTimeoutError as exc:
            raise OriginUnreachableError(
                message=f"timed out after {exc.timeout_seconds}s",
                origin_url=candidate.base_url,
                url=url,
                timed_out=True,
            ) from exc
        except HttpRequestError as exc:
            raise OriginUnreachableError(
                message=str(exc.cause or exc),
                origin_url=candidate.base_url,
                url=url,
            ) from exc
        except HttpResponseError as exc:
            detail = (
                "response body is not valid JSON"
                if isinstance(exc, HttpJsonDecodeError)
                else f"HTTP {exc.status_code}"
            )
            raise OriginRejectedError(
                message=detail,
                origin_url=candidate.base_url,
                url=url,
                status_code=exc.status_code,
            ) from exc


def _attempt_fields(
    method: str,
    logical_path: str,
    candidate: OriginCandidate,
    attempt: int,
    failure: OriginFailure,
) -> dict[str, object]:
    """Structured fields describing one failed origin attempt."""
    return {
        fields.HTTP_METHOD: method.upper(),
        fields.LOGICAL_PATH: logical_path,
        fields.ORIGIN_URL: candidate.base_url,
        fields.SOURCE_ORIGIN: candidate.source_origin.value,
        fields.ATTEMPT: attempt,
        fields.STATUS_CODE: getattr(failure, "status_code", None),
    }
