"""Asynchronous origin client over httpx with typed failures."""

from __future__ import annotations

import asyncio
from typing import Any

import httpx

from .errors import (
    HttpJsonDecodeError,
    HttpRequestError,
    HttpStatusError,
    HttpTimeoutError,
)

_MAX_ERROR_BODY_CHARS = 2000


def _response_text(response: httpx.Response) -> str:
    """Return a bounded excerpt of the body for error reports."""
    try:
        return response.text[:_MAX_ERROR_BODY_CHARS]
    except LookupError:
        # Unknown charset declared by the origin.
        return ""


def _has_request(exc: httpx.RequestError) -> bool:
    """Return whether ``exc.request`` is populated; httpx raises when it is not."""
    try:
        exc.request
    except RuntimeError:
        return False
    return True


class AsyncHttpClient:
    """Bounded JSON calls against content origins.

    Every call is bounded by ``timeout_seconds``. The bound is enforced twice:
    httpx applies it per network phase, and ``asyncio.wait_for`` cancels the
    whole call when the total elapsed time exceeds it. Both surface as
    ``HttpTimeoutError``. Only 2xx responses count as success; redirects are
    followed, and a 3xx that cannot be followed is a ``HttpStatusError``.
    """

    def __init__(
        self,
        *,
        timeout_seconds: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.timeout_seconds = timeout_seconds
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=timeout_seconds,
            headers={"Accept": "application/json"},
            follow_redirects=True,
            transport=transport,
        )

    async def aclose(self) -> None:
        """Close the underlying httpx client when this wrapper created it."""
        if self._owns_client:
            await self._client.aclose()

    async def request(
        self,
        method: str,
        url: str,
        *,
        timeout_seconds: float | None = None,
        **kwargs: Any,
    ) -> httpx.Response:
        """Issue one bounded request and return it only when its status is 2xx."""
        budget = timeout_seconds if timeout_seconds is not None else self.timeout_seconds
        request_method = method.upper()
        try:
            response = await asyncio.wait_for(
                self._client.request(
                    method=request_method, url=url, timeout=budget, **kwargs
                ),
                timeout=budget,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException) as exc:
            raise HttpTimeoutError(
                message=f"timed out after {budget}s: {request_method} {url}",
                method=request_method,
                url=url,
                cause=exc,
                timeout_seconds=budget,
            ) from exc
        except httpx.RequestError as exc:
            request = exc.request if _has_request(exc) else None
            request_url = str(request.url) if request is not None else url
            raise HttpRequestError(
                message=f"request failed: {request_method} {request_url}",
                method=request_method,
                url=request_url,
                cause=exc,
            ) from exc

        if not response.is_success:
            raise HttpStatusError(
                message=f"HTTP {response.status_code}: {request_method} {response.request.url}",
                method=request_method,
                url=str(response.request.url),
                status_code=response.status_code,
                response_body=_response_text(response),
            )
        return response

    async def request_json(self, method: str, url: str, **kwargs: Any) -> Any:
        """Issue one request and decode its JSON body; ``204`` yields ``None``."""
        response = await self.request(method, url, **kwargs)
        if response.status_code == 204:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise HttpJsonDecodeError(
                message=f"invalid JSON body: {response.request.method} {response.request.url}",
                method=response.request.method,
                url=str(response.request.url),
                status_code=response.status_code,
                response_body=_response_text(response),
                cause=exc,
            ) from exc
