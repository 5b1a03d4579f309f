"""Typed failures for origin calls and inbound request bodies.

Outbound errors split on whether the origin answered at all:
``HttpRequestError`` (including timeouts) means no response arrived,
``HttpResponseError`` means a response arrived but cannot be used.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class HttpError(Exception):
    """Base error for shared HTTP helpers."""

    message: str

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True)
class HttpClientError(HttpError):
    """One outbound call failed."""

    method: str
    url: str


@dataclass(frozen=True)
class HttpRequestError(HttpClientError):
    """No response arrived: connect, read or protocol failure."""

    cause: Exception | None = None


@dataclass(frozen=True)
class HttpTimeoutError(HttpRequestError):
    """The call exceeded its total time budget and was cancelled."""

    timeout_seconds: float = 0.0


@dataclass(frozen=True)
class HttpResponseError(HttpClientError):
    """A response arrived but is not a usable JSON payload."""

    status_code: int = 0
    response_body: str = ""


@dataclass(frozen=True)
class HttpStatusError(HttpResponseError):
    """Status outside 2xx, including 3xx responses left unfollowed."""


@dataclass(frozen=True)
class HttpJsonDecodeError(HttpResponseError):
    """2xx response whose body does not decode as JSON."""

    cause: Exception | None = None


@dataclass(frozen=True)
class InvalidBodyError(HttpError):
    """Inbound request body cannot be used by the route."""


@dataclass(frozen=True)
class InvalidJsonBodyError(InvalidBodyError):
    """Inbound request body is not valid JSON."""
