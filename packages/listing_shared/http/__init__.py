"""Public shared HTTP API for listing content packages."""

from .client import AsyncHttpClient
from .errors import (
    HttpClientError,
    HttpError,
    HttpJsonDecodeError,
    HttpRequestError,
    HttpResponseError,
    HttpStatusError,
    HttpTimeoutError,
    InvalidBodyError,
    InvalidJsonBodyError,
)
from .server import create_app, read_json_body, read_raw_body, run_app

__all__ = [
    "AsyncHttpClient",
    "HttpClientError",
    "HttpError",
    "HttpJsonDecodeError",
    "HttpRequestError",
    "HttpResponseError",
    "HttpStatusError",
    "HttpTimeoutError",
    "InvalidBodyError",
    "InvalidJsonBodyError",
    "create_app",
    "read_json_body",
    "read_raw_body",
    "run_app",
]
