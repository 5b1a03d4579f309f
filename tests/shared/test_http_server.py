"""Unit tests for shared FastAPI/uvicorn HTTP server helpers."""

from __future__ import annotations

import asyncio
from typing import Any

import pytest
from fastapi import Request
from fastapi.middleware.cors import CORSMiddleware

from packages.listing_shared.http import (
    InvalidBodyError,
    InvalidJsonBodyError,
    create_app,
    read_json_body,
    read_raw_body,
    run_app,
)


def _request(body: bytes = b"", headers: dict[str, str] | None = None) -> Request:
    """Create a minimal Starlette request object for helper tests."""
    sent = False
    normalized_headers = {
        "host": "test.local",
        **(headers or {}),
    }
    scope: dict[str, Any] = {
        "type": "http",
        "asgi": {"version": "3.0"},
        "http_version": "1.1",
        "method": "POST",
        "scheme": "http",
        "path": "/",
        "raw_path": b"/",
        "query_string": b"",
        "headers": [
            (name.lower().encode("latin-1"), value.encode("latin-1"))
            for name, value in normalized_headers.items()
        ],
        "client": ("127.0.0.1", 12345),
        "server": ("127.0.0.1", 80),
        "root_path": "",
    }

    async def receive() -> dict[str, Any]:
        nonlocal sent
        if sent:
            return {"type": "http.disconnect"}
        sent = True
        return {"type": "http.request", "body": body, "more_body": False}

    return Request(scope, receive=receive)


def test_create_app_returns_fastapi_app() -> None:
    """create_app should return a FastAPI instance with configured metadata."""
    app = create_app(title="listing-test", version="1.2.3")
    assert app.title == "listing-test"
    assert app.version == "1.2.3"
    assert not any(item.cls is CORSMiddleware for item in app.user_middleware)


def test_create_app_installs_cors_for_configured_origins() -> None:
    """CORS middleware should be added only when origins are configured."""
    app = create_app(cors_allow_origins=("http://localhost:3000",))

    middleware = [item for item in app.user_middleware if item.cls is CORSMiddleware]

    assert len(middleware) == 1
    assert middleware[0].kwargs["allow_origins"] == ["http://localhost:3000"]


def test_read_raw_body_returns_bytes() -> None:
    """read_raw_body should return the payload unchanged."""

    async def _run() -> None:
        assert await read_raw_body(_request(body=b'{"ok":true}')) == b'{"ok":true}'

    asyncio.run(_run())


def test_read_json_body_decodes_json_and_maps_decode_error() -> None:
    """read_json_body should decode JSON and map invalid bodies."""

    async def _run() -> None:
        assert await read_json_body(_request(body=b'{"ok": true}')) == {"ok": True}

        with pytest.raises(InvalidJsonBodyError):
            await read_json_body(_request(body=b"{not-json"))

    asyncio.run(_run())


def test_read_json_body_empty_body_handling() -> None:
    """Blank bodies decode to None only when explicitly allowed."""

    async def _run() -> None:
        assert await read_json_body(_request(body=b"  "), allow_empty=True) is None

        with pytest.raises(InvalidBodyError):
            await read_json_body(_request(body=b""))

    asyncio.run(_run())


def test_read_json_body_rejects_invalid_utf8() -> None:
    """Undecodable bytes should raise InvalidBodyError."""

    async def _run() -> None:
        with pytest.raises(InvalidBodyError):
            await read_json_body(_request(body=b"\xff"))

    asyncio.run(_run())


def test_run_app_forwards_arguments_to_uvicorn(monkeypatch: pytest.MonkeyPatch) -> None:
    """run_app should delegate execution to uvicorn.run with provided options."""
    app = create_app()
    called: dict[str, Any] = {}

    def _fake_run(target: Any, **kwargs: Any) -> None:
        called["target"] = target
        called["kwargs"] = kwargs

    monkeypatch.setattr("packages.listing_shared.http.server.uvicorn.run", _fake_run)

    run_app(app, host="0.0.0.0", port=9999, log_level="debug")

    assert called["target"] is app
    assert called["kwargs"] == {
        "host": "0.0.0.0",
        "port": 9999,
        "log_level": "debug",
    }
