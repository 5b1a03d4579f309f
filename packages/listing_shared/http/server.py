"""FastAPI and uvicorn helpers for the inbound HTTP surface."""

from __future__ import annotations

import json
from collections.abc import Sequence
from typing import Any

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from .errors import InvalidBodyError, InvalidJsonBodyError


def create_app(
    *,
    title: str = "listing-cache",
    version: str = "0.0.0",
    cors_allow_origins: Sequence[str] = (),
    lifespan: Any = None,
) -> FastAPI:
    """Create a FastAPI app with project defaults and optional CORS."""
    app = FastAPI(title=title, version=version, lifespan=lifespan)
    if cors_allow_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=list(cors_allow_origins),
            allow_credentials=True,
            allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
            allow_headers=["Content-Type"],
        )
    return app


def run_app(
    app: FastAPI,
    *,
    host: str = "127.0.0.1",
    port: int = 10000,
    log_level: str = "info",
) -> None:
    """Run one FastAPI app through uvicorn."""
    uvicorn.run(app, host=host, port=port, log_level=log_level)


async def read_raw_body(request: Request) -> bytes:
    """Read raw request body bytes without interpretation."""
    return await request.body()


async def read_json_body(request: Request, *, allow_empty: bool = False) -> Any:
    """Read and decode one request body as JSON.

    With ``allow_empty`` a blank body decodes to ``None`` instead of failing.
    """
    body = await read_raw_body(request)
    if allow_empty and not body.strip():
        return None
    try:
        return json.loads(body)
    except json.JSONDecodeError as exc:
        raise InvalidJsonBodyError(message="Body is not valid JSON") from exc
    except UnicodeDecodeError as exc:
        raise InvalidBodyError(message="Body is not valid UTF-8") from exc
