"""Listing content cache CLI implemented with Typer."""

from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Awaitable, Callable

import typer

from packages.listing_core.main import load_runtime_settings
from packages.listing_core.main import main as serve_forever
from packages.listing_shared.config import ListingSettings
from services.state.content_cache import (
    AllOriginsFailedError,
    ContentCacheService,
    OriginProbe,
    ReadResult,
    build_content_cache_service,
)

SUCCESS_EXIT_CODE = 0
ORIGIN_FAILURE_EXIT_CODE = 3
PROBE_FAILURE_EXIT_CODE = 4


@dataclass(frozen=True)
class CliConfig:
    """Global CLI options shared by every command."""

    config_path: Path | None
    as_json: bool


def _build_service(settings: ListingSettings) -> ContentCacheService:
    """Return one cache service for a single CLI invocation."""
    return build_content_cache_service(settings=settings)


def _run_with_service(
    cfg: CliConfig,
    invoke: Callable[[ContentCacheService], Awaitable[Any]],
) -> Any:
    """Build a service, run one coroutine against it and close it."""
    service = _build_service(load_runtime_settings(cfg.config_path))

    async def _run() -> Any:
        try:
            return await invoke(service)
        finally:
            await service.aclose()

    return asyncio.run(_run())


def _render_read(result: ReadResult, as_json: bool) -> str:
    if as_json:
        return json.dumps(
            {
                "payload": result.payload,
                "sourceOrigin": result.source_origin.value,
                "originUrl": result.origin_url,
                "cacheStatus": result.cache_status.value,
                "degraded": result.degraded,
            },
            sort_keys=True,
            separators=(",", ":"),
        )
    header = (
        f"# {result.cache_status.value} from "
        f"{result.source_origin.value} ({result.origin_url})"
    )
    return f"{header}\n{json.dumps(result.payload, indent=2, sort_keys=True)}"


def _render_probes(probes: list[OriginProbe], as_json: bool) -> str:
    if as_json:
        return json.dumps(
            [probe.model_dump(mode="json") for probe in probes],
            sort_keys=True,
            separators=(",", ":"),
        )
    lines = []
    for probe in probes:
        icon = "✅" if probe.ok else "❌"
        lines.append(
            f"{icon} {probe.origin_url} [{probe.source_origin.value}] {probe.detail}"
        )
    return "\n".join(lines)


def _require_config(ctx: typer.Context) -> CliConfig:
    """Return required CLI config from Typer context."""
    config = ctx.obj
    if not isinstance(config, CliConfig):
        raise RuntimeError("CLI configuration not initialized")
    return config


app = typer.Typer(
    no_args_is_help=True, help="Listing content cache command-line interface"
)


@app.callback()
def main(
    ctx: typer.Context,
    config: Path | None = typer.Option(
        None,
        "--config",
        envvar="LISTING_CONFIG_FILE",
        help="YAML settings file",
    ),
    as_json: bool = typer.Option(False, "--json", help="Emit JSON output"),
) -> None:
    """Store global options for all commands."""
    ctx.obj = CliConfig(config_path=config, as_json=as_json)


@app.command("serve")
def serve_command(ctx: typer.Context) -> None:
    """Run the HTTP cache proxy until interrupted."""
    cfg = _require_config(ctx)
    serve_forever(cfg.config_path)


@app.command("fetch")
def fetch_command(
    ctx: typer.Context,
    path: str = typer.Argument(
        ..., help="Logical content API path, e.g. /wp/v2/property"
    ),
    no_cache: bool = typer.Option(False, "--no-cache", help="Skip the cache lookup"),
) -> None:
    """Read one path through a fresh cache and print the payload."""
    cfg = _require_config(ctx)
    try:
        result = _run_with_service(
            cfg, lambda service: service.read(path, no_cache=no_cache)
        )
    except AllOriginsFailedError as exc:
        if cfg.as_json:
            typer.echo(
                json.dumps({"error": exc.message, "failures": exc.summary()}),
                err=True,
            )
        else:
            typer.echo(f"error: {exc.message}", err=True)
        raise typer.Exit(code=ORIGIN_FAILURE_EXIT_CODE) from exc

    typer.echo(_render_read(result, cfg.as_json))
    raise typer.Exit(code=SUCCESS_EXIT_CODE)


@app.command("probe")
def probe_command(
    ctx: typer.Context,
    path: str = typer.Argument("/", help="Path to request from every origin"),
) -> None:
    """Check every configured origin once and report which respond."""
    cfg = _require_config(ctx)
    probes = _run_with_service(cfg, lambda service: service.probe_origins(path))
    typer.echo(_render_probes(probes, cfg.as_json))
    if not any(probe.ok for probe in probes):
        raise typer.Exit(code=PROBE_FAILURE_EXIT_CODE)
    raise typer.Exit(code=SUCCESS_EXIT_CODE)


if __name__ == "__main__":
    app()
