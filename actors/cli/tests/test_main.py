"""CLI tests for the listing content cache Typer commands."""

from __future__ import annotations

import json
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import pytest
from typer.testing import CliRunner

import actors.cli.main as cli
from packages.listing_shared.config import ListingSettings
from services.state.content_cache import (
    AllOriginsFailedError,
    CacheStatus,
    OriginProbe,
    OriginRejectedError,
    ReadResult,
    SourceOrigin,
)


class _FakeService:
    """Fake cache service recording calls made by CLI commands."""

    def __init__(self, *, fail: bool = False, probes_ok: bool = True) -> None:
        self.fail = fail
        self.probes_ok = probes_ok
        self.calls: list[tuple[Any, ...]] = []
        self.closed = False

    async def read(self, logical_path: str, *, no_cache: bool = False) -> ReadResult:
        self.calls.append(("read", logical_path, no_cache))
        if self.fail:
            raise AllOriginsFailedError(
                message="All 1 origins failed for GET /properties",
                logical_path="/properties",
                failures=(
                    OriginRejectedError(
                        message="HTTP 500",
                        origin_url="http://primary",
                        url="http://primary/properties",
                        status_code=500,
                    ),
                ),
            )
        return ReadResult(
            payload={"totalCount": 42},
            source_origin=SourceOrigin.FALLBACK,
            origin_url="http://fallback",
            cache_status=CacheStatus.BYPASS if no_cache else CacheStatus.MISS,
            fetched_at=datetime(2026, 1, 1, tzinfo=UTC),
        )

    async def probe_origins(self, logical_path: str = "/") -> list[OriginProbe]:
        self.calls.append(("probe", logical_path))
        return [
            OriginProbe(
                origin_url="http://primary",
                source_origin=SourceOrigin.PRIMARY,
                ok=False,
                detail="HTTP 503",
            ),
            OriginProbe(
                origin_url="http://fallback",
                source_origin=SourceOrigin.FALLBACK,
                ok=self.probes_ok,
                detail="ok in 3ms" if self.probes_ok else "HTTP 500",
            ),
        ]

    async def aclose(self) -> None:
        self.closed = True


def _install_fake_service(
    monkeypatch: pytest.MonkeyPatch, service: _FakeService
) -> list[Path | None]:
    """Route CLI service construction to ``service`` and record config paths."""
    config_paths: list[Path | None] = []

    def _load(config_path: Path | None = None) -> ListingSettings:
        config_paths.append(config_path)
        return ListingSettings()

    monkeypatch.setattr(cli, "load_runtime_settings", _load)
    monkeypatch.setattr(cli, "_build_service", lambda settings: service)
    return config_paths


def test_fetch_prints_payload_and_closes_service(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """fetch should print a status header followed by the payload."""
    service = _FakeService()
    _install_fake_service(monkeypatch, service)

    result = CliRunner().invoke(cli.app, ["fetch", "/properties?page=1"])

    assert result.exit_code == 0
    assert result.stdout.splitlines()[0] == "# miss from fallback (http://fallback)"
    assert '"totalCount": 42' in result.stdout
    assert service.calls == [("read", "/properties?page=1", False)]
    assert service.closed is True


def test_fetch_json_output_and_no_cache_flag(monkeypatch: pytest.MonkeyPatch) -> None:
    """--json should emit one compact document and --no-cache is passed through."""
    service = _FakeService()
    config_paths = _install_fake_service(monkeypatch, service)

    result = CliRunner().invoke(
        cli.app,
        ["--json", "--config", "/tmp/listing.yaml", "fetch", "/posts", "--no-cache"],
    )

    assert result.exit_code == 0
    assert json.loads(result.stdout) == {
        "cacheStatus": "bypass",
        "degraded": False,
        "originUrl": "http://fallback",
        "payload": {"totalCount": 42},
        "sourceOrigin": "fallback",
    }
    assert service.calls == [("read", "/posts", True)]
    assert config_paths == [Path("/tmp/listing.yaml")]


def test_fetch_reports_origin_failure_with_exit_code(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """All-origin failures should exit with the dedicated code."""
    service = _FakeService(fail=True)
    _install_fake_service(monkeypatch, service)

    result = CliRunner().invoke(cli.app, ["--json", "fetch", "/properties"])

    assert result.exit_code == cli.ORIGIN_FAILURE_EXIT_CODE
    payload = json.loads(result.stderr)
    assert payload["failures"] == [
        {
            "origin": "http://primary",
            "type": "OriginRejectedError",
            "message": "HTTP 500",
            "status": 500,
        }
    ]
    assert service.closed is True


def test_probe_lists_each_origin(monkeypatch: pytest.MonkeyPatch) -> None:
    """probe should print one line per origin and succeed if any responds."""
    service = _FakeService()
    _install_fake_service(monkeypatch, service)

    result = CliRunner().invoke(cli.app, ["probe", "/wp/v2/property"])

    assert result.exit_code == 0
    assert result.stdout.splitlines() == [
        "❌ http://primary [primary] HTTP 503",
        "✅ http://fallback [fallback] ok in 3ms",
    ]
    assert service.calls == [("probe", "/wp/v2/property")]


def test_probe_fails_when_no_origin_responds(monkeypatch: pytest.MonkeyPatch) -> None:
    """probe should exit non-zero when every origin fails."""
    service = _FakeService(probes_ok=False)
    _install_fake_service(monkeypatch, service)

    result = CliRunner().invoke(cli.app, ["--json", "probe"])

    assert result.exit_code == cli.PROBE_FAILURE_EXIT_CODE
    assert [item["ok"] for item in json.loads(result.stdout)] == [False, False]
    assert service.calls == [("probe", "/")]


def test_serve_delegates_to_runtime_entrypoint(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """serve should hand the config path to the HTTP runtime."""
    called: list[Path | None] = []
    monkeypatch.setattr(cli, "serve_forever", called.append)

    result = CliRunner().invoke(cli.app, ["--config", "/tmp/listing.yaml", "serve"])

    assert result.exit_code == 0
    assert called == [Path("/tmp/listing.yaml")]
