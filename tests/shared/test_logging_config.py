"""Tests for shared structured logging configuration and context."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Iterator

import pytest

from packages.listing_shared.logging import (
    ContextFilter,
    JsonFormatter,
    PlainFormatter,
    bind_context,
    clear_context,
    configure_logging,
    fields,
    get_context,
    log_context,
    structured_fields,
)


@pytest.fixture(autouse=True)
def _isolated_logging() -> Iterator[None]:
    """Restore root handlers and logging context after each test."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    chatty = {name: logging.getLogger(name).level for name in ("httpx", "httpcore")}
    clear_context()
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    for name, chatty_level in chatty.items():
        logging.getLogger(name).setLevel(chatty_level)
    clear_context()


def _record(message: str = "cache hit: key=%s", *args: object) -> logging.LogRecord:
    return logging.LogRecord(
        name="services.state.content_cache",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg=message,
        args=args or ("GET:/posts",),
        exc_info=None,
    )


def test_json_formatter_includes_core_and_context_fields() -> None:
    """JSON output should carry level, logger, message and bound context."""
    record = _record()
    with log_context({fields.CACHE_KEY: "GET:/posts"}):
        ContextFilter().filter(record)

    payload = json.loads(JsonFormatter().format(record))

    assert payload[fields.LEVEL] == "INFO"
    assert payload[fields.LOGGER] == "services.state.content_cache"
    assert payload[fields.MESSAGE] == "cache hit: key=GET:/posts"
    assert payload[fields.CACHE_KEY] == "GET:/posts"
    assert fields.TIMESTAMP in payload


def test_plain_formatter_appends_sorted_context() -> None:
    """Plain output should append context as sorted key=value pairs."""
    record = _record()
    bind_context(**{fields.SERVICE: "listing-cache", fields.CACHE_KEY: "GET:/a"})
    ContextFilter().filter(record)

    line = PlainFormatter().format(record)

    assert line.endswith("cache_key=GET:/a service=listing-cache")


def test_log_context_restores_previous_values_after_exception() -> None:
    """Context bound for a block should unwind even when the block raises."""
    bind_context(**{fields.SERVICE: "listing-cache"})

    with pytest.raises(RuntimeError):
        with log_context({fields.CACHE_KEY: "GET:/x"}):
            assert get_context()[fields.CACHE_KEY] == "GET:/x"
            raise RuntimeError("boom")

    assert get_context() == {fields.SERVICE: "listing-cache"}


def test_bind_context_skips_none_values() -> None:
    """None values should not be bound."""
    bind_context(**{fields.LOGICAL_PATH: None, fields.ATTEMPT: 2})

    assert get_context() == {fields.ATTEMPT: "2"}
    clear_context(fields.ATTEMPT)
    assert get_context() == {}


def test_context_does_not_leak_between_tasks() -> None:
    """Fields bound in one asyncio task should not appear in another."""

    async def _bound() -> dict[str, str]:
        with log_context({fields.CACHE_KEY: "GET:/one"}):
            await asyncio.sleep(0)
            return get_context()

    async def _unbound() -> dict[str, str]:
        await asyncio.sleep(0)
        return get_context()

    async def _run() -> tuple[dict[str, str], dict[str, str]]:
        return await asyncio.gather(_bound(), _unbound())

    bound, unbound = asyncio.run(_run())

    assert bound == {fields.CACHE_KEY: "GET:/one"}
    assert unbound == {}


def test_configure_logging_installs_single_stdout_handler() -> None:
    """Repeated configuration should replace, not stack, root handlers."""
    configure_logging(
        level="DEBUG", json_output=False, seed={fields.SERVICE: "listing-cache"}
    )
    configure_logging(
        level="warning", json_output=True, seed={fields.ENVIRONMENT: "test"}
    )

    root = logging.getLogger()

    assert len(root.handlers) == 1
    assert root.level == logging.WARNING
    assert isinstance(root.handlers[0].formatter, JsonFormatter)
    assert get_context()[fields.ENVIRONMENT] == "test"


def test_configure_logging_skips_empty_seed_values() -> None:
    """Empty seed values should not be bound as process context."""
    configure_logging(
        seed={fields.SERVICE: "listing-cache", fields.PRIMARY_ORIGIN: ""}
    )

    assert get_context() == {fields.SERVICE: "listing-cache"}


def test_structured_fields_include_record_extras() -> None:
    """Per-record extra fields should be merged with bound context."""
    logger = logging.getLogger("services.state.content_cache.engine")
    record = logger.makeRecord(
        logger.name,
        logging.WARNING,
        __file__,
        1,
        "origin attempt failed",
        (),
        None,
        extra={fields.ORIGIN_URL: "https://origin.test", fields.ATTEMPT: 2},
    )
    with log_context({fields.CACHE_KEY: "GET:/posts"}):
        ContextFilter().filter(record)

    assert structured_fields(record) == {
        fields.CACHE_KEY: "GET:/posts",
        fields.ORIGIN_URL: "https://origin.test",
        fields.ATTEMPT: "2",
    }
    payload = json.loads(JsonFormatter().format(record))
    assert payload[fields.ORIGIN_URL] == "https://origin.test"
    assert payload[fields.ATTEMPT] == "2"


def test_configure_logging_quiets_http_transport_loggers() -> None:
    """httpx and httpcore should only be verbose at DEBUG."""
    configure_logging(level="INFO")
    assert logging.getLogger("httpx").level == logging.WARNING
    assert logging.getLogger("httpcore").level == logging.WARNING

    configure_logging(level="DEBUG")
    assert logging.getLogger("httpx").level == logging.DEBUG
