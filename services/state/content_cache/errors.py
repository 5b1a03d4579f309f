"""Failure taxonomy for origin fetches.

Per-candidate failures (``OriginFailure`` subclasses) stay inside the engine.
Only ``AllOriginsFailedError`` reaches callers.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class ContentCacheError(Exception):
    """Base error for the content cache service."""

    message: str

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True)
class OriginFailure(ContentCacheError):
    """One candidate origin could not satisfy the request."""

    origin_url: str = ""
    url: str = ""


@dataclass(frozen=True)
class OriginUnreachableError(OriginFailure):
    """Network-level failure or timeout reaching a candidate."""

    timed_out: bool = False


@dataclass(frozen=True)
class OriginRejectedError(OriginFailure):
    """Candidate answered with a non-success status or an undecodable body."""

    status_code: int | None = None


@dataclass(frozen=True)
class AllOriginsFailedError(ContentCacheError):
    """Every candidate failed; ``failures`` holds one error per candidate, in order."""

    logical_path: str = ""
    failures: tuple[OriginFailure, ...] = field(default_factory=tuple)

    def summary(self) -> list[dict[str, object]]:
        """Return a JSON-friendly description of each candidate failure."""
        output: list[dict[str, object]] = []
        for failure in self.failures:
            item: dict[str, object] = {
                "origin": failure.origin_url,
                "type": type(failure).__name__,
                "message": failure.message,
            }
            if isinstance(failure, OriginRejectedError) and failure.status_code:
                item["status"] = failure.status_code
            if isinstance(failure, OriginUnreachableError) and failure.timed_out:
                item["timedOut"] = True
            output.append(item)
        return output
