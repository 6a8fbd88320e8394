"""Failures and degradation records at the aggregator boundary."""

from __future__ import annotations

from dataclasses import dataclass


class AggregationError(RuntimeError):
    """Base class for fatal aggregation failures."""


class PrimaryNotFoundError(AggregationError, LookupError):
    """The primary match record could not be fetched; nothing else is attempted."""

    def __init__(self, match_id: str, reason: str = "") -> None:
        message = f"Match '{match_id}' could not be loaded"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.match_id = match_id
        self.reason = reason


@dataclass(frozen=True)
class SecondaryDegraded:
    """A tolerated secondary-fetch failure that was replaced by its fallback."""

    source: str
    reason: str


__all__ = ["AggregationError", "PrimaryNotFoundError", "SecondaryDegraded"]
