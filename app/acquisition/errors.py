"""
app/acquisition/errors.py

Exception taxonomy for provider acquisition.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any


class AcquisitionError(Exception):
    """Base exception for acquisition pipeline failures."""


class NotFoundError(AcquisitionError):
    """Raised for an unknown category or a missing/inactive endpoint."""


class FetchError(AcquisitionError):
    """
    Transport or parse failure for one fetch attempt. Retried by the
    fallback orchestrator.
    """

    def __init__(self, message: str, *, url: str | None = None, timed_out: bool = False) -> None:
        super().__init__(message)
        self.url = url
        self.timed_out = timed_out


class DocumentFetchError(FetchError):
    """Raised when a document cannot be downloaded."""


class AggregateFetchError(AcquisitionError):
    """
    Every endpoint and fallback URL for a category was exhausted.
    """

    def __init__(
        self,
        *,
        category: str,
        last_error: str | None,
        attempts: int,
        endpoints_tried: int,
        retried_count: int = 0,
        reports: Sequence[Any] = (),
    ) -> None:
        self.category = category
        self.last_error = last_error or "no records returned"
        self.attempts = attempts
        self.endpoints_tried = endpoints_tried
        self.retried_count = retried_count
        self.reports = list(reports)
        super().__init__(
            f"All {endpoints_tried} endpoints failed for category '{category}' "
            f"after {attempts} attempts. Last error: {self.last_error}"
        )


class StoreError(AcquisitionError):
    """Persistence failure reported by the acquisition store."""


class LoggingError(AcquisitionError):
    """Execution log write failure. Reported, never propagated."""


class RunCancelledError(AcquisitionError):
    """
    Raised when a run is cancelled between attempts.

    The fallback orchestrator fills in the attempts already made so the
    caller can still log them.
    """

    def __init__(
        self,
        message: str = "Run cancelled.",
        *,
        attempts: int = 0,
        retried_count: int = 0,
        reports: Sequence[Any] = (),
    ) -> None:
        super().__init__(message)
        self.attempts = attempts
        self.retried_count = retried_count
        self.reports = list(reports)
