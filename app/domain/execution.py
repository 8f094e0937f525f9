"""
app/domain/execution.py

Run outcomes, reconcile outcomes and append-only log entries.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from app.domain.provider import SourceRecord


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ExecutionType:
    MANUAL = "manual"
    SCHEDULED = "scheduled"
    FALLBACK = "fallback"


class ExecutionStatus:
    SUCCESS = "success"
    FAILURE = "failure"
    TIMEOUT = "timeout"
    ERROR = "error"


class ReconcileAction:
    INSERTED = "inserted"
    UPDATED = "updated"
    DUPLICATE = "duplicate"
    FAILED = "failed"


class ImportStatus:
    COMPLETED = "completed"
    FAILED = "failed"


BATCH_IMPORT_CATEGORY = "automated_pipeline"


@dataclass(frozen=True)
class ReconcileOutcome:
    """
    Result of reconciling one SourceRecord against the store.
    """

    name: str
    category: str
    action: str
    fingerprint: str
    provider_id: uuid.UUID | None = None
    error: str | None = None


@dataclass(frozen=True)
class ExecutionLogEntry:
    """
    Append-only record of one endpoint's part in a run.
    """

    endpoint_id: uuid.UUID
    execution_type: str
    status: str
    providers_fetched: int = 0
    providers_saved: int = 0
    duplicates_found: int = 0
    duration_ms: int = 0
    error_message: str | None = None
    timestamp: datetime = field(default_factory=_utcnow)
    response_metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ImportLogEntry:
    """
    Append-only roll-up for a category run or a whole batch.
    """

    category: str
    total_providers: int
    successful_imports: int
    failed_imports: int
    import_status: str
    error_details: str | None = None
    timestamp: datetime = field(default_factory=_utcnow)


@dataclass(frozen=True)
class ExecutionResult:
    """
    Outcome of one category (or single-endpoint) run.
    """

    category: str
    success: bool
    records: tuple[SourceRecord, ...] = ()
    error: str | None = None
    execution_time_ms: int = 0
    providers_fetched: int = 0
    providers_saved: int = 0
    duplicates_found: int = 0
    failed_records: int = 0
    used_fallback: bool = False
    retried_count: int = 0
    attempts: int = 0
    endpoint_id: uuid.UUID | None = None
    source_url: str | None = None
    synthetic: bool = False
    outcomes: tuple[ReconcileOutcome, ...] = ()


@dataclass(frozen=True)
class BatchSummary:
    """
    Totals across all category results of one batch.
    """

    total_categories: int
    successful_categories: int
    failed_categories: int
    categories_with_fallback: int
    total_fetched: int
    total_saved: int
    total_duplicates: int


@dataclass(frozen=True)
class BatchRunResult:
    """
    Per-category results of a batch plus its summary.
    """

    results: tuple[ExecutionResult, ...]
    summary: BatchSummary
