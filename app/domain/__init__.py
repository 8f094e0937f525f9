"""
app/domain package marker.
"""

from app.domain.categories import ALL_CATEGORIES, ProviderCategory, normalize_category
from app.domain.endpoint import Endpoint, EndpointKind, EndpointRegistration, ScrapingConfig
from app.domain.execution import (
    BatchRunResult,
    BatchSummary,
    ExecutionLogEntry,
    ExecutionResult,
    ExecutionStatus,
    ExecutionType,
    ImportLogEntry,
    ImportStatus,
    ReconcileAction,
    ReconcileOutcome,
)
from app.domain.provider import SourceRecord, StoredProvider

__all__ = [
    "ALL_CATEGORIES",
    "BatchRunResult",
    "BatchSummary",
    "Endpoint",
    "EndpointKind",
    "EndpointRegistration",
    "ExecutionLogEntry",
    "ExecutionResult",
    "ExecutionStatus",
    "ExecutionType",
    "ImportLogEntry",
    "ImportStatus",
    "ProviderCategory",
    "ReconcileAction",
    "ReconcileOutcome",
    "ScrapingConfig",
    "SourceRecord",
    "StoredProvider",
    "normalize_category",
]
