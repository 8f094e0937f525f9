"""
app/schemas package marker.
"""

from app.schemas.acquisition import (
    BatchRunResponse,
    BatchSummaryResponse,
    ExecutionResultResponse,
    ProviderFileImportRequest,
    ProviderFileImportResponse,
    ProviderFileIssueResponse,
    ReconcileOutcomeResponse,
)

__all__ = [
    "BatchRunResponse",
    "BatchSummaryResponse",
    "ExecutionResultResponse",
    "ProviderFileImportRequest",
    "ProviderFileImportResponse",
    "ProviderFileIssueResponse",
    "ReconcileOutcomeResponse",
]
