"""
app/schemas/acquisition.py

Response schemas for provider acquisition runs.
"""

from __future__ import annotations

import uuid

from pydantic import BaseModel, Field

from app.acquisition.provider_file import ProviderFileImportSummary
from app.domain.execution import BatchRunResult, ExecutionResult


class ReconcileOutcomeResponse(BaseModel):
    name: str
    action: str
    fingerprint: str
    provider_id: uuid.UUID | None = None
    error: str | None = None


class ExecutionResultResponse(BaseModel):
    """
    API response model for one category or endpoint run.
    """

    category: str
    success: bool
    error: str | None = None
    execution_time_ms: int = Field(..., ge=0)
    providers_fetched: int = Field(..., ge=0)
    providers_saved: int = Field(..., ge=0)
    duplicates_found: int = Field(..., ge=0)
    failed_records: int = Field(..., ge=0)
    used_fallback: bool
    retried_count: int = Field(..., ge=0)
    attempts: int = Field(..., ge=0)
    endpoint_id: uuid.UUID | None = None
    source_url: str | None = None
    synthetic: bool = False
    outcomes: list[ReconcileOutcomeResponse] = Field(default_factory=list)

    @classmethod
    def from_result(cls, result: ExecutionResult) -> ExecutionResultResponse:
        return cls(
            category=result.category,
            success=result.success,
            error=result.error,
            execution_time_ms=result.execution_time_ms,
            providers_fetched=result.providers_fetched,
            providers_saved=result.providers_saved,
            duplicates_found=result.duplicates_found,
            failed_records=result.failed_records,
            used_fallback=result.used_fallback,
            retried_count=result.retried_count,
            attempts=result.attempts,
            endpoint_id=result.endpoint_id,
            source_url=result.source_url,
            synthetic=result.synthetic,
            outcomes=[
                ReconcileOutcomeResponse(
                    name=outcome.name,
                    action=outcome.action,
                    fingerprint=outcome.fingerprint,
                    provider_id=outcome.provider_id,
                    error=outcome.error,
                )
                for outcome in result.outcomes
            ],
        )


class BatchSummaryResponse(BaseModel):
    total_categories: int = Field(..., ge=0)
    successful_categories: int = Field(..., ge=0)
    failed_categories: int = Field(..., ge=0)
    categories_with_fallback: int = Field(..., ge=0)
    total_fetched: int = Field(..., ge=0)
    total_saved: int = Field(..., ge=0)
    total_duplicates: int = Field(..., ge=0)


class BatchRunResponse(BaseModel):
    """
    API response model for a run across all categories.
    """

    results: list[ExecutionResultResponse]
    summary: BatchSummaryResponse

    @classmethod
    def from_batch(cls, batch: BatchRunResult) -> BatchRunResponse:
        summary = batch.summary
        return cls(
            results=[ExecutionResultResponse.from_result(result) for result in batch.results],
            summary=BatchSummaryResponse(
                total_categories=summary.total_categories,
                successful_categories=summary.successful_categories,
                failed_categories=summary.failed_categories,
                categories_with_fallback=summary.categories_with_fallback,
                total_fetched=summary.total_fetched,
                total_saved=summary.total_saved,
                total_duplicates=summary.total_duplicates,
            ),
        )


class ProviderFileIssueResponse(BaseModel):
    line_number: int = Field(..., ge=1)
    line: str
    reason: str


class ProviderFileImportResponse(BaseModel):
    """
    API response model for a provider file import.
    """

    path: str
    registered: int = Field(..., ge=0)
    skipped: int = Field(..., ge=0)
    issues: list[ProviderFileIssueResponse] = Field(default_factory=list)

    @classmethod
    def from_summary(cls, summary: ProviderFileImportSummary) -> ProviderFileImportResponse:
        return cls(
            path=summary.path,
            registered=summary.registered,
            skipped=summary.skipped,
            issues=[
                ProviderFileIssueResponse(
                    line_number=issue.line_number,
                    line=issue.line,
                    reason=issue.reason,
                )
                for issue in summary.issues
            ],
        )


class ProviderFileImportRequest(BaseModel):
    path: str | None = Field(default=None, description="Provider file path; defaults to ACQUISITION_PROVIDER_FILE")
