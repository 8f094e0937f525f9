"""
app/acquisition/pipeline.py

Category runs: registry -> fallback chain -> reconciliation -> logs.
"""

from __future__ import annotations

import logging
import time
import uuid
from collections.abc import Sequence

from app.acquisition.cancellation import CancellationToken, Sleeper, pause
from app.acquisition.errors import AggregateFetchError, RunCancelledError, StoreError
from app.acquisition.execution_logger import ExecutionLogger
from app.acquisition.fallback import EndpointAttemptReport, FallbackOrchestrator, FallbackOutcome
from app.acquisition.fetchers.registry import FetcherRegistry
from app.acquisition.logging_utils import log_event
from app.acquisition.reconciler import Reconciler
from app.acquisition.registry import EndpointRegistry, resolve_category
from app.acquisition.store.base import AcquisitionStore
from app.config import AcquisitionSettings
from app.domain.categories import ALL_CATEGORIES
from app.domain.endpoint import Endpoint
from app.domain.execution import (
    BATCH_IMPORT_CATEGORY,
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

logger = logging.getLogger(__name__)


def _elapsed_ms(started: float) -> int:
    return int((time.monotonic() - started) * 1000)


def summarize_results(results: Sequence[ExecutionResult]) -> BatchSummary:
    successful = sum(1 for result in results if result.success)
    return BatchSummary(
        total_categories=len(results),
        successful_categories=successful,
        failed_categories=len(results) - successful,
        categories_with_fallback=sum(1 for result in results if result.used_fallback),
        total_fetched=sum(result.providers_fetched for result in results),
        total_saved=sum(result.providers_saved for result in results),
        total_duplicates=sum(result.duplicates_found for result in results),
    )


def _batch_error_details(failed: Sequence[ExecutionResult]) -> str | None:
    if not failed:
        return None
    details = "; ".join(f"{result.category}: {result.error}" for result in failed)
    return f"Failed categories ({len(failed)}): {details}"


class AcquisitionPipeline:
    """
    Run acquisition for one category, one endpoint, or every category.

    Category runs never raise for source or store trouble; they come back
    as failed ExecutionResults. Only an unknown category or endpoint raises
    NotFoundError.
    """

    def __init__(
        self,
        *,
        store: AcquisitionStore,
        fetchers: FetcherRegistry,
        settings: AcquisitionSettings | None = None,
        sleep: Sleeper | None = None,
        categories: Sequence[str] = ALL_CATEGORIES,
    ) -> None:
        settings = settings or AcquisitionSettings()
        self.registry = EndpointRegistry(store=store)
        self.execution_logger = ExecutionLogger(store=store)
        self._reconciler = Reconciler(store=store)
        self._orchestrator = FallbackOrchestrator(
            fetchers=fetchers,
            registry=self.registry,
            default_max_retries=settings.default_max_retries,
            backoff_base_seconds=settings.backoff_base_seconds,
            backoff_max_seconds=settings.backoff_max_seconds,
            endpoint_cooldown_seconds=settings.endpoint_cooldown_seconds,
            accept_degraded=settings.accept_degraded,
            sleep=sleep,
        )
        self._category_cooldown_seconds = settings.category_cooldown_seconds
        self._categories = tuple(categories)
        self._sleep = sleep

    def run_category(
        self,
        category: str,
        *,
        execution_type: str = ExecutionType.MANUAL,
        cancel_token: CancellationToken | None = None,
    ) -> ExecutionResult:
        resolved = resolve_category(category)
        started = time.monotonic()
        try:
            endpoints = self.registry.list_active_endpoints(resolved)
        except StoreError as exc:
            return self._failed(
                resolved,
                started=started,
                error=f"Could not load endpoints: {exc}",
            )

        if not endpoints:
            return self._failed(
                resolved,
                started=started,
                error=f"No active endpoints configured for category '{resolved}'.",
            )

        return self._run(
            resolved,
            endpoints,
            started=started,
            execution_type=execution_type,
            cancel_token=cancel_token,
        )

    def run_endpoint(
        self,
        endpoint_id: uuid.UUID,
        *,
        execution_type: str = ExecutionType.MANUAL,
        cancel_token: CancellationToken | None = None,
    ) -> ExecutionResult:
        """
        Run a single endpoint with its retries and fallback URLs.
        """

        endpoint = self.registry.get_endpoint(endpoint_id)
        return self._run(
            endpoint.category,
            [endpoint],
            started=time.monotonic(),
            execution_type=execution_type,
            cancel_token=cancel_token,
        )

    def run_all_categories(
        self,
        *,
        execution_type: str = ExecutionType.SCHEDULED,
        cancel_token: CancellationToken | None = None,
    ) -> BatchRunResult:
        """
        Run every category in order, collecting results and continuing
        past failures.
        """

        results: list[ExecutionResult] = []
        cancelled_reason: str | None = None

        for index, category in enumerate(self._categories):
            if cancelled_reason is None and index > 0:
                try:
                    pause(self._category_cooldown_seconds, sleep=self._sleep, cancel_token=cancel_token)
                except RunCancelledError as exc:
                    cancelled_reason = str(exc)

            if cancelled_reason is not None:
                results.append(ExecutionResult(category=category, success=False, error=cancelled_reason))
                continue

            try:
                result = self.run_category(category, execution_type=execution_type, cancel_token=cancel_token)
            except Exception as exc:
                log_event(
                    logger,
                    logging.ERROR,
                    "category_run_crashed",
                    category=category,
                    error=f"{type(exc).__name__}: {exc}",
                )
                result = ExecutionResult(category=category, success=False, error=str(exc))
            results.append(result)

        summary = summarize_results(results)
        failed = [result for result in results if not result.success]
        self.execution_logger.log_run(
            ImportLogEntry(
                category=BATCH_IMPORT_CATEGORY,
                total_providers=summary.total_fetched,
                successful_imports=summary.total_saved,
                failed_imports=sum(result.failed_records for result in results),
                import_status=ImportStatus.COMPLETED if summary.successful_categories else ImportStatus.FAILED,
                error_details=_batch_error_details(failed),
            )
        )
        log_event(
            logger,
            logging.INFO,
            "batch_run_completed",
            total_categories=summary.total_categories,
            successful_categories=summary.successful_categories,
            failed_categories=summary.failed_categories,
            categories_with_fallback=summary.categories_with_fallback,
            total_fetched=summary.total_fetched,
            total_saved=summary.total_saved,
            total_duplicates=summary.total_duplicates,
        )
        return BatchRunResult(results=tuple(results), summary=summary)

    def _run(
        self,
        category: str,
        endpoints: Sequence[Endpoint],
        *,
        started: float,
        execution_type: str,
        cancel_token: CancellationToken | None,
    ) -> ExecutionResult:
        try:
            outcome = self._orchestrator.execute(category, endpoints, cancel_token=cancel_token)
        except AggregateFetchError as exc:
            self._log_reports(exc.reports, execution_type=execution_type, category=category)
            return self._failed(
                category,
                started=started,
                error=str(exc),
                retried_count=exc.retried_count,
                attempts=exc.attempts,
            )
        except RunCancelledError as exc:
            log_event(logger, logging.WARNING, "category_run_cancelled", category=category, error=str(exc))
            self._log_reports(exc.reports, execution_type=execution_type, category=category)
            return self._failed(
                category,
                started=started,
                error=str(exc),
                retried_count=exc.retried_count,
                attempts=exc.attempts,
            )

        if outcome.synthetic:
            outcomes: list[ReconcileOutcome] = []
        else:
            outcomes = self._reconciler.reconcile(
                outcome.records,
                category=category,
                endpoint_id=outcome.endpoint.id,
            )

        inserted = sum(1 for item in outcomes if item.action == ReconcileAction.INSERTED)
        updated = sum(1 for item in outcomes if item.action == ReconcileAction.UPDATED)
        duplicates = sum(1 for item in outcomes if item.action == ReconcileAction.DUPLICATE)
        failed_records = sum(1 for item in outcomes if item.action == ReconcileAction.FAILED)
        fetched = len(outcome.records)
        saved = inserted + updated

        if outcome.synthetic:
            success = True
            error = self._last_error(outcome.reports)
        else:
            success = failed_records < fetched
            error = None if success else f"All {fetched} records failed to persist."

        self._log_reports(
            outcome.reports,
            execution_type=execution_type,
            category=category,
            winner=None if outcome.synthetic else outcome,
            saved=saved,
            duplicates=duplicates,
        )
        result = ExecutionResult(
            category=category,
            success=success,
            records=tuple(outcome.records),
            error=error,
            execution_time_ms=_elapsed_ms(started),
            providers_fetched=fetched,
            providers_saved=saved,
            duplicates_found=duplicates,
            failed_records=failed_records,
            used_fallback=outcome.used_fallback,
            retried_count=outcome.retried_count,
            attempts=outcome.attempts,
            endpoint_id=outcome.endpoint.id,
            source_url=outcome.source_url,
            synthetic=outcome.synthetic,
            outcomes=tuple(outcomes),
        )
        self._log_import(result)
        log_event(
            logger,
            logging.INFO if success else logging.WARNING,
            "category_run_completed",
            category=category,
            success=success,
            endpoint_id=outcome.endpoint.id,
            fetched=fetched,
            inserted=inserted,
            updated=updated,
            duplicates=duplicates,
            failed=failed_records,
            used_fallback=outcome.used_fallback,
            retried_count=outcome.retried_count,
            synthetic=outcome.synthetic,
            duration_ms=result.execution_time_ms,
        )
        return result

    def _failed(
        self,
        category: str,
        *,
        started: float,
        error: str,
        retried_count: int = 0,
        attempts: int = 0,
    ) -> ExecutionResult:
        result = ExecutionResult(
            category=category,
            success=False,
            error=error,
            execution_time_ms=_elapsed_ms(started),
            retried_count=retried_count,
            attempts=attempts,
        )
        self._log_import(result)
        log_event(logger, logging.WARNING, "category_run_failed", category=category, error=error)
        return result

    def _log_import(self, result: ExecutionResult) -> None:
        self.execution_logger.log_run(
            ImportLogEntry(
                category=result.category,
                total_providers=result.providers_fetched,
                successful_imports=result.providers_saved,
                failed_imports=result.failed_records,
                import_status=ImportStatus.COMPLETED if result.success else ImportStatus.FAILED,
                error_details=result.error,
            )
        )

    def _log_reports(
        self,
        reports: Sequence[EndpointAttemptReport],
        *,
        execution_type: str,
        category: str,
        winner: FallbackOutcome | None = None,
        saved: int = 0,
        duplicates: int = 0,
    ) -> None:
        for index, report in enumerate(reports):
            is_winner = (
                winner is not None
                and index == len(reports) - 1
                and report.endpoint_id == winner.endpoint.id
            )
            metadata = {
                "category": category,
                "attempts": report.attempts,
                "retries": report.retries,
                "url": report.url,
                "used_fallback_url": report.used_fallback_url,
            }
            self.execution_logger.log_attempt(
                ExecutionLogEntry(
                    endpoint_id=report.endpoint_id,
                    execution_type=execution_type if index == 0 else ExecutionType.FALLBACK,
                    status=report.status,
                    providers_fetched=len(winner.records) if is_winner else report.records,
                    providers_saved=saved if is_winner else 0,
                    duplicates_found=duplicates if is_winner else 0,
                    duration_ms=report.duration_ms,
                    error_message=report.error,
                    response_metadata=metadata,
                )
            )

    @staticmethod
    def _last_error(reports: Sequence[EndpointAttemptReport]) -> str | None:
        for report in reversed(reports):
            if report.status != ExecutionStatus.SUCCESS and report.error:
                return report.error
        return None
