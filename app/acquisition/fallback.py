"""
app/acquisition/fallback.py

Retry/fallback orchestration across a category's endpoints.

Endpoints are tried strictly in priority order. Each endpoint gets one
attempt plus its retry budget with exponential backoff, then each of its
fallback URLs once. The first attempt that yields at least one
non-synthetic record ends the chain.
"""

from __future__ import annotations

import logging
import time
import uuid
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime, timezone

from app.acquisition.cancellation import CancellationToken, Sleeper, pause
from app.acquisition.errors import AggregateFetchError, FetchError, RunCancelledError, StoreError
from app.acquisition.fetchers.base import Fetcher
from app.acquisition.fetchers.registry import FetcherRegistry
from app.acquisition.logging_utils import log_event
from app.acquisition.registry import EndpointRegistry
from app.domain.endpoint import Endpoint
from app.domain.execution import ExecutionStatus
from app.domain.provider import SourceRecord

logger = logging.getLogger(__name__)


def backoff_seconds(attempt: int, *, base_seconds: float = 1.0, max_seconds: float = 10.0) -> float:
    """
    Wait after the 0-based `attempt` failed: base * 2**attempt, capped.
    """

    return min(base_seconds * (2**attempt), max_seconds)


@dataclass(frozen=True)
class EndpointAttemptReport:
    """
    How one endpoint fared within a fallback chain.
    """

    endpoint_id: uuid.UUID
    status: str
    attempts: int
    retries: int
    duration_ms: int
    records: int = 0
    error: str | None = None
    url: str | None = None
    used_fallback_url: bool = False


@dataclass(frozen=True)
class FallbackOutcome:
    """
    Records from the winning endpoint plus chain metadata.
    """

    category: str
    records: list[SourceRecord]
    endpoint: Endpoint
    source_url: str
    used_fallback: bool
    retried_count: int
    attempts: int
    synthetic: bool = False
    reports: list[EndpointAttemptReport] = field(default_factory=list)


@dataclass
class _AttemptResult:
    records: list[SourceRecord] = field(default_factory=list)
    error: str | None = None
    timed_out: bool = False
    unexpected: bool = False
    synthetic_records: list[SourceRecord] = field(default_factory=list)


@dataclass
class _EndpointTrial:
    report: EndpointAttemptReport
    records: list[SourceRecord]
    attempts: int
    retries: int
    error: str | None
    synthetic_records: list[SourceRecord]


class FallbackOrchestrator:
    """
    Drive endpoints through bounded retries and ordered fallback.
    """

    def __init__(
        self,
        *,
        fetchers: FetcherRegistry,
        registry: EndpointRegistry,
        default_max_retries: int = 3,
        backoff_base_seconds: float = 1.0,
        backoff_max_seconds: float = 10.0,
        endpoint_cooldown_seconds: float = 1.0,
        accept_degraded: bool = False,
        sleep: Sleeper | None = None,
    ) -> None:
        self._fetchers = fetchers
        self._registry = registry
        self._default_max_retries = max(0, default_max_retries)
        self._backoff_base_seconds = backoff_base_seconds
        self._backoff_max_seconds = backoff_max_seconds
        self._endpoint_cooldown_seconds = endpoint_cooldown_seconds
        self._accept_degraded = accept_degraded
        self._sleep = sleep

    def execute(
        self,
        category: str,
        endpoints: Sequence[Endpoint],
        *,
        cancel_token: CancellationToken | None = None,
    ) -> FallbackOutcome:
        """
        Run the chain and return the first endpoint's records that succeed.

        Raises AggregateFetchError when every endpoint and fallback URL is
        exhausted, and RunCancelledError when cancelled between attempts.
        Both carry the reports of the endpoints already tried.
        """

        attempts = 0
        retried = 0
        last_error: str | None = None
        reports: list[EndpointAttemptReport] = []
        degraded: tuple[Endpoint, list[SourceRecord]] | None = None

        for index, endpoint in enumerate(endpoints):
            try:
                if index > 0:
                    pause(self._endpoint_cooldown_seconds, sleep=self._sleep, cancel_token=cancel_token)
                trial = self._try_endpoint(endpoint, cancel_token=cancel_token)
            except RunCancelledError as exc:
                exc.attempts += attempts
                exc.retried_count += retried
                exc.reports = reports + exc.reports
                log_event(
                    logger,
                    logging.WARNING,
                    "fallback_chain_cancelled",
                    category=category,
                    endpoints_tried=len(exc.reports),
                    attempts=exc.attempts,
                    reason=str(exc),
                )
                raise

            attempts += trial.attempts
            retried += trial.retries
            reports.append(trial.report)

            if trial.records:
                outcome = FallbackOutcome(
                    category=category,
                    records=trial.records,
                    endpoint=endpoint,
                    source_url=trial.report.url or endpoint.url,
                    used_fallback=index > 0 or trial.report.used_fallback_url,
                    retried_count=retried,
                    attempts=attempts,
                    reports=reports,
                )
                log_event(
                    logger,
                    logging.INFO,
                    "fallback_chain_succeeded",
                    category=category,
                    endpoint_id=endpoint.id,
                    endpoint_index=index,
                    used_fallback=outcome.used_fallback,
                    retried_count=retried,
                    attempts=attempts,
                    records=len(trial.records),
                )
                return outcome

            last_error = trial.error or last_error
            if trial.synthetic_records and degraded is None:
                degraded = (endpoint, trial.synthetic_records)

        if self._accept_degraded and degraded is not None:
            endpoint, records = degraded
            log_event(
                logger,
                logging.WARNING,
                "fallback_chain_degraded",
                category=category,
                endpoint_id=endpoint.id,
                attempts=attempts,
                last_error=last_error,
            )
            return FallbackOutcome(
                category=category,
                records=records,
                endpoint=endpoint,
                source_url=endpoint.url,
                used_fallback=True,
                retried_count=retried,
                attempts=attempts,
                synthetic=True,
                reports=reports,
            )

        log_event(
            logger,
            logging.ERROR,
            "fallback_chain_exhausted",
            category=category,
            endpoints_tried=len(reports),
            attempts=attempts,
            last_error=last_error,
        )
        raise AggregateFetchError(
            category=category,
            last_error=last_error,
            attempts=attempts,
            endpoints_tried=len(reports),
            retried_count=retried,
            reports=reports,
        )

    def _try_endpoint(
        self,
        endpoint: Endpoint,
        *,
        cancel_token: CancellationToken | None,
    ) -> _EndpointTrial:
        started = time.monotonic()
        try:
            fetcher = self._fetchers.resolve(endpoint)
        except ValueError as exc:
            return self._trial(
                endpoint,
                started=started,
                status=ExecutionStatus.ERROR,
                attempts=0,
                retries=0,
                error=str(exc),
            )

        budget = endpoint.retry_budget(self._default_max_retries)
        attempts = 0
        retries = 0
        last: _AttemptResult | None = None
        synthetic_records: list[SourceRecord] = []

        try:
            for attempt in range(budget + 1):
                if attempt > 0:
                    pause(
                        backoff_seconds(
                            attempt - 1,
                            base_seconds=self._backoff_base_seconds,
                            max_seconds=self._backoff_max_seconds,
                        ),
                        sleep=self._sleep,
                        cancel_token=cancel_token,
                    )
                    retries += 1
                elif cancel_token is not None:
                    cancel_token.raise_if_cancelled()

                last = self._attempt(fetcher, endpoint, url=None, cancel_token=cancel_token)
                attempts += 1
                synthetic_records = synthetic_records or last.synthetic_records
                if last.records:
                    return self._trial(
                        endpoint,
                        started=started,
                        status=ExecutionStatus.SUCCESS,
                        attempts=attempts,
                        retries=retries,
                        records=last.records,
                        url=endpoint.url,
                    )

            for fallback_url in endpoint.fallback_urls:
                if cancel_token is not None:
                    cancel_token.raise_if_cancelled()
                last = self._attempt(fetcher, endpoint, url=fallback_url, cancel_token=cancel_token)
                attempts += 1
                synthetic_records = synthetic_records or last.synthetic_records
                if last.records:
                    return self._trial(
                        endpoint,
                        started=started,
                        status=ExecutionStatus.SUCCESS,
                        attempts=attempts,
                        retries=retries,
                        records=last.records,
                        url=fallback_url,
                        used_fallback_url=True,
                    )
        except RunCancelledError as exc:
            # An endpoint interrupted after real fetches still gets reported.
            if attempts:
                trial = self._trial(
                    endpoint,
                    started=started,
                    status=ExecutionStatus.FAILURE,
                    attempts=attempts,
                    retries=retries,
                    error=last.error if last is not None and last.error else str(exc),
                )
                exc.attempts = attempts
                exc.retried_count = retries
                exc.reports = [trial.report]
            raise

        status = ExecutionStatus.FAILURE
        if last is not None and last.unexpected:
            status = ExecutionStatus.ERROR
        elif last is not None and last.timed_out:
            status = ExecutionStatus.TIMEOUT
        return self._trial(
            endpoint,
            started=started,
            status=status,
            attempts=attempts,
            retries=retries,
            error=last.error if last is not None else None,
            synthetic_records=synthetic_records,
        )

    def _attempt(
        self,
        fetcher: Fetcher,
        endpoint: Endpoint,
        *,
        url: str | None,
        cancel_token: CancellationToken | None,
    ) -> _AttemptResult:
        target = url or endpoint.url
        try:
            outcome = fetcher.fetch(endpoint, url=url, cancel_token=cancel_token)
        except RunCancelledError:
            raise
        except FetchError as exc:
            result = _AttemptResult(error=str(exc), timed_out=exc.timed_out)
        except Exception as exc:
            result = _AttemptResult(error=f"{type(exc).__name__}: {exc}", unexpected=True)
        else:
            if outcome.synthetic:
                result = _AttemptResult(
                    error=outcome.error or "Source returned placeholder data only.",
                    timed_out=outcome.timed_out,
                    synthetic_records=list(outcome.records),
                )
            elif outcome.succeeded:
                result = _AttemptResult(records=list(outcome.records))
            elif outcome.error is not None:
                result = _AttemptResult(error=outcome.error, timed_out=outcome.timed_out)
            else:
                result = _AttemptResult(error=f"No records returned from {target}")

        success = bool(result.records)
        self._record_attempt(endpoint, success=success)
        log_event(
            logger,
            logging.INFO if success else logging.WARNING,
            "fetch_attempt_succeeded" if success else "fetch_attempt_failed",
            category=endpoint.category,
            endpoint_id=endpoint.id,
            url=target,
            records=len(result.records),
            error=result.error,
            timed_out=result.timed_out,
        )
        return result

    def _record_attempt(self, endpoint: Endpoint, *, success: bool) -> None:
        try:
            self._registry.record_attempt(endpoint.id, success, datetime.now(timezone.utc))
        except StoreError as exc:
            log_event(
                logger,
                logging.WARNING,
                "endpoint_stats_update_failed",
                endpoint_id=endpoint.id,
                error=str(exc),
            )

    @staticmethod
    def _trial(
        endpoint: Endpoint,
        *,
        started: float,
        status: str,
        attempts: int,
        retries: int,
        records: list[SourceRecord] | None = None,
        error: str | None = None,
        url: str | None = None,
        used_fallback_url: bool = False,
        synthetic_records: list[SourceRecord] | None = None,
    ) -> _EndpointTrial:
        records = records or []
        report = EndpointAttemptReport(
            endpoint_id=endpoint.id,
            status=status,
            attempts=attempts,
            retries=retries,
            duration_ms=int((time.monotonic() - started) * 1000),
            records=len(records),
            error=error,
            url=url,
            used_fallback_url=used_fallback_url,
        )
        return _EndpointTrial(
            report=report,
            records=records,
            attempts=attempts,
            retries=retries,
            error=error,
            synthetic_records=synthetic_records or [],
        )
