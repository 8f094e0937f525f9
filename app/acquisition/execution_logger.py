"""
app/acquisition/execution_logger.py

Append-only execution telemetry that never fails the pipeline.
"""

from __future__ import annotations

import logging

from app.acquisition.errors import LoggingError
from app.acquisition.logging_utils import log_event
from app.acquisition.store.base import AcquisitionStore
from app.domain.execution import ExecutionLogEntry, ImportLogEntry

logger = logging.getLogger(__name__)


class ExecutionLogger:
    """
    Write execution and import log entries through the store.

    Write failures are wrapped as LoggingError, reported on the
    application log and counted in `failures`; they are never raised.
    """

    def __init__(self, *, store: AcquisitionStore) -> None:
        self._store = store
        self.failures = 0

    def log_attempt(self, entry: ExecutionLogEntry) -> bool:
        try:
            self._store.insert_execution_log(entry)
        except Exception as exc:
            self._report(
                LoggingError(f"Could not write execution log for endpoint {entry.endpoint_id}: {exc}"),
                endpoint_id=entry.endpoint_id,
                status=entry.status,
            )
            return False
        return True

    def log_run(self, entry: ImportLogEntry) -> bool:
        try:
            self._store.insert_import_log(entry)
        except Exception as exc:
            self._report(
                LoggingError(f"Could not write import log for '{entry.category}': {exc}"),
                category=entry.category,
                status=entry.import_status,
            )
            return False
        return True

    def _report(self, error: LoggingError, **fields: object) -> None:
        self.failures += 1
        log_event(
            logger,
            logging.ERROR,
            "execution_log_write_failed",
            error=str(error),
            **fields,
        )
