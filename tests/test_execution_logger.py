from __future__ import annotations

import logging
import uuid

import pytest

from app.acquisition.execution_logger import ExecutionLogger
from app.domain.execution import ExecutionLogEntry, ExecutionStatus, ExecutionType, ImportLogEntry, ImportStatus
from tests.conftest import InMemoryAcquisitionStore


def _attempt() -> ExecutionLogEntry:
    return ExecutionLogEntry(
        endpoint_id=uuid.uuid4(),
        execution_type=ExecutionType.MANUAL,
        status=ExecutionStatus.SUCCESS,
        providers_fetched=3,
    )


def _run() -> ImportLogEntry:
    return ImportLogEntry(
        category="mobile",
        total_providers=3,
        successful_imports=3,
        failed_imports=0,
        import_status=ImportStatus.COMPLETED,
    )


class TestExecutionLogger:
    def test_writes_entries(self, store: InMemoryAcquisitionStore) -> None:
        execution_logger = ExecutionLogger(store=store)

        assert execution_logger.log_attempt(_attempt()) is True
        assert execution_logger.log_run(_run()) is True
        assert len(store.execution_logs) == 1
        assert len(store.import_logs) == 1
        assert execution_logger.failures == 0

    def test_write_failures_are_reported_not_raised(self, caplog: pytest.LogCaptureFixture) -> None:
        execution_logger = ExecutionLogger(store=InMemoryAcquisitionStore(fail_log_writes=True))

        with caplog.at_level(logging.ERROR):
            assert execution_logger.log_attempt(_attempt()) is False
            assert execution_logger.log_run(_run()) is False

        assert execution_logger.failures == 2
        assert caplog.text.count("execution_log_write_failed") == 2
