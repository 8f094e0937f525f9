"""
app/repositories/execution_log_repository.py

Append-only persistence for execution and import logs.
"""

from __future__ import annotations

from sqlalchemy.orm import Session

from app.domain.execution import ExecutionLogEntry, ImportLogEntry
from db.models.execution_log import EndpointExecutionLog, ImportLog


class ExecutionLogRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def add_execution_log(self, entry: ExecutionLogEntry) -> EndpointExecutionLog:
        row = EndpointExecutionLog(
            endpoint_id=entry.endpoint_id,
            execution_type=entry.execution_type,
            status=entry.status,
            providers_fetched=entry.providers_fetched,
            providers_saved=entry.providers_saved,
            duplicates_found=entry.duplicates_found,
            duration_ms=entry.duration_ms,
            error_message=entry.error_message,
            response_metadata=dict(entry.response_metadata) or None,
            executed_at=entry.timestamp,
        )
        self._session.add(row)
        self._session.flush()
        return row

    def add_import_log(self, entry: ImportLogEntry) -> ImportLog:
        row = ImportLog(
            category=entry.category,
            total_providers=entry.total_providers,
            successful_imports=entry.successful_imports,
            failed_imports=entry.failed_imports,
            import_status=entry.import_status,
            error_details=entry.error_details,
            logged_at=entry.timestamp,
        )
        self._session.add(row)
        self._session.flush()
        return row
