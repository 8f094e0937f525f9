"""
SQLAlchemy-backed acquisition store.
"""

from __future__ import annotations

import uuid
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from datetime import datetime
from typing import Any, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.acquisition.errors import StoreError
from app.acquisition.store.base import AcquisitionStore, RawEndpointRow
from app.domain.endpoint import EndpointRegistration
from app.domain.execution import ExecutionLogEntry, ImportLogEntry
from app.domain.provider import SourceRecord, StoredProvider
from app.repositories.endpoint_repository import EndpointRepository
from app.repositories.execution_log_repository import ExecutionLogRepository
from app.repositories.provider_repository import ProviderRepository
from db.models.provider import Provider
from db.models.provider_endpoint import ProviderEndpoint

T = TypeVar("T")


def _stored_provider(row: Provider) -> StoredProvider:
    return StoredProvider(
        id=row.id,
        name=row.name,
        category=row.category,
        price=row.price,
        rating=row.rating,
        description=row.description,
        external_url=row.external_url,
        organization_number=row.organization_number,
        logo_url=row.logo_url,
        pros=tuple(row.pros or ()),
        cons=tuple(row.cons or ()),
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _endpoint_row(row: ProviderEndpoint) -> dict[str, Any]:
    return {
        "id": row.id,
        "category": row.category,
        "name": row.name,
        "provider_name": row.provider_name,
        "endpoint_type": row.endpoint_type,
        "url": row.url,
        "priority": row.priority,
        "is_active": row.is_active,
        "auth_required": row.auth_required,
        "auth_config": row.auth_config,
        "scraping_config": row.scraping_config,
        "total_requests": row.total_requests,
        "failure_count": row.failure_count,
        "success_rate": row.success_rate,
        "last_success_at": row.last_success_at,
        "last_failure_at": row.last_failure_at,
    }


class SQLAlchemyAcquisitionStore(AcquisitionStore):
    """
    Persist acquisition state through repositories and one DB session.

    Writes outside `unit_of_work()` commit immediately; writes inside it
    commit together when the block exits.
    """

    def __init__(self, *, session: Session) -> None:
        self._session = session
        self._providers = ProviderRepository(session)
        self._endpoints = EndpointRepository(session)
        self._logs = ExecutionLogRepository(session)
        self._depth = 0

    @contextmanager
    def unit_of_work(self) -> Iterator[None]:
        self._depth += 1
        try:
            yield
            if self._depth == 1:
                self._session.commit()
        except SQLAlchemyError as exc:
            self._session.rollback()
            raise StoreError(f"Unit of work failed: {exc}") from exc
        except Exception:
            self._session.rollback()
            raise
        finally:
            self._depth -= 1

    def find_provider_by_name_and_category(self, name: str, category: str) -> StoredProvider | None:
        row = self._read("find_provider", lambda: self._providers.find_by_name_and_category(name, category))
        return _stored_provider(row) if row is not None else None

    def insert_provider(self, record: SourceRecord, *, category: str) -> StoredProvider | None:
        row = self._write("insert_provider", lambda: self._providers.insert_if_absent(record, category=category))
        return _stored_provider(row) if row is not None else None

    def update_provider(self, provider_id: uuid.UUID, record: SourceRecord) -> StoredProvider:
        row = self._write("update_provider", lambda: self._providers.update_attributes(provider_id, record))
        return _stored_provider(row)

    def find_fingerprint(self, provider_id: uuid.UUID, content_hash: str) -> bool:
        return self._read(
            "find_fingerprint",
            lambda: self._providers.fingerprint_exists(provider_id, content_hash),
        )

    def insert_fingerprint(
        self,
        provider_id: uuid.UUID,
        content_hash: str,
        *,
        endpoint_id: uuid.UUID | None,
    ) -> bool:
        return self._write(
            "insert_fingerprint",
            lambda: self._providers.insert_fingerprint_if_absent(
                provider_id,
                content_hash,
                endpoint_id=endpoint_id,
            ),
        )

    def list_active_endpoints(self, category: str) -> list[RawEndpointRow]:
        rows = self._read("list_active_endpoints", lambda: self._endpoints.list_active(category))
        return [_endpoint_row(row) for row in rows]

    def get_endpoint(self, endpoint_id: uuid.UUID) -> RawEndpointRow | None:
        row = self._read("get_endpoint", lambda: self._endpoints.get(endpoint_id))
        return _endpoint_row(row) if row is not None else None

    def update_endpoint_stats(
        self,
        endpoint_id: uuid.UUID,
        *,
        success: bool,
        timestamp: datetime,
    ) -> None:
        updated = self._write(
            "update_endpoint_stats",
            lambda: self._endpoints.record_attempt(endpoint_id, success=success, timestamp=timestamp),
        )
        if updated == 0:
            raise StoreError(f"update_endpoint_stats failed: endpoint {endpoint_id} does not exist.")

    def upsert_endpoint(self, registration: EndpointRegistration) -> RawEndpointRow:
        row = self._write("upsert_endpoint", lambda: self._endpoints.upsert(registration))
        return _endpoint_row(row)

    def insert_execution_log(self, entry: ExecutionLogEntry) -> None:
        self._write("insert_execution_log", lambda: self._logs.add_execution_log(entry))

    def insert_import_log(self, entry: ImportLogEntry) -> None:
        self._write("insert_import_log", lambda: self._logs.add_import_log(entry))

    def _read(self, operation: str, action: Callable[[], T]) -> T:
        try:
            return action()
        except SQLAlchemyError as exc:
            if self._depth == 0:
                self._session.rollback()
            raise StoreError(f"{operation} failed: {exc}") from exc

    def _write(self, operation: str, action: Callable[[], T]) -> T:
        try:
            result = action()
            if self._depth == 0:
                self._session.commit()
            return result
        except SQLAlchemyError as exc:
            if self._depth == 0:
                self._session.rollback()
            raise StoreError(f"{operation} failed: {exc}") from exc
