"""
tests/conftest.py

Shared test doubles: an in-memory acquisition store, scripted fetchers
and a recording sleeper. No database, no network.
"""

from __future__ import annotations

import copy
import uuid
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

import pytest

from app.acquisition.cancellation import CancellationToken
from app.acquisition.errors import StoreError
from app.acquisition.fetchers.base import Fetcher, FetchOutcome
from app.acquisition.store.base import AcquisitionStore, RawEndpointRow
from app.config import AcquisitionSettings
from app.domain.endpoint import Endpoint, EndpointKind, EndpointRegistration
from app.domain.execution import ExecutionLogEntry, ImportLogEntry
from app.domain.provider import SourceRecord, StoredProvider


# ---------------------------------------------------------------------------
# In-memory store
# ---------------------------------------------------------------------------


class InMemoryAcquisitionStore(AcquisitionStore):
    """
    Dict-backed AcquisitionStore with switchable failure modes.
    """

    def __init__(
        self,
        *,
        fail_on_insert_names: set[str] | None = None,
        fail_stats_updates: bool = False,
        fail_log_writes: bool = False,
    ) -> None:
        self.providers: dict[uuid.UUID, StoredProvider] = {}
        self.fingerprints: dict[tuple[uuid.UUID, str], uuid.UUID | None] = {}
        self.endpoints: dict[uuid.UUID, dict[str, Any]] = {}
        self.execution_logs: list[ExecutionLogEntry] = []
        self.import_logs: list[ImportLogEntry] = []
        self.update_calls: list[uuid.UUID] = []
        self.fail_on_insert_names = set(fail_on_insert_names or ())
        self.fail_stats_updates = fail_stats_updates
        self.fail_log_writes = fail_log_writes

    # --- providers -----------------------------------------------------

    def find_provider_by_name_and_category(self, name: str, category: str) -> StoredProvider | None:
        for provider in self.providers.values():
            if provider.name == name.strip() and provider.category == category:
                return provider
        return None

    def insert_provider(self, record: SourceRecord, *, category: str) -> StoredProvider | None:
        if record.name in self.fail_on_insert_names:
            raise StoreError(f"insert failed for {record.name}")
        if self.find_provider_by_name_and_category(record.name, category) is not None:
            return None
        now = datetime.now(timezone.utc)
        provider = StoredProvider(
            id=uuid.uuid4(),
            name=record.name.strip(),
            category=category,
            price=record.price,
            rating=record.rating,
            description=record.description,
            external_url=record.external_url,
            organization_number=record.organization_number,
            logo_url=record.logo_url,
            pros=tuple(record.pros),
            cons=tuple(record.cons),
            created_at=now,
            updated_at=now,
        )
        self.providers[provider.id] = provider
        return provider

    def update_provider(self, provider_id: uuid.UUID, record: SourceRecord) -> StoredProvider:
        existing = self.providers.get(provider_id)
        if existing is None:
            raise StoreError(f"provider {provider_id} missing")
        updated = StoredProvider(
            id=existing.id,
            name=existing.name,
            category=existing.category,
            price=record.price,
            rating=record.rating,
            description=record.description,
            external_url=record.external_url,
            organization_number=record.organization_number,
            logo_url=record.logo_url,
            pros=tuple(record.pros),
            cons=tuple(record.cons),
            created_at=existing.created_at,
            updated_at=datetime.now(timezone.utc),
        )
        self.providers[provider_id] = updated
        self.update_calls.append(provider_id)
        return updated

    def find_fingerprint(self, provider_id: uuid.UUID, content_hash: str) -> bool:
        return (provider_id, content_hash) in self.fingerprints

    def insert_fingerprint(
        self,
        provider_id: uuid.UUID,
        content_hash: str,
        *,
        endpoint_id: uuid.UUID | None,
    ) -> bool:
        key = (provider_id, content_hash)
        if key in self.fingerprints:
            return False
        self.fingerprints[key] = endpoint_id
        return True

    # --- endpoints -----------------------------------------------------

    def add_endpoint(
        self,
        *,
        category: str,
        name: str,
        url: str,
        kind: str = EndpointKind.SCRAPING,
        priority: int = 1,
        is_active: bool = True,
        scraping_config: Mapping[str, Any] | None = None,
        auth_config: Mapping[str, Any] | None = None,
    ) -> uuid.UUID:
        endpoint_id = uuid.uuid4()
        self.endpoints[endpoint_id] = {
            "id": endpoint_id,
            "category": category,
            "name": name,
            "provider_name": name,
            "endpoint_type": kind,
            "url": url,
            "priority": priority,
            "is_active": is_active,
            "auth_required": bool(auth_config),
            "auth_config": dict(auth_config) if auth_config else None,
            "scraping_config": dict(scraping_config) if scraping_config else None,
            "total_requests": 0,
            "failure_count": 0,
            "success_rate": 0.0,
            "last_success_at": None,
            "last_failure_at": None,
        }
        return endpoint_id

    def list_active_endpoints(self, category: str) -> list[RawEndpointRow]:
        return [
            dict(row)
            for row in self.endpoints.values()
            if row["category"] == category and row["is_active"]
        ]

    def get_endpoint(self, endpoint_id: uuid.UUID) -> RawEndpointRow | None:
        row = self.endpoints.get(endpoint_id)
        return dict(row) if row is not None else None

    def update_endpoint_stats(
        self,
        endpoint_id: uuid.UUID,
        *,
        success: bool,
        timestamp: datetime,
    ) -> None:
        if self.fail_stats_updates:
            raise StoreError("stats update failed")
        row = self.endpoints.get(endpoint_id)
        if row is None:
            raise StoreError(f"endpoint {endpoint_id} missing")
        total = row["total_requests"]
        failures = row["failure_count"]
        row["success_rate"] = (total - failures + (1 if success else 0)) / (total + 1)
        row["total_requests"] = total + 1
        if success:
            row["last_success_at"] = timestamp
        else:
            row["failure_count"] = failures + 1
            row["last_failure_at"] = timestamp

    def upsert_endpoint(self, registration: EndpointRegistration) -> RawEndpointRow:
        for row in self.endpoints.values():
            if row["name"] == registration.name and row["category"] == registration.category:
                row.update(
                    url=registration.url,
                    endpoint_type=registration.kind,
                    priority=registration.priority,
                    provider_name=registration.provider_name,
                    scraping_config=registration.scraping_config.as_dict(),
                    is_active=True,
                )
                return dict(row)
        endpoint_id = self.add_endpoint(
            category=registration.category,
            name=registration.name,
            url=registration.url,
            kind=registration.kind,
            priority=registration.priority,
            scraping_config=registration.scraping_config.as_dict(),
        )
        self.endpoints[endpoint_id]["provider_name"] = registration.provider_name
        return dict(self.endpoints[endpoint_id])

    # --- logs ----------------------------------------------------------

    def insert_execution_log(self, entry: ExecutionLogEntry) -> None:
        if self.fail_log_writes:
            raise StoreError("execution log table unavailable")
        self.execution_logs.append(entry)

    def insert_import_log(self, entry: ImportLogEntry) -> None:
        if self.fail_log_writes:
            raise StoreError("import log table unavailable")
        self.import_logs.append(entry)

    @contextmanager
    def unit_of_work(self) -> Iterator[None]:
        providers = copy.copy(self.providers)
        fingerprints = copy.copy(self.fingerprints)
        try:
            yield
        except Exception:
            self.providers = providers
            self.fingerprints = fingerprints
            raise


# ---------------------------------------------------------------------------
# Fetch doubles
# ---------------------------------------------------------------------------


@dataclass
class ScriptedFetcher(Fetcher):
    """
    Replays scripted outcomes per URL in order; the last one repeats.

    Script items are FetchOutcome instances, lists of SourceRecords, or
    exceptions to raise.
    """

    kind: str = EndpointKind.SCRAPING
    script: dict[str, list[Any]] = field(default_factory=dict)
    calls: list[tuple[uuid.UUID, str]] = field(default_factory=list)

    def fetch(
        self,
        endpoint: Endpoint,
        *,
        url: str | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> FetchOutcome:
        target = url or endpoint.url
        self.calls.append((endpoint.id, target))
        steps = self.script.get(target)
        if not steps:
            return FetchOutcome(error=f"nothing scripted for {target}")
        step = steps.pop(0) if len(steps) > 1 else steps[0]
        if isinstance(step, BaseException):
            raise step
        if isinstance(step, FetchOutcome):
            return step
        return FetchOutcome(records=list(step))

    def urls_called(self) -> list[str]:
        return [url for _, url in self.calls]


class RecordingSleep:
    def __init__(self) -> None:
        self.calls: list[float] = []

    def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


def make_record(name: str, **overrides: Any) -> SourceRecord:
    values: dict[str, Any] = {
        "price": 299.0,
        "rating": 4.2,
        "description": f"{name} description",
        "external_url": f"https://{name.lower().replace(' ', '-')}.example.no",
    }
    values.update(overrides)
    return SourceRecord(name=name, **values)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def store() -> InMemoryAcquisitionStore:
    return InMemoryAcquisitionStore()


@pytest.fixture()
def sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture()
def settings() -> AcquisitionSettings:
    return AcquisitionSettings()
