"""
Store interface the acquisition core depends on.

Every method reports persistence failures as StoreError. Endpoint reads
return raw rows; only the endpoint registry turns them into Endpoints.
"""

from __future__ import annotations

import uuid
from abc import ABC, abstractmethod
from collections.abc import Mapping
from contextlib import AbstractContextManager
from datetime import datetime
from typing import Any

from app.domain.endpoint import EndpointRegistration
from app.domain.execution import ExecutionLogEntry, ImportLogEntry
from app.domain.provider import SourceRecord, StoredProvider

RawEndpointRow = Mapping[str, Any]


class AcquisitionStore(ABC):
    """
    Relational store abstraction for providers, endpoints and logs.
    """

    @abstractmethod
    def find_provider_by_name_and_category(self, name: str, category: str) -> StoredProvider | None:
        """Return the stored provider for the natural key, if any."""

    @abstractmethod
    def insert_provider(self, record: SourceRecord, *, category: str) -> StoredProvider | None:
        """
        Insert a provider. Returns None when the natural key already exists
        (a concurrent writer won the race).
        """

    @abstractmethod
    def update_provider(self, provider_id: uuid.UUID, record: SourceRecord) -> StoredProvider:
        """Overwrite the provider's mutable attributes and bump updated_at."""

    @abstractmethod
    def find_fingerprint(self, provider_id: uuid.UUID, content_hash: str) -> bool:
        """Whether this fingerprint was already recorded for the provider."""

    @abstractmethod
    def insert_fingerprint(
        self,
        provider_id: uuid.UUID,
        content_hash: str,
        *,
        endpoint_id: uuid.UUID | None,
    ) -> bool:
        """Record a fingerprint. Returns False if it already existed."""

    @abstractmethod
    def list_active_endpoints(self, category: str) -> list[RawEndpointRow]:
        """Active endpoint rows for a category, in any order."""

    @abstractmethod
    def get_endpoint(self, endpoint_id: uuid.UUID) -> RawEndpointRow | None:
        """Endpoint row by id regardless of activation state."""

    @abstractmethod
    def update_endpoint_stats(
        self,
        endpoint_id: uuid.UUID,
        *,
        success: bool,
        timestamp: datetime,
    ) -> None:
        """Apply one attempt outcome to the endpoint counters atomically."""

    @abstractmethod
    def upsert_endpoint(self, registration: EndpointRegistration) -> RawEndpointRow:
        """Create or refresh an endpoint keyed by (name, category)."""

    @abstractmethod
    def insert_execution_log(self, entry: ExecutionLogEntry) -> None:
        """Append one execution log entry."""

    @abstractmethod
    def insert_import_log(self, entry: ImportLogEntry) -> None:
        """Append one import roll-up entry."""

    @abstractmethod
    def unit_of_work(self) -> AbstractContextManager[None]:
        """
        Group the writes of one record; all of them persist or none do.
        """

