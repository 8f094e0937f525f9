"""
Fetcher abstraction shared by API and scraping sources.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from app.acquisition.cancellation import CancellationToken
from app.domain.endpoint import Endpoint
from app.domain.provider import SourceRecord


@dataclass(frozen=True)
class FetchOutcome:
    """
    Records produced by one fetch call.

    `error` set together with `synthetic=True` records means the source
    failed and placeholder data was returned instead.
    """

    records: list[SourceRecord] = field(default_factory=list)
    error: str | None = None
    synthetic: bool = False
    timed_out: bool = False

    @property
    def succeeded(self) -> bool:
        return self.error is None and bool(self.records)


class Fetcher(ABC):
    """
    Produce SourceRecords for one endpoint. Implementations make exactly
    one request per call: retries and cross-endpoint fallback belong to
    the fallback orchestrator.
    """

    kind: str

    @abstractmethod
    def fetch(
        self,
        endpoint: Endpoint,
        *,
        url: str | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> FetchOutcome:
        """
        Fetch `url` (defaults to `endpoint.url`) and return its records.
        """
