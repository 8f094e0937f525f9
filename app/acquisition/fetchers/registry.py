"""
Fetcher registry keyed by endpoint kind.
"""

from __future__ import annotations

from collections.abc import Mapping

import requests

from app.acquisition.cancellation import Sleeper
from app.acquisition.documents import DirectDocumentFetcher, ProxyDocumentFetcher
from app.acquisition.fetchers.api_fetcher import ApiFetcher
from app.acquisition.fetchers.base import Fetcher
from app.acquisition.fetchers.scraping_fetcher import ScrapingFetcher
from app.config import AcquisitionSettings
from app.domain.endpoint import Endpoint


class FetcherRegistry:
    """
    Resolve the fetcher for an endpoint's kind.
    """

    def __init__(self, registrations: Mapping[str, Fetcher] | None = None) -> None:
        self._registrations: dict[str, Fetcher] = {}
        for kind, fetcher in (registrations or {}).items():
            self.register(kind=kind, fetcher=fetcher)

    @classmethod
    def from_settings(
        cls,
        settings: AcquisitionSettings,
        *,
        session: requests.Session | None = None,
        sleep: Sleeper | None = None,
    ) -> FetcherRegistry:
        http = session or requests.Session()
        api_fetcher = ApiFetcher(timeout_seconds=settings.api_timeout_seconds, session=http)
        scraping_fetcher = ScrapingFetcher(
            document_fetcher=DirectDocumentFetcher(session=http),
            proxy_fetcher=ProxyDocumentFetcher(proxy_url=settings.proxy_url, session=http),
            timeout_seconds=settings.scrape_timeout_seconds,
            sleep=sleep,
        )
        return cls({api_fetcher.kind: api_fetcher, scraping_fetcher.kind: scraping_fetcher})

    def register(self, *, kind: str, fetcher: Fetcher) -> None:
        self._registrations[kind.strip().lower()] = fetcher

    def resolve(self, endpoint: Endpoint) -> Fetcher:
        fetcher = self._registrations.get(endpoint.kind)
        if fetcher is None:
            allowed = ", ".join(sorted(self._registrations))
            raise ValueError(
                f"No fetcher registered for kind='{endpoint.kind}' (endpoint={endpoint.id}). "
                f"Registered kinds: {allowed}."
            )
        return fetcher
