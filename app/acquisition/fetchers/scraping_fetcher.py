"""
HTML scraping fetcher for a single provider site.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from urllib.parse import urlparse

from app.acquisition.cancellation import CancellationToken, Sleeper, pause
from app.acquisition.documents import (
    DirectDocumentFetcher,
    DocumentFetcher,
    UserAgentRotation,
    browser_headers,
)
from app.acquisition.extraction import DEFAULT_RULES, ExtractionRule, extract_fields
from app.acquisition.fetchers.base import Fetcher, FetchOutcome
from app.acquisition.logging_utils import log_event
from app.acquisition.normalization import (
    MAX_NAME_LENGTH,
    MAX_ORGANIZATION_NUMBER_LENGTH,
    NEUTRAL_RATING,
    clean_text,
    optional_text,
)
from app.domain.endpoint import Endpoint, EndpointKind
from app.domain.provider import SourceRecord

logger = logging.getLogger(__name__)


def provider_display_name(endpoint: Endpoint, url: str) -> str:
    """
    Name for the scraped record: provider name, endpoint name, then host.
    """

    for candidate in (endpoint.provider_name, endpoint.name):
        if candidate and candidate.strip():
            return candidate.strip()
    host = urlparse(url).hostname or url
    return host.removeprefix("www.")


class ScrapingFetcher(Fetcher):
    """
    Download a provider page and extract one SourceRecord from it.

    Document transport errors propagate as DocumentFetchError. Fields the
    page does not expose fall back to price 0, rating 3.5 and an empty
    description.
    """

    kind = EndpointKind.SCRAPING

    def __init__(
        self,
        *,
        document_fetcher: DocumentFetcher | None = None,
        proxy_fetcher: DocumentFetcher | None = None,
        timeout_seconds: float = 15.0,
        user_agents: UserAgentRotation | None = None,
        rules: Sequence[ExtractionRule] = DEFAULT_RULES,
        sleep: Sleeper | None = None,
    ) -> None:
        self._document_fetcher = document_fetcher or DirectDocumentFetcher()
        self._proxy_fetcher = proxy_fetcher
        self._timeout_seconds = timeout_seconds
        self._user_agents = user_agents or UserAgentRotation()
        self._rules = rules
        self._sleep = sleep

    def fetch(
        self,
        endpoint: Endpoint,
        *,
        url: str | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> FetchOutcome:
        target = url or endpoint.url
        config = endpoint.scraping_config
        fetcher = self._proxy_fetcher if config.use_proxy and self._proxy_fetcher else self._document_fetcher

        document = fetcher.fetch(
            target,
            headers=browser_headers(config.user_agent or self._user_agents.next()),
            timeout_seconds=config.timeout_seconds or self._timeout_seconds,
        )

        if config.wait_time_ms > 0:
            pause(config.wait_time_ms / 1000.0, sleep=self._sleep, cancel_token=cancel_token)

        if not document.strip():
            log_event(
                logger,
                logging.WARNING,
                "scrape_empty_document",
                endpoint_id=endpoint.id,
                url=target,
            )
            return FetchOutcome(error=f"Empty document returned from {target}")

        extracted = extract_fields(
            document,
            base_url=target,
            selectors=config.selectors,
            rules=self._rules,
        )
        record = SourceRecord(
            name=clean_text(provider_display_name(endpoint, endpoint.url), max_length=MAX_NAME_LENGTH),
            price=extracted.price if extracted.price is not None else 0.0,
            rating=extracted.rating if extracted.rating is not None else NEUTRAL_RATING,
            description=extracted.description or "",
            external_url=endpoint.url,
            organization_number=optional_text(
                extracted.organization_number,
                max_length=MAX_ORGANIZATION_NUMBER_LENGTH,
            ),
            logo_url=extracted.logo_url,
            phone=extracted.phone,
            email=extracted.email,
            address=extracted.address,
        )

        log_event(
            logger,
            logging.INFO,
            "scrape_completed",
            endpoint_id=endpoint.id,
            category=endpoint.category,
            url=target,
            provider=record.name,
            fields_found=sorted(
                name for name, value in vars(extracted).items() if value is not None
            ),
        )
        return FetchOutcome(records=[record])
