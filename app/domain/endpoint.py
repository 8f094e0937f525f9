"""
app/domain/endpoint.py

Configured acquisition sources (API or scraping) per category.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


class EndpointKind:
    API = "api"
    SCRAPING = "scraping"


ENDPOINT_KINDS: tuple[str, ...] = (EndpointKind.API, EndpointKind.SCRAPING)


@dataclass(frozen=True)
class ScrapingConfig:
    """
    Per-endpoint scraping and retry options.

    `selectors` maps a record field to CSS selectors tried in order.
    """

    selectors: dict[str, list[str]] = field(default_factory=dict)
    wait_time_ms: int = 0
    max_retries: int | None = None
    user_agent: str | None = None
    fallback_urls: tuple[str, ...] = ()
    use_proxy: bool = False
    timeout_seconds: float | None = None

    def as_dict(self) -> dict[str, Any]:
        """
        JSON-ready form stored in the endpoint row.
        """

        return {
            "selectors": {key: list(value) for key, value in self.selectors.items()},
            "wait_time_ms": self.wait_time_ms,
            "max_retries": self.max_retries,
            "user_agent": self.user_agent,
            "fallback_urls": list(self.fallback_urls),
            "use_proxy": self.use_proxy,
            "timeout_seconds": self.timeout_seconds,
        }


@dataclass(frozen=True)
class Endpoint:
    """
    One source for a category, with rolling request statistics.
    """

    id: uuid.UUID
    category: str
    name: str
    kind: str
    url: str
    priority: int = 1
    is_active: bool = True
    provider_name: str | None = None
    auth_required: bool = False
    auth_config: dict[str, Any] = field(default_factory=dict)
    scraping_config: ScrapingConfig = field(default_factory=ScrapingConfig)
    total_requests: int = 0
    failure_count: int = 0
    success_rate: float = 0.0
    last_success_at: datetime | None = None
    last_failure_at: datetime | None = None

    @property
    def fallback_urls(self) -> tuple[str, ...]:
        return self.scraping_config.fallback_urls

    def retry_budget(self, default: int) -> int:
        """
        Number of retries after the first attempt.
        """

        configured = self.scraping_config.max_retries
        if configured is None:
            return max(0, default)
        return max(0, configured)


@dataclass(frozen=True)
class EndpointRegistration:
    """
    Declaration used to create or refresh an endpoint row.
    """

    category: str
    name: str
    url: str
    kind: str = EndpointKind.SCRAPING
    priority: int = 1
    provider_name: str | None = None
    scraping_config: ScrapingConfig = field(default_factory=ScrapingConfig)

