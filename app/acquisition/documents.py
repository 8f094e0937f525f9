"""
app/acquisition/documents.py

Document-fetch capability used by the scraping fetcher: a direct HTTP GET
with browser-like headers, or a GET routed through a proxy service that
wraps the page as `{"contents": "..."}`.
"""

from __future__ import annotations

import itertools
import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping

import requests

from app.acquisition.errors import DocumentFetchError
from app.acquisition.logging_utils import log_event

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENTS: tuple[str, ...] = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36",
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36",
)

BROWSER_HEADERS: dict[str, str] = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
    "Accept-Language": "no-NO,no;q=0.9,en;q=0.8,da;q=0.7",
    "DNT": "1",
    "Upgrade-Insecure-Requests": "1",
    "Sec-Fetch-Dest": "document",
    "Sec-Fetch-Mode": "navigate",
    "Sec-Fetch-Site": "none",
    "Cache-Control": "max-age=0",
    "Pragma": "no-cache",
}


class UserAgentRotation:
    """
    Round-robin over desktop browser user agents.
    """

    def __init__(self, user_agents: tuple[str, ...] = DEFAULT_USER_AGENTS) -> None:
        if not user_agents:
            raise ValueError("At least one user agent is required.")
        self._cycle = itertools.cycle(user_agents)

    def next(self) -> str:
        return next(self._cycle)


def browser_headers(user_agent: str) -> dict[str, str]:
    return {"User-Agent": user_agent, **BROWSER_HEADERS}


class DocumentFetcher(ABC):
    """
    Fetch one document body as text.
    """

    @abstractmethod
    def fetch(self, url: str, *, headers: Mapping[str, str], timeout_seconds: float) -> str:
        """
        Return the raw body or raise DocumentFetchError.
        """


class DirectDocumentFetcher(DocumentFetcher):
    def __init__(self, *, session: requests.Session | None = None) -> None:
        self._session = session or requests.Session()

    def fetch(self, url: str, *, headers: Mapping[str, str], timeout_seconds: float) -> str:
        try:
            response = self._session.get(
                url,
                headers=dict(headers),
                timeout=timeout_seconds,
                allow_redirects=True,
            )
            response.raise_for_status()
        except requests.Timeout as exc:
            raise DocumentFetchError(f"Timed out fetching {url}: {exc}", url=url, timed_out=True) from exc
        except requests.RequestException as exc:
            raise DocumentFetchError(f"Failed to fetch {url}: {exc}", url=url) from exc

        log_event(
            logger,
            logging.DEBUG,
            "document_fetched",
            url=url,
            status_code=response.status_code,
            length=len(response.text),
        )
        return response.text


class ProxyDocumentFetcher(DocumentFetcher):
    """
    Fetch through a proxy that returns the page wrapped in JSON.
    """

    def __init__(self, *, proxy_url: str, session: requests.Session | None = None) -> None:
        self._proxy_url = proxy_url
        self._session = session or requests.Session()

    def fetch(self, url: str, *, headers: Mapping[str, str], timeout_seconds: float) -> str:
        try:
            response = self._session.get(
                self._proxy_url,
                params={"url": url},
                headers={"Accept": "application/json"},
                timeout=timeout_seconds,
            )
            response.raise_for_status()
            payload = response.json()
        except requests.Timeout as exc:
            raise DocumentFetchError(
                f"Proxy timed out fetching {url}: {exc}",
                url=url,
                timed_out=True,
            ) from exc
        except requests.RequestException as exc:
            raise DocumentFetchError(f"Proxy failed to fetch {url}: {exc}", url=url) from exc
        except ValueError as exc:
            raise DocumentFetchError(f"Proxy returned invalid JSON for {url}.", url=url) from exc

        contents = payload.get("contents") if isinstance(payload, dict) else None
        if not isinstance(contents, str):
            raise DocumentFetchError(f"Proxy response for {url} has no contents.", url=url)

        log_event(
            logger,
            logging.DEBUG,
            "document_fetched_via_proxy",
            url=url,
            length=len(contents),
        )
        return contents
