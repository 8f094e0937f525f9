"""
REST API fetcher for provider listings.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

import requests

from app.acquisition.cancellation import CancellationToken
from app.acquisition.fetchers.base import Fetcher, FetchOutcome
from app.acquisition.fetchers.seed_data import seed_records
from app.acquisition.logging_utils import log_event
from app.acquisition.normalization import record_from_payload
from app.domain.endpoint import Endpoint, EndpointKind
from app.domain.provider import SourceRecord

logger = logging.getLogger(__name__)

WRAPPER_KEYS: tuple[str, ...] = ("providers", "companies", "institutions", "operators")


class ResponseShapeError(ValueError):
    """Raised when a JSON body holds no recognisable provider list."""


def extract_items(payload: Any) -> list[Any]:
    """
    Return the provider list from a bare array or a known wrapper object.
    """

    if isinstance(payload, list):
        return payload
    if isinstance(payload, Mapping):
        for key in WRAPPER_KEYS:
            value = payload.get(key)
            if isinstance(value, list):
                return value
    raise ResponseShapeError(
        f"Response is neither a list nor an object with one of: {', '.join(WRAPPER_KEYS)}."
    )


def auth_headers(endpoint: Endpoint) -> dict[str, str]:
    """
    Build request headers from the endpoint's auth config.

    Supported shapes: `{"headers": {...}}`, or `{"api_key": "...",
    "header_name": "X-Api-Key"}` (defaults to a bearer Authorization header).
    """

    if not endpoint.auth_required:
        return {}

    config = endpoint.auth_config or {}
    headers: dict[str, str] = {}
    explicit = config.get("headers")
    if isinstance(explicit, Mapping):
        headers.update({str(key): str(value) for key, value in explicit.items()})

    api_key = config.get("api_key")
    if api_key:
        header_name = str(config.get("header_name") or "Authorization")
        if header_name.lower() == "authorization":
            headers[header_name] = f"Bearer {api_key}"
        else:
            headers[header_name] = str(api_key)
    return headers


class ApiFetcher(Fetcher):
    """
    GET a JSON endpoint and map its items onto SourceRecords.

    Transport and parse failures do not raise: the category's seed
    records come back flagged synthetic, with the failure in `error`.
    """

    kind = EndpointKind.API

    def __init__(
        self,
        *,
        timeout_seconds: float = 10.0,
        session: requests.Session | None = None,
    ) -> None:
        self._timeout_seconds = timeout_seconds
        self._session = session or requests.Session()

    def fetch(
        self,
        endpoint: Endpoint,
        *,
        url: str | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> FetchOutcome:
        target = url or endpoint.url
        headers = {"Accept": "application/json", **auth_headers(endpoint)}

        try:
            response = self._session.get(target, headers=headers, timeout=self._timeout_seconds)
            response.raise_for_status()
            items = extract_items(response.json())
        except requests.Timeout as exc:
            return self._degraded(endpoint, target, f"API request timed out: {exc}", timed_out=True)
        except requests.RequestException as exc:
            return self._degraded(endpoint, target, f"API request failed: {exc}")
        except ValueError as exc:
            return self._degraded(endpoint, target, f"Invalid API response: {exc}")

        records: list[SourceRecord] = []
        skipped = 0
        for item in items:
            if not isinstance(item, Mapping):
                skipped += 1
                continue
            records.append(record_from_payload(item))

        log_event(
            logger,
            logging.INFO,
            "api_fetch_completed",
            endpoint_id=endpoint.id,
            category=endpoint.category,
            url=target,
            records=len(records),
            skipped_items=skipped,
        )
        return FetchOutcome(records=records)

    def _degraded(
        self,
        endpoint: Endpoint,
        url: str,
        message: str,
        *,
        timed_out: bool = False,
    ) -> FetchOutcome:
        log_event(
            logger,
            logging.WARNING,
            "api_fetch_degraded",
            endpoint_id=endpoint.id,
            category=endpoint.category,
            url=url,
            error=message,
            timed_out=timed_out,
        )
        return FetchOutcome(
            records=seed_records(endpoint.category),
            error=message,
            synthetic=True,
            timed_out=timed_out,
        )
