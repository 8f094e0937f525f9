"""
app/acquisition/registry.py

Endpoint registry: the only boundary where raw store rows become Endpoints.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Iterable, Mapping
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any

from app.acquisition.errors import NotFoundError
from app.acquisition.logging_utils import log_event
from app.acquisition.store.base import AcquisitionStore
from app.domain.categories import normalize_category
from app.domain.endpoint import ENDPOINT_KINDS, Endpoint, EndpointRegistration, ScrapingConfig

logger = logging.getLogger(__name__)

# Accepted spellings per ScrapingConfig field; older rows use camelCase.
_SCRAPING_CONFIG_KEYS: dict[str, tuple[str, ...]] = {
    "selectors": ("selectors",),
    "wait_time_ms": ("wait_time_ms", "waitTime", "wait_time"),
    "max_retries": ("max_retries", "maxRetries"),
    "user_agent": ("user_agent", "userAgent"),
    "fallback_urls": ("fallback_urls", "fallbackUrls"),
    "use_proxy": ("use_proxy", "useProxy"),
    "timeout_seconds": ("timeout_seconds", "timeoutSeconds"),
}


def _lookup(raw: Mapping[str, Any], keys: Iterable[str]) -> Any:
    for key in keys:
        if key in raw and raw[key] is not None:
            return raw[key]
    return None


def _optional_int(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _optional_float(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _optional_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _as_bool(value: Any, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in {"1", "true", "yes", "on"}


def _normalize_selectors(raw: Any) -> dict[str, list[str]]:
    if not isinstance(raw, Mapping):
        return {}

    normalized: dict[str, list[str]] = {}
    for key, value in raw.items():
        if isinstance(value, str):
            selectors = [value.strip()] if value.strip() else []
        elif isinstance(value, list):
            selectors = [str(item).strip() for item in value if str(item).strip()]
        else:
            selectors = []
        if selectors:
            normalized[str(key).strip()] = selectors
    return normalized


def to_scraping_config(raw: Any) -> ScrapingConfig:
    if not isinstance(raw, Mapping):
        return ScrapingConfig()

    def pick(field_name: str) -> Any:
        return _lookup(raw, _SCRAPING_CONFIG_KEYS[field_name])

    fallback_urls = pick("fallback_urls")
    if isinstance(fallback_urls, str):
        fallback_urls = [fallback_urls]
    max_retries = _optional_int(pick("max_retries"))
    timeout_seconds = _optional_float(pick("timeout_seconds"))

    return ScrapingConfig(
        selectors=_normalize_selectors(pick("selectors")),
        wait_time_ms=max(0, _optional_int(pick("wait_time_ms")) or 0),
        max_retries=max(0, max_retries) if max_retries is not None else None,
        user_agent=_optional_str(pick("user_agent")),
        fallback_urls=tuple(
            url.strip() for url in (fallback_urls or []) if isinstance(url, str) and url.strip()
        ),
        use_proxy=_as_bool(pick("use_proxy"), False),
        timeout_seconds=timeout_seconds if timeout_seconds and timeout_seconds > 0 else None,
    )


def to_endpoint(raw: Mapping[str, Any]) -> Endpoint:
    """
    Normalize one raw endpoint row into an Endpoint.

    Raises ValueError when the row lacks an id, url or a valid kind or
    category.
    """

    raw_id = raw.get("id")
    if raw_id is None:
        raise ValueError("Endpoint row has no id.")
    endpoint_id = raw_id if isinstance(raw_id, uuid.UUID) else uuid.UUID(str(raw_id))

    category = normalize_category(raw.get("category"))
    if category is None:
        raise ValueError(f"Endpoint {endpoint_id} has unknown category '{raw.get('category')}'.")

    kind = str(_lookup(raw, ("endpoint_type", "kind")) or "").strip().lower()
    if kind not in ENDPOINT_KINDS:
        raise ValueError(f"Endpoint {endpoint_id} has unknown kind '{kind}'.")

    url = _optional_str(raw.get("url"))
    if url is None:
        raise ValueError(f"Endpoint {endpoint_id} has no url.")

    priority = _optional_int(raw.get("priority"))
    auth_config = raw.get("auth_config")
    return Endpoint(
        id=endpoint_id,
        category=category,
        name=_optional_str(raw.get("name")) or url,
        kind=kind,
        url=url,
        priority=priority if priority is not None else 1,
        is_active=_as_bool(raw.get("is_active"), True),
        provider_name=_optional_str(raw.get("provider_name")),
        auth_required=_as_bool(raw.get("auth_required"), False),
        auth_config=dict(auth_config) if isinstance(auth_config, Mapping) else {},
        scraping_config=to_scraping_config(raw.get("scraping_config")),
        total_requests=_optional_int(raw.get("total_requests")) or 0,
        failure_count=_optional_int(raw.get("failure_count")) or 0,
        success_rate=_optional_float(raw.get("success_rate")) or 0.0,
        last_success_at=raw.get("last_success_at"),
        last_failure_at=raw.get("last_failure_at"),
    )


def resolve_category(category: str) -> str:
    resolved = normalize_category(category)
    if resolved is None:
        raise NotFoundError(f"Unknown provider category '{category}'.")
    return resolved


class EndpointRegistry:
    """
    Configured sources per category, backed by the acquisition store.
    """

    def __init__(self, *, store: AcquisitionStore) -> None:
        self._store = store

    def list_active_endpoints(self, category: str) -> list[Endpoint]:
        resolved = resolve_category(category)
        endpoints: list[Endpoint] = []
        for raw in self._store.list_active_endpoints(resolved):
            try:
                endpoint = to_endpoint(raw)
            except ValueError as exc:
                log_event(
                    logger,
                    logging.WARNING,
                    "endpoint_row_invalid",
                    category=resolved,
                    endpoint_id=raw.get("id"),
                    error=str(exc),
                )
                continue
            if endpoint.is_active:
                endpoints.append(endpoint)
        return sorted(endpoints, key=lambda endpoint: endpoint.priority)

    def get_endpoint(self, endpoint_id: uuid.UUID) -> Endpoint:
        raw = self._store.get_endpoint(endpoint_id)
        if raw is None:
            raise NotFoundError(f"Endpoint {endpoint_id} does not exist.")
        endpoint = to_endpoint(raw)
        if not endpoint.is_active:
            raise NotFoundError(f"Endpoint {endpoint_id} is inactive.")
        return endpoint

    def record_attempt(
        self,
        endpoint_id: uuid.UUID,
        success: bool,
        timestamp: datetime | None = None,
    ) -> None:
        self._store.update_endpoint_stats(
            endpoint_id,
            success=success,
            timestamp=timestamp or datetime.now(timezone.utc),
        )

    def register_endpoints(self, registrations: Iterable[EndpointRegistration]) -> list[Endpoint]:
        """
        Create or refresh endpoints keyed by (name, category).
        """

        registered: list[Endpoint] = []
        for registration in registrations:
            resolved = resolve_category(registration.category)
            if resolved != registration.category:
                registration = replace(registration, category=resolved)
            registered.append(to_endpoint(self._store.upsert_endpoint(registration)))
        return registered
