"""
app/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from db.config import load_env_files

DEFAULT_PROXY_URL = "https://api.allorigins.win/get"


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading app settings.
    """

    load_env_files()


def _get_bool_env(name: str, default: bool) -> bool:
    """
    Read a boolean from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    return raw_value.strip().lower() in {"1", "true", "yes", "on"}


def _get_int_env(name: str, default: int) -> int:
    """
    Read an integer from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError:
        return default


def _get_float_env(name: str, default: float) -> float:
    """
    Read a float from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return float(raw_value)
    except ValueError:
        return default


def _get_str_env(name: str, default: str) -> str:
    """
    Read a string from environment variables with fallback.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return default
    stripped = value.strip()
    return stripped if stripped else default


def _project_root() -> Path:
    return Path(__file__).resolve().parents[1]


def resolve_path(raw_path: str) -> str:
    candidate = Path(raw_path)
    if candidate.is_absolute():
        return str(candidate)
    return str((_project_root() / candidate).resolve())


@dataclass(frozen=True)
class AcquisitionSettings:
    """
    Runtime settings for provider acquisition runs.

    Durations are in seconds; delays of 0 disable the wait.
    """

    api_timeout_seconds: float = 10.0
    scrape_timeout_seconds: float = 15.0
    default_max_retries: int = 3
    backoff_base_seconds: float = 1.0
    backoff_max_seconds: float = 10.0
    endpoint_cooldown_seconds: float = 1.0
    category_cooldown_seconds: float = 2.0
    proxy_url: str = DEFAULT_PROXY_URL
    accept_degraded: bool = False
    provider_file_path: str = "data/providers.txt"


@lru_cache(maxsize=1)
def get_acquisition_settings() -> AcquisitionSettings:
    """
    Return cached acquisition settings from environment variables.
    """

    return AcquisitionSettings(
        api_timeout_seconds=max(1.0, _get_float_env("ACQUISITION_API_TIMEOUT_SECONDS", 10.0)),
        scrape_timeout_seconds=max(1.0, _get_float_env("ACQUISITION_SCRAPE_TIMEOUT_SECONDS", 15.0)),
        default_max_retries=max(0, _get_int_env("ACQUISITION_DEFAULT_MAX_RETRIES", 3)),
        backoff_base_seconds=max(0.0, _get_float_env("ACQUISITION_BACKOFF_BASE_SECONDS", 1.0)),
        backoff_max_seconds=max(0.0, _get_float_env("ACQUISITION_BACKOFF_MAX_SECONDS", 10.0)),
        endpoint_cooldown_seconds=max(
            0.0,
            _get_float_env("ACQUISITION_ENDPOINT_COOLDOWN_SECONDS", 1.0),
        ),
        category_cooldown_seconds=max(
            0.0,
            _get_float_env("ACQUISITION_CATEGORY_COOLDOWN_SECONDS", 2.0),
        ),
        proxy_url=_get_str_env("ACQUISITION_PROXY_URL", DEFAULT_PROXY_URL),
        accept_degraded=_get_bool_env("ACQUISITION_ACCEPT_DEGRADED", False),
        provider_file_path=resolve_path(
            _get_str_env("ACQUISITION_PROVIDER_FILE", "data/providers.txt")
        ),
    )
