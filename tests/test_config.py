from __future__ import annotations

import os
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from app.config import DEFAULT_PROXY_URL, get_acquisition_settings
from db.config import load_env_files, require_postgres_url, resolve_database_url


class TestAcquisitionSettings(unittest.TestCase):
    def setUp(self) -> None:
        get_acquisition_settings.cache_clear()
        self.addCleanup(get_acquisition_settings.cache_clear)

    def _settings(self, **env: str):
        cleared = {key: value for key, value in os.environ.items() if not key.startswith("ACQUISITION_")}
        with mock.patch.dict(os.environ, {**cleared, **env}, clear=True):
            return get_acquisition_settings()

    def test_defaults(self) -> None:
        settings = self._settings()

        self.assertEqual(settings.api_timeout_seconds, 10.0)
        self.assertEqual(settings.scrape_timeout_seconds, 15.0)
        self.assertEqual(settings.default_max_retries, 3)
        self.assertEqual(settings.backoff_base_seconds, 1.0)
        self.assertEqual(settings.backoff_max_seconds, 10.0)
        self.assertEqual(settings.endpoint_cooldown_seconds, 1.0)
        self.assertEqual(settings.category_cooldown_seconds, 2.0)
        self.assertEqual(settings.proxy_url, DEFAULT_PROXY_URL)
        self.assertFalse(settings.accept_degraded)
        self.assertTrue(os.path.isabs(settings.provider_file_path))
        self.assertTrue(settings.provider_file_path.endswith(os.path.join("data", "providers.txt")))

    def test_overrides(self) -> None:
        settings = self._settings(
            ACQUISITION_DEFAULT_MAX_RETRIES="5",
            ACQUISITION_CATEGORY_COOLDOWN_SECONDS="0",
            ACQUISITION_ACCEPT_DEGRADED="yes",
            ACQUISITION_PROXY_URL="https://proxy.internal/get",
            ACQUISITION_PROVIDER_FILE="/srv/providers.txt",
        )

        self.assertEqual(settings.default_max_retries, 5)
        self.assertEqual(settings.category_cooldown_seconds, 0.0)
        self.assertTrue(settings.accept_degraded)
        self.assertEqual(settings.proxy_url, "https://proxy.internal/get")
        self.assertEqual(settings.provider_file_path, "/srv/providers.txt")

    def test_invalid_values_fall_back_or_clamp(self) -> None:
        settings = self._settings(
            ACQUISITION_DEFAULT_MAX_RETRIES="many",
            ACQUISITION_API_TIMEOUT_SECONDS="0",
            ACQUISITION_BACKOFF_BASE_SECONDS="-3",
            ACQUISITION_PROXY_URL="   ",
        )

        self.assertEqual(settings.default_max_retries, 3)
        self.assertEqual(settings.api_timeout_seconds, 1.0)
        self.assertEqual(settings.backoff_base_seconds, 0.0)
        self.assertEqual(settings.proxy_url, DEFAULT_PROXY_URL)


class TestDatabaseConfig(unittest.TestCase):
    def test_postgres_urls_use_psycopg_driver(self) -> None:
        self.assertEqual(
            require_postgres_url("postgres://u:p@db:5432/providers"),
            "postgresql+psycopg://u:p@db:5432/providers",
        )
        self.assertEqual(
            require_postgres_url("postgresql+psycopg://u:p@db/providers"),
            "postgresql+psycopg://u:p@db/providers",
        )

    def test_non_postgres_url_is_rejected(self) -> None:
        with self.assertRaises(RuntimeError):
            require_postgres_url("sqlite:///providers.db")

    def test_cloud_url_requires_cloud_environment(self) -> None:
        env = {
            "ENVIRONMENT": "local",
            "CLOUD_DATABASE_URL": "postgresql://cloud/providers",
            "LOCAL_DATABASE_URL": "postgresql://local/providers",
        }
        with mock.patch.dict(os.environ, env, clear=True):
            self.assertEqual(resolve_database_url(), "postgresql+psycopg://local/providers")
        with mock.patch.dict(os.environ, {**env, "ENVIRONMENT": "production"}, clear=True):
            self.assertEqual(resolve_database_url(), "postgresql+psycopg://cloud/providers")

    def test_env_files_do_not_override_process_environment(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            Path(tmp, ".env").write_text(
                "# local settings\n"
                "export ACQUISITION_PROXY_URL='https://proxy.example/get'\n"
                "DATABASE_URL=postgresql://from-file/providers\n",
                encoding="utf-8",
            )
            with mock.patch.dict(os.environ, {"DATABASE_URL": "postgresql://from-env/providers"}, clear=True):
                load_env_files(Path(tmp))

                self.assertEqual(os.environ["DATABASE_URL"], "postgresql://from-env/providers")
                self.assertEqual(os.environ["ACQUISITION_PROXY_URL"], "https://proxy.example/get")
