from __future__ import annotations

from pathlib import Path

import pytest

from app.acquisition.provider_file import (
    FILE_ENDPOINT_MAX_RETRIES,
    FILE_ENDPOINT_WAIT_TIME_MS,
    import_provider_file,
    parse_provider_lines,
)
from app.acquisition.registry import EndpointRegistry
from app.domain.endpoint import EndpointKind
from tests.conftest import InMemoryAcquisitionStore

PROVIDER_FILE = """\
# category|name|url
electricity|Tibber|https://tibber.com/no

mobil|Talkmore|https://talkmore.no
gas|Gasselskapet|https://gass.no
insurance|Gjensidige
banking||https://dnb.no
"""


class TestParseProviderLines:
    def test_valid_lines_become_scraping_registrations(self) -> None:
        parsed = parse_provider_lines(PROVIDER_FILE.splitlines())

        assert [(item.category, item.name) for item in parsed.registrations] == [
            ("electricity", "Tibber"),
            ("mobile", "Talkmore"),
        ]
        registration = parsed.registrations[0]
        assert registration.kind == EndpointKind.SCRAPING
        assert registration.priority == 1
        assert registration.scraping_config.wait_time_ms == FILE_ENDPOINT_WAIT_TIME_MS
        assert registration.scraping_config.max_retries == FILE_ENDPOINT_MAX_RETRIES

    def test_malformed_and_unknown_lines_are_reported(self) -> None:
        parsed = parse_provider_lines(PROVIDER_FILE.splitlines())

        assert [issue.line_number for issue in parsed.issues] == [5, 6, 7]
        assert "unknown category" in parsed.issues[0].reason


class TestImportProviderFile:
    def test_registers_endpoints(self, tmp_path: Path, store: InMemoryAcquisitionStore) -> None:
        path = tmp_path / "providers.txt"
        path.write_text(PROVIDER_FILE, encoding="utf-8")

        summary = import_provider_file(path, registry=EndpointRegistry(store=store))

        assert summary.registered == 2
        assert summary.skipped == 3
        assert {row["name"] for row in store.endpoints.values()} == {"Tibber", "Talkmore"}

    def test_reimport_is_idempotent(self, tmp_path: Path, store: InMemoryAcquisitionStore) -> None:
        path = tmp_path / "providers.txt"
        path.write_text(PROVIDER_FILE, encoding="utf-8")
        registry = EndpointRegistry(store=store)

        import_provider_file(path, registry=registry)
        import_provider_file(path, registry=registry)

        assert len(store.endpoints) == 2

    def test_missing_file_raises(self, tmp_path: Path, store: InMemoryAcquisitionStore) -> None:
        with pytest.raises(FileNotFoundError):
            import_provider_file(tmp_path / "missing.txt", registry=EndpointRegistry(store=store))
