"""
app/acquisition/provider_file.py

Seed scraping endpoints from a `category|name|url` provider list.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from app.acquisition.logging_utils import log_event
from app.acquisition.registry import EndpointRegistry
from app.domain.categories import normalize_category
from app.domain.endpoint import EndpointKind, EndpointRegistration, ScrapingConfig

logger = logging.getLogger(__name__)

FILE_ENDPOINT_PRIORITY = 1
FILE_ENDPOINT_WAIT_TIME_MS = 2000
FILE_ENDPOINT_MAX_RETRIES = 3


@dataclass(frozen=True)
class ProviderFileIssue:
    line_number: int
    line: str
    reason: str


@dataclass(frozen=True)
class ProviderFileParseResult:
    registrations: list[EndpointRegistration] = field(default_factory=list)
    issues: list[ProviderFileIssue] = field(default_factory=list)


@dataclass(frozen=True)
class ProviderFileImportSummary:
    path: str
    registered: int
    skipped: int
    issues: list[ProviderFileIssue] = field(default_factory=list)


def parse_provider_lines(lines: Iterable[str]) -> ProviderFileParseResult:
    """
    Parse provider list lines.

    Blank lines and `#` comments are ignored. Lines without exactly three
    non-empty fields, or with an unknown category, are skipped and reported.
    """

    result = ProviderFileParseResult()
    for line_number, raw_line in enumerate(lines, start=1):
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue

        parts = [part.strip() for part in line.split("|")]
        if len(parts) != 3 or not all(parts):
            result.issues.append(
                ProviderFileIssue(line_number, line, "expected 'category|name|url'")
            )
            continue

        raw_category, name, url = parts
        category = normalize_category(raw_category)
        if category is None:
            result.issues.append(
                ProviderFileIssue(line_number, line, f"unknown category '{raw_category}'")
            )
            continue

        result.registrations.append(
            EndpointRegistration(
                category=category,
                name=name,
                url=url,
                kind=EndpointKind.SCRAPING,
                priority=FILE_ENDPOINT_PRIORITY,
                provider_name=name,
                scraping_config=ScrapingConfig(
                    wait_time_ms=FILE_ENDPOINT_WAIT_TIME_MS,
                    max_retries=FILE_ENDPOINT_MAX_RETRIES,
                ),
            )
        )
    return result


def parse_provider_file(path: str | Path) -> ProviderFileParseResult:
    with Path(path).open("r", encoding="utf-8") as handle:
        return parse_provider_lines(handle)


def import_provider_file(path: str | Path, *, registry: EndpointRegistry) -> ProviderFileImportSummary:
    """
    Register every valid line of the provider file as a scraping endpoint.

    Raises FileNotFoundError when the file does not exist.
    """

    parsed = parse_provider_file(path)
    for issue in parsed.issues:
        log_event(
            logger,
            logging.WARNING,
            "provider_file_line_skipped",
            path=str(path),
            line_number=issue.line_number,
            reason=issue.reason,
        )

    registered = registry.register_endpoints(parsed.registrations)
    log_event(
        logger,
        logging.INFO,
        "provider_file_imported",
        path=str(path),
        registered=len(registered),
        skipped=len(parsed.issues),
    )
    return ProviderFileImportSummary(
        path=str(path),
        registered=len(registered),
        skipped=len(parsed.issues),
        issues=list(parsed.issues),
    )
