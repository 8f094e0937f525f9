"""
app/acquisition/extraction.py

Field extraction from fetched provider pages.

Extraction is rule data: for each field an ordered list of
`(pattern, extractor)` rules is evaluated and the first rule that yields a
value wins. Endpoint-specific CSS selectors, when configured, are tried
before the pattern rules.
"""

from __future__ import annotations

import html as html_lib
import re
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, fields
from typing import Any
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Tag
from soupsieve import SelectorSyntaxError

from app.acquisition.normalization import clean_text, parse_price, parse_rating

MIN_PLAUSIBLE_PRICE = 0.0
MAX_PLAUSIBLE_PRICE = 100_000.0

BLOCKED_EMAIL_MARKERS: tuple[str, ...] = ("noreply", "no-reply", "donotreply", "example.com")

Extractor = Callable[[re.Match[str], str], Any]


@dataclass(frozen=True)
class ExtractionRule:
    """
    One candidate pattern for a field. The extractor receives the match
    and the page base URL and returns a value, or None to keep looking.
    """

    field: str
    pattern: re.Pattern[str]
    extractor: Extractor


@dataclass(frozen=True)
class ExtractedFields:
    description: str | None = None
    phone: str | None = None
    email: str | None = None
    address: str | None = None
    price: float | None = None
    rating: float | None = None
    logo_url: str | None = None
    organization_number: str | None = None


EXTRACTED_FIELD_NAMES: tuple[str, ...] = tuple(item.name for item in fields(ExtractedFields))


def _group_text(match: re.Match[str], base_url: str) -> str | None:
    text = clean_text(html_lib.unescape(match.group(1)))
    return text or None


def _group_raw(match: re.Match[str], base_url: str) -> str | None:
    value = match.group(1) if match.groups() else match.group(0)
    value = value.strip()
    return value or None


def _phone(match: re.Match[str], base_url: str) -> str | None:
    return clean_text(match.group(0)) or None


def _email(match: re.Match[str], base_url: str) -> str | None:
    email = match.group(0)
    lowered = email.lower()
    if any(marker in lowered for marker in BLOCKED_EMAIL_MARKERS):
        return None
    return email


def _address(match: re.Match[str], base_url: str) -> str | None:
    text = BeautifulSoup(match.group(1), "html.parser").get_text(" ", strip=True)
    return clean_text(text) or None


def _price(match: re.Match[str], base_url: str) -> float | None:
    return plausible_price(parse_price(match.group(1)))


def _rating(match: re.Match[str], base_url: str) -> float | None:
    return parse_rating(match.group(1))


def _logo(match: re.Match[str], base_url: str) -> str | None:
    raw = html_lib.unescape(match.group(1)).strip()
    if not raw:
        return None
    return absolute_url(raw, base_url)


def plausible_price(value: float) -> float | None:
    if MIN_PLAUSIBLE_PRICE < value < MAX_PLAUSIBLE_PRICE:
        return value
    return None


def absolute_url(url: str, base_url: str) -> str:
    """
    Resolve a possibly relative URL against the page URL.
    """

    if url.startswith(("http://", "https://")):
        return url
    if not base_url:
        return url
    return urljoin(base_url, url)


def _rule(field_name: str, pattern: str, extractor: Extractor, flags: int = re.IGNORECASE) -> ExtractionRule:
    return ExtractionRule(field=field_name, pattern=re.compile(pattern, flags), extractor=extractor)


DEFAULT_RULES: tuple[ExtractionRule, ...] = (
    _rule(
        "description",
        r"""<meta[^>]*name=["']description["'][^>]*content=["']([^"']+)["']""",
        _group_text,
    ),
    _rule(
        "description",
        r"""<meta[^>]*property=["']og:description["'][^>]*content=["']([^"']+)["']""",
        _group_text,
    ),
    _rule(
        "description",
        r"""<p[^>]*class=["'][^"']*(?:about|description|intro|summary)[^"']*["'][^>]*>([^<]+)<""",
        _group_text,
    ),
    _rule(
        "description",
        r"""<div[^>]*class=["'][^"']*(?:about|description|intro|summary)[^"']*["'][^>]*>([^<]+)<""",
        _group_text,
    ),
    _rule("phone", r"(?:\+47\s?)?(?:\d{2}\s?\d{2}\s?\d{2}\s?\d{2}|\d{8})", _phone, 0),
    _rule("email", r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}", _email, 0),
    _rule("address", r"<address[^>]*>(.*?)</address>", _address, re.IGNORECASE | re.DOTALL),
    _rule(
        "address",
        r"([A-ZÆØÅ][\wæøåÆØÅ.' -]{2,60}?\s\d{1,4}[A-Za-z]?,\s*\d{4}\s+[A-ZÆØÅ][\wæøåÆØÅ-]+)",
        _group_raw,
        0,
    ),
    _rule("price", r"(?:kr|NOK|pris)\s*([0-9](?:[0-9 .,]*[0-9])?)", _price),
    _rule("price", r"([0-9](?:[0-9 .,]*[0-9])?)\s*(?:kr|NOK)\b", _price),
    _rule("rating", r"(?:rating|stars?|vurdering).*?([0-5](?:[.,][0-9])?)", _rating),
    _rule(
        "logo_url",
        r"""<meta[^>]*property=["']og:image["'][^>]*content=["']([^"']+)["']""",
        _logo,
    ),
    _rule(
        "logo_url",
        r"""<img[^>]*class=["'][^"']*logo[^"']*["'][^>]*src=["']([^"']+)["']""",
        _logo,
    ),
    _rule("logo_url", r"""<img[^>]*src=["']([^"']*logo[^"']*)["']""", _logo),
    _rule(
        "organization_number",
        r"(?:org\.?\s*nr\.?|organisasjonsnummer|org\.?\s*nummer)[\s:]*(\d{9})",
        _group_raw,
    ),
)


def apply_rules(
    document: str,
    rules: Sequence[ExtractionRule],
    *,
    base_url: str = "",
) -> dict[str, Any]:
    """
    Evaluate rules in order and keep the first value found per field.
    """

    extracted: dict[str, Any] = {}
    for rule in rules:
        if rule.field in extracted:
            continue
        for match in rule.pattern.finditer(document):
            value = rule.extractor(match, base_url)
            if value is not None:
                extracted[rule.field] = value
                break
    return extracted


def _selector_value(field_name: str, node: Tag, base_url: str) -> Any:
    if field_name == "logo_url":
        raw = node.get("src") or node.get("content") or node.get("href")
        if not raw:
            return None
        return absolute_url(str(raw).strip(), base_url)

    raw_text = node.get("content") if node.name == "meta" else node.get_text(" ", strip=True)
    text = clean_text(raw_text)
    if not text:
        return None
    if field_name == "price":
        return plausible_price(parse_price(text))
    if field_name == "rating":
        return parse_rating(text) if re.search(r"\d", text) else None
    return text


def apply_selectors(
    soup: BeautifulSoup,
    selectors: Mapping[str, Sequence[str]],
    *,
    base_url: str = "",
) -> dict[str, Any]:
    """
    Evaluate configured CSS selectors; first non-empty node wins per field.
    """

    extracted: dict[str, Any] = {}
    for field_name, candidates in selectors.items():
        if field_name not in EXTRACTED_FIELD_NAMES:
            continue
        for selector in candidates:
            try:
                nodes = soup.select(selector)
            except SelectorSyntaxError:
                continue
            value = next(
                (
                    resolved
                    for resolved in (_selector_value(field_name, node, base_url) for node in nodes)
                    if resolved is not None
                ),
                None,
            )
            if value is not None:
                extracted[field_name] = value
                break
    return extracted


def extract_fields(
    document: str,
    *,
    base_url: str = "",
    selectors: Mapping[str, Sequence[str]] | None = None,
    rules: Sequence[ExtractionRule] = DEFAULT_RULES,
) -> ExtractedFields:
    """
    Extract provider fields from an HTML document.

    Missing fields stay None; a page with nothing recognisable still
    produces an empty ExtractedFields rather than an error.
    """

    values: dict[str, Any] = {}
    if selectors:
        soup = BeautifulSoup(document, "html.parser")
        values.update(apply_selectors(soup, selectors, base_url=base_url))

    for field_name, value in apply_rules(document, rules, base_url=base_url).items():
        values.setdefault(field_name, value)

    return ExtractedFields(**{key: values[key] for key in EXTRACTED_FIELD_NAMES if key in values})
