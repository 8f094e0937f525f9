"""
app/acquisition/normalization.py

Value normalization shared by fetchers: price, rating, text and
heterogeneous source field names.
"""

from __future__ import annotations

import math
import re
from collections.abc import Mapping, Sequence
from typing import Any

from app.domain.provider import SourceRecord

NEUTRAL_RATING = 3.5
MAX_RATING = 5.0
MAX_TEXT_LENGTH = 500
# Widths of the providers.name and providers.organization_number columns.
MAX_NAME_LENGTH = 255
MAX_ORGANIZATION_NUMBER_LENGTH = 32

DEFAULT_PROVIDER_NAME = "Unknown Provider"
DEFAULT_DESCRIPTION = "No description available"
DEFAULT_EXTERNAL_URL = "#"

FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "name": ("name", "company_name", "provider_name"),
    "price": ("price", "monthly_cost", "fee"),
    "rating": ("rating", "score", "customer_rating"),
    "description": ("description", "summary", "details"),
    "external_url": ("website", "url", "homepage"),
    "organization_number": ("org_number", "organization_number", "business_id"),
    "logo_url": ("logo", "logo_url", "image"),
    "pros": ("advantages", "benefits", "pros"),
    "cons": ("disadvantages", "drawbacks", "cons"),
}

_NON_PRICE_CHARS = re.compile(r"[^\d.,]")
_SEPARATORS = re.compile(r"[.,]")
_LEADING_NUMBER = re.compile(r"^\s*(-?\d+(?:[.,]\d+)?)")
_WHITESPACE = re.compile(r"\s+")


def parse_price(value: Any) -> float:
    """
    Parse a price into a non-negative float.

    Numbers pass through clamped to >= 0. Strings keep digits and
    separators only; the right-most separator is the decimal point and
    any other separators are thousands separators. Anything unparseable
    becomes 0.
    """

    if isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        return _clamp_price(float(value))
    if not isinstance(value, str):
        return 0.0

    cleaned = _NON_PRICE_CHARS.sub("", value).strip(".,")
    if not cleaned:
        return 0.0

    has_comma = "," in cleaned
    has_dot = "." in cleaned
    if has_comma and has_dot:
        decimal_index = max(cleaned.rfind(","), cleaned.rfind("."))
        integer_part = _SEPARATORS.sub("", cleaned[:decimal_index])
        candidate = f"{integer_part}.{cleaned[decimal_index + 1:]}"
    elif has_comma or has_dot:
        separator = "," if has_comma else "."
        if cleaned.count(separator) == 1:
            candidate = cleaned.replace(separator, ".")
        else:
            # "1.299.000": a repeated separator can only group thousands.
            candidate = cleaned.replace(separator, "")
    else:
        candidate = cleaned

    try:
        return _clamp_price(float(candidate))
    except ValueError:
        return 0.0


def _clamp_price(number: float) -> float:
    if not math.isfinite(number):
        return 0.0
    return max(0.0, number)


def parse_rating(value: Any) -> float:
    """
    Parse a rating into [0, 5].

    Unparseable input falls back to the neutral midpoint 3.5.
    """

    if isinstance(value, bool):
        return NEUTRAL_RATING
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        match = _LEADING_NUMBER.match(value)
        if match is None:
            return NEUTRAL_RATING
        number = float(match.group(1).replace(",", "."))
    else:
        return NEUTRAL_RATING

    if not math.isfinite(number):
        return NEUTRAL_RATING
    return min(MAX_RATING, max(0.0, number))


def clean_text(value: Any, *, max_length: int = MAX_TEXT_LENGTH) -> str:
    """
    Collapse whitespace and truncate to `max_length` characters.
    """

    if value is None:
        return ""
    return _WHITESPACE.sub(" ", str(value)).strip()[:max_length]


def optional_text(value: Any, *, max_length: int = MAX_TEXT_LENGTH) -> str | None:
    text = clean_text(value, max_length=max_length)
    return text or None


def coerce_string_list(value: Any) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        text = clean_text(value)
        return (text,) if text else ()
    if isinstance(value, Sequence):
        items = (clean_text(item) for item in value if item is not None)
        return tuple(item for item in items if item)
    return ()


def first_present(payload: Mapping[str, Any], keys: Sequence[str]) -> Any:
    """
    Return the first value under `keys` that is neither None nor blank.
    """

    for key in keys:
        value = payload.get(key)
        if value is None:
            continue
        if isinstance(value, str) and not value.strip():
            continue
        return value
    return None


def record_from_payload(payload: Mapping[str, Any]) -> SourceRecord:
    """
    Map one heterogeneous API object onto a SourceRecord.
    """

    def pick(field_name: str) -> Any:
        return first_present(payload, FIELD_ALIASES[field_name])

    return SourceRecord(
        name=clean_text(pick("name"), max_length=MAX_NAME_LENGTH) or DEFAULT_PROVIDER_NAME,
        price=parse_price(pick("price")),
        rating=parse_rating(pick("rating")),
        description=clean_text(pick("description")) or DEFAULT_DESCRIPTION,
        external_url=clean_text(pick("external_url")) or DEFAULT_EXTERNAL_URL,
        organization_number=optional_text(
            pick("organization_number"),
            max_length=MAX_ORGANIZATION_NUMBER_LENGTH,
        ),
        logo_url=optional_text(pick("logo_url")),
        pros=coerce_string_list(pick("pros")),
        cons=coerce_string_list(pick("cons")),
    )
