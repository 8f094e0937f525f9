"""
tests/test_normalization.py

Price, rating, text and API field-alias normalization.
"""

from __future__ import annotations

import math

import pytest

from app.acquisition.normalization import (
    DEFAULT_DESCRIPTION,
    DEFAULT_EXTERNAL_URL,
    DEFAULT_PROVIDER_NAME,
    MAX_NAME_LENGTH,
    MAX_ORGANIZATION_NUMBER_LENGTH,
    NEUTRAL_RATING,
    clean_text,
    coerce_string_list,
    parse_price,
    parse_rating,
    record_from_payload,
)


# ---------------------------------------------------------------------------
# Price
# ---------------------------------------------------------------------------


class TestParsePrice:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("299", 299.0),
            ("kr 299,-", 299.0),
            ("49,90 kr/mnd", 49.9),
            ("1 299,50 kr", 1299.5),
            ("1.299,50", 1299.5),
            ("1,299.50", 1299.5),
            ("1.299.000", 1299000.0),
            ("NOK 0.79", 0.79),
        ],
    )
    def test_parses_norwegian_and_english_formats(self, raw: str, expected: float) -> None:
        assert parse_price(raw) == pytest.approx(expected)

    @pytest.mark.parametrize("raw", ["", "gratis", "kr", None, [], {"price": 10}])
    def test_unparseable_input_is_zero(self, raw: object) -> None:
        assert parse_price(raw) == 0.0

    def test_numbers_pass_through(self) -> None:
        assert parse_price(349) == 349.0
        assert parse_price(12.5) == 12.5

    def test_negative_numbers_clamp_to_zero(self) -> None:
        assert parse_price(-10) == 0.0

    def test_non_finite_numbers_are_zero(self) -> None:
        assert parse_price(math.inf) == 0.0
        assert parse_price(math.nan) == 0.0

    def test_booleans_are_not_prices(self) -> None:
        assert parse_price(True) == 0.0


# ---------------------------------------------------------------------------
# Rating
# ---------------------------------------------------------------------------


class TestParseRating:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            (4.5, 4.5),
            (0, 0.0),
            (5, 5.0),
            (7, 5.0),
            (-1, 0.0),
            ("4,2 av 5", 4.2),
            ("3.8", 3.8),
            ("9", 5.0),
        ],
    )
    def test_clamps_into_zero_to_five(self, raw: object, expected: float) -> None:
        assert parse_rating(raw) == pytest.approx(expected)

    @pytest.mark.parametrize("raw", [None, "excellent", "", True, math.nan, ["4"]])
    def test_unparseable_input_is_neutral(self, raw: object) -> None:
        assert parse_rating(raw) == NEUTRAL_RATING


# ---------------------------------------------------------------------------
# Text helpers
# ---------------------------------------------------------------------------


class TestTextHelpers:
    def test_clean_text_collapses_whitespace(self) -> None:
        assert clean_text("  Grønn\n\tstrøm   til  alle ") == "Grønn strøm til alle"

    def test_clean_text_truncates(self) -> None:
        assert len(clean_text("x" * 800)) == 500
        assert clean_text("abcdef", max_length=3) == "abc"

    def test_clean_text_none_is_empty(self) -> None:
        assert clean_text(None) == ""

    def test_coerce_string_list(self) -> None:
        assert coerce_string_list(["Fast pris", "", None, "  Ingen binding "]) == (
            "Fast pris",
            "Ingen binding",
        )
        assert coerce_string_list("Billig") == ("Billig",)
        assert coerce_string_list(42) == ()


# ---------------------------------------------------------------------------
# API payload mapping
# ---------------------------------------------------------------------------


class TestRecordFromPayload:
    def test_uses_field_aliases(self) -> None:
        record = record_from_payload(
            {
                "company_name": "Fjordkraft",
                "monthly_cost": "39,00",
                "score": "4,4",
                "summary": "Strøm til spotpris",
                "homepage": "https://www.fjordkraft.no",
                "business_id": "976944801",
                "image": "https://www.fjordkraft.no/logo.svg",
                "benefits": ["Ingen bindingstid"],
                "drawbacks": "Månedsavgift",
            }
        )

        assert record.name == "Fjordkraft"
        assert record.price == pytest.approx(39.0)
        assert record.rating == pytest.approx(4.4)
        assert record.description == "Strøm til spotpris"
        assert record.external_url == "https://www.fjordkraft.no"
        assert record.organization_number == "976944801"
        assert record.logo_url == "https://www.fjordkraft.no/logo.svg"
        assert record.pros == ("Ingen bindingstid",)
        assert record.cons == ("Månedsavgift",)
        assert record.synthetic is False

    def test_first_alias_wins_and_blank_values_are_skipped(self) -> None:
        record = record_from_payload({"name": "  ", "provider_name": "Tibber", "price": 10, "fee": 99})
        assert record.name == "Tibber"
        assert record.price == 10.0

    def test_missing_fields_get_defaults(self) -> None:
        record = record_from_payload({})
        assert record.name == DEFAULT_PROVIDER_NAME
        assert record.price == 0.0
        assert record.rating == NEUTRAL_RATING
        assert record.description == DEFAULT_DESCRIPTION
        assert record.external_url == DEFAULT_EXTERNAL_URL
        assert record.organization_number is None

    def test_name_and_organization_number_fit_their_columns(self) -> None:
        record = record_from_payload(
            {"name": "Kraft " * 80, "organization_number": "9" * 60}
        )

        assert len(record.name) == MAX_NAME_LENGTH
        assert record.name.startswith("Kraft Kraft")
        assert record.organization_number == "9" * MAX_ORGANIZATION_NUMBER_LENGTH
