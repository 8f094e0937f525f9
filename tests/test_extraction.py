"""
tests/test_extraction.py

Rule and selector based field extraction from provider pages.
"""

from __future__ import annotations

import re

import pytest

from app.acquisition.extraction import (
    DEFAULT_RULES,
    ExtractionRule,
    absolute_url,
    apply_rules,
    extract_fields,
)

PROVIDER_PAGE = """
<html>
<head>
  <meta name="description" content="Norges mest fornøyde strømkunder &amp; gode priser">
  <meta property="og:image" content="/static/logo.png">
</head>
<body>
  <p>Ring oss på +47 22 33 44 55 eller send e-post til kundeservice@fjordkraft.no</p>
  <address>Folke Bernadottes vei 38<br>5147 Fyllingsdalen</address>
  <div class="price">Pris 49,90 kr/mnd</div>
  <div>Rating: 4.6 av 5</div>
  <footer>Org.nr: 976944801</footer>
</body>
</html>
"""


# ---------------------------------------------------------------------------
# Pattern rules
# ---------------------------------------------------------------------------


class TestDefaultRules:
    @pytest.fixture()
    def extracted(self):
        return extract_fields(PROVIDER_PAGE, base_url="https://www.fjordkraft.no/privat/")

    def test_description_from_meta_is_unescaped(self, extracted) -> None:
        assert extracted.description == "Norges mest fornøyde strømkunder & gode priser"

    def test_contact_details(self, extracted) -> None:
        assert extracted.phone == "+47 22 33 44 55"
        assert extracted.email == "kundeservice@fjordkraft.no"
        assert extracted.address == "Folke Bernadottes vei 38 5147 Fyllingsdalen"

    def test_price_and_rating(self, extracted) -> None:
        assert extracted.price == pytest.approx(49.9)
        assert extracted.rating == pytest.approx(4.6)

    def test_logo_is_resolved_against_page_url(self, extracted) -> None:
        assert extracted.logo_url == "https://www.fjordkraft.no/static/logo.png"

    def test_organization_number(self, extracted) -> None:
        assert extracted.organization_number == "976944801"

    def test_empty_page_yields_no_fields(self) -> None:
        extracted = extract_fields("<html><body></body></html>")
        assert all(value is None for value in vars(extracted).values())

    def test_noreply_addresses_are_skipped(self) -> None:
        page = "<p>noreply@tibber.com</p><p>hei@tibber.com</p>"
        assert extract_fields(page).email == "hei@tibber.com"

    def test_price_after_amount(self) -> None:
        assert extract_fields("<p>Fra 1 299 kr/mnd</p>").price == pytest.approx(1299.0)

    def test_implausible_price_is_ignored(self) -> None:
        assert extract_fields("<p>Omsetning kr 2500000</p>").price is None

    def test_first_matching_rule_wins(self) -> None:
        page = (
            '<meta property="og:description" content="Fra Open Graph">'
            '<meta name="description" content="Fra meta">'
        )
        assert extract_fields(page).description == "Fra meta"


class TestApplyRules:
    def test_custom_rules_are_plain_data(self) -> None:
        rules = (
            ExtractionRule(
                field="description",
                pattern=re.compile(r"<h1>([^<]+)</h1>"),
                extractor=lambda match, base_url: match.group(1).upper(),
            ),
        )
        assert apply_rules("<h1>Altibox</h1>", rules) == {"description": "ALTIBOX"}

    def test_extractor_returning_none_keeps_looking(self) -> None:
        rules = (
            ExtractionRule(
                field="email",
                pattern=re.compile(r"\S+@\S+"),
                extractor=lambda match, base_url: None if "spam" in match.group(0) else match.group(0),
            ),
        )
        assert apply_rules("spam@x.no post@telia.no", rules) == {"email": "post@telia.no"}

    def test_default_rules_cover_every_field(self) -> None:
        assert {rule.field for rule in DEFAULT_RULES} == {
            "description",
            "phone",
            "email",
            "address",
            "price",
            "rating",
            "logo_url",
            "organization_number",
        }


# ---------------------------------------------------------------------------
# CSS selectors
# ---------------------------------------------------------------------------


class TestSelectors:
    PAGE = """
    <html><body>
      <h1 class="title">Telia Mobil 10GB</h1>
      <div class="price-box">kr 399,-</div>
      <span class="stars">4,1</span>
      <img class="brand" src="/img/telia.svg">
      <p class="description">Ikke denne</p>
    </body></html>
    """

    def test_selectors_take_precedence_over_rules(self) -> None:
        extracted = extract_fields(
            self.PAGE,
            base_url="https://www.telia.no/",
            selectors={
                "description": ["h1.title"],
                "price": [".does-not-exist", ".price-box"],
                "rating": [".stars"],
                "logo_url": ["img.brand"],
            },
        )
        assert extracted.description == "Telia Mobil 10GB"
        assert extracted.price == pytest.approx(399.0)
        assert extracted.rating == pytest.approx(4.1)
        assert extracted.logo_url == "https://www.telia.no/img/telia.svg"

    def test_invalid_selector_is_skipped(self) -> None:
        extracted = extract_fields(self.PAGE, selectors={"description": ["[[", "h1.title"]})
        assert extracted.description == "Telia Mobil 10GB"

    def test_unknown_selector_fields_are_ignored(self) -> None:
        extracted = extract_fields(self.PAGE, selectors={"colour": ["h1"]})
        assert not hasattr(extracted, "colour")


class TestAbsoluteUrl:
    @pytest.mark.parametrize(
        "url, base, expected",
        [
            ("https://cdn.no/a.png", "https://x.no/", "https://cdn.no/a.png"),
            ("/a.png", "https://x.no/privat/", "https://x.no/a.png"),
            ("a.png", "https://x.no/privat/", "https://x.no/privat/a.png"),
            ("a.png", "", "a.png"),
        ],
    )
    def test_resolution(self, url: str, base: str, expected: str) -> None:
        assert absolute_url(url, base) == expected
