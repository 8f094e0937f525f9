"""
app/domain/categories.py

Fixed provider category set and legacy slug aliases.
"""

from __future__ import annotations


class ProviderCategory:
    ELECTRICITY = "electricity"
    MOBILE = "mobile"
    INTERNET = "internet"
    INSURANCE = "insurance"
    BANKING = "banking"
    HOME_ALARM = "home-alarm"


ALL_CATEGORIES: tuple[str, ...] = (
    ProviderCategory.ELECTRICITY,
    ProviderCategory.MOBILE,
    ProviderCategory.INTERNET,
    ProviderCategory.INSURANCE,
    ProviderCategory.BANKING,
    ProviderCategory.HOME_ALARM,
)

# Norwegian slugs used by the comparison site's URLs and older provider files.
CATEGORY_ALIASES: dict[str, str] = {
    "strom": ProviderCategory.ELECTRICITY,
    "strøm": ProviderCategory.ELECTRICITY,
    "mobil": ProviderCategory.MOBILE,
    "internett": ProviderCategory.INTERNET,
    "broadband": ProviderCategory.INTERNET,
    "forsikring": ProviderCategory.INSURANCE,
    "bank": ProviderCategory.BANKING,
    "boligalarm": ProviderCategory.HOME_ALARM,
    "home_alarm": ProviderCategory.HOME_ALARM,
    "homealarm": ProviderCategory.HOME_ALARM,
}


def normalize_category(value: str | None) -> str | None:
    """
    Resolve a category id or alias to its canonical value.

    Returns None when the value is not a recognised category.
    """

    if value is None:
        return None
    candidate = str(value).strip().lower()
    if candidate in ALL_CATEGORIES:
        return candidate
    return CATEGORY_ALIASES.get(candidate)
