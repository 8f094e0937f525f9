"""
Placeholder providers returned by the API fetcher in degraded mode.

Every record is marked synthetic and is never written to the store.
"""

from __future__ import annotations

from app.domain.categories import ProviderCategory, normalize_category
from app.domain.provider import SourceRecord

_SEED_PROVIDERS: dict[str, tuple[SourceRecord, ...]] = {
    ProviderCategory.ELECTRICITY: (
        SourceRecord(
            name="Hafslund Strøm",
            price=89.5,
            rating=4.2,
            description="Grønn strøm fra Hafslund med konkurransedyktige priser",
            external_url="https://hafslund.no",
            organization_number="123456789",
            synthetic=True,
        ),
    ),
    ProviderCategory.INSURANCE: (
        SourceRecord(
            name="If Skadeforsikring",
            price=299.0,
            rating=4.3,
            description="Omfattende forsikringsdekning med god kundeservice",
            external_url="https://if.no",
            organization_number="321654987",
            synthetic=True,
        ),
    ),
    ProviderCategory.BANKING: (
        SourceRecord(
            name="DNB Bank",
            price=0.0,
            rating=4.1,
            description="Norges største bank med full digital løsning",
            external_url="https://dnb.no",
            organization_number="951882953",
            synthetic=True,
        ),
    ),
    ProviderCategory.MOBILE: (
        SourceRecord(
            name="Telenor Mobil",
            price=399.0,
            rating=4.2,
            description="Norges største mobiloperatør med best dekning",
            external_url="https://telenor.no",
            organization_number="935929954",
            synthetic=True,
        ),
    ),
    ProviderCategory.INTERNET: (
        SourceRecord(
            name="Telenor Fiber",
            price=699.0,
            rating=4.1,
            description="Superrask fiber og ADSL",
            external_url="https://telenor.no/fiber",
            organization_number="935929954",
            synthetic=True,
        ),
    ),
    ProviderCategory.HOME_ALARM: (
        SourceRecord(
            name="Verisure Norge",
            price=599.0,
            rating=4.4,
            description="Ledende leverandør av boligalarmer og sikkerhet",
            external_url="https://verisure.no",
            organization_number="987654321",
            synthetic=True,
        ),
    ),
}


def seed_records(category: str) -> list[SourceRecord]:
    resolved = normalize_category(category)
    if resolved is None:
        return []
    return list(_SEED_PROVIDERS.get(resolved, ()))
