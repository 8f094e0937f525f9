"""
app/repositories/provider_repository.py

Persistence for providers and their content fingerprints.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import select, update
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.orm import Session

from app.domain.provider import SourceRecord
from db.models.provider import PROVIDER_NATURAL_KEY_CONSTRAINT, Provider
from db.models.provider_fingerprint import FINGERPRINT_UNIQUE_CONSTRAINT, ProviderFingerprint


def _mutable_attributes(record: SourceRecord) -> dict[str, object]:
    return {
        "price": record.price,
        "rating": record.rating,
        "description": record.description,
        "external_url": record.external_url,
        "organization_number": record.organization_number,
        "logo_url": record.logo_url,
        "pros": list(record.pros),
        "cons": list(record.cons),
    }


class ProviderRepository:
    """
    Repository for provider rows keyed by (name, category).
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def find_by_name_and_category(self, name: str, category: str) -> Provider | None:
        stmt = select(Provider).where(Provider.name == name, Provider.category == category)
        return self._session.scalars(stmt).one_or_none()

    def insert_if_absent(self, record: SourceRecord, *, category: str) -> Provider | None:
        """
        INSERT ... ON CONFLICT DO NOTHING on the natural key.

        Returns None when another writer already holds (name, category).
        """

        stmt = (
            insert(Provider)
            .values(name=record.name, category=category, **_mutable_attributes(record))
            .on_conflict_do_nothing(constraint=PROVIDER_NATURAL_KEY_CONSTRAINT)
            .returning(Provider)
        )
        return self._session.scalars(stmt).one_or_none()

    def update_attributes(self, provider_id: uuid.UUID, record: SourceRecord) -> Provider:
        stmt = (
            update(Provider)
            .where(Provider.id == provider_id)
            .values(updated_at=datetime.now(timezone.utc), **_mutable_attributes(record))
            .returning(Provider)
        )
        return self._session.scalars(stmt).one()

    def fingerprint_exists(self, provider_id: uuid.UUID, content_hash: str) -> bool:
        stmt = select(ProviderFingerprint.id).where(
            ProviderFingerprint.provider_id == provider_id,
            ProviderFingerprint.content_hash == content_hash,
        )
        return self._session.scalars(stmt).first() is not None

    def insert_fingerprint_if_absent(
        self,
        provider_id: uuid.UUID,
        content_hash: str,
        *,
        endpoint_id: uuid.UUID | None,
    ) -> bool:
        stmt = (
            insert(ProviderFingerprint)
            .values(
                provider_id=provider_id,
                content_hash=content_hash,
                source_endpoint_id=endpoint_id,
            )
            .on_conflict_do_nothing(constraint=FINGERPRINT_UNIQUE_CONSTRAINT)
            .returning(ProviderFingerprint.id)
        )
        return self._session.scalars(stmt).first() is not None
