"""
db/models/provider_fingerprint.py

Content fingerprints seen per provider, with the endpoint that produced them.
"""

from __future__ import annotations

import uuid

from sqlalchemy import ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, CreatedAtMixin, UUIDPrimaryKeyMixin

FINGERPRINT_UNIQUE_CONSTRAINT = "uq_provider_fingerprints_provider_hash"


class ProviderFingerprint(UUIDPrimaryKeyMixin, CreatedAtMixin, Base):
    __tablename__ = "provider_fingerprints"

    provider_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("providers.id", ondelete="CASCADE"),
        nullable=False,
    )
    content_hash: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        comment="SHA-256 hex digest of normalized provider fields",
    )
    source_endpoint_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("provider_endpoints.id", ondelete="SET NULL"),
        nullable=True,
    )

    __table_args__ = (
        UniqueConstraint("provider_id", "content_hash", name=FINGERPRINT_UNIQUE_CONSTRAINT),
        Index("ix_provider_fingerprints_provider_id", "provider_id"),
    )
