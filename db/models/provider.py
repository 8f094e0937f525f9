"""
db/models/provider.py

Category-scoped provider entity identified by (name, category).
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import Float, Index, String, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, TimestampMixin, UUIDPrimaryKeyMixin

PROVIDER_NATURAL_KEY_CONSTRAINT = "uq_providers_name_category"


class Provider(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "providers"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    category: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        comment="electricity, mobile, internet, insurance, banking, home-alarm",
    )
    price: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    rating: Mapped[float] = mapped_column(Float, nullable=False, default=3.5)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    external_url: Mapped[str] = mapped_column(String(2048), nullable=False, default="")
    organization_number: Mapped[str | None] = mapped_column(String(32), nullable=True)
    logo_url: Mapped[str | None] = mapped_column(String(2048), nullable=True)
    pros: Mapped[list[Any]] = mapped_column(JSONB, nullable=False, default=list)
    cons: Mapped[list[Any]] = mapped_column(JSONB, nullable=False, default=list)

    __table_args__ = (
        UniqueConstraint("name", "category", name=PROVIDER_NATURAL_KEY_CONSTRAINT),
        Index("ix_providers_category", "category"),
    )
