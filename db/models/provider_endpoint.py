"""
db/models/provider_endpoint.py

Configured acquisition sources per category with rolling request statistics.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import Boolean, DateTime, Float, Index, Integer, String, UniqueConstraint
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, TimestampMixin, UUIDPrimaryKeyMixin

ENDPOINT_NATURAL_KEY_CONSTRAINT = "uq_provider_endpoints_name_category"


class ProviderEndpoint(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "provider_endpoints"

    category: Mapped[str] = mapped_column(String(32), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    provider_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    endpoint_type: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        comment="api, scraping",
    )
    url: Mapped[str] = mapped_column(String(2048), nullable=False)
    priority: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    auth_required: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    auth_config: Mapped[dict[str, Any] | None] = mapped_column(JSONB, nullable=True)
    scraping_config: Mapped[dict[str, Any] | None] = mapped_column(
        JSONB,
        nullable=True,
        comment="selectors, waitTime, maxRetries, userAgent, fallbackUrls, useProxy",
    )
    total_requests: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    failure_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    success_rate: Mapped[float] = mapped_column(Float, nullable=False, default=0.0, server_default="0")
    last_success_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    last_failure_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        UniqueConstraint("name", "category", name=ENDPOINT_NATURAL_KEY_CONSTRAINT),
        Index("ix_provider_endpoints_category_active_priority", "category", "is_active", "priority"),
    )
