"""
db/models/execution_log.py

Append-only execution telemetry: per-endpoint attempts and per-run roll-ups.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, CreatedAtMixin, UUIDPrimaryKeyMixin


class EndpointExecutionLog(UUIDPrimaryKeyMixin, CreatedAtMixin, Base):
    __tablename__ = "endpoint_execution_logs"

    endpoint_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("provider_endpoints.id", ondelete="CASCADE"),
        nullable=False,
    )
    execution_type: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        comment="manual, scheduled, fallback",
    )
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        comment="success, failure, timeout, error",
    )
    providers_fetched: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    providers_saved: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    duplicates_found: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    duration_ms: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    response_metadata: Mapped[dict[str, Any] | None] = mapped_column(JSONB, nullable=True)
    executed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        Index("ix_endpoint_execution_logs_endpoint_id", "endpoint_id"),
        Index("ix_endpoint_execution_logs_executed_at", "executed_at"),
    )


class ImportLog(UUIDPrimaryKeyMixin, CreatedAtMixin, Base):
    __tablename__ = "import_logs"

    category: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        comment="Provider category or 'automated_pipeline' for batch roll-ups",
    )
    total_providers: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    successful_imports: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    failed_imports: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    import_status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        comment="completed, failed",
    )
    error_details: Mapped[str | None] = mapped_column(Text, nullable=True)
    logged_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        Index("ix_import_logs_category", "category"),
        Index("ix_import_logs_logged_at", "logged_at"),
    )
