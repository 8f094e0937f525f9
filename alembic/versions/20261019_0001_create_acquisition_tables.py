"""create provider acquisition tables

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19 09:00:00
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "providers",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column(
            "category",
            sa.String(length=32),
            nullable=False,
            comment="electricity, mobile, internet, insurance, banking, home-alarm",
        ),
        sa.Column("price", sa.Float(), nullable=False),
        sa.Column("rating", sa.Float(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("external_url", sa.String(length=2048), nullable=False),
        sa.Column("organization_number", sa.String(length=32), nullable=True),
        sa.Column("logo_url", sa.String(length=2048), nullable=True),
        sa.Column("pros", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column("cons", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name", "category", name="uq_providers_name_category"),
    )
    op.create_index("ix_providers_category", "providers", ["category"], unique=False)

    op.create_table(
        "provider_endpoints",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("category", sa.String(length=32), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("provider_name", sa.String(length=255), nullable=True),
        sa.Column("endpoint_type", sa.String(length=20), nullable=False, comment="api, scraping"),
        sa.Column("url", sa.String(length=2048), nullable=False),
        sa.Column("priority", sa.Integer(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("auth_required", sa.Boolean(), nullable=False),
        sa.Column("auth_config", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column(
            "scraping_config",
            postgresql.JSONB(astext_type=sa.Text()),
            nullable=True,
            comment="selectors, waitTime, maxRetries, userAgent, fallbackUrls, useProxy",
        ),
        sa.Column("total_requests", sa.Integer(), server_default="0", nullable=False),
        sa.Column("failure_count", sa.Integer(), server_default="0", nullable=False),
        sa.Column("success_rate", sa.Float(), server_default="0", nullable=False),
        sa.Column("last_success_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_failure_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name", "category", name="uq_provider_endpoints_name_category"),
    )
    op.create_index(
        "ix_provider_endpoints_category_active_priority",
        "provider_endpoints",
        ["category", "is_active", "priority"],
        unique=False,
    )

    op.create_table(
        "provider_fingerprints",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("provider_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column(
            "content_hash",
            sa.String(length=64),
            nullable=False,
            comment="SHA-256 hex digest of normalized provider fields",
        ),
        sa.Column("source_endpoint_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.ForeignKeyConstraint(["provider_id"], ["providers.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["source_endpoint_id"], ["provider_endpoints.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("provider_id", "content_hash", name="uq_provider_fingerprints_provider_hash"),
    )
    op.create_index(
        "ix_provider_fingerprints_provider_id",
        "provider_fingerprints",
        ["provider_id"],
        unique=False,
    )

    op.create_table(
        "endpoint_execution_logs",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("endpoint_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("execution_type", sa.String(length=20), nullable=False, comment="manual, scheduled, fallback"),
        sa.Column("status", sa.String(length=20), nullable=False, comment="success, failure, timeout, error"),
        sa.Column("providers_fetched", sa.Integer(), nullable=False),
        sa.Column("providers_saved", sa.Integer(), nullable=False),
        sa.Column("duplicates_found", sa.Integer(), nullable=False),
        sa.Column("duration_ms", sa.Integer(), nullable=False),
        sa.Column("error_message", sa.Text(), nullable=True),
        sa.Column("response_metadata", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column("executed_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.ForeignKeyConstraint(["endpoint_id"], ["provider_endpoints.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_endpoint_execution_logs_endpoint_id",
        "endpoint_execution_logs",
        ["endpoint_id"],
        unique=False,
    )
    op.create_index(
        "ix_endpoint_execution_logs_executed_at",
        "endpoint_execution_logs",
        ["executed_at"],
        unique=False,
    )

    op.create_table(
        "import_logs",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column(
            "category",
            sa.String(length=64),
            nullable=False,
            comment="Provider category or 'automated_pipeline' for batch roll-ups",
        ),
        sa.Column("total_providers", sa.Integer(), nullable=False),
        sa.Column("successful_imports", sa.Integer(), nullable=False),
        sa.Column("failed_imports", sa.Integer(), nullable=False),
        sa.Column("import_status", sa.String(length=20), nullable=False, comment="completed, failed"),
        sa.Column("error_details", sa.Text(), nullable=True),
        sa.Column("logged_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_import_logs_category", "import_logs", ["category"], unique=False)
    op.create_index("ix_import_logs_logged_at", "import_logs", ["logged_at"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_import_logs_logged_at", table_name="import_logs")
    op.drop_index("ix_import_logs_category", table_name="import_logs")
    op.drop_table("import_logs")
    op.drop_index("ix_endpoint_execution_logs_executed_at", table_name="endpoint_execution_logs")
    op.drop_index("ix_endpoint_execution_logs_endpoint_id", table_name="endpoint_execution_logs")
    op.drop_table("endpoint_execution_logs")
    op.drop_index("ix_provider_fingerprints_provider_id", table_name="provider_fingerprints")
    op.drop_table("provider_fingerprints")
    op.drop_index("ix_provider_endpoints_category_active_priority", table_name="provider_endpoints")
    op.drop_table("provider_endpoints")
    op.drop_index("ix_providers_category", table_name="providers")
    op.drop_table("providers")
