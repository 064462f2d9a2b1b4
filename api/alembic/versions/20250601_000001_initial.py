"""Create activity catalog, admin and audit journal tables.

Revision ID: 20250601_000001
Revises:
Create Date: 2025-06-01 00:00:01
"""
from __future__ import annotations

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = "20250601_000001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def _bookable_columns() -> list[sa.Column]:
    return [
        sa.Column("billetweb_id", sa.String(length=120), nullable=True),
        sa.Column("billetweb_url", sa.String(length=1024), nullable=True),
        sa.Column("places_total", sa.Integer(), nullable=True),
        sa.Column("places_left", sa.Integer(), nullable=True),
        sa.Column("is_full", sa.Boolean(), nullable=False, server_default=sa.false()),
    ]


def _capacity_checks(table: str) -> list[sa.CheckConstraint]:
    return [
        sa.CheckConstraint(
            "places_total IS NULL OR places_total >= 0", name=f"ck_{table}_places_total_non_negative"
        ),
        sa.CheckConstraint("places_left IS NULL OR places_left >= 0", name=f"ck_{table}_places_left_non_negative"),
        sa.CheckConstraint(
            "places_left IS NULL OR places_total IS NULL OR places_left <= places_total",
            name=f"ck_{table}_places_left_within_total",
        ),
    ]


def upgrade() -> None:
    """Create formations, stages, animations, admins and audit_logs."""
    op.create_table(
        "formations",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("titre", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        *_bookable_columns(),
        *_timestamps(),
        *_capacity_checks("formations"),
    )
    op.create_table(
        "stages",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("titre", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("age_min", sa.Integer(), nullable=True),
        sa.Column("age_max", sa.Integer(), nullable=True),
        *_bookable_columns(),
        *_timestamps(),
        *_capacity_checks("stages"),
    )
    op.create_table(
        "animations",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("titre", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        *_timestamps(),
    )
    for table in ("formations", "stages"):
        op.create_index(f"ix_{table}_billetweb_id", table, ["billetweb_id"])
    for table in ("formations", "stages", "animations"):
        op.create_index(f"ix_{table}_created_at", table, ["created_at"])

    op.create_table(
        "admins",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("hashed_password", sa.String(length=255), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_admins_email", "admins", ["email"], unique=True)

    op.create_table(
        "audit_logs",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "admin_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("admins.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("action", sa.String(length=120), nullable=False),
        sa.Column("entity", sa.String(length=120), nullable=False),
        sa.Column("entity_id", sa.String(length=120), nullable=True),
        sa.Column("details", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_audit_logs_admin_id", "audit_logs", ["admin_id"])
    op.create_index("ix_audit_logs_action", "audit_logs", ["action"])
    op.create_index("ix_audit_logs_created_at", "audit_logs", ["created_at"])


def downgrade() -> None:
    """Drop all tables created in upgrade."""
    op.drop_table("audit_logs")
    op.drop_table("admins")
    op.drop_table("animations")
    op.drop_table("stages")
    op.drop_table("formations")
