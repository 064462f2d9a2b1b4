"""Add publication flag to catalog activities.

Revision ID: 20250615_000002
Revises: 20250601_000001
Create Date: 2025-06-15 00:00:02
"""
from __future__ import annotations

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "20250615_000002"
down_revision: Union[str, None] = "20250601_000001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

CATALOG_TABLES = ("formations", "stages", "animations")


def upgrade() -> None:
    """Add ``published`` to formations, stages and animations; existing rows start as drafts."""
    for table in CATALOG_TABLES:
        op.add_column(table, sa.Column("published", sa.Boolean(), nullable=False, server_default=sa.false()))
        op.create_index(f"ix_{table}_published", table, ["published"])


def downgrade() -> None:
    """Drop the publication flag."""
    for table in CATALOG_TABLES:
        op.drop_index(f"ix_{table}_published", table_name=table)
        op.drop_column(table, "published")
