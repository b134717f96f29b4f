"""Initial schema: regions and custom holidays.

Revision ID: 001
Revises: None
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create all tables."""

    # ── regions ───────────────────────────────────────────────────────
    op.create_table(
        "regions",
        sa.Column("code", sa.String(7), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("state", sa.String(2), nullable=False),
        sa.Column("carnaval", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("corpus_christi", sa.Boolean(), nullable=False, server_default=sa.text("false")),
    )
    op.create_index("ix_regions_state", "regions", ["state"])

    # ── custom_holidays ───────────────────────────────────────────────
    op.create_table(
        "custom_holidays",
        sa.Column("code", sa.String(7), sa.ForeignKey("regions.code"), primary_key=True),
        sa.Column("date", sa.String(5), primary_key=True),
        sa.Column("title", sa.String(200), nullable=False),
    )


def downgrade() -> None:
    """Drop all tables in reverse dependency order."""
    op.drop_table("custom_holidays")
    op.drop_index("ix_regions_state", table_name="regions")
    op.drop_table("regions")
