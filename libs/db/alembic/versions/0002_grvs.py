# ruff: noqa: I001
"""Goods received vouchers and their lines.

Revision ID: 0002_grvs
Revises: 0001_backoffice_core
Create Date: 2025-11-17
"""

from __future__ import annotations

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op


# revision identifiers, used by Alembic.
revision: str = "0002_grvs"
down_revision: str | None = "0001_backoffice_core"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _timestamp(name: str) -> sa.Column:
    return sa.Column(
        name, sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()
    )


def upgrade() -> None:
    op.create_table(
        "grvs",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(64), nullable=False, index=True),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column(
            "supplier_id",
            sa.String(36),
            sa.ForeignKey("suppliers.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("reference", sa.String(), nullable=False),
        sa.Column("order_no", sa.String(), nullable=True),
        sa.Column("note", sa.Text(), nullable=True),
        _timestamp("created_at"),
        _timestamp("updated_at"),
    )

    op.create_table(
        "grv_items",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(64), nullable=False, index=True),
        sa.Column(
            "grv_id",
            sa.String(36),
            sa.ForeignKey("grvs.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "stock_item_id",
            sa.String(36),
            sa.ForeignKey("stock_items.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("qty", sa.Numeric(18, 3), nullable=False),
        sa.Column("cost_price", sa.Numeric(18, 2), nullable=False),
        sa.Column("selling_price", sa.Numeric(18, 2), nullable=True),
        _timestamp("created_at"),
    )


def downgrade() -> None:
    op.drop_table("grv_items")
    op.drop_table("grvs")
