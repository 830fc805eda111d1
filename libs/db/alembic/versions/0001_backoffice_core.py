# ruff: noqa: I001
"""Back-office core tables.

Revision ID: 0001_backoffice_core
Revises: None
Create Date: 2025-11-03
"""

from __future__ import annotations

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op


# revision identifiers, used by Alembic.
revision: str = "0001_backoffice_core"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _id() -> sa.Column:
    return sa.Column("id", sa.String(36), primary_key=True)


def _user_id() -> sa.Column:
    return sa.Column("user_id", sa.String(64), nullable=False, index=True)


def _money(name: str, *, nullable: bool = False, default: bool = True) -> sa.Column:
    return sa.Column(
        name,
        sa.Numeric(18, 2),
        nullable=nullable,
        server_default=sa.text("0") if default else None,
    )


def _qty(name: str, *, default: bool = True) -> sa.Column:
    return sa.Column(
        name, sa.Numeric(18, 3), nullable=False, server_default=sa.text("0") if default else None
    )


def _timestamps(*, updated: bool = True) -> list[sa.Column]:
    cols = [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        )
    ]
    if updated:
        cols.append(
            sa.Column(
                "updated_at",
                sa.DateTime(timezone=True),
                nullable=False,
                server_default=sa.func.now(),
            )
        )
    return cols


def upgrade() -> None:
    op.create_table(
        "customers",
        _id(),
        _user_id(),
        sa.Column("customer_code", sa.String(), nullable=False),
        sa.Column("customer_name", sa.String(), nullable=False),
        sa.Column("owner", sa.String(), nullable=True),
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("phone_number", sa.String(), nullable=True),
        sa.Column("email", sa.String(), nullable=True),
        sa.Column("vat_no", sa.String(), nullable=True),
        sa.Column("reg_no", sa.String(), nullable=True),
        sa.Column("price_category", sa.String(), nullable=True),
        _money("credit_limit"),
        _money("current_balance"),
        *_timestamps(),
    )

    op.create_table(
        "suppliers",
        _id(),
        _user_id(),
        sa.Column("supplier_code", sa.String(), nullable=False),
        sa.Column("supplier_name", sa.String(), nullable=False),
        sa.Column("contact_person", sa.String(), nullable=True),
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("cell_number", sa.String(), nullable=True),
        _money("current_balance"),
        _money("ageing_balance", nullable=True, default=False),
        sa.Column("contra", sa.String(), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "stock_items",
        _id(),
        _user_id(),
        sa.Column("stock_code", sa.String(), nullable=False),
        sa.Column("stock_descr", sa.String(), nullable=False),
        sa.Column("category", sa.String(), nullable=False, server_default=sa.text("'General'")),
        sa.Column("size", sa.String(), nullable=True),
        _money("cost_price"),
        _money("selling_price"),
        _money("price_a"),
        _money("price_b"),
        _money("price_d"),
        _money("price_e"),
        _money("last_cost"),
        _qty("quantity_on_hand"),
        _qty("quantity_in_warehouse"),
        sa.Column("supplier", sa.String(), nullable=True),
        sa.Column("vat", sa.Numeric(5, 2), nullable=False, server_default=sa.text("0")),
        sa.Column("image_data_url", sa.Text(), nullable=True),
        _qty("min_level"),
        _qty("max_level"),
        sa.Column("promotion", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("promo_start_date", sa.Date(), nullable=True),
        sa.Column("promo_end_date", sa.Date(), nullable=True),
        _money("promo_price", nullable=True, default=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )

    op.create_table(
        "invoices",
        _id(),
        _user_id(),
        sa.Column("invoice_no", sa.String(), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column(
            "customer_id",
            sa.String(36),
            sa.ForeignKey("customers.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("work_scope", sa.Text(), nullable=True),
        _money("subtotal"),
        _money("vat_amount"),
        _money("total_amount"),
        sa.Column("status", sa.String(), nullable=False, server_default=sa.text("'Draft'")),
        sa.Column("is_vat_invoice", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.CheckConstraint(
            "status in ('Draft','Sent','Paid','Cancelled')", name="ck_invoices_status"
        ),
    )
    op.create_index(
        "ix_invoices_user_customer_date", "invoices", ["user_id", "customer_id", "date"]
    )

    op.create_table(
        "invoice_items",
        _id(),
        _user_id(),
        sa.Column(
            "invoice_id",
            sa.String(36),
            sa.ForeignKey("invoices.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "stock_item_id",
            sa.String(36),
            sa.ForeignKey("stock_items.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("description", sa.Text(), nullable=False),
        _qty("quantity", default=False),
        _money("unit_price", default=False),
        sa.Column("vat_rate", sa.Numeric(5, 2), nullable=False, server_default=sa.text("0")),
        _money("line_total"),
        *_timestamps(updated=False),
    )

    op.create_table(
        "quotes",
        _id(),
        _user_id(),
        sa.Column("quote_no", sa.String(), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column(
            "customer_id",
            sa.String(36),
            sa.ForeignKey("customers.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("work_scope", sa.Text(), nullable=True),
        _money("subtotal"),
        _money("vat_amount"),
        _money("total_amount"),
        sa.Column("status", sa.String(), nullable=False, server_default=sa.text("'Draft'")),
        *_timestamps(),
        sa.CheckConstraint(
            "status in ('Draft','Sent','Accepted','Invoiced','Cancelled')",
            name="ck_quotes_status",
        ),
    )

    op.create_table(
        "quote_items",
        _id(),
        _user_id(),
        sa.Column(
            "quote_id",
            sa.String(36),
            sa.ForeignKey("quotes.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "stock_item_id",
            sa.String(36),
            sa.ForeignKey("stock_items.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("description", sa.Text(), nullable=False),
        _qty("quantity", default=False),
        _money("unit_price", default=False),
        sa.Column("vat_rate", sa.Numeric(5, 2), nullable=False, server_default=sa.text("0")),
        _money("line_total"),
        *_timestamps(updated=False),
    )

    op.create_table(
        "payments",
        _id(),
        _user_id(),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column(
            "customer_id",
            sa.String(36),
            sa.ForeignKey("customers.id", ondelete="SET NULL"),
            nullable=True,
        ),
        _money("amount", default=False),
        sa.Column("method", sa.String(), nullable=False, server_default=sa.text("'EFT'")),
        sa.Column(
            "allocation_type", sa.String(), nullable=False, server_default=sa.text("'Whole'")
        ),
        sa.Column(
            "invoice_id",
            sa.String(36),
            sa.ForeignKey("invoices.id", ondelete="SET NULL"),
            nullable=True,
        ),
        *_timestamps(updated=False),
        sa.CheckConstraint("method in ('Cash','EFT')", name="ck_payments_method"),
        sa.CheckConstraint(
            "allocation_type in ('Invoice','Whole')", name="ck_payments_allocation_type"
        ),
    )
    op.create_index(
        "ix_payments_user_customer_date", "payments", ["user_id", "customer_id", "date"]
    )

    op.create_table(
        "supplier_payments",
        _id(),
        _user_id(),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column(
            "supplier_id",
            sa.String(36),
            sa.ForeignKey("suppliers.id", ondelete="SET NULL"),
            nullable=True,
        ),
        _money("amount", default=False),
        sa.Column("method", sa.String(), nullable=False, server_default=sa.text("'EFT'")),
        sa.Column("reference", sa.String(), nullable=True),
        *_timestamps(updated=False),
        sa.CheckConstraint("method in ('Cash','EFT')", name="ck_supplier_payments_method"),
    )

    op.create_table(
        "staff",
        _id(),
        _user_id(),
        sa.Column("first_name", sa.String(), nullable=False),
        sa.Column("last_name", sa.String(), nullable=False),
        sa.Column("id_number", sa.String(), nullable=True),
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("cell_number", sa.String(), nullable=True),
        sa.Column("pay_method", sa.String(), nullable=False, server_default=sa.text("'Monthly'")),
        _money("rate"),
        _money("deductions"),
        _money("advance"),
        _money("loans"),
        _money("salary_total"),
        *_timestamps(),
        sa.CheckConstraint(
            "pay_method in ('Daily','Weekly','Monthly')", name="ck_staff_pay_method"
        ),
    )

    op.create_table(
        "workflows",
        _id(),
        _user_id(),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column(
            "customer_id",
            sa.String(36),
            sa.ForeignKey("customers.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("location", sa.String(), nullable=True),
        _money("estimated_cost"),
        sa.Column("status", sa.String(), nullable=False, server_default=sa.text("'Pending'")),
        sa.Column("staff_allocated", sa.JSON(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint(
            "status in ('Pending','In Progress','Completed','Invoiced')",
            name="ck_workflows_status",
        ),
    )

    op.create_table(
        "workflow_items",
        _id(),
        _user_id(),
        sa.Column(
            "workflow_id",
            sa.String(36),
            sa.ForeignKey("workflows.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "stock_item_id",
            sa.String(36),
            sa.ForeignKey("stock_items.id", ondelete="SET NULL"),
            nullable=True,
        ),
        _qty("quantity", default=False),
        *_timestamps(updated=False),
    )

    op.create_table(
        "fuel_logs",
        _id(),
        _user_id(),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("vehicle", sa.String(), nullable=False),
        sa.Column("mileage", sa.Numeric(18, 1), nullable=False),
        sa.Column("km_used", sa.Numeric(18, 1), nullable=False),
        sa.Column("litres_filled", sa.Numeric(18, 2), nullable=False),
        _money("rand_value", default=False),
        sa.Column("garage_name", sa.String(), nullable=True),
        *_timestamps(updated=False),
    )


def downgrade() -> None:
    # Children before parents to satisfy FKs.
    op.drop_table("fuel_logs")
    op.drop_table("workflow_items")
    op.drop_table("workflows")
    op.drop_table("staff")
    op.drop_table("supplier_payments")
    op.drop_index("ix_payments_user_customer_date", table_name="payments")
    op.drop_table("payments")
    op.drop_table("quote_items")
    op.drop_table("quotes")
    op.drop_table("invoice_items")
    op.drop_index("ix_invoices_user_customer_date", table_name="invoices")
    op.drop_table("invoices")
    op.drop_table("stock_items")
    op.drop_table("suppliers")
    op.drop_table("customers")
