from __future__ import annotations

import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Numeric,
    String,
    Text,
    func,
    text,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.sql import expression as sa_expr


class Base(DeclarativeBase):
    pass


def _uuid() -> str:
    return str(uuid.uuid4())


# Money columns share one precision so sums never widen across tables.
def _money(*, nullable: bool = False, default: bool = True) -> Any:
    return mapped_column(
        Numeric(18, 2),
        nullable=nullable,
        server_default=text("0") if default else None,
    )


def _created_at() -> Any:
    return mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())


def _updated_at() -> Any:
    return mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )


# ---------------------------
# Customers and suppliers
# ---------------------------


class Customer(Base):
    __tablename__ = "customers"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    customer_code: Mapped[str] = mapped_column(String, nullable=False)
    # Company name; statements and listings are ordered by it.
    customer_name: Mapped[str] = mapped_column(String, nullable=False)
    owner: Mapped[str | None] = mapped_column(String, nullable=True)
    address: Mapped[str | None] = mapped_column(Text, nullable=True)
    phone_number: Mapped[str | None] = mapped_column(String, nullable=True)
    email: Mapped[str | None] = mapped_column(String, nullable=True)
    vat_no: Mapped[str | None] = mapped_column(String, nullable=True)
    reg_no: Mapped[str | None] = mapped_column(String, nullable=True)
    price_category: Mapped[str | None] = mapped_column(String, nullable=True)
    credit_limit: Mapped[Decimal] = _money()
    # Display cache only. Payments adjust it; statements never read it.
    current_balance: Mapped[Decimal] = _money()
    created_at: Mapped[datetime] = _created_at()
    updated_at: Mapped[datetime] = _updated_at()


class Supplier(Base):
    __tablename__ = "suppliers"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    supplier_code: Mapped[str] = mapped_column(String, nullable=False)
    supplier_name: Mapped[str] = mapped_column(String, nullable=False)
    contact_person: Mapped[str | None] = mapped_column(String, nullable=True)
    address: Mapped[str | None] = mapped_column(Text, nullable=True)
    cell_number: Mapped[str | None] = mapped_column(String, nullable=True)
    current_balance: Mapped[Decimal] = _money()
    ageing_balance: Mapped[Decimal | None] = _money(nullable=True, default=False)
    contra: Mapped[str | None] = mapped_column(String, nullable=True)
    created_at: Mapped[datetime] = _created_at()
    updated_at: Mapped[datetime] = _updated_at()


# ---------------------------
# Stock
# ---------------------------


class StockItem(Base):
    __tablename__ = "stock_items"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    stock_code: Mapped[str] = mapped_column(String, nullable=False)
    stock_descr: Mapped[str] = mapped_column(String, nullable=False)
    category: Mapped[str] = mapped_column(String, nullable=False, server_default=text("'General'"))
    size: Mapped[str | None] = mapped_column(String, nullable=True)
    cost_price: Mapped[Decimal] = _money()
    # Price C; the default selling price on documents.
    selling_price: Mapped[Decimal] = _money()
    price_a: Mapped[Decimal] = _money()
    price_b: Mapped[Decimal] = _money()
    price_d: Mapped[Decimal] = _money()
    price_e: Mapped[Decimal] = _money()
    last_cost: Mapped[Decimal] = _money()
    quantity_on_hand: Mapped[Decimal] = mapped_column(
        Numeric(18, 3), nullable=False, server_default=text("0")
    )
    quantity_in_warehouse: Mapped[Decimal] = mapped_column(
        Numeric(18, 3), nullable=False, server_default=text("0")
    )
    supplier: Mapped[str | None] = mapped_column(String, nullable=True)
    vat: Mapped[Decimal] = mapped_column(Numeric(5, 2), nullable=False, server_default=text("0"))
    image_data_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    min_level: Mapped[Decimal] = mapped_column(
        Numeric(18, 3), nullable=False, server_default=text("0")
    )
    max_level: Mapped[Decimal] = mapped_column(
        Numeric(18, 3), nullable=False, server_default=text("0")
    )
    promotion: Mapped[bool] = mapped_column(
        Boolean, nullable=False, server_default=sa_expr.false()
    )
    promo_start_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    promo_end_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    promo_price: Mapped[Decimal | None] = _money(nullable=True, default=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=sa_expr.true())
    created_at: Mapped[datetime] = _created_at()
    updated_at: Mapped[datetime] = _updated_at()


# ---------------------------
# Documents: invoices and quotes
# ---------------------------


class Invoice(Base):
    __tablename__ = "invoices"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    invoice_no: Mapped[str] = mapped_column(String, nullable=False)
    date: Mapped[date] = mapped_column(Date, nullable=False)
    customer_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("customers.id", ondelete="SET NULL"), nullable=True
    )
    work_scope: Mapped[str | None] = mapped_column(Text, nullable=True)
    subtotal: Mapped[Decimal] = _money()
    vat_amount: Mapped[Decimal] = _money()
    total_amount: Mapped[Decimal] = _money()
    status: Mapped[str] = mapped_column(String, nullable=False, server_default=text("'Draft'"))
    is_vat_invoice: Mapped[bool] = mapped_column(
        Boolean, nullable=False, server_default=sa_expr.true()
    )
    created_at: Mapped[datetime] = _created_at()
    updated_at: Mapped[datetime] = _updated_at()

    __table_args__ = (
        CheckConstraint(
            "status in ('Draft','Sent','Paid','Cancelled')",
            name="ck_invoices_status",
        ),
        Index("ix_invoices_user_customer_date", "user_id", "customer_id", "date"),
    )


class InvoiceItem(Base):
    __tablename__ = "invoice_items"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    invoice_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("invoices.id", ondelete="CASCADE"), nullable=False
    )
    stock_item_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("stock_items.id", ondelete="SET NULL"), nullable=True
    )
    description: Mapped[str] = mapped_column(Text, nullable=False)
    quantity: Mapped[Decimal] = mapped_column(Numeric(18, 3), nullable=False)
    unit_price: Mapped[Decimal] = _money(default=False)
    # Percentage, e.g. 15 for 15%.
    vat_rate: Mapped[Decimal] = mapped_column(
        Numeric(5, 2), nullable=False, server_default=text("0")
    )
    # Total including VAT.
    line_total: Mapped[Decimal] = _money()
    created_at: Mapped[datetime] = _created_at()


class Quote(Base):
    __tablename__ = "quotes"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    quote_no: Mapped[str] = mapped_column(String, nullable=False)
    date: Mapped[date] = mapped_column(Date, nullable=False)
    customer_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("customers.id", ondelete="SET NULL"), nullable=True
    )
    work_scope: Mapped[str | None] = mapped_column(Text, nullable=True)
    subtotal: Mapped[Decimal] = _money()
    vat_amount: Mapped[Decimal] = _money()
    total_amount: Mapped[Decimal] = _money()
    status: Mapped[str] = mapped_column(String, nullable=False, server_default=text("'Draft'"))
    created_at: Mapped[datetime] = _created_at()
    updated_at: Mapped[datetime] = _updated_at()

    __table_args__ = (
        CheckConstraint(
            "status in ('Draft','Sent','Accepted','Invoiced','Cancelled')",
            name="ck_quotes_status",
        ),
    )


class QuoteItem(Base):
    __tablename__ = "quote_items"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    quote_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("quotes.id", ondelete="CASCADE"), nullable=False
    )
    stock_item_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("stock_items.id", ondelete="SET NULL"), nullable=True
    )
    description: Mapped[str] = mapped_column(Text, nullable=False)
    quantity: Mapped[Decimal] = mapped_column(Numeric(18, 3), nullable=False)
    unit_price: Mapped[Decimal] = _money(default=False)
    vat_rate: Mapped[Decimal] = mapped_column(
        Numeric(5, 2), nullable=False, server_default=text("0")
    )
    line_total: Mapped[Decimal] = _money()
    created_at: Mapped[datetime] = _created_at()


# ---------------------------
# Money movements
# ---------------------------


class Payment(Base):
    __tablename__ = "payments"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    date: Mapped[date] = mapped_column(Date, nullable=False)
    customer_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("customers.id", ondelete="SET NULL"), nullable=True
    )
    amount: Mapped[Decimal] = _money(default=False)
    method: Mapped[str] = mapped_column(String, nullable=False, server_default=text("'EFT'"))
    allocation_type: Mapped[str] = mapped_column(
        String, nullable=False, server_default=text("'Whole'")
    )
    # Set when allocation_type is 'Invoice'.
    invoice_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("invoices.id", ondelete="SET NULL"), nullable=True
    )
    created_at: Mapped[datetime] = _created_at()

    __table_args__ = (
        CheckConstraint("method in ('Cash','EFT')", name="ck_payments_method"),
        CheckConstraint(
            "allocation_type in ('Invoice','Whole')", name="ck_payments_allocation_type"
        ),
        Index("ix_payments_user_customer_date", "user_id", "customer_id", "date"),
    )


class SupplierPayment(Base):
    __tablename__ = "supplier_payments"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    date: Mapped[date] = mapped_column(Date, nullable=False)
    supplier_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("suppliers.id", ondelete="SET NULL"), nullable=True
    )
    amount: Mapped[Decimal] = _money(default=False)
    method: Mapped[str] = mapped_column(String, nullable=False, server_default=text("'EFT'"))
    reference: Mapped[str | None] = mapped_column(String, nullable=True)
    created_at: Mapped[datetime] = _created_at()

    __table_args__ = (
        CheckConstraint("method in ('Cash','EFT')", name="ck_supplier_payments_method"),
    )


class Grv(Base):
    """Goods received voucher: stock delivered by a supplier."""

    __tablename__ = "grvs"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    date: Mapped[date] = mapped_column(Date, nullable=False)
    supplier_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("suppliers.id", ondelete="SET NULL"), nullable=True
    )
    # Supplier's delivery note or invoice number.
    reference: Mapped[str] = mapped_column(String, nullable=False)
    order_no: Mapped[str | None] = mapped_column(String, nullable=True)
    note: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = _created_at()
    updated_at: Mapped[datetime] = _updated_at()


class GrvItem(Base):
    __tablename__ = "grv_items"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    grv_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("grvs.id", ondelete="CASCADE"), nullable=False
    )
    stock_item_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("stock_items.id", ondelete="SET NULL"), nullable=True
    )
    qty: Mapped[Decimal] = mapped_column(Numeric(18, 3), nullable=False)
    cost_price: Mapped[Decimal] = _money(default=False)
    selling_price: Mapped[Decimal | None] = _money(nullable=True, default=False)
    created_at: Mapped[datetime] = _created_at()


# ---------------------------
# Staff, workflows, fuel
# ---------------------------


class Staff(Base):
    __tablename__ = "staff"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    first_name: Mapped[str] = mapped_column(String, nullable=False)
    last_name: Mapped[str] = mapped_column(String, nullable=False)
    id_number: Mapped[str | None] = mapped_column(String, nullable=True)
    address: Mapped[str | None] = mapped_column(Text, nullable=True)
    cell_number: Mapped[str | None] = mapped_column(String, nullable=True)
    pay_method: Mapped[str] = mapped_column(
        String, nullable=False, server_default=text("'Monthly'")
    )
    rate: Mapped[Decimal] = _money()
    deductions: Mapped[Decimal] = _money()
    advance: Mapped[Decimal] = _money()
    loans: Mapped[Decimal] = _money()
    salary_total: Mapped[Decimal] = _money()
    created_at: Mapped[datetime] = _created_at()
    updated_at: Mapped[datetime] = _updated_at()

    __table_args__ = (
        CheckConstraint(
            "pay_method in ('Daily','Weekly','Monthly')", name="ck_staff_pay_method"
        ),
    )


class Workflow(Base):
    __tablename__ = "workflows"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    date: Mapped[date] = mapped_column(Date, nullable=False)
    customer_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("customers.id", ondelete="SET NULL"), nullable=True
    )
    location: Mapped[str | None] = mapped_column(String, nullable=True)
    estimated_cost: Mapped[Decimal] = _money()
    status: Mapped[str] = mapped_column(String, nullable=False, server_default=text("'Pending'"))
    staff_allocated: Mapped[list[str] | None] = mapped_column(JSON, nullable=True)
    created_at: Mapped[datetime] = _created_at()
    updated_at: Mapped[datetime] = _updated_at()

    __table_args__ = (
        CheckConstraint(
            "status in ('Pending','In Progress','Completed','Invoiced')",
            name="ck_workflows_status",
        ),
    )


class WorkflowItem(Base):
    __tablename__ = "workflow_items"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    workflow_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("workflows.id", ondelete="CASCADE"), nullable=False
    )
    stock_item_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("stock_items.id", ondelete="SET NULL"), nullable=True
    )
    quantity: Mapped[Decimal] = mapped_column(Numeric(18, 3), nullable=False)
    created_at: Mapped[datetime] = _created_at()


class FuelLog(Base):
    __tablename__ = "fuel_logs"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    date: Mapped[date] = mapped_column(Date, nullable=False)
    vehicle: Mapped[str] = mapped_column(String, nullable=False)
    mileage: Mapped[Decimal] = mapped_column(Numeric(18, 1), nullable=False)
    km_used: Mapped[Decimal] = mapped_column(Numeric(18, 1), nullable=False)
    litres_filled: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    # Amount paid in the local currency (rand).
    rand_value: Mapped[Decimal] = _money(default=False)
    garage_name: Mapped[str | None] = mapped_column(String, nullable=True)
    created_at: Mapped[datetime] = _created_at()


__all__ = [
    "Base",
    "Customer",
    "FuelLog",
    "Grv",
    "GrvItem",
    "Invoice",
    "InvoiceItem",
    "Payment",
    "Quote",
    "QuoteItem",
    "Staff",
    "StockItem",
    "Supplier",
    "SupplierPayment",
    "Workflow",
    "WorkflowItem",
]
