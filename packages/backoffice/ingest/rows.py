"""Row schemas for CSV imports.

One pydantic model per importable collection. CSV cells arrive as strings,
so validation runs in lax mode: amounts parse to ``Decimal``, dates accept
any ISO-8601 form handled by :func:`~backoffice.normalizers.to_date`, and
blank optional cells become ``None``. Unknown columns are ignored.
"""

from __future__ import annotations

import datetime as dt
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator

from ..models import AllocationType, InvoiceStatus, PaymentMethod
from ..normalizers import to_date


def _is_blank(v: Any) -> bool:
    return v is None or (isinstance(v, str) and not v.strip())


class _CsvRow(BaseModel):
    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True, use_enum_values=True)

    @field_validator("*", mode="before")
    @classmethod
    def _blank_to_none(cls, v: Any) -> Any:
        return None if _is_blank(v) else v


class CustomerRow(_CsvRow):
    customer_code: str
    customer_name: str
    owner: str | None = None
    address: str | None = None
    phone_number: str | None = None
    email: str | None = None
    vat_no: str | None = None
    reg_no: str | None = None
    price_category: str | None = None
    credit_limit: Decimal = Decimal("0")
    current_balance: Decimal = Decimal("0")

    @field_validator("credit_limit", "current_balance", mode="before")
    @classmethod
    def _blank_amount(cls, v: Any) -> Any:
        return Decimal("0") if _is_blank(v) else v


class InvoiceRow(_CsvRow):
    invoice_no: str
    date: dt.date
    customer_id: str | None = None
    total_amount: Decimal
    subtotal: Decimal | None = None
    vat_amount: Decimal | None = None
    status: InvoiceStatus = InvoiceStatus.DRAFT
    work_scope: str | None = None

    @field_validator("date", mode="before")
    @classmethod
    def _iso_day(cls, v: Any) -> Any:
        return None if _is_blank(v) else to_date(v)

    @field_validator("status", mode="before")
    @classmethod
    def _default_status(cls, v: Any) -> Any:
        return InvoiceStatus.DRAFT if _is_blank(v) else v


class PaymentRow(_CsvRow):
    date: dt.date
    customer_id: str | None = None
    amount: Decimal
    method: PaymentMethod = PaymentMethod.EFT
    allocation_type: AllocationType = AllocationType.WHOLE
    invoice_id: str | None = None

    @field_validator("date", mode="before")
    @classmethod
    def _iso_day(cls, v: Any) -> Any:
        return None if _is_blank(v) else to_date(v)

    @field_validator("method", mode="before")
    @classmethod
    def _default_method(cls, v: Any) -> Any:
        return PaymentMethod.EFT if _is_blank(v) else v

    @field_validator("allocation_type", mode="before")
    @classmethod
    def _default_allocation(cls, v: Any) -> Any:
        return AllocationType.WHOLE if _is_blank(v) else v

    @field_validator("amount")
    @classmethod
    def _positive(cls, v: Decimal) -> Decimal:
        if v <= 0:
            raise ValueError("amount must be positive")
        return v


ROW_MODELS: dict[str, type[_CsvRow]] = {
    "customers": CustomerRow,
    "invoices": InvoiceRow,
    "payments": PaymentRow,
}


__all__ = ["CustomerRow", "InvoiceRow", "PaymentRow", "ROW_MODELS"]
