"""Record → :class:`~backoffice.models.Transaction` normalizers.

Converts raw invoice and payment records for one client into signed,
day-precision transactions ready for ordering. Also hosts the small value
coercions (amounts, dates, flags) shared by the rest of the package.

Filtering rules:
- Invoices participate when they belong to the client, are dated on or
  before the cutoff, and their status is neither Draft nor Cancelled.
- Payments participate when they belong to the client and are dated on or
  before the cutoff. Payments carry no status.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any

from pydantic import TypeAdapter, ValidationError

from .models import EXCLUDED_INVOICE_STATUSES, Record, Records, Transaction, TransactionKind

PAYMENT_REFERENCE_PREFIX = "PAY-"
_PAYMENT_REFERENCE_CHARS = 4

_BOOL = TypeAdapter(bool)

# ---------------------------------------------------------------------------
# Value coercion
# ---------------------------------------------------------------------------


def to_decimal(raw: Any) -> Decimal:
    """Return ``raw`` as an exact ``Decimal``.

    Floats go through ``str`` first so ``0.1`` becomes ``Decimal("0.1")``
    rather than its binary expansion. ``None`` and empty strings are zero.
    """

    if isinstance(raw, Decimal):
        return raw
    if raw is None:
        return Decimal("0")
    if isinstance(raw, bool):
        raise ValueError(f"invalid amount: {raw!r}")
    s = str(raw).strip()
    if not s:
        return Decimal("0")
    try:
        return Decimal(s)
    except InvalidOperation as exc:
        raise ValueError(f"invalid amount: {raw!r}") from exc


def to_date(raw: Any) -> date:
    """Return the calendar day of ``raw``.

    Accepts ``date``, ``datetime`` and ISO-8601 strings such as
    ``2024-01-05``, ``2024-01-05T10:30:00`` or ``2024-01-05T10:30:00Z``.
    The time of day, and any offset, is dropped.
    """

    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw
    if raw is None:
        raise ValueError("date is required")
    s = str(raw).strip()
    if not s:
        raise ValueError("date is empty")
    # Only the day matters; cut at the first time separator.
    day = s.split("T", 1)[0].split()[0]
    try:
        return date.fromisoformat(day)
    except ValueError as exc:
        raise ValueError(f"invalid ISO date: {raw!r}") from exc


def to_bool(raw: Any, default: bool = False) -> bool:
    """Parse a flag the way pydantic does (``"false"``, ``"0"``, ``"no"`` are false).

    ``None`` and empty strings give ``default``.
    """

    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return default
    try:
        return _BOOL.validate_python(raw.strip() if isinstance(raw, str) else raw)
    except ValidationError as exc:
        raise ValueError(f"invalid flag: {raw!r}") from exc


def resolve_cutoff(cutoff: date | datetime | str | None) -> date:
    """Return the inclusive cutoff day; ``None`` means today."""

    if cutoff is None:
        return date.today()
    return to_date(cutoff)


def payment_reference(payment_id: Any) -> str:
    """Build the display reference for a payment.

    Ids shorter than four characters are used whole; a missing id yields the
    bare prefix.
    """

    ident = "" if payment_id is None else str(payment_id)
    return f"{PAYMENT_REFERENCE_PREFIX}{ident[:_PAYMENT_REFERENCE_CHARS]}"


# ---------------------------------------------------------------------------
# Normalizers
# ---------------------------------------------------------------------------


def _belongs_to(record: Record, client_id: str) -> bool:
    customer_id = record.get("customer_id")
    return customer_id is not None and str(customer_id) == str(client_id)


def normalize_invoices(
    invoices: Records,
    client_id: str,
    cutoff: date | datetime | str | None = None,
) -> list[Transaction]:
    """Map the client's issued invoices up to ``cutoff`` to positive transactions."""

    cutoff_day = resolve_cutoff(cutoff)
    out: list[Transaction] = []
    for inv in invoices:
        if not _belongs_to(inv, client_id):
            continue
        if inv.get("status") in EXCLUDED_INVOICE_STATUSES:
            continue
        day = to_date(inv.get("date"))
        if day > cutoff_day:
            continue
        out.append(
            Transaction(
                date=day,
                kind=TransactionKind.INVOICE,
                reference=str(inv.get("invoice_no") or ""),
                amount=to_decimal(inv.get("total_amount")),
            )
        )
    return out


def normalize_payments(
    payments: Records,
    client_id: str,
    cutoff: date | datetime | str | None = None,
) -> list[Transaction]:
    """Map the client's payments up to ``cutoff`` to negative transactions."""

    cutoff_day = resolve_cutoff(cutoff)
    out: list[Transaction] = []
    for pay in payments:
        if not _belongs_to(pay, client_id):
            continue
        day = to_date(pay.get("date"))
        if day > cutoff_day:
            continue
        out.append(
            Transaction(
                date=day,
                kind=TransactionKind.PAYMENT,
                reference=payment_reference(pay.get("id")),
                amount=-to_decimal(pay.get("amount")),
            )
        )
    return out


__all__ = [
    "PAYMENT_REFERENCE_PREFIX",
    "normalize_invoices",
    "normalize_payments",
    "payment_reference",
    "resolve_cutoff",
    "to_bool",
    "to_date",
    "to_decimal",
]
