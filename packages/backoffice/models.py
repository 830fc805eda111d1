"""Data models and type aliases for ``backoffice``.

Source records (customers, invoices, payments, ...) travel through the
package as plain mappings with snake_case keys, exactly as the repository
returns them. The types here describe what the statement core *computes*
from those records, plus the closed vocabularies the stored records use.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import StrEnum
from typing import Any

# ---------------------------------------------------------------------------
# Source records
# ---------------------------------------------------------------------------

type Record = Mapping[str, Any]
"""A single stored row (invoice, payment, customer, ...) keyed by column name.

Values are whatever the repository hands back: ``date``/``Decimal`` from the
SQL adapter, or raw ``str``/``float`` from fakes and CSV imports. Consumers
normalize through :mod:`backoffice.normalizers` before doing arithmetic.
"""

type Records = Iterable[Record]


class InvoiceStatus(StrEnum):
    DRAFT = "Draft"
    SENT = "Sent"
    PAID = "Paid"
    CANCELLED = "Cancelled"


# Invoices in these states never reach a statement.
EXCLUDED_INVOICE_STATUSES: frozenset[str] = frozenset(
    {InvoiceStatus.DRAFT, InvoiceStatus.CANCELLED}
)


class QuoteStatus(StrEnum):
    DRAFT = "Draft"
    SENT = "Sent"
    ACCEPTED = "Accepted"
    INVOICED = "Invoiced"
    CANCELLED = "Cancelled"


class WorkflowStatus(StrEnum):
    PENDING = "Pending"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"
    INVOICED = "Invoiced"


class PaymentMethod(StrEnum):
    CASH = "Cash"
    EFT = "EFT"


class AllocationType(StrEnum):
    INVOICE = "Invoice"
    WHOLE = "Whole"


class PayMethod(StrEnum):
    DAILY = "Daily"
    WEEKLY = "Weekly"
    MONTHLY = "Monthly"


# ---------------------------------------------------------------------------
# Statement core
# ---------------------------------------------------------------------------


class TransactionKind(StrEnum):
    """Closed set of statement line kinds."""

    INVOICE = "Invoice"
    PAYMENT = "Payment"


@dataclass(frozen=True, slots=True)
class Transaction:
    """A normalized, signed ledger movement for one client.

    Attributes
    ----------
    date:
        Calendar day of the source record; time of day is discarded.
    kind:
        Invoice or Payment.
    reference:
        Display reference (invoice number, or ``PAY-`` plus the first four
        characters of the payment id).
    amount:
        Signed contribution to the balance owed: positive for invoices,
        negative for payments.
    """

    date: date
    kind: TransactionKind
    reference: str
    amount: Decimal


@dataclass(frozen=True, slots=True)
class StatementLine:
    """A transaction annotated with the running balance after it."""

    date: date
    kind: TransactionKind
    reference: str
    amount: Decimal
    balance: Decimal

    def as_dict(self) -> dict[str, Any]:
        return {
            "date": self.date,
            "kind": self.kind,
            "reference": self.reference,
            "amount": self.amount,
            "balance": self.balance,
        }


@dataclass(frozen=True, slots=True)
class StatementSummary:
    total_invoiced: Decimal
    total_paid: Decimal
    closing_balance: Decimal
    line_count: int


# ---------------------------------------------------------------------------
# Documents (invoices and quotes)
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class LineItem:
    """One priced line of an invoice or quote.

    ``tax_rate_percent`` is a percentage (``15`` means 15%). Rates are per
    line, so a single document may mix rates.
    """

    quantity: Decimal
    unit_price: Decimal
    tax_rate_percent: Decimal = Decimal("0")


@dataclass(frozen=True, slots=True)
class DocumentTotals:
    subtotal: Decimal
    tax_amount: Decimal
    total: Decimal


__all__ = [
    "AllocationType",
    "DocumentTotals",
    "EXCLUDED_INVOICE_STATUSES",
    "InvoiceStatus",
    "LineItem",
    "PayMethod",
    "PaymentMethod",
    "QuoteStatus",
    "Record",
    "Records",
    "StatementLine",
    "StatementSummary",
    "Transaction",
    "TransactionKind",
    "WorkflowStatus",
]
