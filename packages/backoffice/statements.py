"""Client statement generation.

A statement is the client's invoices and payments merged into one
chronological ledger with a running balance:

1. :func:`~backoffice.normalizers.normalize_invoices` and
   :func:`~backoffice.normalizers.normalize_payments` filter and sign the
   source records.
2. :func:`order_transactions` orders the combined stream by day, placing a
   same-day invoice before a same-day payment so the payment is applied
   against a balance that already includes the charge. Anything else that
   ties keeps its input order (``sorted`` is stable).
3. :func:`accumulate_balances` folds the ordered stream from zero.

All arithmetic is ``Decimal``; nothing is rounded here.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import date, datetime
from decimal import Decimal
from typing import Any

from .logging_setup import get_logger
from .models import Records, StatementLine, StatementSummary, Transaction, TransactionKind
from .normalizers import normalize_invoices, normalize_payments, resolve_cutoff

_logger = get_logger("backoffice.statements")

_KIND_RANK: dict[TransactionKind, int] = {
    TransactionKind.INVOICE: 0,
    TransactionKind.PAYMENT: 1,
}


def _order_key(tx: Transaction) -> tuple[int, int]:
    return tx.date.toordinal(), _KIND_RANK[tx.kind]


def order_transactions(
    invoice_txs: Iterable[Transaction],
    payment_txs: Iterable[Transaction],
) -> list[Transaction]:
    """Merge two normalized streams into statement order.

    Invoices are concatenated ahead of payments before the stable sort, so
    equal keys keep their relative order within each stream.
    """

    combined = [*invoice_txs, *payment_txs]
    return sorted(combined, key=_order_key)


def accumulate_balances(transactions: Iterable[Transaction]) -> list[StatementLine]:
    """Annotate each transaction with the running balance after it."""

    balance = Decimal("0")
    lines: list[StatementLine] = []
    for tx in transactions:
        balance += tx.amount
        lines.append(
            StatementLine(
                date=tx.date,
                kind=tx.kind,
                reference=tx.reference,
                amount=tx.amount,
                balance=balance,
            )
        )
    return lines


def generate_statement(
    client_id: str,
    invoices: Records,
    payments: Records,
    cutoff: date | datetime | str | None = None,
) -> list[StatementLine]:
    """Build the statement for ``client_id`` as of ``cutoff`` (inclusive, default today).

    ``invoices`` and ``payments`` may span every client of the owner; only
    records whose ``customer_id`` equals ``client_id`` are used.
    """

    cutoff_day = resolve_cutoff(cutoff)
    invoice_txs = normalize_invoices(invoices, client_id, cutoff_day)
    payment_txs = normalize_payments(payments, client_id, cutoff_day)
    lines = accumulate_balances(order_transactions(invoice_txs, payment_txs))
    _logger.debug(
        "statement:generated client_id=%s cutoff=%s invoices=%d payments=%d",
        client_id,
        cutoff_day.isoformat(),
        len(invoice_txs),
        len(payment_txs),
    )
    return lines


def summarize_statement(lines: Sequence[StatementLine]) -> StatementSummary:
    """Totals for a statement footer."""

    invoiced = sum(
        (ln.amount for ln in lines if ln.kind == TransactionKind.INVOICE), Decimal("0")
    )
    paid = sum((-ln.amount for ln in lines if ln.kind == TransactionKind.PAYMENT), Decimal("0"))
    closing = lines[-1].balance if lines else Decimal("0")
    return StatementSummary(
        total_invoiced=invoiced,
        total_paid=paid,
        closing_balance=closing,
        line_count=len(lines),
    )


def statement_as_dicts(lines: Iterable[StatementLine]) -> list[dict[str, Any]]:
    """Export shape: ``[{date, kind, reference, amount, balance}]``."""

    return [ln.as_dict() for ln in lines]


__all__ = [
    "accumulate_balances",
    "generate_statement",
    "order_transactions",
    "statement_as_dicts",
    "summarize_statement",
]
