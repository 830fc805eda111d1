from __future__ import annotations

from datetime import date
from decimal import Decimal

from backoffice.models import StatementLine, Transaction, TransactionKind
from backoffice.statements import (
    accumulate_balances,
    generate_statement,
    order_transactions,
    statement_as_dicts,
    summarize_statement,
)

CUTOFF = date(2024, 12, 31)


def _inv(no, day, total, *, customer="C1", status="Sent"):
    return {
        "id": f"id-{no}",
        "invoice_no": no,
        "date": day,
        "customer_id": customer,
        "total_amount": total,
        "status": status,
    }


def _pay(pid, day, amount, *, customer="C1"):
    return {"id": pid, "date": day, "customer_id": customer, "amount": amount}


def test_same_day_invoice_and_payment_scenario() -> None:
    invoices = [_inv("INV-001", "2024-01-05", "1000.00")]
    payments = [_pay("p-abcd1234", "2024-01-05", "400.00")]

    lines = generate_statement("C1", invoices, payments, CUTOFF)

    assert statement_as_dicts(lines) == [
        {
            "date": date(2024, 1, 5),
            "kind": TransactionKind.INVOICE,
            "reference": "INV-001",
            "amount": Decimal("1000.00"),
            "balance": Decimal("1000.00"),
        },
        {
            "date": date(2024, 1, 5),
            "kind": TransactionKind.PAYMENT,
            "reference": "PAY-p-ab",
            "amount": Decimal("-400.00"),
            "balance": Decimal("600.00"),
        },
    ]


def test_payment_listed_first_still_sorts_after_same_day_invoice() -> None:
    # Payment timestamp earlier in the day than the invoice; only the day counts.
    invoices = [_inv("INV-007", "2024-03-01T16:00:00", 250)]
    payments = [_pay("p1", "2024-03-01T08:00:00Z", 100)]

    lines = generate_statement("C1", invoices, payments, CUTOFF)

    assert [ln.kind for ln in lines] == [TransactionKind.INVOICE, TransactionKind.PAYMENT]
    assert [ln.balance for ln in lines] == [Decimal("250"), Decimal("150")]


def test_final_balance_equals_sum_of_included_amounts() -> None:
    invoices = [
        _inv("INV-001", "2024-01-05", "1000.10"),
        _inv("INV-002", "2024-02-01", "0.20"),
        _inv("INV-003", "2024-02-10", "333.33", status="Paid"),
    ]
    payments = [
        _pay("pay-1", "2024-01-20", "0.30"),
        _pay("pay-2", "2024-02-11", "500"),
    ]

    lines = generate_statement("C1", invoices, payments, CUTOFF)

    assert lines[-1].balance == sum((ln.amount for ln in lines), Decimal("0"))
    assert lines[-1].balance == Decimal("833.33")


def test_draft_and_cancelled_invoices_are_excluded() -> None:
    invoices = [
        _inv("INV-001", "2024-01-05", 100, status="Draft"),
        _inv("INV-002", "2024-01-06", 200, status="Cancelled"),
        _inv("INV-003", "2024-01-07", 300, status="Sent"),
        _inv("INV-004", "2024-01-08", 400, status="Paid"),
    ]

    lines = generate_statement("C1", invoices, [], CUTOFF)

    assert [ln.reference for ln in lines] == ["INV-003", "INV-004"]


def test_statement_only_contains_the_requested_client() -> None:
    invoices = [
        _inv("INV-001", "2024-01-05", 100, customer="C1"),
        _inv("INV-002", "2024-01-05", 900, customer="C2"),
        _inv("INV-003", "2024-01-05", 900, customer=None),
    ]
    payments = [_pay("c2-pay", "2024-01-06", 50, customer="C2")]

    lines = generate_statement("C1", invoices, payments, CUTOFF)

    assert [ln.reference for ln in lines] == ["INV-001"]
    assert generate_statement("C3", invoices, payments, CUTOFF) == []


def test_cutoff_is_inclusive_by_day() -> None:
    invoices = [
        _inv("INV-001", "2024-01-31T23:59:59", 100),
        _inv("INV-002", "2024-02-01", 100),
    ]
    payments = [_pay("late", "2024-02-01", 10)]

    lines = generate_statement("C1", invoices, payments, "2024-01-31")

    assert [ln.reference for ln in lines] == ["INV-001"]


def test_generation_is_idempotent() -> None:
    invoices = [_inv("INV-001", "2024-01-05", "10.50"), _inv("INV-002", "2024-01-05", "4.50")]
    payments = [_pay("xyz98765", "2024-01-05", "3")]

    first = generate_statement("C1", invoices, payments, CUTOFF)
    second = generate_statement("C1", invoices, payments, CUTOFF)

    assert first == second
    assert repr(first) == repr(second)


def test_order_is_stable_within_each_kind() -> None:
    day = date(2024, 5, 1)
    invoice_txs = [
        Transaction(day, TransactionKind.INVOICE, "INV-010", Decimal("1")),
        Transaction(day, TransactionKind.INVOICE, "INV-002", Decimal("2")),
    ]
    payment_txs = [
        Transaction(date(2024, 4, 30), TransactionKind.PAYMENT, "PAY-b", Decimal("-1")),
        Transaction(day, TransactionKind.PAYMENT, "PAY-z", Decimal("-1")),
        Transaction(day, TransactionKind.PAYMENT, "PAY-a", Decimal("-1")),
    ]

    ordered = order_transactions(invoice_txs, payment_txs)

    assert [t.reference for t in ordered] == ["PAY-b", "INV-010", "INV-002", "PAY-z", "PAY-a"]


def test_accumulate_balances_starts_from_zero() -> None:
    txs = [
        Transaction(date(2024, 1, 1), TransactionKind.PAYMENT, "PAY-1", Decimal("-20")),
        Transaction(date(2024, 1, 2), TransactionKind.INVOICE, "INV-1", Decimal("5")),
    ]

    lines = accumulate_balances(txs)

    assert [ln.balance for ln in lines] == [Decimal("-20"), Decimal("-15")]
    assert all(isinstance(ln, StatementLine) for ln in lines)
    assert accumulate_balances([]) == []


def test_summarize_statement_totals() -> None:
    invoices = [_inv("INV-001", "2024-01-05", 1000), _inv("INV-002", "2024-01-12", 500)]
    payments = [_pay("abcd", "2024-01-10", 400)]

    summary = summarize_statement(generate_statement("C1", invoices, payments, CUTOFF))

    assert summary.total_invoiced == Decimal("1500")
    assert summary.total_paid == Decimal("400")
    assert summary.closing_balance == Decimal("1100")
    assert summary.line_count == 3


def test_summarize_empty_statement() -> None:
    summary = summarize_statement([])

    assert summary.closing_balance == Decimal("0")
    assert summary.line_count == 0
