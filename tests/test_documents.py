from __future__ import annotations

from decimal import Decimal

import pytest

from backoffice.documents import (
    compute_document_totals,
    format_currency,
    highest_document_number,
    line_total,
    next_document_number,
)
from backoffice.models import LineItem


def test_two_item_document_scenario() -> None:
    items = [
        LineItem(quantity=Decimal("2"), unit_price=Decimal("50"), tax_rate_percent=Decimal("15")),
        LineItem(quantity=Decimal("1"), unit_price=Decimal("100"), tax_rate_percent=Decimal("0")),
    ]

    totals = compute_document_totals(items)

    assert totals.subtotal == Decimal("200")
    assert totals.tax_amount == Decimal("15")
    assert totals.total == Decimal("215")


def test_mapping_items_use_stored_vat_rate_or_alias() -> None:
    items = [
        {"quantity": "3", "unit_price": "9.99", "vat_rate": 15},
        {"quantity": 1, "unit_price": 0.1, "tax_rate_percent": "15"},
        {"quantity": 1, "unit_price": 10},
    ]

    totals = compute_document_totals(items)

    assert totals.subtotal == Decimal("40.07")
    assert totals.tax_amount == Decimal("4.5105")
    assert totals.total == totals.subtotal + totals.tax_amount


def test_no_per_line_rounding() -> None:
    items = [{"quantity": 1, "unit_price": "0.01", "vat_rate": 15}] * 3

    assert compute_document_totals(items).tax_amount == Decimal("0.0045")


def test_empty_document_is_zero() -> None:
    totals = compute_document_totals([])

    assert (totals.subtotal, totals.tax_amount, totals.total) == (0, 0, 0)


def test_line_total_includes_tax() -> None:
    assert line_total({"quantity": 2, "unit_price": 50, "vat_rate": 15}) == Decimal("115")
    assert line_total(LineItem(Decimal("1"), Decimal("100"))) == Decimal("100")


@pytest.mark.parametrize(
    ("last", "expected"),
    [
        (None, "INV-001"),
        ("", "INV-001"),
        ("INV-001", "INV-002"),
        ("INV-009", "INV-010"),
        ("INV-999", "INV-1000"),
        ("INV-abc", "INV-001"),
        ("QUO-004", "INV-001"),
    ],
)
def test_next_invoice_number(last, expected) -> None:
    assert next_document_number(last) == expected


def test_next_quote_number_uses_prefix() -> None:
    assert next_document_number(None, "QUO-") == "QUO-001"
    assert next_document_number("QUO-041", "QUO-") == "QUO-042"


def test_highest_document_number_is_numeric_not_lexicographic() -> None:
    numbers = ["INV-999", "INV-1000", None, "QUO-5000", "INV-xyz"]

    assert highest_document_number(numbers, "INV-") == "INV-1000"
    assert highest_document_number([], "INV-") is None


@pytest.mark.parametrize(
    ("amount", "expected"),
    [
        (Decimal("1000"), "R1000.00"),
        ("0.005", "R0.01"),
        (Decimal("2.345"), "R2.35"),
        (Decimal("-400"), "-R400.00"),
        (Decimal("-0.001"), "R0.00"),
        (None, "R0.00"),
    ],
)
def test_format_currency(amount, expected) -> None:
    assert format_currency(amount) == expected
