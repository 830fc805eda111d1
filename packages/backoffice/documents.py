"""Invoice/quote arithmetic and numbering.

Item inputs may be :class:`~backoffice.models.LineItem` instances or
mappings shaped like stored ``invoice_items``/``quote_items`` rows
(``quantity``, ``unit_price``, ``vat_rate``). ``tax_rate_percent`` is
accepted as an alias of ``vat_rate``.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from .models import DocumentTotals, LineItem
from .normalizers import to_decimal

INVOICE_NUMBER_PREFIX = "INV-"
QUOTE_NUMBER_PREFIX = "QUO-"
CURRENCY_SYMBOL = "R"

_HUNDRED = Decimal("100")
_CENT = Decimal("0.01")
_NUMBER_WIDTH = 3


def as_line_item(item: LineItem | Mapping[str, Any]) -> LineItem:
    if isinstance(item, LineItem):
        return item
    rate = item.get("vat_rate")
    if rate is None:
        rate = item.get("tax_rate_percent")
    return LineItem(
        quantity=to_decimal(item.get("quantity")),
        unit_price=to_decimal(item.get("unit_price")),
        tax_rate_percent=to_decimal(rate),
    )


def line_total(item: LineItem | Mapping[str, Any]) -> Decimal:
    """Line value including tax: ``quantity × unit_price × (1 + rate/100)``."""

    li = as_line_item(item)
    net = li.quantity * li.unit_price
    return net + net * li.tax_rate_percent / _HUNDRED


def compute_document_totals(items: Iterable[LineItem | Mapping[str, Any]]) -> DocumentTotals:
    """Sum subtotal, tax and total across ``items``.

    Each line is taxed at its own rate. No rounding is applied per line or
    on the result; round only when displaying.
    """

    subtotal = Decimal("0")
    tax_amount = Decimal("0")
    for raw in items:
        li = as_line_item(raw)
        net = li.quantity * li.unit_price
        subtotal += net
        tax_amount += net * li.tax_rate_percent / _HUNDRED
    return DocumentTotals(subtotal=subtotal, tax_amount=tax_amount, total=subtotal + tax_amount)


def next_document_number(last_number: str | None, prefix: str = INVOICE_NUMBER_PREFIX) -> str:
    """Return the number that follows ``last_number``.

    Falls back to ``<prefix>001`` when there is no previous number, it uses a
    different prefix, or its suffix is not numeric.
    """

    first = f"{prefix}{1:0{_NUMBER_WIDTH}d}"
    if not last_number or not last_number.startswith(prefix):
        return first
    suffix = last_number[len(prefix) :]
    if not re.fullmatch(r"\d+", suffix):
        return first
    return f"{prefix}{int(suffix) + 1:0{_NUMBER_WIDTH}d}"


def highest_document_number(numbers: Iterable[str | None], prefix: str) -> str | None:
    """Pick the numerically highest ``prefix``-numbered value, ignoring others."""

    best: tuple[int, str] | None = None
    for n in numbers:
        if not n or not n.startswith(prefix):
            continue
        suffix = n[len(prefix) :]
        if not re.fullmatch(r"\d+", suffix):
            continue
        key = (int(suffix), n)
        if best is None or key > best:
            best = key
    return best[1] if best else None


def format_currency(amount: Any) -> str:
    """Two-decimal display with the currency prefix, e.g. ``R1000.00``/``-R400.00``."""

    q = to_decimal(amount).quantize(_CENT, rounding=ROUND_HALF_UP)
    if q == 0:
        q = abs(q)
    if q < 0:
        return f"-{CURRENCY_SYMBOL}{-q:.2f}"
    return f"{CURRENCY_SYMBOL}{q:.2f}"


__all__ = [
    "CURRENCY_SYMBOL",
    "INVOICE_NUMBER_PREFIX",
    "QUOTE_NUMBER_PREFIX",
    "as_line_item",
    "compute_document_totals",
    "format_currency",
    "highest_document_number",
    "line_total",
    "next_document_number",
]
