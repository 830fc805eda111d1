"""Owner-scoped services for the ``backoffice`` package.

Each function takes a :class:`~backoffice.repository.Repository` and the id
of the owner whose records it may read or write, followed by the operation's
own arguments. A missing owner id raises ``ValueError`` before the store is
touched.

Statements are always recomputed from invoices and payments. The cached
``current_balance`` on customers and suppliers is maintained for display
(payments reduce it, goods received vouchers raise a supplier's) and can be
compared against, or overwritten with, the computed value via
:func:`reconcile_client_balance` and :func:`refresh_client_balance`.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Any

from .documents import (
    INVOICE_NUMBER_PREFIX,
    QUOTE_NUMBER_PREFIX,
    compute_document_totals,
    highest_document_number,
    line_total,
    next_document_number,
)
from .logging_setup import get_logger
from .models import (
    AllocationType,
    InvoiceStatus,
    PaymentMethod,
    QuoteStatus,
    StatementLine,
    StatementSummary,
    WorkflowStatus,
)
from .normalizers import to_bool, to_decimal
from .repository import Repository, require_owner
from .statements import generate_statement, summarize_statement
from .summaries import aggregate_owing, salary_total

_logger = get_logger("backoffice.api")

_ZERO = Decimal("0")

_ITEM_FIELDS = ("description", "stock_item_id", "quantity", "unit_price", "vat_rate")


def _with_date(values: Mapping[str, Any]) -> dict[str, Any]:
    out = dict(values)
    if not out.get("date"):
        out["date"] = date.today()
    return out


def _require(values: Mapping[str, Any], *fields: str) -> None:
    missing = [f for f in fields if values.get(f) in (None, "")]
    if missing:
        raise ValueError(f"missing required field(s): {', '.join(missing)}")


# ---------------------------------------------------------------------------
# Statements and balances
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ClientStatement:
    client_id: str
    client_name: str
    lines: list[StatementLine]

    @property
    def summary(self) -> StatementSummary:
        return summarize_statement(self.lines)


def client_statement(
    repo: Repository,
    owner_id: str,
    client_id: str,
    cutoff: date | datetime | str | None = None,
) -> list[StatementLine]:
    """Statement for one client as of ``cutoff`` (inclusive, default today)."""

    owner = require_owner(owner_id)
    invoices = repo.list_by("invoices", owner, {"customer_id": client_id}, order_by="date")
    payments = repo.list_by("payments", owner, {"customer_id": client_id}, order_by="date")
    lines = generate_statement(client_id, invoices, payments, cutoff)
    _logger.info("statement:client client_id=%s lines=%d", client_id, len(lines))
    return lines


def client_statements(
    repo: Repository,
    owner_id: str,
    cutoff: date | datetime | str | None = None,
) -> list[ClientStatement]:
    """Statements for every client of the owner, ordered by client name.

    Invoices and payments are loaded once and partitioned per client.
    """

    owner = require_owner(owner_id)
    clients = repo.list_by("customers", owner, order_by="customer_name")
    invoices = repo.list_by("invoices", owner, order_by="date")
    payments = repo.list_by("payments", owner, order_by="date")
    out = [
        ClientStatement(
            client_id=str(c["id"]),
            client_name=str(c.get("customer_name") or ""),
            lines=generate_statement(str(c["id"]), invoices, payments, cutoff),
        )
        for c in clients
    ]
    _logger.info("statement:all owner_id=%s clients=%d", owner, len(out))
    return out


def total_owing(repo: Repository, owner_id: str) -> Decimal:
    return aggregate_owing(repo.list_by("customers", require_owner(owner_id)))


def reconcile_client_balance(
    repo: Repository,
    owner_id: str,
    client_id: str,
    cutoff: date | datetime | str | None = None,
) -> tuple[Decimal, Decimal]:
    """Return ``(cached, computed)`` balances for a client.

    ``cached`` is the stored ``current_balance``; ``computed`` is the
    statement's closing balance. They differ when the cache is stale.
    """

    owner = require_owner(owner_id)
    client = repo.get_by_id("customers", owner, client_id)
    cached = to_decimal(client.get("current_balance"))
    lines = client_statement(repo, owner, client_id, cutoff)
    computed = lines[-1].balance if lines else _ZERO
    if cached != computed:
        _logger.warning(
            "balance:stale client_id=%s cached=%s computed=%s", client_id, cached, computed
        )
    return cached, computed


def refresh_client_balance(repo: Repository, owner_id: str, client_id: str) -> Decimal:
    """Overwrite the cached balance with the computed one and return it."""

    _, computed = reconcile_client_balance(repo, owner_id, client_id)
    repo.update_by_id("customers", owner_id, client_id, {"current_balance": computed})
    return computed


# ---------------------------------------------------------------------------
# Clients
# ---------------------------------------------------------------------------


def add_client(repo: Repository, owner_id: str, values: Mapping[str, Any]) -> dict[str, Any]:
    owner = require_owner(owner_id)
    _require(values, "customer_name")
    row = dict(values)
    row["current_balance"] = to_decimal(row.get("current_balance"))
    row["credit_limit"] = to_decimal(row.get("credit_limit"))
    created = repo.insert("customers", owner, row)
    _logger.info("client:added id=%s", created["id"])
    return created


def update_client(
    repo: Repository, owner_id: str, client_id: str, changes: Mapping[str, Any]
) -> dict[str, Any]:
    return repo.update_by_id("customers", require_owner(owner_id), client_id, changes)


def delete_client(repo: Repository, owner_id: str, client_id: str) -> None:
    repo.delete_by_id("customers", require_owner(owner_id), client_id)
    _logger.info("client:deleted id=%s", client_id)


# ---------------------------------------------------------------------------
# Invoices and quotes
# ---------------------------------------------------------------------------


def _item_rows(
    items: Iterable[Mapping[str, Any]],
    parent_key: str,
    parent_id: str,
    *,
    vat: bool = True,
) -> list[dict[str, Any]]:
    rows: list[dict[str, Any]] = []
    for item in items:
        row = {k: item[k] for k in _ITEM_FIELDS if k in item}
        rate = item.get("vat_rate", item.get("tax_rate_percent"))
        # Non-VAT documents carry no VAT on any line.
        row["vat_rate"] = to_decimal(rate) if vat else _ZERO
        row["quantity"] = to_decimal(row.get("quantity"))
        row["unit_price"] = to_decimal(row.get("unit_price"))
        row.setdefault("description", "")
        row["line_total"] = line_total(row)
        row[parent_key] = parent_id
        rows.append(row)
    return rows


def _totals_fields(rows: Iterable[Mapping[str, Any]]) -> dict[str, Decimal]:
    totals = compute_document_totals(rows)
    return {
        "subtotal": totals.subtotal,
        "vat_amount": totals.tax_amount,
        "total_amount": totals.total,
    }


def _next_number(repo: Repository, owner: str, collection: str, field: str, prefix: str) -> str:
    existing = (r.get(field) for r in repo.list_by(collection, owner))
    return next_document_number(highest_document_number(existing, prefix), prefix)


def _insert_items(
    repo: Repository, owner: str, collection: str, rows: Iterable[Mapping[str, Any]]
) -> None:
    for row in rows:
        repo.insert(collection, owner, row)


def create_invoice(
    repo: Repository,
    owner_id: str,
    header: Mapping[str, Any],
    items: Iterable[Mapping[str, Any]] = (),
) -> dict[str, Any]:
    """Create an invoice with its line items.

    Totals are computed from ``items``; any totals in ``header`` are
    ignored. Status defaults to ``Draft`` and ``invoice_no`` to the next
    number after the owner's highest existing one.
    """

    owner = require_owner(owner_id)
    values = _with_date(header)
    values["status"] = InvoiceStatus(values.get("status") or InvoiceStatus.DRAFT).value
    vat = to_bool(values.get("is_vat_invoice"), default=True)
    values["is_vat_invoice"] = vat
    if not values.get("invoice_no"):
        values["invoice_no"] = _next_number(
            repo, owner, "invoices", "invoice_no", INVOICE_NUMBER_PREFIX
        )
    rows = _item_rows(items, "invoice_id", "", vat=vat)
    values.update(_totals_fields(rows))
    invoice = repo.insert("invoices", owner, values)
    for row in rows:
        row["invoice_id"] = invoice["id"]
    _insert_items(repo, owner, "invoice_items", rows)
    _logger.info(
        "invoice:created id=%s invoice_no=%s items=%d total=%s",
        invoice["id"],
        invoice["invoice_no"],
        len(rows),
        values["total_amount"],
    )
    return invoice


def invoice_items(repo: Repository, owner_id: str, invoice_id: str) -> list[dict[str, Any]]:
    return repo.list_by(
        "invoice_items", require_owner(owner_id), {"invoice_id": invoice_id}, order_by="created_at"
    )


def update_invoice(
    repo: Repository,
    owner_id: str,
    invoice_id: str,
    changes: Mapping[str, Any],
    items: Iterable[Mapping[str, Any]] | None = None,
) -> dict[str, Any]:
    """Update invoice fields; when ``items`` is given, replace the lines and totals."""

    owner = require_owner(owner_id)
    current = repo.get_by_id("invoices", owner, invoice_id)
    values = dict(changes)
    if "status" in values:
        values["status"] = InvoiceStatus(values["status"]).value
    if "is_vat_invoice" in values:
        values["is_vat_invoice"] = to_bool(values["is_vat_invoice"], default=True)
    if items is not None:
        vat = to_bool(
            values.get("is_vat_invoice", current.get("is_vat_invoice")), default=True
        )
        rows = _item_rows(items, "invoice_id", invoice_id, vat=vat)
        values.update(_totals_fields(rows))
        for old in invoice_items(repo, owner, invoice_id):
            repo.delete_by_id("invoice_items", owner, old["id"])
        _insert_items(repo, owner, "invoice_items", rows)
    updated = repo.update_by_id("invoices", owner, invoice_id, values)
    _logger.info("invoice:updated id=%s items_replaced=%s", invoice_id, items is not None)
    return updated


def set_invoice_status(
    repo: Repository, owner_id: str, invoice_id: str, status: str
) -> dict[str, Any]:
    value = InvoiceStatus(status).value
    return repo.update_by_id("invoices", require_owner(owner_id), invoice_id, {"status": value})


def create_quote(
    repo: Repository,
    owner_id: str,
    header: Mapping[str, Any],
    items: Iterable[Mapping[str, Any]] = (),
) -> dict[str, Any]:
    """Create a quote; numbering and totals follow :func:`create_invoice`."""

    owner = require_owner(owner_id)
    values = _with_date(header)
    values["status"] = QuoteStatus(values.get("status") or QuoteStatus.DRAFT).value
    if not values.get("quote_no"):
        values["quote_no"] = _next_number(repo, owner, "quotes", "quote_no", QUOTE_NUMBER_PREFIX)
    rows = _item_rows(items, "quote_id", "")
    values.update(_totals_fields(rows))
    quote = repo.insert("quotes", owner, values)
    for row in rows:
        row["quote_id"] = quote["id"]
    _insert_items(repo, owner, "quote_items", rows)
    _logger.info(
        "quote:created id=%s quote_no=%s items=%d", quote["id"], quote["quote_no"], len(rows)
    )
    return quote


def convert_quote_to_invoice(repo: Repository, owner_id: str, quote_id: str) -> dict[str, Any]:
    """Mark a quote as invoiced. No invoice record is created."""

    owner = require_owner(owner_id)
    quote = repo.update_by_id("quotes", owner, quote_id, {"status": QuoteStatus.INVOICED.value})
    _logger.info("quote:converted id=%s", quote_id)
    return quote


# ---------------------------------------------------------------------------
# Payments
# ---------------------------------------------------------------------------


def _positive_amount(values: Mapping[str, Any]) -> Decimal:
    amount = to_decimal(values.get("amount"))
    if amount <= 0:
        raise ValueError(f"payment amount must be positive, got {amount}")
    return amount


def _adjust_cached_balance(
    repo: Repository, owner: str, collection: str, record_id: str, delta: Decimal
) -> None:
    record = repo.get_by_id(collection, owner, record_id)
    balance = to_decimal(record.get("current_balance")) + delta
    repo.update_by_id(collection, owner, record_id, {"current_balance": balance})


def record_payment(repo: Repository, owner_id: str, values: Mapping[str, Any]) -> dict[str, Any]:
    """Record a client payment and reduce the client's cached balance.

    ``method`` defaults to EFT and ``allocation_type`` to Whole; an
    Invoice allocation requires ``invoice_id``.
    """

    owner = require_owner(owner_id)
    row = _with_date(values)
    amount = _positive_amount(row)
    row["amount"] = amount
    row["method"] = PaymentMethod(row.get("method") or PaymentMethod.EFT).value
    row["allocation_type"] = AllocationType(
        row.get("allocation_type") or AllocationType.WHOLE
    ).value
    if row["allocation_type"] == AllocationType.INVOICE and not row.get("invoice_id"):
        raise ValueError("invoice_id is required when allocation_type is Invoice")
    payment = repo.insert("payments", owner, row)
    customer_id = row.get("customer_id")
    if customer_id:
        _adjust_cached_balance(repo, owner, "customers", str(customer_id), -amount)
    _logger.info(
        "payment:recorded id=%s customer_id=%s amount=%s", payment["id"], customer_id, amount
    )
    return payment


# ---------------------------------------------------------------------------
# Suppliers
# ---------------------------------------------------------------------------


def add_supplier(repo: Repository, owner_id: str, values: Mapping[str, Any]) -> dict[str, Any]:
    owner = require_owner(owner_id)
    _require(values, "supplier_name")
    row = dict(values)
    row["current_balance"] = to_decimal(row.get("current_balance"))
    return repo.insert("suppliers", owner, row)


def record_supplier_payment(
    repo: Repository, owner_id: str, values: Mapping[str, Any]
) -> dict[str, Any]:
    owner = require_owner(owner_id)
    row = _with_date(values)
    amount = _positive_amount(row)
    row["amount"] = amount
    row["method"] = PaymentMethod(row.get("method") or PaymentMethod.EFT).value
    payment = repo.insert("supplier_payments", owner, row)
    supplier_id = row.get("supplier_id")
    if supplier_id:
        _adjust_cached_balance(repo, owner, "suppliers", str(supplier_id), -amount)
    _logger.info(
        "supplier_payment:recorded id=%s supplier_id=%s amount=%s",
        payment["id"],
        supplier_id,
        amount,
    )
    return payment


def record_grv(
    repo: Repository,
    owner_id: str,
    header: Mapping[str, Any],
    items: Iterable[Mapping[str, Any]],
) -> dict[str, Any]:
    """Book a goods received voucher.

    Inserts the GRV and its lines, then for each line linked to a stock item
    adds ``qty`` to ``quantity_on_hand`` and takes the line's ``cost_price``
    as the item's cost and last cost (and its ``selling_price`` when given).
    The supplier's cached balance grows by Σ ``qty × cost_price``.

    Raises
    ------
    ValueError
        No lines, a missing ``reference``, or a negative quantity or cost.
    RecordNotFoundError
        A line names a stock item, or the header a supplier, that the owner
        does not have. Nothing is written in that case.
    """

    owner = require_owner(owner_id)
    _require(header, "reference")
    rows: list[dict[str, Any]] = []
    for item in items:
        row = {
            "stock_item_id": item.get("stock_item_id"),
            "qty": to_decimal(item.get("qty")),
            "cost_price": to_decimal(item.get("cost_price")),
        }
        if item.get("selling_price") is not None:
            row["selling_price"] = to_decimal(item["selling_price"])
        if row["qty"] < 0 or row["cost_price"] < 0:
            raise ValueError("GRV quantities and costs must not be negative")
        rows.append(row)
    if not rows:
        raise ValueError("GRV must contain at least one item")

    supplier_id = header.get("supplier_id")
    if supplier_id:
        repo.get_by_id("suppliers", owner, str(supplier_id))
    stock = {
        r["stock_item_id"]: repo.get_by_id("stock_items", owner, str(r["stock_item_id"]))
        for r in rows
        if r["stock_item_id"]
    }

    grv = repo.insert("grvs", owner, _with_date(header))
    for row in rows:
        repo.insert("grv_items", owner, {**row, "grv_id": grv["id"]})
        item_id = row["stock_item_id"]
        if not item_id:
            continue
        on_hand = to_decimal(stock[item_id].get("quantity_on_hand")) + row["qty"]
        changes: dict[str, Any] = {
            "quantity_on_hand": on_hand,
            "cost_price": row["cost_price"],
            "last_cost": row["cost_price"],
        }
        if "selling_price" in row:
            changes["selling_price"] = row["selling_price"]
        # Repeated lines for one item accumulate.
        stock[item_id] = repo.update_by_id("stock_items", owner, str(item_id), changes)

    value = sum((r["qty"] * r["cost_price"] for r in rows), _ZERO)
    if supplier_id:
        _adjust_cached_balance(repo, owner, "suppliers", str(supplier_id), value)
    _logger.info(
        "grv:recorded id=%s supplier_id=%s items=%d value=%s",
        grv["id"],
        supplier_id,
        len(rows),
        value,
    )
    return grv


def grv_items(repo: Repository, owner_id: str, grv_id: str) -> list[dict[str, Any]]:
    return repo.list_by(
        "grv_items", require_owner(owner_id), {"grv_id": grv_id}, order_by="created_at"
    )


# ---------------------------------------------------------------------------
# Staff
# ---------------------------------------------------------------------------

_PAY_FIELDS = ("rate", "deductions", "loans", "advance")


def _with_salary(values: Mapping[str, Any]) -> dict[str, Any]:
    row = dict(values)
    for f in _PAY_FIELDS:
        row[f] = to_decimal(row.get(f))
    for f in ("rate", "deductions"):
        if row[f] < 0:
            raise ValueError(f"{f} must not be negative, got {row[f]}")
    row["salary_total"] = salary_total(row["rate"], row["deductions"], row["loans"], row["advance"])
    return row


def add_staff(repo: Repository, owner_id: str, values: Mapping[str, Any]) -> dict[str, Any]:
    owner = require_owner(owner_id)
    _require(values, "first_name", "last_name")
    return repo.insert("staff", owner, _with_salary(values))


def update_staff(
    repo: Repository, owner_id: str, staff_id: str, changes: Mapping[str, Any]
) -> dict[str, Any]:
    """Apply ``changes`` and recompute ``salary_total`` from the merged pay fields."""

    owner = require_owner(owner_id)
    current = repo.get_by_id("staff", owner, staff_id)
    merged = {f: current.get(f) for f in _PAY_FIELDS}
    merged.update(changes)
    return repo.update_by_id("staff", owner, staff_id, _with_salary(merged))


# ---------------------------------------------------------------------------
# Stock
# ---------------------------------------------------------------------------


def add_stock_item(repo: Repository, owner_id: str, values: Mapping[str, Any]) -> dict[str, Any]:
    owner = require_owner(owner_id)
    _require(values, "stock_code", "stock_descr")
    row = dict(values)
    row["quantity_on_hand"] = to_decimal(row.get("quantity_on_hand"))
    return repo.insert("stock_items", owner, row)


def adjust_stock(
    repo: Repository, owner_id: str, item_id: str, delta: Decimal | int | str
) -> dict[str, Any]:
    """Add ``delta`` (negative to remove) to an item's quantity on hand."""

    owner = require_owner(owner_id)
    item = repo.get_by_id("stock_items", owner, item_id)
    quantity = to_decimal(item.get("quantity_on_hand")) + to_decimal(delta)
    updated = repo.update_by_id("stock_items", owner, item_id, {"quantity_on_hand": quantity})
    _logger.info("stock:adjusted id=%s delta=%s on_hand=%s", item_id, delta, quantity)
    return updated


# ---------------------------------------------------------------------------
# Workflows and fuel
# ---------------------------------------------------------------------------


def create_workflow(
    repo: Repository,
    owner_id: str,
    header: Mapping[str, Any],
    items: Iterable[Mapping[str, Any]] = (),
) -> dict[str, Any]:
    owner = require_owner(owner_id)
    values = _with_date(header)
    values["status"] = WorkflowStatus(values.get("status") or WorkflowStatus.PENDING).value
    values["estimated_cost"] = to_decimal(values.get("estimated_cost"))
    workflow = repo.insert("workflows", owner, values)
    for item in items:
        repo.insert(
            "workflow_items",
            owner,
            {
                "workflow_id": workflow["id"],
                "stock_item_id": item.get("stock_item_id"),
                "quantity": to_decimal(item.get("quantity")),
            },
        )
    return workflow


def set_workflow_status(
    repo: Repository, owner_id: str, workflow_id: str, status: str
) -> dict[str, Any]:
    value = WorkflowStatus(status).value
    return repo.update_by_id("workflows", require_owner(owner_id), workflow_id, {"status": value})


def add_fuel_log(repo: Repository, owner_id: str, values: Mapping[str, Any]) -> dict[str, Any]:
    owner = require_owner(owner_id)
    _require(values, "vehicle")
    return repo.insert("fuel_logs", owner, _with_date(values))


__all__ = [
    "ClientStatement",
    "add_client",
    "add_fuel_log",
    "add_staff",
    "add_stock_item",
    "add_supplier",
    "adjust_stock",
    "client_statement",
    "client_statements",
    "convert_quote_to_invoice",
    "create_invoice",
    "create_quote",
    "create_workflow",
    "delete_client",
    "grv_items",
    "invoice_items",
    "reconcile_client_balance",
    "record_grv",
    "record_payment",
    "record_supplier_payment",
    "refresh_client_balance",
    "set_invoice_status",
    "set_workflow_status",
    "total_owing",
    "update_client",
    "update_invoice",
    "update_staff",
]
