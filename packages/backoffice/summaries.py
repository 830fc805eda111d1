"""Portfolio and dashboard summaries.

Pure folds over already-loaded records. Inputs are repository rows
(mappings); outputs are small frozen dataclasses with ``Decimal`` money.
Ratios whose denominator is zero are reported as zero.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

from .models import EXCLUDED_INVOICE_STATUSES, Records
from .normalizers import to_decimal

_ZERO = Decimal("0")
_HUNDRED = Decimal("100")


def _ratio(num: Decimal, den: Decimal) -> Decimal:
    return num / den if den else _ZERO


# ---------------------------------------------------------------------------
# Clients
# ---------------------------------------------------------------------------


def aggregate_owing(clients: Records) -> Decimal:
    """Total owed to the business across ``clients``.

    Uses each client's cached ``current_balance``; credit (negative) balances
    count as zero rather than offsetting other clients' debts.
    """

    total = _ZERO
    for client in clients:
        total += max(_ZERO, to_decimal(client.get("current_balance")))
    return total


@dataclass(frozen=True, slots=True)
class ClientStats:
    total_clients: int
    within_limit: int
    over_limit: int
    total_owing: Decimal
    average_balance: Decimal


def client_stats(clients: Records) -> ClientStats:
    """Credit-limit breakdown; a balance equal to the limit is within it."""

    rows = list(clients)
    within = over = 0
    for c in rows:
        if to_decimal(c.get("current_balance")) > to_decimal(c.get("credit_limit")):
            over += 1
        else:
            within += 1
    owing = aggregate_owing(rows)
    return ClientStats(
        total_clients=len(rows),
        within_limit=within,
        over_limit=over,
        total_owing=owing,
        average_balance=_ratio(owing, Decimal(len(rows))),
    )


def outstanding_on_invoices(invoices: Records, payments: Records) -> Decimal:
    """Unpaid value of invoices, counting only payments allocated to each invoice.

    Over-allocated invoices contribute zero.
    """

    paid_by_invoice: dict[str, Decimal] = {}
    for p in payments:
        inv_id = p.get("invoice_id")
        if inv_id is None:
            continue
        key = str(inv_id)
        paid_by_invoice[key] = paid_by_invoice.get(key, _ZERO) + to_decimal(p.get("amount"))

    total = _ZERO
    for inv in invoices:
        paid = paid_by_invoice.get(str(inv.get("id")), _ZERO)
        total += max(_ZERO, to_decimal(inv.get("total_amount")) - paid)
    return total


# ---------------------------------------------------------------------------
# Payroll
# ---------------------------------------------------------------------------


def salary_total(
    rate: object,
    deductions: object = 0,
    loans: object = 0,
    advance: object = 0,
) -> Decimal:
    """Net pay: rate less deductions and loan repayments, plus any advance."""

    return to_decimal(rate) - to_decimal(deductions) - to_decimal(loans) + to_decimal(advance)


@dataclass(frozen=True, slots=True)
class PayrollSummary:
    staff_count: int
    total_salary: Decimal
    total_deductions: Decimal
    total_loans: Decimal
    average_salary: Decimal


def payroll_summary(staff: Records) -> PayrollSummary:
    rows = list(staff)
    total_salary = sum((to_decimal(s.get("salary_total")) for s in rows), _ZERO)
    return PayrollSummary(
        staff_count=len(rows),
        total_salary=total_salary,
        total_deductions=sum((to_decimal(s.get("deductions")) for s in rows), _ZERO),
        total_loans=sum((to_decimal(s.get("loans")) for s in rows), _ZERO),
        average_salary=_ratio(total_salary, Decimal(len(rows))),
    )


# ---------------------------------------------------------------------------
# Fuel
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class VehicleFuel:
    litres: Decimal = _ZERO
    cost: Decimal = _ZERO
    km: Decimal = _ZERO
    fillups: int = 0


@dataclass(frozen=True, slots=True)
class FuelSummary:
    total_litres: Decimal
    total_cost: Decimal
    total_km: Decimal
    average_price_per_litre: Decimal
    # Litres per 100 km.
    average_consumption: Decimal
    average_cost_per_km: Decimal
    by_vehicle: dict[str, VehicleFuel] = field(default_factory=dict)


def fuel_summary(fuel_logs: Records) -> FuelSummary:
    litres = cost = km = _ZERO
    by_vehicle: dict[str, VehicleFuel] = {}
    for log in fuel_logs:
        l_ = to_decimal(log.get("litres_filled"))
        c_ = to_decimal(log.get("rand_value"))
        k_ = to_decimal(log.get("km_used"))
        litres += l_
        cost += c_
        km += k_
        v = by_vehicle.setdefault(str(log.get("vehicle") or ""), VehicleFuel())
        v.litres += l_
        v.cost += c_
        v.km += k_
        v.fillups += 1
    return FuelSummary(
        total_litres=litres,
        total_cost=cost,
        total_km=km,
        average_price_per_litre=_ratio(cost, litres),
        average_consumption=_ratio(litres, km) * _HUNDRED,
        average_cost_per_km=_ratio(cost, km),
        by_vehicle=by_vehicle,
    )


# ---------------------------------------------------------------------------
# Stock
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class StockSummary:
    item_count: int
    total_quantity: Decimal
    # At cost price.
    total_value: Decimal
    below_min_level: int


def stock_summary(stock_items: Records) -> StockSummary:
    count = low = 0
    quantity = value = _ZERO
    for item in stock_items:
        on_hand = to_decimal(item.get("quantity_on_hand"))
        count += 1
        quantity += on_hand
        value += to_decimal(item.get("cost_price")) * on_hand
        if on_hand < to_decimal(item.get("min_level")):
            low += 1
    return StockSummary(
        item_count=count,
        total_quantity=quantity,
        total_value=value,
        below_min_level=low,
    )


# ---------------------------------------------------------------------------
# Profit and loss
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class FinancialOverview:
    total_sales: Decimal
    total_salaries: Decimal
    total_supplier_payments: Decimal
    total_expenses: Decimal
    net_profit: Decimal


def financial_overview(
    invoices: Records,
    staff: Records,
    supplier_payments: Records,
) -> FinancialOverview:
    """Sales from issued invoices against payroll and supplier payments."""

    sales = sum(
        (
            to_decimal(inv.get("total_amount"))
            for inv in invoices
            if inv.get("status") not in EXCLUDED_INVOICE_STATUSES
        ),
        _ZERO,
    )
    salaries = sum((to_decimal(s.get("salary_total")) for s in staff), _ZERO)
    supplier = sum((to_decimal(p.get("amount")) for p in supplier_payments), _ZERO)
    expenses = salaries + supplier
    return FinancialOverview(
        total_sales=sales,
        total_salaries=salaries,
        total_supplier_payments=supplier,
        total_expenses=expenses,
        net_profit=sales - expenses,
    )


__all__ = [
    "ClientStats",
    "FinancialOverview",
    "FuelSummary",
    "PayrollSummary",
    "StockSummary",
    "VehicleFuel",
    "aggregate_owing",
    "client_stats",
    "financial_overview",
    "fuel_summary",
    "outstanding_on_invoices",
    "payroll_summary",
    "salary_total",
    "stock_summary",
]
