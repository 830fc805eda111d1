"""Shared SQLAlchemy models registry for the workspace database.

Currently includes the back-office domain models used by ``backoffice``.
"""

from .backoffice import (
    Base,
    Customer,
    FuelLog,
    Grv,
    GrvItem,
    Invoice,
    InvoiceItem,
    Payment,
    Quote,
    QuoteItem,
    Staff,
    StockItem,
    Supplier,
    SupplierPayment,
    Workflow,
    WorkflowItem,
)

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
