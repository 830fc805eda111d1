"""db: shared database library (SQLAlchemy/Alembic).

Public exports
--------------
- ``Base`` and ``metadata`` for Alembic autogenerate/targeting
- ORM models in ``db.models.backoffice`` (re-exported for convenience)
- Engine/session helpers in ``db.client``
"""

from __future__ import annotations

from .models.backoffice import (
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

# Re-export SQLAlchemy metadata for Alembic's env.py
metadata = Base.metadata

__all__ = [
    "Base",
    "metadata",
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
