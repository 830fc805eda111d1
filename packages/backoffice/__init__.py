"""Public interface for the ``backoffice`` package.

Exposes the statement core, document arithmetic, summaries and the
repository types as the stable import surface. Owner-scoped services live in
:mod:`backoffice.api`; the SQLAlchemy adapter in
:mod:`backoffice.persistence` is imported on demand so the pure modules stay
usable without a database.
"""

from .documents import (
    compute_document_totals,
    format_currency,
    line_total,
    next_document_number,
)
from .models import (
    DocumentTotals,
    InvoiceStatus,
    LineItem,
    StatementLine,
    StatementSummary,
    Transaction,
    TransactionKind,
)
from .normalizers import normalize_invoices, normalize_payments
from .repository import (
    InMemoryRepository,
    RecordNotFoundError,
    Repository,
    UnknownCollectionError,
)
from .statements import (
    accumulate_balances,
    generate_statement,
    order_transactions,
    summarize_statement,
)
from .summaries import aggregate_owing

__all__ = [
    # Statement core
    "generate_statement",
    "normalize_invoices",
    "normalize_payments",
    "order_transactions",
    "accumulate_balances",
    "summarize_statement",
    "aggregate_owing",
    # Documents
    "compute_document_totals",
    "line_total",
    "next_document_number",
    "format_currency",
    # Models / types
    "DocumentTotals",
    "InvoiceStatus",
    "LineItem",
    "StatementLine",
    "StatementSummary",
    "Transaction",
    "TransactionKind",
    # Repository
    "InMemoryRepository",
    "RecordNotFoundError",
    "Repository",
    "UnknownCollectionError",
]
