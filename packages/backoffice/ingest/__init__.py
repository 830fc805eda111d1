"""CSV import helpers for ``backoffice``."""

from .rows import ROW_MODELS, CustomerRow, InvoiceRow, PaymentRow
from .utils import load_records_csv

__all__ = ["ROW_MODELS", "CustomerRow", "InvoiceRow", "PaymentRow", "load_records_csv"]
