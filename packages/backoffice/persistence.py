"""SQLAlchemy-backed :class:`~backoffice.repository.Repository`.

Rows are read and written through the ORM models in ``db.models.backoffice``
on a caller-provided session (typically from ``db.client.session_scope``).
The adapter flushes but never commits; the caller's scope owns the
transaction.

Incoming values are coerced to the column types before binding: ``Date``
columns accept ISO strings, ``Numeric`` columns accept ``int``/``float``/
``str`` amounts, ``Boolean`` columns accept flag strings such as
``"false"``. Unknown column names are rejected, and an update may not set a
NOT NULL column to ``None``.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from sqlalchemy import Boolean, Date, Numeric, select
from sqlalchemy.orm import Session

from db.models.backoffice import (
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

from .logging_setup import get_logger
from .normalizers import to_bool, to_date, to_decimal
from .repository import RecordNotFoundError, UnknownCollectionError, require_owner

_logger = get_logger("backoffice.persistence")

MODELS: dict[str, type[Base]] = {
    "customers": Customer,
    "invoices": Invoice,
    "invoice_items": InvoiceItem,
    "quotes": Quote,
    "quote_items": QuoteItem,
    "payments": Payment,
    "suppliers": Supplier,
    "supplier_payments": SupplierPayment,
    "staff": Staff,
    "stock_items": StockItem,
    "workflows": Workflow,
    "workflow_items": WorkflowItem,
    "fuel_logs": FuelLog,
    "grvs": Grv,
    "grv_items": GrvItem,
}

_MANAGED_FIELDS = frozenset({"id", "user_id", "created_at", "updated_at"})


def _model(collection: str) -> type[Base]:
    try:
        return MODELS[collection]
    except KeyError:
        raise UnknownCollectionError(collection) from None


def _to_dict(obj: Base) -> dict[str, Any]:
    return {c.key: getattr(obj, c.key) for c in obj.__table__.columns}


def _coerce(
    model: type[Base], values: Mapping[str, Any], *, write: bool, update: bool = False
) -> dict[str, Any]:
    columns = model.__table__.columns
    out: dict[str, Any] = {}
    for key, value in values.items():
        if key not in columns:
            raise ValueError(f"unknown column for {model.__tablename__}: {key!r}")
        if write and key in _MANAGED_FIELDS:
            continue
        col = columns[key]
        if value is None:
            if update and not col.nullable:
                raise ValueError(f"{model.__tablename__}.{key} must not be null")
            # Let the server default fill NOT NULL columns that have one.
            if write and not col.nullable and col.server_default is not None:
                continue
            out[key] = None
        elif isinstance(col.type, Date):
            out[key] = to_date(value)
        elif isinstance(col.type, Numeric):
            out[key] = to_decimal(value)
        elif isinstance(col.type, Boolean):
            out[key] = to_bool(value)
        else:
            out[key] = value
    return out


class SqlRepository:
    """Repository over a SQLAlchemy :class:`~sqlalchemy.orm.Session`."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def _owned(self, collection: str, owner_id: str, record_id: str) -> Base:
        model = _model(collection)
        obj = self.session.get(model, str(record_id))
        if obj is None or obj.user_id != owner_id:
            raise RecordNotFoundError(collection, record_id)
        return obj

    def list_by(
        self,
        collection: str,
        owner_id: str,
        filters: Mapping[str, Any] | None = None,
        order_by: str | None = None,
        descending: bool = False,
    ) -> list[dict[str, Any]]:
        owner = require_owner(owner_id)
        model = _model(collection)
        stmt = select(model).where(model.user_id == owner)
        for key, value in _coerce(model, filters or {}, write=False).items():
            stmt = stmt.where(model.__table__.columns[key] == value)
        if order_by:
            if order_by not in model.__table__.columns:
                raise ValueError(f"unknown column for {collection}: {order_by!r}")
            col = model.__table__.columns[order_by]
            stmt = stmt.order_by(col.desc() if descending else col.asc())
        rows = self.session.execute(stmt).scalars().all()
        return [_to_dict(r) for r in rows]

    def get_by_id(self, collection: str, owner_id: str, record_id: str) -> dict[str, Any]:
        return _to_dict(self._owned(collection, require_owner(owner_id), record_id))

    def insert(self, collection: str, owner_id: str, values: Mapping[str, Any]) -> dict[str, Any]:
        owner = require_owner(owner_id)
        model = _model(collection)
        payload = _coerce(model, values, write=True)
        if values.get("id"):
            payload["id"] = str(values["id"])
        obj = model(**payload, user_id=owner)
        self.session.add(obj)
        self.session.flush()
        # Pull server defaults (balances, status, timestamps) back onto the object.
        self.session.refresh(obj)
        _logger.debug("repo:insert collection=%s id=%s", collection, obj.id)
        return _to_dict(obj)

    def update_by_id(
        self,
        collection: str,
        owner_id: str,
        record_id: str,
        changes: Mapping[str, Any],
    ) -> dict[str, Any]:
        obj = self._owned(collection, require_owner(owner_id), record_id)
        for key, value in _coerce(type(obj), changes, write=True, update=True).items():
            setattr(obj, key, value)
        self.session.flush()
        self.session.refresh(obj)
        return _to_dict(obj)

    def delete_by_id(self, collection: str, owner_id: str, record_id: str) -> None:
        obj = self._owned(collection, require_owner(owner_id), record_id)
        self.session.delete(obj)
        self.session.flush()
        _logger.debug("repo:delete collection=%s id=%s", collection, record_id)


__all__ = ["MODELS", "SqlRepository"]
