"""Owner-scoped record store interface and an in-memory implementation.

Every call names a collection (``invoices``, ``payments``, ...) and the
owner whose rows it may see. Rows are returned as fresh ``dict`` copies so
callers can never mutate stored state through a result.

:class:`InMemoryRepository` backs tests and offline tooling; the SQLAlchemy
adapter lives in :mod:`backoffice.persistence`.
"""

from __future__ import annotations

import uuid
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any, Protocol, runtime_checkable

from .normalizers import to_date

COLLECTIONS: frozenset[str] = frozenset(
    {
        "customers",
        "invoices",
        "invoice_items",
        "quotes",
        "quote_items",
        "payments",
        "suppliers",
        "supplier_payments",
        "staff",
        "stock_items",
        "workflows",
        "workflow_items",
        "fuel_logs",
        "grvs",
        "grv_items",
    }
)

# Assigned by the store; callers may not override them on update.
_MANAGED_FIELDS = frozenset({"id", "user_id", "created_at"})

# Day-precision columns, always stored as `date`.
_DATE_FIELDS = frozenset({"date", "promo_start_date", "promo_end_date"})


class RecordNotFoundError(LookupError):
    """No row with the given id exists for this owner."""

    def __init__(self, collection: str, record_id: Any) -> None:
        super().__init__(f"{collection} record not found: id={record_id}")
        self.collection = collection
        self.record_id = record_id


class UnknownCollectionError(ValueError):
    def __init__(self, collection: str) -> None:
        super().__init__(f"unknown collection: {collection!r}")
        self.collection = collection


def require_owner(owner_id: str | None) -> str:
    if not owner_id:
        raise ValueError("not authenticated: owner_id is required")
    return str(owner_id)


def check_collection(collection: str) -> str:
    if collection not in COLLECTIONS:
        raise UnknownCollectionError(collection)
    return collection


@runtime_checkable
class Repository(Protocol):
    """Capability set the services depend on."""

    def list_by(
        self,
        collection: str,
        owner_id: str,
        filters: Mapping[str, Any] | None = None,
        order_by: str | None = None,
        descending: bool = False,
    ) -> list[dict[str, Any]]: ...

    def get_by_id(self, collection: str, owner_id: str, record_id: str) -> dict[str, Any]: ...

    def insert(
        self, collection: str, owner_id: str, values: Mapping[str, Any]
    ) -> dict[str, Any]: ...

    def update_by_id(
        self,
        collection: str,
        owner_id: str,
        record_id: str,
        changes: Mapping[str, Any],
    ) -> dict[str, Any]: ...

    def delete_by_id(self, collection: str, owner_id: str, record_id: str) -> None: ...


def _coerce_dates(values: Mapping[str, Any]) -> dict[str, Any]:
    out = dict(values)
    for key in _DATE_FIELDS.intersection(out):
        if out[key] is not None:
            out[key] = to_date(out[key])
    return out


def _sort_key(value: Any) -> tuple[int, Any]:
    # None sorts first; everything else compares by value.
    return (0, 0) if value is None else (1, value)


class InMemoryRepository:
    """Dict-backed :class:`Repository`.

    Rows live in insertion order per collection. ``order_by`` uses a stable
    sort, so rows with equal keys keep insertion order (reversed wholesale
    when ``descending``).
    Day fields (``date``, promotion dates) are normalized to ``datetime.date``
    on write, matching what the SQL adapter returns.
    """

    def __init__(self) -> None:
        self._rows: dict[str, dict[str, dict[str, Any]]] = {c: {} for c in COLLECTIONS}

    def _table(self, collection: str) -> dict[str, dict[str, Any]]:
        return self._rows[check_collection(collection)]

    def _owned(self, collection: str, owner_id: str, record_id: str) -> dict[str, Any]:
        row = self._table(collection).get(str(record_id))
        if row is None or row.get("user_id") != owner_id:
            raise RecordNotFoundError(collection, record_id)
        return row

    def list_by(
        self,
        collection: str,
        owner_id: str,
        filters: Mapping[str, Any] | None = None,
        order_by: str | None = None,
        descending: bool = False,
    ) -> list[dict[str, Any]]:
        owner = require_owner(owner_id)
        rows = [r for r in self._table(collection).values() if r.get("user_id") == owner]
        for key, expected in _coerce_dates(filters or {}).items():
            rows = [r for r in rows if r.get(key) == expected]
        if order_by:
            rows = sorted(rows, key=lambda r: _sort_key(r.get(order_by)), reverse=descending)
        return [dict(r) for r in rows]

    def get_by_id(self, collection: str, owner_id: str, record_id: str) -> dict[str, Any]:
        return dict(self._owned(collection, require_owner(owner_id), record_id))

    def insert(self, collection: str, owner_id: str, values: Mapping[str, Any]) -> dict[str, Any]:
        owner = require_owner(owner_id)
        table = self._table(collection)
        row = _coerce_dates(values)
        row["id"] = str(row.get("id") or uuid.uuid4())
        row["user_id"] = owner
        now = datetime.now(UTC)
        row.setdefault("created_at", now)
        row.setdefault("updated_at", now)
        if row["id"] in table:
            raise ValueError(f"duplicate id for {collection}: {row['id']}")
        table[row["id"]] = row
        return dict(row)

    def update_by_id(
        self,
        collection: str,
        owner_id: str,
        record_id: str,
        changes: Mapping[str, Any],
    ) -> dict[str, Any]:
        row = self._owned(collection, require_owner(owner_id), record_id)
        for key, value in _coerce_dates(changes).items():
            if key in _MANAGED_FIELDS:
                continue
            row[key] = value
        row["updated_at"] = datetime.now(UTC)
        return dict(row)

    def delete_by_id(self, collection: str, owner_id: str, record_id: str) -> None:
        self._owned(collection, require_owner(owner_id), record_id)
        del self._table(collection)[str(record_id)]


__all__ = [
    "COLLECTIONS",
    "InMemoryRepository",
    "RecordNotFoundError",
    "Repository",
    "UnknownCollectionError",
    "check_collection",
    "require_owner",
]
