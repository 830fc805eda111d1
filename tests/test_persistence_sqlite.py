from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest
from db.client import session_scope

from backoffice import api
from backoffice.persistence import SqlRepository
from backoffice.repository import RecordNotFoundError, UnknownCollectionError
from tests.helpers.db import seed_ledger


def test_insert_applies_server_defaults(sqlite_url, owner_id) -> None:
    with session_scope(database_url=sqlite_url) as session:
        row = SqlRepository(session).insert(
            "customers", owner_id, {"customer_code": "C1", "customer_name": "Acme"}
        )

    assert len(row["id"]) == 36
    assert row["user_id"] == owner_id
    assert row["current_balance"] == Decimal("0")
    assert row["credit_limit"] == Decimal("0")
    assert row["created_at"] is not None


def test_values_are_coerced_to_column_types(sqlite_url, owner_id) -> None:
    with session_scope(database_url=sqlite_url) as session:
        repo = SqlRepository(session)
        row = repo.insert(
            "invoices",
            owner_id,
            {"invoice_no": "INV-001", "date": "2024-01-05T09:00:00Z", "total_amount": "99.95"},
        )

    assert row["date"] == date(2024, 1, 5)
    assert row["total_amount"] == Decimal("99.95")
    assert row["status"] == "Draft"


def test_unknown_column_and_collection_are_rejected(sqlite_url, owner_id) -> None:
    with session_scope(database_url=sqlite_url) as session:
        repo = SqlRepository(session)
        with pytest.raises(ValueError, match="unknown column"):
            repo.insert("customers", owner_id, {"customer_name": "x", "nickname": "y"})
        with pytest.raises(UnknownCollectionError):
            repo.list_by("widgets", owner_id)


def test_owner_scoping_and_missing_rows(sqlite_url, owner_id) -> None:
    ids = seed_ledger(database_url=sqlite_url, owner_id=owner_id)

    with session_scope(database_url=sqlite_url) as session:
        repo = SqlRepository(session)
        assert repo.list_by("customers", "someone-else") == []
        with pytest.raises(RecordNotFoundError):
            repo.get_by_id("customers", "someone-else", ids["client_id"])
        with pytest.raises(RecordNotFoundError):
            repo.get_by_id("customers", owner_id, "no-such-id")


def test_list_by_filters_and_orders_descending(sqlite_url, owner_id) -> None:
    ids = seed_ledger(database_url=sqlite_url, owner_id=owner_id)

    with session_scope(database_url=sqlite_url) as session:
        rows = SqlRepository(session).list_by(
            "invoices",
            owner_id,
            {"customer_id": ids["client_id"]},
            order_by="date",
            descending=True,
        )

    assert [r["invoice_no"] for r in rows] == ["INV-003", "INV-002", "INV-001"]


def test_update_and_delete(sqlite_url, owner_id) -> None:
    ids = seed_ledger(database_url=sqlite_url, owner_id=owner_id)

    with session_scope(database_url=sqlite_url) as session:
        repo = SqlRepository(session)
        updated = repo.update_by_id(
            "invoices", owner_id, ids["invoice_id"], {"status": "Paid", "id": "ignored"}
        )
        assert updated["id"] == ids["invoice_id"]
        assert updated["status"] == "Paid"
        repo.delete_by_id("payments", owner_id, ids["payment_id"])

    with session_scope(database_url=sqlite_url) as session:
        assert SqlRepository(session).list_by("payments", owner_id) == []


def test_statement_against_sqlite(sqlite_url, owner_id) -> None:
    ids = seed_ledger(database_url=sqlite_url, owner_id=owner_id)

    with session_scope(database_url=sqlite_url) as session:
        lines = api.client_statement(SqlRepository(session), owner_id, ids["client_id"])

    assert [(ln.reference, ln.amount, ln.balance) for ln in lines] == [
        ("INV-001", Decimal("1000"), Decimal("1000")),
        ("PAY-abcd", Decimal("-400"), Decimal("600")),
        ("INV-002", Decimal("500"), Decimal("1100")),
    ]


def test_invoice_with_items_and_payment_against_sqlite(sqlite_url, owner_id) -> None:
    with session_scope(database_url=sqlite_url) as session:
        repo = SqlRepository(session)
        client = api.add_client(repo, owner_id, {"customer_code": "C1", "customer_name": "Acme"})
        invoice = api.create_invoice(
            repo,
            owner_id,
            {"customer_id": client["id"], "date": date(2024, 1, 5), "status": "Sent"},
            [
                {"description": "Labour", "quantity": 2, "unit_price": 50, "vat_rate": 15},
                {"description": "Parts", "quantity": 1, "unit_price": 100},
            ],
        )
        api.record_payment(
            repo,
            owner_id,
            {
                "customer_id": client["id"],
                "invoice_id": invoice["id"],
                "allocation_type": "Invoice",
                "amount": "115",
                "date": date(2024, 1, 6),
            },
        )

    with session_scope(database_url=sqlite_url) as session:
        repo = SqlRepository(session)
        assert invoice["invoice_no"] == "INV-001"
        assert invoice["total_amount"] == Decimal("215")
        assert len(api.invoice_items(repo, owner_id, invoice["id"])) == 2
        assert repo.get_by_id("customers", owner_id, client["id"])["current_balance"] == Decimal(
            "-115"
        )
        cached, computed = api.reconcile_client_balance(repo, owner_id, client["id"])
        assert computed == Decimal("100")


def test_deleting_invoice_cascades_to_items(sqlite_url, owner_id) -> None:
    with session_scope(database_url=sqlite_url) as session:
        repo = SqlRepository(session)
        invoice = api.create_invoice(
            repo,
            owner_id,
            {"date": date(2024, 1, 5)},
            [{"description": "Labour", "quantity": 1, "unit_price": 10}],
        )

    with session_scope(database_url=sqlite_url) as session:
        repo = SqlRepository(session)
        repo.delete_by_id("invoices", owner_id, invoice["id"])

    with session_scope(database_url=sqlite_url) as session:
        assert SqlRepository(session).list_by("invoice_items", owner_id) == []


def test_update_rejects_null_for_required_columns(sqlite_url, owner_id) -> None:
    ids = seed_ledger(database_url=sqlite_url, owner_id=owner_id)

    with session_scope(database_url=sqlite_url) as session:
        repo = SqlRepository(session)
        with pytest.raises(ValueError, match="customers.credit_limit must not be null"):
            api.update_client(repo, owner_id, ids["client_id"], {"credit_limit": None})
        cleared = api.update_client(repo, owner_id, ids["client_id"], {"email": None})

    assert cleared["email"] is None
    assert cleared["credit_limit"] == Decimal("5000")


def test_flag_strings_are_coerced_for_boolean_columns(sqlite_url, owner_id) -> None:
    with session_scope(database_url=sqlite_url) as session:
        repo = SqlRepository(session)
        invoice = api.create_invoice(
            repo,
            owner_id,
            {"date": date(2024, 1, 5), "is_vat_invoice": "false"},
            [{"description": "Labour", "quantity": 1, "unit_price": 100, "vat_rate": 15}],
        )
        flipped = repo.update_by_id("invoices", owner_id, invoice["id"], {"is_vat_invoice": "1"})

    assert invoice["is_vat_invoice"] is False
    assert invoice["vat_amount"] == Decimal("0")
    assert flipped["is_vat_invoice"] is True


def test_record_grv_against_sqlite(sqlite_url, owner_id) -> None:
    with session_scope(database_url=sqlite_url) as session:
        repo = SqlRepository(session)
        supplier = api.add_supplier(
            repo, owner_id, {"supplier_code": "S1", "supplier_name": "Steel Co"}
        )
        bolt = api.add_stock_item(
            repo, owner_id, {"stock_code": "BOLT", "stock_descr": "Bolt M8", "quantity_on_hand": 2}
        )
        grv = api.record_grv(
            repo,
            owner_id,
            {"supplier_id": supplier["id"], "reference": "DN-9", "date": "2024-03-01"},
            [{"stock_item_id": bolt["id"], "qty": "6", "cost_price": "1.25", "selling_price": 2}],
        )

    with session_scope(database_url=sqlite_url) as session:
        repo = SqlRepository(session)
        stock = repo.get_by_id("stock_items", owner_id, bolt["id"])
        lines = api.grv_items(repo, owner_id, grv["id"])
        balance = repo.get_by_id("suppliers", owner_id, supplier["id"])["current_balance"]

    assert grv["date"] == date(2024, 3, 1)
    assert [(ln["qty"], ln["cost_price"]) for ln in lines] == [(Decimal("6"), Decimal("1.25"))]
    assert stock["quantity_on_hand"] == Decimal("8")
    assert stock["last_cost"] == Decimal("1.25")
    assert stock["selling_price"] == Decimal("2")
    assert balance == Decimal("7.50")


def test_record_grv_with_unknown_supplier_writes_nothing(sqlite_url, owner_id) -> None:
    with session_scope(database_url=sqlite_url) as session:
        repo = SqlRepository(session)
        with pytest.raises(RecordNotFoundError):
            api.record_grv(
                repo,
                owner_id,
                {"supplier_id": "no-such-supplier", "reference": "DN-9"},
                [{"qty": 1, "cost_price": 1}],
            )
        assert repo.list_by("grvs", owner_id) == []
