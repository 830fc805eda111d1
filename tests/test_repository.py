from __future__ import annotations

from datetime import date

import pytest

from backoffice.repository import (
    InMemoryRepository,
    RecordNotFoundError,
    Repository,
    UnknownCollectionError,
)


@pytest.fixture
def repo() -> InMemoryRepository:
    return InMemoryRepository()


def test_in_memory_repository_satisfies_protocol(repo) -> None:
    assert isinstance(repo, Repository)


def test_insert_assigns_id_owner_and_timestamps(repo) -> None:
    row = repo.insert("customers", "o1", {"customer_name": "Acme", "user_id": "someone-else"})

    assert row["id"]
    assert row["user_id"] == "o1"
    assert row["created_at"] is not None
    assert repo.get_by_id("customers", "o1", row["id"])["customer_name"] == "Acme"


def test_rows_are_scoped_to_their_owner(repo) -> None:
    mine = repo.insert("customers", "o1", {"customer_name": "Mine"})
    repo.insert("customers", "o2", {"customer_name": "Theirs"})

    assert [r["customer_name"] for r in repo.list_by("customers", "o1")] == ["Mine"]
    with pytest.raises(RecordNotFoundError):
        repo.get_by_id("customers", "o2", mine["id"])
    with pytest.raises(RecordNotFoundError):
        repo.update_by_id("customers", "o2", mine["id"], {"customer_name": "Stolen"})
    with pytest.raises(RecordNotFoundError):
        repo.delete_by_id("customers", "o2", mine["id"])


def test_list_by_filters_and_orders(repo) -> None:
    for name, code in [("Zed", "Z"), ("Alpha", "A"), ("Mid", "A")]:
        repo.insert("customers", "o1", {"customer_name": name, "customer_code": code})

    rows = repo.list_by("customers", "o1", {"customer_code": "A"}, order_by="customer_name")
    assert [r["customer_name"] for r in rows] == ["Alpha", "Mid"]

    rows = repo.list_by("customers", "o1", order_by="customer_name", descending=True)
    assert [r["customer_name"] for r in rows] == ["Zed", "Mid", "Alpha"]


def test_equal_sort_keys_keep_insertion_order(repo) -> None:
    for no in ("INV-002", "INV-001", "INV-003"):
        repo.insert("invoices", "o1", {"invoice_no": no, "date": "2024-01-05"})

    rows = repo.list_by("invoices", "o1", order_by="date")

    assert [r["invoice_no"] for r in rows] == ["INV-002", "INV-001", "INV-003"]


def test_results_are_copies(repo) -> None:
    row = repo.insert("customers", "o1", {"customer_name": "Acme"})
    row["customer_name"] = "Mutated"
    repo.list_by("customers", "o1")[0]["customer_name"] = "Mutated again"

    assert repo.get_by_id("customers", "o1", row["id"])["customer_name"] == "Acme"


def test_update_keeps_identity_fields(repo) -> None:
    row = repo.insert("customers", "o1", {"customer_name": "Acme"})

    updated = repo.update_by_id(
        "customers", "o1", row["id"], {"customer_name": "Acme Ltd", "id": "x", "user_id": "o2"}
    )

    assert updated["id"] == row["id"]
    assert updated["user_id"] == "o1"
    assert updated["customer_name"] == "Acme Ltd"


def test_delete_removes_row(repo) -> None:
    row = repo.insert("payments", "o1", {"amount": 10})

    repo.delete_by_id("payments", "o1", row["id"])

    assert repo.list_by("payments", "o1") == []
    with pytest.raises(RecordNotFoundError, match="payments record not found"):
        repo.delete_by_id("payments", "o1", row["id"])


def test_unknown_collection(repo) -> None:
    with pytest.raises(UnknownCollectionError, match="widgets"):
        repo.list_by("widgets", "o1")


@pytest.mark.parametrize("owner", [None, ""])
def test_missing_owner_is_not_authenticated(repo, owner) -> None:
    with pytest.raises(ValueError, match="not authenticated"):
        repo.list_by("customers", owner)
    with pytest.raises(ValueError, match="not authenticated"):
        repo.insert("customers", owner, {"customer_name": "x"})


def test_day_fields_are_stored_as_dates(repo) -> None:
    repo.insert("payments", "o1", {"id": "a", "date": "2024-01-05T09:30:00Z"})
    repo.insert("payments", "o1", {"id": "b", "date": date(2024, 1, 3)})
    repo.update_by_id("payments", "o1", "b", {"date": "2024-01-07"})

    rows = repo.list_by("payments", "o1", order_by="date")

    assert [(r["id"], r["date"]) for r in rows] == [
        ("a", date(2024, 1, 5)),
        ("b", date(2024, 1, 7)),
    ]
    assert repo.list_by("payments", "o1", {"date": "2024-01-07"})[0]["id"] == "b"
