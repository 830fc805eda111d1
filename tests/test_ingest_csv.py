from __future__ import annotations

import csv
import textwrap
from datetime import date
from decimal import Decimal
from pathlib import Path

import pytest

from backoffice.ingest import load_records_csv


def _write(tmp_path: Path, name: str, body: str) -> Path:
    p = tmp_path / name
    p.write_text(textwrap.dedent(body).lstrip(), encoding="utf-8")
    return p


def test_customers_csv(tmp_path) -> None:
    p = _write(
        tmp_path,
        "customers.csv",
        """
        customer_code,customer_name,email,credit_limit,current_balance,extra_col
        ACME, Acme Ltd ,ops@acme.test,5000,
        BOLT,Bolt & Nut,,,-50.25,ignored
        """,
    )

    rows = load_records_csv(p, "customers")

    assert rows == [
        {
            "customer_code": "ACME",
            "customer_name": "Acme Ltd",
            "email": "ops@acme.test",
            "credit_limit": Decimal("5000"),
            "current_balance": Decimal("0"),
        },
        {
            "customer_code": "BOLT",
            "customer_name": "Bolt & Nut",
            "credit_limit": Decimal("0"),
            "current_balance": Decimal("-50.25"),
        },
    ]


def test_invoices_csv_parses_dates_and_defaults_status(tmp_path) -> None:
    p = _write(
        tmp_path,
        "invoices.csv",
        """
        invoice_no,date,customer_id,total_amount,status
        INV-001,2024-01-05T10:00:00Z,c1,1000.00,Sent
        INV-002,2024-01-06,c1,250,
        """,
    )

    rows = load_records_csv(p, "invoices")

    assert [r["date"] for r in rows] == [date(2024, 1, 5), date(2024, 1, 6)]
    assert [r["status"] for r in rows] == ["Sent", "Draft"]
    assert rows[0]["total_amount"] == Decimal("1000.00")


def test_payments_csv_defaults(tmp_path) -> None:
    p = _write(
        tmp_path,
        "payments.csv",
        """
        date,customer_id,amount,method
        2024-01-10,c1,400,Cash
        2024-01-11,c1,50.5,
        """,
    )

    rows = load_records_csv(p, "payments")

    assert [(r["method"], r["allocation_type"]) for r in rows] == [
        ("Cash", "Whole"),
        ("EFT", "Whole"),
    ]
    assert rows[1]["amount"] == Decimal("50.5")


def test_missing_required_header_raises_csv_error(tmp_path) -> None:
    p = _write(tmp_path, "bad.csv", "invoice_no,date\nINV-001,2024-01-05\n")

    with pytest.raises(csv.Error, match="total_amount"):
        load_records_csv(p, "invoices")


def test_invalid_row_reports_line_number(tmp_path) -> None:
    p = _write(
        tmp_path,
        "payments.csv",
        """
        date,customer_id,amount
        2024-01-10,c1,400
        2024-01-11,c1,-5
        """,
    )

    with pytest.raises(ValueError, match="line 3"):
        load_records_csv(p, "payments")


def test_bad_date_is_rejected(tmp_path) -> None:
    p = _write(tmp_path, "payments.csv", "date,amount\n10/01/2024,400\n")

    with pytest.raises(ValueError, match="line 2"):
        load_records_csv(p, "payments")


def test_unsupported_collection(tmp_path) -> None:
    p = _write(tmp_path, "staff.csv", "first_name\nA\n")

    with pytest.raises(ValueError, match="cannot import 'staff'"):
        load_records_csv(p, "staff")
