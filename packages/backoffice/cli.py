# ruff: noqa: I001
"""CLI for the ``backoffice`` package.

Command handlers (``cmd_*``) hold the logic and return a process exit code;
the Typer commands below are thin wrappers around them. Environment
variables (``DATABASE_URL``, ``BACKOFFICE_OWNER_ID``,
``BACKOFFICE_LOG_LEVEL``) are loaded from a local ``.env`` using
``python-dotenv`` before any command runs. Business logic lives in
``backoffice.api`` and the pure modules it composes.
"""

from __future__ import annotations

import json
import os
import sys
from dataclasses import asdict
from decimal import Decimal
from pathlib import Path
from typing import Annotated, Any

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table
from typer.models import OptionInfo

from .documents import compute_document_totals, format_currency
from .logging_setup import configure_logging
from .normalizers import to_date

_OWNER_ENV = "BACKOFFICE_OWNER_ID"


# ---- Small module-level helpers used by CLI commands -------------------------


def _err(message: str) -> int:
    print(f"Error: {message}", file=sys.stderr)
    return 1


def _resolve_owner(owner_id: str | None) -> str | None:
    return owner_id or os.getenv(_OWNER_ENV) or None


def _json_default(value: Any) -> Any:
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return str(value)


def _dump_json(payload: Any) -> None:
    print(json.dumps(payload, default=_json_default, indent=2))


# ---- Command handlers ---------------------------------------------------------


def cmd_statement(
    client_id: str,
    *,
    owner_id: str | None,
    cutoff: str | None = None,
    as_json: bool = False,
    database_url: str | None = None,
) -> int:
    """Print one client's statement as a table, or JSON with ``as_json``.

    JSON output is ``{"client_id", "cutoff", "lines": [...], "summary": {...}}``
    with dates in ISO form and amounts as decimal strings.
    """

    from db.client import session_scope

    from .api import client_statement
    from .persistence import SqlRepository
    from .statements import statement_as_dicts, summarize_statement

    owner = _resolve_owner(owner_id)
    if not owner:
        return _err(f"owner id is required (--owner-id or {_OWNER_ENV})")
    try:
        cutoff_day = to_date(cutoff) if cutoff else None
        with session_scope(database_url=database_url) as session:
            lines = client_statement(SqlRepository(session), owner, client_id, cutoff_day)
    except Exception as e:
        return _err(f"statement failed: {e}")

    summary = summarize_statement(lines)
    if as_json:
        _dump_json(
            {
                "client_id": client_id,
                "cutoff": cutoff_day,
                "lines": statement_as_dicts(lines),
                "summary": asdict(summary),
            }
        )
        return 0

    table = Table(title=f"Statement {client_id}")
    for col in ("Date", "Type", "Reference"):
        table.add_column(col)
    table.add_column("Amount", justify="right")
    table.add_column("Balance", justify="right")
    for ln in lines:
        table.add_row(
            ln.date.isoformat(),
            str(ln.kind),
            ln.reference,
            format_currency(ln.amount),
            format_currency(ln.balance),
        )
    console = Console()
    console.print(table)
    console.print(
        f"Invoiced {format_currency(summary.total_invoiced)}  "
        f"Paid {format_currency(summary.total_paid)}  "
        f"Closing {format_currency(summary.closing_balance)}"
    )
    return 0


def cmd_statements(
    *,
    owner_id: str | None,
    cutoff: str | None = None,
    database_url: str | None = None,
) -> int:
    """One summary row per client: invoiced, paid and closing balance."""

    from db.client import session_scope

    from .api import client_statements
    from .persistence import SqlRepository

    owner = _resolve_owner(owner_id)
    if not owner:
        return _err(f"owner id is required (--owner-id or {_OWNER_ENV})")
    try:
        cutoff_day = to_date(cutoff) if cutoff else None
        with session_scope(database_url=database_url) as session:
            statements = client_statements(SqlRepository(session), owner, cutoff_day)
    except Exception as e:
        return _err(f"statements failed: {e}")

    table = Table(title="Client statements")
    table.add_column("Client")
    for col in ("Lines", "Invoiced", "Paid", "Closing"):
        table.add_column(col, justify="right")
    for st in statements:
        s = st.summary
        table.add_row(
            st.client_name,
            str(s.line_count),
            format_currency(s.total_invoiced),
            format_currency(s.total_paid),
            format_currency(s.closing_balance),
        )
    Console().print(table)
    return 0


def cmd_owing(*, owner_id: str | None, database_url: str | None = None) -> int:
    from db.client import session_scope

    from .persistence import SqlRepository
    from .summaries import client_stats

    owner = _resolve_owner(owner_id)
    if not owner:
        return _err(f"owner id is required (--owner-id or {_OWNER_ENV})")
    try:
        with session_scope(database_url=database_url) as session:
            stats = client_stats(SqlRepository(session).list_by("customers", owner))
    except Exception as e:
        return _err(f"owing failed: {e}")

    table = Table(title="Amount owing")
    table.add_column("Metric")
    table.add_column("Value", justify="right")
    table.add_row("Total owing", format_currency(stats.total_owing))
    table.add_row("Clients", str(stats.total_clients))
    table.add_row("Within credit limit", str(stats.within_limit))
    table.add_row("Over credit limit", str(stats.over_limit))
    table.add_row("Average balance", format_currency(stats.average_balance))
    Console().print(table)
    return 0


def cmd_document_totals(items_json: str | os.PathLike[str]) -> int:
    """Print subtotal, tax and total for a JSON list of line items."""

    try:
        with open(items_json, encoding="utf-8") as f:
            items = json.load(f, parse_float=Decimal)
    except FileNotFoundError:
        return _err(f"File not found: {items_json}")
    except json.JSONDecodeError as e:
        return _err(f"invalid JSON in {items_json}: {e}")
    if not isinstance(items, list):
        return _err("items JSON must be a list of objects")
    try:
        totals = compute_document_totals(items)
    except (ValueError, AttributeError) as e:
        return _err(f"invalid line item: {e}")

    print(f"Subtotal: {format_currency(totals.subtotal)}")
    print(f"VAT: {format_currency(totals.tax_amount)}")
    print(f"Total: {format_currency(totals.total)}")
    return 0


def cmd_import_csv(
    collection: str,
    csv_path: str | os.PathLike[str],
    *,
    owner_id: str | None,
    database_url: str | None = None,
) -> int:
    """Validate a CSV and insert its rows for the owner in one transaction."""

    import csv

    from db.client import session_scope

    from .ingest import load_records_csv
    from .persistence import SqlRepository

    owner = _resolve_owner(owner_id)
    if not owner:
        return _err(f"owner id is required (--owner-id or {_OWNER_ENV})")
    try:
        records = load_records_csv(csv_path, collection)
    except FileNotFoundError:
        return _err(f"File not found: {csv_path}")
    except csv.Error as e:
        return _err(f"Failed to parse CSV: {e}")
    except ValueError as e:
        return _err(str(e))

    try:
        with session_scope(database_url=database_url) as session:
            repo = SqlRepository(session)
            for rec in records:
                repo.insert(collection, owner, rec)
    except Exception as e:
        return _err(f"import failed: {e}")

    print(f"Imported {len(records)} {collection} record(s)")
    return 0


def cmd_init_db(*, database_url: str | None = None) -> int:
    from db.client import create_schema

    try:
        create_schema(database_url=database_url)
    except Exception as e:
        return _err(f"init-db failed: {e}")
    print("Database schema created")
    return 0


# ---- Typer-based console interface -------------------------------------------


app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help=(
        "Back-office tools: client statements, balances and imports. "
        "Loads DATABASE_URL and BACKOFFICE_OWNER_ID from a local .env before running."
    ),
)

# Module-level option objects to satisfy ruff B008 (no calls in parameter
# defaults). Shared across commands, so they are used as defaults rather than
# inside Annotated.
OWNER_ID_OPTION: OptionInfo = typer.Option(
    None, "--owner-id", help=f"Owner whose records to use (falls back to ${_OWNER_ENV})."
)
DATABASE_URL_OPTION: OptionInfo = typer.Option(
    None, "--database-url", help="Override DATABASE_URL (falls back to env var)."
)
CUTOFF_OPTION: OptionInfo = typer.Option(
    None, "--cutoff", help="Inclusive cutoff day (YYYY-MM-DD); defaults to today."
)


@app.command("statement")
def statement_cmd(
    client_id: Annotated[str, typer.Option(..., "--client-id", help="Client (customer) id")],
    cutoff: str | None = CUTOFF_OPTION,
    as_json: Annotated[bool, typer.Option("--json", help="Emit JSON instead of a table.")] = False,
    owner_id: str | None = OWNER_ID_OPTION,
    database_url: str | None = DATABASE_URL_OPTION,
) -> None:
    """Show a client's statement with running balance."""

    raise typer.Exit(
        cmd_statement(
            client_id,
            owner_id=owner_id,
            cutoff=cutoff,
            as_json=as_json,
            database_url=database_url,
        )
    )


@app.command("statements")
def statements_cmd(
    cutoff: str | None = CUTOFF_OPTION,
    owner_id: str | None = OWNER_ID_OPTION,
    database_url: str | None = DATABASE_URL_OPTION,
) -> None:
    """Summarize every client's statement."""

    raise typer.Exit(cmd_statements(owner_id=owner_id, cutoff=cutoff, database_url=database_url))


@app.command("owing")
def owing_cmd(
    owner_id: str | None = OWNER_ID_OPTION,
    database_url: str | None = DATABASE_URL_OPTION,
) -> None:
    """Show the total owed by clients and credit-limit stats."""

    raise typer.Exit(cmd_owing(owner_id=owner_id, database_url=database_url))


@app.command("document-totals")
def document_totals_cmd(
    items_json: Annotated[
        Path,
        typer.Option(
            ..., "--items-json", help="JSON file with a list of line items", dir_okay=False
        ),
    ],
) -> None:
    """Compute invoice/quote totals from line items."""

    raise typer.Exit(cmd_document_totals(items_json))


@app.command("import-csv")
def import_csv_cmd(
    collection: Annotated[
        str, typer.Option(..., "--collection", help="customers, invoices or payments")
    ],
    csv_path: Annotated[Path, typer.Option(..., "--csv-path", help="CSV file", dir_okay=False)],
    owner_id: str | None = OWNER_ID_OPTION,
    database_url: str | None = DATABASE_URL_OPTION,
) -> None:
    """Import records from a CSV export."""

    raise typer.Exit(
        cmd_import_csv(collection, csv_path, owner_id=owner_id, database_url=database_url)
    )


@app.command("init-db")
def init_db_cmd(database_url: str | None = DATABASE_URL_OPTION) -> None:
    """Create tables from the ORM models (local/dev databases)."""

    raise typer.Exit(cmd_init_db(database_url=database_url))


@app.callback()
def _root() -> None:
    """Load ``.env`` from the working directory and configure logging."""

    # override=False keeps variables already set in the environment.
    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)
    configure_logging()


if __name__ == "__main__":  # pragma: no cover - `python -m backoffice.cli`
    app()
