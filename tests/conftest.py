"""Pytest configuration for test isolation.

Puts the workspace packages (``packages/``, ``libs/db/src``) and the repo
root on ``sys.path`` so ``backoffice``, ``db`` and ``tests.helpers`` import
without an install.

The ``db`` client keeps one process-wide engine bound to the first
``DATABASE_URL`` it sees. Each test gets its own SQLite file, so the engine
is reset around every test, and the environment variables the CLI reads are
cleared so a developer's ``.env`` or shell cannot leak in.
"""

from __future__ import annotations

import sys
from collections.abc import Iterator
from pathlib import Path

import pytest

_ROOT = Path(__file__).resolve().parents[1]
sys.path[:0] = [
    p
    for p in (str(_ROOT / "packages"), str(_ROOT / "libs" / "db" / "src"), str(_ROOT))
    if p not in sys.path
]

from db.client import reset_engine  # noqa: E402


@pytest.fixture(autouse=True)
def _isolate_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    for var in ("DATABASE_URL", "BACKOFFICE_OWNER_ID", "BACKOFFICE_LOG_LEVEL"):
        monkeypatch.delenv(var, raising=False)
    # The CLI loads ``.env`` from the working directory; use an empty one.
    monkeypatch.chdir(tmp_path)
    reset_engine()
    yield
    reset_engine()


@pytest.fixture
def owner_id() -> str:
    return "owner-1"


@pytest.fixture
def sqlite_url(tmp_path: Path) -> str:
    from tests.helpers.db import bootstrap_sqlite_db

    return bootstrap_sqlite_db(tmp_path / "db" / "backoffice.sqlite3")
