"""CSV loading for bulk imports.

:func:`load_records_csv` turns a UTF-8 CSV export (one header row, one
record per line) into plain dicts ready for
:meth:`~backoffice.repository.Repository.insert`. Each row is validated with
the collection's schema from :mod:`backoffice.ingest.rows`.
"""

from __future__ import annotations

import csv
from os import PathLike
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from ..logging_setup import get_logger
from .rows import ROW_MODELS

_logger = get_logger("backoffice.ingest")


def load_records_csv(csv_path: str | PathLike[str], collection: str) -> list[dict[str, Any]]:
    """Read and validate ``csv_path`` as rows of ``collection``.

    Raises
    ------
    ValueError
        ``collection`` is not importable, or a row fails validation (the
        message names the CSV line, counting the header as line 1).
    csv.Error
        The file has no header row or lacks a required column.
    """

    model = ROW_MODELS.get(collection)
    if model is None:
        supported = ", ".join(sorted(ROW_MODELS))
        raise ValueError(f"cannot import {collection!r}; supported: {supported}")

    p = Path(csv_path)
    records: list[dict[str, Any]] = []
    with p.open(encoding="utf-8-sig", newline="") as f:
        reader = csv.DictReader(f)
        headers = {h.strip() for h in (reader.fieldnames or [])}
        if not headers:
            raise csv.Error(f"CSV appears to have no header row: {csv_path}")
        required = {name for name, info in model.model_fields.items() if info.is_required()}
        missing = sorted(required - headers)
        if missing:
            raise csv.Error(
                f"CSV header mismatch for {collection}. Missing columns: " + ", ".join(missing)
            )
        for line_no, raw in enumerate(reader, start=2):
            row = {(k or "").strip(): v for k, v in raw.items()}
            try:
                parsed = model.model_validate(row)
            except ValidationError as exc:
                raise ValueError(f"{p.name} line {line_no}: {exc}") from exc
            records.append(parsed.model_dump(exclude_none=True))

    _logger.info("ingest:csv collection=%s path=%s rows=%d", collection, p, len(records))
    return records


__all__ = ["load_records_csv"]
