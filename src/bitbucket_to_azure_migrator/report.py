"""Spreadsheet reports."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from openpyxl import Workbook
from openpyxl.styles import Font

if TYPE_CHECKING:
    from collections.abc import Sequence

    from .models import ReportRow

logger: logging.Logger = logging.getLogger(__name__)

# Excel rejects longer sheet titles
_MAX_SHEET_TITLE = 31


def write_report(
    rows: Sequence[ReportRow],
    filename: str | Path,
    sheet_title: str,
    *,
    columns: Sequence[str] | None = None,
) -> Path:
    """Write rows to a single-sheet workbook, replacing any existing file.

    The header is taken from the keys of the first row. Values of later rows
    are written in that column order; keys the first row does not have are
    dropped and missing keys leave the cell empty. When there are no rows the
    header falls back to *columns*, or the sheet is left empty.

    Returns:
        Path of the written file
    """
    wb = Workbook()
    ws = wb.active
    ws.title = sheet_title[:_MAX_SHEET_TITLE]

    headers = list(rows[0].keys()) if rows else list(columns or [])
    if headers:
        ws.append(headers)
        for cell in ws[1]:
            cell.font = Font(bold=True)

    for row in rows:
        ws.append([row.get(header) for header in headers])

    path = Path(filename)
    wb.save(path)
    logger.info(f"Wrote {len(rows)} rows to {path}")
    return path
