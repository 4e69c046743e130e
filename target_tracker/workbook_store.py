"""Store backed by the operator workbook.

Reads go through :mod:`excel_reader`. Validation writes a single
``Validation Status`` cell through openpyxl; every other cell and sheet is
left as it was.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import List, Optional

from openpyxl import load_workbook
from openpyxl.worksheet.worksheet import Worksheet

from .errors import ExcelFormatError
from .excel_reader import (
    SESSION_ID_COL,
    SESSIONS_SHEET,
    VALIDATION_COL,
    read_runners,
    read_targets,
    workbook_context,
)
from .models import PENDING, VALIDATED, Runner, TargetAchievement
from .utils import clean_str

LOGGER = logging.getLogger(__name__)

_WORKBOOK_LOCK = threading.RLock()


def _header_columns(ws: Worksheet) -> dict[str, int]:
    return {
        str(cell.value).strip(): cell.column
        for cell in ws[1]
        if cell.value is not None
    }


def _set_validation_cell(ws: Worksheet, session_id: str, value: str) -> int:
    """Write ``value`` into the status cell of ``session_id``; return rows hit."""

    columns = _header_columns(ws)
    if SESSION_ID_COL not in columns:
        raise ExcelFormatError(
            f"Missing columns in '{SESSIONS_SHEET}' sheet: {SESSION_ID_COL}"
        )
    status_col = columns.get(VALIDATION_COL)
    if status_col is None:
        status_col = ws.max_column + 1
        ws.cell(row=1, column=status_col, value=VALIDATION_COL)
    updated = 0
    for row_idx in range(2, ws.max_row + 1):
        cell_id = clean_str(ws.cell(row=row_idx, column=columns[SESSION_ID_COL]).value)
        if cell_id == session_id:
            ws.cell(row=row_idx, column=status_col, value=value)
            updated += 1
    return updated


class WorkbookStore:
    def __init__(self, filepath: str | Path) -> None:
        self.filepath = str(Path(filepath))

    def list_runners(self) -> List[Runner]:
        with _WORKBOOK_LOCK, workbook_context(self.filepath) as workbook:
            return read_runners(self.filepath, workbook=workbook)

    def list_targets(self) -> List[TargetAchievement]:
        with _WORKBOOK_LOCK, workbook_context(self.filepath) as workbook:
            return read_targets(self.filepath, workbook=workbook)

    def get_target(self, target_id: str) -> Optional[TargetAchievement]:
        for target in self.list_targets():
            if target.id == target_id:
                return target
        return None

    def mark_validated(self, target_id: str) -> Optional[TargetAchievement]:
        """Set ``Validation Status`` to validated where it is still pending."""

        with _WORKBOOK_LOCK:
            current = self.get_target(target_id)
            if current is None:
                return None
            if current.validation_status != PENDING:
                return current
            book = load_workbook(self.filepath)
            try:
                updated = _set_validation_cell(book[SESSIONS_SHEET], target_id, VALIDATED)
                book.save(self.filepath)
            finally:
                book.close()
            LOGGER.info(
                "Persisted validation of target=%s to %s (rows=%d)",
                target_id,
                self.filepath,
                updated,
            )
            return current.validated()


__all__ = ["WorkbookStore"]
