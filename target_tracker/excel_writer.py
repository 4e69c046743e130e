"""Excel writer for report exports (reads live in excel_reader)."""

from __future__ import annotations

import logging
from datetime import datetime
from io import BytesIO
from os import PathLike
from pathlib import Path
from typing import BinaryIO, Sequence

import pandas as pd
from openpyxl.styles import Border, Font, PatternFill, Side
from openpyxl.worksheet.worksheet import Worksheet

from .config import (
    EXCEL_AUTOSIZE_COLUMNS,
    EXCEL_AUTOSIZE_MAX_ROWS,
    EXCEL_AUTOSIZE_MAX_WIDTH,
    EXCEL_AUTOSIZE_MIN_WIDTH,
    EXCEL_AUTOSIZE_PADDING,
    EXCEL_METADATA_ROWS,
)
from .models import ReportRow
from .report_rows import REPORT_COLUMNS, row_values

REPORT_SHEET = "Laporan"

TITLE_FONT = Font(bold=True, size=14)
SUBTITLE_FONT = Font(italic=True)
HEADER_FONT = Font(bold=True)
HEADER_FILL = PatternFill(patternType="solid", fgColor="FFD9E1F2")
HEADER_BORDER = Border(
    left=Side(style="thin", color="000000"),
    right=Side(style="thin", color="000000"),
    top=Side(style="thin", color="000000"),
    bottom=Side(style="thin", color="000000"),
)

LOGGER = logging.getLogger(__name__)

PathInput = str | Path | PathLike[str]


def _autosize(ws: Worksheet, min_row: int = 1) -> None:
    """Fit each column to its longest value from ``min_row`` down.

    The metadata rows above the table would otherwise widen column A.
    """

    if not EXCEL_AUTOSIZE_COLUMNS or ws.max_row > EXCEL_AUTOSIZE_MAX_ROWS:
        return
    for column in ws.iter_cols(min_row=min_row, max_row=ws.max_row):
        longest = max(
            (len(str(cell.value)) for cell in column if cell.value is not None),
            default=0,
        )
        ws.column_dimensions[column[0].column_letter].width = min(
            EXCEL_AUTOSIZE_MAX_WIDTH,
            max(EXCEL_AUTOSIZE_MIN_WIDTH, longest + EXCEL_AUTOSIZE_PADDING),
        )


def _style_header_row(ws: Worksheet, row_idx: int, max_col: int | None = None) -> None:
    if row_idx <= 0:
        return
    max_col = max_col or ws.max_column
    for col_idx in range(1, max_col + 1):
        cell = ws.cell(row=row_idx, column=col_idx)
        cell.font = HEADER_FONT
        cell.fill = HEADER_FILL
        cell.border = HEADER_BORDER


def _write_metadata(ws: Worksheet, lines: Sequence[str]) -> None:
    for offset, text in enumerate(lines, start=1):
        cell = ws.cell(row=offset, column=1, value=text)
        cell.font = TITLE_FONT if offset == 1 else SUBTITLE_FONT


def rows_to_frame(rows: Sequence[ReportRow]) -> pd.DataFrame:
    return pd.DataFrame([row_values(r) for r in rows], columns=REPORT_COLUMNS)


def metadata_lines(
    title: str,
    organization: str,
    generated_at: datetime,
    period_label: str | None = None,
) -> list[str]:
    generated = f"Dibuat: {generated_at.strftime('%d/%m/%Y %H:%M')}"
    if period_label:
        generated = f"{generated} | Periode: {period_label}"
    return [title, organization, generated]


def write_report(
    target: PathInput | BinaryIO,
    rows: Sequence[ReportRow],
    title: str,
    organization: str,
    generated_at: datetime,
    period_label: str | None = None,
) -> None:
    """Write ``rows`` to a single ``Laporan`` sheet.

    Rows 1-3 carry the title block, row 4 stays blank, the header sits on row
    ``EXCEL_METADATA_ROWS + 1`` and data follows. An empty ``rows`` still
    produces a sheet with metadata and header.
    """

    if isinstance(target, (str, Path, PathLike)):
        target = str(Path(target))
    df = rows_to_frame(rows)
    with pd.ExcelWriter(target, engine="openpyxl") as writer:
        df.to_excel(
            writer, sheet_name=REPORT_SHEET, index=False, startrow=EXCEL_METADATA_ROWS
        )
        ws = writer.sheets[REPORT_SHEET]
        _write_metadata(
            ws, metadata_lines(title, organization, generated_at, period_label)
        )
        header_row = EXCEL_METADATA_ROWS + 1
        _style_header_row(ws, header_row, len(REPORT_COLUMNS))
        ws.freeze_panes = ws.cell(row=header_row + 1, column=1)
        _autosize(ws, min_row=header_row)
    LOGGER.info("Wrote spreadsheet report '%s' rows=%d", title, len(rows))


def report_bytes(
    rows: Sequence[ReportRow],
    title: str,
    organization: str,
    generated_at: datetime,
    period_label: str | None = None,
) -> bytes:
    buffer = BytesIO()
    write_report(buffer, rows, title, organization, generated_at, period_label)
    return buffer.getvalue()


__all__ = ["REPORT_SHEET", "write_report", "report_bytes", "rows_to_frame"]
