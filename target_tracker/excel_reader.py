"""Workbook reading layer (pure reads + validation).

The operator workbook holds two sheets:

* ``Runners`` - one row per registered runner.
* ``Run Sessions`` - one row per recorded session; sessions reaching the
  target distance are the target achievements.

Rows are turned into raw mappings here and typed by the ingest normalizer.
"""

from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

import pandas as pd

from .config import TARGET_DISTANCE_KM
from .errors import ExcelFormatError
from .models import Runner, TargetAchievement
from .normalization import normalize_runners, normalize_targets
from .utils import clean_str, is_blank

RUNNERS_SHEET = "Runners"
SESSIONS_SHEET = "Run Sessions"

RUNNER_ID_COL = "Runner ID"
NAME_COL = "Name"
RANK_COL = "Rank"
UNIT_COL = "Unit"
CREATED_COL = "Created At"
TOTAL_DISTANCE_COL = "Total Distance (km)"
TOTAL_SESSIONS_COL = "Total Sessions"

SESSION_ID_COL = "Session ID"
DISTANCE_COL = "Distance (km)"
DURATION_COL = "Duration (sec)"
DATE_COL = "Date"
VALIDATION_COL = "Validation Status"

_REQUIRED_COLS = {
    RUNNERS_SHEET: {RUNNER_ID_COL, NAME_COL, RANK_COL},
    SESSIONS_SHEET: {
        SESSION_ID_COL,
        RUNNER_ID_COL,
        DISTANCE_COL,
        DURATION_COL,
        DATE_COL,
    },
}


class OperatorWorkbook:
    """Open operator workbook; each sheet is parsed and checked once."""

    def __init__(self, filepath: str | Path) -> None:
        self.path = Path(filepath)
        if not self.path.is_file():
            raise FileNotFoundError(f"Workbook not found: {self.path}")
        self._excel = pd.ExcelFile(self.path)
        self._sheets: dict[str, pd.DataFrame] = {}

    def sheet(self, name: str, *, optional: bool = False) -> Optional[pd.DataFrame]:
        if name not in self._sheets:
            if name not in self._excel.sheet_names:
                if optional:
                    return None
                raise ExcelFormatError(f"Sheet '{name}' not found in {self.path.name}")
            df = self._excel.parse(sheet_name=name)
            missing = _REQUIRED_COLS[name] - set(df.columns)
            if missing:
                raise ExcelFormatError(
                    f"Missing columns in '{name}' sheet: {', '.join(sorted(missing))}"
                )
            self._sheets[name] = df
        return self._sheets[name]

    def close(self) -> None:
        self._excel.close()


@contextmanager
def workbook_context(
    filepath: str | Path, workbook: Optional[OperatorWorkbook] = None
) -> Iterator[OperatorWorkbook]:
    """Yield ``workbook`` when given, otherwise open ``filepath`` for the block."""

    if workbook is not None:
        yield workbook
        return
    opened = OperatorWorkbook(filepath)
    try:
        yield opened
    finally:
        opened.close()


def _cell(value: Any) -> Any:
    return None if is_blank(value) else value


def _runner_key(value: Any) -> str:
    return clean_str(value) or ""


def read_session_frame(
    filepath: str | Path, workbook: Optional[OperatorWorkbook] = None
) -> pd.DataFrame:
    """Sessions with numeric distance and duration (junk cells become NaN)."""

    with workbook_context(filepath, workbook) as book:
        df = book.sheet(SESSIONS_SHEET, optional=True)
    if df is None:
        return pd.DataFrame(
            columns=sorted(_REQUIRED_COLS[SESSIONS_SHEET] | {VALIDATION_COL})
        )
    df = df.copy()
    if VALIDATION_COL not in df.columns:
        # Older workbooks predate moderator validation.
        df[VALIDATION_COL] = "pending"
    df[DISTANCE_COL] = pd.to_numeric(df[DISTANCE_COL], errors="coerce")
    df[DURATION_COL] = pd.to_numeric(df[DURATION_COL], errors="coerce")
    return df


def _session_totals(sessions: pd.DataFrame) -> Dict[str, tuple[float, int]]:
    if sessions.empty:
        return {}
    grouped = (
        sessions.assign(_runner=sessions[RUNNER_ID_COL].map(_runner_key))
        .groupby("_runner")[DISTANCE_COL]
        .agg(["sum", "count"])
    )
    return {
        runner_id: (float(row["sum"]), int(row["count"]))
        for runner_id, row in grouped.iterrows()
    }


def read_runners(
    filepath: str | Path, workbook: Optional[OperatorWorkbook] = None
) -> List[Runner]:
    """Return runners; totals come from the sheet or, if absent, the sessions."""

    with workbook_context(filepath, workbook) as book:
        df = book.sheet(RUNNERS_SHEET)
        has_totals = TOTAL_DISTANCE_COL in df.columns
        totals = {} if has_totals else _session_totals(read_session_frame(filepath, book))
    raw_rows: List[dict[str, Any]] = []
    for record in df.to_dict(orient="records"):
        if all(is_blank(record.get(col)) for col in _REQUIRED_COLS[RUNNERS_SHEET]):
            continue
        runner_id = _cell(record.get(RUNNER_ID_COL))
        raw: dict[str, Any] = {
            "id": runner_id,
            "name": _cell(record.get(NAME_COL)),
            "rank": _cell(record.get(RANK_COL)),
            "unit": _cell(record.get(UNIT_COL)),
            "created_at": _cell(record.get(CREATED_COL)),
        }
        if has_totals:
            raw["total_distance"] = _cell(record.get(TOTAL_DISTANCE_COL))
            raw["total_sessions"] = _cell(record.get(TOTAL_SESSIONS_COL))
        else:
            distance, count = totals.get(_runner_key(runner_id), (0.0, 0))
            raw["total_distance"] = distance
            raw["total_sessions"] = count
        raw_rows.append(raw)
    return normalize_runners(raw_rows)


def read_targets(
    filepath: str | Path,
    workbook: Optional[OperatorWorkbook] = None,
    runners: Optional[List[Runner]] = None,
) -> List[TargetAchievement]:
    """Return sessions at or above the target distance joined with runner data."""

    with workbook_context(filepath, workbook) as book:
        if runners is None:
            runners = read_runners(filepath, book)
        sessions = read_session_frame(filepath, book)
    by_id = {runner.id: runner for runner in runners}
    qualifying = sessions[sessions[DISTANCE_COL] >= TARGET_DISTANCE_KM]
    raw_rows: List[dict[str, Any]] = []
    for record in qualifying.to_dict(orient="records"):
        runner_id = _runner_key(record.get(RUNNER_ID_COL))
        runner = by_id.get(runner_id)
        raw_rows.append(
            {
                "id": _cell(record.get(SESSION_ID_COL)),
                "runner_id": runner_id,
                "name": runner.name if runner else None,
                "rank": runner.rank if runner else None,
                "unit": runner.unit if runner else None,
                "distance_km": _cell(record.get(DISTANCE_COL)),
                "duration_sec": _cell(record.get(DURATION_COL)),
                "achieved_date": _cell(record.get(DATE_COL)),
                "validation_status": _cell(record.get(VALIDATION_COL)),
            }
        )
    return normalize_targets(raw_rows)


__all__ = [
    "ExcelFormatError",
    "OperatorWorkbook",
    "read_runners",
    "read_targets",
    "read_session_frame",
    "workbook_context",
]
