from datetime import date
from pathlib import Path

import pandas as pd
import pytest

from target_tracker.errors import ExcelFormatError, NotFoundError
from target_tracker.excel_reader import read_runners, read_targets
from target_tracker.validation import validate
from target_tracker.workbook_store import WorkbookStore

from conftest import write_input_workbook


def test_runner_totals_derived_from_sessions(input_workbook: Path):
    runners = {r.id: r for r in read_runners(input_workbook)}
    assert runners["R1"].total_distance == pytest.approx(19.0)
    assert runners["R1"].total_sessions == 2
    assert runners["R1"].unit == "Kodam I"
    assert runners["R3"].total_distance == 0.0
    assert runners["R3"].created_at is None


def test_runner_totals_from_sheet_when_present(tmp_path: Path):
    path = tmp_path / "input.xlsx"
    write_input_workbook(
        path,
        [{"Runner ID": "R1", "Name": "Budi", "Rank": "Mayor", "Total Distance (km)": 30.5, "Total Sessions": 4}],
        [],
    )
    (runner,) = read_runners(path)
    assert runner.total_distance == 30.5
    assert runner.total_sessions == 4


def test_only_qualifying_sessions_become_targets(input_workbook: Path):
    targets = {t.id: t for t in read_targets(input_workbook)}
    assert set(targets) == {"S1", "S3"}
    assert targets["S1"].name == "Budi Hartono"
    assert targets["S1"].achieved_date == date(2025, 3, 20)
    assert targets["S3"].validation_status == "validated"


def test_missing_columns_raise(tmp_path: Path):
    path = tmp_path / "bad.xlsx"
    with pd.ExcelWriter(path, engine="openpyxl") as w:
        pd.DataFrame([{"Name": "x"}]).to_excel(w, sheet_name="Runners", index=False)
    with pytest.raises(ExcelFormatError):
        read_runners(path)


def test_missing_file_raises(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        read_runners(tmp_path / "nope.xlsx")


def test_validation_is_persisted(input_workbook: Path):
    store = WorkbookStore(input_workbook)
    record = validate(store, "S1")
    assert record.validation_status == "validated"

    reread = {t.id: t for t in WorkbookStore(input_workbook).list_targets()}
    assert reread["S1"].validation_status == "validated"
    assert reread["S3"].validation_status == "validated"
    # Runners sheet untouched
    assert len(WorkbookStore(input_workbook).list_runners()) == 3


def test_validation_unknown_or_short_session(input_workbook: Path):
    store = WorkbookStore(input_workbook)
    with pytest.raises(NotFoundError):
        validate(store, "S2")  # 5 km session is not a target achievement
    with pytest.raises(NotFoundError):
        validate(store, "S99")


def _sheet_values(path: Path, sheet: str) -> list[tuple]:
    from openpyxl import load_workbook

    ws = load_workbook(path)[sheet]
    return [tuple(row) for row in ws.iter_rows(values_only=True)]


def test_validation_only_touches_the_status_cell(tmp_path: Path):
    path = tmp_path / "input.xlsx"
    write_input_workbook(
        path,
        [{"Runner ID": "R1", "Name": "Budi", "Rank": "Mayor"}],
        [
            {"Session ID": "S1", "Runner ID": "R1", "Distance (km)": 14.0, "Duration (sec)": 4230, "Date": "2025-03-20", "Validation Status": "pending"},
            {"Session ID": "S2", "Runner ID": "R1", "Distance (km)": "5 km", "Duration (sec)": "0:30:00", "Date": "2025-03-18", "Validation Status": "pending"},
        ],
    )
    runners_before = _sheet_values(path, "Runners")
    header, s1_before, s2_before = _sheet_values(path, "Run Sessions")

    validate(WorkbookStore(path), "S1")

    assert _sheet_values(path, "Runners") == runners_before
    header_after, s1_after, s2_after = _sheet_values(path, "Run Sessions")
    assert header_after == header
    assert s2_after == s2_before == ("S2", "R1", "5 km", "0:30:00", "2025-03-18", "pending")
    status_idx = header.index("Validation Status")
    assert s1_after[status_idx] == "validated"
    assert s1_after[:status_idx] == s1_before[:status_idx]


def test_validation_adds_missing_status_column(tmp_path: Path):
    path = tmp_path / "input.xlsx"
    write_input_workbook(
        path,
        [{"Runner ID": "R1", "Name": "Budi", "Rank": "Mayor"}],
        [
            {"Session ID": "S1", "Runner ID": "R1", "Distance (km)": 14.0, "Duration (sec)": 4230, "Date": "2025-03-20"},
            {"Session ID": "S2", "Runner ID": "R1", "Distance (km)": 20.0, "Duration (sec)": 6000, "Date": "2025-03-18"},
        ],
    )
    validate(WorkbookStore(path), "S2")
    targets = {t.id: t.validation_status for t in WorkbookStore(path).list_targets()}
    assert targets == {"S1": "pending", "S2": "validated"}
