"""Global pytest fixtures & helpers.

Adds project root to path and provides reusable runner / target fixtures so
the report, validation and export tests share one dataset.
"""
from __future__ import annotations

import os
import sys
from datetime import date, datetime

import pandas as pd
import pytest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from target_tracker.models import Runner, TargetAchievement
from target_tracker.store import InMemoryStore

TODAY = date(2025, 3, 20)


# --- Factory helpers -------------------------------------------------
def make_target(target_id, runner_id, achieved, distance=14.0, duration=4230, status="pending", name=None, rank="Kapten"):
    return TargetAchievement(
        id=target_id,
        runner_id=runner_id,
        name=name or f"Runner {runner_id}",
        rank=rank,
        distance_km=distance,
        duration_sec=duration,
        achieved_date=achieved,
        validation_status=status,
    )


def make_runner(runner_id, name, distance, sessions=1, created=datetime(2025, 1, 10, 8, 0), rank="Letda"):
    return Runner(
        id=runner_id,
        name=name,
        rank=rank,
        total_distance=distance,
        total_sessions=sessions,
        created_at=created,
    )


def write_input_workbook(path, runners_rows, session_rows):
    with pd.ExcelWriter(path, engine="openpyxl") as w:
        pd.DataFrame(runners_rows).to_excel(w, sheet_name="Runners", index=False)
        pd.DataFrame(session_rows).to_excel(w, sheet_name="Run Sessions", index=False)


# --- Fixtures --------------------------------------------------------
@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def runners():
    return [
        make_runner("R1", "Budi Hartono", 14.0, sessions=2, rank="Mayor"),
        make_runner("R2", "Andi Saputra", 7.5, sessions=1, rank="Kapten"),
        make_runner("R3", "Citra Lestari", 0.0, sessions=0, rank=None),
        make_runner("R4", "Dewi Anggraini", 21.3, sessions=3, created=datetime(2025, 3, 18, 9, 30)),
    ]


@pytest.fixture
def targets():
    return [
        make_target("S1", "R1", date(2025, 3, 20), distance=14.0, name="Budi Hartono", rank="Mayor"),
        make_target("S2", "R4", date(2025, 3, 15), distance=15.2, duration=5100, status="validated", name="Dewi Anggraini"),
        make_target("S3", "R4", date(2025, 3, 20), distance=16.0, duration=5400, name="Dewi Anggraini"),
        make_target("S4", "R2", date(2025, 2, 1), distance=14.5, duration=4800, name="Andi Saputra"),
    ]


@pytest.fixture
def store(runners, targets):
    return InMemoryStore(runners=runners, targets=targets)


@pytest.fixture
def input_workbook(tmp_path):
    path = tmp_path / "runners_input.xlsx"
    write_input_workbook(
        path,
        [
            {"Runner ID": "R1", "Name": "Budi Hartono", "Rank": "Mayor", "Unit": "Kodam I", "Created At": datetime(2025, 1, 5)},
            {"Runner ID": "R2", "Name": "Andi Saputra", "Rank": "Kapten", "Unit": None, "Created At": datetime(2025, 2, 1)},
            {"Runner ID": "R3", "Name": "Citra Lestari", "Rank": None, "Unit": None, "Created At": None},
        ],
        [
            {"Session ID": "S1", "Runner ID": "R1", "Distance (km)": 14.0, "Duration (sec)": 4230, "Date": datetime(2025, 3, 20), "Validation Status": "pending"},
            {"Session ID": "S2", "Runner ID": "R1", "Distance (km)": 5.0, "Duration (sec)": 1800, "Date": datetime(2025, 3, 18), "Validation Status": "pending"},
            {"Session ID": "S3", "Runner ID": "R2", "Distance (km)": 15.5, "Duration (sec)": 5000, "Date": datetime(2025, 3, 1), "Validation Status": "validated"},
        ],
    )
    return path
