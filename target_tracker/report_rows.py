"""Report row construction.

Pure transformation: given runners or target achievements plus search and
period selectors it produces the ordered :class:`ReportRow` list consumed by
the exporters. Inputs are never mutated and identical inputs always give the
same rows.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import date
from typing import Dict, Iterable, List, Optional, Sequence

from .config import ORGANIZATION_UNITS
from .errors import RunnerNotFoundError
from .metrics import format_pace, format_time
from .models import (
    ACHIEVEMENT_STATUSES,
    PENDING,
    VALIDATED,
    ReportRow,
    Runner,
    RunnerDetail,
    TargetAchievement,
)
from .periods import in_period, normalize_period
from .status import classify, status_label, validation_label
from .utils import format_date_id

REPORT_ACTIVE = "active"
REPORT_TARGET = "target"
REPORT_14KM = "14km"
REPORT_TYPES = (REPORT_ACTIVE, REPORT_TARGET, REPORT_14KM)

# Fixed column layout shared by every export format.
REPORT_COLUMNS = [
    "No",
    "ID Pelari",
    "Nama",
    "Pangkat",
    "Jarak (km)",
    "Waktu",
    "Pace",
    "Tanggal",
    "Status",
]


def row_values(row: ReportRow) -> list:
    return [
        row.no,
        row.runner_id,
        row.name,
        row.rank,
        row.distance_km,
        row.time_taken,
        row.pace,
        row.date,
        row.status,
    ]


def _matches(query: str, *fields: Optional[str]) -> bool:
    return any(query in (field or "").lower() for field in fields)


def _search_query(search: Optional[str]) -> str:
    return (search or "").strip().lower()


def _is_all(selector: Optional[str]) -> bool:
    return selector in (None, "", "all")


def target_sort_key(target: TargetAchievement) -> tuple:
    achieved = target.achieved_date
    # Undated rows go last; newest first, then longest first.
    return (
        achieved is None,
        -achieved.toordinal() if achieved else 0,
        -target.distance_km,
    )


def join_runners(
    targets: Iterable[TargetAchievement], runners: Optional[Iterable[Runner]]
) -> List[TargetAchievement]:
    """Copy name, rank and unit from each target's runner record.

    Targets whose runner is unknown are passed through unchanged.
    """

    by_id = {runner.id: runner for runner in runners or ()}
    joined: List[TargetAchievement] = []
    for target in targets:
        runner = by_id.get(target.runner_id)
        if runner is None:
            joined.append(target)
            continue
        joined.append(
            replace(
                target,
                name=runner.name or target.name,
                rank=runner.rank or target.rank,
                unit=runner.unit or target.unit,
            )
        )
    return joined


def normalize_unit(
    unit: Optional[str], allowed: Optional[Sequence[str]] = None
) -> Optional[str]:
    """Return the unit filter value, or ``None`` when every unit is selected.

    When ``ORGANIZATION_UNITS`` is configured only those units are accepted.
    """

    value = (unit or "").strip()
    if _is_all(value):
        return None
    allowed = ORGANIZATION_UNITS if allowed is None else allowed
    if allowed and value.lower() not in {u.lower() for u in allowed}:
        raise ValueError(
            f"Unknown unit '{value}' (expected one of {', '.join(allowed)})"
        )
    return value


def filter_runners(
    runners: Iterable[Runner],
    search: Optional[str] = None,
    status: Optional[str] = None,
    unit: Optional[str] = None,
) -> List[Runner]:
    """Runners matching the search text, achievement status and unit."""

    if not _is_all(status) and status not in ACHIEVEMENT_STATUSES:
        raise ValueError(f"Unknown achievement status filter '{status}'")
    unit = normalize_unit(unit)
    query = _search_query(search)
    return [
        r
        for r in runners
        if (not query or _matches(query, r.name, r.id, r.rank))
        and (_is_all(status) or classify(r.total_distance) == status)
        and (unit is None or (r.unit or "").lower() == unit.lower())
    ]


def build_target_rows(
    targets: Iterable[TargetAchievement],
    search: Optional[str] = None,
    period: Optional[str] = None,
    today: Optional[date] = None,
    status: Optional[str] = None,
    runners: Optional[Iterable[Runner]] = None,
) -> List[ReportRow]:
    """Rows for the 14 KM report, newest achievement first.

    ``status`` optionally keeps only ``pending`` or ``validated`` records.
    When ``runners`` is given, name, rank and unit come from the runner
    record before searching.
    """

    period = normalize_period(period)
    if not _is_all(status) and status not in (PENDING, VALIDATED):
        raise ValueError(f"Unknown validation status filter '{status}'")
    if runners is not None:
        targets = join_runners(targets, runners)
    query = _search_query(search)
    selected = [
        t
        for t in targets
        if (not query or _matches(query, t.name, t.runner_id, t.id, t.rank))
        and (_is_all(status) or t.validation_status == status)
        and in_period(t.achieved_date, period, today)
    ]
    selected.sort(key=target_sort_key)
    return [
        ReportRow(
            no=index,
            runner_id=t.runner_id,
            name=t.name,
            rank=t.rank or "-",
            distance_km=round(t.distance_km, 2),
            time_taken=format_time(t.duration_sec),
            pace=format_pace(t.duration_sec, t.distance_km),
            date=format_date_id(t.achieved_date),
            status=validation_label(t.validation_status),
            raw_date=t.achieved_date,
        )
        for index, t in enumerate(selected, start=1)
    ]


def build_runner_rows(
    runners: Iterable[Runner],
    report_type: str = REPORT_TARGET,
    search: Optional[str] = None,
    period: Optional[str] = None,
    today: Optional[date] = None,
    status: Optional[str] = None,
    unit: Optional[str] = None,
) -> List[ReportRow]:
    """Rows for the active-runner and target-achievement reports.

    The period applies to the runner's registration date. ``active`` keeps
    runners with at least one session in source order; ``target`` orders by
    cumulative distance, longest first. ``status`` is an achievement status
    (``achieved``, ``in_progress``, ``not_started``).
    """

    if report_type not in (REPORT_ACTIVE, REPORT_TARGET):
        raise ValueError(f"Unsupported runner report type '{report_type}'")
    period = normalize_period(period)
    selected = [
        r
        for r in filter_runners(runners, search=search, status=status, unit=unit)
        if in_period(r.created_at, period, today)
    ]
    if report_type == REPORT_ACTIVE:
        selected = [r for r in selected if r.total_sessions > 0]
    else:
        selected.sort(key=lambda r: -r.total_distance)
    rows: List[ReportRow] = []
    for index, runner in enumerate(selected, start=1):
        joined = runner.created_at.date() if runner.created_at else None
        rows.append(
            ReportRow(
                no=index,
                runner_id=runner.id,
                name=runner.name,
                rank=runner.rank or "-",
                distance_km=round(runner.total_distance, 2),
                time_taken="-",
                pace="-",
                date=format_date_id(joined),
                status=status_label(classify(runner.total_distance)),
                raw_date=joined,
            )
        )
    return rows


def runner_detail(
    runners: Iterable[Runner],
    targets: Iterable[TargetAchievement],
    runner_id: str,
) -> RunnerDetail:
    """Return ``runner_id`` with their target achievements, newest first."""

    runner_id = (runner_id or "").strip()
    runner = next((r for r in runners if r.id == runner_id), None)
    if runner is None:
        raise RunnerNotFoundError(runner_id)
    history = join_runners((t for t in targets if t.runner_id == runner_id), [runner])
    history.sort(key=target_sort_key)
    return RunnerDetail(runner=runner, history=history)


def summarize_targets(targets: Sequence[TargetAchievement]) -> Dict[str, int]:
    """Dashboard counters for the target achievement list."""

    validated = sum(1 for t in targets if t.validation_status == VALIDATED)
    return {
        "total": len(targets),
        "validated": validated,
        "pending": len(targets) - validated,
        "runners": len({t.runner_id for t in targets}),
    }


__all__ = [
    "REPORT_TYPES",
    "REPORT_COLUMNS",
    "row_values",
    "join_runners",
    "filter_runners",
    "normalize_unit",
    "build_target_rows",
    "build_runner_rows",
    "runner_detail",
    "summarize_targets",
]
