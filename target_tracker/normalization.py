"""Ingest normalizer: raw API / workbook rows -> typed records.

Every source of runner and session rows goes through this module so that key
spelling (``totalDistance`` vs ``total_distance``), defaults and clamping are
decided once. Downstream code only ever sees :class:`Runner` and
:class:`TargetAchievement`.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, List, Mapping

from .config import TARGET_DISTANCE_KM
from .errors import MalformedDateWarning, RecordFormatError
from .metrics import parse_time
from .models import PENDING, VALIDATION_STATES, Runner, TargetAchievement
from .utils import (
    clean_str,
    is_blank,
    non_negative_float,
    non_negative_int,
    parse_date,
    parse_datetime,
)

LOGGER = logging.getLogger(__name__)


def _first(raw: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        value = raw.get(key)
        if not is_blank(value):
            return value
    return None


def _required_id(raw: Mapping[str, Any], *keys: str) -> str:
    value = clean_str(_first(raw, *keys))
    if value is None:
        raise RecordFormatError(f"Record missing identifier ({'/'.join(keys)}): {dict(raw)!r}")
    return value


def _duration_seconds(raw: Mapping[str, Any]) -> int:
    seconds = _first(raw, "duration_sec", "durationSec", "duration")
    if seconds is not None:
        return non_negative_int(seconds)
    time_taken = _first(raw, "time_taken", "timeTaken")
    if time_taken is None:
        return 0
    try:
        return parse_time(str(time_taken))
    except ValueError:
        LOGGER.warning("Unparsable time_taken %r; using 0 seconds", time_taken)
        return 0


def _validation_status(value: Any) -> str:
    status = (clean_str(value) or PENDING).lower()
    if status not in VALIDATION_STATES:
        LOGGER.debug("Unknown validation status %r treated as pending", value)
        return PENDING
    return status


def normalize_runner(raw: Mapping[str, Any]) -> Runner:
    runner_id = _required_id(raw, "id", "runner_id")
    created_raw = _first(raw, "createdAt", "created_at")
    created_at = parse_datetime(created_raw)
    if created_raw is not None and created_at is None:
        LOGGER.warning(
            "%s: runner=%s has unparsable created date %r",
            MalformedDateWarning.__name__,
            runner_id,
            created_raw,
        )
    return Runner(
        id=runner_id,
        name=clean_str(_first(raw, "name", "nama")) or runner_id,
        rank=clean_str(_first(raw, "rank", "pangkat")),
        total_distance=non_negative_float(
            _first(raw, "totalDistance", "total_distance")
        ),
        total_sessions=non_negative_int(_first(raw, "totalSessions", "total_sessions")),
        created_at=created_at,
        unit=clean_str(_first(raw, "unit", "kesatuan")),
    )


def normalize_target(raw: Mapping[str, Any]) -> TargetAchievement:
    target_id = _required_id(raw, "id", "session_id")
    date_raw = _first(raw, "achieved_date", "achievedDate", "date_created")
    achieved_date = parse_date(date_raw)
    if achieved_date is None:
        LOGGER.warning(
            "%s: target=%s has unparsable achieved date %r",
            MalformedDateWarning.__name__,
            target_id,
            date_raw,
        )
    return TargetAchievement(
        id=target_id,
        runner_id=clean_str(_first(raw, "runner_id", "user_id")) or target_id,
        name=clean_str(_first(raw, "name", "nama")) or "-",
        rank=clean_str(_first(raw, "rank", "pangkat")),
        unit=clean_str(_first(raw, "unit", "kesatuan")),
        distance_km=non_negative_float(_first(raw, "distance_km", "distanceKm")),
        duration_sec=_duration_seconds(raw),
        achieved_date=achieved_date,
        validation_status=_validation_status(
            _first(raw, "validation_status", "validationStatus")
        ),
    )


def normalize_runners(rows: Iterable[Mapping[str, Any]]) -> List[Runner]:
    runners: List[Runner] = []
    for raw in rows:
        try:
            runners.append(normalize_runner(raw))
        except RecordFormatError as exc:
            LOGGER.warning("Skipping runner row: %s", exc)
    return runners


def normalize_targets(rows: Iterable[Mapping[str, Any]]) -> List[TargetAchievement]:
    """Typed target achievements; rows below the target distance are dropped."""

    targets: List[TargetAchievement] = []
    for raw in rows:
        try:
            target = normalize_target(raw)
        except RecordFormatError as exc:
            LOGGER.warning("Skipping target row: %s", exc)
            continue
        if target.distance_km < TARGET_DISTANCE_KM:
            LOGGER.warning(
                "Skipping target=%s: distance %.2f km is below %.0f km",
                target.id,
                target.distance_km,
                TARGET_DISTANCE_KM,
            )
            continue
        targets.append(target)
    return targets


__all__ = [
    "normalize_runner",
    "normalize_target",
    "normalize_runners",
    "normalize_targets",
]
