"""Reporting period windows (today / this week / this month)."""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import Any

from .errors import MalformedDateWarning
from .utils import parse_date

LOGGER = logging.getLogger(__name__)

ALL = "all"
TODAY = "today"
THIS_WEEK = "this_week"
THIS_MONTH = "this_month"
PERIODS = (ALL, TODAY, THIS_WEEK, THIS_MONTH)

# Values used by older clients.
_ALIASES = {"week": THIS_WEEK, "month": THIS_MONTH}

PERIOD_LABELS = {
    ALL: "Semua Periode",
    TODAY: "Hari Ini",
    THIS_WEEK: "7 Hari Terakhir",
    THIS_MONTH: "Bulan Ini",
}


def normalize_period(period: str | None) -> str:
    """Return the canonical period name.

    Raises:
        ValueError: If ``period`` is not a known selector.
    """

    if period is None or str(period).strip() == "":
        return ALL
    key = str(period).strip().lower()
    key = _ALIASES.get(key, key)
    if key not in PERIODS:
        raise ValueError(
            f"Unknown period '{period}' (expected one of {', '.join(PERIODS)})"
        )
    return key


def period_start(period: str | None, today: date | None = None) -> date | None:
    """Inclusive lower bound of ``period``; ``None`` for ``all``."""

    key = normalize_period(period)
    if key == ALL:
        return None
    today = today or date.today()
    if isinstance(today, datetime):
        today = today.date()
    if key == TODAY:
        return today
    if key == THIS_WEEK:
        return today - timedelta(days=6)
    return today.replace(day=1)


def in_period(value: Any, period: str | None, today: date | None = None) -> bool:
    """Return True when ``value`` falls inside ``period``.

    Missing or unparsable dates are included and logged so malformed records
    are never dropped silently.
    """

    start = period_start(period, today)
    if start is None:
        return True
    parsed = parse_date(value)
    if parsed is None:
        LOGGER.warning(
            "%s: unparsable date %r included in period=%s",
            MalformedDateWarning.__name__,
            value,
            period,
        )
        return True
    return parsed >= start


__all__ = [
    "PERIODS",
    "PERIOD_LABELS",
    "normalize_period",
    "period_start",
    "in_period",
]
