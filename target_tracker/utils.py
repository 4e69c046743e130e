"""General utility helpers shared across modules."""

from __future__ import annotations

import math
from datetime import date, datetime
from typing import Any

import pandas as pd

# Short month names used by the id-ID locale ("05 Jan 2025", "17 Agu 2025").
_ID_MONTHS = (
    "Jan",
    "Feb",
    "Mar",
    "Apr",
    "Mei",
    "Jun",
    "Jul",
    "Agu",
    "Sep",
    "Okt",
    "Nov",
    "Des",
)


def is_blank(value: Any) -> bool:
    if value is None:
        return True
    try:
        if pd.isna(value):
            return True
    except (TypeError, ValueError):
        return False
    return str(value).strip() == ""


def clean_str(value: Any) -> str | None:
    if is_blank(value):
        return None
    text = str(value).strip()
    if text.endswith(".0") and text[:-2].isdigit():
        # Excel hands numeric identifiers back as floats.
        text = text[:-2]
    return text


def non_negative_float(value: Any) -> float:
    """Coerce ``value`` to a finite float, clamping negatives and junk to 0."""

    if is_blank(value):
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(number) or math.isinf(number) or number < 0:
        return 0.0
    return number


def non_negative_int(value: Any) -> int:
    return int(round(non_negative_float(value)))


def parse_datetime(value: Any) -> datetime | None:
    """Parse strings, dates and timestamps; ``None`` when unparsable."""

    if is_blank(value):
        return None
    if isinstance(value, pd.Timestamp):
        return value.to_pydatetime()
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if not isinstance(value, str):
        return None
    parsed = pd.to_datetime(value.strip(), errors="coerce")
    if pd.isna(parsed):
        return None
    return parsed.to_pydatetime()


def parse_date(value: Any) -> date | None:
    if isinstance(value, date) and not isinstance(value, datetime):
        return value
    parsed = parse_datetime(value)
    return parsed.date() if parsed is not None else None


def format_date_id(value: date | datetime | None) -> str:
    """Format a date the way the id-ID locale does (``05 Jan 2025``)."""

    if value is None:
        return "-"
    return f"{value.day:02d} {_ID_MONTHS[value.month - 1]} {value.year}"
