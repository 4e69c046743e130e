"""Session metric formatting: elapsed time and pace strings."""

from __future__ import annotations

import math

from .utils import non_negative_float, non_negative_int


def format_time(duration_sec: int | float | None) -> str:
    """Format seconds as ``H:MM:SS`` (hours unpadded)."""

    total = non_negative_int(duration_sec)
    hours, rem = divmod(total, 3600)
    minutes, seconds = divmod(rem, 60)
    return f"{hours}:{minutes:02d}:{seconds:02d}"


def parse_time(text: str) -> int:
    """Inverse of :func:`format_time`; also accepts ``MM:SS``.

    Raises:
        ValueError: If ``text`` is not colon separated digits.
    """

    parts = [p.strip() for p in str(text).strip().split(":")]
    if not 2 <= len(parts) <= 3 or not all(p.isdigit() for p in parts):
        raise ValueError(f"Invalid duration '{text}' (expected H:MM:SS)")
    total = 0
    for part in parts:
        total = total * 60 + int(part)
    return total


def format_pace(
    duration_sec: int | float | None, distance_km: float | None
) -> str:
    """Format average pace as ``M'SS"/km``.

    A zero distance uses 1 km as the denominator instead of failing.
    """

    duration = non_negative_float(duration_sec)
    distance = non_negative_float(distance_km) or 1.0
    pace = duration / 60 / distance
    minutes = math.floor(pace)
    # Half-up rounding; round() would bank 0.5 towards even.
    seconds = math.floor((pace - minutes) * 60 + 0.5)
    if seconds == 60:
        minutes += 1
        seconds = 0
    return f"{minutes}'{seconds:02d}\"/km"
