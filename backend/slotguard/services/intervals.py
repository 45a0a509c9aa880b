"""Time-of-day intervals within a single calendar day.

Kept free of framework imports so the preview endpoint and any client port
can share it with server-side validation.
"""

from __future__ import annotations

import re

TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")

DAY_NAMES: dict[int, str] = {
    1: "Monday",
    2: "Tuesday",
    3: "Wednesday",
    4: "Thursday",
    5: "Friday",
    6: "Saturday",
    7: "Sunday",
}

MINUTES_PER_DAY = 24 * 60


def parse_time_to_minutes(value: str) -> int:
    if not isinstance(value, str) or not TIME_PATTERN.match(value):
        raise ValueError("Time must be in HH:MM 24-hour format")
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)


def format_minutes(value: int) -> str:
    if not 0 <= value < MINUTES_PER_DAY:
        raise ValueError(f"Minute offset {value} is outside a single day")
    return f"{value // 60:02d}:{value % 60:02d}"


def overlaps(a_start: int, a_end: int, b_start: int, b_end: int) -> bool:
    """Half-open overlap of [a_start, a_end) and [b_start, b_end).

    An interval ending exactly when the other begins does not overlap it.
    """
    return a_start < b_end and b_start < a_end


def day_name(day_of_week: int) -> str:
    return DAY_NAMES.get(day_of_week, f"day {day_of_week}")
