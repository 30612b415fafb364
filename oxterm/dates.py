"""
Date helpers.

Pure functions over datetime.date: ISO parsing/formatting, day and month
names, range checks and day arithmetic. Weeks run Sunday to Saturday, so
day indexes here are 0=Sunday .. 6=Saturday (unlike date.weekday()).
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Union


DateLike = Union[date, datetime, str]

DAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]
SHORT_DAY_NAMES = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]
MONTH_NAMES = [
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
]
SHORT_MONTH_NAMES = [m[:3] for m in MONTH_NAMES]


def parse_iso_date(value: str) -> date:
    """
    Parse 'YYYY-MM-DD' into a date.

    Raises ValueError for malformed strings and for days that do not exist
    in the given month (e.g. 2025-02-31).
    """
    parts = value.strip().split("-")
    if len(parts) != 3 or not all(p.isdigit() for p in parts):
        raise ValueError(f"Invalid ISO date: {value!r}")
    y, m, d = (int(p) for p in parts)
    return date(y, m, d)


def to_iso_date(d: date) -> str:
    return f"{d.year:04d}-{d.month:02d}-{d.day:02d}"


def coerce_date(value: DateLike) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return parse_iso_date(value)
    raise TypeError(f"Expected date or ISO string, got {type(value).__name__}")


def days_between(a: DateLike, b: DateLike) -> int:
    return abs((coerce_date(b) - coerce_date(a)).days)


def is_date_in_range(value: DateLike, start: DateLike, end: DateLike) -> bool:
    """Inclusive on both ends: the whole end day counts."""
    return coerce_date(start) <= coerce_date(value) <= coerce_date(end)


def add_days(value: DateLike, days: int) -> date:
    return coerce_date(value) + timedelta(days=days)


def date_range(start: DateLike, end: DateLike) -> list[date]:
    first = coerce_date(start)
    last = coerce_date(end)
    return [first + timedelta(days=i) for i in range((last - first).days + 1)]


def day_index(value: DateLike) -> int:
    """0=Sunday .. 6=Saturday."""
    return (coerce_date(value).weekday() + 1) % 7


def day_name(value: DateLike) -> str:
    return DAY_NAMES[day_index(value)]


def short_day_name(value: DateLike) -> str:
    return SHORT_DAY_NAMES[day_index(value)]


def month_name(value: DateLike) -> str:
    return MONTH_NAMES[coerce_date(value).month - 1]


def short_month_name(value: DateLike) -> str:
    return SHORT_MONTH_NAMES[coerce_date(value).month - 1]


def format_date(value: DateLike, style: str = "full") -> str:
    """
    Format a date for display.

    full:      "Monday, 25 January 2024"
    short:     "Mon 25 Jan 2024"
    month-day: "25 January"
    day-month: "25 Jan"
    anything else falls back to ISO.
    """
    d = coerce_date(value)
    if style == "full":
        return f"{day_name(d)}, {d.day} {month_name(d)} {d.year}"
    if style == "short":
        return f"{short_day_name(d)} {d.day} {short_month_name(d)} {d.year}"
    if style == "month-day":
        return f"{d.day} {month_name(d)}"
    if style == "day-month":
        return f"{d.day} {short_month_name(d)}"
    return to_iso_date(d)


def week_start(value: DateLike) -> date:
    """Sunday of the week containing value."""
    d = coerce_date(value)
    return d - timedelta(days=day_index(d))


def week_end(value: DateLike) -> date:
    """Saturday of the week containing value."""
    return week_start(value) + timedelta(days=6)


def is_same_day(a: DateLike, b: DateLike) -> bool:
    return coerce_date(a) == coerce_date(b)


def today() -> date:
    return date.today()
