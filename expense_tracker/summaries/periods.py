"""
Calendar Helpers

All dates here are local calendar dates. Nothing is ever converted through
a timezone: "2024-01-15" is the 15th of January wherever the process runs.

Weeks start on Monday. Day and month names are fixed English strings so
bucket labels do not change with the process locale.
"""

import calendar
import re
from datetime import date, datetime, timedelta
from typing import Optional, Union


DAY_NAMES = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)

MONTH_NAMES = (
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
)

_ISO_DATE = re.compile(r"^[0-9]{4}-[0-9]{2}-[0-9]{2}$")

DateLike = Union[date, datetime, str]


def parse_local_date(value: object) -> Optional[date]:
    """
    Parse a stored expense date.

    Accepts a date, a datetime (its date part) or a strict YYYY-MM-DD
    string. Anything else, including impossible dates like 2024-02-30,
    gives None.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None

    text = value.strip()
    if not _ISO_DATE.match(text):
        return None
    try:
        return date.fromisoformat(text)
    except ValueError:
        return None


def to_anchor_date(anchor: DateLike) -> date:
    """
    Resolve a period anchor to a date.

    Unlike record dates, a bad anchor is a programming error and raises.
    """
    day = parse_local_date(anchor)
    if day is None:
        raise ValueError(f"Invalid anchor date: {anchor!r}")
    return day


def to_year(anchor: Union[int, DateLike]) -> int:
    """Resolve a year anchor given as an int or anything date-like."""
    if isinstance(anchor, int) and not isinstance(anchor, bool):
        return anchor
    return to_anchor_date(anchor).year


def format_date(day: date) -> str:
    """Format as YYYY-MM-DD."""
    return day.isoformat()


def week_start(day: date) -> date:
    """Monday of the week containing day."""
    return day - timedelta(days=day.weekday())


def week_bounds(day: date) -> tuple[date, date]:
    """
    Monday and Sunday of the week containing day, both inclusive.

    The last week of 9999 ends on date.max, not on a Sunday.
    """
    start = week_start(day)
    return start, start + timedelta(days=min(6, (date.max - start).days))


def month_bounds(day: date) -> tuple[date, date]:
    """First and last day of the month containing day."""
    last = calendar.monthrange(day.year, day.month)[1]
    return day.replace(day=1), day.replace(day=last)


def day_name(day: date) -> str:
    return DAY_NAMES[day.weekday()]


def month_name(day: date) -> str:
    return MONTH_NAMES[day.month - 1]


def week_label(day: date) -> str:
    """Label of the week containing day, e.g. '2024-01-15 - 2024-01-21'."""
    start, end = week_bounds(day)
    return f"{format_date(start)} - {format_date(end)}"
