"""
Timezone utilities for the presence module.

Converts between a user's local calendar day + "HH:mm" time and the UTC
instants stored in the database. All conversions go through pytz so that
daylight-saving transitions use the offset in force on that date.
"""

from datetime import date, datetime, time, timedelta
from typing import List, NamedTuple, Optional

import pytz
from pytz.tzinfo import BaseTzInfo

from .config import settings

_DATE_FORMAT = "%Y-%m-%d"
_TIME_FORMAT = "%H:%M"


class DayWindow(NamedTuple):
    """UTC bounds of one local calendar day."""

    start: datetime
    end: datetime


def get_timezone(tz_name: Optional[str] = None) -> BaseTzInfo:
    """
    Get a pytz timezone, falling back to the configured default.

    Args:
        tz_name: IANA timezone name, or None for ``settings.app_tz``

    Returns:
        pytz timezone object
    """
    return pytz.timezone(tz_name or settings.app_tz)


def ensure_utc(dt: datetime) -> datetime:
    """Return ``dt`` as an aware UTC datetime (naive values are assumed UTC)."""
    if dt.tzinfo is None:
        return pytz.UTC.localize(dt)
    return dt.astimezone(pytz.UTC)


def parse_local_date(date_str: str) -> date:
    """Parse a "YYYY-MM-DD" string."""
    return datetime.strptime(date_str, _DATE_FORMAT).date()


def format_local_date(day: date) -> str:
    return day.strftime(_DATE_FORMAT)


def local_to_utc(date_str: str, time_str: str, tz_name: Optional[str] = None) -> datetime:
    """
    Convert a local date ("YYYY-MM-DD") and time ("HH:mm") to a UTC instant.

    Nonexistent or ambiguous wall-clock times around DST switches resolve
    to the standard-time offset.
    """
    tz = get_timezone(tz_name)
    naive = datetime.strptime(f"{date_str} {time_str}", f"{_DATE_FORMAT} {_TIME_FORMAT}")
    return tz.localize(naive, is_dst=False).astimezone(pytz.UTC)


def utc_to_local_time(instant: datetime, tz_name: Optional[str] = None) -> str:
    """Project a UTC instant to a local "HH:mm" string."""
    return ensure_utc(instant).astimezone(get_timezone(tz_name)).strftime(_TIME_FORMAT)


def utc_to_local_date(instant: datetime, tz_name: Optional[str] = None) -> str:
    """Project a UTC instant to a local "YYYY-MM-DD" string."""
    return ensure_utc(instant).astimezone(get_timezone(tz_name)).strftime(_DATE_FORMAT)


def local_day_window(date_str: str, tz_name: Optional[str] = None) -> DayWindow:
    """
    Get the UTC instants for local 00:00:00.000 and 23:59:59.999 of a date.

    Args:
        date_str: Local date "YYYY-MM-DD"
        tz_name: Optional timezone (defaults to ``settings.app_tz``)
    """
    tz = get_timezone(tz_name)
    day = parse_local_date(date_str)
    day_start = tz.localize(datetime.combine(day, time.min), is_dst=False)
    day_end = tz.localize(datetime.combine(day, time(23, 59, 59, 999000)), is_dst=False)
    return DayWindow(start=day_start.astimezone(pytz.UTC), end=day_end.astimezone(pytz.UTC))


def crosses_midnight(from_: str, to: str) -> bool:
    """
    True when a same-day "HH:mm" range does not move strictly forward.

    Equal start and end (zero duration) also counts as invalid.
    """
    return to <= from_


def local_today(tz_name: Optional[str] = None) -> date:
    """Get 'today' in the given (or default) timezone."""
    return datetime.now(get_timezone(tz_name)).date()


def date_range(start_date: str, end_date: Optional[str] = None) -> List[str]:
    """
    Expand an inclusive range of local calendar dates.

    Returns just ``[start_date]`` when no end is given, and an empty list
    when the end precedes the start.
    """
    start = parse_local_date(start_date)
    if end_date is None:
        return [format_local_date(start)]

    end = parse_local_date(end_date)
    days = (end - start).days
    return [format_local_date(start + timedelta(days=offset)) for offset in range(days + 1)]


def is_known_timezone(tz_name: str) -> bool:
    return tz_name in pytz.all_timezones_set
