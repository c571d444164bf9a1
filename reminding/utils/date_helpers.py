"""
utils/date_helpers.py
---------------------
Calendar-date helpers. Everything in this project compares dates without
time-of-day or timezone ("date-only" semantics); these helpers do the
truncation and parsing in one place.
"""

import calendar
from datetime import date, datetime, time

from dateutil.relativedelta import relativedelta


def as_date(value: date | datetime) -> date:
    """Truncate a datetime to its calendar date; dates pass through."""
    if isinstance(value, datetime):
        return value.date()
    return value


def parse_date(value: str | date | datetime) -> date:
    """
    Parse a stored or user-supplied date into a calendar date.

    Accepts ``date``/``datetime`` objects and ISO-8601 strings, with or
    without a time part (``2024-01-15`` or ``2024-01-15T08:30:00``).

    Raises:
        ValueError: If a string cannot be parsed.
    """
    if isinstance(value, (date, datetime)):
        return as_date(value)
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Invalid date: {value!r}")
    text = value.strip()
    # fromisoformat on older interpreters rejects a trailing Z
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text).date()


def parse_datetime(value: str | datetime) -> datetime:
    """Parse an ISO-8601 date-time string; datetimes pass through."""
    if isinstance(value, datetime):
        return value
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


def to_iso_datetime(value: date | datetime) -> str:
    """Format a calendar date as an ISO date-time at midnight."""
    return datetime.combine(as_date(value), time.min).isoformat()


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def is_last_day_of_month(value: date | datetime) -> bool:
    return value.day == days_in_month(value.year, value.month)


def first_day_of_month(value: date | datetime) -> date:
    return as_date(value).replace(day=1)


def last_day_of_month(value: date | datetime) -> date:
    d = as_date(value)
    return d.replace(day=days_in_month(d.year, d.month))


def month_window(focused: date | datetime, months_before: int, months_after: int) -> tuple[date, date]:
    """
    Return (first_day, last_day) spanning whole months around ``focused``.

    Example:
        month_window(date(2024, 3, 14), 1, 1) -> (2024-02-01, 2024-04-30)
    """
    if months_before < 0 or months_after < 0:
        raise ValueError("Month offsets must not be negative.")
    start = first_day_of_month(focused) - relativedelta(months=months_before)
    end = last_day_of_month(first_day_of_month(focused) + relativedelta(months=months_after))
    return start, end
