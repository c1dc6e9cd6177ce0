"""Local calendar-day keys (``YYYY-MM-DD``) and day arithmetic.

A DateKey always names a day in the *local* calendar. Zero padding keeps the
lexicographic order of keys identical to their chronological order, which the
longest-streak sweep relies on.
"""

from __future__ import annotations

import calendar
import re
from datetime import date, datetime, timedelta
from typing import Union

from habitblocks.core.errors import InvalidDateInputError

DateLike = Union[date, datetime]

_DATE_KEY_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")


def to_local_date(value: Union[DateLike, str]) -> date:
    """Return the local calendar day for a date, datetime or ISO-8601 string.

    Aware datetimes are converted to the local zone first; naive ones are taken
    to already be local.
    """
    if isinstance(value, str):
        raw = value.strip()
        if _DATE_KEY_RE.match(raw):
            return parse_date_key(raw)
        if raw.endswith("Z"):
            raw = raw[:-1] + "+00:00"
        try:
            value = datetime.fromisoformat(raw)
        except ValueError as exc:
            raise InvalidDateInputError(value) from exc
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone()
        return value.date()
    return value


def format_date_key(value: DateLike) -> str:
    day = to_local_date(value)
    return f"{day.year:04d}-{day.month:02d}-{day.day:02d}"


def parse_date_key(key: str) -> date:
    match = _DATE_KEY_RE.match(key or "")
    if not match:
        raise InvalidDateInputError(key)
    year, month, day = (int(part) for part in match.groups())
    try:
        return date(year, month, day)
    except ValueError as exc:
        raise InvalidDateInputError(key) from exc


def is_date_key(key: object) -> bool:
    if not isinstance(key, str):
        return False
    try:
        parse_date_key(key)
    except InvalidDateInputError:
        return False
    return True


def add_days(value: DateLike, days: int) -> DateLike:
    # date + timedelta works on calendar days, so month and year ends roll over.
    return value + timedelta(days=days)


def days_between(start: DateLike, end: DateLike) -> int:
    """Whole calendar days from ``start`` to ``end`` (negative if end is earlier)."""
    return (to_local_date(end) - to_local_date(start)).days


def first_of_month(year: int, month: int) -> date:
    return date(year, month, 1)


def last_day_of_month(year: int, month: int) -> date:
    return date(year, month, calendar.monthrange(year, month)[1])


def month_label(year: int, month: int) -> str:
    """Human caption such as ``"January 2024"``."""
    return f"{calendar.month_name[month]} {year}"


__all__ = [
    "add_days",
    "days_between",
    "first_of_month",
    "format_date_key",
    "is_date_key",
    "last_day_of_month",
    "month_label",
    "parse_date_key",
    "to_local_date",
]
