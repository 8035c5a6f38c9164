"""
Calendar date coercion for report parameters and row values.

Reports work on calendar dates only.  Parameters may arrive as ``date``,
``datetime`` or ISO-8601 strings; datetimes lose their time-of-day.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any

from books_kernel.exceptions import (
    InvalidDateError,
    InvalidDateRangeError,
    MissingParameterError,
)


def parse_calendar_date(value: Any) -> date | None:
    """
    Best-effort conversion of a row value to a calendar date.

    Returns None when the value is empty or not a recognisable date; used on
    data rows where a bad value must not abort the whole report.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            return date.fromisoformat(text[:10])
        except ValueError:
            return None
    return None


def coerce_date(value: Any, parameter: str) -> date:
    """
    Convert a required report parameter to a calendar date.

    Raises:
        MissingParameterError: If the value is None or blank.
        InvalidDateError: If the value cannot be parsed.
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        raise MissingParameterError(parameter)
    parsed = parse_calendar_date(value)
    if parsed is None:
        raise InvalidDateError(parameter, value)
    return parsed


def coerce_date_range(start: Any, end: Any) -> tuple[date, date]:
    """
    Validate an inclusive ``[start, end]`` report range.

    Raises:
        MissingParameterError, InvalidDateError, InvalidDateRangeError
    """
    start_date = coerce_date(start, "start_date")
    end_date = coerce_date(end, "end_date")
    if start_date > end_date:
        raise InvalidDateRangeError(start_date.isoformat(), end_date.isoformat())
    return start_date, end_date


def in_range(day: date | None, start: date, end: date) -> bool:
    """True if ``day`` lies within the inclusive range."""
    return day is not None and start <= day <= end
