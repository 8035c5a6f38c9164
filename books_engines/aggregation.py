"""
Module: books_engines.aggregation
Responsibility:
    Generic reductions used by every statement builder: group-by-key
    summation, calendar bucketing of dated rows and running totals.

Architecture position:
    Engines -- pure calculation layer, zero I/O.  May only import
    books_kernel.domain and books_kernel.logging_config.

Invariants enforced:
    - Missing or None amounts count as zero; summation never raises on them.
    - ``bucket_by_date`` yields one bucket per calendar unit in
      ``[start, end]`` inclusive, empty buckets included, in date order.
    - Bucket labels use a fixed English month table, never the process
      locale, so identical inputs give identical labels everywhere.

Failure modes:
    - ``start > end`` yields no buckets (not an error).
    - Rows whose date is None or outside the range are left unassigned.

Usage:
    from books_engines.aggregation import sum_by, bucket_by_date

    totals = sum_by(rows, lambda r: r.account_code)
    buckets = bucket_by_date(rows, date(2024, 1, 1), date(2024, 1, 7),
                             lambda r: r.date)
"""

from __future__ import annotations

from bisect import bisect_right
from collections.abc import Callable, Hashable, Iterable
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal
from enum import Enum
from typing import Any, TypeVar

from books_kernel.domain.dates import parse_calendar_date
from books_kernel.domain.money import ZERO, to_decimal
from books_kernel.logging_config import get_logger

logger = get_logger("engines.aggregation")

T = TypeVar("T")
K = TypeVar("K", bound=Hashable)

MONTH_ABBREVIATIONS: tuple[str, ...] = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)


class Granularity(str, Enum):
    """Calendar unit of a date bucket."""

    DAY = "day"
    WEEK = "week"
    MONTH = "month"


@dataclass(frozen=True)
class DateBucket:
    """
    One calendar unit of a bucketed series.

    ``start`` and ``end`` are inclusive and already clipped to the requested
    range, so a month bucket at the edge of a range may be partial.
    """

    label: str
    start: date
    end: date
    rows: tuple[Any, ...] = ()

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end


def _row_amount(row: Any) -> Any:
    return getattr(row, "amount", None)


def sum_by(
    rows: Iterable[T],
    key_fn: Callable[[T], K],
    amount_fn: Callable[[T], Any] = _row_amount,
) -> dict[K, Decimal]:
    """
    Group rows by ``key_fn`` and sum ``amount_fn`` per group.

    Keys keep first-seen order.  None amounts contribute zero.
    """
    totals: dict[K, Decimal] = {}
    for row in rows:
        key = key_fn(row)
        totals[key] = totals.get(key, ZERO) + to_decimal(amount_fn(row))
    return totals


def format_day_label(day: date) -> str:
    """``date(2024, 1, 5)`` -> ``"Jan 5"``."""
    return f"{MONTH_ABBREVIATIONS[day.month - 1]} {day.day}"


def format_month_label(day: date) -> str:
    """``date(2024, 1, 5)`` -> ``"Jan 2024"``."""
    return f"{MONTH_ABBREVIATIONS[day.month - 1]} {day.year}"


def _next_month(day: date) -> date:
    if day.month == 12:
        return date(day.year + 1, 1, 1)
    return date(day.year, day.month + 1, 1)


def _spans(
    start: date, end: date, granularity: Granularity,
) -> list[tuple[str, date, date]]:
    spans: list[tuple[str, date, date]] = []
    if granularity == Granularity.DAY:
        cursor = start
        while cursor <= end:
            spans.append((format_day_label(cursor), cursor, cursor))
            cursor += timedelta(days=1)
    elif granularity == Granularity.WEEK:
        cursor = start
        while cursor <= end:
            span_end = min(cursor + timedelta(days=6), end)
            spans.append((f"Week of {format_day_label(cursor)}", cursor, span_end))
            cursor = span_end + timedelta(days=1)
    elif granularity == Granularity.MONTH:
        cursor = start
        while cursor <= end:
            span_end = min(_next_month(cursor) - timedelta(days=1), end)
            spans.append((format_month_label(cursor), cursor, span_end))
            cursor = span_end + timedelta(days=1)
    else:
        raise ValueError(f"Unsupported granularity: {granularity!r}")
    return spans


def bucket_by_date(
    rows: Iterable[T],
    start: date,
    end: date,
    date_fn: Callable[[T], date | None],
    granularity: Granularity = Granularity.DAY,
) -> list[DateBucket]:
    """
    Assign rows to consecutive calendar buckets covering ``[start, end]``.

    Weeks start on ``start`` itself (seven-day windows), months on the
    first of the month.  Rows keep their input order within a bucket.
    """
    if start > end:
        logger.debug(
            "bucket_range_empty",
            extra={"start": start.isoformat(), "end": end.isoformat()},
        )
        return []

    spans = _spans(start, end, Granularity(granularity))
    assigned: list[list[T]] = [[] for _ in spans]
    span_starts = [span_start for _, span_start, _ in spans]

    unassigned = 0
    for row in rows:
        day = parse_calendar_date(date_fn(row))
        if day is None or day < start or day > end:
            unassigned += 1
            continue
        # spans are contiguous and sorted: last span starting on or before day
        index = bisect_right(span_starts, day) - 1
        assigned[index].append(row)

    if unassigned:
        logger.debug("bucket_rows_outside_range", extra={"row_count": unassigned})

    return [
        DateBucket(label=label, start=span_start, end=span_end, rows=tuple(bucket_rows))
        for (label, span_start, span_end), bucket_rows in zip(spans, assigned)
    ]


def running_totals(values: Iterable[Any]) -> list[Decimal]:
    """Cumulative sums: ``[1, 2, 3]`` -> ``[1, 3, 6]``."""
    result: list[Decimal] = []
    total = ZERO
    for value in values:
        total += to_decimal(value)
        result.append(total)
    return result
