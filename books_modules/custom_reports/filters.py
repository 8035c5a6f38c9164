"""
Filter evaluation for custom reports.

Pure predicate evaluation over plain dict rows.  Every filter is ANDed.
Operands arrive as the strings a user typed; an operand (or a cell) that
cannot be read as the filter's type makes the predicate false, the way a
NaN comparison would, rather than failing the report.

``today`` is passed in for the relative date operators; callers take it
from their Clock at the moment of filtering.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import date, timedelta
from decimal import Decimal
from typing import Any

from books_kernel.domain.dates import parse_calendar_date
from books_kernel.domain.money import parse_decimal
from books_kernel.logging_config import get_logger
from books_modules.custom_reports.models import (
    BooleanFilter,
    BooleanOperator,
    DateFilter,
    DateOperator,
    FilterSpec,
    NumberFilter,
    NumberOperator,
    PassThroughFilter,
    TextFilter,
    TextOperator,
)

logger = get_logger("modules.custom_reports.filters")

_TRUE_WORDS = frozenset({"true", "yes", "1"})
_FALSE_WORDS = frozenset({"false", "no", "0"})


# =========================================================================
# Operand parsing
# =========================================================================


def cell_text(value: Any) -> str:
    """Display text of a cell; None is the empty string."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


def parse_bool(value: Any) -> bool | None:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, Decimal)):
        return value != 0
    if isinstance(value, str):
        word = value.strip().lower()
        if word in _TRUE_WORDS:
            return True
        if word in _FALSE_WORDS:
            return False
    return None


def split_range(value: str, field: str) -> tuple[str, str] | None:
    """``"min, max"`` -> ``("min", "max")``; None unless exactly two parts."""
    parts = [part.strip() for part in value.split(",")]
    if len(parts) != 2:
        logger.warning(
            "filter_between_malformed",
            extra={"field": field, "value": value, "part_count": len(parts)},
        )
        return None
    return parts[0], parts[1]


_MAX_DAY_SPAN = (date.max - date.min).days


def parse_day_count(value: str) -> int | None:
    """Whole number of days, clamped to the span of representable dates."""
    count = parse_decimal(value)
    if count is None or count != count.to_integral_value():
        return None
    if abs(count) > _MAX_DAY_SPAN:
        return _MAX_DAY_SPAN if count > 0 else -_MAX_DAY_SPAN
    return int(count)


def shift_days(day: date, count: int) -> date:
    """``day`` moved by ``count`` days, saturating at ``date.min`` and ``date.max``."""
    try:
        return day + timedelta(days=count)
    except OverflowError:
        return date.max if count > 0 else date.min


# =========================================================================
# Predicates
# =========================================================================


def _text_matches(spec: TextFilter, cell: Any) -> bool:
    text = cell_text(cell)
    operator = spec.operator
    if operator == TextOperator.EQUALS:
        return text == spec.value
    if operator == TextOperator.NOT_EQUALS:
        return text != spec.value
    if operator == TextOperator.CONTAINS:
        return spec.value.lower() in text.lower()
    if operator == TextOperator.STARTS_WITH:
        return text.lower().startswith(spec.value.lower())
    if operator == TextOperator.ENDS_WITH:
        return text.lower().endswith(spec.value.lower())
    raise ValueError(f"Unhandled text operator {operator!r}")


def _number_matches(spec: NumberFilter, cell: Any) -> bool:
    number = parse_decimal(cell)
    if number is None:
        return False
    operator = spec.operator
    if operator == NumberOperator.BETWEEN:
        bounds = split_range(spec.value, spec.field)
        if bounds is None:
            return False
        low, high = parse_decimal(bounds[0]), parse_decimal(bounds[1])
        if low is None or high is None:
            return False
        return low <= number <= high

    operand = parse_decimal(spec.value)
    if operand is None:
        return False
    if operator == NumberOperator.EQUALS:
        return number == operand
    if operator == NumberOperator.GREATER_THAN:
        return number > operand
    if operator == NumberOperator.LESS_THAN:
        return number < operand
    raise ValueError(f"Unhandled number operator {operator!r}")


def _date_matches(spec: DateFilter, cell: Any, today: date) -> bool:
    day = parse_calendar_date(cell)
    if day is None:
        return False
    operator = spec.operator
    if operator == DateOperator.LAST_DAYS or operator == DateOperator.NEXT_DAYS:
        count = parse_day_count(spec.value)
        if count is None:
            return False
        if operator == DateOperator.LAST_DAYS:
            return day >= shift_days(today, -count)
        return day <= shift_days(today, count)
    if operator == DateOperator.BETWEEN:
        bounds = split_range(spec.value, spec.field)
        if bounds is None:
            return False
        low, high = parse_calendar_date(bounds[0]), parse_calendar_date(bounds[1])
        if low is None or high is None:
            return False
        return low <= day <= high

    operand = parse_calendar_date(spec.value)
    if operand is None:
        return False
    if operator == DateOperator.EQUALS:
        return day == operand
    if operator == DateOperator.AFTER:
        return day > operand
    if operator == DateOperator.BEFORE:
        return day < operand
    raise ValueError(f"Unhandled date operator {operator!r}")


def _boolean_matches(spec: BooleanFilter, cell: Any) -> bool:
    actual = parse_bool(cell)
    expected = parse_bool(spec.value)
    if actual is None or expected is None:
        return False
    if spec.operator == BooleanOperator.EQUALS:
        return actual == expected
    if spec.operator == BooleanOperator.NOT_EQUALS:
        return actual != expected
    raise ValueError(f"Unhandled boolean operator {spec.operator!r}")


def matches(spec: FilterSpec, row: dict[str, Any], today: date) -> bool:
    """True if ``row`` satisfies ``spec``."""
    if isinstance(spec, PassThroughFilter):
        return True
    if isinstance(spec, TextFilter):
        return _text_matches(spec, row.get(spec.field))
    if isinstance(spec, NumberFilter):
        return _number_matches(spec, row.get(spec.field))
    if isinstance(spec, DateFilter):
        return _date_matches(spec, row.get(spec.field), today)
    if isinstance(spec, BooleanFilter):
        return _boolean_matches(spec, row.get(spec.field))
    raise TypeError(f"Not a filter: {type(spec).__name__}")


def apply_filters(
    rows: Iterable[dict[str, Any]],
    filters: Sequence[FilterSpec],
    today: date,
) -> list[dict[str, Any]]:
    """
    Rows satisfying every filter, in input order.

    Rows are returned as-is (not copied); applying the same filters to the
    output again returns the same rows.
    """
    return [
        row for row in rows
        if all(matches(spec, row, today) for spec in filters)
    ]
