"""
Display-side grouping and sorting of a finished custom report.

These helpers work on an already filtered and projected
``CustomReportResult``; they never change which rows a report contains.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Any

from books_kernel.domain.dates import parse_calendar_date
from books_kernel.domain.money import parse_decimal
from books_modules.custom_reports.engine import column_totals
from books_modules.custom_reports.fields import FieldType
from books_modules.custom_reports.filters import cell_text, parse_bool
from books_modules.custom_reports.models import CustomReportResult


@dataclass(frozen=True)
class RowGroup:
    """Rows sharing one value of the grouping column, with subtotals."""

    value: Any
    rows: tuple[dict[str, Any], ...]
    subtotals: dict[str, Decimal]

    @property
    def count(self) -> int:
        return len(self.rows)


def _column_type(result: CustomReportResult, key: str) -> FieldType:
    for spec in result.columns:
        if spec.key == key:
            return spec.type
    raise KeyError(f"{key!r} is not a column of report {result.name!r}")


def _sort_value(value: Any, field_type: FieldType) -> Any:
    if field_type.is_numeric:
        return parse_decimal(value)
    if field_type == FieldType.DATE:
        return parse_calendar_date(value)
    if field_type == FieldType.BOOLEAN:
        return parse_bool(value)
    text = cell_text(value)
    return text.lower() if text else None


def sort_rows(
    result: CustomReportResult,
    key: str,
    descending: bool = False,
) -> CustomReportResult:
    """
    Copy of ``result`` with rows ordered by column ``key``.

    Empty or unreadable cells sort last in both directions.  The sort is
    stable.
    """
    field_type = _column_type(result, key)
    keyed = [(_sort_value(row.get(key), field_type), row) for row in result.rows]
    present = [item for item in keyed if item[0] is not None]
    missing = [row for value, row in keyed if value is None]
    present.sort(key=lambda item: item[0], reverse=descending)
    return replace(result, rows=tuple(row for _, row in present) + tuple(missing))


def group_rows(result: CustomReportResult, key: str) -> tuple[RowGroup, ...]:
    """Groups in first-seen order, each with number and currency subtotals."""
    _column_type(result, key)
    grouped: dict[Any, list[dict[str, Any]]] = {}
    for row in result.rows:
        grouped.setdefault(row.get(key), []).append(row)
    return tuple(
        RowGroup(
            value=value,
            rows=tuple(rows),
            subtotals=column_totals(rows, result.columns),
        )
        for value, rows in grouped.items()
    )
