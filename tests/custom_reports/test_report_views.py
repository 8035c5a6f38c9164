"""Tests for sorting and grouping a finished custom report."""

from datetime import date
from decimal import Decimal

import pytest

from books_modules.custom_reports.fields import FieldSpec, FieldType
from books_modules.custom_reports.models import CustomReportResult
from books_modules.custom_reports.views import group_rows, sort_rows

COLUMNS = (
    FieldSpec("contact_name", "Customer"),
    FieldSpec("status", "Status"),
    FieldSpec("due_date", "Due Date", FieldType.DATE),
    FieldSpec("total", "Total", FieldType.CURRENCY),
)


def _result(rows):
    return CustomReportResult(
        name="Invoices",
        source="invoices",
        columns=COLUMNS,
        rows=tuple(rows),
    )


ROWS = [
    {"contact_name": "stark", "status": "sent", "due_date": date(2024, 7, 1), "total": Decimal("1500")},
    {"contact_name": "Wayne", "status": "paid", "due_date": None, "total": Decimal("500")},
    {"contact_name": "Acme", "status": "sent", "due_date": date(2024, 5, 1), "total": None},
    {"contact_name": None, "status": "overdue", "due_date": date(2024, 6, 1), "total": Decimal("20")},
]


class TestSortRows:

    def test_currency_ascending_and_descending(self):
        ascending = sort_rows(_result(ROWS), "total")
        descending = sort_rows(_result(ROWS), "total", descending=True)

        assert [r["total"] for r in ascending.rows] == [
            Decimal("20"), Decimal("500"), Decimal("1500"), None,
        ]
        assert [r["total"] for r in descending.rows] == [
            Decimal("1500"), Decimal("500"), Decimal("20"), None,
        ]

    def test_text_is_case_insensitive_with_blanks_last(self):
        result = sort_rows(_result(ROWS), "contact_name")
        assert [r["contact_name"] for r in result.rows] == ["Acme", "stark", "Wayne", None]

    def test_dates(self):
        result = sort_rows(_result(ROWS), "due_date", descending=True)
        assert [r["due_date"] for r in result.rows] == [
            date(2024, 7, 1), date(2024, 6, 1), date(2024, 5, 1), None,
        ]

    def test_does_not_change_membership(self):
        original = _result(ROWS)
        result = sort_rows(original, "status")

        assert sorted(map(id, result.rows)) == sorted(map(id, original.rows))
        assert original.rows == tuple(ROWS)

    def test_unknown_column(self):
        with pytest.raises(KeyError):
            sort_rows(_result(ROWS), "amount_due")


class TestGroupRows:

    def test_groups_in_first_seen_order_with_subtotals(self):
        groups = group_rows(_result(ROWS), "status")

        assert [g.value for g in groups] == ["sent", "paid", "overdue"]
        assert [g.count for g in groups] == [2, 1, 1]
        assert groups[0].subtotals == {"total": Decimal("1500")}
        assert sum((g.subtotals["total"] for g in groups), Decimal(0)) == Decimal("2020")

    def test_empty_report(self):
        assert group_rows(_result([]), "status") == ()

    def test_unknown_column(self):
        with pytest.raises(KeyError):
            group_rows(_result(ROWS), "region")
