"""
Tests for the aggregation primitives.

Covers:
- sum_by grouping, ordering and None amounts
- bucket_by_date for day, week and month granularity
- running_totals
"""

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from decimal import Decimal

from hypothesis import given
from hypothesis import strategies as st

from books_engines.aggregation import (
    Granularity,
    bucket_by_date,
    format_day_label,
    format_month_label,
    running_totals,
    sum_by,
)


@dataclass(frozen=True)
class Row:
    key: str
    amount: Decimal | None
    day: date | None = None


def _day(row: Row):
    return row.day


class TestSumBy:
    """Tests for grouped summation."""

    def test_groups_and_sums(self):
        rows = [
            Row("4000", Decimal("100.00")),
            Row("5000", Decimal("40.00")),
            Row("4000", Decimal("250.50")),
        ]

        totals = sum_by(rows, lambda r: r.key)

        assert totals == {"4000": Decimal("350.50"), "5000": Decimal("40.00")}

    def test_none_amount_counts_as_zero(self):
        rows = [Row("4000", None), Row("4000", Decimal("10")), Row("6000", None)]

        totals = sum_by(rows, lambda r: r.key)

        assert totals["4000"] == Decimal("10")
        assert totals["6000"] == Decimal("0")

    def test_first_seen_key_order(self):
        rows = [Row("b", Decimal(1)), Row("a", Decimal(1)), Row("b", Decimal(1))]
        assert list(sum_by(rows, lambda r: r.key)) == ["b", "a"]

    def test_custom_amount_function(self):
        rows = [{"k": "x", "v": "1.10"}, {"k": "x", "v": 2}]
        totals = sum_by(rows, lambda r: r["k"], lambda r: r["v"])
        assert totals == {"x": Decimal("3.10")}

    def test_empty_input(self):
        assert sum_by([], lambda r: r.key) == {}

    @given(
        st.lists(
            st.tuples(
                st.sampled_from(["a", "b", "c"]),
                st.decimals(min_value=-10_000, max_value=10_000, places=2),
            ),
            max_size=40,
        )
    )
    def test_group_totals_add_up_to_grand_total(self, pairs):
        rows = [Row(k, v) for k, v in pairs]
        totals = sum_by(rows, lambda r: r.key)
        assert sum(totals.values(), Decimal(0)) == sum((v for _, v in pairs), Decimal(0))


class TestBucketByDate:
    """Tests for calendar bucketing."""

    def test_one_bucket_per_day_including_empty(self):
        rows = [Row("a", Decimal(1), date(2024, 1, 2))]

        buckets = bucket_by_date(rows, date(2024, 1, 1), date(2024, 1, 3), _day)

        assert [b.label for b in buckets] == ["Jan 1", "Jan 2", "Jan 3"]
        assert [len(b.rows) for b in buckets] == [0, 1, 0]

    def test_single_day_range(self):
        d = date(2024, 3, 15)
        rows = [
            Row("a", Decimal(1), d),
            Row("b", Decimal(2), d),
            Row("c", Decimal(3), d + timedelta(days=1)),
            Row("d", Decimal(4), d - timedelta(days=1)),
        ]

        buckets = bucket_by_date(rows, d, d, _day)

        assert len(buckets) == 1
        assert [r.key for r in buckets[0].rows] == ["a", "b"]

    def test_start_after_end_yields_nothing(self):
        rows = [Row("a", Decimal(1), date(2024, 1, 1))]
        assert bucket_by_date(rows, date(2024, 2, 1), date(2024, 1, 1), _day) == []

    def test_rows_without_date_or_out_of_range_unassigned(self):
        rows = [
            Row("none", Decimal(1), None),
            Row("late", Decimal(1), date(2025, 1, 1)),
            Row("in", Decimal(1), date(2024, 1, 1)),
        ]

        buckets = bucket_by_date(rows, date(2024, 1, 1), date(2024, 1, 1), _day)

        assert [r.key for r in buckets[0].rows] == ["in"]

    def test_datetime_and_iso_string_dates(self):
        rows = [
            {"id": 1, "at": datetime(2024, 1, 2, 23, 30)},
            {"id": 2, "at": "2024-01-02"},
        ]

        buckets = bucket_by_date(
            rows, date(2024, 1, 1), date(2024, 1, 2), lambda r: r["at"],
        )

        assert [r["id"] for r in buckets[1].rows] == [1, 2]

    def test_week_buckets_start_on_range_start(self):
        buckets = bucket_by_date(
            [], date(2024, 1, 3), date(2024, 1, 20), _day, Granularity.WEEK,
        )

        assert [(b.start, b.end) for b in buckets] == [
            (date(2024, 1, 3), date(2024, 1, 9)),
            (date(2024, 1, 10), date(2024, 1, 16)),
            (date(2024, 1, 17), date(2024, 1, 20)),
        ]
        assert buckets[0].label == "Week of Jan 3"

    def test_month_buckets_clipped_to_range(self):
        rows = [
            Row("jan", Decimal(1), date(2024, 1, 31)),
            Row("feb", Decimal(1), date(2024, 2, 29)),
            Row("mar", Decimal(1), date(2024, 3, 10)),
        ]

        buckets = bucket_by_date(
            rows, date(2024, 1, 15), date(2024, 3, 10), _day, "month",
        )

        assert [b.label for b in buckets] == ["Jan 2024", "Feb 2024", "Mar 2024"]
        assert buckets[0].start == date(2024, 1, 15)
        assert buckets[1].end == date(2024, 2, 29)
        assert buckets[2].end == date(2024, 3, 10)
        assert [[r.key for r in b.rows] for b in buckets] == [["jan"], ["feb"], ["mar"]]

    def test_month_buckets_cross_year_end(self):
        buckets = bucket_by_date(
            [], date(2023, 12, 5), date(2024, 1, 5), _day, Granularity.MONTH,
        )
        assert [b.label for b in buckets] == ["Dec 2023", "Jan 2024"]

    def test_labels_use_fixed_english_months(self):
        assert format_day_label(date(2024, 9, 5)) == "Sep 5"
        assert format_month_label(date(2024, 12, 1)) == "Dec 2024"

    @given(
        start=st.dates(min_value=date(2020, 1, 1), max_value=date(2026, 12, 31)),
        span=st.integers(min_value=0, max_value=120),
        granularity=st.sampled_from(list(Granularity)),
        offsets=st.lists(st.integers(min_value=-10, max_value=130), max_size=30),
    )
    def test_buckets_tile_the_range(self, start, span, granularity, offsets):
        end = start + timedelta(days=span)
        rows = [Row(str(i), Decimal(1), start + timedelta(days=o)) for i, o in enumerate(offsets)]

        buckets = bucket_by_date(rows, start, end, _day, granularity)

        assert buckets[0].start == start
        assert buckets[-1].end == end
        for prev, nxt in zip(buckets, buckets[1:]):
            assert nxt.start == prev.end + timedelta(days=1)
        in_range = [r for r in rows if start <= r.day <= end]
        assert sum(len(b.rows) for b in buckets) == len(in_range)
        for bucket in buckets:
            assert all(bucket.contains(r.day) for r in bucket.rows)


class TestRunningTotals:
    def test_cumulative(self):
        assert running_totals([1, 2, 3]) == [Decimal(1), Decimal(3), Decimal(6)]

    def test_handles_negatives_and_none(self):
        assert running_totals([Decimal("5.5"), None, Decimal("-2")]) == [
            Decimal("5.5"), Decimal("5.5"), Decimal("3.5"),
        ]

    def test_empty(self):
        assert running_totals([]) == []
