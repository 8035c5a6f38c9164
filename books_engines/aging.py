"""
Module: books_engines.aging
Responsibility:
    Age outstanding invoices and bills against a reference date and
    classify them into the five standard aging buckets.  Used by the Aged
    Receivables and Aged Payables statements.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import books_kernel.domain and books_kernel.logging_config.

Invariants enforced:
    - Purity: no clock access.  The reference date is always a parameter;
      the service supplies "today" from its Clock.
    - Ages are calendar-day differences; datetimes are truncated to dates
      before subtracting.
    - Bucket ranges are contiguous and cover every integer, so every age
      maps to exactly one bucket.  Boundaries belong to the lower bucket.

Failure modes:
    - TypeError if a date argument is neither a date nor a datetime.

Usage:
    from books_engines.aging import age_in_days, classify_age

    days = age_in_days(date(2024, 6, 30), date(2024, 6, 1))  # 29
    classify_age(days)  # AgingBucket.DAYS_1_30
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Sequence

from books_kernel.domain.ledger import DocumentSummary
from books_kernel.logging_config import get_logger
from books_engines.tracer import traced_engine

logger = get_logger("engines.aging")


class AgingBucket(str, Enum):
    """Time-since-due category of an outstanding document."""

    CURRENT = "current"
    DAYS_1_30 = "1-30"
    DAYS_31_60 = "31-60"
    DAYS_61_90 = "61-90"
    OVER_90 = "over-90"


@dataclass(frozen=True)
class BucketRange:
    """
    Inclusive day range of one aging bucket.

    ``min_days=None`` is unbounded below (everything not yet due),
    ``max_days=None`` unbounded above.
    """

    bucket: AgingBucket
    min_days: int | None
    max_days: int | None

    def __post_init__(self) -> None:
        if (
            self.min_days is not None
            and self.max_days is not None
            and self.max_days < self.min_days
        ):
            raise ValueError("max_days cannot be less than min_days")

    def contains(self, age_days: int) -> bool:
        if self.min_days is not None and age_days < self.min_days:
            return False
        return self.max_days is None or age_days <= self.max_days


STANDARD_BUCKETS: tuple[BucketRange, ...] = (
    BucketRange(AgingBucket.CURRENT, None, 0),
    BucketRange(AgingBucket.DAYS_1_30, 1, 30),
    BucketRange(AgingBucket.DAYS_31_60, 31, 60),
    BucketRange(AgingBucket.DAYS_61_90, 61, 90),
    BucketRange(AgingBucket.OVER_90, 91, None),
)

BUCKET_ORDER: tuple[AgingBucket, ...] = tuple(r.bucket for r in STANDARD_BUCKETS)


@dataclass(frozen=True)
class AgedItem:
    """
    An outstanding document with its age classification.

    ``days_overdue`` may be negative for documents not yet due; those sit in
    the current bucket.
    """

    document_id: str
    number: str
    document_date: date
    due_date: date
    amount: Decimal
    days_overdue: int
    bucket: AgingBucket
    status: str
    contact_id: str | None = None
    contact_name: str | None = None

    @property
    def is_overdue(self) -> bool:
        return self.days_overdue > 0


def _as_date(value: date | datetime) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    raise TypeError(f"Expected date or datetime, got {type(value).__name__}")


def age_in_days(reference_date: date | datetime, due_date: date | datetime) -> int:
    """
    Whole calendar days from ``due_date`` to ``reference_date``.

    Positive means overdue.  Time of day is ignored, so 23:59 on the due
    date is still age 0.
    """
    return (_as_date(reference_date) - _as_date(due_date)).days


def classify_age(days: int) -> AgingBucket:
    """Map an age in days to its bucket."""
    for bucket_range in STANDARD_BUCKETS:
        if bucket_range.contains(days):
            return bucket_range.bucket
    # unreachable while STANDARD_BUCKETS covers every integer
    raise ValueError(f"Age {days} does not fit any bucket")


@traced_engine("aging", "1.0", fingerprint_fields=("documents", "reference_date"))
def age_documents(
    *,
    documents: Sequence[DocumentSummary],
    reference_date: date,
) -> list[AgedItem]:
    """
    Age each document against its due date.

    Documents without a due date age from their issue date.  Input order is
    preserved; sorting is the statement builder's concern.
    """
    items: list[AgedItem] = []
    fallback_count = 0
    for doc in documents:
        due = doc.due_date
        if due is None:
            due = doc.issue_date
            fallback_count += 1
        days = age_in_days(reference_date, due)
        items.append(
            AgedItem(
                document_id=doc.document_id,
                number=doc.number,
                document_date=doc.issue_date,
                due_date=due,
                amount=doc.total,
                days_overdue=days,
                bucket=classify_age(days),
                status=doc.status,
                contact_id=doc.contact_id,
                contact_name=doc.contact_name,
            )
        )

    logger.debug(
        "documents_aged",
        extra={
            "reference_date": reference_date.isoformat(),
            "document_count": len(items),
            "due_date_fallback_count": fallback_count,
        },
    )
    return items
