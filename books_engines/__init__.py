"""
Module: books_engines
Responsibility:
    Package entrypoint re-exporting the pure calculation engines used by the
    statement builders and the custom report engine.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import books_kernel (domain, logging).  MUST NOT import
    books_modules.

Invariants enforced:
    - Purity: engines never read the clock.  Reference dates are passed in
      by the services.
    - Decimal-only arithmetic for monetary amounts.
    - Determinism: identical inputs always produce identical outputs.

Usage:
    from books_engines import sum_by, bucket_by_date, classify_age
    from books_engines import KeywordCashFlowClassifier
"""

from books_engines.aggregation import (
    DateBucket,
    Granularity,
    bucket_by_date,
    format_day_label,
    running_totals,
    sum_by,
)
from books_engines.aging import (
    BUCKET_ORDER,
    STANDARD_BUCKETS,
    AgedItem,
    AgingBucket,
    BucketRange,
    age_documents,
    age_in_days,
    classify_age,
)
from books_engines.cash_flow import (
    ACTIVITY_ORDER,
    CashFlowActivity,
    CashFlowClassifier,
    KeywordCashFlowClassifier,
)
from books_engines.tracer import compute_input_fingerprint, traced_engine

__all__ = [
    # aggregation
    "DateBucket",
    "Granularity",
    "bucket_by_date",
    "format_day_label",
    "running_totals",
    "sum_by",
    # aging
    "AgedItem",
    "AgingBucket",
    "BucketRange",
    "BUCKET_ORDER",
    "STANDARD_BUCKETS",
    "age_documents",
    "age_in_days",
    "classify_age",
    # cash flow
    "ACTIVITY_ORDER",
    "CashFlowActivity",
    "CashFlowClassifier",
    "KeywordCashFlowClassifier",
    # tracing
    "compute_input_fingerprint",
    "traced_engine",
]
