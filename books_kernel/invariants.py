"""
Module: books_kernel.invariants
Responsibility: Structural checks over built reports.  Report totals are
    correct by construction; these checks exist so tests (and the optional
    ``verify_invariants`` config flag) fail loudly if a builder regresses.
Architecture position: Kernel.  Duck-typed over report objects so it does
    not import from books_modules.

Invariants checked:
    - section_total: ``section.total == sum(line.amount for line in lines)``
    - balance_equation: ``assets == liabilities + equity``
    - aging_partition: bucket sizes and totals add up to the report's
      document count and total outstanding.

Failure modes:
    - ComputationDefectError naming the invariant, expected and actual
      values.  Never catch it to hide a defect.
"""

from decimal import Decimal
from typing import Any, Iterable

from books_kernel.domain.money import ZERO
from books_kernel.exceptions import ComputationDefectError
from books_kernel.logging_config import get_logger

logger = get_logger("invariants")

SECTION_TOTAL = "section_total"
BALANCE_EQUATION = "balance_equation"
AGING_PARTITION = "aging_partition"


def _fail(invariant: str, expected: Any, actual: Any, where: str) -> None:
    logger.error(
        "invariant_violated",
        extra={
            "invariant": invariant,
            "expected": str(expected),
            "actual": str(actual),
            "where": where,
        },
    )
    raise ComputationDefectError(invariant, expected, actual, where)


def check_section_total(section: Any, where: str = "") -> None:
    """Raise if a section's total differs from the sum of its lines."""
    expected = sum((line.amount for line in section.lines), ZERO)
    if expected != section.total:
        _fail(SECTION_TOTAL, expected, section.total, where or section.title)


def check_sections(sections: Iterable[Any], where: str = "") -> None:
    for section in sections:
        check_section_total(section, f"{where}.{section.title}" if where else "")


def check_balance_equation(
    assets: Decimal, liabilities: Decimal, equity: Decimal, where: str = "",
) -> None:
    """Raise unless ``assets == liabilities + equity``."""
    if assets != liabilities + equity:
        _fail(BALANCE_EQUATION, assets, liabilities + equity, where)


def check_aging_partition(report: Any, where: str = "") -> None:
    """
    Raise unless the aging buckets partition the report's documents.

    Also verifies each bucket's own total against its documents.
    """
    count = 0
    total = ZERO
    for bucket in report.buckets:
        bucket_sum = sum((doc.amount for doc in bucket.documents), ZERO)
        if bucket_sum != bucket.total:
            _fail(SECTION_TOTAL, bucket_sum, bucket.total, f"{where}.{bucket.label}")
        count += len(bucket.documents)
        total += bucket.total
    if count != report.document_count:
        _fail(AGING_PARTITION, report.document_count, count, where)
    if total != report.total_outstanding:
        _fail(AGING_PARTITION, report.total_outstanding, total, where)
