"""
Financial Reporting Domain Models (``books_modules.reporting.models``).

Responsibility
--------------
Frozen dataclass value objects representing report outputs: profit and
loss, balance sheet, cash flow, aged receivables/payables and the
analytics dashboard.

Architecture position
---------------------
**Modules layer** -- pure data definitions with ZERO I/O.  Built by the
functions in ``statements`` and ``analytics`` and returned to callers by
``ReportingService``.

Invariants enforced
-------------------
* All models are ``frozen=True`` (immutable after construction).
* All monetary fields use ``Decimal`` -- NEVER ``float``.
* Section totals are computed by the ``from_lines`` / ``from_items``
  factories, so ``total == sum(line.amount)`` holds by construction.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Sequence

from books_engines.aging import AgedItem, AgingBucket
from books_engines.cash_flow import CashFlowActivity
from books_kernel.domain.money import ZERO


# =========================================================================
# Enums
# =========================================================================


class ReportType(str, Enum):
    """Types of financial reports."""

    PROFIT_AND_LOSS = "profit_and_loss"
    BALANCE_SHEET = "balance_sheet"
    CASH_FLOW = "cash_flow"
    AGED_RECEIVABLES = "aged_receivables"
    AGED_PAYABLES = "aged_payables"
    ANALYTICS = "analytics"


# =========================================================================
# Report Metadata (common to all reports)
# =========================================================================


@dataclass(frozen=True)
class ReportMetadata:
    """Metadata attached to every financial report."""

    report_type: ReportType
    entity_name: str
    currency: str
    generated_at: str  # ISO format timestamp from injected clock
    organization_id: str | None = None
    period_start: date | None = None
    period_end: date | None = None
    as_of_date: date | None = None


# =========================================================================
# Sections
# =========================================================================


@dataclass(frozen=True)
class ReportLine:
    """One entry of a statement section (usually one account)."""

    code: str | None
    name: str
    amount: Decimal
    account_type: str | None = None


@dataclass(frozen=True)
class ReportSection:
    """A named section of a statement with its total."""

    title: str
    lines: tuple[ReportLine, ...]
    total: Decimal

    @classmethod
    def from_lines(cls, title: str, lines: Sequence[ReportLine]) -> ReportSection:
        lines = tuple(lines)
        return cls(
            title=title,
            lines=lines,
            total=sum((line.amount for line in lines), ZERO),
        )


# =========================================================================
# Profit & Loss
# =========================================================================


@dataclass(frozen=True)
class ProfitAndLossReport:
    """
    Profit and loss for a period.

    ``profit_margin`` is a percentage rounded to two places, zero when
    there is no revenue.
    """

    metadata: ReportMetadata
    revenue: ReportSection
    expenses: ReportSection
    net_profit: Decimal
    profit_margin: Decimal

    @property
    def sections(self) -> tuple[ReportSection, ...]:
        return (self.revenue, self.expenses)


# =========================================================================
# Balance Sheet
# =========================================================================


@dataclass(frozen=True)
class BalanceSheetReport:
    """
    Balance sheet as of a date.

    Equity is the residual ``assets - liabilities``, so Assets =
    Liabilities + Equity holds structurally.
    """

    metadata: ReportMetadata
    assets: ReportSection
    liabilities: ReportSection
    equity: ReportSection
    total_liabilities_and_equity: Decimal
    is_balanced: bool

    @property
    def sections(self) -> tuple[ReportSection, ...]:
        return (self.assets, self.liabilities, self.equity)


# =========================================================================
# Cash Flow
# =========================================================================


@dataclass(frozen=True)
class CashFlowLine:
    """A single bank transaction with its signed amount."""

    date: date
    description: str
    amount: Decimal
    account_code: str | None = None
    reference: str | None = None


@dataclass(frozen=True)
class CashFlowSection:
    """Transactions of one activity; ``total`` is the signed sum."""

    title: str
    activity: CashFlowActivity
    lines: tuple[CashFlowLine, ...]
    total: Decimal

    @classmethod
    def from_lines(
        cls,
        title: str,
        activity: CashFlowActivity,
        lines: Sequence[CashFlowLine],
    ) -> CashFlowSection:
        lines = tuple(lines)
        return cls(
            title=title,
            activity=activity,
            lines=lines,
            total=sum((line.amount for line in lines), ZERO),
        )


@dataclass(frozen=True)
class CashFlowReport:
    """Cash flow by activity for a period."""

    metadata: ReportMetadata
    operating: CashFlowSection
    investing: CashFlowSection
    financing: CashFlowSection
    net_cash_flow: Decimal

    @property
    def sections(self) -> tuple[CashFlowSection, ...]:
        return (self.operating, self.investing, self.financing)


# =========================================================================
# Aged Receivables / Payables
# =========================================================================


@dataclass(frozen=True)
class AgingBucketGroup:
    """Documents of one aging bucket, most overdue first."""

    bucket: AgingBucket
    documents: tuple[AgedItem, ...]
    total: Decimal

    @property
    def label(self) -> str:
        return self.bucket.value

    @property
    def count(self) -> int:
        return len(self.documents)

    @classmethod
    def from_items(
        cls, bucket: AgingBucket, items: Sequence[AgedItem],
    ) -> AgingBucketGroup:
        items = tuple(items)
        return cls(
            bucket=bucket,
            documents=items,
            total=sum((item.amount for item in items), ZERO),
        )


@dataclass(frozen=True)
class AgingReport:
    """
    Aged receivables or payables.

    The five buckets always appear, in fixed order, even when empty.
    """

    metadata: ReportMetadata
    reference_date: date
    buckets: tuple[AgingBucketGroup, ...]
    total_outstanding: Decimal
    document_count: int

    def bucket(self, bucket: AgingBucket) -> AgingBucketGroup:
        for group in self.buckets:
            if group.bucket == bucket:
                return group
        raise KeyError(bucket)


# =========================================================================
# Analytics
# =========================================================================


@dataclass(frozen=True)
class TimeSeriesPoint:
    """One day of the analytics dashboard series."""

    label: str
    date: date
    revenue: Decimal
    expenses: Decimal
    cash_inflow: Decimal
    cash_outflow: Decimal
    net_cash_flow: Decimal
    cumulative_net_cash: Decimal


@dataclass(frozen=True)
class KeyMetrics:
    """Headline numbers of the analytics dashboard."""

    total_revenue: Decimal
    total_expenses: Decimal
    net_profit: Decimal
    profit_margin: Decimal
    customer_count: int
    invoice_count: int
    bill_count: int
    average_invoice_value: Decimal


@dataclass(frozen=True)
class AnalyticsReport:
    """Key metrics plus a daily series over the selected range."""

    metadata: ReportMetadata
    preset: str | None
    start_date: date
    end_date: date
    metrics: KeyMetrics
    time_series: tuple[TimeSeriesPoint, ...]
