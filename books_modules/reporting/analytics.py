"""
Analytics dashboard computations.

Pure functions over document summaries and bank transactions: headline
metrics for a date range and a daily series of paid revenue, paid
expenses and bank cash movement.  No clock access; the service resolves
presets against its Clock before calling in.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import replace
from datetime import date, timedelta
from decimal import Decimal

from books_engines.aggregation import bucket_by_date, running_totals, sum_by
from books_kernel.domain.dates import in_range
from books_kernel.domain.ledger import (
    DocumentStatus,
    DocumentSummary,
    LedgerRow,
    TransactionDirection,
)
from books_kernel.domain.money import ZERO, round_money
from books_kernel.logging_config import get_logger
from books_modules.reporting.models import (
    AnalyticsReport,
    KeyMetrics,
    ProfitAndLossReport,
    ReportMetadata,
    TimeSeriesPoint,
)

logger = get_logger("modules.reporting.analytics")

DEFAULT_PRESET = "last30days"

PRESET_DAYS: dict[str, int] = {
    "last7days": 7,
    "last30days": 30,
    "last90days": 90,
}
YEAR_TO_DATE = "yearToDate"

PRESETS: tuple[str, ...] = (*PRESET_DAYS, YEAR_TO_DATE)


def resolve_date_range(preset: str | None, today: date) -> tuple[date, date]:
    """
    Turn a dashboard preset into an inclusive ``(start, today)`` range.

    Unknown presets fall back to the last 30 days.
    """
    if preset == YEAR_TO_DATE:
        return date(today.year, 1, 1), today
    if preset not in PRESET_DAYS:
        logger.warning(
            "analytics_preset_unknown",
            extra={"preset": preset, "fallback": DEFAULT_PRESET},
        )
        preset = DEFAULT_PRESET
    return today - timedelta(days=PRESET_DAYS[preset]), today


def _paid(documents: Sequence[DocumentSummary]) -> list[DocumentSummary]:
    return [d for d in documents if d.status == DocumentStatus.PAID.value]


def build_time_series(
    invoices: Sequence[DocumentSummary],
    bills: Sequence[DocumentSummary],
    bank_transactions: Sequence[LedgerRow],
    start_date: date,
    end_date: date,
) -> tuple[TimeSeriesPoint, ...]:
    """
    One point per day of ``[start_date, end_date]``.

    Revenue and expenses count paid documents by issue date.  Cash inflow
    is credits, outflow debits; ``cumulative_net_cash`` runs across the
    range starting from zero.
    """

    def _document_day(doc: DocumentSummary) -> date:
        return doc.issue_date

    def _row_day(row: LedgerRow) -> date:
        return row.date

    revenue_days = bucket_by_date(_paid(invoices), start_date, end_date, _document_day)
    expense_days = bucket_by_date(_paid(bills), start_date, end_date, _document_day)
    bank_days = bucket_by_date(bank_transactions, start_date, end_date, _row_day)

    points: list[TimeSeriesPoint] = []
    nets: list[Decimal] = []
    for revenue_bucket, expense_bucket, bank_bucket in zip(
        revenue_days, expense_days, bank_days,
    ):
        flows = sum_by(bank_bucket.rows, lambda r: r.direction)
        inflow = flows.get(TransactionDirection.CREDIT, ZERO)
        outflow = flows.get(TransactionDirection.DEBIT, ZERO)
        nets.append(inflow - outflow)
        points.append(
            TimeSeriesPoint(
                label=revenue_bucket.label,
                date=revenue_bucket.start,
                revenue=sum((d.total for d in revenue_bucket.rows), ZERO),
                expenses=sum((d.total for d in expense_bucket.rows), ZERO),
                cash_inflow=inflow,
                cash_outflow=outflow,
                net_cash_flow=inflow - outflow,
                cumulative_net_cash=ZERO,
            )
        )

    return tuple(
        replace(point, cumulative_net_cash=running)
        for point, running in zip(points, running_totals(nets))
    )


def build_key_metrics(
    invoices: Sequence[DocumentSummary],
    bills: Sequence[DocumentSummary],
    profit_and_loss: ProfitAndLossReport,
    customer_count: int,
    start_date: date,
    end_date: date,
) -> KeyMetrics:
    """
    Headline metrics for the range.

    Revenue, expenses and margin come from the profit and loss statement;
    counts include every invoice or bill issued in range whatever its
    status; the average covers paid invoices only.
    """
    in_period_invoices = [
        d for d in invoices if in_range(d.issue_date, start_date, end_date)
    ]
    in_period_bills = [
        d for d in bills if in_range(d.issue_date, start_date, end_date)
    ]
    paid = _paid(in_period_invoices)
    average = (
        round_money(sum((d.total for d in paid), ZERO) / len(paid)) if paid else ZERO
    )

    return KeyMetrics(
        total_revenue=profit_and_loss.revenue.total,
        total_expenses=profit_and_loss.expenses.total,
        net_profit=profit_and_loss.net_profit,
        profit_margin=profit_and_loss.profit_margin,
        customer_count=customer_count,
        invoice_count=len(in_period_invoices),
        bill_count=len(in_period_bills),
        average_invoice_value=average,
    )


def build_analytics(
    invoices: Sequence[DocumentSummary],
    bills: Sequence[DocumentSummary],
    bank_transactions: Sequence[LedgerRow],
    profit_and_loss: ProfitAndLossReport,
    customer_count: int,
    start_date: date,
    end_date: date,
    metadata: ReportMetadata,
    preset: str | None = None,
) -> AnalyticsReport:
    """Assemble the dashboard report."""
    return AnalyticsReport(
        metadata=metadata,
        preset=preset,
        start_date=start_date,
        end_date=end_date,
        metrics=build_key_metrics(
            invoices, bills, profit_and_loss, customer_count, start_date, end_date,
        ),
        time_series=build_time_series(
            invoices, bills, bank_transactions, start_date, end_date,
        ),
    )
