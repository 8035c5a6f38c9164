"""
Pure financial statement transformation functions.

These functions turn normalized ledger rows, account snapshots and
document summaries into structured statements.  ZERO I/O. ZERO side
effects.

All monetary values are Decimal. All inputs/outputs are frozen dataclasses.

Functions in this module follow the books_kernel/domain/ purity convention:
- No database access
- No clock access
- No file I/O
- Inputs are never mutated
- Deterministic: same inputs always produce same outputs

The statements approximate a general ledger from line-item sums: there is
no journal, so balance sheet accounts other than bank, receivable and
payable show zero and equity is the residual of assets minus liabilities.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Iterable, Sequence
from datetime import date
from decimal import Decimal
from enum import Enum
from uuid import UUID

from books_engines.aggregation import sum_by
from books_engines.aging import BUCKET_ORDER, age_documents
from books_engines.cash_flow import ACTIVITY_ORDER, CashFlowActivity, CashFlowClassifier
from books_kernel import invariants
from books_kernel.domain.dates import in_range
from books_kernel.domain.ledger import (
    EXPENSE_TYPES,
    REVENUE_TYPES,
    AccountInfo,
    AccountType,
    DocumentSummary,
    LedgerRow,
)
from books_kernel.domain.money import ZERO, round_money
from books_modules.reporting.config import ReportingConfig
from books_modules.reporting.models import (
    AgingBucketGroup,
    AgingReport,
    AnalyticsReport,
    BalanceSheetReport,
    CashFlowLine,
    CashFlowReport,
    CashFlowSection,
    ProfitAndLossReport,
    ReportLine,
    ReportMetadata,
    ReportSection,
)

RETAINED_EARNINGS_NAME = "Retained Earnings"

_ACTIVITY_TITLES: dict[CashFlowActivity, str] = {
    CashFlowActivity.OPERATING: "Operating Activities",
    CashFlowActivity.INVESTING: "Investing Activities",
    CashFlowActivity.FINANCING: "Financing Activities",
}


# =========================================================================
# Helpers
# =========================================================================


def _keep_line(line: ReportLine, config: ReportingConfig) -> bool:
    return config.include_zero_balances or line.amount != ZERO


def _account_lines(
    rows: Iterable[LedgerRow],
    config: ReportingConfig,
) -> list[ReportLine]:
    """One line per account code, ordered by code."""
    rows = list(rows)
    totals = sum_by(rows, lambda r: r.account_code)
    names: dict[str | None, tuple[str, AccountType | None]] = {}
    for row in rows:
        names.setdefault(row.account_code, (row.account_name or "", row.account_type))

    lines = [
        ReportLine(
            code=code,
            name=names[code][0],
            amount=amount,
            account_type=names[code][1].value if names[code][1] else None,
        )
        for code, amount in totals.items()
    ]
    lines.sort(key=lambda line: line.code or "")
    return [line for line in lines if _keep_line(line, config)]


def compute_profit_margin(net_profit: Decimal, revenue: Decimal, places: int = 2) -> Decimal:
    """Net profit as a percentage of revenue to ``places`` digits; zero when revenue is zero."""
    if revenue == ZERO:
        return ZERO
    return round_money(net_profit / revenue * Decimal("100"), places)


# =========================================================================
# 1. PROFIT & LOSS
# =========================================================================


def build_profit_and_loss(
    invoice_lines: Sequence[LedgerRow],
    bill_lines: Sequence[LedgerRow],
    start_date: date,
    end_date: date,
    config: ReportingConfig,
    metadata: ReportMetadata,
) -> ProfitAndLossReport:
    """
    Build a profit and loss statement for ``[start_date, end_date]``.

    Revenue comes from invoice lines on revenue and other-income accounts,
    expenses from bill lines on expense, cost-of-goods-sold and
    other-expense accounts.  Draft documents never count.
    """

    def _eligible(row: LedgerRow, types: frozenset[AccountType]) -> bool:
        return (
            not row.is_draft
            and row.account_type in types
            and in_range(row.date, start_date, end_date)
        )

    revenue = ReportSection.from_lines(
        "Revenue",
        _account_lines((r for r in invoice_lines if _eligible(r, REVENUE_TYPES)), config),
    )
    expenses = ReportSection.from_lines(
        "Expenses",
        _account_lines((r for r in bill_lines if _eligible(r, EXPENSE_TYPES)), config),
    )
    net_profit = revenue.total - expenses.total

    return ProfitAndLossReport(
        metadata=metadata,
        revenue=revenue,
        expenses=expenses,
        net_profit=net_profit,
        profit_margin=compute_profit_margin(
            net_profit, revenue.total, config.display_precision
        ),
    )


# =========================================================================
# 2. BALANCE SHEET
# =========================================================================


def _open_document_total(
    documents: Iterable[DocumentSummary],
    statuses: tuple[str, ...],
    as_of_date: date,
) -> Decimal:
    return sum(
        (
            doc.total
            for doc in documents
            if doc.status in statuses and doc.issue_date <= as_of_date
        ),
        ZERO,
    )


def build_balance_sheet(
    accounts: Sequence[AccountInfo],
    bank_transactions: Sequence[LedgerRow],
    invoices: Sequence[DocumentSummary],
    bills: Sequence[DocumentSummary],
    as_of_date: date,
    config: ReportingConfig,
    metadata: ReportMetadata,
) -> BalanceSheetReport:
    """
    Build a balance sheet as of ``as_of_date``.

    Balance rules:
    1. Bank accounts (code prefix) sum signed bank transactions to date
    2. The receivable account sums open invoices issued to date
    3. The payable account sums open bills issued to date
    4. Every other asset or liability is zero
    5. Equity = assets - liabilities, all on the retained earnings account
    """
    classification = config.classification
    listed = sorted(
        (a for a in accounts if a.is_active or config.include_inactive),
        key=lambda a: a.code,
    )

    bank_balances = sum_by(
        (r for r in bank_transactions if r.date <= as_of_date),
        lambda r: r.account_code,
        lambda r: r.signed_amount,
    )
    receivables = _open_document_total(
        invoices, config.receivable_open_statuses, as_of_date,
    )
    payables = _open_document_total(
        bills, config.payable_open_statuses, as_of_date,
    )

    def _line(account: AccountInfo, amount: Decimal) -> ReportLine:
        return ReportLine(
            code=account.code,
            name=account.name,
            amount=amount,
            account_type=account.account_type.value,
        )

    asset_lines: list[ReportLine] = []
    for acct in (a for a in listed if a.account_type == AccountType.ASSET):
        if classification.is_bank_account(acct.code):
            amount = bank_balances.get(acct.code, ZERO)
        elif acct.code == classification.receivable_account_code:
            amount = receivables
        else:
            amount = ZERO
        asset_lines.append(_line(acct, amount))

    liability_lines: list[ReportLine] = []
    for acct in (a for a in listed if a.account_type == AccountType.LIABILITY):
        amount = payables if acct.code == classification.payable_account_code else ZERO
        liability_lines.append(_line(acct, amount))

    assets = ReportSection.from_lines(
        "Assets", [l for l in asset_lines if _keep_line(l, config)],
    )
    liabilities = ReportSection.from_lines(
        "Liabilities", [l for l in liability_lines if _keep_line(l, config)],
    )
    residual = assets.total - liabilities.total

    equity_lines: list[ReportLine] = []
    attributed = False
    for acct in (a for a in listed if a.account_type == AccountType.EQUITY):
        if acct.code == classification.retained_earnings_code:
            equity_lines.append(_line(acct, residual))
            attributed = True
        else:
            equity_lines.append(_line(acct, ZERO))
    if not attributed and residual != ZERO:
        # no retained earnings account: carry the residual on a synthetic line
        equity_lines.append(
            ReportLine(
                code=classification.retained_earnings_code,
                name=RETAINED_EARNINGS_NAME,
                amount=residual,
                account_type=AccountType.EQUITY.value,
            )
        )
    equity = ReportSection.from_lines(
        "Equity", [l for l in equity_lines if _keep_line(l, config)],
    )

    total_l_and_e = liabilities.total + equity.total
    return BalanceSheetReport(
        metadata=metadata,
        assets=assets,
        liabilities=liabilities,
        equity=equity,
        total_liabilities_and_equity=total_l_and_e,
        is_balanced=(assets.total == total_l_and_e),
    )


# =========================================================================
# 3. CASH FLOW
# =========================================================================


def build_cash_flow(
    bank_transactions: Sequence[LedgerRow],
    start_date: date,
    end_date: date,
    classifier: CashFlowClassifier,
    metadata: ReportMetadata,
) -> CashFlowReport:
    """
    Build a cash flow statement from bank transactions in range.

    Credits are inflows, debits outflows.  Lines are listed newest first.
    """
    in_period = sorted(
        (r for r in bank_transactions if in_range(r.date, start_date, end_date)),
        key=lambda r: r.date,
        reverse=True,
    )

    grouped: dict[CashFlowActivity, list[CashFlowLine]] = {
        activity: [] for activity in ACTIVITY_ORDER
    }
    for row in in_period:
        grouped[classifier.classify(row)].append(
            CashFlowLine(
                date=row.date,
                description=row.description or "",
                amount=row.signed_amount,
                account_code=row.account_code,
                reference=row.document_number,
            )
        )

    sections = {
        activity: CashFlowSection.from_lines(
            _ACTIVITY_TITLES[activity], activity, grouped[activity]
        )
        for activity in ACTIVITY_ORDER
    }
    operating = sections[CashFlowActivity.OPERATING]
    investing = sections[CashFlowActivity.INVESTING]
    financing = sections[CashFlowActivity.FINANCING]

    return CashFlowReport(
        metadata=metadata,
        operating=operating,
        investing=investing,
        financing=financing,
        net_cash_flow=operating.total + investing.total + financing.total,
    )


# =========================================================================
# 4. AGED RECEIVABLES / PAYABLES
# =========================================================================


def build_aging_report(
    documents: Sequence[DocumentSummary],
    reference_date: date,
    open_statuses: tuple[str, ...],
    metadata: ReportMetadata,
) -> AgingReport:
    """
    Age outstanding documents into the five standard buckets.

    Within a bucket documents are ordered most overdue first, ties broken
    by document number.
    """
    outstanding = [doc for doc in documents if doc.status in open_statuses]
    items = age_documents(documents=outstanding, reference_date=reference_date)

    groups: list[AgingBucketGroup] = []
    for bucket in BUCKET_ORDER:
        in_bucket = sorted(
            (item for item in items if item.bucket == bucket),
            key=lambda item: (-item.days_overdue, item.number),
        )
        groups.append(AgingBucketGroup.from_items(bucket, in_bucket))

    return AgingReport(
        metadata=metadata,
        reference_date=reference_date,
        buckets=tuple(groups),
        total_outstanding=sum((g.total for g in groups), ZERO),
        document_count=sum(g.count for g in groups),
    )


# =========================================================================
# Invariant verification
# =========================================================================


def verify_report(report: object) -> None:
    """
    Run the structural invariant checks that apply to ``report``.

    Raises:
        ComputationDefectError: If a builder produced an inconsistent report.
    """
    where = ""
    metadata = getattr(report, "metadata", None)
    if metadata is not None:
        where = metadata.report_type.value

    if isinstance(report, (ProfitAndLossReport, CashFlowReport)):
        invariants.check_sections(report.sections, where)
    elif isinstance(report, BalanceSheetReport):
        invariants.check_sections(report.sections, where)
        invariants.check_balance_equation(
            report.assets.total, report.liabilities.total, report.equity.total, where,
        )
    elif isinstance(report, AgingReport):
        invariants.check_aging_partition(report, where)
    elif isinstance(report, AnalyticsReport):
        return
    else:
        raise TypeError(f"No invariants defined for {type(report).__name__}")


# =========================================================================
# Rendering
# =========================================================================


def render_to_dict(obj: object) -> dict | list | str | int | float | bool | None:
    """
    Convert any report dataclass to a plain dict for JSON serialization.

    Handles:
    - Decimal -> str (preserving precision)
    - UUID -> str
    - date -> ISO format string
    - Enum -> .value
    - Nested frozen dataclasses -> nested dicts
    - Tuples -> lists
    - None preserved
    """
    if obj is None:
        return None
    if isinstance(obj, Decimal):
        return str(obj)
    if isinstance(obj, UUID):
        return str(obj)
    if isinstance(obj, date):
        return obj.isoformat()
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, (list, tuple)):
        return [render_to_dict(item) for item in obj]
    if isinstance(obj, dict):
        return {str(k): render_to_dict(v) for k, v in obj.items()}
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return {
            f.name: render_to_dict(getattr(obj, f.name))
            for f in dataclasses.fields(obj)
        }
    if isinstance(obj, (str, int, float, bool)):
        return obj
    return str(obj)
