"""
Financial Reporting Module (``books_modules.reporting``).

Responsibility
--------------
Read-only module that generates the standard small-business statements
from ledger rows: profit and loss, balance sheet, cash flow, aged
receivables, aged payables, plus the analytics dashboard.

Architecture position
---------------------
**Modules layer**.  Statement generation is implemented as pure functions
(``statements``, ``analytics``); ``ReportingService`` only validates
parameters, reads through a ``LedgerReader`` and delegates.

Invariants enforced
-------------------
* Every section total equals the sum of its lines (by construction).
* Balance sheet: assets == liabilities + equity (equity is the residual).
* Aging buckets partition the outstanding documents.

Failure modes
-------------
* Bad input -> ``InvalidParametersError`` before any read.
* Read failure -> ``DataAccessError``; never an empty report.
"""

from books_modules.reporting.config import AccountClassification, ReportingConfig
from books_modules.reporting.models import (
    AgingBucketGroup,
    AgingReport,
    AnalyticsReport,
    BalanceSheetReport,
    CashFlowLine,
    CashFlowReport,
    CashFlowSection,
    KeyMetrics,
    ProfitAndLossReport,
    ReportLine,
    ReportMetadata,
    ReportSection,
    ReportType,
    TimeSeriesPoint,
)
from books_modules.reporting.service import ReportingService
from books_modules.reporting.statements import render_to_dict, verify_report

__all__ = [
    # Service
    "ReportingService",
    # Config
    "AccountClassification",
    "ReportingConfig",
    # Models
    "ReportType",
    "ReportMetadata",
    "ReportLine",
    "ReportSection",
    "ProfitAndLossReport",
    "BalanceSheetReport",
    "CashFlowLine",
    "CashFlowSection",
    "CashFlowReport",
    "AgingBucketGroup",
    "AgingReport",
    "KeyMetrics",
    "TimeSeriesPoint",
    "AnalyticsReport",
    # Rendering
    "render_to_dict",
    "verify_report",
]
