"""
Reporting Module Service (``books_modules.reporting.service``).

Responsibility
--------------
Orchestrates report generation -- profit and loss, balance sheet, cash
flow, aged receivables, aged payables and the analytics dashboard -- by
bridging a ``LedgerReader`` (normally ``LedgerSelector``) to the pure
functions in ``statements.py`` and ``analytics.py``.  This is a
**read-only** service.

Architecture position
---------------------
**Modules layer** -- thin glue.  ``ReportingService`` is the sole public
entry point for statement generation.  Constructor: ``reader`` + ``clock``
+ ``config`` (``from_session`` wires a ``LedgerSelector``).

Invariants enforced
-------------------
* Parameters are validated before any read is issued.
* Read-only -- the reader never mutates the ledger.
* All monetary amounts use ``Decimal`` -- NEVER ``float``.

Failure modes
-------------
* Invalid parameters (missing organization, bad date, start after end)
  -> ``InvalidParametersError`` subclass, raised before any query.
* Reader failure -> ``DataAccessError`` propagates unchanged; no partial
  or empty report is ever returned in its place.
* ``verify_invariants`` enabled and a builder regresses
  -> ``ComputationDefectError``.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date
from typing import Any

from sqlalchemy.orm import Session

from books_engines.cash_flow import CashFlowClassifier
from books_kernel.domain.clock import Clock, SystemClock
from books_kernel.domain.dates import coerce_date, coerce_date_range
from books_kernel.domain.ledger import LedgerReader
from books_kernel.exceptions import InvalidDateError, MissingParameterError
from books_kernel.logging_config import LogContext, get_logger
from books_kernel.selectors.ledger_selector import LedgerSelector
from books_modules.reporting.analytics import build_analytics, resolve_date_range
from books_modules.reporting.config import ReportingConfig
from books_modules.reporting.models import (
    AgingReport,
    AnalyticsReport,
    BalanceSheetReport,
    CashFlowReport,
    ProfitAndLossReport,
    ReportMetadata,
    ReportType,
)
from books_modules.reporting.statements import (
    build_aging_report,
    build_balance_sheet,
    build_cash_flow,
    build_profit_and_loss,
    render_to_dict,
    verify_report,
)

logger = get_logger("modules.reporting.service")

CUSTOMER_CONTACT_TYPES: frozenset[str] = frozenset({"customer", "both"})


def _require_organization(organization_id: Any) -> str:
    if organization_id is None or not str(organization_id).strip():
        raise MissingParameterError("organization_id")
    return str(organization_id)


class ReportingService:
    """
    Financial report generation service.

    Contract
    --------
    * Every public method returns a typed, frozen report DTO.
    * All methods are **read-only**.

    Guarantees
    ----------
    * Report generation delegates to pure functions in ``statements.py``
      and ``analytics.py``; no financial logic lives in this class.
    * Clock is injectable for deterministic testing; it is read only for
      ``generated_at``, the aging default reference date and analytics
      presets.
    * Each call is independent: no caching, no shared mutable state.

    Non-goals
    ---------
    * Does NOT retry failed reads.
    * Does NOT render CSV, PDF or Excel.
    """

    def __init__(
        self,
        reader: LedgerReader,
        clock: Clock | None = None,
        config: ReportingConfig | None = None,
        classifier: CashFlowClassifier | None = None,
    ):
        self._reader = reader
        self._clock = clock or SystemClock()
        self._config = config or ReportingConfig.with_defaults()
        self._classifier = classifier or self._config.cash_flow_classifier()

        logger.info(
            "reporting_service_initialized",
            extra={
                "entity_name": self._config.entity_name,
                "default_currency": self._config.default_currency,
                "verify_invariants": self._config.verify_invariants,
            },
        )

    @classmethod
    def from_session(
        cls,
        session: Session,
        clock: Clock | None = None,
        config: ReportingConfig | None = None,
    ) -> ReportingService:
        """Service reading through a ``LedgerSelector`` on ``session``."""
        return cls(LedgerSelector(session), clock=clock, config=config)

    @property
    def config(self) -> ReportingConfig:
        return self._config

    # =========================================================================
    # Internal helpers
    # =========================================================================

    def _build_metadata(
        self,
        report_type: ReportType,
        organization_id: str,
        as_of_date: date | None = None,
        period_start: date | None = None,
        period_end: date | None = None,
    ) -> ReportMetadata:
        """Build report metadata with injected clock timestamp."""
        return ReportMetadata(
            report_type=report_type,
            entity_name=self._config.entity_name,
            currency=self._config.default_currency,
            generated_at=self._clock.now().isoformat(),
            organization_id=organization_id,
            period_start=period_start,
            period_end=period_end,
            as_of_date=as_of_date,
        )

    def _finish(self, report: Any) -> None:
        if self._config.verify_invariants:
            verify_report(report)

    # =========================================================================
    # Public API
    # =========================================================================

    def build_profit_loss(
        self,
        organization_id: str,
        start_date: date | str,
        end_date: date | str,
    ) -> ProfitAndLossReport:
        """
        Generate a profit and loss statement.

        Args:
            organization_id: Tenant whose ledger is read.
            start_date: First day of the period (inclusive).
            end_date: Last day of the period (inclusive).

        Raises:
            InvalidParametersError: Before any read, for a missing
                organization or an invalid date range.
            DataAccessError: If the ledger cannot be read.
        """
        org = _require_organization(organization_id)
        start, end = coerce_date_range(start_date, end_date)

        with LogContext.bind(
            organization_id=org, report_type=ReportType.PROFIT_AND_LOSS.value,
        ):
            invoice_lines = self._reader.list_invoice_lines(org, start=start, end=end)
            bill_lines = self._reader.list_bill_lines(org, start=start, end=end)

            metadata = self._build_metadata(
                ReportType.PROFIT_AND_LOSS, org, period_start=start, period_end=end,
            )
            report = build_profit_and_loss(
                invoice_lines, bill_lines, start, end, self._config, metadata,
            )
            self._finish(report)

            logger.info(
                "profit_and_loss_generated",
                extra={
                    "period_start": start.isoformat(),
                    "period_end": end.isoformat(),
                    "total_revenue": str(report.revenue.total),
                    "total_expenses": str(report.expenses.total),
                    "net_profit": str(report.net_profit),
                },
            )
        return report

    def build_balance_sheet(
        self,
        organization_id: str,
        as_of_date: date | str,
    ) -> BalanceSheetReport:
        """
        Generate a balance sheet as of a date.

        Returns:
            BalanceSheetReport; equity is the residual of assets minus
            liabilities, so the report always balances.
        """
        org = _require_organization(organization_id)
        as_of = coerce_date(as_of_date, "as_of_date")

        with LogContext.bind(
            organization_id=org, report_type=ReportType.BALANCE_SHEET.value,
        ):
            accounts = self._reader.list_accounts(
                org, active_only=not self._config.include_inactive,
            )
            bank_transactions = self._reader.list_bank_transactions(org, end=as_of)
            invoices = self._reader.list_invoices(org)
            bills = self._reader.list_bills(org)

            metadata = self._build_metadata(
                ReportType.BALANCE_SHEET, org, as_of_date=as_of,
            )
            report = build_balance_sheet(
                accounts, bank_transactions, invoices, bills, as_of,
                self._config, metadata,
            )
            self._finish(report)

            logger.info(
                "balance_sheet_generated",
                extra={
                    "as_of_date": as_of.isoformat(),
                    "account_count": len(accounts),
                    "total_assets": str(report.assets.total),
                    "total_l_and_e": str(report.total_liabilities_and_equity),
                    "is_balanced": report.is_balanced,
                },
            )
        return report

    def build_cash_flow(
        self,
        organization_id: str,
        start_date: date | str,
        end_date: date | str,
    ) -> CashFlowReport:
        """Generate a cash flow statement from bank transactions in range."""
        org = _require_organization(organization_id)
        start, end = coerce_date_range(start_date, end_date)

        with LogContext.bind(
            organization_id=org, report_type=ReportType.CASH_FLOW.value,
        ):
            transactions = self._reader.list_bank_transactions(
                org, start=start, end=end,
            )
            metadata = self._build_metadata(
                ReportType.CASH_FLOW, org, period_start=start, period_end=end,
            )
            report = build_cash_flow(
                transactions, start, end, self._classifier, metadata,
            )
            self._finish(report)

            logger.info(
                "cash_flow_generated",
                extra={
                    "period_start": start.isoformat(),
                    "period_end": end.isoformat(),
                    "transaction_count": len(transactions),
                    "net_cash_flow": str(report.net_cash_flow),
                },
            )
        return report

    def build_aged_receivables(
        self,
        organization_id: str,
        reference_date: date | str | None = None,
    ) -> AgingReport:
        """Age open invoices; ``reference_date`` defaults to today."""
        return self._build_aging(
            ReportType.AGED_RECEIVABLES, organization_id, reference_date,
        )

    def build_aged_payables(
        self,
        organization_id: str,
        reference_date: date | str | None = None,
    ) -> AgingReport:
        """Age open bills; ``reference_date`` defaults to today."""
        return self._build_aging(
            ReportType.AGED_PAYABLES, organization_id, reference_date,
        )

    def _build_aging(
        self,
        report_type: ReportType,
        organization_id: str,
        reference_date: date | str | None,
    ) -> AgingReport:
        org = _require_organization(organization_id)
        if reference_date is None:
            reference = self._clock.today()
        else:
            reference = coerce_date(reference_date, "reference_date")

        with LogContext.bind(organization_id=org, report_type=report_type.value):
            if report_type == ReportType.AGED_RECEIVABLES:
                documents = self._reader.list_invoices(org)
                statuses = self._config.receivable_open_statuses
            else:
                documents = self._reader.list_bills(org)
                statuses = self._config.payable_open_statuses

            metadata = self._build_metadata(report_type, org, as_of_date=reference)
            report = build_aging_report(documents, reference, statuses, metadata)
            self._finish(report)

            logger.info(
                "aging_report_generated",
                extra={
                    "reference_date": reference.isoformat(),
                    "document_count": report.document_count,
                    "total_outstanding": str(report.total_outstanding),
                },
            )
        return report

    def build_analytics(
        self,
        organization_id: str,
        preset_or_range: str | Sequence[date | str] | None = None,
    ) -> AnalyticsReport:
        """
        Generate the analytics dashboard.

        Args:
            organization_id: Tenant whose ledger is read.
            preset_or_range: A preset name (``last7days``, ``last30days``,
                ``last90days``, ``yearToDate``) resolved against today, or an
                explicit ``(start_date, end_date)`` pair.  None means the
                last 30 days.
        """
        org = _require_organization(organization_id)
        preset: str | None = None
        if preset_or_range is None or isinstance(preset_or_range, str):
            preset = preset_or_range
            start, end = resolve_date_range(preset, self._clock.today())
        else:
            bounds = tuple(preset_or_range)
            if len(bounds) != 2:
                raise InvalidDateError("preset_or_range", preset_or_range)
            start, end = coerce_date_range(bounds[0], bounds[1])

        with LogContext.bind(
            organization_id=org, report_type=ReportType.ANALYTICS.value,
        ):
            invoice_lines = self._reader.list_invoice_lines(org, start=start, end=end)
            bill_lines = self._reader.list_bill_lines(org, start=start, end=end)
            invoices = self._reader.list_invoices(org)
            bills = self._reader.list_bills(org)
            transactions = self._reader.list_bank_transactions(
                org, start=start, end=end,
            )
            contacts = self._reader.fetch_source(org, "contacts")
            customer_count = sum(
                1 for c in contacts if c.get("type") in CUSTOMER_CONTACT_TYPES
            )

            profit_and_loss = build_profit_and_loss(
                invoice_lines, bill_lines, start, end, self._config,
                self._build_metadata(
                    ReportType.PROFIT_AND_LOSS, org, period_start=start, period_end=end,
                ),
            )
            metadata = self._build_metadata(
                ReportType.ANALYTICS, org, period_start=start, period_end=end,
            )
            report = build_analytics(
                invoices, bills, transactions, profit_and_loss, customer_count,
                start, end, metadata, preset=preset,
            )
            self._finish(profit_and_loss)

            logger.info(
                "analytics_generated",
                extra={
                    "period_start": start.isoformat(),
                    "period_end": end.isoformat(),
                    "preset": preset,
                    "point_count": len(report.time_series),
                },
            )
        return report

    # =========================================================================
    # Rendering
    # =========================================================================

    @staticmethod
    def to_dict(report: Any) -> dict:
        """Convert any report to a JSON-ready dict."""
        return render_to_dict(report)
