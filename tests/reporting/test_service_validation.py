"""
Parameter validation and failure propagation in ReportingService.

Uses an in-memory reader that records calls, so each test can assert
that bad input is rejected before any read is issued and that read
failures surface unchanged.
"""

from dataclasses import replace
from datetime import date
from decimal import Decimal

import pytest

from books_kernel.domain.clock import DeterministicClock
from books_kernel.domain.ledger import AccountInfo, AccountType
from books_kernel.exceptions import (
    ComputationDefectError,
    DataAccessError,
    InvalidDateError,
    InvalidDateRangeError,
    InvalidParametersError,
    LedgerReadError,
    MissingParameterError,
)
from books_modules.reporting.config import ReportingConfig
from books_modules.reporting.models import ReportSection
from books_modules.reporting.service import ReportingService

ORG = "org-acme"


@pytest.fixture
def service(memory_reader):
    return ReportingService(memory_reader, clock=DeterministicClock())


class TestParameterValidation:

    @pytest.mark.parametrize("org", [None, "", "   "])
    def test_missing_organization(self, service, memory_reader, org):
        with pytest.raises(MissingParameterError) as exc_info:
            service.build_profit_loss(org, date(2024, 1, 1), date(2024, 1, 31))
        assert exc_info.value.parameter == "organization_id"
        assert memory_reader.calls == []

    def test_inverted_range(self, service, memory_reader):
        with pytest.raises(InvalidDateRangeError):
            service.build_profit_loss(ORG, date(2024, 2, 1), date(2024, 1, 1))
        with pytest.raises(InvalidDateRangeError):
            service.build_cash_flow(ORG, "2024-02-01", "2024-01-01")
        assert memory_reader.calls == []

    def test_missing_dates(self, service, memory_reader):
        with pytest.raises(MissingParameterError) as exc_info:
            service.build_profit_loss(ORG, None, date(2024, 1, 31))
        assert exc_info.value.parameter == "start_date"

        with pytest.raises(MissingParameterError) as exc_info:
            service.build_balance_sheet(ORG, None)
        assert exc_info.value.parameter == "as_of_date"
        assert memory_reader.calls == []

    def test_malformed_dates(self, service, memory_reader):
        with pytest.raises(InvalidDateError):
            service.build_balance_sheet(ORG, "30/06/2024")
        with pytest.raises(InvalidDateError):
            service.build_aged_payables(ORG, "soon")
        with pytest.raises(InvalidParametersError):
            service.build_analytics(ORG, (date(2024, 1, 1),))
        assert memory_reader.calls == []

    def test_single_day_range_allowed(self, service, memory_reader):
        report = service.build_profit_loss(ORG, "2024-01-01", "2024-01-01")
        assert report.net_profit == Decimal("0")
        assert memory_reader.calls == ["list_invoice_lines", "list_bill_lines"]


class TestReadFailures:
    """A failed read is never turned into an empty report."""

    @pytest.mark.parametrize(
        "build",
        [
            lambda s: s.build_profit_loss(ORG, "2024-01-01", "2024-01-31"),
            lambda s: s.build_balance_sheet(ORG, "2024-06-30"),
            lambda s: s.build_cash_flow(ORG, "2024-01-01", "2024-01-31"),
            lambda s: s.build_aged_receivables(ORG),
            lambda s: s.build_aged_payables(ORG, "2024-06-30"),
            lambda s: s.build_analytics(ORG, "last7days"),
        ],
    )
    def test_failure_propagates(self, failing_reader, build):
        service = ReportingService(failing_reader, clock=DeterministicClock())

        with pytest.raises(DataAccessError) as exc_info:
            build(service)

        assert isinstance(exc_info.value, LedgerReadError)
        assert len(failing_reader.calls) == 1

    def test_bad_input_wins_over_read_failure(self, failing_reader):
        service = ReportingService(failing_reader, clock=DeterministicClock())

        with pytest.raises(InvalidParametersError):
            service.build_cash_flow(ORG, "2024-03-01", "2024-01-01")
        assert failing_reader.calls == []


class TestInvariantVerification:

    def test_defect_raised_when_enabled(self, memory_reader, monkeypatch):
        import books_modules.reporting.service as service_module

        real_builder = service_module.build_balance_sheet

        def broken_builder(*args, **kwargs):
            report = real_builder(*args, **kwargs)
            bad_equity = ReportSection("Equity", report.equity.lines, Decimal("1"))
            return replace(report, equity=bad_equity)

        monkeypatch.setattr(service_module, "build_balance_sheet", broken_builder)
        memory_reader.accounts = [AccountInfo("1100", "Bank", AccountType.ASSET)]

        strict = ReportingService(
            memory_reader, DeterministicClock(), ReportingConfig(verify_invariants=True),
        )
        lenient = ReportingService(memory_reader, DeterministicClock())

        with pytest.raises(ComputationDefectError):
            strict.build_balance_sheet(ORG, "2024-06-30")
        assert lenient.build_balance_sheet(ORG, "2024-06-30").equity.total == Decimal("1")


class TestConfigurationWiring:

    def test_inactive_accounts_requested_when_configured(self, memory_reader):
        memory_reader.accounts = [
            AccountInfo("1100", "Bank", AccountType.ASSET),
            AccountInfo("1150", "Old Bank", AccountType.ASSET, is_active=False),
        ]
        service = ReportingService(
            memory_reader, DeterministicClock(), ReportingConfig(include_inactive=True),
        )

        report = service.build_balance_sheet(ORG, "2024-06-30")

        assert [l.code for l in report.assets.lines] == ["1100", "1150"]

    def test_custom_classifier(self, memory_reader):
        from books_engines.cash_flow import CashFlowActivity

        class AllInvesting:
            def classify(self, row):
                return CashFlowActivity.INVESTING

        service = ReportingService(
            memory_reader, DeterministicClock(), classifier=AllInvesting(),
        )
        report = service.build_cash_flow(ORG, "2024-01-01", "2024-01-31")
        assert report.investing.lines == ()
        assert service.config.entity_name == "Company"
