"""
Integration tests for ReportingService over a seeded SQLite ledger.

Each report is built end to end: LedgerSelector queries, pure builders,
invariant verification (enabled in the fixture config) and logging.
"""

from datetime import date
from decimal import Decimal

import pytest

from books_engines.aging import AgingBucket
from books_modules.reporting.models import ReportType

ORG = "org-acme"


@pytest.fixture
def chart(ledger):
    return {
        "bank": ledger.account("1100", "Operating Account", "asset"),
        "ar": ledger.account("1300", "Accounts Receivable", "asset"),
        "ap": ledger.account("2000", "Accounts Payable", "liability"),
        "re": ledger.account("3100", "Retained Earnings", "equity"),
        "sales": ledger.account("4000", "Sales", "revenue"),
        "rent": ledger.account("6000", "Rent", "expense"),
    }


class TestProfitAndLoss:

    def test_revenue_and_expense_scenario(self, reporting_service, ledger, chart):
        ledger.invoice("INV-1", date(2024, 1, 10), [(chart["sales"], "1", "1000.00", "0")])
        ledger.bill("BILL-1", date(2024, 1, 12), [(chart["rent"], "1", "400.00", "0")])

        report = reporting_service.build_profit_loss(ORG, date(2024, 1, 1), date(2024, 1, 31))

        assert report.revenue.total == Decimal("1000")
        assert report.expenses.total == Decimal("400")
        assert report.net_profit == Decimal("600")
        assert report.profit_margin == Decimal("60")
        assert report.metadata.report_type == ReportType.PROFIT_AND_LOSS
        assert report.metadata.entity_name == "Acme Ltd"
        assert report.metadata.generated_at == "2024-06-30T12:00:00+00:00"

    def test_drafts_tax_and_other_tenants(self, reporting_service, ledger, other_ledger, chart):
        ledger.invoice("INV-1", date(2024, 1, 10), [(chart["sales"], "2", "100.00", "20.00")])
        ledger.invoice(
            "INV-2", date(2024, 1, 11), [(chart["sales"], "1", "5000.00", "0")], status="draft",
        )
        foreign = other_ledger.account("4000", "Sales", "revenue")
        other_ledger.invoice("X-1", date(2024, 1, 10), [(foreign, "1", "777.00", "0")])

        report = reporting_service.build_profit_loss(ORG, "2024-01-01", "2024-01-31")

        assert report.revenue.total == Decimal("220")
        assert [l.code for l in report.revenue.lines] == ["4000"]

    def test_logs_generation(self, reporting_service, ledger, chart, captured_logs):
        reporting_service.build_profit_loss(ORG, date(2024, 1, 1), date(2024, 1, 31))

        record = next(r for r in captured_logs() if r["message"] == "profit_and_loss_generated")
        assert record["organization_id"] == ORG
        assert record["report_type"] == "profit_and_loss"
        assert record["net_profit"] == "0"


class TestBalanceSheet:

    def test_empty_ledger(self, reporting_service):
        report = reporting_service.build_balance_sheet(ORG, date(2024, 6, 30))

        assert report.assets.total == Decimal("0")
        assert report.liabilities.total == Decimal("0")
        assert report.equity.total == Decimal("0")
        assert report.is_balanced

    def test_balances_from_bank_and_documents(self, reporting_service, ledger, chart):
        ledger.bank_transaction(chart["bank"], date(2024, 1, 5), "credit", "2500.00", "Invoice INV-0")
        ledger.bank_transaction(chart["bank"], date(2024, 2, 5), "debit", "500.00", "Rent payment")
        ledger.bank_transaction(chart["bank"], date(2024, 7, 5), "credit", "9000.00", "Loan")
        ledger.invoice(
            "INV-1", date(2024, 3, 1), [(chart["sales"], "1", "800.00", "80.00")], status="sent",
        )
        ledger.invoice(
            "INV-2", date(2024, 3, 2), [(chart["sales"], "1", "300.00", "0")], status="paid",
        )
        ledger.bill(
            "BILL-1", date(2024, 3, 3), [(chart["rent"], "1", "600.00", "0")], status="overdue",
        )
        ledger.account("1900", "Closed Account", "asset", is_active=False)

        report = reporting_service.build_balance_sheet(ORG, "2024-06-30")

        assets = {l.code: l.amount for l in report.assets.lines}
        assert assets == {"1100": Decimal("2000"), "1300": Decimal("880")}
        assert report.liabilities.total == Decimal("600")
        assert {l.code: l.amount for l in report.equity.lines} == {"3100": Decimal("2280")}
        assert report.total_liabilities_and_equity == Decimal("2880")
        assert report.is_balanced
        assert report.metadata.as_of_date == date(2024, 6, 30)


class TestCashFlow:

    def test_activities(self, reporting_service, ledger, chart):
        ledger.bank_transaction(chart["bank"], date(2024, 1, 5), "credit", "1200.00", "Invoice INV-1 paid")
        ledger.bank_transaction(chart["bank"], date(2024, 1, 9), "credit", "10000.00", "Bank loan")
        ledger.bank_transaction(chart["bank"], date(2024, 1, 20), "debit", "3000.00", "Equipment")
        ledger.bank_transaction(chart["bank"], date(2024, 2, 2), "debit", "50.00", "Fees")

        report = reporting_service.build_cash_flow(ORG, date(2024, 1, 1), date(2024, 1, 31))

        assert report.operating.total == Decimal("1200")
        assert report.financing.total == Decimal("10000")
        assert report.investing.total == Decimal("-3000")
        assert report.net_cash_flow == Decimal("8200")
        assert report.investing.lines[0].description == "Equipment"


class TestAging:

    def test_receivables_scenario(self, reporting_service, ledger, chart):
        customer = ledger.contact("Wayne Enterprises")
        ledger.invoice(
            "INV-1", date(2024, 5, 1), [(chart["sales"], "1", "500.00", "0")],
            status="sent", due_date=date(2024, 6, 1), contact=customer,
        )

        report = reporting_service.build_aged_receivables(ORG, date(2024, 6, 30))

        bucket = report.bucket(AgingBucket.DAYS_1_30)
        assert [d.number for d in bucket.documents] == ["INV-1"]
        assert bucket.documents[0].days_overdue == 29
        assert bucket.documents[0].contact_name == "Wayne Enterprises"
        assert report.total_outstanding == Decimal("500")

    def test_reference_date_defaults_to_clock_today(
        self, reporting_service, ledger, chart, deterministic_clock,
    ):
        ledger.invoice(
            "INV-1", date(2024, 1, 1), [(chart["sales"], "1", "10.00", "0")],
            status="overdue", due_date=date(2024, 1, 31),
        )

        report = reporting_service.build_aged_receivables(ORG)

        assert report.reference_date == deterministic_clock.today()
        assert report.bucket(AgingBucket.OVER_90).count == 1

    def test_payables_use_bill_statuses(self, reporting_service, ledger, chart):
        ledger.bill(
            "BILL-1", date(2024, 6, 1), [(chart["rent"], "1", "90.00", "0")],
            status="approved", due_date=date(2024, 7, 1),
        )
        ledger.bill(
            "BILL-2", date(2024, 6, 1), [(chart["rent"], "1", "60.00", "0")],
            status="draft", due_date=date(2024, 6, 1),
        )
        ledger.invoice(
            "INV-1", date(2024, 6, 1), [(chart["sales"], "1", "5.00", "0")], status="sent",
        )

        report = reporting_service.build_aged_payables(ORG, date(2024, 6, 30))

        assert report.metadata.report_type == ReportType.AGED_PAYABLES
        assert report.bucket(AgingBucket.CURRENT).documents[0].number == "BILL-1"
        assert report.document_count == 1
        assert report.total_outstanding == Decimal("90")


class TestAnalytics:

    def test_year_to_date(self, reporting_service, ledger, chart):
        ledger.contact("Customer A", "customer")
        ledger.contact("Both B", "both")
        ledger.contact("Supplier C", "supplier")
        ledger.invoice(
            "INV-1", date(2024, 6, 29), [(chart["sales"], "1", "1000.00", "0")], status="paid",
        )
        ledger.bill(
            "BILL-1", date(2024, 6, 29), [(chart["rent"], "1", "250.00", "0")], status="paid",
        )
        ledger.bank_transaction(chart["bank"], date(2024, 6, 30), "credit", "1000.00", "Invoice")

        report = reporting_service.build_analytics(ORG, "yearToDate")

        assert report.start_date == date(2024, 1, 1)
        assert report.end_date == date(2024, 6, 30)
        assert len(report.time_series) == 182
        assert report.metrics.customer_count == 2
        assert report.metrics.total_revenue == Decimal("1000")
        assert report.metrics.net_profit == Decimal("750")
        assert report.metrics.average_invoice_value == Decimal("1000")
        assert report.time_series[-1].cumulative_net_cash == Decimal("1000")
        assert report.time_series[-2].revenue == Decimal("1000")

    def test_explicit_range(self, reporting_service):
        report = reporting_service.build_analytics(ORG, ("2024-03-01", "2024-03-03"))

        assert report.preset is None
        assert [p.label for p in report.time_series] == ["Mar 1", "Mar 2", "Mar 3"]


class TestRendering:

    def test_to_dict(self, reporting_service):
        report = reporting_service.build_balance_sheet(ORG, date(2024, 6, 30))

        data = reporting_service.to_dict(report)

        assert data["metadata"]["as_of_date"] == "2024-06-30"
        assert data["assets"]["total"] == "0"
        assert data["is_balanced"] is True
