"""
Pytest fixtures for the reporting core test suite.

Provides:
- In-memory SQLite database sessions (one fresh schema per test)
- A ledger factory for seeding accounts, contacts, documents and bank
  transactions
- Deterministic clock and structured log capture
- An in-memory LedgerReader for service tests that must not touch SQL
"""

import json
import logging
from datetime import date
from decimal import Decimal
from io import StringIO
from typing import Any, Generator

import pytest
from sqlalchemy.orm import Session

from books_kernel.db.engine import (
    create_tables,
    drop_tables,
    get_session,
    init_engine_from_url,
    reset_engine,
)
from books_kernel.domain.clock import DeterministicClock
from books_kernel.domain.ledger import AccountInfo, DocumentSummary, LedgerRow
from books_kernel.exceptions import LedgerReadError
from books_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from books_kernel.models import (
    Account,
    BankTransaction,
    Bill,
    BillLineItem,
    Contact,
    Invoice,
    InvoiceLineItem,
)
from books_kernel.selectors.ledger_selector import LedgerSelector
from books_modules.reporting.config import ReportingConfig
from books_modules.reporting.service import ReportingService

ORG_ID = "org-acme"
OTHER_ORG_ID = "org-globex"


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture books_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, reporting_service):
            reporting_service.build_cash_flow(...)
            logs = captured_logs()
            assert any(r["message"] == "cash_flow_generated" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("books_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Database
# =============================================================================


@pytest.fixture
def db_engine():
    """Fresh in-memory SQLite schema for one test."""
    engine = init_engine_from_url("sqlite:///:memory:")
    create_tables()
    yield engine
    drop_tables()
    reset_engine()


@pytest.fixture
def session(db_engine) -> Generator[Session, None, None]:
    session = get_session()
    yield session
    session.rollback()
    session.close()


@pytest.fixture
def deterministic_clock() -> DeterministicClock:
    """Clock fixed at 2024-06-30 12:00 UTC."""
    return DeterministicClock()


class LedgerFactory:
    """Seeds ledger rows for one organization and flushes after each."""

    def __init__(self, session: Session, organization_id: str):
        self.session = session
        self.organization_id = organization_id

    def _add(self, obj: Any) -> Any:
        self.session.add(obj)
        self.session.flush()
        return obj

    def account(
        self,
        code: str,
        name: str,
        account_type: str,
        is_active: bool = True,
        description: str | None = None,
    ) -> Account:
        return self._add(
            Account(
                organization_id=self.organization_id,
                code=code,
                name=name,
                account_type=account_type,
                is_active=is_active,
                description=description,
            )
        )

    def contact(
        self,
        name: str,
        contact_type: str = "customer",
        email: str | None = None,
    ) -> Contact:
        return self._add(
            Contact(
                organization_id=self.organization_id,
                name=name,
                contact_type=contact_type,
                email=email,
            )
        )

    def invoice(
        self,
        number: str,
        issue_date: date,
        lines: list[tuple[Account | None, str, str, str]],
        status: str = "sent",
        due_date: date | None = None,
        contact: Contact | None = None,
    ) -> Invoice:
        """``lines`` holds ``(account, quantity, unit_price, tax_amount)``."""
        invoice = Invoice(
            organization_id=self.organization_id,
            invoice_number=number,
            issue_date=issue_date,
            due_date=due_date,
            status=status,
            contact_id=contact.id if contact else None,
        )
        invoice.lines = [
            InvoiceLineItem(
                account_id=account.id if account else None,
                description=f"{number} line {i}",
                quantity=Decimal(qty),
                unit_price=Decimal(price),
                tax_amount=Decimal(tax),
            )
            for i, (account, qty, price, tax) in enumerate(lines, start=1)
        ]
        return self._add(invoice)

    def bill(
        self,
        number: str,
        issue_date: date,
        lines: list[tuple[Account | None, str, str, str]],
        status: str = "approved",
        due_date: date | None = None,
        contact: Contact | None = None,
    ) -> Bill:
        bill = Bill(
            organization_id=self.organization_id,
            bill_number=number,
            issue_date=issue_date,
            due_date=due_date,
            status=status,
            contact_id=contact.id if contact else None,
        )
        bill.lines = [
            BillLineItem(
                account_id=account.id if account else None,
                description=f"{number} line {i}",
                quantity=Decimal(qty),
                unit_price=Decimal(price),
                tax_amount=Decimal(tax),
            )
            for i, (account, qty, price, tax) in enumerate(lines, start=1)
        ]
        return self._add(bill)

    def bank_transaction(
        self,
        bank_account: Account,
        transaction_date: date,
        transaction_type: str,
        amount: str,
        description: str | None = None,
        reference: str | None = None,
    ) -> BankTransaction:
        return self._add(
            BankTransaction(
                organization_id=self.organization_id,
                bank_account_id=bank_account.id,
                transaction_date=transaction_date,
                transaction_type=transaction_type,
                amount=Decimal(amount),
                description=description,
                reference=reference,
            )
        )


@pytest.fixture
def ledger(session) -> LedgerFactory:
    return LedgerFactory(session, ORG_ID)


@pytest.fixture
def other_ledger(session) -> LedgerFactory:
    """Second tenant in the same database."""
    return LedgerFactory(session, OTHER_ORG_ID)


@pytest.fixture
def selector(session) -> LedgerSelector:
    return LedgerSelector(session)


@pytest.fixture
def reporting_config() -> ReportingConfig:
    return ReportingConfig(entity_name="Acme Ltd", verify_invariants=True)


@pytest.fixture
def reporting_service(session, deterministic_clock, reporting_config) -> ReportingService:
    return ReportingService.from_session(
        session, clock=deterministic_clock, config=reporting_config,
    )


# =============================================================================
# In-memory reader
# =============================================================================


class InMemoryLedgerReader:
    """
    ``LedgerReader`` over plain lists.

    Records every call in ``calls`` so tests can assert that validation
    happens before any read.  ``fail_with`` makes every read raise.
    """

    def __init__(
        self,
        accounts: list[AccountInfo] | None = None,
        invoice_lines: list[LedgerRow] | None = None,
        bill_lines: list[LedgerRow] | None = None,
        bank_transactions: list[LedgerRow] | None = None,
        invoices: list[DocumentSummary] | None = None,
        bills: list[DocumentSummary] | None = None,
        sources: dict[str, list[dict[str, Any]]] | None = None,
        fail_with: Exception | None = None,
    ):
        self.accounts = accounts or []
        self.invoice_lines = invoice_lines or []
        self.bill_lines = bill_lines or []
        self.bank_transactions = bank_transactions or []
        self.invoices = invoices or []
        self.bills = bills or []
        self.sources = sources or {}
        self.fail_with = fail_with
        self.calls: list[str] = []

    def _read(self, name: str) -> None:
        self.calls.append(name)
        if self.fail_with is not None:
            raise self.fail_with

    @staticmethod
    def _window(rows, start, end):
        return [
            r for r in rows
            if (start is None or r.date >= start) and (end is None or r.date <= end)
        ]

    def list_accounts(self, organization_id, *, active_only=False):
        self._read("list_accounts")
        return [a for a in self.accounts if a.is_active or not active_only]

    def list_invoice_lines(self, organization_id, *, start=None, end=None):
        self._read("list_invoice_lines")
        return self._window(self.invoice_lines, start, end)

    def list_bill_lines(self, organization_id, *, start=None, end=None):
        self._read("list_bill_lines")
        return self._window(self.bill_lines, start, end)

    def list_bank_transactions(self, organization_id, *, start=None, end=None):
        self._read("list_bank_transactions")
        return self._window(self.bank_transactions, start, end)

    def list_invoices(self, organization_id):
        self._read("list_invoices")
        return list(self.invoices)

    def list_bills(self, organization_id):
        self._read("list_bills")
        return list(self.bills)

    def fetch_source(self, organization_id, source):
        self._read(f"fetch_source:{source}")
        return list(self.sources.get(source, []))


@pytest.fixture
def memory_reader() -> InMemoryLedgerReader:
    return InMemoryLedgerReader()


@pytest.fixture
def failing_reader() -> InMemoryLedgerReader:
    return InMemoryLedgerReader(
        fail_with=LedgerReadError("list_invoices", ORG_ID, "connection reset"),
    )
