"""
Ledger DTOs and the read-only data access protocol.

Responsibility:
    Normalized, frozen shapes of everything the reporting core reads:
    invoice lines, bill lines and bank transactions (all as ``LedgerRow``),
    accounts (``AccountInfo``) and document totals (``DocumentSummary``).
    ``LedgerReader`` is the narrow interface the services depend on;
    ``books_kernel.selectors.LedgerSelector`` implements it over SQLAlchemy.

Architecture position:
    Kernel > Domain -- pure data definitions, zero I/O.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any, Protocol, Sequence

from books_kernel.domain.money import ZERO


class AccountType(str, Enum):
    """Chart of accounts types; the type decides the statement section."""

    ASSET = "asset"
    LIABILITY = "liability"
    EQUITY = "equity"
    REVENUE = "revenue"
    EXPENSE = "expense"
    COST_OF_GOODS_SOLD = "cost_of_goods_sold"
    OTHER_INCOME = "other_income"
    OTHER_EXPENSE = "other_expense"


REVENUE_TYPES: frozenset[AccountType] = frozenset(
    {AccountType.REVENUE, AccountType.OTHER_INCOME}
)
EXPENSE_TYPES: frozenset[AccountType] = frozenset(
    {AccountType.EXPENSE, AccountType.COST_OF_GOODS_SOLD, AccountType.OTHER_EXPENSE}
)


class LedgerSource(str, Enum):
    """Where a normalized row came from."""

    INVOICE_LINE = "invoice_line"
    BILL_LINE = "bill_line"
    BANK_TRANSACTION = "bank_transaction"


class TransactionDirection(str, Enum):
    """Bank transaction direction.  Credits increase the bank balance."""

    CREDIT = "credit"
    DEBIT = "debit"


class DocumentStatus(str, Enum):
    """Invoice and bill statuses seen by the reporting core."""

    DRAFT = "draft"
    SENT = "sent"
    APPROVED = "approved"
    OVERDUE = "overdue"
    PAID = "paid"
    VOID = "void"


@dataclass(frozen=True)
class AccountInfo:
    """Snapshot of one chart-of-accounts entry."""

    code: str
    name: str
    account_type: AccountType
    is_active: bool = True


@dataclass(frozen=True)
class LedgerRow:
    """
    One invoice line, bill line or bank transaction.

    ``amount`` is always non-negative for bank transactions; the sign comes
    from ``direction`` via ``signed_amount``.  For invoice and bill lines
    ``amount`` is ``quantity * unit_price + tax_amount``.
    """

    source: LedgerSource
    date: date
    amount: Decimal | None
    account_code: str | None = None
    account_name: str | None = None
    account_type: AccountType | None = None
    contact_id: str | None = None
    contact_name: str | None = None
    status: str | None = None
    document_id: str | None = None
    document_number: str | None = None
    due_date: date | None = None
    description: str | None = None
    direction: TransactionDirection | None = None
    quantity: Decimal | None = None
    unit_price: Decimal | None = None
    tax_amount: Decimal | None = None

    @property
    def signed_amount(self) -> Decimal:
        """
        Amount with bank direction applied (credit +, debit -).

        Rows without a direction contribute zero.
        """
        amount = self.amount if self.amount is not None else ZERO
        if self.direction == TransactionDirection.CREDIT:
            return amount
        if self.direction == TransactionDirection.DEBIT:
            return -amount
        return ZERO

    @property
    def is_draft(self) -> bool:
        return self.status == DocumentStatus.DRAFT.value


@dataclass(frozen=True)
class DocumentSummary:
    """An invoice or bill with its computed total."""

    document_id: str
    number: str
    issue_date: date
    due_date: date | None
    status: str
    total: Decimal
    contact_id: str | None = None
    contact_name: str | None = None


class LedgerReader(Protocol):
    """
    Read-only ledger access, scoped to one organization per call.

    Implementations raise ``books_kernel.exceptions.DataAccessError`` (or a
    subclass) when the underlying read fails.  They never return partial
    results.
    """

    def list_accounts(
        self, organization_id: str, *, active_only: bool = False,
    ) -> list[AccountInfo]: ...

    def list_invoice_lines(
        self,
        organization_id: str,
        *,
        start: date | None = None,
        end: date | None = None,
    ) -> list[LedgerRow]: ...

    def list_bill_lines(
        self,
        organization_id: str,
        *,
        start: date | None = None,
        end: date | None = None,
    ) -> list[LedgerRow]: ...

    def list_bank_transactions(
        self,
        organization_id: str,
        *,
        start: date | None = None,
        end: date | None = None,
    ) -> list[LedgerRow]: ...

    def list_invoices(self, organization_id: str) -> list[DocumentSummary]: ...

    def list_bills(self, organization_id: str) -> list[DocumentSummary]: ...

    def fetch_source(
        self, organization_id: str, source: str,
    ) -> Sequence[dict[str, Any]]: ...
