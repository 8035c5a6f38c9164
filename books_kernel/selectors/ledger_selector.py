"""
Module: books_kernel.selectors.ledger_selector
Responsibility: Read-only ledger queries feeding the reporting core --
    invoice lines, bill lines, bank transactions, accounts, document totals
    and the plain row sets behind custom report sources.  Implements the
    ``LedgerReader`` protocol.
Architecture position: Kernel > Selectors.  May import from models/, domain/
    and selectors/base.py.  MUST NOT import from engines or modules.

Invariants enforced:
    - Every query is scoped by organization_id.
    - No stored totals: document totals are computed from line items at
      query time (quantity * unit_price + tax_amount).
    - All amounts are returned as Decimal (never float).

Failure modes:
    - LedgerReadError when the database query fails (driver error chained).
    - Rows with an account type outside AccountType keep account_type=None
      and are logged; they never match a statement section.
"""

from datetime import date
from decimal import Decimal
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from books_kernel.domain.ledger import (
    AccountInfo,
    AccountType,
    DocumentStatus,
    DocumentSummary,
    LedgerRow,
    LedgerSource,
    TransactionDirection,
)
from books_kernel.domain.money import ZERO, line_amount, to_decimal
from books_kernel.exceptions import UnknownSourceError
from books_kernel.logging_config import get_logger
from books_kernel.models.account import Account, Contact
from books_kernel.models.bank import BankTransaction
from books_kernel.models.documents import Bill, BillLineItem, Invoice, InvoiceLineItem
from books_kernel.selectors.base import BaseSelector

logger = get_logger("selectors.ledger")

SOURCE_KEYS: tuple[str, ...] = ("invoices", "bills", "contacts", "accounts")


def _account_type(value: str | None) -> AccountType | None:
    if value is None:
        return None
    try:
        return AccountType(value)
    except ValueError:
        logger.warning("unknown_account_type", extra={"account_type": value})
        return None


def _direction(value: str | None) -> TransactionDirection | None:
    if value is None:
        return None
    try:
        return TransactionDirection(value.lower())
    except ValueError:
        logger.warning("unknown_transaction_type", extra={"transaction_type": value})
        return None


def _str_or_none(value: Any) -> str | None:
    return str(value) if value is not None else None


class LedgerSelector(BaseSelector):
    """
    SQLAlchemy implementation of ``LedgerReader``.

    Guarantees:
        - Results are ordered deterministically (date, then document number
          or code) so identical ledgers yield identical reports.
        - Returned DTOs are frozen; callers cannot mutate the ledger view.

    Non-goals:
        - Does not filter by status; statement builders decide which
          statuses count.
    """

    def __init__(self, session: Session):
        super().__init__(session)

    # =========================================================================
    # Accounts
    # =========================================================================

    def list_accounts(
        self, organization_id: str, *, active_only: bool = False,
    ) -> list[AccountInfo]:
        stmt = select(Account).where(Account.organization_id == organization_id)
        if active_only:
            stmt = stmt.where(Account.is_active.is_(True))
        stmt = stmt.order_by(Account.code)

        with self._reading("list_accounts", organization_id):
            accounts = self.session.scalars(stmt).all()

        result: list[AccountInfo] = []
        for acct in accounts:
            account_type = _account_type(acct.account_type)
            if account_type is None:
                continue
            result.append(
                AccountInfo(
                    code=acct.code,
                    name=acct.name,
                    account_type=account_type,
                    is_active=acct.is_active,
                )
            )
        logger.debug(
            "accounts_loaded",
            extra={"organization_id": organization_id, "account_count": len(result)},
        )
        return result

    # =========================================================================
    # Line items
    # =========================================================================

    def list_invoice_lines(
        self,
        organization_id: str,
        *,
        start: date | None = None,
        end: date | None = None,
    ) -> list[LedgerRow]:
        stmt = (
            select(InvoiceLineItem, Invoice, Account, Contact)
            .join(Invoice, InvoiceLineItem.invoice_id == Invoice.id)
            .outerjoin(Account, InvoiceLineItem.account_id == Account.id)
            .outerjoin(Contact, Invoice.contact_id == Contact.id)
            .where(Invoice.organization_id == organization_id)
        )
        if start is not None:
            stmt = stmt.where(Invoice.issue_date >= start)
        if end is not None:
            stmt = stmt.where(Invoice.issue_date <= end)
        stmt = stmt.order_by(Invoice.issue_date, Invoice.invoice_number)

        with self._reading("list_invoice_lines", organization_id):
            results = self.session.execute(stmt).all()

        return [
            self._line_row(
                LedgerSource.INVOICE_LINE, line, invoice, invoice.invoice_number,
                account, contact,
            )
            for line, invoice, account, contact in results
        ]

    def list_bill_lines(
        self,
        organization_id: str,
        *,
        start: date | None = None,
        end: date | None = None,
    ) -> list[LedgerRow]:
        stmt = (
            select(BillLineItem, Bill, Account, Contact)
            .join(Bill, BillLineItem.bill_id == Bill.id)
            .outerjoin(Account, BillLineItem.account_id == Account.id)
            .outerjoin(Contact, Bill.contact_id == Contact.id)
            .where(Bill.organization_id == organization_id)
        )
        if start is not None:
            stmt = stmt.where(Bill.issue_date >= start)
        if end is not None:
            stmt = stmt.where(Bill.issue_date <= end)
        stmt = stmt.order_by(Bill.issue_date, Bill.bill_number)

        with self._reading("list_bill_lines", organization_id):
            results = self.session.execute(stmt).all()

        return [
            self._line_row(
                LedgerSource.BILL_LINE, line, bill, bill.bill_number,
                account, contact,
            )
            for line, bill, account, contact in results
        ]

    @staticmethod
    def _line_row(
        source: LedgerSource,
        line: InvoiceLineItem | BillLineItem,
        document: Invoice | Bill,
        number: str,
        account: Account | None,
        contact: Contact | None,
    ) -> LedgerRow:
        return LedgerRow(
            source=source,
            date=document.issue_date,
            amount=line_amount(line.quantity, line.unit_price, line.tax_amount),
            account_code=account.code if account else None,
            account_name=account.name if account else None,
            account_type=_account_type(account.account_type) if account else None,
            contact_id=_str_or_none(document.contact_id),
            contact_name=contact.name if contact else None,
            status=document.status,
            document_id=str(document.id),
            document_number=number,
            due_date=document.due_date,
            description=line.description,
            quantity=to_decimal(line.quantity),
            unit_price=to_decimal(line.unit_price),
            tax_amount=to_decimal(line.tax_amount),
        )

    # =========================================================================
    # Bank transactions
    # =========================================================================

    def list_bank_transactions(
        self,
        organization_id: str,
        *,
        start: date | None = None,
        end: date | None = None,
    ) -> list[LedgerRow]:
        stmt = (
            select(BankTransaction, Account, Contact)
            .join(Account, BankTransaction.bank_account_id == Account.id)
            .outerjoin(Contact, BankTransaction.contact_id == Contact.id)
            .where(BankTransaction.organization_id == organization_id)
        )
        if start is not None:
            stmt = stmt.where(BankTransaction.transaction_date >= start)
        if end is not None:
            stmt = stmt.where(BankTransaction.transaction_date <= end)
        stmt = stmt.order_by(BankTransaction.transaction_date, BankTransaction.id)

        with self._reading("list_bank_transactions", organization_id):
            results = self.session.execute(stmt).all()

        return [
            LedgerRow(
                source=LedgerSource.BANK_TRANSACTION,
                date=txn.transaction_date,
                amount=to_decimal(txn.amount),
                account_code=account.code,
                account_name=account.name,
                account_type=_account_type(account.account_type),
                contact_id=_str_or_none(txn.contact_id),
                contact_name=contact.name if contact else None,
                document_id=str(txn.id),
                document_number=txn.reference,
                description=txn.description,
                direction=_direction(txn.transaction_type),
            )
            for txn, account, contact in results
        ]

    # =========================================================================
    # Documents
    # =========================================================================

    def _invoice_records(
        self, organization_id: str,
    ) -> list[tuple[Invoice, Contact | None]]:
        stmt = (
            select(Invoice, Contact)
            .outerjoin(Contact, Invoice.contact_id == Contact.id)
            .where(Invoice.organization_id == organization_id)
            .options(selectinload(Invoice.lines))
            .order_by(Invoice.issue_date, Invoice.invoice_number)
        )
        with self._reading("list_invoices", organization_id):
            return [tuple(row) for row in self.session.execute(stmt).all()]

    def _bill_records(
        self, organization_id: str,
    ) -> list[tuple[Bill, Contact | None]]:
        stmt = (
            select(Bill, Contact)
            .outerjoin(Contact, Bill.contact_id == Contact.id)
            .where(Bill.organization_id == organization_id)
            .options(selectinload(Bill.lines))
            .order_by(Bill.issue_date, Bill.bill_number)
        )
        with self._reading("list_bills", organization_id):
            return [tuple(row) for row in self.session.execute(stmt).all()]

    @staticmethod
    def _split_totals(
        lines: list[InvoiceLineItem] | list[BillLineItem],
    ) -> tuple[Decimal, Decimal]:
        """(subtotal, tax_total) of a document's lines."""
        subtotal = sum(
            (to_decimal(l.quantity) * to_decimal(l.unit_price) for l in lines), ZERO,
        )
        tax_total = sum((to_decimal(l.tax_amount) for l in lines), ZERO)
        return subtotal, tax_total

    def list_invoices(self, organization_id: str) -> list[DocumentSummary]:
        """Invoices with at least one line, totalled from their lines."""
        summaries: list[DocumentSummary] = []
        for invoice, contact in self._invoice_records(organization_id):
            if not invoice.lines:
                continue
            subtotal, tax_total = self._split_totals(invoice.lines)
            summaries.append(
                DocumentSummary(
                    document_id=str(invoice.id),
                    number=invoice.invoice_number,
                    issue_date=invoice.issue_date,
                    due_date=invoice.due_date,
                    status=invoice.status,
                    total=subtotal + tax_total,
                    contact_id=_str_or_none(invoice.contact_id),
                    contact_name=contact.name if contact else None,
                )
            )
        return summaries

    def list_bills(self, organization_id: str) -> list[DocumentSummary]:
        """Bills with at least one line, totalled from their lines."""
        summaries: list[DocumentSummary] = []
        for bill, contact in self._bill_records(organization_id):
            if not bill.lines:
                continue
            subtotal, tax_total = self._split_totals(bill.lines)
            summaries.append(
                DocumentSummary(
                    document_id=str(bill.id),
                    number=bill.bill_number,
                    issue_date=bill.issue_date,
                    due_date=bill.due_date,
                    status=bill.status,
                    total=subtotal + tax_total,
                    contact_id=_str_or_none(bill.contact_id),
                    contact_name=contact.name if contact else None,
                )
            )
        return summaries

    # =========================================================================
    # Custom report sources
    # =========================================================================

    def fetch_source(
        self, organization_id: str, source: str,
    ) -> list[dict[str, Any]]:
        """
        Every row of a custom report source, unfiltered.

        Raises:
            UnknownSourceError: If ``source`` is not one of SOURCE_KEYS.
        """
        if source == "invoices":
            rows = [
                self._document_record(inv, contact, inv.invoice_number, "invoice")
                for inv, contact in self._invoice_records(organization_id)
            ]
        elif source == "bills":
            rows = [
                self._document_record(bill, contact, bill.bill_number, "bill")
                for bill, contact in self._bill_records(organization_id)
            ]
        elif source == "contacts":
            rows = self._contact_records(organization_id)
        elif source == "accounts":
            rows = self._account_records(organization_id)
        else:
            raise UnknownSourceError(source, SOURCE_KEYS)

        logger.debug(
            "report_source_fetched",
            extra={
                "organization_id": organization_id,
                "source": source,
                "row_count": len(rows),
            },
        )
        return rows

    def _document_record(
        self,
        document: Invoice | Bill,
        contact: Contact | None,
        number: str,
        prefix: str,
    ) -> dict[str, Any]:
        subtotal, tax_total = self._split_totals(document.lines)
        total = subtotal + tax_total
        paid = document.status == DocumentStatus.PAID.value
        return {
            "id": str(document.id),
            f"{prefix}_number": number,
            f"{prefix}_date": document.issue_date,
            "issue_date": document.issue_date,
            "due_date": document.due_date,
            "contact_id": _str_or_none(document.contact_id),
            "contact_name": contact.name if contact else None,
            "status": document.status,
            "subtotal": subtotal,
            "tax_total": tax_total,
            "total": total,
            "amount_due": ZERO if paid else total,
        }

    def _contact_records(self, organization_id: str) -> list[dict[str, Any]]:
        stmt = (
            select(Contact)
            .where(Contact.organization_id == organization_id)
            .order_by(Contact.name)
        )
        with self._reading("list_contacts", organization_id):
            contacts = self.session.scalars(stmt).all()
        return [
            {
                "id": str(c.id),
                "name": c.name,
                "type": c.contact_type,
                "email": c.email,
                "phone": c.phone,
                "tax_number": c.tax_number,
                "contact_person": c.contact_person,
                "created_at": c.created_at,
            }
            for c in contacts
        ]

    def _account_records(self, organization_id: str) -> list[dict[str, Any]]:
        stmt = (
            select(Account)
            .where(Account.organization_id == organization_id)
            .order_by(Account.code)
        )
        with self._reading("list_accounts", organization_id):
            accounts = self.session.scalars(stmt).all()
        return [
            {
                "id": str(a.id),
                "code": a.code,
                "name": a.name,
                "type": a.account_type,
                "description": a.description,
                "is_active": a.is_active,
            }
            for a in accounts
        ]
