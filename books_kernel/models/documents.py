"""
Module: books_kernel.models.documents
Responsibility: Read mapping of invoices, bills and their line items.
Architecture position: Kernel > Models.  May import from db/base.py only.

A document's total is never stored; it is the sum of its line amounts
(quantity * unit_price + tax_amount), computed by the selectors.
"""

from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from books_kernel.db.base import Base, UUIDString

__all__ = ["Invoice", "InvoiceLineItem", "Bill", "BillLineItem"]


class Invoice(Base):
    """Sales invoice issued to a customer."""

    __tablename__ = "invoices"

    __table_args__ = (
        Index("idx_invoice_org_issue", "organization_id", "issue_date"),
        Index("idx_invoice_org_status", "organization_id", "status"),
    )

    organization_id: Mapped[str] = mapped_column(String(64), nullable=False)

    contact_id: Mapped[UUID | None] = mapped_column(
        UUIDString(), ForeignKey("contacts.id"), nullable=True,
    )

    invoice_number: Mapped[str] = mapped_column(String(50), nullable=False)

    issue_date: Mapped[date] = mapped_column(nullable=False)

    due_date: Mapped[date | None] = mapped_column(nullable=True)

    # draft, sent, overdue, paid, void
    status: Mapped[str] = mapped_column(String(20), default="draft", nullable=False)

    lines: Mapped[list["InvoiceLineItem"]] = relationship(
        back_populates="invoice",
        cascade="all, delete-orphan",
    )


class InvoiceLineItem(Base):
    """One revenue line on an invoice."""

    __tablename__ = "invoice_line_items"

    invoice_id: Mapped[UUID] = mapped_column(
        UUIDString(), ForeignKey("invoices.id"), nullable=False,
    )

    account_id: Mapped[UUID | None] = mapped_column(
        UUIDString(), ForeignKey("accounts.id"), nullable=True,
    )

    description: Mapped[str | None] = mapped_column(String(500), nullable=True)

    quantity: Mapped[Decimal] = mapped_column(default=Decimal("1"), nullable=False)

    unit_price: Mapped[Decimal] = mapped_column(default=Decimal("0"), nullable=False)

    tax_amount: Mapped[Decimal] = mapped_column(default=Decimal("0"), nullable=False)

    invoice: Mapped[Invoice] = relationship(back_populates="lines")


class Bill(Base):
    """Supplier bill."""

    __tablename__ = "bills"

    __table_args__ = (
        Index("idx_bill_org_issue", "organization_id", "issue_date"),
        Index("idx_bill_org_status", "organization_id", "status"),
    )

    organization_id: Mapped[str] = mapped_column(String(64), nullable=False)

    contact_id: Mapped[UUID | None] = mapped_column(
        UUIDString(), ForeignKey("contacts.id"), nullable=True,
    )

    bill_number: Mapped[str] = mapped_column(String(50), nullable=False)

    issue_date: Mapped[date] = mapped_column(nullable=False)

    due_date: Mapped[date | None] = mapped_column(nullable=True)

    # draft, approved, overdue, paid, void
    status: Mapped[str] = mapped_column(String(20), default="draft", nullable=False)

    lines: Mapped[list["BillLineItem"]] = relationship(
        back_populates="bill",
        cascade="all, delete-orphan",
    )


class BillLineItem(Base):
    """One expense line on a bill."""

    __tablename__ = "bill_line_items"

    bill_id: Mapped[UUID] = mapped_column(
        UUIDString(), ForeignKey("bills.id"), nullable=False,
    )

    account_id: Mapped[UUID | None] = mapped_column(
        UUIDString(), ForeignKey("accounts.id"), nullable=True,
    )

    description: Mapped[str | None] = mapped_column(String(500), nullable=True)

    quantity: Mapped[Decimal] = mapped_column(default=Decimal("1"), nullable=False)

    unit_price: Mapped[Decimal] = mapped_column(default=Decimal("0"), nullable=False)

    tax_amount: Mapped[Decimal] = mapped_column(default=Decimal("0"), nullable=False)

    bill: Mapped[Bill] = relationship(back_populates="lines")
