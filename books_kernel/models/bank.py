"""
Module: books_kernel.models.bank
Responsibility: Read mapping of bank transactions.
Architecture position: Kernel > Models.  May import from db/base.py only.

``bank_account_id`` points at the chart-of-accounts entry that represents
the bank account.  ``amount`` is stored unsigned; ``transaction_type``
("credit" or "debit") carries the direction.
"""

from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from books_kernel.db.base import Base, UUIDString

__all__ = ["BankTransaction"]


class BankTransaction(Base):
    """A single movement on a bank account."""

    __tablename__ = "bank_transactions"

    __table_args__ = (
        Index("idx_bank_txn_org_date", "organization_id", "date"),
    )

    organization_id: Mapped[str] = mapped_column(String(64), nullable=False)

    bank_account_id: Mapped[UUID] = mapped_column(
        UUIDString(), ForeignKey("accounts.id"), nullable=False,
    )

    contact_id: Mapped[UUID | None] = mapped_column(
        UUIDString(), ForeignKey("contacts.id"), nullable=True,
    )

    transaction_date: Mapped[date] = mapped_column("date", nullable=False)

    transaction_type: Mapped[str] = mapped_column(String(10), nullable=False)

    amount: Mapped[Decimal] = mapped_column(nullable=False)

    description: Mapped[str | None] = mapped_column(String(500), nullable=True)

    reference: Mapped[str | None] = mapped_column(String(100), nullable=True)
