"""
Module: books_kernel.models.account
Responsibility: Read mapping of the chart of accounts and contacts.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - Account.code is unique per organization (uq_account_org_code).
    - account_type is one of the AccountType values; it decides which
      statement section the account's balance appears in.
"""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Index, String, Text, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from books_kernel.db.base import Base
from books_kernel.domain.ledger import AccountType

__all__ = ["Account", "AccountType", "Contact"]


class Account(Base):
    """Chart of accounts entry, scoped to one organization."""

    __tablename__ = "accounts"

    __table_args__ = (
        UniqueConstraint("organization_id", "code", name="uq_account_org_code"),
        Index("idx_account_org_type", "organization_id", "account_type"),
    )

    organization_id: Mapped[str] = mapped_column(String(64), nullable=False)

    code: Mapped[str] = mapped_column(String(50), nullable=False)

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    account_type: Mapped[str] = mapped_column(String(32), nullable=False)

    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)


class Contact(Base):
    """Customer or supplier."""

    __tablename__ = "contacts"

    __table_args__ = (Index("idx_contact_org", "organization_id"),)

    organization_id: Mapped[str] = mapped_column(String(64), nullable=False)

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    # "customer", "supplier" or "both"
    contact_type: Mapped[str] = mapped_column(String(20), default="customer", nullable=False)

    email: Mapped[str | None] = mapped_column(String(255), nullable=True)

    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)

    tax_number: Mapped[str | None] = mapped_column(String(50), nullable=True)

    contact_person: Mapped[str | None] = mapped_column(String(255), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
