"""
Module: books_kernel.db.base
Responsibility: Declarative base for the ledger schema mapping.  Provides the
    UUID primary key convention and the type annotation map that keeps money
    columns Decimal-typed.
Architecture position: Kernel > DB.  Lowest-level import target; MUST NOT
    import from models/, selectors/ or outer layers.

Invariants enforced:
    - Decimal precision: Python ``Decimal`` maps to Numeric(38, 9).  NEVER
      use float for monetary amounts.
    - UUID primary keys stored as String(36) for cross-database portability.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import ClassVar
from uuid import UUID as PyUUID, uuid4

from sqlalchemy import Date, DateTime, Numeric, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import TypeDecorator


class UUIDString(TypeDecorator):
    """
    UUID type stored as String(36).

    Transparently converts between Python UUID objects and their
    36-character string representation.
    """

    impl = String(36)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is not None:
            return str(value)
        return None

    def process_result_value(self, value, dialect):
        if value is not None:
            return PyUUID(value)
        return None


class Base(DeclarativeBase):
    """
    Declarative base for all ledger schema models.

    Guarantees:
        - id is always a uuid4-generated UUID stored as String(36).
        - Decimal maps to Numeric(38, 9).
        - datetime maps to DateTime(timezone=True).
    """

    type_annotation_map: ClassVar[dict] = {
        Decimal: Numeric(38, 9),
        datetime: DateTime(timezone=True),
        date: Date(),
        PyUUID: UUIDString(),
    }

    id: Mapped[PyUUID] = mapped_column(
        UUIDString(),
        primary_key=True,
        default=uuid4,
    )
