"""
Module: books_kernel.selectors.base
Responsibility: Abstract base class for read-only query selectors.
Architecture position: Kernel > Selectors.  May import from db/ and models/.
    Selectors NEVER create, modify, or delete data.

Invariants enforced:
    - Read-only access: selectors accept a Session from the caller and MUST
      NOT call session.add(), session.delete(), session.commit() or
      session.flush().
    - DTO return convention: selectors return frozen dataclasses or plain
      dicts, never ORM instances.
    - Session ownership: the caller owns the session and its transaction.

Failure modes:
    - Any SQLAlchemyError raised while querying is re-raised as
      ``LedgerReadError`` with the driver error chained as ``__cause__``.
"""

from abc import ABC
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from books_kernel.exceptions import LedgerReadError
from books_kernel.logging_config import get_logger

logger = get_logger("selectors")


class BaseSelector(ABC):
    """
    Abstract base class for all selectors.

    Guarantees:
        - ``session`` is stored as a public attribute for subclass queries.
        - No commit, flush, add, or delete operations are performed.
    """

    def __init__(self, session: Session):
        self.session = session

    @contextmanager
    def _reading(self, operation: str, organization_id: str) -> Iterator[None]:
        """Translate driver failures into ``LedgerReadError``."""
        try:
            yield
        except SQLAlchemyError as exc:
            logger.error(
                "ledger_read_failed",
                extra={
                    "operation": operation,
                    "organization_id": organization_id,
                    "error_type": type(exc).__name__,
                },
            )
            raise LedgerReadError(operation, organization_id, str(exc)) from exc
