"""Pure domain types for the reporting core: clock, money, dates, ledger DTOs."""

from books_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from books_kernel.domain.ledger import (
    EXPENSE_TYPES,
    REVENUE_TYPES,
    AccountInfo,
    AccountType,
    DocumentStatus,
    DocumentSummary,
    LedgerReader,
    LedgerRow,
    LedgerSource,
    TransactionDirection,
)

__all__ = [
    "Clock",
    "SystemClock",
    "DeterministicClock",
    "AccountInfo",
    "AccountType",
    "DocumentStatus",
    "DocumentSummary",
    "LedgerReader",
    "LedgerRow",
    "LedgerSource",
    "TransactionDirection",
    "REVENUE_TYPES",
    "EXPENSE_TYPES",
]
