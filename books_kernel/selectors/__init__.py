"""Read-only selectors over the ledger schema."""

from books_kernel.selectors.base import BaseSelector
from books_kernel.selectors.ledger_selector import SOURCE_KEYS, LedgerSelector

__all__ = ["BaseSelector", "LedgerSelector", "SOURCE_KEYS"]
