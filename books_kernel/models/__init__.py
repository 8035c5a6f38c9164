"""ORM mapping of the (externally owned) ledger schema."""

from books_kernel.models.account import Account, AccountType, Contact
from books_kernel.models.bank import BankTransaction
from books_kernel.models.documents import Bill, BillLineItem, Invoice, InvoiceLineItem

__all__ = [
    "Account",
    "AccountType",
    "Contact",
    "Invoice",
    "InvoiceLineItem",
    "Bill",
    "BillLineItem",
    "BankTransaction",
]
