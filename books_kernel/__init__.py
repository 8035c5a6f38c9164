"""
Books Kernel - reporting core foundations.

Read-only access to a small-business ledger with:
- Typed exceptions separating bad input from failed reads
- Structured JSON logging with request-scoped context
- Decimal-only money handling
- An injectable clock for deterministic reports
"""

__version__ = "0.1.0"
