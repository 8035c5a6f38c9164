"""
Typed exception hierarchy for the reporting core.

Every error has a typed class and a ``code`` class attribute so callers
(HTTP adapters, CLIs, tests) can branch on the failure category without
parsing messages.  Context is carried as attributes, not baked into
message text.

    BooksError (base)
    |
    +-- InvalidParametersError      "bad input" -- raised before any I/O
    |   +-- MissingParameterError
    |   +-- InvalidDateError
    |   +-- InvalidDateRangeError
    |   +-- UnknownSourceError
    |   +-- InvalidFilterError
    |   +-- InvalidReportConfigError
    |
    +-- DataAccessError             "could not read data"
    |   +-- LedgerReadError
    |
    +-- ComputationDefectError      a report invariant does not hold
    |
    +-- ReportStoreError            saved custom reports unreadable

Category        | Code                   | When raised
----------------|------------------------|-----------------------------------
Parameters      | MISSING_PARAMETER      | Required date / org id absent
                | INVALID_DATE           | Value is not a calendar date
                | INVALID_DATE_RANGE     | start_date after end_date
                | UNKNOWN_SOURCE         | Custom report source not in catalog
                | INVALID_FILTER         | Operator not legal for field type
                | INVALID_REPORT_CONFIG  | Custom report config malformed
----------------|------------------------|-----------------------------------
Data access     | LEDGER_READ_FAILED     | Underlying query failed
----------------|------------------------|-----------------------------------
Defect          | COMPUTATION_DEFECT     | Section total != sum of lines, etc.
----------------|------------------------|-----------------------------------
Store           | REPORT_STORE_ERROR     | Saved report file corrupt
"""

from __future__ import annotations

from typing import Any


class BooksError(Exception):
    """
    Base exception for all reporting core errors.

    All subclasses carry a ``code`` class attribute for machine-readable
    error identification.
    """

    code: str = "BOOKS_ERROR"


# ---------------------------------------------------------------------------
# Invalid parameters
# ---------------------------------------------------------------------------


class InvalidParametersError(BooksError):
    """Base exception for caller input that cannot produce a report."""

    code: str = "INVALID_PARAMETERS"


class MissingParameterError(InvalidParametersError):
    """A required report parameter was not supplied."""

    code: str = "MISSING_PARAMETER"

    def __init__(self, parameter: str):
        self.parameter = parameter
        super().__init__(f"Missing required parameter: {parameter}")


class InvalidDateError(InvalidParametersError):
    """A date parameter could not be interpreted as a calendar date."""

    code: str = "INVALID_DATE"

    def __init__(self, parameter: str, value: Any):
        self.parameter = parameter
        self.value = repr(value)
        super().__init__(f"Invalid date for {parameter}: {value!r}")


class InvalidDateRangeError(InvalidParametersError):
    """The start of a date range falls after its end."""

    code: str = "INVALID_DATE_RANGE"

    def __init__(self, start_date: str, end_date: str):
        self.start_date = start_date
        self.end_date = end_date
        super().__init__(
            f"Start date {start_date} is after end date {end_date}"
        )


class UnknownSourceError(InvalidParametersError):
    """Custom report references a data source that does not exist."""

    code: str = "UNKNOWN_SOURCE"

    def __init__(self, source: str, available: tuple[str, ...] = ()):
        self.source = source
        self.available = available
        super().__init__(
            f"Unknown report source {source!r}; "
            f"expected one of {', '.join(available) or '(none)'}"
        )


class InvalidFilterError(InvalidParametersError):
    """A filter combines a field type with an operator it does not support."""

    code: str = "INVALID_FILTER"

    def __init__(self, field: str, field_type: str, operator: str):
        self.field = field
        self.field_type = field_type
        self.operator = operator
        super().__init__(
            f"Operator {operator!r} is not supported for "
            f"{field_type} field {field!r}"
        )


class InvalidReportConfigError(InvalidParametersError):
    """A custom report configuration is structurally unusable."""

    code: str = "INVALID_REPORT_CONFIG"

    def __init__(self, report_name: str, reason: str):
        self.report_name = report_name
        self.reason = reason
        super().__init__(f"Invalid report config {report_name!r}: {reason}")


# ---------------------------------------------------------------------------
# Data access
# ---------------------------------------------------------------------------


class DataAccessError(BooksError):
    """Base exception for failures reading ledger data."""

    code: str = "DATA_ACCESS_FAILURE"


class LedgerReadError(DataAccessError):
    """
    A ledger query failed.

    The driver exception is preserved as ``__cause__``.
    """

    code: str = "LEDGER_READ_FAILED"

    def __init__(self, operation: str, organization_id: str, detail: str):
        self.operation = operation
        self.organization_id = organization_id
        self.detail = detail
        super().__init__(
            f"Ledger read {operation} failed for organization "
            f"{organization_id}: {detail}"
        )


# ---------------------------------------------------------------------------
# Defects
# ---------------------------------------------------------------------------


class ComputationDefectError(BooksError):
    """
    A report invariant does not hold.

    This is a bug in a builder, never a user error.  It is raised by the
    checks in ``books_kernel.invariants`` and must not be caught to hide
    the defect.
    """

    code: str = "COMPUTATION_DEFECT"

    def __init__(self, invariant: str, expected: Any, actual: Any, where: str = ""):
        self.invariant = invariant
        self.expected = str(expected)
        self.actual = str(actual)
        self.where = where
        location = f" in {where}" if where else ""
        super().__init__(
            f"Invariant {invariant} violated{location}: "
            f"expected {expected}, got {actual}"
        )


# ---------------------------------------------------------------------------
# Saved report store
# ---------------------------------------------------------------------------


class ReportStoreError(BooksError):
    """Saved custom reports could not be loaded or written."""

    code: str = "REPORT_STORE_ERROR"

    def __init__(self, location: str, detail: str):
        self.location = location
        self.detail = detail
        super().__init__(f"Report store {location}: {detail}")
