"""
Custom report data sources.

Each source maps to one "get all" read on the ledger and lists the fields a
report may select from it.  The catalog is the authority for a field's
type when a filter is built.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from books_kernel.exceptions import UnknownSourceError
from books_modules.custom_reports.fields import Align, FieldSpec, FieldType


@dataclass(frozen=True)
class ReportSource:
    key: str
    label: str
    fields: tuple[FieldSpec, ...]

    def field(self, key: str) -> FieldSpec | None:
        for spec in self.fields:
            if spec.key == key:
                return spec
        return None


def _money(key: str, label: str) -> FieldSpec:
    return FieldSpec(key, label, FieldType.CURRENCY, Align.RIGHT)


def _document_fields(prefix: str, title: str, party: str) -> tuple[FieldSpec, ...]:
    return (
        FieldSpec(f"{prefix}_number", f"{title} Number"),
        FieldSpec(f"{prefix}_date", f"{title} Date", FieldType.DATE),
        FieldSpec("due_date", "Due Date", FieldType.DATE),
        FieldSpec("contact_name", party),
        FieldSpec("status", "Status"),
        _money("subtotal", "Subtotal"),
        _money("tax_total", "Tax"),
        _money("total", "Total"),
        _money("amount_due", "Amount Due"),
    )


SOURCES: dict[str, ReportSource] = {
    "invoices": ReportSource(
        "invoices", "Invoices", _document_fields("invoice", "Invoice", "Customer"),
    ),
    "bills": ReportSource(
        "bills", "Bills", _document_fields("bill", "Bill", "Supplier"),
    ),
    "contacts": ReportSource(
        "contacts",
        "Contacts",
        (
            FieldSpec("name", "Name"),
            FieldSpec("type", "Type"),
            FieldSpec("email", "Email"),
            FieldSpec("phone", "Phone"),
            FieldSpec("tax_number", "Tax Number"),
            FieldSpec("contact_person", "Contact Person"),
            FieldSpec("created_at", "Created Date", FieldType.DATE),
        ),
    ),
    "accounts": ReportSource(
        "accounts",
        "Chart of Accounts",
        (
            FieldSpec("code", "Account Code"),
            FieldSpec("name", "Account Name"),
            FieldSpec("type", "Account Type"),
            FieldSpec("description", "Description"),
            FieldSpec("is_active", "Active", FieldType.BOOLEAN),
        ),
    ),
}


def get_source(key: str) -> ReportSource:
    """
    Raises:
        UnknownSourceError: If ``key`` is not a catalog source.
    """
    try:
        return SOURCES[key]
    except KeyError:
        raise UnknownSourceError(str(key), tuple(SOURCES)) from None


def resolve_field_type(
    source: str,
    field: str,
    selected: Sequence[FieldSpec] = (),
) -> FieldType:
    """
    Type of ``field`` for filtering.

    The catalog wins; otherwise the report's own field list; otherwise text.
    """
    catalog_source = SOURCES.get(source)
    if catalog_source is not None:
        spec = catalog_source.field(field)
        if spec is not None:
            return spec.type
    for spec in selected:
        if spec.key == field:
            return spec.type
    return FieldType.TEXT


def catalog_field(source: str, key: str) -> FieldSpec:
    """Column spec for a bare field key: the catalog's, or a plain text column."""
    catalog_source = SOURCES.get(source)
    if catalog_source is not None:
        spec = catalog_source.field(key)
        if spec is not None:
            return spec
    return FieldSpec(key, key, resolve_field_type(source, key))
