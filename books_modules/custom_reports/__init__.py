"""
Custom Report Builder (``books_modules.custom_reports``).

Responsibility
--------------
Ad-hoc reports driven by user configuration instead of a fixed schema:
pick a source, pick fields, add typed filters, run.  Saved configs live in
an external ``ReportStore``.

Architecture position
---------------------
**Modules layer**.  ``CustomReportEngine`` reads through a
``LedgerReader``; filtering, projection and totals are pure functions.
"""

from books_modules.custom_reports.catalog import (
    SOURCES,
    ReportSource,
    catalog_field,
    get_source,
    resolve_field_type,
)
from books_modules.custom_reports.engine import (
    CustomReportEngine,
    column_totals,
    project_rows,
)
from books_modules.custom_reports.fields import Align, FieldSpec, FieldType
from books_modules.custom_reports.filters import apply_filters, matches
from books_modules.custom_reports.models import (
    BooleanFilter,
    BooleanOperator,
    CustomReportConfig,
    CustomReportResult,
    DateFilter,
    DateOperator,
    FilterSpec,
    NumberFilter,
    NumberOperator,
    PassThroughFilter,
    TextFilter,
    TextOperator,
    make_filter,
)
from books_modules.custom_reports.store import (
    InMemoryReportStore,
    JsonFileReportStore,
    ReportStore,
    SavedReports,
)
from books_modules.custom_reports.views import RowGroup, group_rows, sort_rows

__all__ = [
    # Engine
    "CustomReportEngine",
    "apply_filters",
    "matches",
    "project_rows",
    "column_totals",
    # Catalog
    "SOURCES",
    "ReportSource",
    "catalog_field",
    "get_source",
    "resolve_field_type",
    # Models
    "Align",
    "FieldSpec",
    "FieldType",
    "TextOperator",
    "NumberOperator",
    "DateOperator",
    "BooleanOperator",
    "TextFilter",
    "NumberFilter",
    "DateFilter",
    "BooleanFilter",
    "PassThroughFilter",
    "FilterSpec",
    "make_filter",
    "CustomReportConfig",
    "CustomReportResult",
    # Persistence
    "ReportStore",
    "InMemoryReportStore",
    "JsonFileReportStore",
    "SavedReports",
    # Views
    "RowGroup",
    "group_rows",
    "sort_rows",
]
