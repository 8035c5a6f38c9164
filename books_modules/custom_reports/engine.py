"""
Custom Report Engine (``books_modules.custom_reports.engine``).

Responsibility
--------------
Runs a user-defined report through a fixed pipeline:

1. Source resolution -- the reader's "get all" for the source, unfiltered.
2. Filter application -- every filter ANDed (``filters.apply_filters``).
3. Projection -- configured fields only, in configured order.
4. Result -- rows, column metadata and numeric column totals.

Architecture position
---------------------
**Modules layer**.  Stages 2-4 are pure functions; the engine class only
validates, reads and timestamps.

Failure modes
-------------
* Missing organization, unknown source, no fields selected or a malformed
  config -> ``InvalidParametersError`` subclass, before any read.
* Reader failure -> ``DataAccessError`` propagates unchanged.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from decimal import Decimal
from typing import Any

from books_kernel.domain.clock import Clock, SystemClock
from books_kernel.domain.ledger import LedgerReader
from books_kernel.domain.money import ZERO, parse_decimal
from books_kernel.exceptions import InvalidReportConfigError, MissingParameterError
from books_kernel.logging_config import LogContext, get_logger
from books_modules.custom_reports.catalog import get_source
from books_modules.custom_reports.fields import FieldSpec
from books_modules.custom_reports.filters import apply_filters
from books_modules.custom_reports.models import CustomReportConfig, CustomReportResult

logger = get_logger("modules.custom_reports.engine")

REPORT_TYPE = "custom_report"


def project_rows(
    rows: Iterable[dict[str, Any]],
    fields: Sequence[FieldSpec],
) -> tuple[dict[str, Any], ...]:
    """New dicts holding only ``fields``, in order.  Missing keys become None."""
    keys = [spec.key for spec in fields]
    return tuple({key: row.get(key) for key in keys} for row in rows)


def column_totals(
    rows: Sequence[dict[str, Any]],
    fields: Sequence[FieldSpec],
) -> dict[str, Decimal]:
    """Sum of each number or currency column; unreadable cells are skipped."""
    totals: dict[str, Decimal] = {}
    for spec in fields:
        if not spec.type.is_numeric:
            continue
        total = ZERO
        for row in rows:
            value = parse_decimal(row.get(spec.key))
            if value is not None:
                total += value
        totals[spec.key] = total
    return totals


def coerce_config(config: CustomReportConfig | dict[str, Any]) -> CustomReportConfig:
    if isinstance(config, CustomReportConfig):
        return config
    return CustomReportConfig.from_dict(config)


class CustomReportEngine:
    """
    Executes custom report configurations against a ``LedgerReader``.

    Guarantees
    ----------
    * Each run reads fresh data; nothing is cached between runs.
    * Relative date filters use the clock's today at the time of the run.
    """

    def __init__(self, reader: LedgerReader, clock: Clock | None = None):
        self._reader = reader
        self._clock = clock or SystemClock()

    def run(
        self,
        organization_id: str,
        config: CustomReportConfig | dict[str, Any],
    ) -> CustomReportResult:
        """
        Run a report.

        Args:
            organization_id: Tenant whose data is read.
            config: A ``CustomReportConfig`` or its dict form.

        Raises:
            InvalidParametersError: Before any read, for bad input.
            DataAccessError: If the source cannot be read.
        """
        if organization_id is None or not str(organization_id).strip():
            raise MissingParameterError("organization_id")
        org = str(organization_id)
        report = coerce_config(config)
        source = get_source(report.source)
        if not report.fields:
            raise InvalidReportConfigError(report.name, "select at least one field")

        with LogContext.bind(organization_id=org, report_type=REPORT_TYPE):
            rows = self._reader.fetch_source(org, source.key)
            filtered = apply_filters(rows, report.filters, self._clock.today())
            projected = project_rows(filtered, report.fields)

            result = CustomReportResult(
                name=report.name,
                source=source.key,
                columns=report.fields,
                rows=projected,
                totals=column_totals(projected, report.fields),
            )

            logger.info(
                "custom_report_generated",
                extra={
                    "report_name": report.name,
                    "source": source.key,
                    "source_row_count": len(rows),
                    "row_count": result.row_count,
                    "filter_count": len(report.filters),
                },
            )
        return result

    run_custom_report = run
