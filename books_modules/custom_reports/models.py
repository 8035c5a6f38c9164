"""
Custom report value objects (``books_modules.custom_reports.models``).

Responsibility
--------------
The user-authored report configuration -- source, selected fields and
typed filters -- and the tabular result of running it.

Filters are a tagged union: one frozen dataclass per field type, each
holding an operator from that type's own enum.  A known operator paired
with a field type that does not support it is rejected when the filter is
built; an operator nobody knows becomes a ``PassThroughFilter`` that
keeps every row.

Invariants enforced
-------------------
* All models are ``frozen=True``.
* A filter's operator is always a member of its type's operator enum.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Union

from books_kernel.exceptions import InvalidFilterError, InvalidReportConfigError
from books_kernel.logging_config import get_logger
from books_modules.custom_reports.catalog import catalog_field, resolve_field_type
from books_modules.custom_reports.fields import FieldSpec, FieldType

logger = get_logger("modules.custom_reports.models")

DEFAULT_REPORT_NAME = "Custom Report"


# =========================================================================
# Operators
# =========================================================================


class TextOperator(str, Enum):
    EQUALS = "equals"
    CONTAINS = "contains"
    STARTS_WITH = "starts_with"
    ENDS_WITH = "ends_with"
    NOT_EQUALS = "not_equals"


class NumberOperator(str, Enum):
    EQUALS = "equals"
    GREATER_THAN = "greater_than"
    LESS_THAN = "less_than"
    BETWEEN = "between"


class DateOperator(str, Enum):
    EQUALS = "equals"
    AFTER = "after"
    BEFORE = "before"
    BETWEEN = "between"
    LAST_DAYS = "last_days"
    NEXT_DAYS = "next_days"


class BooleanOperator(str, Enum):
    EQUALS = "equals"
    NOT_EQUALS = "not_equals"


KNOWN_OPERATORS: frozenset[str] = frozenset(
    op.value
    for enum_cls in (TextOperator, NumberOperator, DateOperator, BooleanOperator)
    for op in enum_cls
)


def _coerce_operator(enum_cls: type[Enum], filter_spec: Any, field_type: FieldType):
    operator = filter_spec.operator
    if isinstance(operator, enum_cls):
        return operator
    try:
        return enum_cls(getattr(operator, "value", operator))
    except ValueError:
        raise InvalidFilterError(
            filter_spec.field, field_type.value, str(getattr(operator, "value", operator)),
        ) from None


# =========================================================================
# Filters
# =========================================================================


@dataclass(frozen=True)
class TextFilter:
    """``equals`` is case-sensitive; the substring operators are not."""

    field: str
    operator: TextOperator
    value: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "operator", _coerce_operator(TextOperator, self, FieldType.TEXT),
        )


@dataclass(frozen=True)
class NumberFilter:
    """Filter on a number or currency column.  ``between`` takes "min,max"."""

    field: str
    operator: NumberOperator
    value: str = ""
    field_type: FieldType = FieldType.NUMBER

    def __post_init__(self) -> None:
        if not self.field_type.is_numeric:
            raise InvalidFilterError(
                self.field,
                self.field_type.value,
                str(getattr(self.operator, "value", self.operator)),
            )
        object.__setattr__(
            self, "operator", _coerce_operator(NumberOperator, self, self.field_type),
        )


@dataclass(frozen=True)
class DateFilter:
    """
    Filter on a date column.

    ``last_days`` / ``next_days`` take a day count relative to the day the
    filter is applied.
    """

    field: str
    operator: DateOperator
    value: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "operator", _coerce_operator(DateOperator, self, FieldType.DATE),
        )


@dataclass(frozen=True)
class BooleanFilter:
    field: str
    operator: BooleanOperator
    value: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "operator", _coerce_operator(BooleanOperator, self, FieldType.BOOLEAN),
        )


@dataclass(frozen=True)
class PassThroughFilter:
    """An operator no field type knows.  Keeps every row."""

    field: str
    operator: str
    value: str = ""


FilterSpec = Union[TextFilter, NumberFilter, DateFilter, BooleanFilter, PassThroughFilter]


def _operand(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def make_filter(
    field_key: str,
    operator: str,
    value: Any,
    field_type: FieldType,
) -> FilterSpec:
    """
    Build the filter variant for ``field_type``.

    Raises:
        InvalidFilterError: If ``operator`` is a known operator that
            ``field_type`` does not support.
    """
    op = str(getattr(operator, "value", operator))
    operand = _operand(value)

    if op not in KNOWN_OPERATORS:
        logger.warning(
            "filter_operator_unknown",
            extra={"field": field_key, "operator": op, "field_type": field_type.value},
        )
        return PassThroughFilter(field_key, op, operand)

    if field_type == FieldType.TEXT:
        return TextFilter(field_key, op, operand)
    if field_type.is_numeric:
        return NumberFilter(field_key, op, operand, field_type)
    if field_type == FieldType.DATE:
        return DateFilter(field_key, op, operand)
    if field_type == FieldType.BOOLEAN:
        return BooleanFilter(field_key, op, operand)
    raise InvalidFilterError(field_key, str(field_type), op)


def filter_to_dict(filter_spec: FilterSpec) -> dict[str, Any]:
    return {
        "field": filter_spec.field,
        "operator": str(getattr(filter_spec.operator, "value", filter_spec.operator)),
        "value": filter_spec.value,
    }


# =========================================================================
# Report configuration
# =========================================================================


@dataclass(frozen=True)
class CustomReportConfig:
    """
    A user-defined report: source, columns in display order, ANDed filters.

    ``id`` and ``created_at`` are assigned when the report is saved.
    """

    name: str
    source: str
    fields: tuple[FieldSpec, ...]
    filters: tuple[FilterSpec, ...] = ()
    id: str | None = None
    created_at: datetime | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "fields", tuple(self.fields))
        object.__setattr__(self, "filters", tuple(self.filters))

    @property
    def field_keys(self) -> tuple[str, ...]:
        return tuple(spec.key for spec in self.fields)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "source": self.source,
            "fields": [spec.to_dict() for spec in self.fields],
            "filters": [filter_to_dict(f) for f in self.filters],
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CustomReportConfig:
        """
        Parse a stored or submitted config.

        Filter field types are resolved against the source catalog, then the
        config's own field list, then default to text.  ``createdAt`` is
        accepted as an alias of ``created_at``.

        Raises:
            InvalidReportConfigError: Structurally unusable input.
            InvalidFilterError: A known operator on an unsupported type.
        """
        if not isinstance(data, dict):
            raise InvalidReportConfigError("", "config must be a mapping")
        name = str(data.get("name") or DEFAULT_REPORT_NAME)
        source = data.get("source")
        if not source:
            raise InvalidReportConfigError(name, "source is required")
        source = str(source)

        raw_fields = data.get("fields") or []
        raw_filters = data.get("filters") or []
        if not isinstance(raw_fields, list) or not isinstance(raw_filters, list):
            raise InvalidReportConfigError(name, "fields and filters must be lists")

        fields = tuple(
            FieldSpec.from_dict(item, name) if isinstance(item, dict)
            else catalog_field(source, str(item))
            for item in raw_fields
        )

        filters: list[FilterSpec] = []
        for item in raw_filters:
            if not isinstance(item, dict) or not item.get("field"):
                raise InvalidReportConfigError(name, "filter without a field")
            field_key = str(item["field"])
            filters.append(
                make_filter(
                    field_key,
                    str(item.get("operator") or TextOperator.EQUALS.value),
                    item.get("value"),
                    resolve_field_type(source, field_key, fields),
                )
            )

        created_raw = data.get("created_at") or data.get("createdAt")
        created_at = None
        if created_raw:
            try:
                created_at = (
                    created_raw if isinstance(created_raw, datetime)
                    else datetime.fromisoformat(str(created_raw).replace("Z", "+00:00"))
                )
            except ValueError as exc:
                raise InvalidReportConfigError(name, f"bad created_at: {exc}") from exc

        report_id = data.get("id")
        return cls(
            name=name,
            source=source,
            fields=fields,
            filters=tuple(filters),
            id=str(report_id) if report_id is not None else None,
            created_at=created_at,
        )


# =========================================================================
# Result
# =========================================================================


@dataclass(frozen=True)
class CustomReportResult:
    """
    Filtered, projected rows plus column metadata.

    Each row holds exactly the configured keys, in configured order.
    ``totals`` sums every number and currency column.
    """

    name: str
    source: str
    columns: tuple[FieldSpec, ...]
    rows: tuple[dict[str, Any], ...]
    totals: dict[str, Decimal] = field(default_factory=dict)

    @property
    def row_count(self) -> int:
        return len(self.rows)
