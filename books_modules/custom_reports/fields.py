"""Column definitions shared by the source catalog and report configs."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from books_kernel.exceptions import InvalidReportConfigError


class FieldType(str, Enum):
    """Value type of a report column; decides the legal filter operators."""

    TEXT = "text"
    NUMBER = "number"
    DATE = "date"
    CURRENCY = "currency"
    BOOLEAN = "boolean"

    @property
    def is_numeric(self) -> bool:
        return self in (FieldType.NUMBER, FieldType.CURRENCY)


class Align(str, Enum):
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


@dataclass(frozen=True)
class FieldSpec:
    """One selected column: row key, display label, type and alignment."""

    key: str
    label: str
    type: FieldType = FieldType.TEXT
    align: Align | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "key": self.key,
            "label": self.label,
            "type": self.type.value,
        }
        if self.align is not None:
            data["align"] = self.align.value
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any], report_name: str = "") -> FieldSpec:
        key = data.get("key")
        if not key:
            raise InvalidReportConfigError(report_name, "field without a key")
        try:
            field_type = FieldType(data.get("type") or FieldType.TEXT.value)
            align = Align(data["align"]) if data.get("align") else None
        except ValueError as exc:
            raise InvalidReportConfigError(report_name, str(exc)) from exc
        return cls(
            key=str(key),
            label=str(data.get("label") or key),
            type=field_type,
            align=align,
        )
