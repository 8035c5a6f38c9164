"""
Decimal helpers for monetary amounts.

All amounts in the reporting core are ``Decimal`` -- NEVER ``float``.
Values arriving from drivers or JSON (int, str, float, None) pass through
``to_decimal`` once, at the boundary.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

ZERO = Decimal("0")
CENT = Decimal("0.01")


def to_decimal(value: Any) -> Decimal:
    """
    Convert a raw amount to ``Decimal``.

    ``None`` and empty strings count as zero.  Floats go through ``str`` so
    that ``0.1`` becomes ``Decimal("0.1")`` rather than its binary
    expansion.

    Raises:
        InvalidOperation: If a string is not numeric.
    """
    if value is None or value == "":
        return ZERO
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        return Decimal(int(value))
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(str(value).strip())


def parse_decimal(value: Any) -> Decimal | None:
    """Like ``to_decimal`` but returns None for unparseable or non-finite input."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    try:
        result = to_decimal(value)
    except (InvalidOperation, ValueError):
        return None
    return result if result.is_finite() else None


def round_money(value: Decimal, places: int = 2) -> Decimal:
    """Round half-up to ``places`` fractional digits."""
    return value.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)


def line_amount(quantity: Any, unit_price: Any, tax_amount: Any) -> Decimal:
    """Amount of an invoice or bill line: quantity * unit_price + tax_amount."""
    return to_decimal(quantity) * to_decimal(unit_price) + to_decimal(tax_amount)
