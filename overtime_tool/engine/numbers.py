"""Decimal helpers shared by the engine.

Every numeric input passes through `to_decimal`, which never raises: values
that are missing or do not parse to a finite number come back as None.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Optional

from overtime_tool.models import ZERO

HOURS_QUANTUM = Decimal("0.0001")
CURRENCY_QUANTUM = Decimal("0.01")


def to_decimal(value: Any) -> Optional[Decimal]:
    """Parse numbers and numeric-like strings; None for anything unusable."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (int, float)):
        result = Decimal(str(value))
    elif isinstance(value, str):
        if not value.strip():
            return None
        try:
            result = Decimal(value.strip())
        except InvalidOperation:
            return None
    else:
        return None
    return result if result.is_finite() else None


def safe_decimal(value: Any) -> Decimal:
    """Like to_decimal but substitutes 0."""
    parsed = to_decimal(value)
    return ZERO if parsed is None else parsed


def round_hours(value: Decimal) -> Decimal:
    return value.quantize(HOURS_QUANTUM, ROUND_HALF_UP)


def round_currency(value: Decimal) -> Decimal:
    return value.quantize(CURRENCY_QUANTUM, ROUND_HALF_UP)
