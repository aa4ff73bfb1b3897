"""
FOS Money Primitive — Integer Currency Arithmetic
===================================================
All amounts are integer currency units (KRW has no minor unit).
Derived amounts floor, never round half-even.

RULES (NON-NEGOTIABLE):
- No floats for money. Rates may be fractional; amounts may not.
- Percentages floor: floor(amount * rate / 100)
"""

from __future__ import annotations

from decimal import ROUND_FLOOR, Decimal
from typing import Union

from core.errors import ValidationError

Rate = Union[int, float]


def require_money(value, field: str = "amount", *, allow_negative: bool = False) -> int:
    """Validate an integer money amount and return it."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(
            field,
            f"must be int currency units, got {type(value).__name__}.",
        )
    if not allow_negative and value < 0:
        raise ValidationError(field, f"must be >= 0, got {value}.")
    return value


def floor_percent(amount: int, rate: Rate) -> int:
    """
    floor(amount * rate / 100). Integer rates stay in integer arithmetic;
    fractional rates go through Decimal of their shortest repr, so 32.3
    is exactly 32.3 and not the nearest binary float.
    """
    if isinstance(rate, int):
        return amount * rate // 100
    exact = Decimal(amount) * Decimal(str(rate)) / 100
    return int(exact.to_integral_value(rounding=ROUND_FLOOR))


def clamp(value, low, high):
    """Clamp value into [low, high]."""
    if value < low:
        return low
    if value > high:
        return high
    return value
