"""
BillingCore Pricing Primitive — Discount-Adjusted Amounts
===========================================================
Used by: Integrity Validator (sale amount check), Aggregation Engine
(discount totals), demo seeding.

RULES:
- Prices and amounts are integer minor units, never floats
- Discount percentages may be int or Decimal in [0, 100]
- Intermediate arithmetic is exact (Decimal); rounding happens once,
  at the end, with an explicit rounding mode
"""

from __future__ import annotations

from decimal import Decimal, ROUND_HALF_EVEN
from typing import Union

Percent = Union[int, Decimal]

_HUNDRED = Decimal(100)
_ONE = Decimal(1)


def to_decimal(value: Percent) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise TypeError("bool is not a valid numeric value.")
    if isinstance(value, (int, float)):
        # str() keeps 2.5 as 2.5 instead of its binary expansion
        return Decimal(str(value))
    raise TypeError(f"Expected a number, got {type(value).__name__}.")


def round_minor_units(value: Decimal, rounding: str = ROUND_HALF_EVEN) -> int:
    """Round an exact Decimal amount to whole minor units."""
    return int(value.quantize(_ONE, rounding=rounding))


def list_amount(unit_price: int, quantity: int) -> int:
    """Undiscounted price × quantity."""
    return unit_price * quantity


def discounted_amount(
    unit_price: int,
    quantity: int,
    discount_percent: Percent,
    rounding: str = ROUND_HALF_EVEN,
) -> int:
    """
    price × quantity × (1 − discount/100), rounded to minor units.

    >>> discounted_amount(89000, 1, 5)
    84550
    """
    gross = Decimal(list_amount(unit_price, quantity))
    factor = (_HUNDRED - to_decimal(discount_percent)) / _HUNDRED
    return round_minor_units(gross * factor, rounding)
