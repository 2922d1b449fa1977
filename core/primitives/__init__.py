"""
BillingCore Primitives — Public API
"""

from core.primitives.pricing import (
    discounted_amount,
    list_amount,
    round_minor_units,
    to_decimal,
)

__all__ = [
    "discounted_amount",
    "list_amount",
    "round_minor_units",
    "to_decimal",
]
