"""
BillingCore Config — Store Rules
===================================
Currency precision, rounding and tolerance come from configuration,
never from literals inside engine logic.

Amounts are integer minor units of the configured currency. Discount
arithmetic is carried out in Decimal and rounded back to an integer
with the configured rounding mode.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_EVEN, ROUND_HALF_UP, ROUND_DOWN
from typing import Any, Mapping


VALID_ROUNDING_MODES = frozenset({ROUND_HALF_EVEN, ROUND_HALF_UP, ROUND_DOWN})


# ══════════════════════════════════════════════════════════════
# STORE CONFIG
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class StoreConfig:
    """
    Rules the Entity Store and Aggregation Engine run under.

    Fields:
        currency:               ISO 4217 code amounts are expressed in.
        rounding:               Decimal rounding mode for discounted amounts.
                                Default is bankers' rounding (half-even).
        sale_amount_tolerance:  Allowed |submitted - expected| in minor units.
        recent_activity_limit:  Default feed length for the dashboard.
    """

    currency: str = "BDT"
    rounding: str = ROUND_HALF_EVEN
    sale_amount_tolerance: int = 0
    recent_activity_limit: int = 5

    def __post_init__(self) -> None:
        if not isinstance(self.currency, str) or len(self.currency) != 3:
            raise ValueError(
                f"currency must be 3-letter ISO 4217 code, got '{self.currency}'."
            )
        if self.rounding not in VALID_ROUNDING_MODES:
            raise ValueError(
                f"rounding must be one of {sorted(VALID_ROUNDING_MODES)}, "
                f"got '{self.rounding}'."
            )
        if (
            not isinstance(self.sale_amount_tolerance, int)
            or isinstance(self.sale_amount_tolerance, bool)
            or self.sale_amount_tolerance < 0
        ):
            raise ValueError("sale_amount_tolerance must be a non-negative int.")
        if (
            not isinstance(self.recent_activity_limit, int)
            or self.recent_activity_limit < 1
        ):
            raise ValueError("recent_activity_limit must be a positive int.")

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> StoreConfig:
        """Build from a settings dict (keys are case-insensitive)."""
        normalized = {str(k).lower(): v for k, v in data.items()}
        kwargs = {}
        for name in (
            "currency",
            "rounding",
            "sale_amount_tolerance",
            "recent_activity_limit",
        ):
            if name in normalized and normalized[name] is not None:
                kwargs[name] = normalized[name]
        if "sale_amount_tolerance" in kwargs:
            kwargs["sale_amount_tolerance"] = int(kwargs["sale_amount_tolerance"])
        if "recent_activity_limit" in kwargs:
            kwargs["recent_activity_limit"] = int(kwargs["recent_activity_limit"])
        return cls(**kwargs)

    def to_dict(self) -> dict:
        return {
            "currency": self.currency,
            "rounding": self.rounding,
            "sale_amount_tolerance": self.sale_amount_tolerance,
            "recent_activity_limit": self.recent_activity_limit,
        }


DEFAULT_STORE_CONFIG = StoreConfig()
