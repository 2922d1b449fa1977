"""
BillingCore Reporting — Result Types
======================================
Derived, disposable values. Recomputed on every call.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from enum import Enum

from engines.store.errors import ValidationError


class StockStatus(Enum):
    IN_STOCK = "In Stock"
    OUT_OF_STOCK = "Out of Stock"

    @classmethod
    def of(cls, product) -> StockStatus:
        return cls.IN_STOCK if product.stock > 0 else cls.OUT_OF_STOCK


class Granularity(Enum):
    """Bucket width for revenue trends."""
    DAY = "day"
    MONTH = "month"

    @classmethod
    def parse(cls, value) -> Granularity:
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            for member in cls:
                if value.lower() in (member.value, member.name.lower()):
                    return member
        raise ValidationError(
            f"granularity must be one of "
            f"{[m.value for m in cls]}, got {value!r}.",
            field="granularity",
        )

    def truncate(self, day: date) -> date:
        if self is Granularity.MONTH:
            return day.replace(day=1)
        return day

    def next_period(self, period_start: date) -> date:
        if self is Granularity.MONTH:
            if period_start.month == 12:
                return date(period_start.year + 1, 1, 1)
            return date(period_start.year, period_start.month + 1, 1)
        return period_start + timedelta(days=1)


@dataclass(frozen=True)
class RevenueBucket:
    period_start: date
    revenue: int
    sale_count: int

    def to_dict(self) -> dict:
        return {
            "period_start": self.period_start.isoformat(),
            "revenue": self.revenue,
            "sale_count": self.sale_count,
        }


@dataclass(frozen=True)
class DashboardSummary:
    """The headline cards on the owner's dashboard."""

    total_revenue: int
    sale_count: int
    active_products: int
    out_of_stock_products: int
    currency: str

    def to_dict(self) -> dict:
        return {
            "total_revenue": self.total_revenue,
            "sale_count": self.sale_count,
            "active_products": self.active_products,
            "out_of_stock_products": self.out_of_stock_products,
            "currency": self.currency,
        }
