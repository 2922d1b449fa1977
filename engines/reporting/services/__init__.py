"""
BillingCore Reporting Engine — Aggregation Service
===================================================
Dashboard metrics derived from a StoreSnapshot.

This engine is READ ONLY:
- Every function is a pure function of the snapshot it is given
- Nothing is cached; each call recomputes from scratch
- Two calls with no mutation in between return equal results

ReportingService takes one fresh snapshot per call, so every
answer reflects a single consistent point in time.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from datetime import date, datetime
from typing import Dict, List, Optional

from core.primitives.pricing import list_amount
from engines.activity.models import ActionLogEntry
from engines.activity.services import recent_first
from engines.reporting.models import (
    DashboardSummary,
    Granularity,
    RevenueBucket,
    StockStatus,
)
from engines.store.errors import NotFoundError, ValidationError
from engines.store.services import EntityStore, StoreSnapshot

logger = logging.getLogger("billingcore.reporting")


# ══════════════════════════════════════════════════════════════
# PURE AGGREGATIONS
# ══════════════════════════════════════════════════════════════

def total_revenue(snapshot: StoreSnapshot) -> int:
    return sum(sale.amount for sale in snapshot.sales.values())


def _as_date(value, name: str) -> Optional[date]:
    # sale dates are plain dates; datetimes compare only with datetimes
    if value is None or type(value) is date:
        return value
    if isinstance(value, datetime):
        return value.date()
    raise ValidationError(f"{name} must be a date, got {value!r}.", field=name)


def revenue_by_period(
    snapshot: StoreSnapshot,
    granularity,
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> List[RevenueBucket]:
    """
    Sum sale amounts per day or month, oldest bucket first.

    Without a range only periods that had sales are returned. With
    both start and end, sales outside [start, end] are ignored and
    every period in the range is present, empty ones at zero.
    datetime bounds are truncated to their date.
    """
    granularity = Granularity.parse(granularity)
    start = _as_date(start, "start")
    end = _as_date(end, "end")
    if (start is None) != (end is None):
        raise ValidationError(
            "start and end must be given together.", field="start"
        )
    if start is not None and start > end:
        raise ValidationError("start must not be after end.", field="start")

    revenue: Dict[date, int] = defaultdict(int)
    counts: Dict[date, int] = defaultdict(int)
    for sale in snapshot.sales.values():
        if start is not None and not (start <= sale.date <= end):
            continue
        bucket = granularity.truncate(sale.date)
        revenue[bucket] += sale.amount
        counts[bucket] += 1

    if start is None:
        periods = sorted(revenue)
    else:
        periods = []
        period = granularity.truncate(start)
        last = granularity.truncate(end)
        while period <= last:
            periods.append(period)
            period = granularity.next_period(period)

    return [
        RevenueBucket(period_start=p, revenue=revenue.get(p, 0), sale_count=counts.get(p, 0))
        for p in periods
    ]


def stock_status(snapshot: StoreSnapshot, product_id: int) -> StockStatus:
    product = snapshot.products.get(product_id)
    if product is None:
        raise NotFoundError("Product", product_id)
    return StockStatus.of(product)


def stock_overview(snapshot: StoreSnapshot) -> Dict[int, StockStatus]:
    return {pid: stock_status(snapshot, pid) for pid in sorted(snapshot.products)}


def recent_activity(snapshot: StoreSnapshot, limit: int) -> List[ActionLogEntry]:
    return recent_first(snapshot.activity, limit)


def revenue_by_branch(snapshot: StoreSnapshot) -> Dict[int, int]:
    """Revenue per branch id; branches with no sales report 0."""
    totals = {branch_id: 0 for branch_id in sorted(snapshot.branches)}
    for sale in snapshot.sales.values():
        totals[sale.branch_id] = totals.get(sale.branch_id, 0) + sale.amount
    return totals


def discount_given(snapshot: StoreSnapshot) -> int:
    """
    List price minus charged amount, summed over all sales.

    Uses the product's current price; prices are not mutable in
    this store so that equals the price at time of sale.
    """
    total = 0
    for sale in snapshot.sales.values():
        product = snapshot.products[sale.product_id]
        total += list_amount(product.price, sale.quantity) - sale.amount
    return total


def dashboard_summary(snapshot: StoreSnapshot) -> DashboardSummary:
    out_of_stock = sum(1 for p in snapshot.products.values() if p.stock <= 0)
    return DashboardSummary(
        total_revenue=total_revenue(snapshot),
        sale_count=len(snapshot.sales),
        active_products=len(snapshot.products),
        out_of_stock_products=out_of_stock,
        currency=snapshot.config.currency,
    )


# ══════════════════════════════════════════════════════════════
# APPLICATION SERVICE
# ══════════════════════════════════════════════════════════════

class ReportingService:
    """Aggregation Engine bound to one EntityStore."""

    def __init__(self, store: EntityStore):
        self._store = store

    def _snapshot(self) -> StoreSnapshot:
        return self._store.snapshot()

    def total_revenue(self) -> int:
        return total_revenue(self._snapshot())

    def revenue_by_period(
        self,
        granularity,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> List[RevenueBucket]:
        buckets = revenue_by_period(self._snapshot(), granularity, start, end)
        logger.debug(
            f"revenue_by_period({granularity}, {start}, {end}) -> "
            f"{len(buckets)} buckets"
        )
        return buckets

    def stock_status(self, product_id: int) -> StockStatus:
        return stock_status(self._snapshot(), product_id)

    def stock_overview(self) -> Dict[int, StockStatus]:
        return stock_overview(self._snapshot())

    def recent_activity(self, limit: Optional[int] = None) -> List[ActionLogEntry]:
        snapshot = self._snapshot()
        if limit is None:
            limit = snapshot.config.recent_activity_limit
        return recent_activity(snapshot, limit)

    def revenue_by_branch(self) -> Dict[int, int]:
        return revenue_by_branch(self._snapshot())

    def discount_given(self) -> int:
        return discount_given(self._snapshot())

    def dashboard_summary(self) -> DashboardSummary:
        return dashboard_summary(self._snapshot())
