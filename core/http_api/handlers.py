"""
BillingCore HTTP API - Framework-Agnostic Handlers
====================================================
Pure handler functions over contracts and injected dependencies.
Each returns the response envelope as a plain dict; StoreErrors
become error envelopes, never exceptions.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from core.http_api.contracts import (
    ActivityReadRequest,
    BranchScopedReadRequest,
    ProductCreateHttpRequest,
    RevenueReadRequest,
    SaleRecordHttpRequest,
    StockAdjustHttpRequest,
)
from core.http_api.dependencies import HttpApiDependencies
from core.http_api.errors import store_error_response, success_response
from engines.reporting.models import StockStatus
from engines.store.errors import StoreError
from engines.store.models import Product, Sale

logger = logging.getLogger("billingcore.http")


def _guarded(operation: str, fn: Callable[[], Any]) -> dict[str, Any]:
    try:
        return fn()
    except StoreError as exc:
        logger.info(f"{operation} -> {exc.code}")
        return store_error_response(exc)


# ══════════════════════════════════════════════════════════════
# QUERIES
# ══════════════════════════════════════════════════════════════

def get_dashboard_summary(deps: HttpApiDependencies) -> dict[str, Any]:
    reporting = deps.reporting
    summary = reporting.dashboard_summary()
    return success_response(
        summary.to_dict(),
        meta={"revenue_by_branch": {
            str(k): v for k, v in reporting.revenue_by_branch().items()
        }},
    )


def get_revenue_trend(
    request: RevenueReadRequest, deps: HttpApiDependencies
) -> dict[str, Any]:
    def _run():
        buckets = deps.reporting.revenue_by_period(
            request.granularity, request.start, request.end
        )
        return success_response([b.to_dict() for b in buckets])

    return _guarded("revenue_trend", _run)


def get_recent_activity(
    request: ActivityReadRequest, deps: HttpApiDependencies
) -> dict[str, Any]:
    def _run():
        entries = deps.reporting.recent_activity(request.limit)
        return success_response([e.to_dict() for e in entries])

    return _guarded("recent_activity", _run)


def get_stock_status(product_id: int, deps: HttpApiDependencies) -> dict[str, Any]:
    def _run():
        status = deps.reporting.stock_status(product_id)
        return success_response(
            {"product_id": product_id, "status": status.value}
        )

    return _guarded("stock_status", _run)


def list_branches(deps: HttpApiDependencies) -> dict[str, Any]:
    return success_response(
        [b.to_dict() for _, b in sorted(deps.store.branches.items())]
    )


def list_employees(
    request: BranchScopedReadRequest, deps: HttpApiDependencies
) -> dict[str, Any]:
    def _run():
        if request.branch_id is None:
            rows = [e for _, e in sorted(deps.store.employees.items())]
        else:
            rows = deps.store.employees_by_branch(request.branch_id)
        return success_response([e.to_dict() for e in rows])

    return _guarded("list_employees", _run)


def list_products(
    request: BranchScopedReadRequest, deps: HttpApiDependencies
) -> dict[str, Any]:
    def _run():
        if request.branch_id is None:
            rows = [p for _, p in sorted(deps.store.products.items())]
        else:
            rows = deps.store.products_by_branch(request.branch_id)
        data = []
        for product in rows:
            item = product.to_dict()
            item["status"] = StockStatus.of(product).value
            data.append(item)
        return success_response(data)

    return _guarded("list_products", _run)


def list_customer_groups(deps: HttpApiDependencies) -> dict[str, Any]:
    return success_response(
        [g.to_dict() for _, g in sorted(deps.store.customer_groups.items())]
    )


def list_sales(deps: HttpApiDependencies) -> dict[str, Any]:
    return success_response(
        [s.to_dict() for _, s in sorted(deps.store.sales.items())]
    )


# ══════════════════════════════════════════════════════════════
# COMMANDS
# ══════════════════════════════════════════════════════════════

def post_product_create(
    request: ProductCreateHttpRequest, deps: HttpApiDependencies
) -> dict[str, Any]:
    def _run():
        product = deps.store.add_product(
            Product(
                id=request.product_id,
                name=request.name,
                category=request.category,
                price=request.price,
                stock=request.stock,
                branch_id=request.branch_id,
            ),
            actor=request.actor,
        )
        return success_response(product.to_dict())

    return _guarded("product_create", _run)


def post_stock_adjust(
    request: StockAdjustHttpRequest, deps: HttpApiDependencies
) -> dict[str, Any]:
    def _run():
        new_stock = deps.store.adjust_stock(
            request.product_id, request.delta, actor=request.actor
        )
        return success_response(
            {"product_id": request.product_id, "stock": new_stock}
        )

    return _guarded("stock_adjust", _run)


def post_sale_record(
    request: SaleRecordHttpRequest, deps: HttpApiDependencies
) -> dict[str, Any]:
    def _run():
        fields = dict(
            date=request.sale_date,
            product_id=request.product_id,
            employee_id=(
                request.employee_id
                if request.employee_id is not None
                else request.actor.employee_id
            ),
            branch_id=(
                request.branch_id
                if request.branch_id is not None
                else request.actor.branch_id
            ),
            customer_group_id=request.customer_group_id,
            quantity=request.quantity,
            amount=request.amount,
        )
        if request.sale_id is None:
            sale = deps.store.record_new_sale(**fields)
        else:
            sale = deps.store.record_sale(Sale(id=request.sale_id, **fields))
        return success_response(sale.to_dict())

    return _guarded("sale_record", _run)
