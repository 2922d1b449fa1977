"""
BillingCore HTTP API - Public API
===================================
"""

from core.http_api.contracts import (
    ActivityReadRequest,
    BranchScopedReadRequest,
    HttpApiErrorBody,
    HttpApiResponse,
    ProductCreateHttpRequest,
    RevenueReadRequest,
    SaleRecordHttpRequest,
    StockAdjustHttpRequest,
    actor_from_headers,
)
from core.http_api.dependencies import HttpApiDependencies
from core.http_api.errors import (
    error_response,
    http_status_for,
    store_error_response,
    success_response,
)
from core.http_api.handlers import (
    get_dashboard_summary,
    get_recent_activity,
    get_revenue_trend,
    get_stock_status,
    list_branches,
    list_customer_groups,
    list_employees,
    list_products,
    list_sales,
    post_product_create,
    post_sale_record,
    post_stock_adjust,
)

__all__ = [
    "ActivityReadRequest",
    "BranchScopedReadRequest",
    "RevenueReadRequest",
    "ProductCreateHttpRequest",
    "StockAdjustHttpRequest",
    "SaleRecordHttpRequest",
    "HttpApiErrorBody",
    "HttpApiResponse",
    "HttpApiDependencies",
    "actor_from_headers",
    "error_response",
    "success_response",
    "store_error_response",
    "http_status_for",
    "get_dashboard_summary",
    "get_revenue_trend",
    "get_recent_activity",
    "get_stock_status",
    "list_branches",
    "list_employees",
    "list_products",
    "list_customer_groups",
    "list_sales",
    "post_product_create",
    "post_stock_adjust",
    "post_sale_record",
]
