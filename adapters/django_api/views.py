"""
BillingCore Django Adapter Views
==================================
Pass-through HTTP views over core/http_api handlers.
"""

from __future__ import annotations

import json
from typing import Any

from django.http import HttpRequest, JsonResponse
from django.views.decorators.csrf import csrf_exempt

from adapters.django_api.wiring import build_dependencies
from core.http_api.contracts import (
    ActivityReadRequest,
    BranchScopedReadRequest,
    ProductCreateHttpRequest,
    RevenueReadRequest,
    SaleRecordHttpRequest,
    StockAdjustHttpRequest,
    actor_from_headers,
    parse_int,
    parse_optional_date,
)
from core.http_api.errors import (
    INVALID_REQUEST,
    METHOD_NOT_ALLOWED,
    error_response,
    http_status_for,
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


def _headers_from_request(request: HttpRequest) -> dict[str, str]:
    return {str(key): str(value) for key, value in request.headers.items()}


def _json(payload: dict[str, Any]) -> JsonResponse:
    return JsonResponse(payload, status=http_status_for(payload))


def _json_error(code: str, message: str) -> JsonResponse:
    return _json(error_response(code=code, message=message, details={}))


def _parse_json_body(request: HttpRequest) -> dict[str, Any]:
    if not request.body:
        return {}
    try:
        parsed = json.loads(request.body.decode("utf-8"))
    except Exception as exc:
        raise ValueError("Request body must be valid JSON.") from exc
    if not isinstance(parsed, dict):
        raise ValueError("Request body must be a JSON object.")
    return parsed


def _optional_int(value: Any, field_name: str) -> int | None:
    if value is None or value == "":
        return None
    return parse_int(value, field_name)


def _method_not_allowed() -> JsonResponse:
    return _json_error(METHOD_NOT_ALLOWED, "Method not allowed for this endpoint.")


def _dispatch_read(read_handler, request_contract_factory, request: HttpRequest):
    try:
        contract = request_contract_factory(query=request.GET)
    except (ValueError, KeyError) as exc:
        return _json_error(INVALID_REQUEST, str(exc))
    if contract is None:
        return _json(read_handler(build_dependencies()))
    return _json(read_handler(contract, build_dependencies()))


def _dispatch_write(write_handler, request_contract_factory, request: HttpRequest, **kwargs):
    try:
        body = _parse_json_body(request)
        actor = actor_from_headers(_headers_from_request(request))
        contract = request_contract_factory(body=body, actor=actor, **kwargs)
    except (ValueError, KeyError) as exc:
        return _json_error(INVALID_REQUEST, str(exc))
    return _json(write_handler(contract, build_dependencies()))


# ── Contract factories ────────────────────────────────────────

def _no_contract(*, query):
    return None


def _revenue_contract_factory(*, query):
    return RevenueReadRequest(
        granularity=query.get("granularity", "month"),
        start=parse_optional_date(query.get("start"), "start"),
        end=parse_optional_date(query.get("end"), "end"),
    )


def _activity_contract_factory(*, query):
    return ActivityReadRequest(limit=_optional_int(query.get("limit"), "limit"))


def _branch_scoped_contract_factory(*, query):
    return BranchScopedReadRequest(
        branch_id=_optional_int(query.get("branch_id"), "branch_id")
    )


def _product_create_contract_factory(*, body, actor):
    return ProductCreateHttpRequest(
        actor=actor,
        product_id=parse_int(body["id"], "id"),
        name=body["name"],
        category=body["category"],
        price=parse_int(body["price"], "price"),
        stock=parse_int(body["stock"], "stock"),
        branch_id=parse_int(body["branch_id"], "branch_id"),
    )


def _stock_adjust_contract_factory(*, body, actor, product_id):
    return StockAdjustHttpRequest(
        actor=actor,
        product_id=product_id,
        delta=parse_int(body["delta"], "delta"),
    )


def _sale_record_contract_factory(*, body, actor):
    sale_date = parse_optional_date(body["date"], "date")
    if sale_date is None:
        raise ValueError("date is required.")
    return SaleRecordHttpRequest(
        actor=actor,
        sale_date=sale_date,
        product_id=parse_int(body["product_id"], "product_id"),
        customer_group_id=parse_int(body["customer_group_id"], "customer_group_id"),
        quantity=parse_int(body["quantity"], "quantity"),
        amount=parse_int(body["amount"], "amount"),
        employee_id=_optional_int(body.get("employee_id"), "employee_id"),
        branch_id=_optional_int(body.get("branch_id"), "branch_id"),
        sale_id=_optional_int(body.get("id"), "id"),
    )


# ── Read views ────────────────────────────────────────────────

@csrf_exempt
def dashboard_summary_view(request: HttpRequest) -> JsonResponse:
    if request.method != "GET":
        return _method_not_allowed()
    return _dispatch_read(get_dashboard_summary, _no_contract, request)


@csrf_exempt
def revenue_trend_view(request: HttpRequest) -> JsonResponse:
    if request.method != "GET":
        return _method_not_allowed()
    return _dispatch_read(get_revenue_trend, _revenue_contract_factory, request)


@csrf_exempt
def recent_activity_view(request: HttpRequest) -> JsonResponse:
    if request.method != "GET":
        return _method_not_allowed()
    return _dispatch_read(get_recent_activity, _activity_contract_factory, request)


@csrf_exempt
def branches_list_view(request: HttpRequest) -> JsonResponse:
    if request.method != "GET":
        return _method_not_allowed()
    return _dispatch_read(list_branches, _no_contract, request)


@csrf_exempt
def employees_list_view(request: HttpRequest) -> JsonResponse:
    if request.method != "GET":
        return _method_not_allowed()
    return _dispatch_read(list_employees, _branch_scoped_contract_factory, request)


@csrf_exempt
def customer_groups_list_view(request: HttpRequest) -> JsonResponse:
    if request.method != "GET":
        return _method_not_allowed()
    return _dispatch_read(list_customer_groups, _no_contract, request)


@csrf_exempt
def products_list_view(request: HttpRequest) -> JsonResponse:
    if request.method != "GET":
        return _method_not_allowed()
    return _dispatch_read(list_products, _branch_scoped_contract_factory, request)


@csrf_exempt
def sales_list_view(request: HttpRequest) -> JsonResponse:
    if request.method != "GET":
        return _method_not_allowed()
    return _dispatch_read(list_sales, _no_contract, request)


@csrf_exempt
def stock_status_view(request: HttpRequest, product_id: int) -> JsonResponse:
    if request.method != "GET":
        return _method_not_allowed()
    return _json(get_stock_status(product_id, build_dependencies()))


# ── Write views ───────────────────────────────────────────────

@csrf_exempt
def product_create_view(request: HttpRequest) -> JsonResponse:
    if request.method != "POST":
        return _method_not_allowed()
    return _dispatch_write(
        post_product_create,
        _product_create_contract_factory,
        request,
    )


@csrf_exempt
def stock_adjust_view(request: HttpRequest, product_id: int) -> JsonResponse:
    if request.method != "POST":
        return _method_not_allowed()
    return _dispatch_write(
        post_stock_adjust,
        _stock_adjust_contract_factory,
        request,
        product_id=product_id,
    )


@csrf_exempt
def sale_record_view(request: HttpRequest) -> JsonResponse:
    if request.method != "POST":
        return _method_not_allowed()
    return _dispatch_write(
        post_sale_record,
        _sale_record_contract_factory,
        request,
    )
