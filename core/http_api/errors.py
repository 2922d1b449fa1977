"""
BillingCore HTTP API - Error Mapping
======================================
Stable transport error mapping for store rejections and bad requests.
"""

from __future__ import annotations

from typing import Any, Optional

from core.http_api.contracts import HttpApiErrorBody, HttpApiResponse
from engines.store.errors import StoreError

INVALID_REQUEST = "INVALID_REQUEST"
METHOD_NOT_ALLOWED = "METHOD_NOT_ALLOWED"

HTTP_STATUS_BY_CODE = {
    INVALID_REQUEST: 400,
    METHOD_NOT_ALLOWED: 405,
    "VALIDATION_FAILED": 400,
    "NOT_FOUND": 404,
    "INVARIANT_VIOLATION": 409,
    "INSUFFICIENT_STOCK": 409,
}


def error_response(
    *,
    code: str,
    message: str,
    details: Optional[dict[str, Any]] = None,
) -> dict[str, Any]:
    return HttpApiResponse(
        ok=False,
        error=HttpApiErrorBody(
            code=code,
            message=message,
            details=details or {},
        ),
    ).to_dict()


def success_response(
    data: Any,
    *,
    meta: Optional[dict[str, Any]] = None,
) -> dict[str, Any]:
    return HttpApiResponse(ok=True, data=data, meta=meta).to_dict()


def store_error_response(exc: StoreError) -> dict[str, Any]:
    details = exc.to_dict()
    details.pop("code", None)
    details.pop("message", None)
    return error_response(code=exc.code, message=str(exc), details=details)


def http_status_for(payload: dict[str, Any]) -> int:
    if payload.get("ok"):
        return 200
    code = payload.get("error", {}).get("code")
    return HTTP_STATUS_BY_CODE.get(code, 400)
