"""
BillingCore HTTP API - Contracts
==================================
Framework-agnostic request/response DTOs for dashboard endpoints.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Mapping, Optional

from core.context.actor_context import ActorContext

EMPLOYEE_HEADER = "X-EMPLOYEE-ID"
BRANCH_HEADER = "X-BRANCH-ID"


def _require_int(value: Any, name: str) -> int:
    if isinstance(value, bool):
        raise ValueError(f"{name} must be an integer.")
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().lstrip("-").isdigit():
        return int(value.strip())
    raise ValueError(f"{name} must be an integer.")


def parse_int(value: Any, name: str) -> int:
    return _require_int(value, name)


def parse_optional_date(value: Any, name: str) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value))
    except ValueError as exc:
        raise ValueError(f"{name} must be an ISO date (YYYY-MM-DD).") from exc


def actor_from_headers(headers: Mapping[str, str]) -> ActorContext:
    """
    Actor identity supplied by the session layer.

    Header lookup is case-insensitive; both headers are required.
    """
    normalized = {str(k).upper(): v for k, v in headers.items()}
    employee_raw = normalized.get(EMPLOYEE_HEADER)
    branch_raw = normalized.get(BRANCH_HEADER)
    if employee_raw is None or branch_raw is None:
        raise ValueError(
            f"{EMPLOYEE_HEADER} and {BRANCH_HEADER} headers are required."
        )
    return ActorContext(
        employee_id=_require_int(employee_raw, EMPLOYEE_HEADER),
        branch_id=_require_int(branch_raw, BRANCH_HEADER),
    )


# ══════════════════════════════════════════════════════════════
# READ REQUESTS
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class RevenueReadRequest:
    granularity: str = "month"
    start: Optional[date] = None
    end: Optional[date] = None

    def __post_init__(self):
        if not self.granularity or not isinstance(self.granularity, str):
            raise ValueError("granularity must be a non-empty string.")


@dataclass(frozen=True)
class ActivityReadRequest:
    limit: Optional[int] = None

    def __post_init__(self):
        if self.limit is not None and (
            not isinstance(self.limit, int) or self.limit < 0
        ):
            raise ValueError("limit must be a non-negative integer.")


@dataclass(frozen=True)
class BranchScopedReadRequest:
    branch_id: Optional[int] = None


# ══════════════════════════════════════════════════════════════
# WRITE REQUESTS
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class ProductCreateHttpRequest:
    actor: ActorContext
    product_id: int
    name: str
    category: str
    price: int
    stock: int
    branch_id: int

    def __post_init__(self):
        if not isinstance(self.actor, ActorContext):
            raise ValueError("actor must be ActorContext.")


@dataclass(frozen=True)
class StockAdjustHttpRequest:
    actor: ActorContext
    product_id: int
    delta: int

    def __post_init__(self):
        if not isinstance(self.actor, ActorContext):
            raise ValueError("actor must be ActorContext.")


@dataclass(frozen=True)
class SaleRecordHttpRequest:
    """
    A sale submitted from the till.

    employee_id and branch_id default to the actor's; sale_id is
    allocated by the store when omitted.
    """

    actor: ActorContext
    sale_date: date
    product_id: int
    customer_group_id: int
    quantity: int
    amount: int
    employee_id: Optional[int] = None
    branch_id: Optional[int] = None
    sale_id: Optional[int] = None

    def __post_init__(self):
        if not isinstance(self.actor, ActorContext):
            raise ValueError("actor must be ActorContext.")
        if not isinstance(self.sale_date, date):
            raise ValueError("sale_date must be a date.")


# ══════════════════════════════════════════════════════════════
# RESPONSE ENVELOPE
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class HttpApiErrorBody:
    code: str
    message: str
    details: Optional[dict[str, Any]] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "details": dict(self.details or {}),
        }


@dataclass(frozen=True)
class HttpApiResponse:
    ok: bool
    data: Any = None
    error: Optional[HttpApiErrorBody] = None
    meta: Optional[dict[str, Any]] = None

    def to_dict(self) -> dict[str, Any]:
        if self.ok:
            body = {"ok": True, "data": self.data}
            if self.meta:
                body["meta"] = dict(self.meta)
            return body
        if self.error is None:
            raise ValueError("error must be set when ok is False.")
        return {"ok": False, "error": self.error.to_dict()}
