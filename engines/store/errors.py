"""
BillingCore Entity Store — Errors
===================================
Every rejected command raises one of these. All of them are
recoverable at the call site: the store is left exactly as it was
before the call.
"""

from __future__ import annotations

from typing import Any, Optional


class StoreError(Exception):
    """Base error for Entity Store operations."""

    code = "STORE_ERROR"

    def to_dict(self) -> dict:
        return {"code": self.code, "message": str(self)}


class NotFoundError(StoreError):
    """An id reference does not resolve to a stored row."""

    code = "NOT_FOUND"

    def __init__(self, entity: str, entity_id: Any):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} with id {entity_id!r} not found.")

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["entity"] = self.entity
        data["entity_id"] = self.entity_id
        return data


class ValidationError(StoreError, ValueError):
    """Numeric range, uniqueness, or computed-value mismatch."""

    code = "VALIDATION_FAILED"

    def __init__(self, message: str, *, field: Optional[str] = None):
        self.field = field
        super().__init__(message)

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["field"] = self.field
        return data


class InvariantViolation(StoreError):
    """The mutation would drive stock negative."""

    code = "INVARIANT_VIOLATION"

    def __init__(self, product_id: int, current_stock: int, delta: int):
        self.product_id = product_id
        self.current_stock = current_stock
        self.delta = delta
        super().__init__(
            f"Stock for product {product_id} cannot go below zero: "
            f"{current_stock} {delta:+d} = {current_stock + delta}."
        )

    def to_dict(self) -> dict:
        data = super().to_dict()
        data.update(
            product_id=self.product_id,
            current_stock=self.current_stock,
            delta=self.delta,
        )
        return data


class InsufficientStockError(StoreError):
    """Sale quantity exceeds the stock on hand."""

    code = "INSUFFICIENT_STOCK"

    def __init__(self, product_id: int, requested: int, available: int):
        self.product_id = product_id
        self.requested = requested
        self.available = available
        super().__init__(
            f"Insufficient stock: {available} available, "
            f"{requested} requested for product {product_id}."
        )

    def to_dict(self) -> dict:
        data = super().to_dict()
        data.update(
            product_id=self.product_id,
            requested=self.requested,
            available=self.available,
        )
        return data
