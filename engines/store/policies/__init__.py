"""
BillingCore Entity Store — Integrity Policies
===============================================
Pure, stateless checks run by the Entity Store before a mutation
is committed. Each check either returns None or raises a typed
StoreError; none of them touches the store.

A failed check rejects the whole command and leaves the store
exactly as it was.
"""

from __future__ import annotations

from decimal import ROUND_HALF_EVEN, Decimal
from typing import Any, Mapping

from core.primitives.pricing import discounted_amount, to_decimal
from engines.store.errors import (
    InsufficientStockError,
    NotFoundError,
    ValidationError,
)

_COLLECTION_ENTITY_NAMES = {
    "branches": "Branch",
    "employees": "Employee",
    "products": "Product",
    "customer_groups": "CustomerGroup",
    "sales": "Sale",
}


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


# ══════════════════════════════════════════════════════════════
# REFERENTIAL INTEGRITY
# ══════════════════════════════════════════════════════════════

def validate_foreign_keys(entity: Any, store: Any) -> None:
    """
    Every foreign key declared on the entity must resolve in store.

    store is anything exposing the collections named in
    entity.FOREIGN_KEYS as id → entity mappings (an EntityStore's
    live view or a StoreSnapshot).

    An entity type declaring no foreign keys is a caller error, not
    an implicit "nothing to check".
    """
    declared = getattr(type(entity), "FOREIGN_KEYS", None)
    if not declared:
        raise ValidationError(
            f"{type(entity).__name__} declares no foreign keys to validate."
        )

    for field_name, collection_name in declared:
        collection: Mapping[int, Any] = getattr(store, collection_name)
        ref_id = getattr(entity, field_name)
        if ref_id not in collection:
            raise NotFoundError(
                _COLLECTION_ENTITY_NAMES.get(collection_name, collection_name),
                ref_id,
            )


def validate_unique_id(entity: Any, collection: Mapping[int, Any]) -> None:
    if entity.id in collection:
        raise ValidationError(
            f"{type(entity).__name__} id {entity.id} already exists.",
            field="id",
        )


# ══════════════════════════════════════════════════════════════
# NUMERIC RANGES
# ══════════════════════════════════════════════════════════════

def _non_negative_int(entity: Any, name: str) -> None:
    value = getattr(entity, name)
    if not _is_int(value):
        raise ValidationError(
            f"{name} must be an int (minor units), got {type(value).__name__}.",
            field=name,
        )
    if value < 0:
        raise ValidationError(f"{name} must be >= 0, got {value}.", field=name)


def validate_numeric_ranges(entity: Any) -> None:
    """
    Range checks for whichever numeric fields the entity carries:
    price/stock/amount >= 0, discount_percent in [0, 100],
    quantity >= 1.
    """
    for name in ("price", "stock", "amount"):
        if hasattr(entity, name):
            _non_negative_int(entity, name)

    if hasattr(entity, "quantity"):
        quantity = entity.quantity
        if not _is_int(quantity) or quantity < 1:
            raise ValidationError(
                f"quantity must be an int >= 1, got {quantity!r}.",
                field="quantity",
            )

    if hasattr(entity, "discount_percent"):
        try:
            discount = to_decimal(entity.discount_percent)
        except TypeError as exc:
            raise ValidationError(str(exc), field="discount_percent") from exc
        if not discount.is_finite() or not (0 <= discount <= 100):
            raise ValidationError(
                f"discount_percent must be within [0, 100], "
                f"got {entity.discount_percent}.",
                field="discount_percent",
            )


# ══════════════════════════════════════════════════════════════
# SALE CHECKS
# ══════════════════════════════════════════════════════════════

def expected_sale_amount(
    sale: Any, product: Any, group: Any, rounding: str = ROUND_HALF_EVEN
) -> int:
    return discounted_amount(
        product.price, sale.quantity, group.discount_percent, rounding
    )


def validate_sale_amount(
    sale: Any,
    product: Any,
    group: Any,
    tolerance: int = 0,
    rounding: str = ROUND_HALF_EVEN,
) -> None:
    """
    Recompute the discount-adjusted amount and compare.

    A mismatch beyond tolerance (minor units) is rejected, never
    silently corrected.
    """
    expected = expected_sale_amount(sale, product, group, rounding)
    if abs(Decimal(sale.amount) - expected) > tolerance:
        raise ValidationError(
            f"Sale amount {sale.amount} does not match expected {expected} "
            f"({product.price} x {sale.quantity} less "
            f"{group.discount_percent}% for group {group.id}).",
            field="amount",
        )


def validate_stock_available(product: Any, quantity: int) -> None:
    if quantity > product.stock:
        raise InsufficientStockError(
            product_id=product.id,
            requested=quantity,
            available=product.stock,
        )
