"""
BillingCore Entity Store — Entities
=====================================
Branches, employees, products, customer groups and sales.

RULES:
- Entities are frozen; the store replaces, never edits, a row
- Ids are ints, unique per collection, immutable once created
- Money is integer minor units (price, amount)
- Constructors check shape only; numeric ranges and foreign keys
  are the Integrity Validator's job so that a bad candidate can
  still be built and then rejected with a typed error

FOREIGN_KEYS on each entity lists (field, collection) pairs the
validator resolves against the store.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import ClassVar, Tuple, Union

from engines.store.errors import ValidationError


def _require_id(value, name: str) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise ValidationError(f"{name} must be an int.", field=name)


def _require_text(value, name: str) -> None:
    if not value or not isinstance(value, str):
        raise ValidationError(f"{name} must be a non-empty string.", field=name)


# ══════════════════════════════════════════════════════════════
# BRANCH
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Branch:
    """A physical retail location."""

    FOREIGN_KEYS: ClassVar[Tuple[Tuple[str, str], ...]] = ()

    id: int
    name: str
    location: str

    def __post_init__(self):
        _require_id(self.id, "id")
        _require_text(self.name, "name")
        _require_text(self.location, "location")

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name, "location": self.location}


# ══════════════════════════════════════════════════════════════
# EMPLOYEE
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Employee:
    FOREIGN_KEYS: ClassVar[Tuple[Tuple[str, str], ...]] = (
        ("branch_id", "branches"),
    )

    id: int
    name: str
    branch_id: int
    role: str

    def __post_init__(self):
        _require_id(self.id, "id")
        _require_text(self.name, "name")
        _require_id(self.branch_id, "branch_id")
        _require_text(self.role, "role")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "branch_id": self.branch_id,
            "role": self.role,
        }


# ══════════════════════════════════════════════════════════════
# PRODUCT
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Product:
    """
    A sellable item stocked at one branch.

    stock changes only through EntityStore.adjust_stock and
    EntityStore.record_sale.
    """

    FOREIGN_KEYS: ClassVar[Tuple[Tuple[str, str], ...]] = (
        ("branch_id", "branches"),
    )

    id: int
    name: str
    category: str
    price: int
    stock: int
    branch_id: int

    def __post_init__(self):
        _require_id(self.id, "id")
        _require_text(self.name, "name")
        _require_text(self.category, "category")
        _require_id(self.branch_id, "branch_id")

    @property
    def in_stock(self) -> bool:
        return self.stock > 0

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "price": self.price,
            "stock": self.stock,
            "branch_id": self.branch_id,
        }


# ══════════════════════════════════════════════════════════════
# CUSTOMER GROUP
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class CustomerGroup:
    """A named discount tier applied to a sale."""

    FOREIGN_KEYS: ClassVar[Tuple[Tuple[str, str], ...]] = ()

    id: int
    name: str
    discount_percent: Union[int, Decimal]

    def __post_init__(self):
        _require_id(self.id, "id")
        _require_text(self.name, "name")

    def to_dict(self) -> dict:
        discount = self.discount_percent
        return {
            "id": self.id,
            "name": self.name,
            "discount_percent": (
                str(discount) if isinstance(discount, Decimal) else discount
            ),
        }


# ══════════════════════════════════════════════════════════════
# SALE
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Sale:
    """
    One sales transaction.

    amount is redundant with price × quantity × discount and is
    checked, not trusted, when the sale is recorded.
    """

    FOREIGN_KEYS: ClassVar[Tuple[Tuple[str, str], ...]] = (
        ("product_id", "products"),
        ("employee_id", "employees"),
        ("branch_id", "branches"),
        ("customer_group_id", "customer_groups"),
    )

    id: int
    date: date
    product_id: int
    employee_id: int
    branch_id: int
    customer_group_id: int
    quantity: int
    amount: int

    def __post_init__(self):
        _require_id(self.id, "id")
        for name in ("product_id", "employee_id", "branch_id", "customer_group_id"):
            _require_id(getattr(self, name), name)
        if isinstance(self.date, datetime):
            object.__setattr__(self, "date", self.date.date())
        elif not isinstance(self.date, date):
            raise ValidationError("date must be a date.", field="date")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "date": self.date.isoformat(),
            "product_id": self.product_id,
            "employee_id": self.employee_id,
            "branch_id": self.branch_id,
            "customer_group_id": self.customer_group_id,
            "quantity": self.quantity,
            "amount": self.amount,
        }
