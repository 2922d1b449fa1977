"""
BillingCore Entity Store — Application Service
================================================
Canonical in-memory collections for one retail business:
branches, employees, products, customer groups, sales, and the
action log that records every accepted mutation.

Write path (single logical writer):
    validate (policies) → apply → append action log entry
all inside one store-wide lock, so concurrent sales cannot race
on the same product's stock. A rejected command raises a
StoreError and changes nothing.

Read path:
    snapshot() copies the id → entity maps under the same lock.
    Entities are frozen, so a snapshot stays consistent no matter
    what the writers do afterwards.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from threading import Lock
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Tuple

from core.config.rules import DEFAULT_STORE_CONFIG, StoreConfig
from core.context.actor_context import ActorContext
from core.time.clock import Clock
from engines.activity.models import ActionLogEntry, ActionType
from engines.activity.services import ActivityLog
from engines.store.errors import (
    InvariantViolation,
    NotFoundError,
    StoreError,
    ValidationError,
)
from engines.store.models import Branch, CustomerGroup, Employee, Product, Sale
from engines.store.policies import (
    validate_foreign_keys,
    validate_numeric_ranges,
    validate_sale_amount,
    validate_stock_available,
    validate_unique_id,
)

logger = logging.getLogger("billingcore.store")


# ══════════════════════════════════════════════════════════════
# SNAPSHOT
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class StoreSnapshot:
    """
    Point-in-time, read-only copy of the store.

    The Aggregation Engine computes every dashboard view from one
    of these, never from the live store.
    """

    branches: Mapping[int, Branch]
    employees: Mapping[int, Employee]
    products: Mapping[int, Product]
    customer_groups: Mapping[int, CustomerGroup]
    sales: Mapping[int, Sale]
    activity: Tuple[ActionLogEntry, ...]
    config: StoreConfig = DEFAULT_STORE_CONFIG


@dataclass(frozen=True)
class _Tables:
    # live references for validators running inside the lock
    branches: Dict[int, Branch]
    employees: Dict[int, Employee]
    products: Dict[int, Product]
    customer_groups: Dict[int, CustomerGroup]
    sales: Dict[int, Sale]


# ══════════════════════════════════════════════════════════════
# ENTITY STORE
# ══════════════════════════════════════════════════════════════

class EntityStore:
    """
    Owns every entity collection and the ActivityLog.

    One instance per business; nothing here is global, so each test
    builds its own store.

    Usage:
        store = EntityStore(clock=FixedClock(T0))
        store.add_branch(Branch(id=1, name="Main Branch", location="Dhaka"))
        ...
        store.record_sale(sale)
        ReportingService(store).total_revenue()
    """

    def __init__(
        self,
        *,
        config: Optional[StoreConfig] = None,
        clock: Optional[Clock] = None,
        activity_log: Optional[ActivityLog] = None,
    ):
        self._config = config or DEFAULT_STORE_CONFIG
        self._activity = activity_log or ActivityLog(clock)
        self._branches: Dict[int, Branch] = {}
        self._employees: Dict[int, Employee] = {}
        self._products: Dict[int, Product] = {}
        self._customer_groups: Dict[int, CustomerGroup] = {}
        self._sales: Dict[int, Sale] = {}
        self._tables = _Tables(
            branches=self._branches,
            employees=self._employees,
            products=self._products,
            customer_groups=self._customer_groups,
            sales=self._sales,
        )
        self._lock = Lock()

    @property
    def config(self) -> StoreConfig:
        return self._config

    @property
    def activity(self) -> ActivityLog:
        return self._activity

    # ══════════════════════════════════════════════════════════
    # CONSTRUCTORS
    # ══════════════════════════════════════════════════════════

    def add_branch(
        self, branch: Branch, *, actor: Optional[ActorContext] = None
    ) -> Branch:
        with self._lock:
            try:
                validate_unique_id(branch, self._branches)
                if actor is not None:
                    self._resolve_actor(actor)
            except StoreError as exc:
                self._rejected("add_branch", exc)
                raise
            self._branches[branch.id] = branch
            if actor is not None:
                self._log(
                    ActionType.BRANCH_CREATED, actor,
                    f"Opened branch {branch.name} ({branch.location})",
                    entity_type="Branch", entity_id=branch.id,
                )
        logger.info(f"Branch added: {branch.id} '{branch.name}'")
        return branch

    def add_employee(
        self, employee: Employee, *, actor: Optional[ActorContext] = None
    ) -> Employee:
        with self._lock:
            try:
                validate_unique_id(employee, self._employees)
                self._require_references(employee)
                if actor is not None:
                    self._resolve_actor(actor)
            except StoreError as exc:
                self._rejected("add_employee", exc)
                raise
            self._employees[employee.id] = employee
            if actor is not None:
                self._log(
                    ActionType.EMPLOYEE_CREATED, actor,
                    f"Added {employee.role} {employee.name}",
                    entity_type="Employee", entity_id=employee.id,
                )
        logger.info(f"Employee added: {employee.id} '{employee.name}'")
        return employee

    def add_customer_group(
        self, group: CustomerGroup, *, actor: Optional[ActorContext] = None
    ) -> CustomerGroup:
        with self._lock:
            try:
                validate_unique_id(group, self._customer_groups)
                validate_numeric_ranges(group)
                if actor is not None:
                    self._resolve_actor(actor)
            except StoreError as exc:
                self._rejected("add_customer_group", exc)
                raise
            self._customer_groups[group.id] = group
            if actor is not None:
                self._log(
                    ActionType.CUSTOMER_GROUP_CREATED, actor,
                    f"Created customer group {group.name} "
                    f"({group.discount_percent}% discount)",
                    entity_type="CustomerGroup", entity_id=group.id,
                )
        logger.info(f"Customer group added: {group.id} '{group.name}'")
        return group

    def add_product(
        self, product: Product, *, actor: Optional[ActorContext] = None
    ) -> Product:
        """
        Insert a new product.

        Raises:
            ValidationError: duplicate id, negative price/stock, or
                branch_id that does not resolve.
            NotFoundError: actor references an unknown employee/branch.
        """
        with self._lock:
            try:
                validate_unique_id(product, self._products)
                validate_numeric_ranges(product)
                self._require_references(product)
                if actor is not None:
                    self._resolve_actor(actor)
            except StoreError as exc:
                self._rejected("add_product", exc)
                raise
            self._products[product.id] = product
            if actor is not None:
                self._log(
                    ActionType.PRODUCT_CREATED, actor,
                    f"Added {product.name} with {product.stock} units",
                    entity_type="Product", entity_id=product.id,
                )
        logger.info(
            f"Product added: {product.id} '{product.name}' "
            f"stock={product.stock} branch={product.branch_id}"
        )
        return product

    # ══════════════════════════════════════════════════════════
    # MUTATIONS
    # ══════════════════════════════════════════════════════════

    def adjust_stock(
        self, product_id: int, delta: int, *, actor: ActorContext
    ) -> int:
        """
        Add delta (may be negative) to a product's stock.

        Returns the new stock level and appends a Stock Update entry.

        Raises:
            NotFoundError: unknown product, or unknown actor employee/branch.
            InvariantViolation: resulting stock would be negative.
            ValidationError: delta is not an int.
        """
        with self._lock:
            try:
                if not isinstance(delta, int) or isinstance(delta, bool):
                    raise ValidationError("delta must be an int.", field="delta")
                product = self._products.get(product_id)
                if product is None:
                    raise NotFoundError("Product", product_id)
                self._resolve_actor(actor)
                new_stock = product.stock + delta
                if new_stock < 0:
                    raise InvariantViolation(product_id, product.stock, delta)
            except StoreError as exc:
                self._rejected("adjust_stock", exc)
                raise

            self._products[product_id] = replace(product, stock=new_stock)
            self._log(
                ActionType.STOCK_UPDATE, actor,
                f"Updated {product.name} stock by {delta:+d} "
                f"to {new_stock} units",
                entity_type="Product", entity_id=product_id,
            )
        logger.info(
            f"Stock adjusted: product {product_id} "
            f"{product.stock} -> {new_stock}"
        )
        return new_stock

    def record_sale(self, sale: Sale) -> Sale:
        """
        Record a sale and take its quantity out of stock.

        The submitted amount must equal the discount-adjusted price
        (within config.sale_amount_tolerance); a wrong amount is
        rejected rather than corrected.

        Raises:
            NotFoundError: product, employee, branch or customer group unknown.
            InsufficientStockError: quantity > product stock.
            ValidationError: duplicate id, quantity < 1, negative or
                mismatched amount.
        """
        with self._lock:
            self._apply_sale(sale)
        logger.info(
            f"Sale recorded: {sale.id} product={sale.product_id} "
            f"qty={sale.quantity} amount={sale.amount}"
        )
        return sale

    def record_new_sale(
        self,
        *,
        date,
        product_id: int,
        employee_id: int,
        branch_id: int,
        customer_group_id: int,
        quantity: int,
        amount: int,
    ) -> Sale:
        """
        record_sale for a sale without an id yet.

        The id is allocated under the same lock as the insert, so
        concurrent callers never race for one id. Raises what
        record_sale raises.
        """
        with self._lock:
            sale = Sale(
                id=max(self._sales, default=0) + 1,
                date=date,
                product_id=product_id,
                employee_id=employee_id,
                branch_id=branch_id,
                customer_group_id=customer_group_id,
                quantity=quantity,
                amount=amount,
            )
            self._apply_sale(sale)
        logger.info(
            f"Sale recorded: {sale.id} product={sale.product_id} "
            f"qty={sale.quantity} amount={sale.amount}"
        )
        return sale

    def _apply_sale(self, sale: Sale) -> None:
        # lock held
        try:
            validate_unique_id(sale, self._sales)
            validate_numeric_ranges(sale)
            validate_foreign_keys(sale, self._tables)
            product = self._products[sale.product_id]
            group = self._customer_groups[sale.customer_group_id]
            validate_stock_available(product, sale.quantity)
            validate_sale_amount(
                sale,
                product,
                group,
                tolerance=self._config.sale_amount_tolerance,
                rounding=self._config.rounding,
            )
        except StoreError as exc:
            self._rejected("record_sale", exc)
            raise

        self._products[product.id] = replace(
            product, stock=product.stock - sale.quantity
        )
        self._sales[sale.id] = sale
        self._activity.append(
            ActionType.SALE,
            sale.employee_id,
            sale.branch_id,
            f"Sold {sale.quantity} x {product.name} to {group.name} group",
            entity_type="Sale",
            entity_id=sale.id,
        )

    # ══════════════════════════════════════════════════════════
    # LOOKUPS
    # ══════════════════════════════════════════════════════════

    def get_branch(self, branch_id: int) -> Branch:
        return self._get(self._branches, "Branch", branch_id)

    def get_employee(self, employee_id: int) -> Employee:
        return self._get(self._employees, "Employee", employee_id)

    def get_product(self, product_id: int) -> Product:
        return self._get(self._products, "Product", product_id)

    def get_customer_group(self, group_id: int) -> CustomerGroup:
        return self._get(self._customer_groups, "CustomerGroup", group_id)

    def get_sale(self, sale_id: int) -> Sale:
        return self._get(self._sales, "Sale", sale_id)

    def products_by_branch(self, branch_id: int) -> List[Product]:
        self.get_branch(branch_id)
        with self._lock:
            return [
                p for _, p in sorted(self._products.items())
                if p.branch_id == branch_id
            ]

    def employees_by_branch(self, branch_id: int) -> List[Employee]:
        self.get_branch(branch_id)
        with self._lock:
            return [
                e for _, e in sorted(self._employees.items())
                if e.branch_id == branch_id
            ]

    def next_sale_id(self) -> int:
        """Smallest id greater than every recorded sale id."""
        with self._lock:
            return max(self._sales, default=0) + 1

    # ── Read-only collection views ─────────────────────────────

    @property
    def branches(self) -> Mapping[int, Branch]:
        return self._copy(self._branches)

    @property
    def employees(self) -> Mapping[int, Employee]:
        return self._copy(self._employees)

    @property
    def products(self) -> Mapping[int, Product]:
        return self._copy(self._products)

    @property
    def customer_groups(self) -> Mapping[int, CustomerGroup]:
        return self._copy(self._customer_groups)

    @property
    def sales(self) -> Mapping[int, Sale]:
        return self._copy(self._sales)

    def snapshot(self) -> StoreSnapshot:
        with self._lock:
            return StoreSnapshot(
                branches=MappingProxyType(dict(self._branches)),
                employees=MappingProxyType(dict(self._employees)),
                products=MappingProxyType(dict(self._products)),
                customer_groups=MappingProxyType(dict(self._customer_groups)),
                sales=MappingProxyType(dict(self._sales)),
                activity=self._activity.entries,
                config=self._config,
            )

    # ══════════════════════════════════════════════════════════
    # INTERNALS (caller holds self._lock where noted)
    # ══════════════════════════════════════════════════════════

    def _get(self, table: Dict[int, object], entity: str, entity_id: int):
        with self._lock:
            row = table.get(entity_id)
        if row is None:
            raise NotFoundError(entity, entity_id)
        return row

    def _copy(self, table: Dict[int, object]) -> Mapping[int, object]:
        with self._lock:
            return MappingProxyType(dict(table))

    def _require_references(self, entity) -> None:
        # constructor path: an unresolved reference is bad input
        try:
            validate_foreign_keys(entity, self._tables)
        except NotFoundError as exc:
            raise ValidationError(str(exc), field="branch_id") from exc

    def _resolve_actor(self, actor: ActorContext) -> None:
        # lock held
        if not isinstance(actor, ActorContext):
            raise ValidationError("actor must be ActorContext.", field="actor")
        if actor.employee_id not in self._employees:
            raise NotFoundError("Employee", actor.employee_id)
        if actor.branch_id not in self._branches:
            raise NotFoundError("Branch", actor.branch_id)

    def _log(
        self,
        action_type: ActionType,
        actor: ActorContext,
        description: str,
        **kwargs,
    ) -> ActionLogEntry:
        # lock held
        return self._activity.append(
            action_type, actor.employee_id, actor.branch_id, description, **kwargs
        )

    def _rejected(self, operation: str, exc: StoreError) -> None:
        logger.warning(f"{operation} rejected [{exc.code}]: {exc}")
