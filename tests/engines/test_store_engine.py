"""
BillingCore Entity Store Tests
================================
Tests cover:
- Constructor operations and their rejections
- adjust_stock / record_sale happy paths and typed failures
- All-or-nothing commits (no partial state on rejection)
- Stock and foreign-key invariants
- Serialized writers under concurrent sales
"""

import threading
from datetime import date, datetime, timezone

import pytest

from core.config.rules import StoreConfig
from core.context.actor_context import ActorContext
from core.time.clock import FixedClock
from engines.activity.models import ActionType
from engines.store.errors import (
    InsufficientStockError,
    InvariantViolation,
    NotFoundError,
    ValidationError,
)
from engines.store.models import Branch, CustomerGroup, Employee, Product, Sale
from engines.store.services import EntityStore

T0 = datetime(2024, 3, 15, 10, 30, 0, tzinfo=timezone.utc)
ACTOR = ActorContext(employee_id=1, branch_id=1)


def _store(**kwargs) -> EntityStore:
    store = EntityStore(clock=FixedClock(T0), **kwargs)
    store.add_branch(Branch(id=1, name="Main Branch", location="Dhaka"))
    store.add_employee(
        Employee(id=1, name="Rafiq Ahmed", branch_id=1, role="Sales Executive")
    )
    store.add_product(Product(
        id=1, name="ASUS Laptop", category="Electronics",
        price=89000, stock=15, branch_id=1,
    ))
    store.add_customer_group(
        CustomerGroup(id=1, name="Tech Lovers", discount_percent=5)
    )
    return store


def _sale(**overrides) -> Sale:
    data = dict(
        id=1, date=date(2024, 3, 15), product_id=1, employee_id=1,
        branch_id=1, customer_group_id=1, quantity=1, amount=84550,
    )
    data.update(overrides)
    return Sale(**data)


# ══════════════════════════════════════════════════════════════
# CONSTRUCTORS
# ══════════════════════════════════════════════════════════════

class TestAddProduct:
    def test_returns_stored_product(self):
        store = _store()
        product = Product(
            id=2, name="iPhone 13", category="Electronics",
            price=120000, stock=8, branch_id=1,
        )
        assert store.add_product(product) == product
        assert store.get_product(2).stock == 8

    def test_unknown_branch_is_validation_error(self):
        store = _store()
        with pytest.raises(ValidationError, match="Branch"):
            store.add_product(Product(
                id=2, name="TV", category="Electronics",
                price=1, stock=1, branch_id=42,
            ))
        assert 2 not in store.products

    def test_negative_price_rejected(self):
        store = _store()
        with pytest.raises(ValidationError, match="price"):
            store.add_product(Product(
                id=2, name="TV", category="Electronics",
                price=-1, stock=1, branch_id=1,
            ))

    def test_negative_stock_rejected(self):
        store = _store()
        with pytest.raises(ValidationError, match="stock"):
            store.add_product(Product(
                id=2, name="TV", category="Electronics",
                price=1, stock=-3, branch_id=1,
            ))

    def test_duplicate_id_rejected(self):
        store = _store()
        with pytest.raises(ValidationError, match="already exists"):
            store.add_product(Product(
                id=1, name="Other", category="Electronics",
                price=1, stock=1, branch_id=1,
            ))
        assert store.get_product(1).name == "ASUS Laptop"

    def test_no_log_entry_without_actor(self):
        store = _store()
        assert len(store.activity) == 0

    def test_actor_gets_product_created_entry(self):
        store = _store()
        store.add_product(
            Product(id=2, name="TV", category="Electronics",
                    price=1, stock=1, branch_id=1),
            actor=ACTOR,
        )
        (entry,) = store.activity.entries
        assert entry.action_type is ActionType.PRODUCT_CREATED
        assert entry.entity_id == 2


class TestOtherConstructors:
    def test_employee_unknown_branch(self):
        store = _store()
        with pytest.raises(ValidationError):
            store.add_employee(
                Employee(id=2, name="Fatima Khan", branch_id=9, role="Manager")
            )

    def test_customer_group_discount_out_of_range(self):
        store = _store()
        with pytest.raises(ValidationError, match="discount_percent"):
            store.add_customer_group(
                CustomerGroup(id=2, name="Too Generous", discount_percent=101)
            )

    def test_duplicate_branch(self):
        store = _store()
        with pytest.raises(ValidationError):
            store.add_branch(Branch(id=1, name="Again", location="Dhaka"))

    def test_blank_name_rejected_at_construction(self):
        with pytest.raises(ValidationError, match="name"):
            Branch(id=3, name="", location="Sylhet")


# ══════════════════════════════════════════════════════════════
# ADJUST STOCK
# ══════════════════════════════════════════════════════════════

class TestAdjustStock:
    def test_returns_new_stock(self):
        store = _store()
        assert store.adjust_stock(1, -5, actor=ACTOR) == 10
        assert store.get_product(1).stock == 10

    def test_emits_stock_update_entry(self):
        store = _store()
        store.adjust_stock(1, 3, actor=ACTOR)
        (entry,) = store.activity.entries
        assert entry.action_type is ActionType.STOCK_UPDATE
        assert entry.employee_id == 1
        assert entry.branch_id == 1
        assert entry.timestamp == T0
        assert "18 units" in entry.description

    def test_unknown_product(self):
        store = _store()
        with pytest.raises(NotFoundError) as exc_info:
            store.adjust_stock(999, -1, actor=ACTOR)
        assert exc_info.value.entity == "Product"
        assert exc_info.value.entity_id == 999
        assert len(store.activity) == 0

    def test_negative_result_is_invariant_violation(self):
        store = _store()
        with pytest.raises(InvariantViolation):
            store.adjust_stock(1, -16, actor=ACTOR)
        assert store.get_product(1).stock == 15
        assert len(store.activity) == 0

    def test_down_to_zero_allowed(self):
        store = _store()
        assert store.adjust_stock(1, -15, actor=ACTOR) == 0

    def test_unknown_actor_employee(self):
        store = _store()
        with pytest.raises(NotFoundError, match="Employee"):
            store.adjust_stock(1, 1, actor=ActorContext(employee_id=7, branch_id=1))
        assert store.get_product(1).stock == 15

    def test_non_int_delta(self):
        store = _store()
        with pytest.raises(ValidationError, match="delta"):
            store.adjust_stock(1, 1.5, actor=ACTOR)


# ══════════════════════════════════════════════════════════════
# RECORD SALE
# ══════════════════════════════════════════════════════════════

class TestRecordSale:
    def test_discounted_sale_succeeds(self):
        store = _store()
        stored = store.record_sale(_sale())
        assert stored.amount == 84550
        assert store.get_product(1).stock == 14
        entries = store.activity.entries
        assert len(entries) == 1
        assert entries[0].action_type is ActionType.SALE
        assert entries[0].entity_id == 1

    def test_undiscounted_amount_rejected(self):
        store = _store()
        with pytest.raises(ValidationError, match="84550"):
            store.record_sale(_sale(amount=89000))
        assert store.get_product(1).stock == 15
        assert len(store.activity) == 0
        assert len(store.sales) == 0

    def test_quantity_equal_to_stock(self):
        store = _store()
        store.record_sale(_sale(quantity=15, amount=1268250))
        assert store.get_product(1).stock == 0

    def test_quantity_one_over_stock(self):
        store = _store()
        with pytest.raises(InsufficientStockError) as exc_info:
            store.record_sale(_sale(quantity=16, amount=1352800))
        assert exc_info.value.available == 15
        assert exc_info.value.requested == 16
        assert store.get_product(1).stock == 15

    @pytest.mark.parametrize("field,value,entity", [
        ("product_id", 9, "Product"),
        ("employee_id", 9, "Employee"),
        ("branch_id", 9, "Branch"),
        ("customer_group_id", 9, "CustomerGroup"),
    ])
    def test_unresolved_foreign_keys(self, field, value, entity):
        store = _store()
        with pytest.raises(NotFoundError, match=entity):
            store.record_sale(_sale(**{field: value}))
        assert len(store.sales) == 0
        assert store.get_product(1).stock == 15

    def test_zero_quantity(self):
        store = _store()
        with pytest.raises(ValidationError, match="quantity"):
            store.record_sale(_sale(quantity=0, amount=0))

    def test_duplicate_sale_id(self):
        store = _store()
        store.record_sale(_sale())
        with pytest.raises(ValidationError, match="already exists"):
            store.record_sale(_sale())
        assert store.get_product(1).stock == 14

    def test_tolerance_from_config(self):
        store = _store(config=StoreConfig(sale_amount_tolerance=1))
        store.record_sale(_sale(amount=84551))
        with pytest.raises(ValidationError):
            store.record_sale(_sale(id=2, amount=84552))

    def test_sale_then_restock_round_trip(self):
        store = _store()
        before = store.get_product(1).stock
        store.record_sale(_sale(quantity=3, amount=253650))
        store.adjust_stock(1, 3, actor=ACTOR)
        assert store.get_product(1).stock == before


class TestRecordNewSale:
    FIELDS = dict(
        date=date(2024, 3, 15), product_id=1, employee_id=1, branch_id=1,
        customer_group_id=1, quantity=1, amount=84550,
    )

    def test_allocates_next_id(self):
        store = _store()
        store.record_sale(_sale(id=7))
        sale = store.record_new_sale(**self.FIELDS)
        assert sale.id == 8
        assert store.get_sale(8) == sale

    def test_rejection_leaves_store_unchanged(self):
        store = _store()
        with pytest.raises(ValidationError):
            store.record_new_sale(**dict(self.FIELDS, amount=89000))
        assert len(store.sales) == 0
        assert store.get_product(1).stock == 15
        assert len(store.activity) == 0

    def test_concurrent_callers_get_distinct_ids(self):
        store = _store()
        barrier = threading.Barrier(10)
        sales = []
        sales_lock = threading.Lock()

        def sell():
            barrier.wait()
            sale = store.record_new_sale(**self.FIELDS)
            with sales_lock:
                sales.append(sale)

        threads = [threading.Thread(target=sell) for _ in range(10)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert sorted(s.id for s in sales) == list(range(1, 11))
        assert store.get_product(1).stock == 5


# ══════════════════════════════════════════════════════════════
# READ VIEWS & SNAPSHOTS
# ══════════════════════════════════════════════════════════════

class TestReadViews:
    def test_collections_are_read_only(self):
        store = _store()
        with pytest.raises(TypeError):
            store.products[5] = None

    def test_snapshot_unaffected_by_later_sale(self):
        store = _store()
        snap = store.snapshot()
        store.record_sale(_sale())
        assert snap.products[1].stock == 15
        assert len(snap.sales) == 0
        assert store.snapshot().products[1].stock == 14

    def test_get_unknown_raises(self):
        with pytest.raises(NotFoundError):
            _store().get_branch(9)

    def test_products_by_branch(self):
        store = _store()
        store.add_branch(Branch(id=2, name="Chittagong Branch", location="Chittagong"))
        store.add_product(Product(
            id=3, name="Samsung TV", category="Electronics",
            price=65000, stock=5, branch_id=2,
        ))
        assert [p.id for p in store.products_by_branch(2)] == [3]
        assert [p.id for p in store.products_by_branch(1)] == [1]

    def test_next_sale_id(self):
        store = _store()
        assert store.next_sale_id() == 1
        store.record_sale(_sale(id=7))
        assert store.next_sale_id() == 8


# ══════════════════════════════════════════════════════════════
# INVARIANTS
# ══════════════════════════════════════════════════════════════

class TestInvariants:
    def test_stock_and_price_never_negative(self):
        store = _store()
        attempts = [
            lambda: store.adjust_stock(1, -100, actor=ACTOR),
            lambda: store.record_sale(_sale(quantity=50, amount=4227500)),
            lambda: store.adjust_stock(1, -15, actor=ACTOR),
            lambda: store.adjust_stock(1, -1, actor=ACTOR),
        ]
        for attempt in attempts:
            try:
                attempt()
            except (InvariantViolation, InsufficientStockError):
                pass
            for product in store.products.values():
                assert product.stock >= 0
                assert product.price >= 0

    def test_every_sale_references_resolve(self):
        store = _store()
        store.record_sale(_sale())
        store.record_sale(_sale(id=2, quantity=2, amount=169100))
        snap = store.snapshot()
        for sale in snap.sales.values():
            assert sale.product_id in snap.products
            assert sale.employee_id in snap.employees
            assert sale.branch_id in snap.branches
            assert sale.customer_group_id in snap.customer_groups

    def test_every_log_entry_references_resolve(self):
        store = _store()
        store.record_sale(_sale())
        store.adjust_stock(1, 2, actor=ACTOR)
        for bad_actor in (
            ActorContext(employee_id=9, branch_id=1),
            ActorContext(employee_id=1, branch_id=9),
        ):
            with pytest.raises(NotFoundError):
                store.adjust_stock(1, 1, actor=bad_actor)
            with pytest.raises(NotFoundError):
                store.add_product(
                    Product(id=5, name="Lamp", category="Furniture",
                            price=1, stock=1, branch_id=1),
                    actor=bad_actor,
                )
        snap = store.snapshot()
        assert len(snap.activity) == 2
        for entry in snap.activity:
            assert entry.employee_id in snap.employees
            assert entry.branch_id in snap.branches


class TestConcurrentSales:
    def test_no_oversell_under_contention(self):
        store = _store()
        errors = []
        ids = iter(range(1, 1000))
        id_lock = threading.Lock()

        def sell():
            with id_lock:
                sale_id = next(ids)
            try:
                store.record_sale(_sale(id=sale_id))
            except InsufficientStockError as exc:
                errors.append(exc)

        threads = [threading.Thread(target=sell) for _ in range(40)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert store.get_product(1).stock == 0
        assert len(store.sales) == 15
        assert len(errors) == 25
        assert len(store.activity) == 15
