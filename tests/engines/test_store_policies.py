"""
BillingCore Integrity Policy Tests
====================================
The validator functions in isolation: no store, only plain
mappings and entities.
"""

from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from types import SimpleNamespace

import pytest

from engines.store.errors import (
    InsufficientStockError,
    NotFoundError,
    ValidationError,
)
from engines.store.models import Branch, CustomerGroup, Employee, Product, Sale
from engines.store.policies import (
    expected_sale_amount,
    validate_foreign_keys,
    validate_numeric_ranges,
    validate_sale_amount,
    validate_stock_available,
    validate_unique_id,
)

BRANCH = Branch(id=1, name="Main Branch", location="Dhaka")
PRODUCT = Product(
    id=1, name="ASUS Laptop", category="Electronics",
    price=89000, stock=15, branch_id=1,
)
GROUP = CustomerGroup(id=1, name="Tech Lovers", discount_percent=5)


def _sale(**overrides) -> Sale:
    data = dict(
        id=1, date=date(2024, 3, 15), product_id=1, employee_id=1,
        branch_id=1, customer_group_id=1, quantity=1, amount=84550,
    )
    data.update(overrides)
    return Sale(**data)


def _tables(**overrides):
    data = dict(
        branches={1: BRANCH},
        employees={1: Employee(id=1, name="Rafiq Ahmed", branch_id=1, role="Sales Executive")},
        products={1: PRODUCT},
        customer_groups={1: GROUP},
        sales={},
    )
    data.update(overrides)
    return SimpleNamespace(**data)


class TestForeignKeys:
    def test_all_resolve(self):
        validate_foreign_keys(_sale(), _tables())

    def test_unresolved_reports_entity(self):
        with pytest.raises(NotFoundError) as exc_info:
            validate_foreign_keys(_sale(customer_group_id=3), _tables())
        assert exc_info.value.entity == "CustomerGroup"
        assert exc_info.value.entity_id == 3

    def test_entity_without_declared_keys_is_error(self):
        with pytest.raises(ValidationError, match="declares no foreign keys"):
            validate_foreign_keys(BRANCH, _tables())


class TestNumericRanges:
    @pytest.mark.parametrize("discount", [0, 100, Decimal("12.5")])
    def test_discount_bounds_accepted(self, discount):
        validate_numeric_ranges(
            CustomerGroup(id=2, name="Edge", discount_percent=discount)
        )

    @pytest.mark.parametrize("discount", [-1, 101, Decimal("100.01")])
    def test_discount_out_of_range(self, discount):
        with pytest.raises(ValidationError):
            validate_numeric_ranges(
                CustomerGroup(id=2, name="Edge", discount_percent=discount)
            )

    def test_float_price_rejected(self):
        product = Product(
            id=2, name="TV", category="Electronics",
            price=10.5, stock=1, branch_id=1,
        )
        with pytest.raises(ValidationError, match="minor units"):
            validate_numeric_ranges(product)

    def test_negative_amount(self):
        with pytest.raises(ValidationError, match="amount"):
            validate_numeric_ranges(_sale(amount=-1))


class TestSaleAmount:
    def test_expected_amount(self):
        assert expected_sale_amount(_sale(quantity=2), PRODUCT, GROUP) == 169100

    def test_exact_match_passes(self):
        validate_sale_amount(_sale(), PRODUCT, GROUP)

    def test_mismatch_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_sale_amount(_sale(amount=89000), PRODUCT, GROUP)
        assert exc_info.value.field == "amount"

    def test_tolerance(self):
        validate_sale_amount(_sale(amount=84552), PRODUCT, GROUP, tolerance=2)

    def test_rounding_mode_applies(self):
        # 1 x 50% = 0.5: half-even rounds to 0, half-up to 1
        product = Product(id=9, name="Pen", category="Stationery",
                          price=1, stock=10, branch_id=1)
        group = CustomerGroup(id=9, name="Half", discount_percent=50)
        sale = _sale(product_id=9, customer_group_id=9, quantity=1, amount=0)
        validate_sale_amount(sale, product, group)
        with pytest.raises(ValidationError):
            validate_sale_amount(sale, product, group, rounding=ROUND_HALF_UP)


class TestStockAvailable:
    def test_equal_to_stock(self):
        validate_stock_available(PRODUCT, 15)

    def test_over_stock(self):
        with pytest.raises(InsufficientStockError):
            validate_stock_available(PRODUCT, 16)


class TestUniqueId:
    def test_duplicate(self):
        with pytest.raises(ValidationError, match="Product id 1 already exists"):
            validate_unique_id(PRODUCT, {1: PRODUCT})
