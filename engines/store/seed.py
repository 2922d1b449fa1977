"""
BillingCore Entity Store — Demo Data
======================================
The sample business the dashboard ships with: three branches,
three employees, four products and three customer groups.

Seed sales go through record_sale like any other sale, so their
amounts are computed from price and discount instead of copied.
"""

from __future__ import annotations

from datetime import date

from core.primitives.pricing import discounted_amount
from engines.store.models import Branch, CustomerGroup, Employee, Product, Sale

DEMO_BRANCHES = (
    Branch(id=1, name="Main Branch", location="Dhaka"),
    Branch(id=2, name="Chittagong Branch", location="Chittagong"),
    Branch(id=3, name="Sylhet Branch", location="Sylhet"),
)

DEMO_EMPLOYEES = (
    Employee(id=1, name="Rafiq Ahmed", branch_id=1, role="Sales Executive"),
    Employee(id=2, name="Fatima Khan", branch_id=2, role="Sales Manager"),
    Employee(id=3, name="Imran Hossain", branch_id=3, role="Sales Executive"),
)

DEMO_PRODUCTS = (
    Product(id=1, name="ASUS Laptop", category="Electronics",
            price=89000, stock=15, branch_id=1),
    Product(id=2, name="iPhone 13", category="Electronics",
            price=120000, stock=8, branch_id=1),
    Product(id=3, name="Samsung TV", category="Electronics",
            price=65000, stock=5, branch_id=2),
    Product(id=4, name="Office Chair", category="Furniture",
            price=12000, stock=20, branch_id=3),
)

DEMO_CUSTOMER_GROUPS = (
    CustomerGroup(id=1, name="Tech Lovers", discount_percent=5),
    CustomerGroup(id=2, name="Regular Customers", discount_percent=2),
    CustomerGroup(id=3, name="VIP", discount_percent=10),
)

# (sale_id, date, product, employee, branch, customer_group, quantity)
DEMO_SALES = (
    (1, date(2024, 3, 15), 1, 1, 1, 1, 1),
    (2, date(2024, 3, 15), 2, 2, 2, 2, 1),
)


def load_demo_data(store, *, with_sales: bool = True) -> None:
    """Populate an empty EntityStore with the demo business."""
    for branch in DEMO_BRANCHES:
        store.add_branch(branch)
    for employee in DEMO_EMPLOYEES:
        store.add_employee(employee)
    for group in DEMO_CUSTOMER_GROUPS:
        store.add_customer_group(group)
    for product in DEMO_PRODUCTS:
        store.add_product(product)

    if not with_sales:
        return

    for sale_id, sold_on, product_id, employee_id, branch_id, group_id, qty in DEMO_SALES:
        product = store.get_product(product_id)
        group = store.get_customer_group(group_id)
        store.record_sale(Sale(
            id=sale_id,
            date=sold_on,
            product_id=product_id,
            employee_id=employee_id,
            branch_id=branch_id,
            customer_group_id=group_id,
            quantity=qty,
            amount=discounted_amount(
                product.price, qty, group.discount_percent,
                store.config.rounding,
            ),
        ))
