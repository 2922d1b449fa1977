"""
BillingCore Django adapter tests.

Requests go through the real URLconf and views against a freshly
seeded demo store per test.
"""

from __future__ import annotations

import json

import pytest

from adapters.django_api import reset_dependencies

ACTOR_HEADERS = {"HTTP_X_EMPLOYEE_ID": "1", "HTTP_X_BRANCH_ID": "1"}


@pytest.fixture(autouse=True)
def demo_store(settings):
    settings.BILLINGCORE_SEED_DEMO_DATA = True
    reset_dependencies()
    yield
    reset_dependencies()


def _post(client, path, body, **headers):
    return client.post(
        path,
        data=json.dumps(body),
        content_type="application/json",
        **headers,
    )


class TestReadEndpoints:
    def test_dashboard_summary(self, client):
        response = client.get("/v1/dashboard/summary")
        assert response.status_code == 200
        body = response.json()
        assert body["data"]["sale_count"] == 2
        assert body["data"]["active_products"] == 4

    def test_revenue_fixed_range(self, client):
        response = client.get(
            "/v1/dashboard/revenue",
            {"granularity": "day", "start": "2024-03-14", "end": "2024-03-15"},
        )
        assert response.status_code == 200
        assert [b["revenue"] for b in response.json()["data"]] == [0, 202150]

    def test_revenue_bad_date(self, client):
        response = client.get("/v1/dashboard/revenue", {"start": "yesterday"})
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_REQUEST"

    def test_activity_limit(self, client):
        response = client.get("/v1/activity", {"limit": "1"})
        assert len(response.json()["data"]) == 1

    def test_products_filtered_by_branch(self, client):
        response = client.get("/v1/products", {"branch_id": "2"})
        assert [p["name"] for p in response.json()["data"]] == ["Samsung TV"]

    def test_stock_status_unknown(self, client):
        response = client.get("/v1/products/999/stock-status")
        assert response.status_code == 404

    def test_post_to_read_endpoint(self, client):
        response = client.post("/v1/branches")
        assert response.status_code == 405
        assert response.json()["error"]["code"] == "METHOD_NOT_ALLOWED"


class TestWriteEndpoints:
    def test_record_sale(self, client):
        response = _post(
            client,
            "/v1/sales/record",
            {"date": "2024-03-16", "product_id": 1, "customer_group_id": 1,
             "quantity": 1, "amount": 84550},
            **ACTOR_HEADERS,
        )
        assert response.status_code == 200
        assert response.json()["data"]["id"] == 3
        products = client.get("/v1/products", {"branch_id": "1"}).json()["data"]
        assert products[0]["stock"] == 13

    def test_record_sale_wrong_amount(self, client):
        response = _post(
            client,
            "/v1/sales/record",
            {"date": "2024-03-16", "product_id": 1, "customer_group_id": 1,
             "quantity": 1, "amount": 89000},
            **ACTOR_HEADERS,
        )
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "VALIDATION_FAILED"

    def test_missing_actor_headers(self, client):
        response = _post(
            client, "/v1/products/1/adjust-stock", {"delta": 1}
        )
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_REQUEST"

    def test_adjust_stock_unknown_product(self, client):
        response = _post(
            client, "/v1/products/999/adjust-stock", {"delta": -1},
            **ACTOR_HEADERS,
        )
        assert response.status_code == 404

    def test_adjust_stock_then_activity(self, client):
        response = _post(
            client, "/v1/products/2/adjust-stock", {"delta": 4},
            **ACTOR_HEADERS,
        )
        assert response.json()["data"]["stock"] == 11
        latest = client.get("/v1/activity", {"limit": "1"}).json()["data"][0]
        assert latest["action_type"] == "Stock Update"

    def test_create_product_missing_field(self, client):
        response = _post(
            client, "/v1/products/create", {"id": 5, "name": "Lamp"},
            **ACTOR_HEADERS,
        )
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_REQUEST"
