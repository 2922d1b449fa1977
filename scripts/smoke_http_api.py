"""
Manual smoke runner for the BillingCore Django adapter endpoints.

Expects a server started with demo data seeded:
    python manage.py runserver

Usage:
    python scripts/smoke_http_api.py
    python scripts/smoke_http_api.py --base-url http://127.0.0.1:8000
"""

from __future__ import annotations

import argparse
import json
from urllib import error, request


DEMO_EMPLOYEE_ID = "1"
DEMO_BRANCH_ID = "1"


def _call(
    *,
    method: str,
    url: str,
    headers: dict[str, str],
    body: dict | None = None,
) -> tuple[int, dict]:
    encoded = None
    req_headers = dict(headers)
    if body is not None:
        encoded = json.dumps(body).encode("utf-8")
        req_headers["Content-Type"] = "application/json"

    req = request.Request(url=url, method=method, headers=req_headers, data=encoded)
    try:
        with request.urlopen(req) as response:
            status = response.status
            payload = json.loads(response.read().decode("utf-8"))
            return status, payload
    except error.HTTPError as exc:
        payload = json.loads(exc.read().decode("utf-8"))
        return exc.code, payload


def _print_case(label: str, status: int, payload: dict) -> None:
    print(f"\n[{label}] status={status}")
    print(json.dumps(payload, indent=2, sort_keys=True))


def run(base_url: str) -> None:
    api = base_url.rstrip("/") + "/v1"
    actor_headers = {
        "X-EMPLOYEE-ID": DEMO_EMPLOYEE_ID,
        "X-BRANCH-ID": DEMO_BRANCH_ID,
    }

    status, payload = _call(method="GET", url=f"{api}/dashboard/summary", headers={})
    _print_case("summary", status, payload)

    status, payload = _call(
        method="POST",
        url=f"{api}/sales/record",
        headers=actor_headers,
        body={
            "date": "2024-03-16",
            "product_id": 1,
            "customer_group_id": 1,
            "quantity": 1,
            "amount": 89000,
        },
    )
    _print_case("sale-wrong-amount", status, payload)

    status, payload = _call(
        method="POST",
        url=f"{api}/sales/record",
        headers=actor_headers,
        body={
            "date": "2024-03-16",
            "product_id": 1,
            "customer_group_id": 1,
            "quantity": 1,
            "amount": 84550,
        },
    )
    _print_case("sale-success", status, payload)

    status, payload = _call(
        method="POST",
        url=f"{api}/products/999/adjust-stock",
        headers=actor_headers,
        body={"delta": -1},
    )
    _print_case("adjust-unknown-product", status, payload)

    status, payload = _call(
        method="GET",
        url=f"{api}/dashboard/revenue?granularity=day",
        headers={},
    )
    _print_case("revenue-by-day", status, payload)

    status, payload = _call(method="GET", url=f"{api}/activity?limit=3", headers={})
    _print_case("recent-activity", status, payload)


def main() -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument(
        "--base-url",
        default="http://127.0.0.1:8000",
        help="Server base URL.",
    )
    args = parser.parse_args()
    run(args.base_url)


if __name__ == "__main__":
    main()
