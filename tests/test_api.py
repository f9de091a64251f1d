"""HTTP API tests (FastAPI TestClient over the in-memory repository)."""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any

import pytest
from fastapi.testclient import TestClient

from verbal_pos.api.main import create_api


@pytest.fixture
def client(app: Any) -> Iterator[TestClient]:
    with TestClient(create_api(app)) as test_client:
        yield test_client


def test_health(client: TestClient) -> None:
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_execute_sell_command(client: TestClient, repository: Any) -> None:
    repository.add("sugar", stock="10", price="50")

    response = client.post("/api/commands/execute", json={"text": "sell 2 sugar"})

    assert response.status_code == 201
    body = response.json()
    assert body["type"] == "sale"
    assert body["data"]["sale"]["totalPrice"] == 100
    assert body["data"]["product"]["remainingStock"] == 8


@pytest.mark.parametrize(
    ("payload", "status", "type_"),
    [
        ({"text": ""}, 400, "validation"),
        ({}, 400, "validation"),
        ({"text": "gibberish text"}, 400, "help"),
        ({"text": "add product sugar"}, 400, "parse"),
        ({"text": "sell 2 salt"}, 404, "notFound"),
        ({"text": "show low stock"}, 200, "lowStock"),
        ({"text": "show today sales"}, 200, "summary"),
        ({"text": "add product rice stock 5 price 80"}, 201, "productCreate"),
    ],
)
def test_execute_status_codes(
        client: TestClient,
        payload: dict[str, Any],
        status: int,
        type_: str,
) -> None:
    response = client.post("/api/commands/execute", json=payload)
    assert response.status_code == status
    assert response.json()["type"] == type_


def test_execute_without_body(client: TestClient) -> None:
    response = client.post("/api/commands/execute")
    assert response.status_code == 400
    assert response.json()["type"] == "validation"


def test_help_envelope_shape(client: TestClient) -> None:
    body = client.post("/api/commands/execute", json={"text": "hello there"}).json()
    assert body["success"] is False
    assert set(body) == {"success", "type", "message", "examples"}
    assert len(body["examples"]) > 0


def test_create_and_list_products(client: TestClient) -> None:
    created = client.post(
        "/api/products",
        json={"name": "rice", "unit": "kg", "stockQuantity": 3, "pricePerUnit": 80},
    )
    assert created.status_code == 201
    product = created.json()["product"]
    assert product["lowStockThreshold"] == 5

    client.post("/api/products", json={"name": "salt", "stockQuantity": 30, "pricePerUnit": 20})

    listed = client.get("/api/products").json()
    assert [p["name"] for p in listed] == ["salt", "rice"]

    low = client.get("/api/products/low-stock").json()
    assert [p["name"] for p in low] == ["rice"]


def test_create_product_requires_price(client: TestClient) -> None:
    response = client.post("/api/products", json={"name": "rice"})
    assert response.status_code == 400
    assert "pricePerUnit" in response.json()["message"]


def test_create_sale_computes_total(client: TestClient, repository: Any) -> None:
    sugar = repository.add("sugar", stock="10", price="50")

    response = client.post(
        "/api/sales",
        json={"productId": sugar.id, "quantity": 3, "totalPrice": 1, "customerName": "Ali"},
    )

    assert response.status_code == 201
    sale = response.json()["sale"]
    assert sale["totalPrice"] == 150
    assert sale["customerName"] == "Ali"

    today = client.get("/api/sales/today").json()
    assert today["count"] == 1
    assert today["totalEarned"] == 150


def test_create_sale_errors(client: TestClient, repository: Any) -> None:
    sugar = repository.add("sugar", stock="1", price="50")

    missing = client.post("/api/sales", json={"productId": 999, "quantity": 1})
    assert missing.status_code == 404
    assert missing.json() == {"message": "Product not found"}

    too_many = client.post("/api/sales", json={"productId": sugar.id, "quantity": 2})
    assert too_many.status_code == 400
    assert too_many.json() == {"message": "Not enough stock for this product"}

    bad_quantity = client.post("/api/sales", json={"productId": sugar.id, "quantity": 0})
    assert bad_quantity.status_code == 400


def test_amounts_above_storage_range_are_rejected(client: TestClient, repository: Any) -> None:
    sugar = repository.add("sugar", stock="10", price="50")

    sale = client.post("/api/sales", json={"productId": sugar.id, "quantity": 1e12})
    assert sale.status_code == 400
    assert "quantity" in sale.json()["message"]

    product = client.post("/api/products", json={"name": "rice", "pricePerUnit": 1e12})
    assert product.status_code == 400
    assert "pricePerUnit" in product.json()["message"]
    assert repository.sales == {}
