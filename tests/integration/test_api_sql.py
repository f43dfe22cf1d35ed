"""
End-to-end API tests against the relational store.

Each request runs in its own unit of work over a throwaway SQLite file.
"""
from decimal import Decimal

import pytest


@pytest.fixture
def sql_storage(monkeypatch):
    """Pin every entity to the relational backend."""
    from storefront.config import get_settings

    storage = get_settings().storage
    for entity in ("products", "customers", "orders"):
        monkeypatch.setattr(storage, entity, "sql")


pytestmark = pytest.mark.usefixtures("sql_storage")


class TestProductLifecycle:

    @pytest.mark.asyncio
    async def test_create_get_update_delete(self, integration_api_client, sample_product_data):
        created = await integration_api_client.post("/api/v1/products", json=sample_product_data)
        assert created.status_code == 201
        product_id = created.json()["id"]
        assert created.json()["created_at"] is not None

        fetched = await integration_api_client.get(f"/api/v1/products/{product_id}")
        assert fetched.status_code == 200
        assert Decimal(fetched.json()["price"]) == Decimal("1299.99")

        updated = await integration_api_client.put(f"/api/v1/products/{product_id}", json={"stock": 4})
        assert updated.status_code == 200
        assert updated.json()["stock"] == 4
        assert updated.json()["updated_at"] is not None

        deleted = await integration_api_client.delete(f"/api/v1/products/{product_id}")
        assert deleted.status_code == 204

        gone = await integration_api_client.get(f"/api/v1/products/{product_id}")
        assert gone.status_code == 404

    @pytest.mark.asyncio
    async def test_paged_listing(self, integration_api_client, sample_product_data):
        for n in range(5):
            response = await integration_api_client.post(
                "/api/v1/products", json={**sample_product_data, "name": f"Laptop {n}"}
            )
            assert response.status_code == 201

        page = await integration_api_client.get("/api/v1/products", params={"page": 2, "page_size": 2})

        body = page.json()
        assert body["total"] == 5
        assert body["pages"] == 3
        assert len(body["items"]) == 2

    @pytest.mark.asyncio
    async def test_search_is_case_insensitive(self, integration_api_client, sample_product_data):
        await integration_api_client.post("/api/v1/products", json=sample_product_data)
        await integration_api_client.post(
            "/api/v1/products", json={**sample_product_data, "name": "Garden hose", "category": "Garden"}
        )

        response = await integration_api_client.get("/api/v1/products/search", params={"q": "LAPTOP"})

        assert [p["name"] for p in response.json()] == ["Laptop"]


class TestCustomersAndOrders:

    @pytest.mark.asyncio
    async def test_duplicate_email_is_409(self, integration_api_client, sample_customer_data):
        first = await integration_api_client.post("/api/v1/customers", json=sample_customer_data)
        second = await integration_api_client.post("/api/v1/customers", json=sample_customer_data)

        assert first.status_code == 201
        assert second.status_code == 409

    @pytest.mark.asyncio
    async def test_place_order_and_complete_it(self, integration_api_client, sample_customer_data):
        customer = await integration_api_client.post("/api/v1/customers", json=sample_customer_data)
        customer_id = customer.json()["id"]

        placed = await integration_api_client.post(
            "/api/v1/orders",
            json={
                "customer_id": customer_id,
                "items": [
                    {"product_id": "p-1", "product_name": "Keyboard", "quantity": 2, "unit_price": "49.50"},
                    {"product_id": "p-2", "product_name": "Mouse", "quantity": 1, "unit_price": "20.00"},
                ],
            },
        )
        assert placed.status_code == 201
        order = placed.json()
        assert order["status"] == "Pending"
        assert Decimal(order["total_amount"]) == Decimal("119.00")

        completed = await integration_api_client.patch(
            f"/api/v1/orders/{order['id']}/status", json={"status": "Completed"}
        )
        assert completed.json()["status"] == "Completed"

        revenue = await integration_api_client.get("/api/v1/orders/revenue")
        assert Decimal(revenue.json()["total_revenue"]) == Decimal("119.00")

        mine = await integration_api_client.get(f"/api/v1/orders/customer/{customer_id}")
        assert [o["id"] for o in mine.json()] == [order["id"]]

    @pytest.mark.asyncio
    async def test_order_for_unknown_customer_is_404(self, integration_api_client):
        response = await integration_api_client.post(
            "/api/v1/orders",
            json={
                "customer_id": "missing",
                "items": [{"product_id": "p-1", "product_name": "Keyboard", "quantity": 1, "unit_price": "1.00"}],
            },
        )

        assert response.status_code == 404
