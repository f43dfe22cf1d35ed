"""
Unit tests for the product endpoints.

Services are mocked; these tests cover routing, request validation and
the exception-to-status mapping.
"""
from decimal import Decimal

import pytest

from storefront.application.interfaces import Page
from storefront.domain.exceptions import (
    BackendUnavailableException,
    EntityNotFoundException,
    ValidationException,
)
from tests.factories import ProductFactory


class TestListProducts:

    @pytest.mark.asyncio
    async def test_list_without_page_returns_everything(self, api_client, mock_product_service):
        mock_product_service.list_all.return_value = ProductFactory.build_batch(3)

        response = await api_client.get("/api/v1/products")

        assert response.status_code == 200
        body = response.json()
        assert body["total"] == 3
        assert len(body["items"]) == 3
        mock_product_service.get_paged.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_paged_listing(self, api_client, mock_product_service):
        mock_product_service.get_paged.return_value = Page(
            items=ProductFactory.build_batch(10), total_count=25, page_number=2, page_size=10
        )

        response = await api_client.get("/api/v1/products", params={"page": 2, "page_size": 10})

        assert response.status_code == 200
        body = response.json()
        assert body["total"] == 25
        assert body["page"] == 2
        assert body["pages"] == 3
        mock_product_service.get_paged.assert_awaited_once_with(2, 10)

    @pytest.mark.asyncio
    async def test_page_size_is_bounded(self, api_client):
        response = await api_client.get("/api/v1/products", params={"page": 1, "page_size": 1000})

        assert response.status_code == 422


class TestGetProduct:

    @pytest.mark.asyncio
    async def test_found(self, api_client, mock_product_service):
        product = ProductFactory(price=Decimal("999.99"))
        mock_product_service.get.return_value = product

        response = await api_client.get(f"/api/v1/products/{product.id}")

        assert response.status_code == 200
        assert response.json()["id"] == product.id
        assert Decimal(response.json()["price"]) == Decimal("999.99")
        mock_product_service.get.assert_awaited_once_with(product.id, None)

    @pytest.mark.asyncio
    async def test_partition_key_forwarded(self, api_client, mock_product_service):
        mock_product_service.get.return_value = ProductFactory()

        await api_client.get("/api/v1/products/p-1", params={"partition_key": "Books"})

        mock_product_service.get.assert_awaited_once_with("p-1", "Books")

    @pytest.mark.asyncio
    async def test_not_found(self, api_client, mock_product_service):
        mock_product_service.get.side_effect = EntityNotFoundException("Product", "p-1")

        response = await api_client.get("/api/v1/products/p-1")

        assert response.status_code == 404
        assert response.json()["error"] == "ENTITY_NOT_FOUND"

    @pytest.mark.asyncio
    async def test_missing_partition_key_is_422(self, api_client, mock_product_service):
        mock_product_service.get.side_effect = ValidationException(
            "A partition key is required", errors={"partition_key": ["Partition key is required"]}
        )

        response = await api_client.get("/api/v1/products/p-1")

        assert response.status_code == 422
        assert response.json()["details"]["validation_errors"]["partition_key"]

    @pytest.mark.asyncio
    async def test_backend_unavailable_is_503(self, api_client, mock_product_service):
        mock_product_service.get.side_effect = BackendUnavailableException("cosmos", "throttled", status_code=429)

        response = await api_client.get("/api/v1/products/p-1")

        assert response.status_code == 503
        assert response.json()["details"]["backend"] == "cosmos"

    @pytest.mark.asyncio
    async def test_unexpected_error_is_500(self, api_client, mock_product_service):
        mock_product_service.get.side_effect = RuntimeError("kaboom")

        response = await api_client.get("/api/v1/products/p-1")

        assert response.status_code == 500
        assert response.json()["error"] == "INTERNAL_ERROR"


class TestCatalogRoutes:

    @pytest.mark.asyncio
    async def test_category(self, api_client, mock_product_service):
        mock_product_service.get_by_category.return_value = ProductFactory.build_batch(2, category="Books")

        response = await api_client.get("/api/v1/products/category/Books")

        assert response.status_code == 200
        assert {p["category"] for p in response.json()} == {"Books"}

    @pytest.mark.asyncio
    async def test_in_stock_is_not_taken_as_an_id(self, api_client, mock_product_service):
        mock_product_service.get_in_stock.return_value = []

        response = await api_client.get("/api/v1/products/in-stock")

        assert response.status_code == 200
        mock_product_service.get.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_search(self, api_client, mock_product_service):
        mock_product_service.search.return_value = []

        response = await api_client.get(
            "/api/v1/products/search", params={"q": "lap", "min_price": "10", "max_price": "20"}
        )

        assert response.status_code == 200
        mock_product_service.search.assert_awaited_once_with("lap", Decimal("10"), Decimal("20"))


class TestWriteRoutes:

    @pytest.mark.asyncio
    async def test_create(self, api_client, mock_product_service, sample_product_data):
        mock_product_service.create.return_value = ProductFactory(name="Laptop")

        response = await api_client.post("/api/v1/products", json=sample_product_data)

        assert response.status_code == 201
        kwargs = mock_product_service.create.await_args.kwargs
        assert kwargs["price"] == Decimal("1299.99")
        assert kwargs["category"] == "Electronics"

    @pytest.mark.asyncio
    async def test_create_rejects_negative_price(self, api_client, mock_product_service, sample_product_data):
        response = await api_client.post("/api/v1/products", json={**sample_product_data, "price": "-5"})

        assert response.status_code == 422
        mock_product_service.create.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_update_sends_only_given_fields(self, api_client, mock_product_service):
        mock_product_service.update.return_value = ProductFactory()

        response = await api_client.put("/api/v1/products/p-1", json={"stock": 4})

        assert response.status_code == 200
        mock_product_service.update.assert_awaited_once_with("p-1", {"stock": 4}, None)

    @pytest.mark.asyncio
    async def test_delete(self, api_client, mock_product_service):
        response = await api_client.delete("/api/v1/products/p-1")

        assert response.status_code == 204
        mock_product_service.delete.assert_awaited_once_with("p-1", None)

    @pytest.mark.asyncio
    async def test_delete_missing(self, api_client, mock_product_service):
        mock_product_service.delete.side_effect = EntityNotFoundException("Product", "p-1")

        response = await api_client.delete("/api/v1/products/p-1")

        assert response.status_code == 404
