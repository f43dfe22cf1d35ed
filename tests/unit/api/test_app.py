"""
Unit tests for application-level routes.
"""
from unittest.mock import AsyncMock, patch

import pytest


class TestHealth:

    @pytest.mark.asyncio
    async def test_reports_database_status(self, api_client):
        with patch(
            "storefront.infrastructure.database.connection.health_check",
            AsyncMock(return_value=True),
        ):
            response = await api_client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["services"]["database"] == "up"

    @pytest.mark.asyncio
    async def test_degraded_when_database_down(self, api_client):
        with patch(
            "storefront.infrastructure.database.connection.health_check",
            AsyncMock(return_value=False),
        ):
            response = await api_client.get("/health")

        assert response.json()["status"] == "degraded"


class TestRoot:

    @pytest.mark.asyncio
    async def test_root(self, api_client):
        response = await api_client.get("/")

        assert response.status_code == 200
        assert "version" in response.json()
