"""
Shared pytest fixtures for Storefront tests.

Provides fixtures for:
- Relational store (async SQLAlchemy over a throwaway SQLite file)
- Unit of work bound to that store
- Cosmos DB container mock
- API client (httpx) with mocked services
"""
import os
from typing import Any, Dict
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio

from tests.cosmos_fakes import pager

# Test environment configuration
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")


# ============================================================================
# Relational Store Fixtures
# ============================================================================

@pytest_asyncio.fixture
async def engine(tmp_path):
    """
    Async engine over a fresh SQLite database.

    Tables are created from the ORM metadata before the test and the
    file is discarded with tmp_path afterwards.
    """
    from sqlalchemy.ext.asyncio import create_async_engine
    from storefront.infrastructure.database.models import Base

    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'storefront.db'}", echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest.fixture
def make_uow(session_factory):
    """Build unit of work instances with no backoff between retries."""
    from storefront.infrastructure.database.unit_of_work import SQLAlchemyUnitOfWork

    def factory(max_retry_count: int = 2) -> SQLAlchemyUnitOfWork:
        return SQLAlchemyUnitOfWork(
            session_factory,
            max_retry_count=max_retry_count,
            max_retry_delay=0,
        )

    return factory


@pytest_asyncio.fixture
async def uow(make_uow):
    """Started unit of work; closed after the test."""
    async with make_uow() as unit_of_work:
        yield unit_of_work


# ============================================================================
# Cosmos DB Fixtures
# ============================================================================

@pytest.fixture
def mock_container():
    """
    Mock Cosmos container.

    Point operations echo the document body back, as the service does;
    queries return no documents until configured.
    """
    container = MagicMock()
    container.create_item = AsyncMock(side_effect=lambda body, **kwargs: dict(body))
    container.upsert_item = AsyncMock(side_effect=lambda body, **kwargs: dict(body))
    container.read_item = AsyncMock()
    container.delete_item = AsyncMock(return_value=None)
    container.query_items = MagicMock(return_value=pager([]))
    return container


# ============================================================================
# API Client Fixtures
# ============================================================================

@pytest.fixture
def mock_product_service():
    from storefront.application.services import ProductService

    return AsyncMock(spec=ProductService)


@pytest.fixture
def mock_customer_service():
    from storefront.application.services import CustomerService

    return AsyncMock(spec=CustomerService)


@pytest.fixture
def mock_order_service():
    from storefront.application.services import OrderService

    return AsyncMock(spec=OrderService)


@pytest_asyncio.fixture
async def api_client(mock_product_service, mock_customer_service, mock_order_service):
    """
    Test API client for unit tests.

    Services are replaced with mocks, so no store is touched.
    """
    import httpx

    from storefront.main import app
    from storefront.api.dependencies import (
        get_customer_service,
        get_order_service,
        get_product_service,
    )

    # Override dependencies
    app.dependency_overrides[get_product_service] = lambda: mock_product_service
    app.dependency_overrides[get_customer_service] = lambda: mock_customer_service
    app.dependency_overrides[get_order_service] = lambda: mock_order_service

    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app, raise_app_exceptions=False),
        base_url="http://test"
    ) as client:
        yield client

    # Clear overrides
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def integration_api_client(make_uow):
    """
    Test API client backed by the SQLite store.

    Every request gets its own unit of work, as in production.
    """
    import httpx

    from storefront.main import app
    from storefront.api.dependencies import get_unit_of_work

    async def override_unit_of_work():
        async with make_uow() as unit_of_work:
            yield unit_of_work

    app.dependency_overrides[get_unit_of_work] = override_unit_of_work

    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app),
        base_url="http://test"
    ) as client:
        yield client

    app.dependency_overrides.clear()


# ============================================================================
# Test Data Fixtures
# ============================================================================

@pytest.fixture
def sample_product_data() -> Dict[str, Any]:
    """Sample product creation payload."""
    return {
        "name": "Laptop",
        "description": "14 inch ultrabook",
        "price": "1299.99",
        "category": "Electronics",
        "stock": 10,
    }


@pytest.fixture
def sample_customer_data() -> Dict[str, Any]:
    """Sample customer registration payload."""
    return {
        "first_name": "Ada",
        "last_name": "Lovelace",
        "email": "ada@example.com",
        "phone_number": "+44 20 7946 0000",
        "address": "12 St James's Square, London",
        "country": "UK",
    }
