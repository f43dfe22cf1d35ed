"""
FastAPI dependency injection providers.
"""
from typing import AsyncGenerator, Optional

from fastapi import Depends

from ..application.interfaces.unit_of_work import UnitOfWork
from ..application.services import CustomerService, OrderService, ProductService
from ..config import get_settings
from ..infrastructure.database.connection import get_unit_of_work as create_unit_of_work
from ..infrastructure.repository_factory import Repositories, create_repositories


async def get_unit_of_work() -> AsyncGenerator[Optional[UnitOfWork], None]:
    """
    Provide Unit of Work for request lifecycle.

    The session is closed, and any open transaction rolled back, when the
    request finishes. Yields None when every entity lives in Cosmos DB, so
    no database engine is created.
    """
    if not get_settings().storage.uses_sql:
        yield None
        return

    uow = create_unit_of_work()
    async with uow:
        yield uow


def get_repositories(uow: Optional[UnitOfWork] = Depends(get_unit_of_work)) -> Repositories:
    """Repositories for the configured backend of each entity."""
    return create_repositories(uow)


def get_product_service(repositories: Repositories = Depends(get_repositories)) -> ProductService:
    return ProductService(repositories.products)


def get_customer_service(repositories: Repositories = Depends(get_repositories)) -> CustomerService:
    return CustomerService(repositories.customers)


def get_order_service(repositories: Repositories = Depends(get_repositories)) -> OrderService:
    return OrderService(repositories.orders, repositories.customers)
