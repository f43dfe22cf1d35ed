"""
Composition of repositories from storage settings.

Each entity is bound to exactly one backend. The choice is made here, once,
from configuration; nothing downstream inspects which adapter it received.
"""
import logging
from dataclasses import dataclass
from typing import Optional, Type

from ..application.interfaces.repositories import DataRepository, T
from ..application.interfaces.unit_of_work import UnitOfWork
from ..config import AppSettings, Backend, get_settings
from ..domain.entities import Customer, Order, Product
from .cosmos.client import CosmosManager
from .cosmos.repository import CosmosRepository

logger = logging.getLogger(__name__)


@dataclass
class Repositories:
    """The repository chosen for each entity."""
    products: DataRepository[Product]
    customers: DataRepository[Customer]
    orders: DataRepository[Order]


def cosmos_containers(settings: Optional[AppSettings] = None):
    """(container name, partition key path) for every entity stored in Cosmos DB."""
    settings = settings or get_settings()
    cosmos = settings.cosmos
    storage = settings.storage
    containers = []
    if storage.products == 'cosmos':
        containers.append((cosmos.products_container, cosmos.products_partition_key))
    if storage.customers == 'cosmos':
        containers.append((cosmos.customers_container, cosmos.customers_partition_key))
    if storage.orders == 'cosmos':
        containers.append((cosmos.orders_container, cosmos.orders_partition_key))
    return containers


def _cosmos_repository(
    entity_type: Type[T],
    container_name: str,
    partition_key_path: str,
    settings: AppSettings,
) -> CosmosRepository[T]:
    return CosmosRepository(
        CosmosManager.get_container(container_name),
        entity_type,
        partition_key_path=partition_key_path,
        max_item_count=settings.cosmos.max_item_count,
    )


def create_repositories(uow: Optional[UnitOfWork], settings: Optional[AppSettings] = None) -> Repositories:
    """
    Pick the repository for each entity.

    Args:
        uow: Started unit of work supplying the relational repositories
        settings: Application settings (defaults to the cached settings)
    """
    settings = settings or get_settings()
    storage = settings.storage
    cosmos = settings.cosmos

    def choose(backend: Backend, sql_repository, entity_type, container, partition_key):
        if backend == 'cosmos':
            return _cosmos_repository(entity_type, container, partition_key, settings)
        return sql_repository()

    return Repositories(
        products=choose(
            storage.products, lambda: uow.products, Product,
            cosmos.products_container, cosmos.products_partition_key,
        ),
        customers=choose(
            storage.customers, lambda: uow.customers, Customer,
            cosmos.customers_container, cosmos.customers_partition_key,
        ),
        orders=choose(
            storage.orders, lambda: uow.orders, Order,
            cosmos.orders_container, cosmos.orders_partition_key,
        ),
    )
