"""
Unit tests for per-entity backend selection.
"""
from unittest.mock import MagicMock, patch

import pytest

from storefront.config import AppSettings, CosmosSettings, StorageSettings
from storefront.infrastructure.cosmos.repository import CosmosRepository
from storefront.infrastructure.repository_factory import cosmos_containers, create_repositories


def settings_for(**backends) -> AppSettings:
    return AppSettings(
        storage=StorageSettings(**backends),
        cosmos=CosmosSettings(
            products_partition_key="/category",
            orders_partition_key="/customerId",
        ),
    )


@pytest.fixture
def mock_uow():
    uow = MagicMock()
    uow.products = MagicMock(name="sql_products")
    uow.customers = MagicMock(name="sql_customers")
    uow.orders = MagicMock(name="sql_orders")
    return uow


class TestCreateRepositories:

    def test_all_sql(self, mock_uow):
        repositories = create_repositories(mock_uow, settings_for())

        assert repositories.products is mock_uow.products
        assert repositories.customers is mock_uow.customers
        assert repositories.orders is mock_uow.orders

    def test_mixed_backends(self, mock_uow):
        settings = settings_for(products="cosmos", orders="cosmos")

        with patch(
            "storefront.infrastructure.repository_factory.CosmosManager.get_container"
        ) as get_container:
            repositories = create_repositories(mock_uow, settings)

        assert isinstance(repositories.products, CosmosRepository)
        assert repositories.products.partition_key_path == "/category"
        assert isinstance(repositories.orders, CosmosRepository)
        assert repositories.orders.partition_key_path == "/customerId"
        assert repositories.customers is mock_uow.customers
        assert [c.args[0] for c in get_container.call_args_list] == ["Products", "Orders"]

    def test_cosmos_only_never_touches_unit_of_work_repositories(self):
        uow = MagicMock(spec=[])
        settings = settings_for(products="cosmos", customers="cosmos", orders="cosmos")

        with patch("storefront.infrastructure.repository_factory.CosmosManager.get_container"):
            repositories = create_repositories(uow, settings)

        assert isinstance(repositories.customers, CosmosRepository)


class TestCosmosContainers:

    def test_lists_only_cosmos_backed_entities(self):
        settings = settings_for(customers="cosmos", orders="cosmos")

        assert cosmos_containers(settings) == [
            ("Customers", "/id"),
            ("Orders", "/customerId"),
        ]

    def test_empty_when_all_sql(self):
        assert cosmos_containers(settings_for()) == []
