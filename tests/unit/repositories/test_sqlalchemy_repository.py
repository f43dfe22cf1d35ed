"""
Unit tests for SQLAlchemyRepository.

Runs the generic repository against a real SQLite database so the
specification compiler, paging and the owned order_items table are
exercised end to end.
"""
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from sqlalchemy import func, select

from storefront.domain.entities import Customer, Field, Order, OrderItem, OrderStatus, Product
from storefront.domain.exceptions import (
    DuplicateEntityException,
    EntityNotFoundException,
    ValidationException,
)
from storefront.infrastructure.database.models import OrderItemModel
from tests.factories import CustomerFactory, OrderFactory, ProductFactory


class TestAddAndGet:
    """Test inserts and point reads."""

    @pytest.mark.asyncio
    async def test_add_then_get_returns_equal_record_with_created_at(self, uow):
        product = ProductFactory(price=Decimal("12.34"))

        await uow.products.add(product)
        loaded = await uow.products.get_by_id(product.id)

        assert loaded == product
        assert loaded.name == product.name
        assert loaded.price == Decimal("12.34")
        assert loaded.created_at is not None
        assert loaded.created_at.tzinfo is not None
        assert loaded.updated_at is None

    @pytest.mark.asyncio
    async def test_fresh_session_reads_committed_insert(self, make_uow):
        product = ProductFactory()
        async with make_uow() as first:
            await first.products.add(product)

        async with make_uow() as second:
            loaded = await second.products.get_by_id(product.id)

        assert loaded is not None
        assert loaded.category == product.category
        assert loaded.created_at.tzinfo == timezone.utc

    @pytest.mark.asyncio
    async def test_missing_id_returns_none_and_delete_returns_false(self, uow):
        assert await uow.products.get_by_id("does-not-exist") is None
        assert await uow.products.delete("does-not-exist") is False

    @pytest.mark.asyncio
    async def test_partition_key_is_ignored(self, uow):
        product = await uow.products.add(ProductFactory(category="Books"))

        assert await uow.products.get_by_id(product.id, partition_key="Garden") is not None

    @pytest.mark.asyncio
    async def test_add_none_raises_validation(self, uow):
        with pytest.raises(ValidationException):
            await uow.products.add(None)

    @pytest.mark.asyncio
    async def test_add_range(self, uow):
        products = ProductFactory.build_batch(3)

        added = await uow.products.add_range(products)

        assert [p.id for p in added] == [p.id for p in products]
        assert await uow.products.count() == 3


class TestDuplicates:
    """Test constraint violations surface as DuplicateEntityException."""

    @pytest.mark.asyncio
    async def test_duplicate_id(self, uow):
        product = await uow.products.add(ProductFactory())

        with pytest.raises(DuplicateEntityException) as exc_info:
            await uow.products.add(ProductFactory(id=product.id))

        assert exc_info.value.details["field"] == "id"
        # The session is still usable after the failed insert
        assert await uow.products.count() == 1

    @pytest.mark.asyncio
    async def test_duplicate_email(self, make_uow):
        async with make_uow() as uow:
            await uow.customers.add(CustomerFactory(email="taken@example.com"))

        async with make_uow() as uow:
            with pytest.raises(DuplicateEntityException) as exc_info:
                await uow.customers.add(CustomerFactory(email="taken@example.com"))

        assert exc_info.value.details["field"] == "email"
        assert exc_info.value.details["value"] == "taken@example.com"


class TestUpdate:
    """Test updates require an existing row."""

    @pytest.mark.asyncio
    async def test_update_missing_row_raises_not_found(self, uow):
        with pytest.raises(EntityNotFoundException):
            await uow.products.update(ProductFactory())

        assert await uow.products.count() == 0

    @pytest.mark.asyncio
    async def test_update_keeps_created_at(self, make_uow):
        product = ProductFactory()
        async with make_uow() as uow:
            added = await uow.products.add(product)

        async with make_uow() as uow:
            loaded = await uow.products.get_by_id(product.id)
            loaded.stock = 42
            loaded.created_at = datetime(2000, 1, 1, tzinfo=timezone.utc)
            updated = await uow.products.update(loaded)

        async with make_uow() as uow:
            reloaded = await uow.products.get_by_id(product.id)

        assert updated.stock == 42
        assert reloaded.stock == 42
        assert reloaded.created_at == added.created_at
        assert reloaded.updated_at is not None

    @pytest.mark.asyncio
    async def test_update_range_requires_every_row(self, uow):
        existing = await uow.products.add(ProductFactory(stock=1))
        existing.stock = 2

        with pytest.raises(EntityNotFoundException):
            await uow.products.update_range([existing, ProductFactory()])

        reloaded = await uow.products.get_by_id(existing.id)
        assert reloaded.stock == 1


class TestLaptopLifecycle:
    """Add, update and delete one product."""

    @pytest.mark.asyncio
    async def test_add_update_delete(self, uow):
        laptop = Product.create(name="Laptop", price=Decimal("999.99"), category="Electronics")

        await uow.products.add(laptop)
        stored = await uow.products.get_by_id(laptop.id)
        assert stored.created_at is not None
        assert stored.updated_at is None

        stored.price = Decimal("899.99")
        updated = await uow.products.update(stored)
        assert updated.updated_at is not None
        assert updated.price == Decimal("899.99")

        assert await uow.products.delete(laptop.id) is True
        assert await uow.products.get_by_id(laptop.id) is None


class TestQueries:
    """Test specification-based reads."""

    @pytest.fixture
    def catalog(self):
        return [
            ProductFactory(name="Gaming Laptop", category="Electronics", price=Decimal("1500"), stock=2),
            ProductFactory(name="Office Laptop", category="Electronics", price=Decimal("700"), stock=0),
            ProductFactory(name="Desk Lamp", category="Home", price=Decimal("35"), stock=9),
            ProductFactory(name="Garden Hose", category="Garden", price=Decimal("25"), stock=4, is_active=False),
        ]

    @pytest.mark.asyncio
    async def test_find_matches_in_memory_evaluation(self, uow, catalog):
        await uow.products.add_range(catalog)
        spec = (Field("category") == "Electronics") & (Field("price") < Decimal("1000"))

        found = await uow.products.find(spec)

        assert [p.name for p in found] == ["Office Laptop"]
        assert [p.name for p in catalog if spec.is_satisfied_by(p)] == ["Office Laptop"]

    @pytest.mark.asyncio
    async def test_not_equal_skips_missing_values_like_in_memory(self, uow, catalog):
        await uow.products.add_range(catalog)
        lamp = catalog[2]
        lamp.stock = 8
        await uow.products.update(lamp)
        spec = Field("updated_at") != datetime(2000, 1, 1, tzinfo=timezone.utc)

        found = await uow.products.find(spec)
        stored = await uow.products.get_all()

        assert [p.name for p in found] == ["Desk Lamp"]
        assert [p.name for p in stored if spec.is_satisfied_by(p)] == ["Desk Lamp"]

    @pytest.mark.asyncio
    async def test_union_over_partition_field_equals_get_all(self, uow, catalog):
        await uow.products.add_range(catalog)

        everything = {p.id for p in await uow.products.get_all()}
        union = set()
        for category in {p.category for p in catalog}:
            union |= {p.id for p in await uow.products.find(Field("category") == category)}

        assert union == everything == {p.id for p in catalog}

    @pytest.mark.asyncio
    async def test_contains_is_case_insensitive(self, uow, catalog):
        await uow.products.add_range(catalog)

        found = await uow.products.find(Field("name").contains("LAPTOP"))

        assert {p.name for p in found} == {"Gaming Laptop", "Office Laptop"}

    @pytest.mark.asyncio
    async def test_contains_escapes_wildcards(self, uow):
        await uow.products.add(ProductFactory(name="100% Cotton"))
        await uow.products.add(ProductFactory(name="100 Cotton"))

        found = await uow.products.find(Field("name").contains("100%"))

        assert [p.name for p in found] == ["100% Cotton"]

    @pytest.mark.asyncio
    async def test_in_and_not(self, uow, catalog):
        await uow.products.add_range(catalog)

        found = await uow.products.find(
            Field("category").in_(["Home", "Garden"]) & ~(Field("is_active") == False)  # noqa: E712
        )

        assert [p.name for p in found] == ["Desk Lamp"]

    @pytest.mark.asyncio
    async def test_first_or_default_count_exists(self, uow, catalog):
        await uow.products.add_range(catalog)

        assert await uow.products.count() == 4
        assert await uow.products.count(Field("stock") > 0) == 3
        assert await uow.products.exists(Field("category") == "Home")
        assert not await uow.products.exists(Field("category") == "Toys")
        assert await uow.products.first_or_default(Field("category") == "Toys") is None

    @pytest.mark.asyncio
    async def test_query_ordering_skip_take(self, uow, catalog):
        await uow.products.add_range(catalog)

        names = [
            p.name for p in await (
                uow.products.query()
                .order_by("price", descending=True)
                .skip(1)
                .take(2)
                .to_list()
            )
        ]

        assert names == ["Office Laptop", "Desk Lamp"]

    @pytest.mark.asyncio
    async def test_query_count_ignores_paging(self, uow, catalog):
        await uow.products.add_range(catalog)

        query = uow.products.query().where(Field("category") == "Electronics").take(1)

        assert await query.count() == 2
        assert len(await query.to_list()) == 1

    @pytest.mark.asyncio
    async def test_unknown_field_raises_validation(self, uow):
        with pytest.raises(ValidationException):
            await uow.products.find(Field("colour") == "red")


class TestPaging:
    """Test get_paged."""

    @pytest.mark.asyncio
    async def test_page_two_of_twenty_five(self, uow):
        await uow.products.add_range(ProductFactory.build_batch(25))

        page = await uow.products.get_paged(2, 10)

        assert len(page.items) == 10
        assert page.total_count == 25
        assert page.total_pages == 3
        assert page.has_next

    @pytest.mark.asyncio
    async def test_pages_are_disjoint_and_last_is_short(self, uow):
        await uow.products.add_range(ProductFactory.build_batch(25))

        pages = [await uow.products.get_paged(n, 10) for n in (1, 2, 3)]
        ids = [p.id for page in pages for p in page.items]

        assert len(pages[2].items) == 5
        assert not pages[2].has_next
        assert len(ids) == len(set(ids)) == 25

    @pytest.mark.asyncio
    async def test_filtered_paging_counts_filtered_set(self, uow):
        await uow.products.add_range(ProductFactory.build_batch(6, category="Books"))
        await uow.products.add_range(ProductFactory.build_batch(4, category="Garden"))

        page = await uow.products.get_paged(1, 3, Field("category") == "Garden")

        assert page.total_count == 4
        assert all(p.category == "Garden" for p in page.items)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("page_number,page_size", [(0, 10), (1, 0), (-1, -1)])
    async def test_non_positive_arguments_rejected(self, uow, page_number, page_size):
        with pytest.raises(ValidationException):
            await uow.products.get_paged(page_number, page_size)


class TestDeleteRange:
    """Test delete_range."""

    @pytest.mark.asyncio
    async def test_counts_only_existing_rows(self, uow):
        stored = await uow.products.add_range(ProductFactory.build_batch(2))

        removed = await uow.products.delete_range(stored + [ProductFactory()])

        assert removed == 2
        assert await uow.products.count() == 0


class TestOrders:
    """Test orders and their owned line items."""

    @pytest.mark.asyncio
    async def test_round_trip_keeps_items_and_status(self, make_uow):
        order = OrderFactory(status=OrderStatus.SHIPPED)
        async with make_uow() as uow:
            await uow.orders.add(order)

        async with make_uow() as uow:
            loaded = await uow.orders.get_by_id(order.id)

        assert loaded.status is OrderStatus.SHIPPED
        assert loaded.items == order.items
        assert loaded.total_amount == order.total_amount
        assert loaded.order_date == order.order_date

    @pytest.mark.asyncio
    async def test_update_replaces_items(self, uow):
        order = await uow.orders.add(OrderFactory())
        order.items = [OrderItem.create("p-9", "Cable", 4, Decimal("2.50"))]
        order.recalculate_total()

        updated = await uow.orders.update(order)

        assert [i.product_id for i in updated.items] == ["p-9"]
        assert updated.total_amount == Decimal("10.00")
        rows = await uow.context.session.execute(select(func.count()).select_from(OrderItemModel))
        assert rows.scalar() == 1

    @pytest.mark.asyncio
    async def test_delete_removes_items(self, uow):
        order = await uow.orders.add(OrderFactory())

        assert await uow.orders.delete(order.id)

        rows = await uow.context.session.execute(select(func.count()).select_from(OrderItemModel))
        assert rows.scalar() == 0

    @pytest.mark.asyncio
    async def test_filter_by_status_and_date(self, uow):
        await uow.orders.add(OrderFactory(status=OrderStatus.COMPLETED, days_ago=1))
        await uow.orders.add(OrderFactory(status=OrderStatus.COMPLETED, days_ago=10))
        await uow.orders.add(OrderFactory(status=OrderStatus.PENDING, days_ago=1))
        cutoff = datetime(2026, 6, 1, tzinfo=timezone.utc) - timedelta(days=5)

        found = await uow.orders.find(
            (Field("status") == OrderStatus.COMPLETED) & (Field("order_date") >= cutoff)
        )

        assert len(found) == 1
        assert found[0].status is OrderStatus.COMPLETED

    @pytest.mark.asyncio
    async def test_order_without_customer_row_is_accepted(self, uow):
        """Customer existence is checked by the order service, not here."""
        order = await uow.orders.add(Order(customer_id="no-such-customer"))

        assert await uow.orders.get_by_id(order.id) is not None

    @pytest.mark.asyncio
    async def test_customer_lookup_by_email(self, uow):
        await uow.customers.add(Customer.create("Ada", "Lovelace", "ada@example.com"))

        found = await uow.customers.first_or_default(Field("email") == "ada@example.com")

        assert found.full_name == "Ada Lovelace"
