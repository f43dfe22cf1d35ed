"""
Order test data factories.
"""
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from uuid import uuid4

import factory

from storefront.domain.entities import Order, OrderItem, OrderStatus


class OrderItemFactory(factory.Factory):
    """
    Factory for order lines; total_price is derived like OrderItem.create does.
    """

    class Meta:
        model = OrderItem

    product_id = factory.LazyFunction(lambda: str(uuid4()))
    product_name = factory.Sequence(lambda n: f"Item {n:04d}")
    quantity = 2
    unit_price = Decimal("5.00")
    total_price = factory.LazyAttribute(lambda o: o.unit_price * o.quantity)


class OrderFactory(factory.Factory):
    """
    Factory for unsaved Order entities.

    Usage:
        order = OrderFactory(customer_id=customer.id)
        order = OrderFactory(status=OrderStatus.COMPLETED, days_ago=3)
    """

    class Meta:
        model = Order
        exclude = ("days_ago",)

    days_ago = 0

    customer_id = factory.LazyFunction(lambda: str(uuid4()))
    order_date = factory.LazyAttribute(
        lambda o: datetime(2026, 6, 1, 12, 0, tzinfo=timezone.utc) - timedelta(days=o.days_ago)
    )
    status = OrderStatus.PENDING
    items = factory.LazyFunction(lambda: [OrderItemFactory(), OrderItemFactory(quantity=1)])
    total_amount = factory.LazyAttribute(
        lambda o: sum((item.total_price for item in o.items), Decimal("0"))
    )
