"""
Order application service.
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from ..interfaces.repositories import DataRepository, Page
from ...domain.entities import Customer, Field, Order, OrderItem, OrderStatus
from ...domain.exceptions import EntityNotFoundException, ValidationException

logger = logging.getLogger(__name__)


@dataclass
class OrderLineRequest:
    """One requested order line."""
    product_id: str
    product_name: str
    quantity: int
    unit_price: Decimal


class OrderService:
    """
    Order placement, status changes and reporting.

    The customer an order refers to is checked here rather than in the
    repositories, since customers and orders may live in different stores.
    """

    def __init__(self, orders: DataRepository[Order], customers: DataRepository[Customer]):
        self._orders = orders
        self._customers = customers

    async def get(self, order_id: str, partition_key: Optional[str] = None) -> Order:
        """
        Get an order by ID.

        Raises:
            EntityNotFoundException: If the order does not exist
        """
        order = await self._orders.get_by_id(order_id, partition_key)
        if order is None:
            raise EntityNotFoundException('Order', order_id)
        return order

    async def list_all(self) -> List[Order]:
        return await self._orders.get_all()

    async def get_paged(self, page_number: int, page_size: int) -> Page[Order]:
        return await self._orders.get_paged(page_number, page_size)

    async def get_by_customer_id(self, customer_id: str) -> List[Order]:
        """Orders of one customer, newest first."""
        return await (
            self._orders.query()
            .where(Field('customer_id') == customer_id)
            .order_by('order_date', descending=True)
            .to_list()
        )

    async def get_by_status(self, status: OrderStatus) -> List[Order]:
        return await self._orders.find(Field('status') == OrderStatus(status))

    async def get_pending(self) -> List[Order]:
        return await self.get_by_status(OrderStatus.PENDING)

    async def get_by_date_range(self, start: datetime, end: datetime) -> List[Order]:
        """
        Orders placed between start and end (inclusive), newest first.

        Raises:
            ValidationException: If start is after end
        """
        if start > end:
            raise ValidationException(
                message="Invalid date range",
                errors={'start_date': ['Start date must not be after end date']}
            )
        return await (
            self._orders.query()
            .where((Field('order_date') >= start) & (Field('order_date') <= end))
            .order_by('order_date', descending=True)
            .to_list()
        )

    async def get_total_revenue(
        self,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> Decimal:
        """Sum of total_amount over completed orders, optionally within a date range."""
        query = self._orders.query().where(Field('status') == OrderStatus.COMPLETED)
        if start is not None:
            query = query.where(Field('order_date') >= start)
        if end is not None:
            query = query.where(Field('order_date') <= end)

        orders = await query.to_list()
        return sum((order.total_amount for order in orders), Decimal('0'))

    async def place_order(
        self,
        customer_id: str,
        lines: List[OrderLineRequest],
        order_date: Optional[datetime] = None,
    ) -> Order:
        """
        Place a new order for an existing customer.

        Raises:
            EntityNotFoundException: If the customer does not exist
            ValidationException: If there are no lines or a line is invalid
        """
        if not lines:
            raise ValidationException(
                message="Invalid order",
                errors={'items': ['An order needs at least one item']}
            )
        if not await self._customers.exists(Field('id') == customer_id):
            raise EntityNotFoundException('Customer', customer_id)

        order = Order(customer_id=customer_id)
        if order_date is not None:
            order.order_date = order_date
        for line in lines:
            order.add_item(OrderItem.create(
                product_id=line.product_id,
                product_name=line.product_name,
                quantity=line.quantity,
                unit_price=line.unit_price,
            ))

        created = await self._orders.add(order)
        logger.info(f"Order placed: {created.id} for customer {customer_id} ({created.total_amount})")
        return created

    async def update_status(
        self,
        order_id: str,
        status: OrderStatus,
        partition_key: Optional[str] = None,
    ) -> Order:
        """
        Move an order to a new status.

        Raises:
            EntityNotFoundException: If the order does not exist
        """
        order = await self.get(order_id, partition_key)
        order.change_status(status)
        updated = await self._orders.update(order)
        logger.info(f"Order {order_id} status changed to {updated.status.value}")
        return updated

    async def delete(self, order_id: str, partition_key: Optional[str] = None) -> None:
        """
        Delete an order.

        Raises:
            EntityNotFoundException: If the order does not exist
        """
        if not await self._orders.delete(order_id, partition_key):
            raise EntityNotFoundException('Order', order_id)
        logger.info(f"Order deleted: {order_id}")
