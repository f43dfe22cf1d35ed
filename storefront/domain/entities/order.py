"""
Order domain entity and its line items.
"""
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import List

from .base import Entity, ValueObject, utc_now
from ..exceptions import ValidationException


class OrderStatus(str, Enum):
    """Order lifecycle status."""
    PENDING = "Pending"
    PROCESSING = "Processing"
    SHIPPED = "Shipped"
    DELIVERED = "Delivered"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"


@dataclass(frozen=True)
class OrderItem(ValueObject):
    """
    Order line (value object).

    Owned by its order; it has no identity of its own in any store.
    """
    product_id: str
    product_name: str
    quantity: int
    unit_price: Decimal
    total_price: Decimal

    @classmethod
    def create(
        cls,
        product_id: str,
        product_name: str,
        quantity: int,
        unit_price: Decimal,
    ) -> 'OrderItem':
        """Create a line, computing its total."""
        if quantity <= 0:
            raise ValidationException(
                message="Invalid order item",
                errors={'quantity': ['Quantity must be positive']}
            )
        unit_price = Decimal(unit_price)
        if unit_price < 0:
            raise ValidationException(
                message="Invalid order item",
                errors={'unit_price': ['Unit price cannot be negative']}
            )
        return cls(
            product_id=product_id,
            product_name=product_name,
            quantity=quantity,
            unit_price=unit_price,
            total_price=unit_price * quantity,
        )


@dataclass(eq=False)
class Order(Entity):
    """
    Customer order.

    customer_id must reference an existing customer; that is checked by the
    order service, not by the repositories.
    """
    customer_id: str = ''
    order_date: datetime = field(default_factory=utc_now)
    total_amount: Decimal = Decimal('0')
    status: OrderStatus = OrderStatus.PENDING
    items: List[OrderItem] = field(default_factory=list)

    def add_item(self, item: OrderItem) -> None:
        """Append a line and refresh the order total."""
        self.items.append(item)
        self.recalculate_total()

    def recalculate_total(self) -> Decimal:
        """Sum line totals into total_amount."""
        self.total_amount = sum((item.total_price for item in self.items), Decimal('0'))
        return self.total_amount

    def change_status(self, status: OrderStatus) -> None:
        """Move the order to a new status."""
        self.status = OrderStatus(status)

    @property
    def is_pending(self) -> bool:
        return self.status == OrderStatus.PENDING
