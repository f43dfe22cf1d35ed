"""
SQLAlchemy models for orders and their line items.
"""
from datetime import datetime
from decimal import Decimal
from typing import List

from sqlalchemy import DateTime, Enum as SQLEnum, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, BaseModel, as_utc
from ....domain.entities.order import Order, OrderItem, OrderStatus


class OrderItemModel(Base):
    """
    SQLAlchemy model for order_items table.

    Rows are owned by their order: the surrogate key never leaves this module.
    """

    __tablename__ = 'order_items'

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    order_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey('orders.id', ondelete='CASCADE'),
        nullable=False,
        index=True,
    )
    product_id: Mapped[str] = mapped_column(String(36), nullable=False)
    product_name: Mapped[str] = mapped_column(String(200), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    unit_price: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    total_price: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)

    def to_domain(self) -> OrderItem:
        return OrderItem(
            product_id=self.product_id,
            product_name=self.product_name,
            quantity=self.quantity,
            unit_price=Decimal(self.unit_price),
            total_price=Decimal(self.total_price),
        )

    @classmethod
    def from_domain(cls, item: OrderItem) -> 'OrderItemModel':
        return cls(
            product_id=item.product_id,
            product_name=item.product_name,
            quantity=item.quantity,
            unit_price=item.unit_price,
            total_price=item.total_price,
        )


class OrderModel(BaseModel):
    """SQLAlchemy model for orders table."""

    __tablename__ = 'orders'

    # No foreign key: customers may live in the document store.
    customer_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    order_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    total_amount: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    status: Mapped[OrderStatus] = mapped_column(
        SQLEnum(
            OrderStatus,
            name='order_status',
            values_callable=lambda statuses: [s.value for s in statuses],
        ),
        default=OrderStatus.PENDING,
        nullable=False,
        index=True,
    )

    items: Mapped[List[OrderItemModel]] = relationship(
        OrderItemModel,
        cascade='all, delete-orphan',
        lazy='selectin',
        order_by=OrderItemModel.id,
    )

    def to_domain(self) -> Order:
        """Convert ORM model to domain entity."""
        return Order(
            id=self.id,
            customer_id=self.customer_id,
            order_date=as_utc(self.order_date),
            total_amount=Decimal(self.total_amount),
            status=OrderStatus(self.status),
            items=[item.to_domain() for item in self.items],
            created_at=as_utc(self.created_at),
            updated_at=as_utc(self.updated_at),
        )

    @classmethod
    def from_domain(cls, order: Order) -> 'OrderModel':
        """Create ORM model from domain entity."""
        return cls(
            id=order.id,
            customer_id=order.customer_id,
            order_date=order.order_date,
            total_amount=order.total_amount,
            status=order.status,
            items=[OrderItemModel.from_domain(item) for item in order.items],
            created_at=order.created_at,
            updated_at=order.updated_at,
        )

    def update_from_domain(self, order: Order) -> None:
        """Update ORM model from domain entity; line items are replaced wholesale."""
        self.customer_id = order.customer_id
        self.order_date = order.order_date
        self.total_amount = order.total_amount
        self.status = order.status
        self.items = [OrderItemModel.from_domain(item) for item in order.items]
        self.updated_at = order.updated_at
