"""
SQLAlchemy ORM models.
"""
from .base import Base, BaseModel, StringIdMixin, TimestampMixin, as_utc
from .product_model import ProductModel
from .customer_model import CustomerModel
from .order_model import OrderModel, OrderItemModel

__all__ = [
    'Base',
    'BaseModel',
    'StringIdMixin',
    'TimestampMixin',
    'as_utc',
    'ProductModel',
    'CustomerModel',
    'OrderModel',
    'OrderItemModel',
]
