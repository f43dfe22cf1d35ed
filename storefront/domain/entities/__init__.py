# Domain Entities
from .base import (
    Entity,
    ValueObject,
    Specification,
    AndSpecification,
    OrSpecification,
    NotSpecification,
    ComparisonOperator,
    FieldSpecification,
    Field,
    new_id,
    utc_now,
)
from .product import Product
from .customer import Customer
from .order import Order, OrderItem, OrderStatus

__all__ = [
    # Base
    'Entity',
    'ValueObject',
    'Specification',
    'AndSpecification',
    'OrSpecification',
    'NotSpecification',
    'ComparisonOperator',
    'FieldSpecification',
    'Field',
    'new_id',
    'utc_now',
    # Catalog
    'Product',
    'Customer',
    'Order',
    'OrderItem',
    'OrderStatus',
]
