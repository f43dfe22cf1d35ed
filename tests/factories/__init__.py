"""
Test data factories for Storefront.

Provides factory classes for generating test data.
"""
from .product_factory import ProductFactory, ProductPayloadFactory
from .customer_factory import CustomerFactory, CustomerPayloadFactory
from .order_factory import OrderFactory, OrderItemFactory

__all__ = [
    "ProductFactory",
    "ProductPayloadFactory",
    "CustomerFactory",
    "CustomerPayloadFactory",
    "OrderFactory",
    "OrderItemFactory",
]
