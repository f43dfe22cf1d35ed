# Application Services
from .product_service import ProductService
from .customer_service import CustomerService
from .order_service import OrderLineRequest, OrderService

__all__ = [
    'ProductService',
    'CustomerService',
    'OrderLineRequest',
    'OrderService',
]
