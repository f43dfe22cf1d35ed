"""
Pydantic request/response schemas for API endpoints.
"""
from .common_schemas import ErrorResponse, page_count

# Product schemas
from .product_schemas import (
    ProductCreate,
    ProductListResponse,
    ProductResponse,
    ProductUpdate,
)

# Customer schemas
from .customer_schemas import (
    CustomerCreate,
    CustomerListResponse,
    CustomerResponse,
    CustomerUpdate,
)

# Order schemas
from .order_schemas import (
    OrderCreate,
    OrderItemCreate,
    OrderItemResponse,
    OrderListResponse,
    OrderResponse,
    OrderStatusUpdate,
    RevenueResponse,
)

__all__ = [
    'ErrorResponse',
    'page_count',
    'ProductCreate',
    'ProductListResponse',
    'ProductResponse',
    'ProductUpdate',
    'CustomerCreate',
    'CustomerListResponse',
    'CustomerResponse',
    'CustomerUpdate',
    'OrderCreate',
    'OrderItemCreate',
    'OrderItemResponse',
    'OrderListResponse',
    'OrderResponse',
    'OrderStatusUpdate',
    'RevenueResponse',
]
