"""
Pydantic schemas for order endpoints.
"""
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ...domain.entities.order import OrderStatus


class OrderItemCreate(BaseModel):
    """One line of a new order."""
    product_id: str = Field(..., min_length=1, max_length=36)
    product_name: str = Field(..., min_length=1, max_length=200)
    quantity: int = Field(..., gt=0)
    unit_price: Decimal = Field(..., ge=0, decimal_places=2)


class OrderCreate(BaseModel):
    """Request to place an order."""
    customer_id: str = Field(..., min_length=1, max_length=36)
    items: List[OrderItemCreate] = Field(..., min_length=1)
    order_date: Optional[datetime] = None


class OrderStatusUpdate(BaseModel):
    """Request to change an order's status."""
    status: OrderStatus


class OrderItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    product_id: str
    product_name: str
    quantity: int
    unit_price: Decimal
    total_price: Decimal


class OrderResponse(BaseModel):
    """Order response."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    customer_id: str
    order_date: datetime
    total_amount: Decimal
    status: OrderStatus
    items: List[OrderItemResponse]
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class OrderListResponse(BaseModel):
    """Paginated list of orders."""
    items: List[OrderResponse]
    total: int
    page: int
    page_size: int
    pages: int


class RevenueResponse(BaseModel):
    """Revenue from completed orders."""
    total_revenue: Decimal
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
