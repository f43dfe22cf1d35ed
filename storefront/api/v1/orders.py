"""
Order API endpoints.
"""
from datetime import datetime, timezone
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status

from ..dependencies import get_order_service
from ..schemas.common_schemas import ErrorResponse, page_count
from ..schemas.order_schemas import (
    OrderCreate,
    OrderListResponse,
    OrderResponse,
    OrderStatusUpdate,
    RevenueResponse,
)
from ...application.services import OrderLineRequest, OrderService
from ...domain.entities import Order, OrderStatus

router = APIRouter(prefix="/orders", tags=["Orders"])

PARTITION_KEY_QUERY = Query(
    None,
    description="Partition key value; required when orders are partitioned on a field other than id",
)


def order_to_response(order: Order) -> OrderResponse:
    """Convert Order domain entity to response schema."""
    return OrderResponse.model_validate(order)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Treat naive query datetimes as UTC."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


@router.get("", response_model=OrderListResponse)
async def list_orders(
    page: Optional[int] = Query(None, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    service: OrderService = Depends(get_order_service),
):
    """List orders, one page at a time when `page` is given."""
    if page is None:
        orders = await service.list_all()
        return OrderListResponse(
            items=[order_to_response(o) for o in orders],
            total=len(orders),
            page=1,
            page_size=len(orders),
            pages=1 if orders else 0,
        )

    result = await service.get_paged(page, page_size)
    return OrderListResponse(
        items=[order_to_response(o) for o in result.items],
        total=result.total_count,
        page=result.page_number,
        page_size=result.page_size,
        pages=page_count(result.total_count, result.page_size),
    )


@router.get("/pending", response_model=List[OrderResponse])
async def get_pending_orders(service: OrderService = Depends(get_order_service)):
    orders = await service.get_pending()
    return [order_to_response(o) for o in orders]


@router.get("/status/{order_status}", response_model=List[OrderResponse])
async def get_orders_by_status(
    order_status: OrderStatus,
    service: OrderService = Depends(get_order_service),
):
    orders = await service.get_by_status(order_status)
    return [order_to_response(o) for o in orders]


@router.get("/customer/{customer_id}", response_model=List[OrderResponse])
async def get_orders_by_customer(
    customer_id: str,
    service: OrderService = Depends(get_order_service),
):
    """Orders of one customer, newest first."""
    orders = await service.get_by_customer_id(customer_id)
    return [order_to_response(o) for o in orders]


@router.get(
    "/date-range",
    response_model=List[OrderResponse],
    responses={422: {"model": ErrorResponse}},
)
async def get_orders_by_date_range(
    start_date: datetime = Query(...),
    end_date: datetime = Query(...),
    service: OrderService = Depends(get_order_service),
):
    """Orders placed between two dates (inclusive), newest first."""
    orders = await service.get_by_date_range(as_utc(start_date), as_utc(end_date))
    return [order_to_response(o) for o in orders]


@router.get("/revenue", response_model=RevenueResponse)
async def get_total_revenue(
    start_date: Optional[datetime] = Query(None),
    end_date: Optional[datetime] = Query(None),
    service: OrderService = Depends(get_order_service),
):
    """Revenue from completed orders."""
    start, end = as_utc(start_date), as_utc(end_date)
    total = await service.get_total_revenue(start, end)
    return RevenueResponse(total_revenue=total, start_date=start, end_date=end)


@router.get(
    "/{order_id}",
    response_model=OrderResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_order(
    order_id: str,
    partition_key: Optional[str] = PARTITION_KEY_QUERY,
    service: OrderService = Depends(get_order_service),
):
    """Get an order by ID."""
    return order_to_response(await service.get(order_id, partition_key))


@router.post(
    "",
    response_model=OrderResponse,
    status_code=status.HTTP_201_CREATED,
    responses={404: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
async def create_order(
    request: OrderCreate,
    service: OrderService = Depends(get_order_service),
):
    """Place an order for an existing customer."""
    order = await service.place_order(
        customer_id=request.customer_id,
        lines=[
            OrderLineRequest(
                product_id=item.product_id,
                product_name=item.product_name,
                quantity=item.quantity,
                unit_price=item.unit_price,
            )
            for item in request.items
        ],
        order_date=as_utc(request.order_date),
    )
    return order_to_response(order)


@router.patch(
    "/{order_id}/status",
    response_model=OrderResponse,
    responses={404: {"model": ErrorResponse}},
)
async def update_order_status(
    order_id: str,
    request: OrderStatusUpdate,
    partition_key: Optional[str] = PARTITION_KEY_QUERY,
    service: OrderService = Depends(get_order_service),
):
    """Change an order's status."""
    order = await service.update_status(order_id, request.status, partition_key)
    return order_to_response(order)


@router.delete(
    "/{order_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse}},
)
async def delete_order(
    order_id: str,
    partition_key: Optional[str] = PARTITION_KEY_QUERY,
    service: OrderService = Depends(get_order_service),
):
    """Delete an order."""
    await service.delete(order_id, partition_key)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
