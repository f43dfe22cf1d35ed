"""
Customer API endpoints.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status

from ..dependencies import get_customer_service
from ..schemas.common_schemas import ErrorResponse, page_count
from ..schemas.customer_schemas import (
    CustomerCreate,
    CustomerListResponse,
    CustomerResponse,
    CustomerUpdate,
)
from ...application.services import CustomerService
from ...domain.entities import Customer
from ...domain.exceptions import EntityNotFoundException

router = APIRouter(prefix="/customers", tags=["Customers"])

PARTITION_KEY_QUERY = Query(
    None,
    description="Partition key value; required when customers are partitioned on a field other than id",
)


def customer_to_response(customer: Customer) -> CustomerResponse:
    """Convert Customer domain entity to response schema."""
    return CustomerResponse.model_validate(customer)


@router.get("", response_model=CustomerListResponse)
async def list_customers(
    page: Optional[int] = Query(None, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    service: CustomerService = Depends(get_customer_service),
):
    """List customers, one page at a time when `page` is given."""
    if page is None:
        customers = await service.list_all()
        return CustomerListResponse(
            items=[customer_to_response(c) for c in customers],
            total=len(customers),
            page=1,
            page_size=len(customers),
            pages=1 if customers else 0,
        )

    result = await service.get_paged(page, page_size)
    return CustomerListResponse(
        items=[customer_to_response(c) for c in result.items],
        total=result.total_count,
        page=result.page_number,
        page_size=result.page_size,
        pages=page_count(result.total_count, result.page_size),
    )


@router.get("/active", response_model=List[CustomerResponse])
async def get_active_customers(service: CustomerService = Depends(get_customer_service)):
    customers = await service.get_active()
    return [customer_to_response(c) for c in customers]


@router.get("/search", response_model=List[CustomerResponse])
async def search_customers(
    q: str = Query(..., min_length=1, description="Text matched against names and email"),
    service: CustomerService = Depends(get_customer_service),
):
    """Search customers by name or email."""
    customers = await service.search(q)
    return [customer_to_response(c) for c in customers]


@router.get(
    "/email/{email}",
    response_model=CustomerResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_customer_by_email(
    email: str,
    service: CustomerService = Depends(get_customer_service),
):
    """Look up a customer by email."""
    customer = await service.get_by_email(email)
    if customer is None:
        raise EntityNotFoundException('Customer', message=f"Customer with email '{email}' not found")
    return customer_to_response(customer)


@router.get("/country/{country}", response_model=List[CustomerResponse])
async def get_customers_by_country(
    country: str,
    service: CustomerService = Depends(get_customer_service),
):
    customers = await service.get_by_country(country)
    return [customer_to_response(c) for c in customers]


@router.get(
    "/{customer_id}",
    response_model=CustomerResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_customer(
    customer_id: str,
    partition_key: Optional[str] = PARTITION_KEY_QUERY,
    service: CustomerService = Depends(get_customer_service),
):
    """Get a customer by ID."""
    return customer_to_response(await service.get(customer_id, partition_key))


@router.post(
    "",
    response_model=CustomerResponse,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
async def create_customer(
    request: CustomerCreate,
    service: CustomerService = Depends(get_customer_service),
):
    """Register a new customer."""
    customer = await service.register(
        first_name=request.first_name,
        last_name=request.last_name,
        email=request.email,
        phone_number=request.phone_number,
        address=request.address,
        country=request.country,
    )
    return customer_to_response(customer)


@router.put(
    "/{customer_id}",
    response_model=CustomerResponse,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def update_customer(
    customer_id: str,
    request: CustomerUpdate,
    partition_key: Optional[str] = PARTITION_KEY_QUERY,
    service: CustomerService = Depends(get_customer_service),
):
    """Update a customer."""
    customer = await service.update(
        customer_id,
        request.model_dump(exclude_unset=True),
        partition_key,
    )
    return customer_to_response(customer)


@router.delete(
    "/{customer_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse}},
)
async def delete_customer(
    customer_id: str,
    partition_key: Optional[str] = PARTITION_KEY_QUERY,
    service: CustomerService = Depends(get_customer_service),
):
    """Delete a customer."""
    await service.delete(customer_id, partition_key)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
