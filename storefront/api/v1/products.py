"""
Product catalog API endpoints.
"""
from decimal import Decimal
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status

from ..dependencies import get_product_service
from ..schemas.common_schemas import ErrorResponse, page_count
from ..schemas.product_schemas import (
    ProductCreate,
    ProductListResponse,
    ProductResponse,
    ProductUpdate,
)
from ...application.services import ProductService
from ...domain.entities import Product

router = APIRouter(prefix="/products", tags=["Products"])

PARTITION_KEY_QUERY = Query(
    None,
    description="Partition key value; required when products are partitioned on a field other than id",
)


def product_to_response(product: Product) -> ProductResponse:
    """Convert Product domain entity to response schema."""
    return ProductResponse.model_validate(product)


@router.get("", response_model=ProductListResponse)
async def list_products(
    page: Optional[int] = Query(None, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    service: ProductService = Depends(get_product_service),
):
    """List products, one page at a time when `page` is given."""
    if page is None:
        products = await service.list_all()
        return ProductListResponse(
            items=[product_to_response(p) for p in products],
            total=len(products),
            page=1,
            page_size=len(products),
            pages=1 if products else 0,
        )

    result = await service.get_paged(page, page_size)
    return ProductListResponse(
        items=[product_to_response(p) for p in result.items],
        total=result.total_count,
        page=result.page_number,
        page_size=result.page_size,
        pages=page_count(result.total_count, result.page_size),
    )


@router.get("/category/{category}", response_model=List[ProductResponse])
async def get_products_by_category(
    category: str,
    service: ProductService = Depends(get_product_service),
):
    """Products in one category."""
    products = await service.get_by_category(category)
    return [product_to_response(p) for p in products]


@router.get("/in-stock", response_model=List[ProductResponse])
async def get_products_in_stock(service: ProductService = Depends(get_product_service)):
    """Active products with stock left."""
    products = await service.get_in_stock()
    return [product_to_response(p) for p in products]


@router.get("/search", response_model=List[ProductResponse])
async def search_products(
    q: Optional[str] = Query(None, description="Text matched against name and description"),
    min_price: Optional[Decimal] = Query(None, ge=0),
    max_price: Optional[Decimal] = Query(None, ge=0),
    service: ProductService = Depends(get_product_service),
):
    """Search active products by text and price range."""
    products = await service.search(q, min_price, max_price)
    return [product_to_response(p) for p in products]


@router.get(
    "/{product_id}",
    response_model=ProductResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_product(
    product_id: str,
    partition_key: Optional[str] = PARTITION_KEY_QUERY,
    service: ProductService = Depends(get_product_service),
):
    """Get a product by ID."""
    return product_to_response(await service.get(product_id, partition_key))


@router.post(
    "",
    response_model=ProductResponse,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
async def create_product(
    request: ProductCreate,
    service: ProductService = Depends(get_product_service),
):
    """Create a new product."""
    product = await service.create(
        name=request.name,
        price=request.price,
        category=request.category,
        description=request.description,
        stock=request.stock,
    )
    return product_to_response(product)


@router.put(
    "/{product_id}",
    response_model=ProductResponse,
    responses={404: {"model": ErrorResponse}},
)
async def update_product(
    product_id: str,
    request: ProductUpdate,
    partition_key: Optional[str] = PARTITION_KEY_QUERY,
    service: ProductService = Depends(get_product_service),
):
    """Update a product."""
    product = await service.update(
        product_id,
        request.model_dump(exclude_unset=True),
        partition_key,
    )
    return product_to_response(product)


@router.delete(
    "/{product_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse}},
)
async def delete_product(
    product_id: str,
    partition_key: Optional[str] = PARTITION_KEY_QUERY,
    service: ProductService = Depends(get_product_service),
):
    """Delete a product."""
    await service.delete(product_id, partition_key)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
