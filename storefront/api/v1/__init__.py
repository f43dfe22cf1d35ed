"""
API Version 1 - Route definitions.
"""
from fastapi import APIRouter

from .products import router as products_router
from .customers import router as customers_router
from .orders import router as orders_router

# Create main v1 router
api_router = APIRouter(prefix="/v1")

# Include all sub-routers
api_router.include_router(products_router)
api_router.include_router(customers_router)
api_router.include_router(orders_router)

__all__ = ['api_router']
