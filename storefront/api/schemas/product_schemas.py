"""
Pydantic schemas for product endpoints.
"""
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ProductCreate(BaseModel):
    """Request to create a product."""
    name: str = Field(..., min_length=1, max_length=200)
    description: str = Field(default='', max_length=2000)
    price: Decimal = Field(..., ge=0, decimal_places=2)
    category: str = Field(..., min_length=1, max_length=100)
    stock: int = Field(default=0, ge=0)

    @field_validator('name', 'category')
    @classmethod
    def strip_text(cls, v: str) -> str:
        return v.strip()


class ProductUpdate(BaseModel):
    """Request to update a product; omitted fields are left unchanged."""
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    price: Optional[Decimal] = Field(None, ge=0, decimal_places=2)
    category: Optional[str] = Field(None, min_length=1, max_length=100)
    stock: Optional[int] = Field(None, ge=0)
    is_active: Optional[bool] = None


class ProductResponse(BaseModel):
    """Product response."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    description: str
    price: Decimal
    category: str
    stock: int
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ProductListResponse(BaseModel):
    """Paginated list of products."""
    items: List[ProductResponse]
    total: int
    page: int
    page_size: int
    pages: int
