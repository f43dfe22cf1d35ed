"""
Pydantic schemas for customer endpoints.
"""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class CustomerCreate(BaseModel):
    """Request to register a customer."""
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    phone_number: str = Field(default='', max_length=20)
    address: str = Field(default='', max_length=500)
    country: str = Field(default='', max_length=100)


class CustomerUpdate(BaseModel):
    """Request to update a customer; omitted fields are left unchanged."""
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    phone_number: Optional[str] = Field(None, max_length=20)
    address: Optional[str] = Field(None, max_length=500)
    country: Optional[str] = Field(None, max_length=100)
    is_active: Optional[bool] = None


class CustomerResponse(BaseModel):
    """Customer response."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    first_name: str
    last_name: str
    email: str
    phone_number: str
    address: str
    country: str
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class CustomerListResponse(BaseModel):
    """Paginated list of customers."""
    items: List[CustomerResponse]
    total: int
    page: int
    page_size: int
    pages: int
