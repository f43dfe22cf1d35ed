"""
SQLAlchemy model for Customer entity.
"""
from typing import Optional

from sqlalchemy import Boolean, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import BaseModel, as_utc
from ....domain.entities.customer import Customer


class CustomerModel(BaseModel):
    """SQLAlchemy model for customers table."""

    __tablename__ = 'customers'

    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(254), nullable=False, unique=True, index=True)
    phone_number: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    address: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    country: Mapped[Optional[str]] = mapped_column(String(100), nullable=True, index=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    def to_domain(self) -> Customer:
        """Convert ORM model to domain entity."""
        return Customer(
            id=self.id,
            first_name=self.first_name,
            last_name=self.last_name,
            email=self.email,
            phone_number=self.phone_number or '',
            address=self.address or '',
            country=self.country or '',
            is_active=self.is_active,
            created_at=as_utc(self.created_at),
            updated_at=as_utc(self.updated_at),
        )

    @classmethod
    def from_domain(cls, customer: Customer) -> 'CustomerModel':
        """Create ORM model from domain entity."""
        return cls(
            id=customer.id,
            first_name=customer.first_name,
            last_name=customer.last_name,
            email=customer.email,
            phone_number=customer.phone_number,
            address=customer.address,
            country=customer.country,
            is_active=customer.is_active,
            created_at=customer.created_at,
            updated_at=customer.updated_at,
        )

    def update_from_domain(self, customer: Customer) -> None:
        """Update ORM model from domain entity."""
        self.first_name = customer.first_name
        self.last_name = customer.last_name
        self.email = customer.email
        self.phone_number = customer.phone_number
        self.address = customer.address
        self.country = customer.country
        self.is_active = customer.is_active
        self.updated_at = customer.updated_at
