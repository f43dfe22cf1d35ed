"""
SQLAlchemy model for Product entity.
"""
from decimal import Decimal
from typing import Optional

from sqlalchemy import Boolean, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import BaseModel, as_utc
from ....domain.entities.product import Product


class ProductModel(BaseModel):
    """SQLAlchemy model for products table."""

    __tablename__ = 'products'

    name: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    price: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    category: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    stock: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    def to_domain(self) -> Product:
        """Convert ORM model to domain entity."""
        return Product(
            id=self.id,
            name=self.name,
            description=self.description or '',
            price=Decimal(self.price),
            category=self.category,
            stock=self.stock,
            is_active=self.is_active,
            created_at=as_utc(self.created_at),
            updated_at=as_utc(self.updated_at),
        )

    @classmethod
    def from_domain(cls, product: Product) -> 'ProductModel':
        """Create ORM model from domain entity."""
        return cls(
            id=product.id,
            name=product.name,
            description=product.description,
            price=product.price,
            category=product.category,
            stock=product.stock,
            is_active=product.is_active,
            created_at=product.created_at,
            updated_at=product.updated_at,
        )

    def update_from_domain(self, product: Product) -> None:
        """Update ORM model from domain entity. created_at is left alone."""
        self.name = product.name
        self.description = product.description
        self.price = product.price
        self.category = product.category
        self.stock = product.stock
        self.is_active = product.is_active
        self.updated_at = product.updated_at
