"""
Product domain entity.
"""
from dataclasses import dataclass
from decimal import Decimal

from .base import Entity
from ..exceptions import ValidationException


@dataclass(eq=False)
class Product(Entity):
    """
    Catalog product.

    category doubles as the natural partition value when products live in a
    partitioned document container.
    """
    name: str = ''
    description: str = ''
    price: Decimal = Decimal('0')
    category: str = ''
    stock: int = 0
    is_active: bool = True

    @classmethod
    def create(
        cls,
        name: str,
        price: Decimal,
        category: str,
        description: str = '',
        stock: int = 0,
    ) -> 'Product':
        """Create a new product, validating price and stock."""
        errors = {}
        if not name or not name.strip():
            errors['name'] = ['Name is required']
        if Decimal(price) < 0:
            errors['price'] = ['Price cannot be negative']
        if stock < 0:
            errors['stock'] = ['Stock cannot be negative']
        if errors:
            raise ValidationException(message="Invalid product", errors=errors)

        return cls(
            name=name.strip(),
            description=description,
            price=Decimal(price),
            category=category,
            stock=stock,
        )

    @property
    def in_stock(self) -> bool:
        """Check whether the product can be sold right now."""
        return self.is_active and self.stock > 0
