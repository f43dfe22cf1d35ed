"""
Product application service.
"""
import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional

from ..interfaces.repositories import DataRepository, Page
from ...domain.entities import Field, Product
from ...domain.exceptions import EntityNotFoundException, ValidationException

logger = logging.getLogger(__name__)


class ProductService:
    """
    Catalog queries and maintenance for products.

    Works against the repository contract only, so it behaves the same
    whichever store backs products.
    """

    UPDATABLE_FIELDS = ('name', 'description', 'price', 'category', 'stock', 'is_active')

    def __init__(self, products: DataRepository[Product]):
        self._products = products

    async def get(self, product_id: str, partition_key: Optional[str] = None) -> Product:
        """
        Get a product by ID.

        Raises:
            EntityNotFoundException: If the product does not exist
        """
        product = await self._products.get_by_id(product_id, partition_key)
        if product is None:
            raise EntityNotFoundException('Product', product_id)
        return product

    async def list_all(self) -> List[Product]:
        return await self._products.get_all()

    async def get_paged(self, page_number: int, page_size: int) -> Page[Product]:
        return await self._products.get_paged(page_number, page_size)

    async def get_by_category(self, category: str) -> List[Product]:
        return await self._products.find(Field('category') == category)

    async def get_in_stock(self) -> List[Product]:
        """Active products with stock left."""
        return await self._products.find((Field('stock') > 0) & (Field('is_active') == True))  # noqa: E712

    async def search(
        self,
        term: Optional[str] = None,
        min_price: Optional[Decimal] = None,
        max_price: Optional[Decimal] = None,
    ) -> List[Product]:
        """
        Search active products.

        Args:
            term: Matched case-insensitively against name and description
            min_price: Inclusive lower price bound
            max_price: Inclusive upper price bound

        Returns:
            Matching products ordered by name
        """
        if min_price is not None and max_price is not None and min_price > max_price:
            raise ValidationException(
                message="Invalid price range",
                errors={'min_price': ['Minimum price cannot exceed maximum price']}
            )

        query = self._products.query()
        if term and term.strip():
            term = term.strip()
            query = query.where(Field('name').contains(term) | Field('description').contains(term))
        if min_price is not None:
            query = query.where(Field('price') >= min_price)
        if max_price is not None:
            query = query.where(Field('price') <= max_price)

        return await query.where(Field('is_active') == True).order_by('name').to_list()  # noqa: E712

    async def create(
        self,
        name: str,
        price: Decimal,
        category: str,
        description: str = '',
        stock: int = 0,
    ) -> Product:
        product = Product.create(
            name=name,
            price=price,
            category=category,
            description=description,
            stock=stock,
        )
        created = await self._products.add(product)
        logger.info(f"Product created: {created.id} ({created.name})")
        return created

    async def update(
        self,
        product_id: str,
        changes: Dict[str, Any],
        partition_key: Optional[str] = None,
    ) -> Product:
        """
        Apply field changes to an existing product.

        Raises:
            EntityNotFoundException: If the product does not exist
        """
        product = await self.get(product_id, partition_key)
        for name, value in changes.items():
            if name in self.UPDATABLE_FIELDS and value is not None:
                setattr(product, name, value)

        errors = {}
        if product.price < 0:
            errors['price'] = ['Price cannot be negative']
        if product.stock < 0:
            errors['stock'] = ['Stock cannot be negative']
        if errors:
            raise ValidationException(message="Invalid product", errors=errors)

        return await self._products.update(product)

    async def delete(self, product_id: str, partition_key: Optional[str] = None) -> None:
        """
        Delete a product.

        Raises:
            EntityNotFoundException: If the product does not exist
        """
        if not await self._products.delete(product_id, partition_key):
            raise EntityNotFoundException('Product', product_id)
        logger.info(f"Product deleted: {product_id}")
