"""
Customer application service.
"""
import logging
from typing import Any, Dict, List, Optional

from ..interfaces.repositories import DataRepository, Page
from ...domain.entities import Customer, Field
from ...domain.exceptions import (
    DuplicateEntityException,
    EntityNotFoundException,
    ValidationException,
)

logger = logging.getLogger(__name__)


class CustomerService:
    """Customer registration, lookup and search."""

    UPDATABLE_FIELDS = (
        'first_name', 'last_name', 'email', 'phone_number',
        'address', 'country', 'is_active',
    )

    def __init__(self, customers: DataRepository[Customer]):
        self._customers = customers

    async def get(self, customer_id: str, partition_key: Optional[str] = None) -> Customer:
        """
        Get a customer by ID.

        Raises:
            EntityNotFoundException: If the customer does not exist
        """
        customer = await self._customers.get_by_id(customer_id, partition_key)
        if customer is None:
            raise EntityNotFoundException('Customer', customer_id)
        return customer

    async def list_all(self) -> List[Customer]:
        return await self._customers.get_all()

    async def get_paged(self, page_number: int, page_size: int) -> Page[Customer]:
        return await self._customers.get_paged(page_number, page_size)

    async def get_by_email(self, email: str) -> Optional[Customer]:
        """Find a customer by email (case-insensitive)."""
        return await self._customers.first_or_default(Field('email') == email.strip().lower())

    async def get_by_country(self, country: str) -> List[Customer]:
        return await self._customers.find(Field('country') == country)

    async def get_active(self) -> List[Customer]:
        return await self._customers.find(Field('is_active') == True)  # noqa: E712

    async def search(self, term: str) -> List[Customer]:
        """
        Search customers by first name, last name or email.

        Returns:
            Matches ordered by last name, then first name
        """
        if not term or not term.strip():
            raise ValidationException(
                message="Search term is required",
                errors={'q': ['Search term cannot be empty']}
            )
        term = term.strip()
        spec = (
            Field('first_name').contains(term)
            | Field('last_name').contains(term)
            | Field('email').contains(term)
        )
        return await (
            self._customers.query()
            .where(spec)
            .order_by('last_name')
            .order_by('first_name')
            .to_list()
        )

    async def register(
        self,
        first_name: str,
        last_name: str,
        email: str,
        phone_number: str = '',
        address: str = '',
        country: str = '',
    ) -> Customer:
        """
        Register a new customer.

        Raises:
            DuplicateEntityException: If the email is already registered
        """
        customer = Customer.create(
            first_name=first_name,
            last_name=last_name,
            email=email,
            phone_number=phone_number,
            address=address,
            country=country,
        )

        # Check if email already exists
        if await self._customers.exists(Field('email') == customer.email):
            raise DuplicateEntityException('Customer', 'email', customer.email)

        created = await self._customers.add(customer)
        logger.info(f"Customer registered: {created.id}")
        return created

    async def update(
        self,
        customer_id: str,
        changes: Dict[str, Any],
        partition_key: Optional[str] = None,
    ) -> Customer:
        """
        Apply field changes to an existing customer.

        Raises:
            EntityNotFoundException: If the customer does not exist
            DuplicateEntityException: If the new email belongs to another customer
        """
        customer = await self.get(customer_id, partition_key)
        new_email = changes.get('email')
        if new_email:
            new_email = new_email.strip().lower()
            if new_email != customer.email:
                taken = await self._customers.exists(
                    (Field('email') == new_email) & (Field('id') != customer.id)
                )
                if taken:
                    raise DuplicateEntityException('Customer', 'email', new_email)
            changes = {**changes, 'email': new_email}

        for name, value in changes.items():
            if name in self.UPDATABLE_FIELDS and value is not None:
                setattr(customer, name, value)

        return await self._customers.update(customer)

    async def delete(self, customer_id: str, partition_key: Optional[str] = None) -> None:
        """
        Delete a customer.

        Raises:
            EntityNotFoundException: If the customer does not exist
        """
        if not await self._customers.delete(customer_id, partition_key):
            raise EntityNotFoundException('Customer', customer_id)
        logger.info(f"Customer deleted: {customer_id}")
