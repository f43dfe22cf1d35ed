"""
Customer domain entity.
"""
from dataclasses import dataclass

from .base import Entity
from ..exceptions import ValidationException


@dataclass(eq=False)
class Customer(Entity):
    """Customer account. Email is unique across customers."""
    first_name: str = ''
    last_name: str = ''
    email: str = ''
    phone_number: str = ''
    address: str = ''
    country: str = ''
    is_active: bool = True

    @classmethod
    def create(
        cls,
        first_name: str,
        last_name: str,
        email: str,
        phone_number: str = '',
        address: str = '',
        country: str = '',
    ) -> 'Customer':
        """Create a new customer with a normalized email."""
        errors = {}
        if not first_name or not first_name.strip():
            errors['first_name'] = ['First name is required']
        if not last_name or not last_name.strip():
            errors['last_name'] = ['Last name is required']
        if not email or '@' not in email:
            errors['email'] = ['A valid email is required']
        if errors:
            raise ValidationException(message="Invalid customer", errors=errors)

        return cls(
            first_name=first_name.strip(),
            last_name=last_name.strip(),
            email=email.strip().lower(),
            phone_number=phone_number,
            address=address,
            country=country,
        )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()
