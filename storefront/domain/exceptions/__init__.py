# Domain Exceptions
from .domain_exceptions import (
    DomainException,
    EntityNotFoundException,
    ValidationException,
    DuplicateEntityException,
    InvalidStateTransitionException,
    BackendUnavailableException,
)

__all__ = [
    'DomainException',
    'EntityNotFoundException',
    'ValidationException',
    'DuplicateEntityException',
    'InvalidStateTransitionException',
    'BackendUnavailableException',
]
