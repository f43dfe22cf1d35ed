"""
Errors raised by repositories and services.

Each error carries a stable machine-readable code and a details mapping;
the API turns them into JSON bodies of the form
``{"error": code, "message": ..., "details": {...}}``.
"""
from typing import Any, Dict, List, Optional


class DomainException(Exception):
    """
    Root of every storefront error.

    Subclasses set ``code`` and pass whatever context a client needs to act
    on the failure as ``details``.
    """

    code = 'DOMAIN_ERROR'

    def __init__(self, message: str, code: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        self.details: Dict[str, Any] = dict(details or {})

    def to_dict(self) -> Dict[str, Any]:
        return {'error': self.code, 'message': self.message, 'details': self.details}


class EntityNotFoundException(DomainException):
    """An entity addressed by id (or another key) does not exist."""

    code = 'ENTITY_NOT_FOUND'

    def __init__(self, entity_type: str, entity_id: Optional[str] = None, message: Optional[str] = None):
        self.entity_type = entity_type
        self.entity_id = entity_id
        if entity_id:
            message = f"{entity_type} with id '{entity_id}' not found"
        super().__init__(
            message or f"{entity_type} not found",
            details={'entity_type': entity_type, 'entity_id': entity_id},
        )


class ValidationException(DomainException):
    """
    An argument, predicate or entity failed validation.

    ``errors`` maps a field name to its list of problems.
    """

    code = 'VALIDATION_ERROR'

    def __init__(self, message: str = "Validation failed", errors: Optional[Dict[str, List[str]]] = None):
        self.errors: Dict[str, List[str]] = errors or {}
        super().__init__(message, details={'validation_errors': self.errors})

    def add_error(self, field: str, error: str) -> None:
        self.errors.setdefault(field, []).append(error)


class DuplicateEntityException(DomainException):
    """An insert or update collides with an existing id or unique value."""

    code = 'DUPLICATE_ENTITY'

    def __init__(self, entity_type: str, field: str, value: Any):
        self.entity_type = entity_type
        self.field = field
        super().__init__(
            f"{entity_type} with {field}='{value}' already exists",
            details={'entity_type': entity_type, 'field': field, 'value': str(value)},
        )


class InvalidStateTransitionException(DomainException):
    """An operation is not allowed in the object's current state."""

    code = 'INVALID_STATE_TRANSITION'

    def __init__(
        self,
        entity_type: str,
        current_state: str,
        target_state: str,
        message: Optional[str] = None,
    ):
        super().__init__(
            message or f"Cannot move {entity_type} from '{current_state}' to '{target_state}'",
            details={
                'entity_type': entity_type,
                'current_state': current_state,
                'target_state': target_state,
            },
        )


class BackendUnavailableException(DomainException):
    """
    A storage backend could not serve the request.

    Raised for connection loss, timeouts and throttling once retries are
    exhausted. ``status_code`` holds the backend's own HTTP status when it
    reported one.
    """

    code = 'BACKEND_UNAVAILABLE'

    def __init__(
        self,
        backend: str,
        message: str,
        original_error: Optional[str] = None,
        status_code: Optional[int] = None,
    ):
        self.backend = backend
        self.status_code = status_code
        super().__init__(
            f"Storage backend unavailable ({backend}): {message}",
            details={
                'backend': backend,
                'status_code': status_code,
                'original_error': original_error,
            },
        )
