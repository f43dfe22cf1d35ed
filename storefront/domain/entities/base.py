"""
Entity base types and composable query predicates.

Nothing here depends on a storage backend: specifications are evaluated
in memory by is_satisfied_by and translated into SQL or Cosmos SQL by the
infrastructure layer.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Iterable, Optional
from uuid import uuid4


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    """Random UUID in its canonical string form."""
    return str(uuid4())


@dataclass
class Entity(ABC):
    """
    Anything stored by a repository.

    Identity is the id alone. created_at is set once, on insert;
    updated_at stays None until the first update.
    """
    id: str = field(default_factory=new_id)
    created_at: Optional[datetime] = field(default=None)
    updated_at: Optional[datetime] = field(default=None)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Entity) and other.id == self.id

    def __hash__(self) -> int:
        return hash(self.id)

    def mark_created(self) -> None:
        self.created_at = utc_now()

    def mark_updated(self) -> None:
        self.updated_at = utc_now()


@dataclass(frozen=True)
class ValueObject(ABC):
    """
    Immutable value compared by its attributes.

    Subclasses must themselves be declared with @dataclass(frozen=True).
    """

    def __eq__(self, other: object) -> bool:
        return type(other) is type(self) and vars(other) == vars(self)

    def __hash__(self) -> int:
        return hash(tuple(sorted(vars(self).items())))


class Specification(ABC):
    """
    Predicate over entities.

    Combine with ``&``, ``|`` and ``~`` (or and_/or_/not_).
    """

    @abstractmethod
    def is_satisfied_by(self, candidate: Any) -> bool:
        pass

    def and_(self, other: 'Specification') -> 'Specification':
        return AndSpecification(self, other)

    def or_(self, other: 'Specification') -> 'Specification':
        return OrSpecification(self, other)

    def not_(self) -> 'Specification':
        return NotSpecification(self)

    __and__ = and_
    __or__ = or_
    __invert__ = not_


class _BinarySpecification(Specification, ABC):

    def __init__(self, left: Specification, right: Specification):
        self.left = left
        self.right = right


class AndSpecification(_BinarySpecification):
    """Both sides hold."""

    def is_satisfied_by(self, candidate: Any) -> bool:
        return self.left.is_satisfied_by(candidate) and self.right.is_satisfied_by(candidate)


class OrSpecification(_BinarySpecification):
    """At least one side holds."""

    def is_satisfied_by(self, candidate: Any) -> bool:
        return self.left.is_satisfied_by(candidate) or self.right.is_satisfied_by(candidate)


class NotSpecification(Specification):

    def __init__(self, spec: Specification):
        self.spec = spec

    def is_satisfied_by(self, candidate: Any) -> bool:
        return not self.spec.is_satisfied_by(candidate)


class ComparisonOperator(str, Enum):
    """Operators a field specification can apply."""
    EQ = 'eq'
    NE = 'ne'
    LT = 'lt'
    LE = 'le'
    GT = 'gt'
    GE = 'ge'
    CONTAINS = 'contains'
    IN = 'in'


class FieldSpecification(Specification):
    """
    Compares one entity attribute against a constant.

    `contains` is a case-insensitive substring match on every backend.
    Ordering comparisons against a missing (None) attribute are never satisfied.
    """

    def __init__(self, field: str, operator: ComparisonOperator, value: Any):
        self.field = field
        self.operator = ComparisonOperator(operator)
        self.value = value

    def is_satisfied_by(self, candidate: Any) -> bool:
        actual = _plain(getattr(candidate, self.field))
        expected = self.value
        op = self.operator

        if op is ComparisonOperator.EQ:
            return actual == _plain(expected)
        if op is ComparisonOperator.NE:
            # A missing attribute is never unequal to anything, as in SQL and Cosmos
            if actual is None:
                return False
            return actual != _plain(expected)
        if op is ComparisonOperator.IN:
            return actual in [_plain(v) for v in expected]
        if actual is None:
            return False
        if op is ComparisonOperator.CONTAINS:
            return str(expected).lower() in str(actual).lower()

        expected = _plain(expected)
        if op is ComparisonOperator.LT:
            return actual < expected
        if op is ComparisonOperator.LE:
            return actual <= expected
        if op is ComparisonOperator.GT:
            return actual > expected
        return actual >= expected

    def __repr__(self) -> str:
        return f"FieldSpecification({self.field!r} {self.operator.value} {self.value!r})"


class Field:
    """
    Builder for field specifications.

    Usage:
        spec = (Field('category') == 'Electronics') & (Field('price') < Decimal('100'))
    """

    def __init__(self, name: str):
        self.name = name

    def __eq__(self, value: Any) -> FieldSpecification:  # type: ignore[override]
        return FieldSpecification(self.name, ComparisonOperator.EQ, value)

    def __ne__(self, value: Any) -> FieldSpecification:  # type: ignore[override]
        return FieldSpecification(self.name, ComparisonOperator.NE, value)

    def __lt__(self, value: Any) -> FieldSpecification:
        return FieldSpecification(self.name, ComparisonOperator.LT, value)

    def __le__(self, value: Any) -> FieldSpecification:
        return FieldSpecification(self.name, ComparisonOperator.LE, value)

    def __gt__(self, value: Any) -> FieldSpecification:
        return FieldSpecification(self.name, ComparisonOperator.GT, value)

    def __ge__(self, value: Any) -> FieldSpecification:
        return FieldSpecification(self.name, ComparisonOperator.GE, value)

    __hash__ = None  # type: ignore[assignment]

    def contains(self, value: str) -> FieldSpecification:
        return FieldSpecification(self.name, ComparisonOperator.CONTAINS, value)

    def in_(self, values: Iterable[Any]) -> FieldSpecification:
        return FieldSpecification(self.name, ComparisonOperator.IN, list(values))


def _plain(value: Any) -> Any:
    """Unwrap enums so str-valued enums compare equal to their values."""
    if isinstance(value, Enum):
        return value.value
    return value
