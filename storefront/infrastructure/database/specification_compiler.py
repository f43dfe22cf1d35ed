"""
Translate Specification trees into SQLAlchemy expressions.
"""
from enum import Enum
from typing import Any, Iterable, List, Type

from sqlalchemy import and_, func, not_, or_
from sqlalchemy.sql.elements import ColumnElement

from ...application.interfaces.repositories import Ordering
from ...domain.entities.base import (
    AndSpecification,
    ComparisonOperator,
    FieldSpecification,
    NotSpecification,
    OrSpecification,
    Specification,
)
from ...domain.exceptions import ValidationException


def resolve_column(model: Type[Any], field_name: str) -> ColumnElement:
    """
    Map an entity attribute name onto the model's column.

    Raises:
        ValidationException: If the model has no such column
    """
    columns = model.__table__.columns
    if field_name not in columns:
        raise ValidationException(
            message=f"Unknown field '{field_name}' for {model.__name__}",
            errors={'field': [field_name]}
        )
    return getattr(model, field_name)


def compile_specification(spec: Specification, model: Type[Any]) -> ColumnElement:
    """Compile a specification tree into a WHERE clause for `model`."""
    if isinstance(spec, AndSpecification):
        return and_(
            compile_specification(spec.left, model),
            compile_specification(spec.right, model),
        )
    if isinstance(spec, OrSpecification):
        return or_(
            compile_specification(spec.left, model),
            compile_specification(spec.right, model),
        )
    if isinstance(spec, NotSpecification):
        return not_(compile_specification(spec.spec, model))
    if isinstance(spec, FieldSpecification):
        return _compile_comparison(spec, model)

    raise ValidationException(
        message=f"Cannot translate {type(spec).__name__} to SQL",
        errors={'predicate': [repr(spec)]}
    )


def _compile_comparison(spec: FieldSpecification, model: Type[Any]) -> ColumnElement:
    column = resolve_column(model, spec.field)
    op = spec.operator
    value = spec.value

    if op is ComparisonOperator.EQ:
        return column.is_(None) if value is None else column == value
    if op is ComparisonOperator.NE:
        return column.is_not(None) if value is None else column != value
    if op is ComparisonOperator.IN:
        return column.in_(list(value))
    if op is ComparisonOperator.CONTAINS:
        return func.lower(column).contains(str(_plain(value)).lower(), autoescape=True)
    if op is ComparisonOperator.LT:
        return column < value
    if op is ComparisonOperator.LE:
        return column <= value
    if op is ComparisonOperator.GT:
        return column > value
    return column >= value


def compile_orderings(orderings: Iterable[Ordering], model: Type[Any]) -> List[ColumnElement]:
    """Build ORDER BY clauses, earliest key first."""
    clauses = []
    for ordering in orderings:
        column = resolve_column(model, ordering.field)
        clauses.append(column.desc() if ordering.descending else column.asc())
    return clauses


def _plain(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    return value
