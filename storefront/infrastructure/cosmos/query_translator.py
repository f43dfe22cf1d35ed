"""
Translate Specification trees and query state into Cosmos DB SQL.

Constants never appear in the query text; each one becomes a named
parameter (@p0, @p1, ...).
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List

from ...application.interfaces.repositories import QueryState
from ...domain.entities.base import (
    AndSpecification,
    ComparisonOperator,
    FieldSpecification,
    NotSpecification,
    OrSpecification,
    Specification,
)
from ...domain.exceptions import ValidationException
from .documents import DocumentMapper, encode_value

# Cosmos requires LIMIT whenever OFFSET is used
UNBOUNDED_LIMIT = 2147483647

COMPARISON_SQL = {
    ComparisonOperator.EQ: '=',
    ComparisonOperator.NE: '!=',
    ComparisonOperator.LT: '<',
    ComparisonOperator.LE: '<=',
    ComparisonOperator.GT: '>',
    ComparisonOperator.GE: '>=',
}


@dataclass
class CosmosStatement:
    """Parameterised Cosmos SQL query."""
    query: str
    parameters: List[Dict[str, Any]] = field(default_factory=list)


class CosmosQueryTranslator:
    """Builds Cosmos SQL for one document type."""

    def __init__(self, mapper: DocumentMapper):
        self._mapper = mapper

    def _property(self, field_name: str) -> str:
        if field_name not in self._mapper.field_names:
            raise ValidationException(
                message=f"Unknown field '{field_name}' for {self._mapper.entity_type.__name__}",
                errors={'field': [field_name]}
            )
        return f"c.{self._mapper.property_for(field_name)}"

    def translate(self, spec: Specification, parameters: List[Dict[str, Any]]) -> str:
        """Compile a specification into a WHERE condition, appending its parameters."""
        if isinstance(spec, AndSpecification):
            return f"({self.translate(spec.left, parameters)} AND {self.translate(spec.right, parameters)})"
        if isinstance(spec, OrSpecification):
            return f"({self.translate(spec.left, parameters)} OR {self.translate(spec.right, parameters)})"
        if isinstance(spec, NotSpecification):
            return f"(NOT {self.translate(spec.spec, parameters)})"
        if isinstance(spec, FieldSpecification):
            return self._comparison(spec, parameters)

        raise ValidationException(
            message=f"Cannot translate {type(spec).__name__} to Cosmos SQL",
            errors={'predicate': [repr(spec)]}
        )

    def _comparison(self, spec: FieldSpecification, parameters: List[Dict[str, Any]]) -> str:
        prop = self._property(spec.field)
        op = spec.operator

        if spec.value is None and op in (ComparisonOperator.EQ, ComparisonOperator.NE):
            condition = f"(NOT IS_DEFINED({prop}) OR IS_NULL({prop}))"
            return condition if op is ComparisonOperator.EQ else f"(NOT {condition})"

        name = f"@p{len(parameters)}"
        if op is ComparisonOperator.IN:
            parameters.append({'name': name, 'value': [encode_value(v) for v in spec.value]})
            return f"ARRAY_CONTAINS({name}, {prop})"
        if op is ComparisonOperator.CONTAINS:
            parameters.append({'name': name, 'value': str(encode_value(spec.value))})
            return f"CONTAINS({prop}, {name}, true)"

        parameters.append({'name': name, 'value': encode_value(spec.value)})
        return f"{prop} {COMPARISON_SQL[op]} {name}"

    def _where(self, state: QueryState, parameters: List[Dict[str, Any]]) -> str:
        predicate = state.predicate
        if predicate is None:
            return ''
        return f" WHERE {self.translate(predicate, parameters)}"

    def select(self, state: QueryState) -> CosmosStatement:
        """SELECT with filters, ordering and paging."""
        parameters: List[Dict[str, Any]] = []
        top = ''
        if state.limit is not None and not state.offset:
            top = f"TOP {state.limit} "

        query = f"SELECT {top}* FROM c{self._where(state, parameters)}"

        if state.orderings:
            keys = ', '.join(
                f"{self._property(o.field)} {'DESC' if o.descending else 'ASC'}"
                for o in state.orderings
            )
            query += f" ORDER BY {keys}"

        if state.offset:
            limit = state.limit if state.limit is not None else UNBOUNDED_LIMIT
            query += f" OFFSET {state.offset} LIMIT {limit}"

        return CosmosStatement(query=query, parameters=parameters)

    def count(self, state: QueryState) -> CosmosStatement:
        """COUNT over the filters; ordering and paging are ignored."""
        parameters: List[Dict[str, Any]] = []
        query = f"SELECT VALUE COUNT(1) FROM c{self._where(state, parameters)}"
        return CosmosStatement(query=query, parameters=parameters)

    def exists(self, state: QueryState) -> CosmosStatement:
        parameters: List[Dict[str, Any]] = []
        query = f"SELECT TOP 1 VALUE c.id FROM c{self._where(state, parameters)}"
        return CosmosStatement(query=query, parameters=parameters)
