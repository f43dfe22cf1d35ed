"""
Conversion between domain entities and Cosmos DB JSON documents.

Documents use camelCase property names. Decimals are written as JSON
numbers and read back through their string form, datetimes as ISO-8601
strings in UTC, enums by value and nested value objects as objects.
A JSON number holds about 15 significant digits, which covers money
amounts with two decimal places.
"""
import dataclasses
import typing
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Generic, Type, TypeVar

T = TypeVar('T')


def to_camel(name: str) -> str:
    """snake_case -> camelCase."""
    head, *rest = name.split('_')
    return head + ''.join(part.title() for part in rest)


def encode_value(value: Any) -> Any:
    """Turn a Python value into its JSON document form."""
    if value is None:
        return None
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, bool):
        return value
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc).isoformat()
    if dataclasses.is_dataclass(value):
        return {
            to_camel(f.name): encode_value(getattr(value, f.name))
            for f in dataclasses.fields(value)
        }
    if isinstance(value, (list, tuple)):
        return [encode_value(v) for v in value]
    return value


def decode_value(value: Any, hint: Any) -> Any:
    """Rebuild a Python value of type `hint` from its document form."""
    if value is None:
        return None

    origin = typing.get_origin(hint)
    if origin is typing.Union:
        args = [a for a in typing.get_args(hint) if a is not type(None)]
        return decode_value(value, args[0]) if len(args) == 1 else value
    if origin in (list, typing.List):
        (item_hint,) = typing.get_args(hint) or (Any,)
        return [decode_value(v, item_hint) for v in value]

    if hint is Decimal:
        return Decimal(str(value))
    if hint is datetime:
        parsed = datetime.fromisoformat(str(value).replace('Z', '+00:00'))
        if parsed.tzinfo is None:
            return parsed.replace(tzinfo=timezone.utc)
        return parsed.astimezone(timezone.utc)
    if isinstance(hint, type) and issubclass(hint, Enum):
        return hint(value)
    if isinstance(hint, type) and dataclasses.is_dataclass(hint):
        return DocumentMapper(hint).from_document(value)
    return value


class DocumentMapper(Generic[T]):
    """
    Maps one dataclass type to and from documents.

    Document properties the dataclass does not declare (the store's own
    metadata such as _rid or _etag) are ignored on the way in.
    """

    def __init__(self, entity_type: Type[T]):
        self.entity_type = entity_type
        self._hints = typing.get_type_hints(entity_type)
        self._fields = [f for f in dataclasses.fields(entity_type) if f.init]

    @property
    def field_names(self):
        return [f.name for f in self._fields]

    def property_for(self, field_name: str) -> str:
        """Document property name for an attribute."""
        return to_camel(field_name)

    def to_document(self, entity: T) -> Dict[str, Any]:
        return {
            to_camel(f.name): encode_value(getattr(entity, f.name))
            for f in self._fields
        }

    def from_document(self, document: Dict[str, Any]) -> T:
        kwargs = {}
        for f in self._fields:
            key = to_camel(f.name)
            if key in document:
                kwargs[f.name] = decode_value(document[key], self._hints[f.name])
        return self.entity_type(**kwargs)


def value_at_path(document: Dict[str, Any], path: str) -> Any:
    """
    Read the value a partition key path points to.

    Args:
        document: Document body
        path: Partition key path such as '/id' or '/customerId'
    """
    value: Any = document
    for segment in path.strip('/').split('/'):
        if not isinstance(value, dict) or segment not in value:
            return None
        value = value[segment]
    return value
