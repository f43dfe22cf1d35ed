"""
Repository interfaces (ports) for domain entities.

These interfaces define the contract for persistence operations
without specifying the implementation details. Both the Cosmos DB and the
SQLAlchemy adapters satisfy the same contract; which one backs an entity is
decided at composition time.
"""
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Generic, Iterable, List, Optional, TypeVar

from ...domain.entities.base import Entity, Specification
from ...domain.exceptions import ValidationException


# Generic type for entities
T = TypeVar('T', bound=Entity)


@dataclass
class Page(Generic[T]):
    """One page of results plus the size of the filtered set."""
    items: List[T]
    total_count: int
    page_number: int
    page_size: int

    @property
    def total_pages(self) -> int:
        """Number of pages needed to hold total_count items."""
        if self.total_count == 0:
            return 0
        return math.ceil(self.total_count / self.page_size)

    @property
    def has_next(self) -> bool:
        return self.page_number < self.total_pages


@dataclass(frozen=True)
class Ordering:
    """Sort key for a query."""
    field: str
    descending: bool = False


@dataclass(frozen=True)
class QueryState:
    """Immutable description of a composed query."""
    filters: tuple = field(default_factory=tuple)
    orderings: tuple = field(default_factory=tuple)
    offset: Optional[int] = None
    limit: Optional[int] = None

    @property
    def predicate(self) -> Optional[Specification]:
        """All filters folded into a single AND specification."""
        spec: Optional[Specification] = None
        for item in self.filters:
            spec = item if spec is None else spec.and_(item)
        return spec


class Query(ABC, Generic[T]):
    """
    Composable query builder.

    Every refinement returns a new query; the receiver is never modified.
    Nothing touches the store until a terminal coroutine is awaited:

        recent = await (
            repository.query()
            .where(Field('status') == OrderStatus.PENDING)
            .order_by('order_date', descending=True)
            .take(10)
            .to_list()
        )
    """

    def __init__(self, state: Optional[QueryState] = None):
        self._state = state or QueryState()

    @property
    def state(self) -> QueryState:
        return self._state

    @abstractmethod
    def _with_state(self, state: QueryState) -> 'Query[T]':
        """Return a sibling query carrying the given state."""
        pass

    def where(self, spec: Specification) -> 'Query[T]':
        """Add a filter; repeated calls are combined with AND."""
        if spec is None:
            raise ValidationException("Predicate must not be None")
        return self._with_state(
            QueryState(
                filters=self._state.filters + (spec,),
                orderings=self._state.orderings,
                offset=self._state.offset,
                limit=self._state.limit,
            )
        )

    def order_by(self, field_name: str, descending: bool = False) -> 'Query[T]':
        """Append a sort key; earlier keys take precedence."""
        return self._with_state(
            QueryState(
                filters=self._state.filters,
                orderings=self._state.orderings + (Ordering(field_name, descending),),
                offset=self._state.offset,
                limit=self._state.limit,
            )
        )

    def skip(self, count: int) -> 'Query[T]':
        """Skip the first `count` results."""
        if count < 0:
            raise ValidationException("Skip count cannot be negative", errors={'skip': [str(count)]})
        return self._with_state(
            QueryState(
                filters=self._state.filters,
                orderings=self._state.orderings,
                offset=count,
                limit=self._state.limit,
            )
        )

    def take(self, count: int) -> 'Query[T]':
        """Return at most `count` results."""
        if count < 0:
            raise ValidationException("Take count cannot be negative", errors={'take': [str(count)]})
        return self._with_state(
            QueryState(
                filters=self._state.filters,
                orderings=self._state.orderings,
                offset=self._state.offset,
                limit=count,
            )
        )

    @abstractmethod
    async def to_list(self) -> List[T]:
        """Execute and materialize every matching entity."""
        pass

    @abstractmethod
    async def first_or_default(self) -> Optional[T]:
        """Execute and return the first match, or None."""
        pass

    @abstractmethod
    async def count(self) -> int:
        """Count matches; skip/take are ignored."""
        pass

    @abstractmethod
    async def exists(self) -> bool:
        """Check whether at least one entity matches."""
        pass


class DataRepository(ABC, Generic[T]):
    """
    Generic repository contract shared by every storage backend.

    Id-based lookups signal absence through None / False and never raise
    for a missing record. partition_key is a routing hint for partitioned
    stores; backends without partitions ignore it.
    """

    @abstractmethod
    async def add(self, entity: T) -> T:
        """
        Insert a new entity.

        Args:
            entity: Entity to add; created_at is stamped here

        Returns:
            The stored form of the entity
        """
        pass

    @abstractmethod
    async def add_range(self, entities: Iterable[T]) -> List[T]:
        """Insert several entities."""
        pass

    @abstractmethod
    async def get_by_id(self, id: str, partition_key: Optional[str] = None) -> Optional[T]:
        """
        Get entity by ID.

        Args:
            id: Entity identifier
            partition_key: Partition value, needed by containers not partitioned on /id

        Returns:
            Entity if found, None otherwise
        """
        pass

    @abstractmethod
    async def get_all(self) -> List[T]:
        """Return every entity. Unbounded; meant for small collections."""
        pass

    @abstractmethod
    async def find(self, spec: Specification) -> List[T]:
        """Return entities satisfying the specification."""
        pass

    @abstractmethod
    async def first_or_default(self, spec: Specification) -> Optional[T]:
        """Return the first entity satisfying the specification, or None."""
        pass

    @abstractmethod
    def query(self) -> Query[T]:
        """Start a composable query over this repository."""
        pass

    @abstractmethod
    async def update(self, entity: T) -> T:
        """
        Replace an existing entity.

        Args:
            entity: Entity to update; updated_at is stamped here

        Returns:
            Updated entity
        """
        pass

    @abstractmethod
    async def update_range(self, entities: Iterable[T]) -> List[T]:
        """Replace several entities."""
        pass

    @abstractmethod
    async def delete(self, id: str, partition_key: Optional[str] = None) -> bool:
        """
        Delete entity by ID.

        Args:
            id: Entity identifier
            partition_key: Partition value, needed by containers not partitioned on /id

        Returns:
            True if deleted, False if not found
        """
        pass

    @abstractmethod
    async def delete_range(self, entities: Iterable[T]) -> int:
        """Delete several entities; returns how many were actually removed."""
        pass

    @abstractmethod
    async def count(self, spec: Optional[Specification] = None) -> int:
        """Count entities, optionally filtered."""
        pass

    @abstractmethod
    async def exists(self, spec: Specification) -> bool:
        """Check whether any entity satisfies the specification."""
        pass

    @abstractmethod
    async def get_paged(
        self,
        page_number: int,
        page_size: int,
        spec: Optional[Specification] = None
    ) -> Page[T]:
        """
        Get one page of entities.

        Args:
            page_number: 1-based page index
            page_size: Items per page
            spec: Optional filter applied before paging

        Returns:
            The page and the total size of the filtered set
        """
        pass


def validate_paging(page_number: int, page_size: int) -> None:
    """Reject non-positive paging arguments."""
    errors = {}
    if page_number < 1:
        errors['page_number'] = ['Page number must be at least 1']
    if page_size < 1:
        errors['page_size'] = ['Page size must be at least 1']
    if errors:
        raise ValidationException(message="Invalid paging parameters", errors=errors)


def require_entity(entity: Optional[Entity]) -> None:
    """Reject a missing entity argument."""
    if entity is None:
        raise ValidationException(
            message="Entity must not be None",
            errors={'entity': ['Entity is required']}
        )
