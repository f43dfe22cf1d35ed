"""
Generic Cosmos DB implementation of the data repository contract.
"""
import asyncio
import logging
from typing import Any, Dict, Iterable, List, NoReturn, Optional, Type

from azure.core.exceptions import ServiceRequestError, ServiceResponseError
from azure.cosmos.aio import ContainerProxy
from azure.cosmos.exceptions import CosmosHttpResponseError

from ...application.interfaces.repositories import (
    DataRepository,
    Ordering,
    Page,
    Query,
    QueryState,
    T,
    require_entity,
    validate_paging,
)
from ...domain.entities.base import Field, Specification
from ...domain.exceptions import (
    BackendUnavailableException,
    DuplicateEntityException,
    ValidationException,
)
from .documents import DocumentMapper, value_at_path
from .query_translator import CosmosQueryTranslator, CosmosStatement

logger = logging.getLogger(__name__)

BACKEND_NAME = 'cosmos'

# Status codes that mean "try again later" once the SDK has given up retrying
UNAVAILABLE_STATUS_CODES = {408, 429, 449, 503}

PAGE_ORDERING = (Ordering('created_at'), Ordering('id'))


class CosmosQuery(Query[T]):
    """Query over one container, compiled to Cosmos SQL when executed."""

    def __init__(self, repository: 'CosmosRepository[T]', state: Optional[QueryState] = None):
        super().__init__(state)
        self._repository = repository

    def _with_state(self, state: QueryState) -> 'CosmosQuery[T]':
        return CosmosQuery(self._repository, state)

    def build_statement(self) -> CosmosStatement:
        return self._repository.translator.select(self._state)

    async def to_list(self) -> List[T]:
        documents = await self._repository._query_documents(self.build_statement())
        return [self._repository.mapper.from_document(d) for d in documents]

    async def first_or_default(self) -> Optional[T]:
        items = await self.take(1).to_list()
        return items[0] if items else None

    async def count(self) -> int:
        statement = self._repository.translator.count(self._state)
        # Cross-partition aggregates may come back as one partial per partition
        return sum(await self._repository._query_documents(statement))

    async def exists(self) -> bool:
        statement = self._repository.translator.exists(self._state)
        return len(await self._repository._query_documents(statement)) > 0


class CosmosRepository(DataRepository[T]):
    """
    Cosmos DB implementation of the data repository.

    Args:
        container: Container handle from CosmosManager
        entity_type: Dataclass the container's documents map to
        partition_key_path: The container's partition key path, e.g. '/id'
        max_item_count: Page size used when draining query results
    """

    def __init__(
        self,
        container: ContainerProxy,
        entity_type: Type[T],
        partition_key_path: str = '/id',
        max_item_count: int = 100,
    ):
        self._container = container
        self.entity_type = entity_type
        self.entity_name = entity_type.__name__
        self.partition_key_path = partition_key_path
        self.mapper: DocumentMapper[T] = DocumentMapper(entity_type)
        self.translator = CosmosQueryTranslator(self.mapper)
        self._max_item_count = max_item_count

    @property
    def partitioned_by_id(self) -> bool:
        return self.partition_key_path == '/id'

    def _partition_value(self, document: Dict[str, Any]) -> Any:
        return value_at_path(document, self.partition_key_path)

    def _point_partition_key(self, id: str, partition_key: Optional[str]) -> Any:
        """
        Partition key for a point read or delete.

        Raises:
            ValidationException: If the container is not partitioned on /id
                and no partition key was given
        """
        if self.partitioned_by_id:
            return id
        if partition_key is None:
            raise ValidationException(
                message=(
                    f"{self.entity_name} container is partitioned on "
                    f"'{self.partition_key_path}'; a partition key is required"
                ),
                errors={'partition_key': ['Partition key is required']}
            )
        return partition_key

    def _raise_for(self, error: Exception, description: str, entity_id: Optional[str] = None) -> NoReturn:
        """Translate an SDK error into the repository's error taxonomy."""
        status = getattr(error, 'status_code', None)
        if status == 409:
            raise DuplicateEntityException(self.entity_name, 'id', entity_id) from error
        if status == 400:
            raise ValidationException(
                message=f"Cosmos DB rejected {description}: {getattr(error, 'message', error)}",
                errors={'request': [str(error)]}
            ) from error
        if status in UNAVAILABLE_STATUS_CODES or isinstance(error, (ServiceRequestError, ServiceResponseError)):
            logger.error(f"Cosmos DB unavailable during {description}: {error}")
            raise BackendUnavailableException(
                backend=BACKEND_NAME,
                message=f"{description} failed",
                original_error=str(error),
                status_code=status,
            ) from error
        raise error

    async def _query_documents(self, statement: CosmosStatement) -> List[Any]:
        """Run a query and drain every result page."""
        results: List[Any] = []
        try:
            pager = self._container.query_items(
                query=statement.query,
                parameters=statement.parameters or None,
                max_item_count=self._max_item_count,
            )
            page_number = 0
            async for page in pager.by_page():
                page_number += 1
                before = len(results)
                async for document in page:
                    results.append(document)
                logger.debug(
                    f"{self.entity_name} query page {page_number}: {len(results) - before} item(s)"
                )
        except (CosmosHttpResponseError, ServiceRequestError, ServiceResponseError) as e:
            self._raise_for(e, f"{self.entity_name} query")
        return results

    async def add(self, entity: T) -> T:
        """Create a new document; an existing id is a conflict."""
        require_entity(entity)
        entity.mark_created()
        return await self._create(entity)

    async def _create(self, entity: T) -> T:
        document = self.mapper.to_document(entity)
        try:
            created = await self._container.create_item(body=document)
        except (CosmosHttpResponseError, ServiceRequestError, ServiceResponseError) as e:
            self._raise_for(e, f"add {self.entity_name}", entity.id)
        logger.debug(f"Added {self.entity_name} {entity.id}")
        return self.mapper.from_document(created)

    async def add_range(self, entities: Iterable[T]) -> List[T]:
        """Create several documents concurrently once every entity has been checked."""
        entities = list(entities)
        for entity in entities:
            require_entity(entity)
            entity.mark_created()
        return list(await asyncio.gather(*(self._create(entity) for entity in entities)))

    async def get_by_id(self, id: str, partition_key: Optional[str] = None) -> Optional[T]:
        """Point read; a 404 means absent."""
        key = self._point_partition_key(id, partition_key)
        try:
            document = await self._container.read_item(item=id, partition_key=key)
        except (CosmosHttpResponseError, ServiceRequestError, ServiceResponseError) as e:
            if getattr(e, 'status_code', None) == 404:
                return None
            self._raise_for(e, f"get {self.entity_name}", id)
        return self.mapper.from_document(document)

    async def get_all(self) -> List[T]:
        return await self.query().to_list()

    async def find(self, spec: Specification) -> List[T]:
        return await self.query().where(spec).to_list()

    async def first_or_default(self, spec: Specification) -> Optional[T]:
        return await self.query().where(spec).first_or_default()

    def query(self) -> CosmosQuery[T]:
        return CosmosQuery(self)

    async def update(self, entity: T) -> T:
        """
        Replace the document, creating it when it does not exist yet.

        Unlike the relational store, a missing document is not an error.
        When the partition value changed, the document is written to its new
        partition and the copy left in the old one is deleted.
        """
        require_entity(entity)
        entity.mark_updated()
        return await self._upsert(entity)

    async def _upsert(self, entity: T) -> T:
        document = self.mapper.to_document(entity)
        stale_key = await self._stale_partition_value(document)
        try:
            saved = await self._container.upsert_item(body=document)
        except (CosmosHttpResponseError, ServiceRequestError, ServiceResponseError) as e:
            self._raise_for(e, f"update {self.entity_name}", entity.id)
        logger.debug(f"Upserted {self.entity_name} {entity.id}")

        if stale_key is not None:
            await self.delete(entity.id, partition_key=stale_key)
            logger.debug(f"Moved {self.entity_name} {entity.id} out of partition {stale_key!r}")
        return self.mapper.from_document(saved)

    async def _stale_partition_value(self, document: Dict[str, Any]) -> Any:
        """Partition value of a stored copy of this id that lives elsewhere, if any."""
        if self.partitioned_by_id:
            return None
        new_key = self._partition_value(document)
        stored = await self.query().where(Field('id') == document['id']).to_list()
        for existing in stored:
            old_key = self._partition_value(self.mapper.to_document(existing))
            if old_key != new_key:
                return old_key
        return None

    async def update_range(self, entities: Iterable[T]) -> List[T]:
        """Update several documents concurrently once every entity has been checked."""
        entities = list(entities)
        for entity in entities:
            require_entity(entity)
            entity.mark_updated()
        return list(await asyncio.gather(*(self._upsert(entity) for entity in entities)))

    async def delete(self, id: str, partition_key: Optional[str] = None) -> bool:
        """Point delete; a 404 means there was nothing to delete."""
        key = self._point_partition_key(id, partition_key)
        try:
            await self._container.delete_item(item=id, partition_key=key)
        except (CosmosHttpResponseError, ServiceRequestError, ServiceResponseError) as e:
            if getattr(e, 'status_code', None) == 404:
                return False
            self._raise_for(e, f"delete {self.entity_name}", id)
        logger.debug(f"Deleted {self.entity_name} {id}")
        return True

    async def delete_range(self, entities: Iterable[T]) -> int:
        """Delete several documents concurrently, routing each by its own partition value."""
        deletions = []
        for entity in entities:
            if entity is None:
                continue
            key = self._partition_value(self.mapper.to_document(entity))
            deletions.append(self.delete(entity.id, partition_key=key))
        results = await asyncio.gather(*deletions)
        return sum(1 for deleted in results if deleted)

    async def count(self, spec: Optional[Specification] = None) -> int:
        query = self.query()
        if spec is not None:
            query = query.where(spec)
        return await query.count()

    async def exists(self, spec: Specification) -> bool:
        return await self.query().where(spec).exists()

    async def get_paged(
        self,
        page_number: int,
        page_size: int,
        spec: Optional[Specification] = None
    ) -> Page[T]:
        """Get one page using OFFSET/LIMIT, ordered by creation time then id."""
        validate_paging(page_number, page_size)
        query = self.query()
        if spec is not None:
            query = query.where(spec)

        total = await query.count()
        for ordering in PAGE_ORDERING:
            query = query.order_by(ordering.field, ordering.descending)
        items = await query.skip((page_number - 1) * page_size).take(page_size).to_list()

        return Page(items=items, total_count=total, page_number=page_number, page_size=page_size)
