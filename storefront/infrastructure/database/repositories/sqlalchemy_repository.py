"""
Generic SQLAlchemy implementation of the data repository contract.
"""
import logging
from typing import Any, Iterable, List, Optional, Type

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm.exc import FlushError
from sqlalchemy.sql import Select

from ....application.interfaces.repositories import (
    DataRepository,
    Ordering,
    Page,
    Query,
    QueryState,
    T,
    require_entity,
    validate_paging,
)
from ....domain.entities.base import Specification
from ....domain.exceptions import DuplicateEntityException, EntityNotFoundException
from ..session_context import SessionContext
from ..specification_compiler import compile_orderings, compile_specification

logger = logging.getLogger(__name__)

# Stable order used for paging
PAGE_ORDERING = (Ordering('created_at'), Ordering('id'))


class SQLAlchemyQuery(Query[T]):
    """Query over one model, executed through the repository's session context."""

    def __init__(self, repository: 'SQLAlchemyRepository[T]', state: Optional[QueryState] = None):
        super().__init__(state)
        self._repository = repository

    def _with_state(self, state: QueryState) -> 'SQLAlchemyQuery[T]':
        return SQLAlchemyQuery(self._repository, state)

    def _filtered(self, statement: Select) -> Select:
        predicate = self._state.predicate
        if predicate is not None:
            statement = statement.where(compile_specification(predicate, self._repository.model))
        return statement

    def build_statement(self) -> Select:
        """Full SELECT including ordering and paging."""
        model = self._repository.model
        statement = self._filtered(select(model))
        order_clauses = compile_orderings(self._state.orderings, model)
        if order_clauses:
            statement = statement.order_by(*order_clauses)
        if self._state.offset:
            statement = statement.offset(self._state.offset)
        if self._state.limit is not None:
            statement = statement.limit(self._state.limit)
        return statement

    def build_count_statement(self) -> Select:
        """COUNT over the filters only; ordering and paging are ignored."""
        return self._filtered(select(func.count()).select_from(self._repository.model))

    async def to_list(self) -> List[T]:
        return await self._repository._fetch_all(self.build_statement())

    async def first_or_default(self) -> Optional[T]:
        items = await self.take(1).to_list()
        return items[0] if items else None

    async def count(self) -> int:
        return await self._repository._fetch_scalar(self.build_count_statement())

    async def exists(self) -> bool:
        model = self._repository.model
        statement = self._filtered(select(model.id)).limit(1)
        return await self._repository._fetch_scalar(statement) is not None


class SQLAlchemyRepository(DataRepository[T]):
    """
    SQLAlchemy implementation of the data repository.

    The model class supplies to_domain / from_domain / update_from_domain,
    so one repository class serves every entity.
    """

    def __init__(self, context: SessionContext, model: Type[Any], entity_name: str):
        self._context = context
        self.model = model
        self.entity_name = entity_name

    @property
    def _session(self):
        return self._context.session

    async def _fetch_all(self, statement: Select) -> List[T]:
        async def operation():
            result = await self._session.execute(statement)
            return [m.to_domain() for m in result.scalars().all()]

        items = await self._context.run(operation, f"{self.entity_name} query")
        logger.debug(f"{self.entity_name} query returned {len(items)} row(s)")
        return items

    async def _fetch_scalar(self, statement: Select) -> Any:
        async def operation():
            result = await self._session.execute(statement)
            return result.scalar()

        return await self._context.run(operation, f"{self.entity_name} scalar query")

    def _duplicate_error(self, entity: Any, error: Exception) -> DuplicateEntityException:
        """Name the unique column a constraint violation most likely refers to."""
        message = str(getattr(error, "orig", error))
        for column in self.model.__table__.columns:
            if column.unique and column.name in message:
                return DuplicateEntityException(self.entity_name, column.name, getattr(entity, column.name, None))
        return DuplicateEntityException(self.entity_name, 'id', getattr(entity, 'id', None))

    async def add(self, entity: T) -> T:
        """Add new entity."""
        require_entity(entity)
        entity.mark_created()

        async def operation():
            model = self.model.from_domain(entity)
            self._session.add(model)
            await self._context.save_changes()
            return model.to_domain()

        try:
            added = await self._context.run(operation, f"add {self.entity_name}")
        except (IntegrityError, FlushError) as e:
            raise self._duplicate_error(entity, e) from e
        logger.debug(f"Added {self.entity_name} {added.id}")
        return added

    async def add_range(self, entities: Iterable[T]) -> List[T]:
        """Add several entities in one save."""
        entities = list(entities)
        for entity in entities:
            require_entity(entity)
            entity.mark_created()

        async def operation():
            models = [self.model.from_domain(entity) for entity in entities]
            self._session.add_all(models)
            await self._context.save_changes()
            return [m.to_domain() for m in models]

        try:
            return await self._context.run(operation, f"add {self.entity_name} range")
        except (IntegrityError, FlushError) as e:
            raise self._duplicate_error(entities[0] if entities else None, e) from e

    async def get_by_id(self, id: str, partition_key: Optional[str] = None) -> Optional[T]:
        """Get entity by ID; the identity map is consulted before the database."""
        async def operation():
            model = await self._session.get(self.model, id)
            return model.to_domain() if model else None

        return await self._context.run(operation, f"get {self.entity_name}")

    async def get_all(self) -> List[T]:
        return await self._fetch_all(select(self.model))

    async def find(self, spec: Specification) -> List[T]:
        return await self.query().where(spec).to_list()

    async def first_or_default(self, spec: Specification) -> Optional[T]:
        return await self.query().where(spec).first_or_default()

    def query(self) -> SQLAlchemyQuery[T]:
        return SQLAlchemyQuery(self)

    async def update(self, entity: T) -> T:
        """
        Update existing entity.

        Raises:
            EntityNotFoundException: If no row has the entity's id
        """
        require_entity(entity)
        entity.mark_updated()

        async def operation():
            model = await self._session.get(self.model, entity.id)
            if model is None:
                raise EntityNotFoundException(self.entity_name, entity.id)
            model.update_from_domain(entity)
            await self._context.save_changes()
            return model.to_domain()

        try:
            updated = await self._context.run(operation, f"update {self.entity_name}")
        except (IntegrityError, FlushError) as e:
            raise self._duplicate_error(entity, e) from e
        logger.debug(f"Updated {self.entity_name} {updated.id}")
        return updated

    async def update_range(self, entities: Iterable[T]) -> List[T]:
        """Update several entities in one save; every row must exist."""
        entities = list(entities)
        for entity in entities:
            require_entity(entity)
            entity.mark_updated()

        async def operation():
            models = []
            for entity in entities:
                model = await self._session.get(self.model, entity.id)
                if model is None:
                    raise EntityNotFoundException(self.entity_name, entity.id)
                model.update_from_domain(entity)
                models.append(model)
            await self._context.save_changes()
            return [m.to_domain() for m in models]

        try:
            return await self._context.run(operation, f"update {self.entity_name} range")
        except (IntegrityError, FlushError) as e:
            raise self._duplicate_error(entities[0] if entities else None, e) from e

    async def delete(self, id: str, partition_key: Optional[str] = None) -> bool:
        """Delete entity by ID."""
        async def operation():
            model = await self._session.get(self.model, id)
            if model is None:
                return False
            await self._session.delete(model)
            await self._context.save_changes()
            return True

        deleted = await self._context.run(operation, f"delete {self.entity_name}")
        if deleted:
            logger.debug(f"Deleted {self.entity_name} {id}")
        return deleted

    async def delete_range(self, entities: Iterable[T]) -> int:
        """Delete the given entities that still exist; returns how many were removed."""
        ids = [entity.id for entity in entities if entity is not None]

        async def operation():
            removed = 0
            for id in ids:
                model = await self._session.get(self.model, id)
                if model is not None:
                    await self._session.delete(model)
                    removed += 1
            if removed:
                await self._context.save_changes()
            return removed

        return await self._context.run(operation, f"delete {self.entity_name} range")

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
        """Get one page; issues a count query and a limit/offset query."""
        validate_paging(page_number, page_size)
        query = self.query()
        if spec is not None:
            query = query.where(spec)

        total = await query.count()
        for ordering in PAGE_ORDERING:
            query = query.order_by(ordering.field, ordering.descending)
        items = await query.skip((page_number - 1) * page_size).take(page_size).to_list()

        return Page(items=items, total_count=total, page_number=page_number, page_size=page_size)
