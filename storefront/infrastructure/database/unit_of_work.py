"""
SQLAlchemy Unit of Work implementation.
"""
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ...application.interfaces.unit_of_work import TransactionState, UnitOfWork
from ...domain.entities import Customer, Order, Product
from ...domain.exceptions import InvalidStateTransitionException
from .models import CustomerModel, OrderModel, ProductModel
from .repositories.sqlalchemy_repository import SQLAlchemyRepository
from .session_context import SessionContext

logger = logging.getLogger(__name__)


class SQLAlchemyUnitOfWork(UnitOfWork):
    """
    SQLAlchemy implementation of Unit of Work pattern.

    Manages database transactions and provides access to repositories.
    All repositories share one session context, so changes staged through
    any of them commit or roll back together.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        max_retry_count: int = 3,
        max_retry_delay: float = 30.0,
    ):
        """
        Initialize Unit of Work.

        Args:
            session_factory: Factory for creating async database sessions
            max_retry_count: Retries on transient faults outside a transaction
            max_retry_delay: Cap in seconds for one backoff wait
        """
        self._session_factory = session_factory
        self._max_retry_count = max_retry_count
        self._max_retry_delay = max_retry_delay
        self._context: Optional[SessionContext] = None
        self._products: Optional[SQLAlchemyRepository[Product]] = None
        self._customers: Optional[SQLAlchemyRepository[Customer]] = None
        self._orders: Optional[SQLAlchemyRepository[Order]] = None

    async def __aenter__(self) -> "SQLAlchemyUnitOfWork":
        """Enter async context - create session."""
        self._context = SessionContext(
            self._session_factory(),
            max_retry_count=self._max_retry_count,
            max_retry_delay=self._max_retry_delay,
        )
        return self

    @property
    def context(self) -> SessionContext:
        """Session context shared by this unit of work's repositories."""
        if self._context is None:
            raise RuntimeError("Unit of work not started. Use 'async with' context.")
        return self._context

    @property
    def state(self) -> TransactionState:
        if self._context is not None and self._context.in_transaction:
            return TransactionState.IN_TRANSACTION
        return TransactionState.IDLE

    @property
    def products(self) -> SQLAlchemyRepository[Product]:
        """Get product repository."""
        if self._products is None:
            self._products = SQLAlchemyRepository(self.context, ProductModel, 'Product')
        return self._products

    @property
    def customers(self) -> SQLAlchemyRepository[Customer]:
        """Get customer repository."""
        if self._customers is None:
            self._customers = SQLAlchemyRepository(self.context, CustomerModel, 'Customer')
        return self._customers

    @property
    def orders(self) -> SQLAlchemyRepository[Order]:
        """Get order repository."""
        if self._orders is None:
            self._orders = SQLAlchemyRepository(self.context, OrderModel, 'Order')
        return self._orders

    def _require_state(self, expected: TransactionState, target: TransactionState) -> None:
        if self.state is not expected:
            raise InvalidStateTransitionException(
                entity_type='UnitOfWork',
                current_state=self.state.value,
                target_state=target.value,
            )

    async def begin_transaction(self) -> None:
        """Open an explicit transaction."""
        context = self.context
        self._require_state(TransactionState.IDLE, TransactionState.IN_TRANSACTION)
        # Reads outside a transaction leave the session's implicit one open
        if context.session.in_transaction():
            await context.session.commit()
        context.in_transaction = True
        logger.debug("Transaction started")

    async def commit_transaction(self) -> None:
        """Commit the open transaction."""
        context = self.context
        self._require_state(TransactionState.IN_TRANSACTION, TransactionState.IDLE)
        try:
            await context.session.commit()
        except Exception:
            await context.session.rollback()
            raise
        finally:
            context.in_transaction = False
        logger.debug("Transaction committed")

    async def rollback_transaction(self) -> None:
        """Roll back the open transaction."""
        context = self.context
        self._require_state(TransactionState.IN_TRANSACTION, TransactionState.IDLE)
        try:
            await context.session.rollback()
        finally:
            context.in_transaction = False
        logger.debug("Transaction rolled back")

    async def save_changes(self) -> int:
        """Flush inside a transaction, commit outside one."""
        context = self.context
        return await context.run(context.save_changes, 'save changes')

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator["SQLAlchemyUnitOfWork"]:
        """
        Scope an explicit transaction.

        Usage:
            async with uow.transaction():
                await uow.orders.add(order)
                await uow.products.update(product)
        """
        await self.begin_transaction()
        try:
            yield self
        except BaseException:
            if self.state is TransactionState.IN_TRANSACTION:
                await self.rollback_transaction()
            raise
        else:
            await self.commit_transaction()

    async def close(self) -> None:
        """Close the session."""
        if self._context:
            await self._context.close()
            self._context = None
            # Reset repository references
            self._products = None
            self._customers = None
            self._orders = None
