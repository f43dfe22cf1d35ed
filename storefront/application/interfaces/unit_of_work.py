"""
Unit of Work interface for managing transactions.

The Unit of Work pattern groups repository calls against the relational
store so they commit or roll back together. Document-store repositories
write immediately and are not coordinated by it.
"""
from abc import ABC, abstractmethod
from enum import Enum
from types import TracebackType
from typing import Optional, Type

from ...domain.entities import Customer, Order, Product
from .repositories import DataRepository


class TransactionState(str, Enum):
    """Whether an explicit transaction is open."""
    IDLE = "idle"
    IN_TRANSACTION = "in_transaction"


class UnitOfWork(ABC):
    """
    Abstract Unit of Work.

    Provides access to repositories and manages database transactions.
    Use as async context manager:

    async with unit_of_work as uow:
        await uow.begin_transaction()
        product = await uow.products.get_by_id(product_id)
        product.stock -= 1
        await uow.products.update(product)
        await uow.commit_transaction()

    Without an explicit transaction every repository write is committed as
    soon as it completes.
    """

    products: DataRepository[Product]
    customers: DataRepository[Customer]
    orders: DataRepository[Order]

    async def __aenter__(self) -> 'UnitOfWork':
        """Enter the context manager."""
        return self

    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType]
    ) -> None:
        """
        Exit the context manager.

        Rolls back a transaction that was left open, then closes.
        """
        if self.state is TransactionState.IN_TRANSACTION:
            await self.rollback_transaction()
        await self.close()

    @property
    @abstractmethod
    def state(self) -> TransactionState:
        """Current transaction state."""
        pass

    @abstractmethod
    async def begin_transaction(self) -> None:
        """
        Open an explicit transaction.

        Raises:
            InvalidStateTransitionException: If a transaction is already open
        """
        pass

    @abstractmethod
    async def commit_transaction(self) -> None:
        """
        Flush pending changes and commit the open transaction.

        Raises:
            InvalidStateTransitionException: If no transaction is open
        """
        pass

    @abstractmethod
    async def rollback_transaction(self) -> None:
        """
        Discard every change made since begin_transaction.

        Raises:
            InvalidStateTransitionException: If no transaction is open
        """
        pass

    @abstractmethod
    async def save_changes(self) -> int:
        """
        Persist pending changes.

        Commits outside a transaction; inside one it only flushes.

        Returns:
            Number of pending objects written
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """Close the unit of work and release resources."""
        pass
