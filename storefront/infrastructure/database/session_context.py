"""
Tracked session context shared by the relational repositories.

Every repository in a unit of work stages changes on the same AsyncSession.
Outside an explicit transaction each write is committed straight away and
transient faults are retried with exponential backoff; inside a transaction
writes are only flushed and nothing is retried.
"""
import logging
from typing import Awaitable, Callable, TypeVar

from sqlalchemy.exc import (
    DBAPIError,
    OperationalError,
    SQLAlchemyError,
    TimeoutError as PoolTimeoutError,
)
from sqlalchemy.ext.asyncio import AsyncSession
from tenacity import (
    AsyncRetrying,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from ...domain.exceptions import BackendUnavailableException

logger = logging.getLogger(__name__)

R = TypeVar('R')

BACKEND_NAME = 'sql'


def is_transient_error(error: BaseException) -> bool:
    """
    Decide whether a database error is worth retrying.

    Connection drops, operational failures and pool checkout timeouts are
    transient; constraint violations and programming errors are not.
    """
    if isinstance(error, PoolTimeoutError):
        return True
    if isinstance(error, OperationalError):
        return True
    if isinstance(error, DBAPIError) and error.connection_invalidated:
        return True
    return False


class SessionContext:
    """
    Wraps one AsyncSession plus the unit of work's transaction flag.

    Args:
        session: Session the repositories share
        max_retry_count: Retries after the first attempt on a transient fault
        max_retry_delay: Upper bound in seconds for a single backoff wait
    """

    def __init__(
        self,
        session: AsyncSession,
        max_retry_count: int = 3,
        max_retry_delay: float = 30.0,
    ):
        self.session = session
        self.in_transaction = False
        self._max_retry_count = max_retry_count
        self._max_retry_delay = max_retry_delay

    async def save_changes(self) -> int:
        """
        Write pending changes.

        Returns:
            Number of new, dirty and deleted objects that were pending
        """
        pending = len(self.session.new) + len(self.session.dirty) + len(self.session.deleted)
        if self.in_transaction:
            await self.session.flush()
        else:
            await self.session.commit()
        return pending

    async def run(self, operation: Callable[[], Awaitable[R]], description: str = 'operation') -> R:
        """
        Execute a repository operation against the session.

        The operation must be safe to run again from scratch: on a retry
        the session has been rolled back and everything is re-staged.
        """
        if self.in_transaction:
            try:
                return await operation()
            except SQLAlchemyError as e:
                if is_transient_error(e):
                    logger.error(f"Transient database fault inside a transaction during {description}: {e}")
                    raise BackendUnavailableException(
                        backend=BACKEND_NAME,
                        message=f"{description} failed inside a transaction",
                        original_error=str(e),
                    ) from e
                raise

        retrying = AsyncRetrying(
            retry=retry_if_exception(is_transient_error),
            stop=stop_after_attempt(self._max_retry_count + 1),
            wait=wait_exponential(multiplier=1, max=self._max_retry_delay),
            before_sleep=self._log_retry(description),
            reraise=True,
        )
        try:
            async for attempt in retrying:
                with attempt:
                    try:
                        result = await operation()
                    except Exception:
                        # Nothing half-staged may survive into the next save
                        await self.session.rollback()
                        raise
        except SQLAlchemyError as e:
            if is_transient_error(e):
                logger.error(
                    f"Giving up on {description} after {self._max_retry_count + 1} attempts: {e}"
                )
                raise BackendUnavailableException(
                    backend=BACKEND_NAME,
                    message=f"{description} failed after retries",
                    original_error=str(e),
                ) from e
            raise
        return result

    def _log_retry(self, description: str):
        def before_sleep(retry_state) -> None:
            logger.warning(
                f"Transient database fault during {description} "
                f"(attempt {retry_state.attempt_number}), retrying in "
                f"{retry_state.next_action.sleep:.2f}s: {retry_state.outcome.exception()}"
            )
        return before_sleep

    async def close(self) -> None:
        """Close the underlying session."""
        await self.session.close()
