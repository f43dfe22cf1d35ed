"""
Engine and session factory for the relational store.

One async engine is shared by the whole process; every request gets its
own unit of work (and session) from the factory built on top of it.
"""
import logging
from typing import Any, Dict, Optional

from sqlalchemy import event, text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from ...config import DatabaseSettings, get_settings
from .models import Base

logger = logging.getLogger(__name__)


def engine_options(settings: DatabaseSettings) -> Dict[str, Any]:
    """
    Keyword arguments for create_async_engine.

    SQLite (used for tests and local runs) has no connection pool to size.
    """
    options: Dict[str, Any] = {'echo': settings.echo_sql}
    if settings.url.startswith('sqlite'):
        return options
    options.update(
        pool_size=settings.pool_size,
        max_overflow=settings.max_overflow,
        pool_pre_ping=True,
        pool_recycle=3600,
    )
    return options


class DatabaseManager:
    """Process-wide owner of the async engine and its session factory."""

    _engine: Optional[AsyncEngine] = None
    _session_factory: Optional[async_sessionmaker[AsyncSession]] = None

    @classmethod
    def get_engine(cls) -> AsyncEngine:
        if cls._engine is not None:
            return cls._engine

        settings = get_settings().database
        engine = create_async_engine(settings.url, **engine_options(settings))

        if engine.dialect.name == 'postgresql':
            @event.listens_for(engine.sync_engine, "connect")
            def use_utc(dbapi_conn, connection_record):
                cursor = dbapi_conn.cursor()
                cursor.execute("SET timezone = 'UTC'")
                cursor.close()

        logger.info(f"Database engine created for {engine.url.render_as_string(hide_password=True)}")
        cls._engine = engine
        return engine

    @classmethod
    def get_session_factory(cls) -> async_sessionmaker[AsyncSession]:
        if cls._session_factory is None:
            # Entities are converted to domain objects right after each
            # operation, so nothing needs reloading after commit
            cls._session_factory = async_sessionmaker(
                bind=cls.get_engine(),
                class_=AsyncSession,
                expire_on_commit=False,
                autoflush=False,
            )
        return cls._session_factory

    @classmethod
    async def close(cls) -> None:
        """Dispose of the engine; the next call to get_engine builds a new one."""
        if cls._engine is None:
            return
        await cls._engine.dispose()
        cls._engine = None
        cls._session_factory = None


async def init_db() -> None:
    """Create any missing tables. Migrations remain the way to change existing ones."""
    async with DatabaseManager.get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables ensured")


async def health_check() -> bool:
    """Run a trivial query; False when the database cannot be reached."""
    try:
        async with DatabaseManager.get_engine().connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        logger.warning(f"Database health check failed: {e}")
        return False
    return True


def get_unit_of_work():
    """
    New unit of work over the shared session factory.

    Usage:
        async with get_unit_of_work() as uow:
            product = await uow.products.get_by_id(product_id)
    """
    from .unit_of_work import SQLAlchemyUnitOfWork

    settings = get_settings().database
    return SQLAlchemyUnitOfWork(
        DatabaseManager.get_session_factory(),
        max_retry_count=settings.max_retry_count,
        max_retry_delay=settings.max_retry_delay,
    )
