"""
Engine and session management.

Production runs on PostgreSQL through asyncpg with a bounded connection
pool. SQLite URLs (local runs, tests) get a plain engine, because pool
sizing and asyncpg server settings do not apply to them.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import AsyncAdaptedQueuePool

from axiobank.core.config import settings

logger = logging.getLogger(__name__)


def create_database_engine(database_url: str | None = None) -> AsyncEngine:
    """
    Create the async engine for `database_url` (default: settings.database_url).

    Pool settings (PostgreSQL only):
        - db_pool_size / db_max_overflow bound concurrent connections
        - db_pool_pre_ping drops connections the server has closed
        - db_pool_recycle replaces connections after N seconds
    """
    url = database_url or settings.database_url

    if url.startswith("sqlite"):
        engine = create_async_engine(url, echo=settings.debug)
        logger.info("SQLite database engine created")
        return engine

    engine = create_async_engine(
        url,
        echo=settings.debug,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_pre_ping=settings.db_pool_pre_ping,
        pool_recycle=settings.db_pool_recycle,
        pool_timeout=settings.db_pool_timeout,
        poolclass=AsyncAdaptedQueuePool,
        connect_args={
            "server_settings": {
                "application_name": f"{settings.app_name} - {settings.environment}",
            },
        },
    )
    logger.info(
        f"Database engine created: pool_size={settings.db_pool_size}, "
        f"max_overflow={settings.db_max_overflow}"
    )
    return engine


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """
    Build the session factory every service session is drawn from.

    Objects stay usable after commit (expire_on_commit=False) because
    services map them to DTOs once the transaction has been committed.
    """
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@asynccontextmanager
async def session_scope(
    factory: async_sessionmaker[AsyncSession],
) -> AsyncIterator[AsyncSession]:
    """
    Provide a session for one unit of work.

    Rolls back on any exception escaping the block and always closes the
    session.

    Example:
        async with session_scope(factory) as session:
            response = await CardService(session).get_customer_cards(customer_id)
    """
    async with factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


async def close_database_connection(engine: AsyncEngine) -> None:
    logger.info("Closing database connections...")
    await engine.dispose()
    logger.info("Database connections closed")
