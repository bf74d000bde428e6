"""Async database engine and request-scoped sessions for the team store."""

import logging
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

logger = logging.getLogger(__name__)


async def get_engine(
    database_url: str,
    pool_size: int = 5,
    pool_overflow: int = 10,
) -> AsyncEngine:
    """Create the async engine backing the team store.

    Args:
        database_url: PostgreSQL connection URL (postgresql+asyncpg://...).
        pool_size: Connection pool size.
        pool_overflow: Max overflow connections beyond pool_size.

    Returns:
        Configured async engine instance.
    """
    return create_async_engine(
        database_url,
        pool_size=pool_size,
        max_overflow=pool_overflow,
        pool_pre_ping=True,
        pool_recycle=3600,
    )


def get_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory used for one unit of work per request.

    ``expire_on_commit`` is off so team aggregates stay readable after the
    service commits (async sessions cannot lazy-load expired attributes).
    """
    return async_sessionmaker(engine, expire_on_commit=False)


async def get_session(engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """Yield a session; uncommitted work is rolled back when the caller fails.

    Args:
        engine: SQLAlchemy async engine.

    Yields:
        AsyncSession instance that is closed on exit.
    """
    async with get_session_factory(engine)() as session:
        try:
            yield session
        except Exception:
            logger.debug("db_session_rollback: reason=exception")
            await session.rollback()
            raise
