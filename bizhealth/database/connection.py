"""
Database Connection Module
Builds the async engine from settings and hands out transactional sessions.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, AsyncIterator, Optional

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from bizhealth.config import Settings, settings

logger = logging.getLogger(__name__)

# Keep SQLAlchemy's own statement logging quiet unless explicitly echoed
logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


def create_engine_from_settings(config: Settings) -> AsyncEngine:
    """
    Create the async engine for the score history database.

    Creating the engine does not open a connection; the first session
    checkout does.
    """
    return create_async_engine(
        config.database_url,
        echo=config.database_echo,
        pool_size=config.database_pool_size,
        max_overflow=config.database_max_overflow,
        pool_recycle=config.database_pool_recycle_seconds,
        pool_pre_ping=True,
    )


async_engine = create_engine_from_settings(settings)

async_session_factory = async_sessionmaker(
    bind=async_engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


@asynccontextmanager
async def session_scope(
    factory: Optional[async_sessionmaker] = None,
) -> AsyncIterator[AsyncSession]:
    """
    One unit of work: commit on success, roll back and re-raise on error.

    Args:
        factory: Session factory to use (defaults to the application factory)
    """
    async with (factory or async_session_factory)() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            logger.warning("Rolling back health score transaction")
            await session.rollback()
            raise


async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency providing a request-scoped session.

    Usage:
        @router.get("/api/health-scoring")
        async def list_scores(db: AsyncSession = Depends(get_async_session)):
            ...
    """
    async with session_scope() as session:
        yield session


async def close_db() -> None:
    """Dispose of pooled connections during application shutdown."""
    await async_engine.dispose()
