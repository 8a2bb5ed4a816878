"""Database engine management using SQLModel async.

The host application owns the engine: it is created at startup, handed to
the row store, and disposed at shutdown. There is no module-level engine.
"""

from __future__ import annotations

import structlog
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlmodel import SQLModel

# Import all models to ensure they are registered with SQLModel metadata
import keyforge.models  # noqa: F401
from keyforge.config import DatabaseConfig

logger = structlog.get_logger()


def create_engine(config: DatabaseConfig) -> AsyncEngine:
    """Create the async engine for the configured database URL."""
    return create_async_engine(
        config.url,
        echo=config.echo,
        pool_pre_ping=True,
    )


async def init_db(engine: AsyncEngine) -> None:
    """Create missing tables.

    Note: In production, use migrations instead.
    This is for development/testing convenience.
    """
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    logger.info("db.init", url=engine.url.render_as_string(hide_password=True))


async def close_db(engine: AsyncEngine) -> None:
    """Dispose of the engine's connection pool."""
    await engine.dispose()
