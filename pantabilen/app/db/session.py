"""
Database engine and session factory.

Production runs on PostgreSQL through asyncpg. A `sqlite+aiosqlite` URL is
accepted for local runs; SQLite has no connection pool to size.
"""

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import declarative_base
from pantabilen.app.core.config import settings
from pantabilen.app.core.exceptions import PersistenceError

logger = logging.getLogger(__name__)


def engine_options(database_url: str) -> dict:
    options = {"echo": settings.db_echo}
    if not database_url.startswith("sqlite"):
        options.update(pool_size=settings.db_pool_size, max_overflow=settings.db_max_overflow)
    return options


engine = create_async_engine(settings.database_url, **engine_options(settings.database_url))

# Objects stay readable after commit; endpoints audit-log and respond after committing.
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)

Base = declarative_base()


async def get_db():
    """FastAPI dependency yielding one session per request."""
    async with AsyncSessionLocal() as session:
        yield session


async def commit_or_raise(db: AsyncSession, message: str) -> None:
    """
    Commit the session. On a store failure roll back and raise
    PersistenceError carrying `message` (shown to the admin).
    """
    try:
        await db.commit()
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.error("Commit failed (%s): %s", message, exc)
        raise PersistenceError(message) from exc
