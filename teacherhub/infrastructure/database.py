"""Database Session Manager — async engine for the storage slot table.

Invariants:
    - A session that raises is rolled back before the error leaves the context
    - Every SQLAlchemy exception surfaces as StorageError (core/errors.py), most
      specific class first
    - Tables created on startup from Base.metadata (no migration machinery)

Design Decisions:
    - Manager instance owned by the composition root (main.lifespan) and handed
      to storage explicitly, no module-level singleton
    - expire_on_commit=False: rows stay readable after commit in async code
    - No pool sizing arguments: the default target is a local SQLite file
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.exc import DBAPIError, IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from teacherhub.core.errors import StorageError
from teacherhub.db.base import Base

logger = logging.getLogger(__name__)

# (exception class, user-facing reason, operation), checked in order
_ERROR_MAP: tuple[tuple[type[SQLAlchemyError], str, str], ...] = (
    (IntegrityError, "integrity constraint violated", "commit"),
    (OperationalError, "database unreachable or locked", "execute"),
    (DBAPIError, "database driver error", "query"),
    (SQLAlchemyError, "database operation failed", "unknown"),
)


def to_storage_error(exc: SQLAlchemyError) -> StorageError:
    for exc_class, reason, operation in _ERROR_MAP:
        if isinstance(exc, exc_class):
            return StorageError(reason, operation)
    return StorageError(str(exc), "unknown")


class DatabaseSessionManager:
    """Owns the async engine; hands out sessions that map their failures."""

    def __init__(self, database_url: str):
        self.engine = create_async_engine(database_url, pool_pre_ping=True)
        self._session_factory = async_sessionmaker(
            self.engine, class_=AsyncSession, expire_on_commit=False,
        )

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        session = self._session_factory()
        try:
            yield session
        except SQLAlchemyError as e:
            await session.rollback()
            error = to_storage_error(e)
            logger.error(f"{error.message}: {e}", extra={"error_code": error.code})
            raise error from e
        finally:
            await session.close()

    async def create_tables(self) -> None:
        # Import registers every model on Base.metadata
        import teacherhub.models  # noqa: F401
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def health_check(self) -> bool:
        """True when a trivial query succeeds (readiness probe)."""
        try:
            async with self.session() as db:
                await db.execute(text("SELECT 1"))
        except StorageError:
            return False
        return True

    async def dispose(self) -> None:
        await self.engine.dispose()
