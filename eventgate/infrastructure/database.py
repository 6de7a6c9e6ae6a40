"""Request Sessions — pooled async engine, per-request sessions and storage error mapping.

Invariants:
    - Every request session rolls back on exception; nothing partial is committed
    - An IntegrityError escaping a request is a ConflictError (409, not retryable):
      the same write would violate the same constraint again
    - Every other SQLAlchemy failure is a DatabaseError (503, retryable)
    - Repositories catch the IntegrityErrors that decide races before they get here

Design Decisions:
    - Module-level db_manager set by init_db in the FastAPI lifespan; the readiness
      check reads it through the module so tests can swap it
    - expire_on_commit=False: committed rows stay readable without an async lazy load
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from eventgate.core.errors import ConflictError, DatabaseError

logger = logging.getLogger(__name__)


class DatabaseSessionManager:
    """Owns the engine; hands out sessions that translate storage failures."""

    def __init__(self, database_url: str, pool_size: int = 20, max_overflow: int = 10):
        self.engine = create_async_engine(
            database_url,
            pool_size=pool_size,
            max_overflow=max_overflow,
            pool_pre_ping=True,
        )
        self._session_factory = async_sessionmaker(
            self.engine, class_=AsyncSession, expire_on_commit=False,
        )

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        async with self._session_factory() as session:
            try:
                yield session
            except IntegrityError as e:
                await session.rollback()
                logger.warning(f"Constraint violation escaped a request: {e.orig}")
                raise ConflictError(
                    "The request conflicts with stored data", "CONSTRAINT_VIOLATION",
                )
            except SQLAlchemyError as e:
                await session.rollback()
                logger.error(f"Storage failure: {e}")
                raise DatabaseError("storage unavailable", "request")

    async def health_check(self) -> bool:
        """Readiness: can we run a trivial query right now?"""
        try:
            async with self.session() as db:
                await db.execute(text("SELECT 1"))
        except DatabaseError:
            return False
        return True

    async def close(self) -> None:
        await self.engine.dispose()


db_manager: DatabaseSessionManager | None = None


def init_db(database_url: str, **kwargs) -> None:
    global db_manager
    db_manager = DatabaseSessionManager(database_url, **kwargs)


async def close_db() -> None:
    global db_manager
    if db_manager is not None:
        await db_manager.close()
        db_manager = None


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: one session per request."""
    if db_manager is None:
        raise RuntimeError("Database not initialized")
    async with db_manager.session() as session:
        yield session
