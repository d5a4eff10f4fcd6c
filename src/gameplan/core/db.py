"""
Database manager (async SQLAlchemy).

A shared manager owns the pooled engine and sessionmaker, and a dependency
yields one session per request. Connections go back to the pool when the
session closes.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import (  # type: ignore[import-not-found]
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from gameplan.commons.exceptions import BaseCoreException
from gameplan.commons.logging import logger
from gameplan.core.settings import settings


class DatabaseException(BaseCoreException):
    pass


def build_dsn() -> str:
    # psycopg async driver
    return (
        "postgresql+psycopg://"
        f"{settings.GAMEPLAN_DB_USER}:{settings.GAMEPLAN_DB_PASSWORD}"
        f"@{settings.GAMEPLAN_DB_HOST}:{settings.GAMEPLAN_DB_PORT}"
        f"/{settings.GAMEPLAN_DB_NAME}"
    )


class DatabaseManager:
    def __init__(self) -> None:
        self.engine: AsyncEngine | None = None
        self.sessionmaker: async_sessionmaker[AsyncSession] | None = None

    async def initialize(self) -> None:
        if self.engine is not None:
            return
        try:
            self.engine = create_async_engine(
                build_dsn(),
                echo=False,
                pool_size=settings.DB_POOL_SIZE,
                max_overflow=settings.DB_POOL_MAX_OVERFLOW,
                pool_timeout=settings.DB_POOL_TIMEOUT_S,
                pool_pre_ping=True,
            )
            self.sessionmaker = async_sessionmaker(self.engine, expire_on_commit=False)
            logger.info("Database initialized")
        except Exception as exc:
            raise DatabaseException("Failed to initialize database", str(exc)) from exc

    async def shutdown(self) -> None:
        if self.engine is None:
            return
        await self.engine.dispose()
        self.engine = None
        self.sessionmaker = None
        logger.info("Database shut down")

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        if self.sessionmaker is None:
            raise DatabaseException("Database is not initialized")
        async with self.sessionmaker() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise
            finally:
                await session.close()


database_manager = DatabaseManager()
