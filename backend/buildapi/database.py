"""
Build API — Database Lifecycle and Session Management
=======================================================

What:  The process-wide store handle (async SQLAlchemy engine over SQLite),
       the declarative Base, and the FastAPI session dependency.
Why:   Centralizes all connection logic; the handle is created on startup,
       disposed on shutdown and injected into handlers instead of being
       looked up globally, so tests can substitute their own.
How:   `Database.connect()` builds the engine, verifies the connection and
       runs idempotent schema creation. `get_db_session` hands one session
       per request, committing on success and rolling back on error.
Who:   The application lifespan (main.py), the seeding CLI and route
       dependencies.

Connection Strategy:
    pool_size=1, max_overflow=0: a single long-lived connection. SQLite
    serializes writes per database anyway; concurrent requests wait for the
    connection rather than contending for the file lock.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.pool import AsyncAdaptedQueuePool
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from buildapi.config import settings
from buildapi.exceptions import DatabaseError

logger = logging.getLogger(__name__)


# ── Base Model ────────────────────────────────────────────────────────────
class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    `Base.metadata` is what `Database.create_tables()` hands to
    `create_all`, so every model must be imported before startup.
    """
    pass


class Database:
    """
    Owns the engine and session factory for one SQLite store.

    Lifecycle:
        db = Database(url)
        await db.connect()      # open, verify, CREATE TABLE IF NOT EXISTS
        async with db.session() as session: ...
        await db.dispose()      # close the pooled connection
    """

    def __init__(
        self,
        url: Optional[str] = None,
        pool_size: Optional[int] = None,
        max_overflow: Optional[int] = None,
        echo: Optional[bool] = None,
    ):
        self.url = url or settings.database_url
        self.pool_size = pool_size if pool_size is not None else settings.db_pool_size
        self.max_overflow = (
            max_overflow if max_overflow is not None else settings.db_max_overflow
        )
        self.echo = echo if echo is not None else settings.log_level == "DEBUG"
        self._engine: Optional[AsyncEngine] = None
        self._session_factory: Optional[async_sessionmaker[AsyncSession]] = None

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            raise DatabaseError(
                message="Database is not connected",
                context={"url": self.url},
            )
        return self._engine

    @property
    def is_connected(self) -> bool:
        return self._engine is not None

    async def connect(self) -> None:
        """
        Open the store and make sure the schema exists.

        Raises:
            DatabaseError: the file could not be opened or the schema could
                not be created. Startup must not continue past this.
        """
        if self._engine is not None:
            return

        engine = create_async_engine(
            self.url,
            poolclass=AsyncAdaptedQueuePool,
            pool_size=self.pool_size,
            max_overflow=self.max_overflow,
            echo=self.echo,
        )
        try:
            async with engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except SQLAlchemyError as e:
            await engine.dispose()
            logger.error("Error connecting to database: %s", str(e))
            raise DatabaseError(
                message="Could not connect to the aggregates database",
                context={"url": self.url, "original_error": str(e)},
            ) from e

        self._engine = engine
        # expire_on_commit=False: returned records stay readable after commit
        self._session_factory = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
        logger.info("Connected to the aggregates database.")

        await self.create_tables()

    async def create_tables(self) -> None:
        """Idempotent schema creation (CREATE TABLE IF NOT EXISTS)."""
        from buildapi.services.aggregate_store import AggregateStore

        async with self.session() as session:
            await AggregateStore(session).create_table()
            await session.commit()
        logger.info("Aggregates table ready")

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Yield a session bound to this store; the caller controls commits."""
        if self._session_factory is None:
            raise DatabaseError(
                message="Database is not connected",
                context={"url": self.url},
            )
        async with self._session_factory() as session:
            yield session

    async def ping(self) -> bool:
        """Lightweight connectivity probe used by the health check."""
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except (SQLAlchemyError, DatabaseError) as e:
            logger.warning("Database ping failed: %s", str(e))
            return False

    async def dispose(self) -> None:
        """Close the pooled connection. Safe to call more than once."""
        if self._engine is None:
            return
        await self._engine.dispose()
        self._engine = None
        self._session_factory = None
        logger.info("Closed the database connection.")


# ── Dependencies ──────────────────────────────────────────────────────────
def get_database(request: Request) -> Database:
    """FastAPI dependency returning the store handle attached at startup."""
    database = getattr(request.app.state, "database", None)
    if database is None:
        raise DatabaseError(message="Database is not connected")
    return database


async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Opens a session on the application's Database
        2. Yields it to the route handler
        3. On success: commits the transaction
        4. On error: rolls back and re-raises for the global error handlers
    """
    database = get_database(request)
    async with database.session() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        try:
            await session.commit()
        except SQLAlchemyError as e:
            logger.error("Error committing transaction: %s", str(e))
            raise DatabaseError(
                message="Could not commit the transaction",
                context={"original_error": str(e)},
            ) from e
