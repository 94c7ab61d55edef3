"""
Stock Portfolio Tracker - Database Connection
"""
from contextlib import asynccontextmanager
from datetime import datetime
from typing import AsyncIterator, Optional

from sqlalchemy import event, text
from sqlalchemy.exc import InterfaceError, OperationalError, SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import StaticPool
from loguru import logger

from stock_tracker.config import settings
from stock_tracker.utils.exceptions import PersistenceFailedError, StorageUnavailableError

# Errors raised while a connection is being acquired
CONNECTION_ERRORS = (OperationalError, InterfaceError, OSError)

# Base class for models
Base = declarative_base()


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(url: str, echo: bool = False) -> AsyncEngine:
    """
    Create an async engine for the given URL.

    PostgreSQL gets a sized connection pool; SQLite (used by the test-suite)
    gets foreign keys switched on and, for in-memory databases, a single
    shared connection.
    """
    if url.startswith("sqlite"):
        kwargs = {"echo": echo}
        if ":memory:" in url:
            kwargs.update(
                poolclass=StaticPool,
                connect_args={"check_same_thread": False},
            )
        sqlite_engine = create_async_engine(url, **kwargs)
        event.listen(sqlite_engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
        return sqlite_engine

    return create_async_engine(
        url,
        echo=echo,
        pool_pre_ping=True,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
    )


def build_session_maker(bind: AsyncEngine) -> async_sessionmaker:
    """Create an async session factory bound to an engine."""
    return async_sessionmaker(
        bind,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )


# Default engine and session factory
engine = build_engine(settings.database_url, echo=settings.DEBUG)
async_session_maker = build_session_maker(engine)


async def init_db(bind: Optional[AsyncEngine] = None):
    """Initialize database tables."""
    bind = bind or engine
    async with bind.begin() as conn:
        # Import all models here to ensure they're registered
        from stock_tracker.db.models import user, position, watchlist, closed_position  # noqa: F401

        # Create all tables
        await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables created/verified")


class DatabaseHealth:
    """
    Connection health of one engine.

    Created once at start-up and handed to whoever needs to know whether the
    database is reachable.
    """

    def __init__(self, bind: AsyncEngine):
        self.engine = bind
        self.available = False
        self.last_error: Optional[str] = None
        self.checked_at: Optional[datetime] = None

    async def check(self) -> bool:
        """Run ``SELECT 1`` and record the outcome."""
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            self.available = True
            self.last_error = None
        except (SQLAlchemyError, OSError) as e:
            self.available = False
            self.last_error = str(e)[:200]
            logger.error(f"Database connection failed: {self.last_error}")
        self.checked_at = datetime.utcnow()
        return self.available

    def as_dict(self) -> dict:
        return {
            "database": "connected" if self.available else "disconnected",
            "error": self.last_error,
            "checked_at": self.checked_at.isoformat() if self.checked_at else None,
        }


async def _open(session: AsyncSession) -> None:
    """Acquire the session's connection, mapping transport failures."""
    try:
        await session.connection()
    except CONNECTION_ERRORS as e:
        logger.error(f"Could not open database connection: {e}")
        raise StorageUnavailableError() from e


@asynccontextmanager
async def transaction(session_factory: async_sessionmaker) -> AsyncIterator[AsyncSession]:
    """
    Run a block of writes as one all-or-nothing transaction.

    Commits when the block finishes. Any database error rolls back and is
    re-raised as PersistenceFailedError; other exceptions roll back and
    propagate unchanged.

    Raises:
        StorageUnavailableError: If no connection could be opened
        PersistenceFailedError: If a statement or the commit failed
    """
    async with session_factory() as session:
        await _open(session)
        try:
            yield session
            await session.commit()
        except SQLAlchemyError as e:
            await _rollback(session)
            logger.error(f"Transaction rolled back: {e}")
            raise PersistenceFailedError(cause=e) from e
        except Exception:
            await _rollback(session)
            raise


@asynccontextmanager
async def reading(session_factory: async_sessionmaker) -> AsyncIterator[AsyncSession]:
    """Open a session for reads, mapping transport failures to StorageUnavailableError."""
    async with session_factory() as session:
        await _open(session)
        try:
            yield session
        except CONNECTION_ERRORS as e:
            logger.error(f"Database read failed: {e}")
            raise StorageUnavailableError() from e


async def _rollback(session: AsyncSession) -> None:
    try:
        await session.rollback()
    except SQLAlchemyError as e:
        # The connection is gone; the server discards the open transaction.
        logger.error(f"Rollback failed: {e}")
