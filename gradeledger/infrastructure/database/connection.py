# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Database connection management using SQLAlchemy async.

One engine and one sessionmaker per process, created at startup and
disposed at shutdown. PostgreSQL via asyncpg in production; SQLite via
aiosqlite for local runs and tests.

Example:
    from gradeledger.infrastructure.database.connection import (
        init_database,
        get_session,
    )

    # Initialize at application startup
    await init_database(settings)

    # Use in request handlers
    async with get_session() as session:
        service = EnrollmentService(session)
        await service.list_own_enrollments(principal)
"""

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any, AsyncIterator, Optional

from sqlalchemy import event, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from gradeledger.domains.exceptions import InfrastructureError

if TYPE_CHECKING:
    from gradeledger.core.config.settings import Settings

logger = logging.getLogger(__name__)

_engine: Optional[AsyncEngine] = None
_sessionmaker: Optional[async_sessionmaker[AsyncSession]] = None


def enable_sqlite_foreign_keys(engine: AsyncEngine) -> None:
    """Turn on foreign key enforcement for every SQLite connection.

    SQLite ignores REFERENCES clauses unless the pragma is set per
    connection.

    Args:
        engine: Engine bound to a SQLite database.
    """

    @event.listens_for(engine.sync_engine, "connect")
    def _set_pragma(dbapi_connection: Any, connection_record: Any) -> None:
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def create_engine_from_settings(settings: "Settings") -> AsyncEngine:
    """Create an async engine for the configured database.

    Args:
        settings: Application settings containing database configuration.

    Returns:
        Configured AsyncEngine.
    """
    db = settings.database
    if db.is_sqlite:
        engine = create_async_engine(db.url, echo=settings.debug and settings.log_level == "DEBUG")
        enable_sqlite_foreign_keys(engine)
        return engine

    return create_async_engine(
        db.url,
        pool_size=db.pool_size,
        max_overflow=db.max_overflow,
        pool_pre_ping=True,
        pool_recycle=1800,
        echo=settings.debug and settings.log_level == "DEBUG",
    )


async def init_database(settings: "Settings") -> None:
    """Initialize the database connection pool.

    This should be called once at application startup.

    Args:
        settings: Application settings containing database configuration.

    Raises:
        InfrastructureError: If connection pool creation fails.
    """
    global _engine, _sessionmaker

    try:
        _engine = create_engine_from_settings(settings)
        _sessionmaker = async_sessionmaker(
            bind=_engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )
    except SQLAlchemyError as e:
        logger.error("Failed to initialize database: %s", str(e), exc_info=True)
        raise InfrastructureError("Failed to initialize database connection", e) from e

    logger.info("Database initialized: sqlite=%s", settings.database.is_sqlite)


async def close_database() -> None:
    """Close the database connection pool.

    This should be called at application shutdown.
    """
    global _engine, _sessionmaker

    if _engine is not None:
        await _engine.dispose()
        _engine = None
        _sessionmaker = None
        logger.info("Database connections closed")


def get_engine() -> AsyncEngine:
    """Get the async engine.

    Raises:
        InfrastructureError: If the database has not been initialized.
    """
    if _engine is None:
        raise InfrastructureError("Database not initialized. Call init_database() first.")
    return _engine


def get_sessionmaker() -> async_sessionmaker[AsyncSession]:
    """Get the async sessionmaker.

    Raises:
        InfrastructureError: If the database has not been initialized.
    """
    if _sessionmaker is None:
        raise InfrastructureError("Database not initialized. Call init_database() first.")
    return _sessionmaker


@asynccontextmanager
async def get_session() -> AsyncIterator[AsyncSession]:
    """Get an async session.

    The session is committed on success and rolled back on exception.
    Domain services commit their own units of work; the final commit
    here only flushes anything a caller left open.

    Yields:
        AsyncSession for database operations.

    Raises:
        InfrastructureError: If the database has not been initialized or
            if a database operation fails.
    """
    sessionmaker = get_sessionmaker()

    async with sessionmaker() as session:
        try:
            yield session
            await session.commit()
        except SQLAlchemyError as e:
            await session.rollback()
            logger.error("Database operation failed: %s", str(e), exc_info=True)
            raise InfrastructureError("Database operation failed", e) from e
        except Exception:
            await session.rollback()
            raise


async def storage_failure(
    session: AsyncSession,
    action: str,
    error: SQLAlchemyError,
) -> InfrastructureError:
    """Roll back a failed unit of work and wrap the error.

    Args:
        session: Session whose transaction failed.
        action: Short description of the failed operation.
        error: The SQLAlchemy error that was raised.

    Returns:
        InfrastructureError for the caller to raise.
    """
    await session.rollback()
    logger.error("Storage failure during %s: %s", action, str(error), exc_info=error)
    return InfrastructureError(f"Failed to {action}", error)


async def check_database_connection() -> bool:
    """Check if the database is reachable.

    Returns:
        True if the database is reachable, False otherwise.
    """
    if _engine is None:
        return False

    try:
        async with _engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True
    except SQLAlchemyError as e:
        logger.warning("Database health check failed: %s", str(e))
        return False
