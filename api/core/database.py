"""Database engine, session, and unit-of-work management.

Supports two backends:
- SQLite (aiosqlite) for local development and tests
- PostgreSQL (asyncpg) with connection pooling
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from sqlalchemy import event, text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import NullPool, StaticPool
from structlog.contextvars import bound_contextvars

from core.config import Settings, get_settings
from core.logger import get_logger

logger = get_logger(__name__)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


def _enable_sqlite_foreign_keys(engine: AsyncEngine) -> None:
    # SQLite does not enforce foreign keys unless explicitly enabled.
    # ON DELETE CASCADE / SET NULL rely on it.
    @event.listens_for(engine.sync_engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record) -> None:
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def to_sync_url(url: str) -> str:
    """Swap async drivers for their sync counterparts (psycopg2, pysqlite)."""
    return url.replace("+asyncpg", "+psycopg2").replace("+aiosqlite", "")


def create_engine(settings: Settings | None = None) -> AsyncEngine:
    settings = settings or get_settings()

    engine_kwargs: dict = {"echo": settings.db_echo}
    if settings.is_memory_database:
        # One shared connection, otherwise every session sees an empty database
        engine_kwargs["poolclass"] = StaticPool
        engine_kwargs["connect_args"] = {"check_same_thread": False}
    elif settings.is_sqlite:
        engine_kwargs["poolclass"] = NullPool
    else:
        engine_kwargs.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_pool_max_overflow,
            pool_timeout=settings.db_pool_timeout,
            pool_recycle=settings.db_pool_recycle,
            pool_pre_ping=True,
        )

    engine = create_async_engine(settings.database_url, **engine_kwargs)

    if settings.is_sqlite:
        _enable_sqlite_foreign_keys(engine)

    return engine


def create_session_maker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


async def _rollback_quietly(session: AsyncSession) -> None:
    try:
        await session.rollback()
    except Exception as rollback_err:
        logger.warning("db.rollback.failed", error=str(rollback_err))


@asynccontextmanager
async def session_scope(
    session_maker: async_sessionmaker[AsyncSession],
    **log_context: object,
) -> AsyncGenerator[AsyncSession]:
    """One unit of work: commits on success, rolls back on exception.

    Keyword arguments (e.g. operation="seed", owner_id=7) are bound as
    structlog context for the duration of the unit of work.

    Notes:
        - Services only flush; they never commit
        - Validation reads and the following write share this transaction
        - A ServiceError is rolled back and re-raised without an error log
    """
    from services.errors import ServiceError

    with bound_contextvars(**log_context):
        async with session_maker() as session:
            try:
                yield session
                await session.commit()
            except ServiceError:
                await _rollback_quietly(session)
                raise
            except Exception as exc:
                await _rollback_quietly(session)
                logger.exception(
                    "db.unit_of_work.rolled_back", error_type=type(exc).__name__
                )
                raise


@asynccontextmanager
async def readonly_session(
    session_maker: async_sessionmaker[AsyncSession],
    **log_context: object,
) -> AsyncGenerator[AsyncSession]:
    """Read-only session that never commits.

    On PostgreSQL uses SET TRANSACTION READ ONLY so accidental writes
    raise immediately instead of being silently discarded. Keyword
    arguments are bound as log context, as in session_scope.
    """
    with bound_contextvars(**log_context):
        async with session_maker() as session:
            try:
                if session.get_bind().dialect.name == "postgresql":
                    await session.execute(text("SET TRANSACTION READ ONLY"))
                yield session
            finally:
                await session.rollback()


async def init_db(engine: AsyncEngine, *, drop_existing: bool = False) -> None:
    """Create all tables defined on Base.metadata.

    create_all() only creates missing tables. Use Alembic migrations
    (scripts/migrate.py) for schema changes on existing databases.
    """
    import models  # noqa: F401

    async with engine.begin() as conn:
        if drop_existing:
            await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    logger.info("db.tables.created", drop_existing=drop_existing)


async def check_db_connection(engine: AsyncEngine) -> None:
    """Verify database is reachable (30s timeout)."""
    async with asyncio.timeout(30):
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
            await conn.rollback()


async def dispose_engine(engine: AsyncEngine) -> None:
    await engine.dispose()
    logger.info("db.engine.disposed")
