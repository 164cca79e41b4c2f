"""Pytest configuration and shared fixtures.

This module provides:
- An in-memory SQLite database (aiosqlite) with foreign keys enabled
- Async session fixtures for repository/service tests
- A session maker for unit-of-work tests

Every test gets a brand new schema, so tests never see each other's rows.
"""

# Set environment variables BEFORE any imports that trigger Settings validation
import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("PASSWORD_HASH_ROUNDS", "4")

from collections.abc import AsyncGenerator, Generator

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

import models  # noqa: F401
from core.config import Settings, clear_settings_cache
from core.database import Base, create_engine, create_session_maker

# =============================================================================
# Test Settings
# =============================================================================

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    return Settings(database_url=TEST_DATABASE_URL)


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest_asyncio.fixture(scope="function")
async def test_engine(test_settings: Settings) -> AsyncGenerator[AsyncEngine]:
    """Fresh in-memory database with all tables created.

    create_engine() gives memory databases a StaticPool, so every session
    shares the one connection (and therefore the one database).
    """
    engine = create_engine(test_settings)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_maker(test_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return create_session_maker(test_engine)


@pytest_asyncio.fixture(scope="function")
async def db_session(
    session_maker: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession]:
    """Session for one test. Nothing is committed; the database is discarded."""
    session = session_maker()
    try:
        yield session
    finally:
        await session.rollback()
        await session.close()


# =============================================================================
# Utility Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def reset_settings_cache() -> Generator[None]:
    """Reset settings cache before each test."""
    clear_settings_cache()
    yield
    clear_settings_cache()
