"""Fixtures for SQLite integration tests."""

import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from heimdall.config import DatabaseConfig
from heimdall.infrastructure.persistence.database import (
    create_db_engine,
    create_session_factory,
    create_tables,
)


@pytest_asyncio.fixture
async def sqlite_engine():
    """Per-test in-memory database with all tables created."""
    engine = create_db_engine(DatabaseConfig(url="sqlite+aiosqlite:///:memory:"))
    await create_tables(engine)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(sqlite_engine: AsyncEngine):
    factory = create_session_factory(sqlite_engine)
    session: AsyncSession
    async with factory() as session:
        yield session
        await session.rollback()
