"""Shared pytest fixtures for candidate persistence tests."""

from __future__ import annotations

import os
import tempfile
from collections.abc import AsyncGenerator
from pathlib import Path

os.environ.setdefault(
    "LOG_DIR", str(Path(tempfile.gettempdir()) / "candidate-vault-test-logs")
)

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool, StaticPool  # noqa: E402

from candidate_vault.db.base import Base  # noqa: E402
from tests.factories import candidate_factory  # noqa: E402,F401

TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL", "sqlite+aiosqlite:///:memory:")


@pytest_asyncio.fixture
async def test_engine() -> AsyncGenerator[AsyncEngine, None]:
    """
    Provide an AsyncEngine with the candidate schema created for one test.

    Defaults to an in-memory SQLite database shared through a StaticPool;
    set TEST_DATABASE_URL (for example a postgresql+asyncpg URL) to run the
    same tests against another server.

    Yields:
        AsyncEngine: Engine bound to a database holding Base.metadata tables.
    """
    if TEST_DATABASE_URL.startswith("sqlite"):
        engine = create_async_engine(
            TEST_DATABASE_URL,
            echo=False,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
    else:
        engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=NullPool)

    async with engine.begin() as connection:
        await connection.run_sync(Base.metadata.create_all)

    try:
        yield engine
    finally:
        async with engine.begin() as connection:
            await connection.run_sync(Base.metadata.drop_all)
        await engine.dispose()


@pytest.fixture
def session_maker(test_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory bound to the per-test engine."""
    return async_sessionmaker(
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@pytest_asyncio.fixture
async def db_session(
    session_maker: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """
    Provide a per-test database session.

    Pending work is rolled back after the test; the schema itself is dropped
    by ``test_engine``.
    """
    async with session_maker() as session:
        try:
            yield session
        finally:
            await session.rollback()
