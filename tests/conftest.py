"""Shared test fixtures for settings, the async database, and sessions."""

from collections.abc import AsyncGenerator
from datetime import UTC, datetime

import pytest
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import election_importer.models  # noqa: F401
from election_importer.core.config import Settings
from election_importer.core.database import configure_sqlite_engine
from election_importer.models.base import Base
from election_importer.models.voter import Voter


@pytest.fixture
def settings() -> Settings:
    """Test application settings."""
    return Settings(database_url="sqlite+aiosqlite:///:memory:", _env_file=None)  # type: ignore[call-arg]


@pytest.fixture
async def async_engine() -> AsyncGenerator[AsyncEngine]:
    """Create an in-memory async SQLite engine with all tables."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False, poolclass=StaticPool)
    configure_sqlite_engine(engine)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
async def async_session(async_engine: AsyncEngine) -> AsyncGenerator[AsyncSession]:
    """Create a per-test async session."""
    session_factory = async_sessionmaker(async_engine, expire_on_commit=False)
    async with session_factory() as session:
        yield session


@pytest.fixture
async def registered_voters(async_session: AsyncSession) -> list[str]:
    """Insert three registered voters and return their state voter ids."""
    ids = ["WA001", "WA002", "WA003"]
    for state_voter_id in ids:
        async_session.add(Voter(state_voter_id=state_voter_id, import_date=datetime(2024, 1, 1, tzinfo=UTC)))
    await async_session.commit()
    return ids
