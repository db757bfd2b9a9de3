"""Shared pytest fixtures for all test suites."""

import json
import os
from collections.abc import AsyncGenerator, Callable
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.pool import NullPool

from backend.app.db.context import RequestContext
from backend.app.db.models import Base
from backend.app.llm.prompts import CLASSIFICATION_INSTRUCTIONS

_GENERAL_CLASSIFICATION = json.dumps(
    {"type": "general", "confidence": 0.5, "explanation": "Everyday prose."}
)

EngineFactory = Callable[..., MagicMock]


@pytest.fixture
def make_engine() -> EngineFactory:
    """Build a fake analysis engine with scripted replies.

    Each reply is either the raw JSON text to return or an exception to raise.
    The classification reply is used when the request carries the
    classification instructions, the analysis reply otherwise.

    Usage:
        engine = make_engine(analysis='{"issues": []}')
        await engine.complete(system_instructions=..., user_content=...)
        assert engine.complete.await_count == 2
    """

    def factory(
        analysis: str | Exception = '{"issues": []}',
        classification: str | Exception = _GENERAL_CLASSIFICATION,
    ) -> MagicMock:
        async def complete(*, system_instructions: str, user_content: str) -> str:
            reply = classification if system_instructions == CLASSIFICATION_INSTRUCTIONS else analysis
            if isinstance(reply, Exception):
                raise reply
            return reply

        engine = MagicMock()
        engine.complete = AsyncMock(side_effect=complete)
        return engine

    return factory


@pytest.fixture
def ctx() -> RequestContext:
    return RequestContext(user_id=1)


@pytest.fixture
def sample_issue_payload() -> dict[str, Any]:
    return {
        "text": "manpower",
        "suggestion": "workforce",
        "reason": "Gendered term for a group of workers.",
        "severity": "medium",
    }


@pytest_asyncio.fixture
async def sqlite_engine(tmp_path: Any) -> AsyncGenerator[AsyncEngine, None]:
    """File-backed SQLite engine with all tables created."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        poolclass=NullPool,
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def sqlite_session(sqlite_engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    async with AsyncSession(sqlite_engine, expire_on_commit=False) as session:
        yield session


@pytest_asyncio.fixture
async def postgres_engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create async engine for PostgreSQL integration tests.

    Requires DATABASE_URL to be set to a real PostgreSQL connection string.
    Tests using this fixture should be marked with @pytest.mark.postgres.
    """
    database_url = os.getenv("DATABASE_URL")
    if not database_url:
        pytest.skip("DATABASE_URL not set - skipping postgres test")

    if not database_url.startswith(("postgresql://", "postgresql+asyncpg://")):
        pytest.skip(f"DATABASE_URL is not PostgreSQL: {database_url}")

    if database_url.startswith("postgresql://"):
        database_url = database_url.replace("postgresql://", "postgresql+asyncpg://", 1)

    engine = create_async_engine(database_url, poolclass=NullPool, echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture
async def postgres_session(postgres_engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    async with AsyncSession(postgres_engine, expire_on_commit=False) as session:
        yield session
        await session.rollback()
