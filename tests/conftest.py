"""Pytest configuration and fixtures for the school status ledger.

Uses app.main:app for HTTP tests and app.infrastructure.persistence.database
for DB-dependent fixtures. DATABASE_URL defaults to an in-memory SQLite
database so the app can be imported without a running Postgres.
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.core.limiter import limiter
from app.infrastructure.persistence import database
from app.main import app


@pytest.fixture
async def client() -> AsyncClient:
    """Async HTTP client against the FastAPI app (ASGI). Rate limits reset per test."""
    limiter.reset()
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
async def db_session() -> AsyncSession:
    """Database session for repository/integration tests. Rolls back after test.

    Requires DATABASE_URL pointing at a migrated Postgres database. Skips
    (pytest.skip) otherwise. Use @pytest.mark.requires_db to mark tests that
    need this fixture; run without DB via: pytest -m 'not requires_db'.
    """
    if not get_settings().is_postgres:
        pytest.skip(
            "Postgres not configured: set DATABASE_URL=postgresql+asyncpg://..., "
            "then run: uv run alembic upgrade head"
        )
    async with database.get_session_factory()() as session:
        await session.begin()
        yield session
        await session.rollback()
    await database.dispose_engine()
