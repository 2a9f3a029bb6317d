"""Shared database and API client fixtures.

Every test gets its own SQLite file so sessions opened from different
event loops (pytest-asyncio, TestClient) see the same data.
"""

import asyncio
from collections.abc import AsyncGenerator, Generator
from pathlib import Path

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from app.infrastructure.config import settings
from app.infrastructure.database import Base, build_engine, get_session
from app.main import app  # imports every model onto Base.metadata


def make_engine(database_url: str) -> AsyncEngine:
    """Create an engine the way the application does for this URL."""
    return build_engine(database_url)


async def create_schema(engine: AsyncEngine) -> None:
    """Create every table on the engine."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


@pytest.fixture
def database_url(tmp_path: Path) -> str:
    """SQLite database file private to the test."""
    return f"sqlite+aiosqlite:///{tmp_path / 'stockroom.db'}"


@pytest.fixture
def session_factory(database_url: str) -> async_sessionmaker[AsyncSession]:
    """Session factory bound to a freshly created schema."""
    engine = make_engine(database_url)
    asyncio.run(create_schema(engine))
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def session(database_url: str) -> AsyncGenerator[AsyncSession, None]:
    """Async session on a freshly created schema."""
    engine = make_engine(database_url)
    await create_schema(engine)
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        yield session
    await engine.dispose()


def override_get_session(factory: async_sessionmaker[AsyncSession]):
    """Build a ``get_session`` replacement bound to a test database."""

    async def _get_session() -> AsyncGenerator[AsyncSession, None]:
        async with factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    return _get_session


@pytest.fixture
def client(session_factory: async_sessionmaker[AsyncSession]) -> Generator[TestClient, None, None]:
    """Create test client without authentication."""
    app.dependency_overrides[get_session] = override_get_session(session_factory)
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers() -> dict[str, str]:
    """Get authentication headers."""
    return {"Authorization": f"Bearer {settings.stockroom_api_key}"}


@pytest.fixture
def auth_client(client: TestClient, auth_headers: dict[str, str]) -> TestClient:
    """Create test client with valid API key authentication."""
    client.headers.update(auth_headers)
    return client
