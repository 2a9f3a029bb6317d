"""Shared fixtures for API tests."""

import asyncio

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.catalog.bootstrap import bootstrap_taxonomy


async def _bootstrap(factory: async_sessionmaker[AsyncSession]) -> None:
    async with factory() as session:
        await bootstrap_taxonomy(session)


@pytest.fixture
def seeded_client(
    auth_client: TestClient,
    session_factory: async_sessionmaker[AsyncSession],
) -> TestClient:
    """Authenticated client on a database with the default reference data."""
    asyncio.run(_bootstrap(session_factory))
    return auth_client
