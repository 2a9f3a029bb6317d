"""Database engine, sessions and dialect helpers.

The service runs on PostgreSQL (asyncpg) and is tested on SQLite
(aiosqlite). Everything that differs between the two lives here: engine
options, the JSON column type and the ``INSERT ... ON CONFLICT``
construct used for upserts.
"""

from collections.abc import AsyncGenerator
from typing import Any, Callable

from sqlalchemy import JSON
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import NullPool

from app.infrastructure.config import settings

# JSONB on PostgreSQL, plain JSON elsewhere
JSONType = JSON().with_variant(postgresql.JSONB(), "postgresql")

_UPSERT_INSERTS: dict[str, Callable[..., Any]] = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def engine_options(database_url: str) -> dict[str, Any]:
    """Engine keyword arguments suited to the URL's backend.

    SQLite files get a fresh connection per checkout so sessions on
    different event loops never share one; server databases keep the
    default pool with liveness checks.
    """
    if make_url(database_url).get_backend_name() == "sqlite":
        return {"poolclass": NullPool}
    return {"pool_pre_ping": True}


def build_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    """Create an async engine for ``database_url``."""
    return create_async_engine(database_url, echo=echo, **engine_options(database_url))


def upsert_insert(session: AsyncSession, table: Any) -> Any:
    """Build an ``INSERT`` for ``table`` that supports ``ON CONFLICT``.

    Args:
        session: Session whose bind decides the dialect.
        table: Mapped class or table to insert into.

    Raises:
        NotImplementedError: If the backend has no upsert construct.
    """
    dialect = session.get_bind().dialect.name
    try:
        insert = _UPSERT_INSERTS[dialect]
    except KeyError:
        raise NotImplementedError(f"Upsert is not supported on {dialect}") from None
    return insert(table)


engine = build_engine(settings.database_url, echo=settings.debug)

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)

Base = declarative_base()


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Yield a request-scoped session.

    Commits when the request handler returns and rolls back when it
    raises.
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
