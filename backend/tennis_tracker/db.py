import os
from typing import Any, AsyncIterator, Optional

from sqlalchemy.ext.asyncio import AsyncSession, AsyncEngine, create_async_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import NullPool, StaticPool


engine: Optional[AsyncEngine] = None
AsyncSessionLocal: Optional[sessionmaker] = None
Base = declarative_base()

_ASYNC_DRIVERS = {
    "postgresql://": "postgresql+asyncpg://",
    "sqlite://": "sqlite+aiosqlite://",
}


def _normalize_database_url(database_url: str) -> str:
    """Point plain ``postgresql://`` and ``sqlite://`` URLs at async drivers."""

    for plain, async_prefix in _ASYNC_DRIVERS.items():
        if database_url.startswith(plain):
            return async_prefix + database_url[len(plain):]
    return database_url


def _engine_options(database_url: str) -> dict[str, Any]:
    if not database_url.startswith("sqlite"):
        return {"echo": False, "pool_pre_ping": True}
    # An in-memory database lives only as long as its single connection.
    if ":memory:" in database_url:
        return {"echo": False, "poolclass": StaticPool}
    return {"echo": False, "poolclass": NullPool}


def get_engine() -> AsyncEngine:
    """Return the process-wide engine, building it from ``DATABASE_URL``.

    Nothing is created at import time, so tests may change the environment
    before the first session is requested.
    """

    global engine, AsyncSessionLocal

    if engine is not None:
        return engine

    raw_url = os.getenv("DATABASE_URL")
    if not raw_url:
        raise RuntimeError("DATABASE_URL environment variable is required")

    database_url = _normalize_database_url(raw_url)
    engine = create_async_engine(database_url, **_engine_options(database_url))
    AsyncSessionLocal = sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False
    )
    return engine


async def dispose_engine() -> None:
    """Close pooled connections and forget the engine."""

    global engine, AsyncSessionLocal

    if engine is not None:
        await engine.dispose()
    engine = None
    AsyncSessionLocal = None


async def get_session() -> AsyncIterator[AsyncSession]:
    """FastAPI dependency yielding one session per request."""

    if AsyncSessionLocal is None:
        get_engine()

    assert AsyncSessionLocal is not None
    async with AsyncSessionLocal() as session:
        yield session
