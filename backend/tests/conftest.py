import os
import sys
import asyncio
from typing import AsyncIterator

import pytest
from fastapi import FastAPI, HTTPException
from fastapi.testclient import TestClient
from slowapi.errors import RateLimitExceeded
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

# Honour any externally provided DATABASE_URL (e.g. CI may set a file-backed DB)
# but fall back to an in-memory SQLite database so local runs remain isolated.
DEFAULT_DB_URL = os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ALLOWED_ORIGINS", "http://localhost:3000")
os.environ.setdefault("DISABLE_RATE_LIMITS", "true")

# Ensure all SQLAlchemy models are registered with the declarative Base so
# metadata.create_all creates every table when the test database is initialised.
from tennis_tracker import db, models  # noqa: E402,F401
from tennis_tracker.cache import user_stats_cache  # noqa: E402
from tennis_tracker.exceptions import DomainException  # noqa: E402
from tennis_tracker.rate_limit import limiter, rate_limit_handler  # noqa: E402


@pytest.fixture(scope="session")
def session_loop():
    """Single event loop for all sync fixtures that need to run async DB code."""

    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    yield loop
    loop.close()


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture(autouse=True, scope="session")
def ensure_database(session_loop):
    """Ensure the test database starts clean and honours DATABASE_URL."""

    mp = pytest.MonkeyPatch()
    desired_url = os.getenv("DATABASE_URL") or DEFAULT_DB_URL
    mp.setenv("DATABASE_URL", desired_url)

    if desired_url.startswith("sqlite") and ":memory:" not in desired_url:
        path = desired_url.split("///")[-1]
        if os.path.exists(path):
            os.remove(path)

    db.engine = None
    db.AsyncSessionLocal = None
    yield
    session_loop.run_until_complete(db.dispose_engine())
    mp.undo()


async def _reset_schema(engine) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(db.Base.metadata.drop_all)
        await conn.run_sync(db.Base.metadata.create_all)


@pytest.fixture(autouse=True)
def reset_schema(request, session_loop):
    """Reset the schema before each test unless preserved via marker."""

    if request.node.get_closest_marker("preserve_schema"):
        yield
        return

    engine = db.engine or db.get_engine()
    session_loop.run_until_complete(_reset_schema(engine))
    yield


def build_app(*routers) -> FastAPI:
    """A bare app carrying the production error handlers and given routers."""

    from tennis_tracker.main import domain_exception_handler, http_exception_handler

    app = FastAPI()
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_handler)
    app.add_exception_handler(DomainException, domain_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    for router in routers:
        app.include_router(router)
    return app


@pytest.fixture()
def client_and_session():
    """TestClient over every resource router with an isolated in-memory DB."""

    from tennis_tracker.routers import (
        follows,
        leaderboards,
        matches,
        reviews,
        tournaments,
        training,
        users,
    )

    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async_session_maker = sessionmaker(
        engine, expire_on_commit=False, class_=AsyncSession
    )

    async def init_models():
        async with engine.begin() as conn:
            await conn.run_sync(db.Base.metadata.create_all)

    asyncio.run(init_models())

    async def override_get_session() -> AsyncIterator[AsyncSession]:
        async with async_session_maker() as session:
            yield session

    app = build_app(
        users.router,
        matches.router,
        leaderboards.router,
        follows.router,
        tournaments.router,
        training.router,
        reviews.router,
    )
    app.dependency_overrides[db.get_session] = override_get_session

    asyncio.run(user_stats_cache.clear())
    limiter.reset()
    try:
        with TestClient(app) as client:
            yield client, async_session_maker
    finally:
        asyncio.run(user_stats_cache.clear())
        asyncio.run(engine.dispose())


def create_user(client: TestClient, username: str, name: str | None = None) -> int:
    response = client.post(
        "/users", json={"username": username, "name": name or username.title()}
    )
    assert response.status_code == 200, response.text
    return response.json()["id"]
