"""Integration test fixtures: real Postgres via testcontainers.

Requires Docker to be running; the suite is skipped otherwise.
Run with: pytest tests/integration -v
"""

import httpx
import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from shared.database import get_session
from sleeplog.domain.orm import Base
from sleeplog.repository import UserRepository


@pytest.fixture(scope="session")
def pg_container():
    """Session-scoped PostgreSQL container. Skips the suite when Docker is unavailable."""
    postgres = pytest.importorskip("testcontainers.postgres")

    pg = postgres.PostgresContainer("postgres:16-alpine")
    try:
        pg.start()
    except Exception as exc:
        pytest.skip(f"Docker is not available: {exc}")
    try:
        yield pg
    finally:
        pg.stop()


@pytest.fixture(scope="session")
def pg_url(pg_container):
    """Async connection URL for the testcontainers Postgres instance."""
    # testcontainers gives us a psycopg2 URL; convert to asyncpg
    url = pg_container.get_connection_url()
    return url.replace("psycopg2", "asyncpg")


@pytest.fixture
async def async_engine(pg_url):
    """Create engine and initialize schema."""
    engine = create_async_engine(pg_url, echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_factory(async_engine):
    return async_sessionmaker(async_engine, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory) -> AsyncSession:
    async with session_factory() as session:
        yield session


@pytest.fixture
async def user_id(db_session) -> int:
    """A freshly inserted user."""
    return await UserRepository(db_session).create()


@pytest.fixture
async def api_client(session_factory):
    """httpx client against the app, with sessions bound to the test database."""
    from main import app

    async def override_session():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_session] = override_session
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
