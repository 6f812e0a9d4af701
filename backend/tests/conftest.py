"""
Memos Backend — Test Configuration (conftest.py)
=================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Every test gets its own SQLite file under tmp_path with the schema
       created from the ORM metadata. API tests reach the app through
       httpx's ASGITransport with get_db_session overridden to use that file.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── test_engine:   AsyncEngine on a throwaway SQLite database
    ├── session_factory: async_sessionmaker bound to test_engine
    ├── db_session:    one session for service-level tests
    ├── test_client:   HTTPX AsyncClient wired to the FastAPI app
    └── memo_factory:  helper that creates memos through the API
"""

import os
import tempfile

# Override settings for testing BEFORE any memos imports
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///" + os.path.join(
    tempfile.mkdtemp(prefix="memos_test_"), "unused.db"
)
os.environ["MEMOS_PASSWORD"] = "test-password"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["DB_AUTO_CREATE"] = "false"
os.environ["LOG_LEVEL"] = "WARNING"

from typing import AsyncGenerator  # noqa: E402

import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker  # noqa: E402

from memos.database import build_engine, create_schema, get_db_session  # noqa: E402
from memos.main import app  # noqa: E402


@pytest_asyncio.fixture
async def test_engine(tmp_path):
    """A fresh SQLite database with all tables, removed after the test."""
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'memos.db'}")
    await create_schema(engine)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(test_engine):
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """
    A session for calling services directly.

    Tests commit explicitly when they need a write to be visible to a
    second session; anything uncommitted is rolled back afterwards.
    """
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture
async def test_client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """
    HTTPX AsyncClient talking to the app in-process.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """

    async def override_get_db_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = override_get_db_session
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    try:
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            yield client
    finally:
        app.dependency_overrides.pop(get_db_session, None)


@pytest_asyncio.fixture
async def memo_factory(test_client):
    """
    Creates memos through POST /api/memos and returns the memo JSON.

    Usage:
        memo = await memo_factory("hello", tags=["work"])
    """

    async def create(content: str = "hello", tags=None):
        body = {"content": content}
        if tags is not None:
            body["tags"] = tags
        response = await test_client.post("/api/memos", json=body)
        assert response.status_code == 201, response.text
        return response.json()["memo"]

    return create
