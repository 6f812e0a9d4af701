"""
Memos Backend — Database Session Management
============================================

What:  Async SQLAlchemy engine, session factory, and FastAPI dependency.
How:   Creates an async engine from settings, provides a session dependency
       that commits on success and rolls back on error.
Who:   Used by route handlers via FastAPI's dependency injection system.
When:  Engine is created at module import; sessions are created per-request.

Transactions:
    One session == one transaction per request. A memo insert, its tag
    upserts and its association rows are committed together or not at all.

Dialects:
    SQLite (aiosqlite) is the default store. PostgreSQL (asyncpg) works by
    pointing DATABASE_URL at it; pool sizing applies only there.
"""

from typing import Any, AsyncGenerator, Dict

from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from memos.config import settings


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    # SQLite ships with FK enforcement off; memo_tags relies on ON DELETE CASCADE
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    """
    Create an async engine for the given URL.

    Pool sizing is only passed for server databases; SQLite uses
    SQLAlchemy's default pool for its driver. For SQLite the foreign key
    pragma is switched on for every new connection.
    """
    url = make_url(database_url)
    kwargs: Dict[str, Any] = {"echo": echo}

    if url.get_backend_name() != "sqlite":
        kwargs.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_pre_ping=settings.db_pool_pre_ping,
            pool_recycle=3600,
        )

    engine = create_async_engine(url, **kwargs)

    if url.get_backend_name() == "sqlite":
        event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)

    return engine


# ── Engine Configuration ──────────────────────────────────────────────────
# Echo SQL queries in DEBUG mode for development visibility
engine = build_engine(settings.database_url, echo=settings.log_level == "DEBUG")

# ── Session Factory ───────────────────────────────────────────────────────
# expire_on_commit=False: response models are built after the commit in
# get_db_session, and attribute access must not trigger a new query
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


# ── Base Model ────────────────────────────────────────────────────────────
class Base(DeclarativeBase):
    """Base class for all SQLAlchemy ORM models (shared metadata for Alembic)."""
    pass


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Creates a new session from the factory
        2. Yields it to the route handler (the handler performs queries)
        3. On success: commits the transaction
        4. On error: rolls back the transaction
        5. Always: closes the session (returns connection to pool)

    Example usage in a route:
        @router.get("/memos")
        async def list_memos(db: AsyncSession = Depends(get_db_session)):
            ...
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


# ── Lifecycle Helpers ─────────────────────────────────────────────────────
async def create_schema(target: AsyncEngine = engine) -> None:
    """Create any missing tables. Alembic remains the tool for real migrations."""
    # Models register themselves on Base.metadata when imported
    from memos.models import memo  # noqa: F401

    async with target.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def dispose_engine() -> None:
    """Gracefully closes all connections in the pool (application shutdown)."""
    await engine.dispose()
