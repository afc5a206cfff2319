"""
Mesto Backend - Database Session Management
============================================

What:  Async SQLAlchemy engine construction, session dependency, and the
       bounded `store_call` helper used by every service.
Why:   The store connection is built once per application (in create_app)
       and injected into handlers, so tests can swap in in-memory SQLite.
How:   `build_engine()` creates the engine, `create_session_factory()` wraps
       it, both are kept on `app.state`. `get_db_session` hands out one
       session per request: commit on success, rollback on error.

Connection Pooling Strategy:
    pool_size=20 / max_overflow=10 for PostgreSQL (asyncpg).
    SQLite (tests) uses the driver's default pool; in-memory SQLite uses a
    StaticPool so every session sees the same database.
"""

import asyncio
import logging
from typing import AsyncGenerator, Awaitable, TypeVar

from fastapi import Request
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool

from mesto.config import Settings
from mesto.exceptions import StoreTimeoutError

logger = logging.getLogger(__name__)

T = TypeVar("T")

STORE_TIMEOUT_KEY = "store_timeout"
DEFAULT_STORE_TIMEOUT = 5.0


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Shares a single metadata object, which Alembic reads for migrations.
    """
    pass


# ── Engine Construction ───────────────────────────────────────────────────
def build_engine(config: Settings) -> AsyncEngine:
    """
    Create the async engine for `config.database_url`.

    Pool sizing only applies to server databases; SQLite ignores it and an
    in-memory SQLite database must live on a single shared connection.
    """
    url = config.database_url
    echo = config.log_level == "DEBUG"

    if url.startswith("sqlite"):
        if ":memory:" in url or url.rstrip("/").endswith("sqlite+aiosqlite:"):
            return create_async_engine(
                url,
                echo=echo,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
            )
        return create_async_engine(url, echo=echo)

    return create_async_engine(
        url,
        pool_size=config.db_pool_size,
        max_overflow=config.db_max_overflow,
        pool_pre_ping=config.db_pool_pre_ping,
        pool_recycle=3600,
        echo=echo,
    )


def create_session_factory(
    engine: AsyncEngine, store_timeout: float = DEFAULT_STORE_TIMEOUT
) -> async_sessionmaker[AsyncSession]:
    """
    Session factory bound to `engine`.

    Every session it makes carries `store_timeout` in `session.info`, which
    is where `store_call` reads its bound from.
    """
    # expire_on_commit=False: response models read attributes after commit
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        info={STORE_TIMEOUT_KEY: store_timeout},
    )


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Creates a new session from the factory stored on app.state
        2. Yields it to the route handler
        3. On success: commits the transaction
        4. On error: rolls back and re-raises for the global error handlers
        5. Always: closes the session (returns connection to pool)
    """
    session_factory: async_sessionmaker[AsyncSession] = request.app.state.session_factory
    async with session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


# ── Bounded Store Calls ───────────────────────────────────────────────────
async def bounded(awaitable: Awaitable[T], timeout: float) -> T:
    """
    Await `awaitable` for at most `timeout` seconds.

    Raises:  StoreTimeoutError once the bound expires. The caller's request
             then ends with a 503; the session is rolled back by
             get_db_session.
    """
    try:
        return await asyncio.wait_for(awaitable, timeout=timeout)
    except asyncio.TimeoutError:
        logger.error("Store call exceeded %.3fs", timeout)
        raise StoreTimeoutError(timeout=timeout)


async def store_call(db: AsyncSession, awaitable: Awaitable[T]) -> T:
    """
    Await one operation on `db` (execute/get/flush) within the session's bound.

    The bound is the `store_timeout` the session factory was built with,
    i.e. the `store_timeout_seconds` of the Settings passed to create_app.
    """
    return await bounded(awaitable, db.info.get(STORE_TIMEOUT_KEY, DEFAULT_STORE_TIMEOUT))


# ── Lifecycle Helpers ─────────────────────────────────────────────────────
async def create_all(engine: AsyncEngine) -> None:
    """Create all tables directly from the ORM metadata (dev/test only)."""
    # Models must be imported so they register with Base.metadata
    from mesto.models import card, user  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def dispose_engine(engine: AsyncEngine) -> None:
    """Close all pooled connections on shutdown."""
    await engine.dispose()
