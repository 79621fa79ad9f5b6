"""
DiveLog Backend: Database Session Management
============================================

What:  Async SQLAlchemy engine, session factory, and FastAPI dependency.
Why:   All connection handling lives here; repositories only ever see an
       AsyncSession that was handed to them.
How:   Creates an async engine, provides a session dependency that commits
       on success and rolls back on error, so every request is exactly one
       transaction.
Who:   Route handlers (via Depends), the health check, and the lifespan hook.
When:  Engine is created at module import; sessions are created per request.

Connection Pooling Strategy:
    PostgreSQL (asyncpg):
        pool_size / max_overflow / pool_pre_ping come from settings,
        connections are recycled hourly.
    SQLite (aiosqlite, local runs and tests):
        No pool sizing. An in-memory database uses a StaticPool so that every
        session sees the same database.
"""

import logging
from typing import Any, AsyncGenerator, Dict

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
    wait_random,
)

from app.config import settings

logger = logging.getLogger(__name__)


def _engine_options(database_url: str) -> Dict[str, Any]:
    options: Dict[str, Any] = {"echo": settings.log_level == "DEBUG"}
    if database_url.startswith("sqlite"):
        if ":memory:" in database_url:
            options["poolclass"] = StaticPool
            options["connect_args"] = {"check_same_thread": False}
        return options
    options.update(
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_pre_ping=settings.db_pool_pre_ping,
        pool_recycle=3600,
    )
    return options


# ── Engine Configuration ──────────────────────────────────────────────────
engine = create_async_engine(settings.database_url, **_engine_options(settings.database_url))

# ── Session Factory ───────────────────────────────────────────────────────
# expire_on_commit=False: response serialization reads attributes after the
# dependency has committed.
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


# ── Base Model ────────────────────────────────────────────────────────────
class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Shares one metadata object between the models, Alembic and the tests
    (which build the schema with `Base.metadata.create_all`).
    """
    pass


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Creates a new session from the factory
        2. Yields it to the route handler
        3. On success: commits the transaction
        4. On any error: rolls back, then re-raises for the global handlers
        5. Always: closes the session (returns the connection to the pool)
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
async def ping_database() -> None:
    """Runs `SELECT 1` on a fresh connection; raises if the database is unreachable."""
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))


def startup_wait_strategy():
    """
    Backoff between startup pings: 1, 2, 4 ... seconds clamped to
    [retry_min_wait, retry_max_wait], plus up to one second of jitter.
    """
    return wait_exponential(
        multiplier=1,
        min=settings.retry_min_wait,
        max=settings.retry_max_wait,
    ) + wait_random(0, 1)


@retry(
    retry=retry_if_exception_type((SQLAlchemyError, OSError)),
    stop=stop_after_attempt(settings.retry_max_attempts),
    wait=startup_wait_strategy(),
    before_sleep=before_sleep_log(logger, logging.WARNING),
    reraise=True,
)
async def wait_for_database() -> None:
    """
    What:  Blocks startup until the database answers a ping.
    When:  Called once from the application lifespan.
    How:   Exponential backoff with jitter between attempts; after the last
           attempt the original driver error propagates and startup fails.
    """
    await ping_database()
    logger.info("Database connection established")


async def dispose_engine() -> None:
    """Closes all pooled connections. Called during application shutdown."""
    await engine.dispose()
