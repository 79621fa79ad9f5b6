"""
DiveLog Backend: Test Configuration (conftest.py)
=================================================

What:  Shared pytest fixtures for the entire test suite.
How:   The application runs against an in-memory SQLite database (aiosqlite,
       StaticPool) whose schema is rebuilt from Base.metadata for every test.

Fixture Hierarchy (all function-scoped):
    ├── db_schema:     drops and recreates all tables
    ├── db_session:    AsyncSession on the fresh schema
    ├── test_client:   HTTPX AsyncClient talking to the FastAPI app
    └── dive_payload:  factory for valid dive request bodies
"""

import os

# ══════════════════════════════════════════════════════════════════════════
# Environment Setup
# ══════════════════════════════════════════════════════════════════════════

# Must run before anything imports app.config: settings and the engine are
# built at import time.
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["RATE_LIMIT_REQUESTS"] = "100000"
os.environ["RETRY_MAX_ATTEMPTS"] = "2"
os.environ["RETRY_MIN_WAIT"] = "0"
os.environ["RETRY_MAX_WAIT"] = "1"
os.environ["STRICT_DATETIME_PARSING"] = "false"

from typing import Any, Dict

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from app.database import Base, async_session_factory, engine
from app.models.dive import Dive  # noqa: F401
from app.models.dive_site import DiveSite  # noqa: F401
from app.models.settings import UserSettings  # noqa: F401


# ══════════════════════════════════════════════════════════════════════════
# Database Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def db_schema():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    yield


@pytest_asyncio.fixture
async def db_session(db_schema):
    """
    A session on a freshly created schema.

    Nothing is committed by the code under test; assertions query through
    the same session and see its flushed state.
    """
    async with async_session_factory() as session:
        yield session
        await session.rollback()


# ══════════════════════════════════════════════════════════════════════════
# HTTP Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def test_client(db_schema):
    """
    HTTPX AsyncClient routed straight into the ASGI app.

    ASGITransport does not send lifespan events, so startup (and its wait
    for the database) is skipped.
    """
    from app.main import app
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


# ══════════════════════════════════════════════════════════════════════════
# Payload Factories
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def dive_payload():
    """
    Returns a function building a valid dive request body.

    Usage:
        body = dive_payload(datetime="2024-03-01T10:00:00", location="Blue Hole")
    """
    def _build(**overrides: Any) -> Dict[str, Any]:
        body: Dict[str, Any] = {
            "datetime": "2024-03-01T10:00:00",
            "location": "Blue Hole",
            "depth": 18.5,
            "duration": 45,
            "lat": 24.4037,
            "lng": -87.5340,
        }
        body.update(overrides)
        return body

    return _build
