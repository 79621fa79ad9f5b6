"""
DiveLog Backend: Application Package
====================================

What: The dive-log service: dives, canonical dive sites and per-user settings.
Who:  Imported by uvicorn (`app.main:app`), Alembic and the test suite.

Layering:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  HTTP concerns only
    ├─────────────────────────────────────┤
    │      Services (Business Logic)      │  site resolution, duplicate checks
    ├─────────────────────────────────────┤
    │     Repositories (Store Access)     │  SQL for the three tables
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  async SQLAlchemy sessions
    └─────────────────────────────────────┘

Services never open sessions themselves; a session is handed in per request
and the repositories built on top of it are the only code that issues SQL.
"""

__version__ = "1.0.0"
