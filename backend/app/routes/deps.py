"""
DiveLog Backend: Shared Route Dependencies
==========================================

What:  Query/path parameter parsing and per-request service construction.
Why:   The frontend sends ids as plain strings; malformed values must come back
       as 400 with our error body, not FastAPI's default 422.
How:   Parameters are declared as strings and converted here, raising
       ValidationError. Services are built on the request's session from
       get_db_session, so one request is one transaction.
"""

from typing import Optional

from fastapi import Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.database import get_db_session
from app.exceptions import ValidationError
from app.services.dive_service import DiveService
from app.services.dive_site_service import DiveSiteService
from app.services.settings_service import SettingsService


def parse_int_id(value: Optional[str], name: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(message=f"invalid {name}", field=name) from None


def get_user_id(
    user_id: Optional[str] = Query(default=None, description="Owner of the dives"),
) -> int:
    """Required `user_id` query parameter for the /dives endpoints."""
    if user_id is None or user_id.strip() == "":
        raise ValidationError(message="user_id is required", field="user_id")
    return parse_int_id(user_id.strip(), "user_id")


def get_settings_user_id(
    user_id: Optional[str] = Query(default=None, description="Defaults to the configured user"),
) -> int:
    """Optional `user_id` for the settings endpoints."""
    if user_id is None or user_id.strip() == "":
        return settings.default_user_id
    return parse_int_id(user_id.strip(), "user_id")


def get_dive_service(db: AsyncSession = Depends(get_db_session)) -> DiveService:
    return DiveService.for_session(db)


def get_dive_site_service(db: AsyncSession = Depends(get_db_session)) -> DiveSiteService:
    return DiveSiteService.for_session(db)


def get_settings_service(db: AsyncSession = Depends(get_db_session)) -> SettingsService:
    return SettingsService.for_session(db)
