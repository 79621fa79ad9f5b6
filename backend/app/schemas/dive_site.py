"""
DiveLog Backend: Dive Site Schemas
==================================

Request/response contracts for /api/v1/dive-sites.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class DiveSiteRequest(BaseModel):
    """Body of POST and PUT /api/v1/dive-sites."""
    name: str = Field(min_length=1, max_length=255)
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)
    description: Optional[str] = None

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        stripped = v.strip()
        if not stripped:
            raise ValueError("name must not be blank")
        return stripped


class DiveSiteResponse(BaseModel):
    id: int
    name: str
    latitude: float
    longitude: float
    description: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
