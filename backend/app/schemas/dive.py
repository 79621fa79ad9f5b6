"""
DiveLog Backend: Dive Schemas
=============================

What:  Pydantic models for /api/v1/dives requests and responses.
Why:   The frontend speaks its own field names (`datetime`, `depth`, `lat`,
       `lng`) which differ from the column names; the schemas translate.
How:   Nested equipment/conditions/profile documents are validated here and
       stored as JSON by the service layer via `to_document()`.

Wire format notes:
    - `datetime` is accepted as a string and parsed leniently by the
      service (see app.utils.dates). It is returned as YYYY-MM-DDTHH:MM:SS
      without an offset.
    - `lat`/`lng`/`location` in responses echo what the client sent, not
      the canonical dive site's values.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_serializer

from app.utils.dates import format_local_datetime


# ══════════════════════════════════════════════════════════════════════════
# Nested Documents
# ══════════════════════════════════════════════════════════════════════════


class DiveSample(BaseModel):
    """One point of the dive profile."""
    time: int = Field(description="Seconds from dive start")
    depth: float = Field(description="Depth in metres")
    temperature: Optional[float] = None
    pressure: Optional[float] = Field(default=None, description="Tank pressure in bar")


class GasMix(BaseModel):
    oxygen: int = Field(ge=0, le=100, description="O2 percentage, 21 for air")
    helium: Optional[int] = Field(default=None, ge=0, le=100)
    nitrogen: Optional[int] = Field(default=None, ge=0, le=100)
    name: Optional[str] = None


class Tank(BaseModel):
    id: Optional[int] = None
    name: Optional[str] = None
    size: float = Field(description="Volume in litres")
    working_pressure: float
    start_pressure: float
    end_pressure: float
    gas_mix: GasMix
    material: Optional[str] = None


class Wetsuit(BaseModel):
    type: str = Field(description="wetsuit, drysuit, shorty or none")
    thickness: Optional[int] = Field(default=None, description="Millimetres")
    material: Optional[str] = None


class Equipment(BaseModel):
    tanks: List[Tank] = Field(default_factory=list)
    bcd: Optional[str] = None
    regulator: Optional[str] = None
    wetsuit: Optional[Wetsuit] = None
    weights: Optional[float] = Field(default=None, description="Kilograms")
    fins: Optional[str] = None
    mask: Optional[str] = None
    computer: Optional[str] = None
    notes: Optional[str] = None


class DiveConditions(BaseModel):
    water_temp_surface: Optional[float] = None
    water_temp_bottom: Optional[float] = None
    air_temp: Optional[float] = None
    visibility: Optional[float] = None
    current_strength: Optional[str] = None
    current_direction: Optional[str] = None
    weather: Optional[str] = None
    sea_state: Optional[int] = Field(default=None, ge=0, le=9)
    surge: Optional[str] = None


class SafetyStop(BaseModel):
    depth: float
    duration: int = Field(description="Minutes")


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class DiveRequest(BaseModel):
    """Body of POST /dives, each element of POST /dives/batch, and PUT /dives/{id}."""
    date_time: str = Field(alias="datetime", min_length=1, description="ISO 8601 local time")
    location: str = Field(min_length=1, max_length=255)
    depth: float = Field(ge=0)
    duration: int = Field(ge=0)
    buddy: Optional[str] = None
    lat: float = Field(ge=-90, le=90)
    lng: float = Field(ge=-180, le=180)
    water_temperature: Optional[float] = None
    visibility: Optional[int] = None
    notes: Optional[str] = None
    samples: Optional[List[DiveSample]] = None
    equipment: Optional[Equipment] = None
    conditions: Optional[DiveConditions] = None
    dive_type: Optional[str] = None
    rating: Optional[int] = Field(default=None, ge=1, le=5)
    safety_stops: Optional[List[SafetyStop]] = None

    model_config = {"populate_by_name": True}

    def to_document(self) -> Dict[str, Any]:
        """Column values for a dive row, minus site, user and parsed datetime."""
        return {
            "max_depth": self.depth,
            "duration": self.duration,
            "buddy": self.buddy,
            "water_temperature": self.water_temperature,
            "visibility": self.visibility,
            "notes": self.notes,
            "latitude": self.lat,
            "longitude": self.lng,
            "location": self.location,
            "samples": _dump_list(self.samples),
            "equipment": self.equipment.model_dump(exclude_none=True) if self.equipment else None,
            "conditions": self.conditions.model_dump(exclude_none=True) if self.conditions else None,
            "dive_type": self.dive_type,
            "rating": self.rating,
            "safety_stops": _dump_list(self.safety_stops),
        }


def _dump_list(items: Optional[List[BaseModel]]) -> Optional[List[Dict[str, Any]]]:
    if not items:
        return None
    return [item.model_dump(exclude_none=True) for item in items]


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class DiveResponse(BaseModel):
    id: int
    user_id: int
    dive_site_id: Optional[int] = None
    date_time: datetime = Field(alias="datetime")
    depth: float
    duration: int
    buddy: Optional[str] = None
    water_temperature: Optional[float] = None
    visibility: Optional[int] = None
    notes: Optional[str] = None
    lat: float
    lng: float
    location: str
    samples: Optional[List[DiveSample]] = None
    equipment: Optional[Equipment] = None
    conditions: Optional[DiveConditions] = None
    dive_type: Optional[str] = None
    rating: Optional[int] = None
    safety_stops: Optional[List[SafetyStop]] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"populate_by_name": True}

    @field_serializer("date_time")
    def serialize_date_time(self, value: datetime) -> str:
        return format_local_datetime(value)

    @classmethod
    def from_dive(
        cls,
        dive: Any,
        location: Optional[str] = None,
        lat: Optional[float] = None,
        lng: Optional[float] = None,
    ) -> "DiveResponse":
        """
        Build a response from a Dive row.

        `location`/`lat`/`lng` override the stored values; writes pass the
        request's values, the list endpoint passes the site-coalesced ones.
        """
        return cls(
            id=dive.id,
            user_id=dive.user_id,
            dive_site_id=dive.dive_site_id,
            date_time=dive.date_time,
            depth=dive.max_depth,
            duration=dive.duration,
            buddy=dive.buddy,
            water_temperature=dive.water_temperature,
            visibility=dive.visibility,
            notes=dive.notes,
            lat=lat if lat is not None else (dive.latitude or 0.0),
            lng=lng if lng is not None else (dive.longitude or 0.0),
            location=location if location is not None else (dive.location or "Unknown Location"),
            samples=dive.samples,
            equipment=dive.equipment,
            conditions=dive.conditions,
            dive_type=dive.dive_type,
            rating=dive.rating,
            safety_stops=dive.safety_stops,
            created_at=dive.created_at,
            updated_at=dive.updated_at,
        )


class SkippedDive(BaseModel):
    date: str
    location: str
    reason: str = "duplicate"


class BatchCreateResponse(BaseModel):
    """
    Result of POST /dives/batch.

    `skipped`/`skipped_count` are omitted from the JSON when nothing was
    skipped (the route serializes with exclude_none).
    """
    created: List[DiveResponse]
    created_count: int
    skipped: Optional[List[SkippedDive]] = None
    skipped_count: Optional[int] = None
