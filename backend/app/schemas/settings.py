"""
DiveLog Backend: User Settings Schemas
======================================

The settings screen of the frontend reads and writes a nested camelCase
document:

    {
        "unitPreference": "metric",
        "units": {"depth": "meters", "temperature": "celsius", ...},
        "preferences": {"dateFormat": "ISO", "timeFormat": "24h", ...},
        "dive": {"showBuddyReminders": true, "maxDepthWarning": 40, ...}
    }

The update request mirrors it with every field optional; only the fields
present in the body are applied.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = {"alias_generator": to_camel, "populate_by_name": True}


# ── Response ──────────────────────────────────────────────────────────────


class UnitSettings(CamelModel):
    depth: str
    temperature: str
    distance: str
    weight: str
    pressure: str
    volume: str


class DisplayPreferences(CamelModel):
    date_format: str
    time_format: str
    default_visibility: str


class DivePreferences(CamelModel):
    show_buddy_reminders: bool
    auto_calculate_nitrox: bool
    default_gas_mix: str
    max_depth_warning: int


class SettingsResponse(CamelModel):
    unit_preference: str
    units: UnitSettings
    preferences: DisplayPreferences
    dive: DivePreferences

    @classmethod
    def from_model(cls, row: Any) -> "SettingsResponse":
        return cls(
            unit_preference=row.unit_preference,
            units=UnitSettings(
                depth=row.depth_unit,
                temperature=row.temperature_unit,
                distance=row.distance_unit,
                weight=row.weight_unit,
                pressure=row.pressure_unit,
                volume=row.volume_unit,
            ),
            preferences=DisplayPreferences(
                date_format=row.date_format,
                time_format=row.time_format,
                default_visibility=row.default_visibility,
            ),
            dive=DivePreferences(
                show_buddy_reminders=row.show_buddy_reminders,
                auto_calculate_nitrox=row.auto_calculate_nitrox,
                default_gas_mix=row.default_gas_mix,
                max_depth_warning=row.max_depth_warning,
            ),
        )


# ── Update Request ────────────────────────────────────────────────────────


class UnitSettingsUpdate(CamelModel):
    depth: Optional[str] = None
    temperature: Optional[str] = None
    distance: Optional[str] = None
    weight: Optional[str] = None
    pressure: Optional[str] = None
    volume: Optional[str] = None


class DisplayPreferencesUpdate(CamelModel):
    date_format: Optional[str] = None
    time_format: Optional[str] = None
    default_visibility: Optional[str] = None


class DivePreferencesUpdate(CamelModel):
    show_buddy_reminders: Optional[bool] = None
    auto_calculate_nitrox: Optional[bool] = None
    default_gas_mix: Optional[str] = None
    max_depth_warning: Optional[int] = Field(default=None, ge=0)


class SettingsUpdateRequest(CamelModel):
    unit_preference: Optional[str] = None
    units: Optional[UnitSettingsUpdate] = None
    preferences: Optional[DisplayPreferencesUpdate] = None
    dive: Optional[DivePreferencesUpdate] = None

    def to_columns(self) -> Dict[str, Any]:
        """Flatten the fields the client actually sent into UserSettings column values."""
        columns: Dict[str, Any] = {}
        if self.unit_preference is not None:
            columns["unit_preference"] = self.unit_preference
        if self.units is not None:
            for key, value in self.units.model_dump(exclude_none=True).items():
                columns[f"{key}_unit"] = value
        if self.preferences is not None:
            columns.update(self.preferences.model_dump(exclude_none=True))
        if self.dive is not None:
            columns.update(self.dive.model_dump(exclude_none=True))
        return columns
