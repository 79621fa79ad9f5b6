"""
DiveLog Backend: UserSettings SQLAlchemy Model
==============================================

One row per user, created lazily the first time the user's settings are
read. Column defaults below are the application defaults.
"""

from datetime import datetime
from typing import Any, Dict

from sqlalchemy import Boolean, DateTime, Integer, String, text
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base

DEFAULT_SETTINGS = {
    "unit_preference": "metric",
    "depth_unit": "meters",
    "temperature_unit": "celsius",
    "distance_unit": "kilometers",
    "weight_unit": "kilograms",
    "pressure_unit": "bar",
    "volume_unit": "liters",
    "date_format": "ISO",
    "time_format": "24h",
    "default_visibility": "private",
    "show_buddy_reminders": True,
    "auto_calculate_nitrox": False,
    "default_gas_mix": "Air (21% O₂)",
    "max_depth_warning": 40,
}


class UserSettings(Base):
    __tablename__ = "user_settings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, nullable=False, unique=True)

    # ── Units ─────────────────────────────────────────────────────────────
    unit_preference: Mapped[str] = mapped_column(String(20), nullable=False)
    depth_unit: Mapped[str] = mapped_column(String(20), nullable=False)
    temperature_unit: Mapped[str] = mapped_column(String(20), nullable=False)
    distance_unit: Mapped[str] = mapped_column(String(20), nullable=False)
    weight_unit: Mapped[str] = mapped_column(String(20), nullable=False)
    pressure_unit: Mapped[str] = mapped_column(String(20), nullable=False)
    volume_unit: Mapped[str] = mapped_column(String(20), nullable=False)

    # ── Display ───────────────────────────────────────────────────────────
    date_format: Mapped[str] = mapped_column(String(20), nullable=False)
    time_format: Mapped[str] = mapped_column(String(20), nullable=False)
    default_visibility: Mapped[str] = mapped_column(String(20), nullable=False)

    # ── Diving ────────────────────────────────────────────────────────────
    show_buddy_reminders: Mapped[bool] = mapped_column(Boolean, nullable=False)
    auto_calculate_nitrox: Mapped[bool] = mapped_column(Boolean, nullable=False)
    default_gas_mix: Mapped[str] = mapped_column(String(100), nullable=False)
    max_depth_warning: Mapped[int] = mapped_column(Integer, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        default=datetime.now,
        server_default=text("CURRENT_TIMESTAMP"),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        default=datetime.now,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    @staticmethod
    def default_values(user_id: int) -> Dict[str, Any]:
        """Column values of a fresh row for `user_id`."""
        now = datetime.now()
        return {"user_id": user_id, **DEFAULT_SETTINGS, "created_at": now, "updated_at": now}

    def __repr__(self) -> str:
        return f"<UserSettings(user_id={self.user_id}, units='{self.unit_preference}')>"
