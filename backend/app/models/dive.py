"""
DiveLog Backend: Dive SQLAlchemy Model
======================================

What:  ORM model for the `dives` table: one logged dive of one user.
Who:   DiveRepository (all reads/writes), Alembic (schema).

Column notes:
    - dive_datetime is TIMESTAMP WITHOUT TIME ZONE: dives are logged in the
      diver's local wall-clock time and must not shift with the server zone.
    - latitude/longitude/location hold what the user typed, even when the
      dive resolves to an existing site with a different spelling or a
      slightly different position. dive_site_id carries the canonical site.
    - samples, equipment, conditions and safety_stops are free-form JSON
      documents (JSONB on PostgreSQL). Their shape is enforced by the
      request schemas, not by the database.

Indexes:
    (user_id, dive_datetime): every duplicate check and the dive list filter
    by user and order or range-scan by date.
"""

from datetime import datetime
from typing import Any, Optional

from sqlalchemy import JSON, DateTime, Float, ForeignKey, Index, Integer, String, Text, text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base

# Plain JSON on SQLite, JSONB on PostgreSQL
JSONDocument = JSON().with_variant(JSONB(), "postgresql")


class Dive(Base):
    __tablename__ = "dives"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, nullable=False)

    # Nullable: rows written before site resolution existed have no site.
    dive_site_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("dive_sites.id"),
        nullable=True,
    )

    date_time: Mapped[datetime] = mapped_column("dive_datetime", DateTime, nullable=False)

    max_depth: Mapped[float] = mapped_column(Float, nullable=False)  # metres
    duration: Mapped[int] = mapped_column(Integer, nullable=False)  # minutes
    buddy: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    water_temperature: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    visibility: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    latitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    longitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    location: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    samples: Mapped[Optional[Any]] = mapped_column(JSONDocument, nullable=True)
    equipment: Mapped[Optional[Any]] = mapped_column(JSONDocument, nullable=True)
    conditions: Mapped[Optional[Any]] = mapped_column(JSONDocument, nullable=True)
    dive_type: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    rating: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    safety_stops: Mapped[Optional[Any]] = mapped_column(JSONDocument, nullable=True)

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

    __table_args__ = (
        Index("idx_dives_user_datetime", "user_id", "dive_datetime"),
        Index("idx_dives_dive_site_id", "dive_site_id"),
    )

    def __repr__(self) -> str:
        return (
            f"<Dive(id={self.id}, user_id={self.user_id}, "
            f"site={self.dive_site_id}, date_time='{self.date_time}')>"
        )
