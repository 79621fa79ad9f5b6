"""
DiveLog Backend: DiveSite SQLAlchemy Model
==========================================

What:  ORM model for the `dive_sites` table: canonical named locations.
Who:   DiveSiteRepository (all reads/writes), Alembic (schema).

Table Design Rationale:
    - No unique constraint on name: two distinct sites may share a name
      when they are more than 100 m apart. Sameness is decided in code by
      name plus distance, not by the database.
    - Index on lower(name): every resolution starts with a case-insensitive
      name lookup.
    - Rows are never mutated by dive creation; only the explicit site
      update endpoint changes them.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Float, Index, Integer, String, Text, func, text
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class DiveSite(Base):
    __tablename__ = "dive_sites"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    # Decimal degrees
    latitude: Mapped[float] = mapped_column(Float, nullable=False)
    longitude: Mapped[float] = mapped_column(Float, nullable=False)

    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True, default=None)

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

    def __repr__(self) -> str:
        return (
            f"<DiveSite(id={self.id}, name='{self.name}', "
            f"lat={self.latitude}, lon={self.longitude})>"
        )


# Functional index: declared after the class so it can reference the mapped column.
Index("idx_dive_sites_name_lower", func.lower(DiveSite.name))
