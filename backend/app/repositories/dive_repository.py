"""
DiveLog Backend: Dive Repository
================================

What:  SQL for the `dives` table, including the two counting queries the
       duplicate detector is built on.

Calendar-date matching:
    "Same day" is expressed as a half-open range on dive_datetime,
    [midnight, next midnight), rather than DATE(dive_datetime) = :day. The
    range form is portable between PostgreSQL and SQLite and can use the
    (user_id, dive_datetime) index.
"""

import logging
from contextlib import asynccontextmanager
from datetime import date, datetime, time, timedelta
from typing import Any, AsyncIterator, Dict, List, Optional, Tuple

from sqlalchemy import and_, delete, func, or_, select

from app.models.dive import Dive
from app.models.dive_site import DiveSite
from app.repositories.base import Repository

logger = logging.getLogger(__name__)


def day_bounds(day: date) -> Tuple[datetime, datetime]:
    start = datetime.combine(day, time.min)
    return start, start + timedelta(days=1)


class DiveRepository(Repository):

    @asynccontextmanager
    async def atomic(self) -> AsyncIterator[None]:
        """
        All-or-nothing block: every write made inside it is rolled back if
        the block raises. Used by batch creation.
        """
        try:
            yield
            async with self._storage("atomic"):
                await self.session.flush()
        except Exception:
            await self.session.rollback()
            raise

    # ── Duplicate Queries ─────────────────────────────────────────────────

    async def count_matching(self, user_id: int, dive_site_id: int, day: date) -> int:
        """Dives of `user_id` at `dive_site_id` on calendar date `day`."""
        start, end = day_bounds(day)
        async with self._storage("count_matching"):
            result = await self.session.execute(
                select(func.count(Dive.id)).where(
                    Dive.user_id == user_id,
                    Dive.dive_site_id == dive_site_id,
                    Dive.date_time >= start,
                    Dive.date_time < end,
                )
            )
            return result.scalar_one()

    async def count_matching_by_coords(
        self,
        user_id: int,
        latitude: float,
        longitude: float,
        day: date,
        exclude_dive_id: int,
        tolerance: float,
    ) -> int:
        """
        Dives of `user_id` on calendar date `day`, other than `exclude_dive_id`,
        whose own coordinates or whose site's coordinates lie within
        `tolerance` degrees on both axes. Missing dive coordinates count as 0.
        """
        start, end = day_bounds(day)
        own_coords_match = and_(
            func.abs(func.coalesce(Dive.latitude, 0.0) - latitude) < tolerance,
            func.abs(func.coalesce(Dive.longitude, 0.0) - longitude) < tolerance,
        )
        site_coords_match = and_(
            func.abs(DiveSite.latitude - latitude) < tolerance,
            func.abs(DiveSite.longitude - longitude) < tolerance,
        )
        async with self._storage("count_matching_by_coords"):
            result = await self.session.execute(
                select(func.count(Dive.id))
                .select_from(Dive)
                .outerjoin(DiveSite, Dive.dive_site_id == DiveSite.id)
                .where(
                    Dive.user_id == user_id,
                    Dive.id != exclude_dive_id,
                    Dive.date_time >= start,
                    Dive.date_time < end,
                    or_(own_coords_match, site_coords_match),
                )
            )
            return result.scalar_one()

    # ── CRUD ──────────────────────────────────────────────────────────────

    async def insert(
        self,
        user_id: int,
        dive_site_id: Optional[int],
        date_time: datetime,
        columns: Dict[str, Any],
    ) -> Dive:
        async with self._storage("insert"):
            now = datetime.now()
            dive = Dive(
                user_id=user_id,
                dive_site_id=dive_site_id,
                date_time=date_time,
                created_at=now,
                updated_at=now,
                **columns,
            )
            self.session.add(dive)
            await self.session.flush()
            return dive

    async def get_for_user(self, dive_id: int, user_id: int) -> Optional[Dive]:
        async with self._storage("get_for_user"):
            result = await self.session.execute(
                select(Dive).where(Dive.id == dive_id, Dive.user_id == user_id)
            )
            return result.scalar_one_or_none()

    async def update(
        self,
        dive: Dive,
        dive_site_id: Optional[int],
        date_time: datetime,
        columns: Dict[str, Any],
    ) -> Dive:
        """Overwrite every column of `dive` from the request and bump updated_at."""
        async with self._storage("update"):
            for key, value in columns.items():
                setattr(dive, key, value)
            dive.dive_site_id = dive_site_id
            dive.date_time = date_time
            dive.updated_at = datetime.now()
            await self.session.flush()
            return dive

    async def delete(self, dive_id: int, user_id: int) -> int:
        async with self._storage("delete"):
            result = await self.session.execute(
                delete(Dive).where(Dive.id == dive_id, Dive.user_id == user_id)
            )
            return result.rowcount

    async def list_for_user(self, user_id: int) -> List[Tuple[Dive, Optional[DiveSite]]]:
        """The user's dives, newest first, each paired with its site (or None)."""
        async with self._storage("list_for_user"):
            result = await self.session.execute(
                select(Dive, DiveSite)
                .outerjoin(DiveSite, Dive.dive_site_id == DiveSite.id)
                .where(Dive.user_id == user_id)
                .order_by(Dive.date_time.desc(), Dive.created_at.desc(), Dive.id.desc())
            )
            return [(dive, site) for dive, site in result.all()]
