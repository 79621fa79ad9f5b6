"""
DiveLog Backend: Dive Site Repository
=====================================

SQL for the `dive_sites` table. Distance logic does not live here: callers
get every case-insensitive name match and decide proximity in Python.
"""

import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy import delete, func, select

from app.models.dive import Dive
from app.models.dive_site import DiveSite
from app.repositories.base import Repository

logger = logging.getLogger(__name__)

SEARCH_LIMIT = 10


def _like_pattern(term: str) -> str:
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class DiveSiteRepository(Repository):

    async def lock_name(self, name: str) -> None:
        """
        Serialize resolutions of the same (lowercased) name until the
        transaction ends. PostgreSQL only; a no-op on other backends.
        """
        if self.dialect_name != "postgresql":
            return
        async with self._storage("lock_name"):
            await self.session.execute(
                select(func.pg_advisory_xact_lock(func.hashtext(name.strip().lower())))
            )

    async def find_by_name_ci(self, name: str) -> List[DiveSite]:
        """All sites whose lowercased name equals `name` lowercased, lowest id first."""
        async with self._storage("find_by_name_ci"):
            result = await self.session.execute(
                select(DiveSite)
                .where(func.lower(DiveSite.name) == name.lower())
                .order_by(DiveSite.id)
            )
            return list(result.scalars().all())

    async def get(self, site_id: int) -> Optional[DiveSite]:
        async with self._storage("get"):
            return await self.session.get(DiveSite, site_id)

    async def insert(
        self,
        name: str,
        latitude: float,
        longitude: float,
        description: Optional[str] = None,
    ) -> DiveSite:
        async with self._storage("insert"):
            now = datetime.now()
            site = DiveSite(
                name=name,
                latitude=latitude,
                longitude=longitude,
                description=description,
                created_at=now,
                updated_at=now,
            )
            self.session.add(site)
            await self.session.flush()
            logger.info("Created dive site %d '%s' at (%.5f, %.5f)", site.id, name, latitude, longitude)
            return site

    async def update(
        self,
        site_id: int,
        name: str,
        latitude: float,
        longitude: float,
        description: Optional[str],
    ) -> Optional[DiveSite]:
        """Overwrite a site's fields. Returns None when the id does not exist."""
        async with self._storage("update"):
            site = await self.session.get(DiveSite, site_id)
            if site is None:
                return None
            site.name = name
            site.latitude = latitude
            site.longitude = longitude
            site.description = description
            site.updated_at = datetime.now()
            await self.session.flush()
            return site

    async def delete(self, site_id: int) -> int:
        """Delete a site row; returns the number of rows removed."""
        async with self._storage("delete"):
            result = await self.session.execute(
                delete(DiveSite).where(DiveSite.id == site_id)
            )
            return result.rowcount

    async def count_dives_for_site(self, site_id: int) -> int:
        async with self._storage("count_dives_for_site"):
            result = await self.session.execute(
                select(func.count(Dive.id)).where(Dive.dive_site_id == site_id)
            )
            return result.scalar_one()

    async def list_all(self) -> List[DiveSite]:
        async with self._storage("list_all"):
            result = await self.session.execute(
                select(DiveSite).order_by(DiveSite.name, DiveSite.id)
            )
            return list(result.scalars().all())

    async def search(self, term: str, limit: int = SEARCH_LIMIT) -> List[DiveSite]:
        """Case-insensitive substring search on the site name."""
        async with self._storage("search"):
            result = await self.session.execute(
                select(DiveSite)
                .where(DiveSite.name.ilike(_like_pattern(term), escape="\\"))
                .order_by(DiveSite.name, DiveSite.id)
                .limit(limit)
            )
            return list(result.scalars().all())
