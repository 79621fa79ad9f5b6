"""
DiveLog Backend: Dive Site Resolution and Management
====================================================

What:  Maps a (name, coordinates) pair to one canonical dive site, and
       implements the explicit dive-site endpoints on top of the same rule.
Why:   Users type site names freely ("Blue Hole", "blue hole") and their GPS
       fixes wobble; dives at the same place must land on the same site row
       so duplicate detection and statistics work.

Sameness Rule:
    Two sites are the same when their names are equal after lowercasing
    AND they are less than 100 m apart (haversine, app.utils.geo).
    Same name further apart is a different site ("Blue Hole" in Belize and
    "Blue Hole" in Dahab).

Two Entry Points, Two Tolerances:
    resolve_or_create():  used implicitly by dive create/update. Reusing an
                          existing site is the expected outcome.
    create_named_site():  POST /dive-sites. Reusing an existing site means
                          the user is creating something that already
                          exists, so it is a conflict.

Ambiguous Names:
    When several rows share a lowercased name, the nearest one is the
    candidate, ties going to the lowest id. The result does not depend on
    query order.
"""

import logging
from typing import List, Optional, Sequence, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import ConflictError, NotFoundError, ValidationError
from app.models.dive_site import DiveSite
from app.repositories.dive_site_repository import DiveSiteRepository
from app.schemas.dive_site import DiveSiteRequest
from app.utils.geo import SITE_MATCH_RADIUS_KM, haversine_km, is_same_site

logger = logging.getLogger(__name__)


def nearest_site(
    candidates: Sequence[DiveSite],
    latitude: float,
    longitude: float,
) -> Optional[Tuple[DiveSite, float]]:
    """The candidate closest to the point with its distance in km, or None."""
    best: Optional[Tuple[DiveSite, float]] = None
    for site in candidates:
        distance = haversine_km(site.latitude, site.longitude, latitude, longitude)
        if best is None or (distance, site.id) < (best[1], best[0].id):
            best = (site, distance)
    return best


class DiveSiteResolver:
    """
    Resolves free-text site names plus coordinates to canonical DiveSite rows.

    Never modifies an existing row; the only side effect is inserting a new
    site when nothing within 100 m carries the same name.
    """

    def __init__(self, sites: DiveSiteRepository):
        self.sites = sites

    async def resolve(
        self,
        name: str,
        latitude: float,
        longitude: float,
        description: Optional[str] = None,
    ) -> Tuple[DiveSite, bool]:
        """
        Returns (site, created). `description` is only used when a new row
        is inserted.
        """
        await self.sites.lock_name(name)

        candidates = await self.sites.find_by_name_ci(name)
        match = nearest_site(candidates, latitude, longitude)
        if match is not None:
            site, distance_km = match
            if distance_km < SITE_MATCH_RADIUS_KM:
                logger.debug(
                    "Resolved '%s' to existing site %d (%.1f m away)",
                    name, site.id, distance_km * 1000,
                )
                return site, False

        site = await self.sites.insert(name, latitude, longitude, description)
        return site, True

    async def resolve_or_create(self, name: str, latitude: float, longitude: float) -> DiveSite:
        site, _ = await self.resolve(name, latitude, longitude)
        return site


class DiveSiteService:
    """Business rules behind the /api/v1/dive-sites endpoints."""

    def __init__(self, sites: DiveSiteRepository, resolver: Optional[DiveSiteResolver] = None):
        self.sites = sites
        self.resolver = resolver or DiveSiteResolver(sites)

    @classmethod
    def for_session(cls, session: AsyncSession) -> "DiveSiteService":
        return cls(DiveSiteRepository(session))

    async def list_sites(self) -> List[DiveSite]:
        return await self.sites.list_all()

    async def search_sites(self, query: Optional[str]) -> List[DiveSite]:
        term = (query or "").strip()
        if not term:
            raise ValidationError(message="Search query is required", field="q")
        return await self.sites.search(term)

    async def get_site(self, site_id: int) -> DiveSite:
        site = await self.sites.get(site_id)
        if site is None:
            raise NotFoundError(resource="dive site", resource_id=site_id)
        return site

    async def create_named_site(self, request: DiveSiteRequest) -> DiveSite:
        site, created = await self.resolver.resolve(
            request.name,
            request.latitude,
            request.longitude,
            description=request.description,
        )
        if not created:
            raise ConflictError(
                message="A dive site with this name already exists at this location",
                context={"name": request.name, "existing_site_id": site.id},
            )
        return site

    async def update_site(self, site_id: int, request: DiveSiteRequest) -> DiveSite:
        """
        Overwrite a site. Fails with a conflict when a different site with the
        same name lies within 100 m of the new coordinates, and with not-found
        when `site_id` does not exist.
        """
        for other in await self.sites.find_by_name_ci(request.name):
            if other.id == site_id:
                continue
            if is_same_site(other.latitude, other.longitude, request.latitude, request.longitude):
                raise ConflictError(
                    message="A dive site with this name already exists at this location",
                    context={"name": request.name, "existing_site_id": other.id},
                )

        site = await self.sites.update(
            site_id,
            name=request.name,
            latitude=request.latitude,
            longitude=request.longitude,
            description=request.description,
        )
        if site is None:
            raise NotFoundError(resource="dive site", resource_id=site_id)
        logger.info("Updated dive site %d", site_id)
        return site

    async def delete_site(self, site_id: int) -> None:
        dive_count = await self.sites.count_dives_for_site(site_id)
        if dive_count > 0:
            raise ConflictError(
                message="Cannot delete a dive site that has dives recorded against it",
                context={"site_id": site_id, "dive_count": dive_count},
            )
        if await self.sites.delete(site_id) == 0:
            raise NotFoundError(resource="dive site", resource_id=site_id)
        logger.info("Deleted dive site %d", site_id)
