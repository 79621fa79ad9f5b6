"""
DiveLog Backend: Dive Service
=============================

What:  Business logic behind /api/v1/dives: list, create, batch create,
       update and delete.
How:   Composes the site resolver, the duplicate detector and the update
       reconciler over repositories that share one AsyncSession.
Who:   Built per request by app.routes.deps; tests build it directly on an
       in-memory SQLite session.

Create Flow:
    ┌─────────┐    ┌──────────────┐    ┌──────────────┐    ┌──────────┐
    │  parse  │───▶│ resolve site │───▶│  duplicate?  │───▶│  insert  │
    │ datetime│    │ (name, geo)  │    │ (user, site, │    │   dive   │
    └─────────┘    └──────────────┘    │     day)     │    └──────────┘
                                       └──────┬───────┘
                                              │ yes
                                              ▼
                                        ConflictError (409)

Responses echo the request's location/lat/lng, so a dive logged as
"blue hole" still shows "blue hole" even when it was filed under an
existing "Blue Hole" site.
"""

import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.exceptions import NotFoundError, ValidationError
from app.repositories.dive_repository import DiveRepository
from app.repositories.dive_site_repository import DiveSiteRepository
from app.schemas.dive import BatchCreateResponse, DiveRequest, DiveResponse, SkippedDive
from app.services.dive_site_service import DiveSiteResolver
from app.services.duplicate_detector import DuplicateDiveDetector
from app.services.reconciler import DiveUpdateReconciler, duplicate_dive_error
from app.utils.dates import parse_datetime

logger = logging.getLogger(__name__)


class DiveService:
    """
    Dive operations for one request.

    Collaborators are injectable for tests; by default they are all built on
    the two repositories passed in.
    """

    def __init__(
        self,
        dives: DiveRepository,
        sites: DiveSiteRepository,
        resolver: Optional[DiveSiteResolver] = None,
        detector: Optional[DuplicateDiveDetector] = None,
        reconciler: Optional[DiveUpdateReconciler] = None,
        strict_datetimes: Optional[bool] = None,
    ):
        self.dives = dives
        self.sites = sites
        self.resolver = resolver or DiveSiteResolver(sites)
        self.detector = detector or DuplicateDiveDetector(dives)
        self.reconciler = reconciler or DiveUpdateReconciler(self.resolver, self.detector, sites)
        self.strict_datetimes = (
            settings.strict_datetime_parsing if strict_datetimes is None else strict_datetimes
        )

    @classmethod
    def for_session(cls, session: AsyncSession) -> "DiveService":
        return cls(DiveRepository(session), DiveSiteRepository(session))

    def _parse(self, value: str) -> datetime:
        return parse_datetime(value, strict=self.strict_datetimes)

    # ── Read ──────────────────────────────────────────────────────────────

    async def list_dives(self, user_id: int) -> List[DiveResponse]:
        """
        The user's dives, newest first. Location and coordinates come from
        the linked site when there is one, else from the dive row itself.
        """
        rows = await self.dives.list_for_user(user_id)
        return [
            DiveResponse.from_dive(
                dive,
                location=site.name if site else None,
                lat=site.latitude if site else None,
                lng=site.longitude if site else None,
            )
            for dive, site in rows
        ]

    # ── Create ────────────────────────────────────────────────────────────

    async def create_dive(self, user_id: int, request: DiveRequest) -> DiveResponse:
        """
        Raises:
            ConflictError: the user already has a dive at this site on this date
        """
        date_time = self._parse(request.date_time)
        site = await self.resolver.resolve_or_create(request.location, request.lat, request.lng)

        if await self.detector.is_duplicate(user_id, site.id, date_time):
            logger.info(
                "Rejected duplicate dive for user %d at site %d on %s",
                user_id, site.id, date_time.date().isoformat(),
            )
            raise duplicate_dive_error(request)

        dive = await self.dives.insert(user_id, site.id, date_time, request.to_document())
        logger.info("Created dive %d for user %d at site %d", dive.id, user_id, site.id)
        return DiveResponse.from_dive(dive, location=request.location, lat=request.lat, lng=request.lng)

    async def create_dives_batch(
        self, user_id: int, requests: List[DiveRequest]
    ) -> BatchCreateResponse:
        """
        Import many dives at once.

        Duplicates (against stored dives or earlier entries of the same
        batch) are skipped and reported, not treated as errors. Any other
        failure rolls back every row of the batch.
        """
        if not requests:
            raise ValidationError(message="no dives provided", field="dives")

        created: List[DiveResponse] = []
        skipped: List[SkippedDive] = []

        async with self.dives.atomic():
            for request in requests:
                date_time = self._parse(request.date_time)
                site = await self.resolver.resolve_or_create(
                    request.location, request.lat, request.lng
                )
                if await self.detector.is_duplicate(user_id, site.id, date_time):
                    skipped.append(SkippedDive(date=request.date_time, location=request.location))
                    continue

                dive = await self.dives.insert(user_id, site.id, date_time, request.to_document())
                created.append(
                    DiveResponse.from_dive(
                        dive, location=request.location, lat=request.lat, lng=request.lng
                    )
                )

        logger.info(
            "Batch for user %d: %d created, %d skipped",
            user_id, len(created), len(skipped),
        )
        return BatchCreateResponse(
            created=created,
            created_count=len(created),
            skipped=skipped or None,
            skipped_count=len(skipped) if skipped else None,
        )

    # ── Update / Delete ───────────────────────────────────────────────────

    async def update_dive(self, user_id: int, dive_id: int, request: DiveRequest) -> DiveResponse:
        """
        Raises:
            NotFoundError: no dive with this id belongs to the user
            ConflictError: the edit moves the dive onto another dive's day and place
        """
        current = await self.dives.get_for_user(dive_id, user_id)
        if current is None:
            raise NotFoundError(resource="dive", resource_id=dive_id)

        date_time = self._parse(request.date_time)
        outcome = await self.reconciler.reconcile(user_id, current, request, date_time)

        dive = await self.dives.update(current, outcome.site.id, date_time, request.to_document())
        return DiveResponse.from_dive(dive, location=request.location, lat=request.lat, lng=request.lng)

    async def delete_dive(self, user_id: int, dive_id: int) -> None:
        if await self.dives.delete(dive_id, user_id) == 0:
            raise NotFoundError(resource="dive", resource_id=dive_id)
        logger.info("Deleted dive %d of user %d", dive_id, user_id)
