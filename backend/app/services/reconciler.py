"""
DiveLog Backend: Dive Update Reconciler
=======================================

Decides, for PUT /dives/{id}, which dive site the edited dive belongs to and
whether the edit collides with another dive.

    location_changed = stored lat/lng differ from the request's lat/lng
    date_changed     = stored calendar date differs from the request's

    changed   (either flag set):
        resolve the request's name/coordinates to a site, then run the
        update-path duplicate check excluding this dive. A hit aborts the
        update with a ConflictError carrying the request's date and location.

    unchanged (neither flag set):
        keep the stored site. If the dive has no site, or its site no longer
        exists, resolve from the request. The duplicate check is skipped:
        nothing that identifies the dive has moved, so no new collision can
        appear (the typical edit here touches notes or equipment only).
"""

import logging
from dataclasses import dataclass
from datetime import datetime

from app.exceptions import ConflictError
from app.models.dive import Dive
from app.models.dive_site import DiveSite
from app.repositories.dive_site_repository import DiveSiteRepository
from app.schemas.dive import DiveRequest
from app.services.dive_site_service import DiveSiteResolver
from app.services.duplicate_detector import DuplicateDiveDetector

logger = logging.getLogger(__name__)

BRANCH_CHANGED = "changed"
BRANCH_UNCHANGED = "unchanged"

DUPLICATE_DIVE_MESSAGE = "A dive already exists for this date and location"


def duplicate_dive_error(request: DiveRequest) -> ConflictError:
    return ConflictError(
        message=DUPLICATE_DIVE_MESSAGE,
        context={"date": request.date_time, "location": request.location},
    )


@dataclass(frozen=True)
class Reconciliation:
    site: DiveSite
    branch: str
    location_changed: bool
    date_changed: bool


class DiveUpdateReconciler:

    def __init__(
        self,
        resolver: DiveSiteResolver,
        detector: DuplicateDiveDetector,
        sites: DiveSiteRepository,
    ):
        self.resolver = resolver
        self.detector = detector
        self.sites = sites

    async def reconcile(
        self,
        user_id: int,
        current: Dive,
        request: DiveRequest,
        new_date_time: datetime,
    ) -> Reconciliation:
        location_changed = current.latitude != request.lat or current.longitude != request.lng
        date_changed = current.date_time.date() != new_date_time.date()

        if location_changed or date_changed:
            site = await self.resolver.resolve_or_create(request.location, request.lat, request.lng)
            if await self.detector.is_duplicate_for_update(
                user_id, request.lat, request.lng, new_date_time, exclude_dive_id=current.id,
            ):
                raise duplicate_dive_error(request)
            branch = BRANCH_CHANGED
        else:
            site = await self._stored_site(current)
            if site is None:
                site = await self.resolver.resolve_or_create(request.location, request.lat, request.lng)
            branch = BRANCH_UNCHANGED

        logger.info(
            "Reconciled dive %d: branch=%s location_changed=%s date_changed=%s site=%d",
            current.id, branch, location_changed, date_changed, site.id,
        )
        return Reconciliation(
            site=site,
            branch=branch,
            location_changed=location_changed,
            date_changed=date_changed,
        )

    async def _stored_site(self, current: Dive):
        if current.dive_site_id is None:
            return None
        site = await self.sites.get(current.dive_site_id)
        if site is None:
            logger.warning(
                "Dive %d references missing site %d; resolving from request",
                current.id, current.dive_site_id,
            )
        return site
