"""
DiveLog Backend: Duplicate Dive Detection
=========================================

A dive is identified by (user, calendar date, location); time of day never
distinguishes two dives.

Create path:
    Same user, same canonical site id, same calendar date.

Update path:
    Same user, same calendar date, other than the dive being edited, and
    within ±0.001° on latitude and on longitude (checked separately, so the
    window is a box, not a circle) of either the other dive's own
    coordinates or its site's coordinates. Coordinates are used instead of
    the site id because a stored site link can be stale while the request's
    coordinates are authoritative.
"""

import logging
from datetime import datetime

from app.repositories.dive_repository import DiveRepository

logger = logging.getLogger(__name__)

COORDINATE_TOLERANCE_DEG = 0.001


class DuplicateDiveDetector:

    def __init__(self, dives: DiveRepository):
        self.dives = dives

    async def is_duplicate(self, user_id: int, dive_site_id: int, date_time: datetime) -> bool:
        count = await self.dives.count_matching(user_id, dive_site_id, date_time.date())
        return count > 0

    async def is_duplicate_for_update(
        self,
        user_id: int,
        latitude: float,
        longitude: float,
        date_time: datetime,
        exclude_dive_id: int,
    ) -> bool:
        count = await self.dives.count_matching_by_coords(
            user_id,
            latitude,
            longitude,
            date_time.date(),
            exclude_dive_id,
            tolerance=COORDINATE_TOLERANCE_DEG,
        )
        if count:
            logger.info(
                "Update of dive %d collides with %d dive(s) of user %d on %s",
                exclude_dive_id, count, user_id, date_time.date().isoformat(),
            )
        return count > 0
