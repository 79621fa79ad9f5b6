"""
DiveLog Backend: Duplicate Detector Tests
=========================================

What:  Both duplicate rules against a real (in-memory SQLite) database.

What we test:
    ✅ Create path: same user, site and calendar date; time of day ignored
    ✅ Create path: other user, other site or other date are not duplicates
    ✅ Update path: the edited dive never collides with itself
    ✅ Update path: ±0.001° box on the dive's own or its site's coordinates
    ✅ Update path: missing dive coordinates compare as 0
"""

from datetime import datetime

import pytest

from app.repositories.dive_repository import DiveRepository, day_bounds
from app.repositories.dive_site_repository import DiveSiteRepository
from app.services.duplicate_detector import DuplicateDiveDetector


def columns(lat=None, lng=None, location=None):
    return {
        "max_depth": 18.0,
        "duration": 45,
        "latitude": lat,
        "longitude": lng,
        "location": location,
    }


class TestDayBounds:

    def test_half_open_day_range(self):
        start, end = day_bounds(datetime(2024, 3, 1, 23, 59).date())
        assert start == datetime(2024, 3, 1, 0, 0)
        assert end == datetime(2024, 3, 2, 0, 0)


class TestCreatePath:

    @pytest.fixture
    def repos(self, db_session):
        return DiveRepository(db_session), DiveSiteRepository(db_session)

    @pytest.mark.asyncio
    async def test_same_user_site_and_day_is_duplicate(self, repos):
        dives, sites = repos
        detector = DuplicateDiveDetector(dives)
        site = await sites.insert("Blue Hole", 24.4037, -87.5340)

        assert await detector.is_duplicate(7, site.id, datetime(2024, 3, 1, 9, 0)) is False

        await dives.insert(7, site.id, datetime(2024, 3, 1, 9, 0), columns())

        # Afternoon dive at the same site on the same day still collides
        assert await detector.is_duplicate(7, site.id, datetime(2024, 3, 1, 15, 30)) is True
        assert await detector.is_duplicate(7, site.id, datetime(2024, 3, 1, 0, 0)) is True

    @pytest.mark.asyncio
    async def test_day_boundaries(self, repos):
        dives, sites = repos
        detector = DuplicateDiveDetector(dives)
        site = await sites.insert("Blue Hole", 24.4037, -87.5340)
        await dives.insert(7, site.id, datetime(2024, 3, 1, 23, 59, 59), columns())

        assert await detector.is_duplicate(7, site.id, datetime(2024, 3, 2, 0, 0)) is False
        assert await detector.is_duplicate(7, site.id, datetime(2024, 2, 29, 23, 59)) is False

    @pytest.mark.asyncio
    async def test_other_user_site_or_date_is_not_duplicate(self, repos):
        dives, sites = repos
        detector = DuplicateDiveDetector(dives)
        site = await sites.insert("Blue Hole", 24.4037, -87.5340)
        other_site = await sites.insert("The Arch", 24.5000, -87.6000)
        await dives.insert(7, site.id, datetime(2024, 3, 1, 9, 0), columns())

        assert await detector.is_duplicate(8, site.id, datetime(2024, 3, 1, 9, 0)) is False
        assert await detector.is_duplicate(7, other_site.id, datetime(2024, 3, 1, 9, 0)) is False
        assert await detector.is_duplicate(7, site.id, datetime(2024, 3, 2, 9, 0)) is False


class TestUpdatePath:

    @pytest.fixture
    def repos(self, db_session):
        return DiveRepository(db_session), DiveSiteRepository(db_session)

    @pytest.mark.asyncio
    async def test_excludes_the_dive_being_edited(self, repos):
        dives, sites = repos
        detector = DuplicateDiveDetector(dives)
        site = await sites.insert("Blue Hole", 24.4037, -87.5340)
        dive = await dives.insert(7, site.id, datetime(2024, 3, 1, 9, 0), columns(24.4037, -87.5340))

        assert await detector.is_duplicate_for_update(
            7, 24.4037, -87.5340, datetime(2024, 3, 1, 11, 0), exclude_dive_id=dive.id
        ) is False

    @pytest.mark.asyncio
    async def test_other_dive_within_tolerance_is_duplicate(self, repos):
        dives, sites = repos
        detector = DuplicateDiveDetector(dives)
        first = await dives.insert(7, None, datetime(2024, 3, 1, 9, 0), columns(24.4037, -87.5340))
        second = await dives.insert(7, None, datetime(2024, 3, 1, 14, 0), columns(24.5000, -87.6000))

        # Moving the second dive 0.0005° from the first collides with it
        assert await detector.is_duplicate_for_update(
            7, 24.4042, -87.5335, datetime(2024, 3, 1, 14, 0), exclude_dive_id=second.id
        ) is True
        # ...but not for a different user
        assert await detector.is_duplicate_for_update(
            8, 24.4042, -87.5335, datetime(2024, 3, 1, 14, 0), exclude_dive_id=second.id
        ) is False
        assert first.id != second.id

    @pytest.mark.asyncio
    async def test_tolerance_is_a_box_per_axis(self, repos):
        dives, _ = repos
        detector = DuplicateDiveDetector(dives)
        await dives.insert(7, None, datetime(2024, 3, 1, 9, 0), columns(10.0, 20.0))

        assert await detector.is_duplicate_for_update(
            7, 10.0009, 20.0009, datetime(2024, 3, 1, 12, 0), exclude_dive_id=999
        ) is True
        assert await detector.is_duplicate_for_update(
            7, 10.0015, 20.0, datetime(2024, 3, 1, 12, 0), exclude_dive_id=999
        ) is False
        assert await detector.is_duplicate_for_update(
            7, 10.0, 20.0015, datetime(2024, 3, 1, 12, 0), exclude_dive_id=999
        ) is False

    @pytest.mark.asyncio
    async def test_site_coordinates_also_match(self, repos):
        dives, sites = repos
        detector = DuplicateDiveDetector(dives)
        site = await sites.insert("Blue Hole", 24.4037, -87.5340)
        # The dive's own coordinates are far from its site
        await dives.insert(7, site.id, datetime(2024, 3, 1, 9, 0), columns(30.0, 30.0))

        assert await detector.is_duplicate_for_update(
            7, 24.4037, -87.5340, datetime(2024, 3, 1, 12, 0), exclude_dive_id=999
        ) is True

    @pytest.mark.asyncio
    async def test_missing_coordinates_compare_as_zero(self, repos):
        dives, _ = repos
        detector = DuplicateDiveDetector(dives)
        await dives.insert(7, None, datetime(2024, 3, 1, 9, 0), columns())

        assert await detector.is_duplicate_for_update(
            7, 0.0005, -0.0005, datetime(2024, 3, 1, 12, 0), exclude_dive_id=999
        ) is True
        assert await detector.is_duplicate_for_update(
            7, 1.0, 1.0, datetime(2024, 3, 1, 12, 0), exclude_dive_id=999
        ) is False

    @pytest.mark.asyncio
    async def test_other_day_is_not_duplicate(self, repos):
        dives, _ = repos
        detector = DuplicateDiveDetector(dives)
        await dives.insert(7, None, datetime(2024, 3, 1, 9, 0), columns(10.0, 20.0))

        assert await detector.is_duplicate_for_update(
            7, 10.0, 20.0, datetime(2024, 3, 2, 9, 0), exclude_dive_id=999
        ) is False
