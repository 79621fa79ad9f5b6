"""
DiveLog Backend: Dive Service Tests
===================================

What:  DiveService end to end over an in-memory SQLite session.

What we test:
    ✅ Create: site reuse, response echo, duplicate rejection
    ✅ Batch: skipped duplicates (stored and in-batch), empty batch, atomicity
    ✅ Update: not-found across users, in-place edit, small move, conflict
    ✅ List: newest first, site values preferred over the dive's own
    ✅ Delete and datetime strictness
"""

from datetime import date, datetime

import pytest
from sqlalchemy import func, select

from app.exceptions import ConflictError, NotFoundError, StorageError, ValidationError
from app.models.dive import Dive
from app.models.dive_site import DiveSite
from app.repositories.dive_repository import DiveRepository
from app.repositories.dive_site_repository import DiveSiteRepository
from app.schemas.dive import DiveRequest
from app.services.dive_service import DiveService


async def count_rows(session, model) -> int:
    return (await session.execute(select(func.count(model.id)))).scalar_one()


@pytest.fixture
def service(db_session):
    return DiveService.for_session(db_session)


@pytest.fixture
def make_request(dive_payload):
    def _make(**overrides):
        return DiveRequest(**dive_payload(**overrides))
    return _make


class TestCreateDive:

    @pytest.mark.asyncio
    async def test_create_returns_request_values(self, service, make_request):
        response = await service.create_dive(7, make_request())

        assert response.id is not None
        assert response.user_id == 7
        assert response.dive_site_id is not None
        assert response.location == "Blue Hole"
        assert response.depth == 18.5
        assert response.date_time == datetime(2024, 3, 1, 10, 0)

    @pytest.mark.asyncio
    async def test_second_dive_same_place_same_day_conflicts(self, service, make_request, db_session):
        """User 7 logs Blue Hole in the morning, then 'blue hole' 15 m away that afternoon."""
        await service.create_dive(7, make_request())

        with pytest.raises(ConflictError) as exc_info:
            await service.create_dive(
                7,
                make_request(datetime="2024-03-01T15:00:00", location="blue hole", lat=24.4038, lng=-87.5341),
            )

        assert exc_info.value.context == {"date": "2024-03-01T15:00:00", "location": "blue hole"}
        assert await count_rows(db_session, Dive) == 1
        assert await count_rows(db_session, DiveSite) == 1

    @pytest.mark.asyncio
    async def test_other_user_or_other_day_is_allowed(self, service, make_request, db_session):
        first = await service.create_dive(7, make_request())
        other_user = await service.create_dive(8, make_request())
        next_day = await service.create_dive(7, make_request(datetime="2024-03-02T10:00:00"))

        assert other_user.dive_site_id == first.dive_site_id
        assert next_day.dive_site_id == first.dive_site_id
        assert await count_rows(db_session, Dive) == 3
        assert await count_rows(db_session, DiveSite) == 1

    @pytest.mark.asyncio
    async def test_response_echoes_request_spelling_on_reused_site(self, service, make_request):
        first = await service.create_dive(7, make_request())
        second = await service.create_dive(
            8, make_request(location="BLUE HOLE", lat=24.4038, lng=-87.5341)
        )

        assert second.dive_site_id == first.dive_site_id
        assert second.location == "BLUE HOLE"
        assert second.lat == 24.4038
        assert second.lng == -87.5341

    @pytest.mark.asyncio
    async def test_nested_documents_are_stored(self, service, make_request, db_session):
        response = await service.create_dive(
            7,
            make_request(
                samples=[{"time": 0, "depth": 0.0}, {"time": 60, "depth": 12.5}],
                safety_stops=[{"depth": 5.0, "duration": 3}],
                rating=4,
            ),
        )

        dive = await db_session.get(Dive, response.id)
        assert dive.samples == [{"time": 0, "depth": 0.0}, {"time": 60, "depth": 12.5}]
        assert dive.safety_stops == [{"depth": 5.0, "duration": 3}]
        assert dive.rating == 4


class TestDatetimeParsing:

    @pytest.mark.asyncio
    async def test_lenient_mode_falls_back_to_now(self, db_session, make_request):
        service = DiveService(
            DiveRepository(db_session), DiveSiteRepository(db_session), strict_datetimes=False
        )
        response = await service.create_dive(7, make_request(datetime="yesterday-ish"))
        assert response.date_time.date() == date.today()

    @pytest.mark.asyncio
    async def test_strict_mode_rejects_unparseable(self, db_session, make_request):
        service = DiveService(
            DiveRepository(db_session), DiveSiteRepository(db_session), strict_datetimes=True
        )
        with pytest.raises(ValidationError):
            await service.create_dive(7, make_request(datetime="yesterday-ish"))
        assert await count_rows(db_session, Dive) == 0


class TestBatchCreate:

    @pytest.mark.asyncio
    async def test_batch_creates_all_distinct_dives(self, service, make_request):
        result = await service.create_dives_batch(
            7,
            [
                make_request(),
                make_request(datetime="2024-03-02T10:00:00"),
                make_request(location="The Arch", lat=24.5000, lng=-87.6000),
            ],
        )

        assert result.created_count == 3
        assert len(result.created) == 3
        assert result.skipped is None
        assert result.skipped_count is None

    @pytest.mark.asyncio
    async def test_batch_skips_stored_and_in_batch_duplicates(self, service, make_request, db_session):
        await service.create_dive(7, make_request())

        result = await service.create_dives_batch(
            7,
            [
                make_request(datetime="2024-03-01T16:00:00"),
                make_request(datetime="2024-03-05T09:00:00"),
                make_request(datetime="2024-03-05T14:00:00", location="blue hole"),
            ],
        )

        assert result.created_count == 1
        assert result.skipped_count == 2
        assert [(s.date, s.location, s.reason) for s in result.skipped] == [
            ("2024-03-01T16:00:00", "Blue Hole", "duplicate"),
            ("2024-03-05T14:00:00", "blue hole", "duplicate"),
        ]
        assert await count_rows(db_session, Dive) == 2

    @pytest.mark.asyncio
    async def test_empty_batch_is_validation_error(self, service):
        with pytest.raises(ValidationError) as exc_info:
            await service.create_dives_batch(7, [])
        assert exc_info.value.message == "no dives provided"

    @pytest.mark.asyncio
    async def test_failure_mid_batch_creates_nothing(self, service, make_request, db_session):
        original_insert = service.dives.insert
        calls = 0

        async def flaky_insert(*args, **kwargs):
            nonlocal calls
            calls += 1
            if calls == 3:
                raise StorageError(context={"operation": "insert"})
            return await original_insert(*args, **kwargs)

        service.dives.insert = flaky_insert

        with pytest.raises(StorageError):
            await service.create_dives_batch(
                7,
                [
                    make_request(),
                    make_request(location="The Arch", lat=24.5000, lng=-87.6000),
                    make_request(location="Shark Point", lat=24.6000, lng=-87.7000),
                ],
            )

        assert await count_rows(db_session, Dive) == 0
        assert await count_rows(db_session, DiveSite) == 0


class TestUpdateDive:

    @pytest.mark.asyncio
    async def test_other_users_dive_is_not_found(self, service, make_request):
        created = await service.create_dive(7, make_request())

        with pytest.raises(NotFoundError):
            await service.update_dive(8, created.id, make_request())

    @pytest.mark.asyncio
    async def test_missing_dive_is_not_found(self, service, make_request):
        with pytest.raises(NotFoundError):
            await service.update_dive(7, 9999, make_request())

    @pytest.mark.asyncio
    async def test_edit_in_place_keeps_site(self, service, make_request, db_session):
        created = await service.create_dive(7, make_request())

        updated = await service.update_dive(
            7, created.id, make_request(notes="Turtle at 12 m", depth=21.0)
        )

        assert updated.id == created.id
        assert updated.dive_site_id == created.dive_site_id
        assert updated.notes == "Turtle at 12 m"
        assert updated.depth == 21.0
        assert await count_rows(db_session, Dive) == 1

    @pytest.mark.asyncio
    async def test_small_move_does_not_collide_with_itself(self, service, make_request, db_session):
        created = await service.create_dive(7, make_request())

        updated = await service.update_dive(
            7, created.id, make_request(lat=24.4039, lng=-87.5342)
        )

        assert updated.dive_site_id == created.dive_site_id
        assert updated.lat == 24.4039
        assert await count_rows(db_session, DiveSite) == 1

    @pytest.mark.asyncio
    async def test_moving_onto_another_dive_conflicts(self, service, make_request):
        await service.create_dive(7, make_request())
        other = await service.create_dive(
            7, make_request(location="The Arch", lat=24.5000, lng=-87.6000)
        )

        with pytest.raises(ConflictError) as exc_info:
            await service.update_dive(7, other.id, make_request(location="Blue Hole"))
        assert exc_info.value.context["location"] == "Blue Hole"

    @pytest.mark.asyncio
    async def test_changing_date_to_free_day_succeeds(self, service, make_request):
        created = await service.create_dive(7, make_request())

        updated = await service.update_dive(
            7, created.id, make_request(datetime="2024-03-09T08:30:00")
        )
        assert updated.date_time == datetime(2024, 3, 9, 8, 30)


class TestListAndDelete:

    @pytest.mark.asyncio
    async def test_list_newest_first(self, service, make_request):
        await service.create_dive(7, make_request(datetime="2024-03-01T10:00:00"))
        await service.create_dive(7, make_request(datetime="2024-03-03T10:00:00"))
        await service.create_dive(7, make_request(datetime="2024-03-02T10:00:00"))
        await service.create_dive(8, make_request(datetime="2024-03-04T10:00:00"))

        dives = await service.list_dives(7)

        assert [d.date_time.day for d in dives] == [3, 2, 1]

    @pytest.mark.asyncio
    async def test_list_prefers_site_values(self, service, make_request):
        await service.create_dive(7, make_request())
        await service.create_dive(
            7, make_request(datetime="2024-03-02T10:00:00", location="blue hole", lat=24.4038, lng=-87.5341)
        )

        dives = await service.list_dives(7)

        assert {d.location for d in dives} == {"Blue Hole"}
        assert {(d.lat, d.lng) for d in dives} == {(24.4037, -87.5340)}

    @pytest.mark.asyncio
    async def test_list_dive_without_site_uses_fallbacks(self, service, db_session):
        db_session.add(
            Dive(user_id=7, date_time=datetime(2024, 1, 5, 9, 0), max_depth=10.0, duration=30)
        )
        await db_session.flush()

        (dive,) = await service.list_dives(7)

        assert dive.location == "Unknown Location"
        assert dive.lat == 0.0
        assert dive.lng == 0.0
        assert dive.dive_site_id is None

    @pytest.mark.asyncio
    async def test_delete_removes_only_own_dive(self, service, make_request, db_session):
        created = await service.create_dive(7, make_request())

        with pytest.raises(NotFoundError):
            await service.delete_dive(8, created.id)

        await service.delete_dive(7, created.id)
        assert await count_rows(db_session, Dive) == 0
        # The site stays behind for future dives
        assert await count_rows(db_session, DiveSite) == 1
