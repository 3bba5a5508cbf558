import pytest
import uuid
from datetime import date, datetime
from unittest.mock import MagicMock
from zoneinfo import ZoneInfo
from sqlalchemy.dialects import postgresql
from sqlalchemy.exc import SQLAlchemyError
from app.core.errors import NotFoundError, PersistenceError, ValidationError
from app.services.event_service import EventService, meetup_type_for_day
from tests.helpers import make_result

BERLIN = ZoneInfo("Europe/Berlin")
WEDNESDAY = datetime(2025, 11, 12, 10, 0, tzinfo=BERLIN)


def compiled_params(stmt):
    return stmt.compile(dialect=postgresql.dialect()).params


def test_meetup_type_for_day():
    assert meetup_type_for_day("friday") == "dinner"
    assert meetup_type_for_day("saturday") == "dinner"
    assert meetup_type_for_day("sunday") == "brunch"


@pytest.mark.asyncio
async def test_ensure_slot_returns_existing_slot(mock_session):
    existing_id = uuid.uuid4()
    mock_session.execute.return_value = make_result(scalar=existing_id)

    result = await EventService(mock_session).ensure_slot("Berlin", "friday", now=WEDNESDAY)

    assert result == existing_id
    assert mock_session.execute.call_count == 1
    mock_session.commit.assert_not_called()


@pytest.mark.asyncio
async def test_ensure_slot_creates_sunday_brunch(mock_session):
    created_id = uuid.uuid4()
    mock_session.execute.side_effect = [make_result(scalar=None), make_result(scalar=created_id)]

    result = await EventService(mock_session).ensure_slot(" Berlin ", "sunday", now=WEDNESDAY)

    assert result == created_id
    mock_session.commit.assert_awaited_once()

    params = compiled_params(mock_session.execute.call_args_list[1].args[0])
    assert params["city"] == "Berlin"
    assert params["meetup_type"] == "brunch"
    assert params["max_participants"] == 24
    assert params["status"] == "open"
    assert params["neighborhood"] is None
    assert params["date_time"] == datetime(2025, 11, 16, 12, 0, tzinfo=BERLIN)
    assert params["day_bucket"] == date(2025, 11, 16)


@pytest.mark.asyncio
async def test_ensure_slot_conflict_target_matches_partial_index_literally(mock_session):
    mock_session.execute.side_effect = [make_result(scalar=None), make_result(scalar=uuid.uuid4())]

    await EventService(mock_session).ensure_slot("Berlin", "friday", now=WEDNESDAY)

    sql = str(mock_session.execute.call_args_list[1].args[0].compile(dialect=postgresql.dialect()))
    # Bound values here stop Postgres inferring the index once it uses a generic plan
    assert "ON CONFLICT (city, day_bucket) WHERE status IN ('open', 'full') DO NOTHING" in sql


@pytest.mark.asyncio
async def test_ensure_slot_reads_back_winner_after_lost_race(mock_session):
    winner_id = uuid.uuid4()
    mock_session.execute.side_effect = [
        make_result(scalar=None),
        make_result(scalar=None),
        make_result(scalar=winner_id),
    ]

    result = await EventService(mock_session).ensure_slot("Berlin", "saturday", now=WEDNESDAY)

    assert result == winner_id
    assert mock_session.execute.call_count == 3


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "city, day, reason",
    [
        (None, "friday", "missing_city"),
        ("   ", "friday", "missing_city"),
        ("Berlin", "monday", "invalid_day"),
        ("Berlin", None, "invalid_day"),
    ],
)
async def test_ensure_slot_validates_input(mock_session, city, day, reason):
    with pytest.raises(ValidationError) as exc:
        await EventService(mock_session).ensure_slot(city, day, now=WEDNESDAY)

    assert exc.value.reason == reason
    mock_session.execute.assert_not_called()


@pytest.mark.asyncio
async def test_ensure_slot_database_error(mock_session):
    mock_session.execute.side_effect = [make_result(scalar=None), SQLAlchemyError("boom")]

    with pytest.raises(PersistenceError) as exc:
        await EventService(mock_session).ensure_slot("Berlin", "friday", now=WEDNESDAY)

    assert exc.value.reason == "failed_to_create_event"
    mock_session.rollback.assert_awaited_once()


@pytest.mark.asyncio
async def test_ensure_slot_fails_when_winner_vanishes(mock_session):
    mock_session.execute.side_effect = [make_result(), make_result(), make_result()]

    with pytest.raises(PersistenceError):
        await EventService(mock_session).ensure_slot("Berlin", "friday", now=WEDNESDAY)


@pytest.mark.asyncio
async def test_get_event_not_found(mock_session):
    with pytest.raises(NotFoundError) as exc:
        await EventService(mock_session).get_event(uuid.uuid4())
    assert exc.value.reason == "event_not_found"


@pytest.mark.asyncio
async def test_list_upcoming(mock_session):
    events = [MagicMock(), MagicMock()]
    mock_session.execute.return_value = make_result(scalars=events)

    result = await EventService(mock_session).list_upcoming("Berlin", 10, now=WEDNESDAY)

    assert result == events


@pytest.mark.asyncio
async def test_close_past_slots_counts_closed(mock_session):
    mock_session.execute.return_value = make_result(scalars=[uuid.uuid4(), uuid.uuid4()])

    closed = await EventService(mock_session).close_past_slots(now=WEDNESDAY)

    assert closed == 2
    mock_session.commit.assert_awaited_once()


@pytest.mark.asyncio
async def test_close_past_slots_error_rolls_back(mock_session):
    mock_session.execute.side_effect = SQLAlchemyError("boom")

    with pytest.raises(PersistenceError):
        await EventService(mock_session).close_past_slots(now=WEDNESDAY)
    mock_session.rollback.assert_awaited_once()
