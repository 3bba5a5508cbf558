import pytest
import uuid
from datetime import date, datetime
from zoneinfo import ZoneInfo
from sqlalchemy.dialects import postgresql
from sqlalchemy.exc import SQLAlchemyError
from app.core.errors import EmptyGroupError, NotFoundError, PersistenceError
from app.models.event import Event
from app.models.group import GroupMember
from app.services.group_service import GroupService, format_group_name
from tests.helpers import make_result

BERLIN = ZoneInfo("Europe/Berlin")


@pytest.fixture
def event():
    return Event(
        id=uuid.uuid4(),
        city="Berlin",
        meetup_type="dinner",
        date_time=datetime(2025, 11, 14, 19, 0, tzinfo=BERLIN),
        max_participants=24,
        status="open",
    )


def test_format_group_name():
    start = datetime(2025, 11, 14, 19, 0, tzinfo=BERLIN)
    assert format_group_name("dinner", "Berlin", start) == "Dinner · Berlin · Fri, Nov 14"
    assert format_group_name("brunch", "Hamburg", datetime(2025, 11, 2, 11, 0, tzinfo=BERLIN)) == "Brunch · Hamburg · Sun, Nov 2"


@pytest.mark.asyncio
async def test_creates_group_members_and_conversation(mock_session, event):
    u1, u2, u3 = uuid.uuid4(), uuid.uuid4(), uuid.uuid4()
    group_id, conversation_id = uuid.uuid4(), uuid.uuid4()
    mock_session.get.return_value = event
    mock_session.execute.side_effect = [
        make_result(scalar=None),                     # active group lookup
        make_result(scalars=[u1, u2, u1, u3]),        # eligible bookings
        make_result(scalar=group_id),                 # group insert
        make_result(scalar=None),                     # conversation lookup
        make_result(scalar=conversation_id),          # conversation insert
    ]

    result = await GroupService(mock_session).ensure_group_and_conversation(event.id)

    assert result.group_id == group_id
    assert result.conversation_id == conversation_id

    members = mock_session.add_all.call_args.args[0]
    assert [m.user_id for m in members] == [u1, u2, u3]
    assert all(isinstance(m, GroupMember) and m.group_id == group_id for m in members)

    params = mock_session.execute.call_args_list[2].args[0].compile(dialect=postgresql.dialect()).params
    assert params["name"] == "Dinner · Berlin · Fri, Nov 14"
    assert params["group_type"] == "mixed"
    assert params["status"] == "active"
    assert params["match_week"] == date(2025, 11, 14)
    assert params["event_id"] == event.id
    assert mock_session.commit.await_count == 2


@pytest.mark.asyncio
async def test_group_conflict_target_matches_partial_index_literally(mock_session, event):
    mock_session.get.return_value = event
    mock_session.execute.side_effect = [
        make_result(scalar=None),
        make_result(scalars=[uuid.uuid4()]),
        make_result(scalar=uuid.uuid4()),
        make_result(scalar=uuid.uuid4()),
    ]

    await GroupService(mock_session).ensure_group_and_conversation(event.id)

    sql = str(mock_session.execute.call_args_list[2].args[0].compile(dialect=postgresql.dialect()))
    assert "ON CONFLICT (event_id) WHERE status = 'active' DO NOTHING" in sql


@pytest.mark.asyncio
async def test_repeated_call_returns_existing_ids(mock_session):
    group_id, conversation_id = uuid.uuid4(), uuid.uuid4()
    mock_session.execute.side_effect = [
        make_result(scalar=group_id),
        make_result(scalar=conversation_id),
    ]

    result = await GroupService(mock_session).ensure_group_and_conversation(uuid.uuid4())

    assert result == (group_id, conversation_id)
    mock_session.add_all.assert_not_called()
    mock_session.commit.assert_not_called()


@pytest.mark.asyncio
async def test_existing_group_without_conversation_gets_one(mock_session):
    group_id, conversation_id = uuid.uuid4(), uuid.uuid4()
    mock_session.execute.side_effect = [
        make_result(scalar=group_id),
        make_result(scalar=None),
        make_result(scalar=conversation_id),
    ]

    result = await GroupService(mock_session).ensure_group_and_conversation(uuid.uuid4())

    assert result.conversation_id == conversation_id
    mock_session.add_all.assert_not_called()


@pytest.mark.asyncio
async def test_concurrent_promotion_reuses_winner(mock_session, event):
    winner_id, conversation_id = uuid.uuid4(), uuid.uuid4()
    mock_session.get.return_value = event
    mock_session.execute.side_effect = [
        make_result(scalar=None),
        make_result(scalars=[uuid.uuid4()]),
        make_result(scalar=None),                     # insert lost the race
        make_result(scalar=winner_id),
        make_result(scalar=conversation_id),
    ]

    result = await GroupService(mock_session).ensure_group_and_conversation(event.id)

    assert result == (winner_id, conversation_id)
    mock_session.add_all.assert_not_called()
    mock_session.rollback.assert_awaited_once()


@pytest.mark.asyncio
async def test_no_bookings_raises_empty_group(mock_session, event):
    mock_session.get.return_value = event
    mock_session.execute.side_effect = [make_result(scalar=None), make_result(scalars=[])]

    with pytest.raises(EmptyGroupError) as exc:
        await GroupService(mock_session).ensure_group_and_conversation(event.id)

    assert exc.value.reason == "no_bookings_for_event"
    mock_session.add_all.assert_not_called()
    mock_session.commit.assert_not_called()


@pytest.mark.asyncio
async def test_unknown_event_raises_not_found(mock_session):
    with pytest.raises(NotFoundError):
        await GroupService(mock_session).ensure_group_and_conversation(uuid.uuid4())


@pytest.mark.asyncio
async def test_commit_failure_leaves_no_partial_group(mock_session, event):
    mock_session.get.return_value = event
    mock_session.execute.side_effect = [
        make_result(scalar=None),
        make_result(scalars=[uuid.uuid4(), uuid.uuid4()]),
        make_result(scalar=uuid.uuid4()),
    ]
    mock_session.commit.side_effect = SQLAlchemyError("boom")

    with pytest.raises(PersistenceError) as exc:
        await GroupService(mock_session).ensure_group_and_conversation(event.id)

    assert exc.value.reason == "failed_to_create_group"
    mock_session.rollback.assert_awaited_once()


@pytest.mark.asyncio
async def test_find_member_conversation(mock_session):
    conversation_id = uuid.uuid4()
    mock_session.execute.return_value = make_result(scalar=conversation_id)

    result = await GroupService(mock_session).find_member_conversation(uuid.uuid4(), uuid.uuid4())
    assert result == conversation_id
