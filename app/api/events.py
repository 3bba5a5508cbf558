"""Weekend slot endpoints: ensure a slot, promote it to a group, read models."""
import logging
import uuid
from fastapi import APIRouter, Depends, Query
from app.config.constants import DEFAULT_EVENTS_LIMIT, MAX_EVENTS_LIMIT
from app.core.errors import ValidationError
from app.db.session import AsyncSessionLocal
from app.api.deps import require_user_id
from app.schemas.events import EnsureEventRequest, GroupRequest
from app.services.booking_service import BookingService
from app.services.event_service import EventService
from app.services.group_service import GroupService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/events", tags=["events"])


@router.get("")
async def list_events(
    city: str = Query(..., min_length=1),
    limit: int = Query(DEFAULT_EVENTS_LIMIT, ge=1, le=MAX_EVENTS_LIMIT),
):
    """Upcoming open slots for a city, earliest first."""
    async with AsyncSessionLocal() as session:
        events = await EventService(session).list_upcoming(city, limit)

    return {
        "events": [
            {
                "id": str(e.id),
                "city": e.city,
                "meetup_type": e.meetup_type,
                "date_time": e.date_time.isoformat(),
                "neighborhood": e.neighborhood,
                "max_participants": e.max_participants,
                "status": e.status,
            }
            for e in events
        ],
        "count": len(events),
    }


@router.get("/weekend")
async def weekend_events(city: str = Query(..., min_length=1)):
    """This weekend's slot per day for a city, with paid booking counts."""
    async with AsyncSessionLocal() as session:
        result = await BookingService(session).get_weekend_events(city)
    return result.model_dump(mode="json")


@router.post("/ensure")
async def ensure_event(body: EnsureEventRequest, user_id: uuid.UUID = Depends(require_user_id)):
    """Get or create the slot for a city on the coming Friday, Saturday or Sunday."""
    async with AsyncSessionLocal() as session:
        event_id = await EventService(session).ensure_slot(body.city, body.day)

    logger.info(f"User {user_id} ensured slot {event_id} ({body.city}/{body.day})")
    return {"eventId": str(event_id)}


@router.post("/group")
async def ensure_event_group(body: GroupRequest):
    """Get or create the group and its chat for an event."""
    if not body.event_id:
        raise ValidationError("missing_event_id")

    async with AsyncSessionLocal() as session:
        chat = await GroupService(session).ensure_group_and_conversation(body.event_id)

    return {"groupId": str(chat.group_id), "conversationId": str(chat.conversation_id)}
