"""Booking endpoints for the signed-in member."""
import uuid
from fastapi import APIRouter, Depends
from app.core.errors import ValidationError
from app.db.session import AsyncSessionLocal
from app.api.deps import require_user_id
from app.schemas.events import CreateBookingRequest
from app.services.booking_service import BookingService

router = APIRouter(prefix="/bookings", tags=["bookings"])


@router.post("")
async def create_booking(body: CreateBookingRequest, user_id: uuid.UUID = Depends(require_user_id)):
    if not body.event_id:
        raise ValidationError("missing_event_id")

    async with AsyncSessionLocal() as session:
        booking_id = await BookingService(session).create_pending_booking(user_id, body.event_id, body.day)

    return {"bookingId": str(booking_id)}


@router.get("/active")
async def active_booking(user_id: uuid.UUID = Depends(require_user_id)):
    """The caller's paid booking around this weekend, or null."""
    async with AsyncSessionLocal() as session:
        booking = await BookingService(session).get_active_weekend_booking(user_id)

    return {"booking": booking.model_dump(mode="json") if booking else None}
