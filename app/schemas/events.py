from datetime import datetime
from typing import Optional
import uuid

from pydantic import BaseModel, ConfigDict, Field


class EnsureEventRequest(BaseModel):
    city: Optional[str] = None
    day: Optional[str] = None


class GroupRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    event_id: Optional[uuid.UUID] = Field(None, alias="eventId")


class CreateBookingRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    event_id: Optional[uuid.UUID] = Field(None, alias="eventId")
    day: Optional[str] = None


class PaymentWebhookRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    booking_id: Optional[uuid.UUID] = Field(None, alias="bookingId")
    # Stripe payment links echo the booking id back as client_reference_id
    client_reference_id: Optional[uuid.UUID] = None

    @property
    def resolved_booking_id(self) -> Optional[uuid.UUID]:
        return self.booking_id or self.client_reference_id


class WeekendEvent(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    city: str
    meetup_type: str
    date_time: datetime
    neighborhood: Optional[str] = None
    max_participants: int
    status: str
    bookings_count: int = 0


class WeekendEvents(BaseModel):
    friday: Optional[WeekendEvent] = None
    saturday: Optional[WeekendEvent] = None
    sunday: Optional[WeekendEvent] = None


class ActiveBooking(BaseModel):
    id: uuid.UUID
    event_id: uuid.UUID
    day: str
    status: str
    paid: bool
