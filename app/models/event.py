import uuid
import enum
from sqlalchemy import Column, String, Integer, Date, TIMESTAMP, Index, func, text
from sqlalchemy.dialects.postgresql import UUID
from app.db.base import Base
from app.config.constants import DEFAULT_SLOT_CAPACITY

class EventStatus(str, enum.Enum):
    OPEN = "open"
    FULL = "full"
    CLOSED = "closed"

class MeetupType(str, enum.Enum):
    DINNER = "dinner"
    BRUNCH = "brunch"

# Slots in these states block creation of another slot for the same city/day
LIVE_EVENT_STATUSES = (EventStatus.OPEN.value, EventStatus.FULL.value)
# Rendered literally in ON CONFLICT too; a bound parameter stops index inference
LIVE_EVENT_PREDICATE = "status IN ('open', 'full')"

class Event(Base):
    __tablename__ = "events"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    city = Column(String(255), nullable=False, index=True)
    meetup_type = Column(String(50), nullable=False)
    date_time = Column(TIMESTAMP(timezone=True), nullable=False, index=True)
    # Local calendar date of date_time, the uniqueness key for a city's slot
    day_bucket = Column(Date, nullable=False)
    neighborhood = Column(String(255))
    max_participants = Column(Integer, nullable=False, default=DEFAULT_SLOT_CAPACITY)
    status = Column(String(20), nullable=False, default=EventStatus.OPEN.value)

    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), onupdate=func.now(), server_default=func.now())

    __table_args__ = (
        Index(
            "uq_events_city_day_live",
            "city",
            "day_bucket",
            unique=True,
            postgresql_where=text(LIVE_EVENT_PREDICATE),
        ),
        Index("ix_events_city_status_date", "city", "status", "date_time"),
    )
