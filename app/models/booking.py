import uuid
import enum
from sqlalchemy import Column, String, Boolean, ForeignKey, TIMESTAMP, UniqueConstraint, Index, func
from sqlalchemy.dialects.postgresql import UUID, JSONB
from sqlalchemy.orm import relationship
from app.db.base import Base

class BookingStatus(str, enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"

# Bookings that count towards a group at promotion time
GROUP_ELIGIBLE_STATUSES = (BookingStatus.CONFIRMED.value, BookingStatus.PENDING.value)

class Booking(Base):
    __tablename__ = "bookings"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    # Identity lives with the external provider, so no FK on user_id
    user_id = Column(UUID(as_uuid=True), nullable=False, index=True)
    event_id = Column(UUID(as_uuid=True), ForeignKey("events.id"), nullable=False, index=True)

    status = Column(String(20), nullable=False, default=BookingStatus.PENDING.value)
    paid = Column(Boolean, nullable=False, default=False)
    preferences = Column(JSONB, default={})

    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), onupdate=func.now(), server_default=func.now())

    event = relationship("Event", backref="bookings")

    __table_args__ = (
        UniqueConstraint("user_id", "event_id", name="uq_booking_user_event"),
        Index("ix_booking_event_paid", "event_id", "paid"),
    )
