import logging
import uuid
from datetime import datetime, timezone
from typing import Dict, Optional

from sqlalchemy import select, update, func
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config.constants import WEEKEND_DAYS
from app.core.errors import NotFoundError, PersistenceError, SlotFullError, ValidationError
from app.models.booking import Booking, BookingStatus
from app.models.event import Event, EventStatus, LIVE_EVENT_STATUSES
from app.schemas.events import ActiveBooking, WeekendEvent, WeekendEvents
from app.services import slot_calendar

logger = logging.getLogger(__name__)


class BookingService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create_pending_booking(self, user_id: uuid.UUID, event_id: uuid.UUID, day: str) -> uuid.UUID:
        """
        Record the user's pending, unpaid claim on a slot.

        A repeated call for the same (user, event) returns the existing
        booking id instead of failing on the unique constraint.
        """
        if day not in WEEKEND_DAYS:
            raise ValidationError("invalid_day")

        try:
            event = await self.session.get(Event, event_id)
            if not event:
                raise NotFoundError("event_not_found")

            if event.status != EventStatus.OPEN.value:
                existing_id = await self._find_booking_id(user_id, event_id)
                if existing_id:
                    return existing_id
                raise SlotFullError()

            stmt = (
                insert(Booking)
                .values(
                    id=uuid.uuid4(),
                    user_id=user_id,
                    event_id=event_id,
                    status=BookingStatus.PENDING.value,
                    paid=False,
                    preferences={"day": day},
                )
                .on_conflict_do_nothing(constraint="uq_booking_user_event")
                .returning(Booking.id)
            )
            booking_id = (await self.session.execute(stmt)).scalar_one_or_none()
            await self.session.commit()

            if booking_id:
                logger.info(f"Created pending booking {booking_id} for user {user_id} on event {event_id}")
                return booking_id

            booking_id = await self._find_booking_id(user_id, event_id)
        except SQLAlchemyError:
            await self.session.rollback()
            logger.exception(f"create_pending_booking failed for user {user_id} on event {event_id}")
            raise PersistenceError("failed_to_create_booking")

        if not booking_id:
            raise PersistenceError("failed_to_create_booking")
        return booking_id

    async def _find_booking_id(self, user_id: uuid.UUID, event_id: uuid.UUID) -> Optional[uuid.UUID]:
        stmt = select(Booking.id).where(Booking.user_id == user_id, Booking.event_id == event_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def confirm_booking_paid(self, booking_id: uuid.UUID) -> bool:
        """
        Mark a booking paid and confirmed, filling the slot at capacity.

        Returns False rather than raising so payment callbacks can retry.
        """
        try:
            stmt = (
                update(Booking)
                .where(Booking.id == booking_id)
                .values(paid=True, status=BookingStatus.CONFIRMED.value)
                .returning(Booking.event_id)
            )
            event_id = (await self.session.execute(stmt)).scalar_one_or_none()
            if event_id is None:
                await self.session.rollback()
                logger.warning(f"confirm_booking_paid: booking {booking_id} not found")
                return False

            await self._refresh_capacity(event_id)
            await self.session.commit()
        except SQLAlchemyError:
            await self.session.rollback()
            logger.exception(f"confirm_booking_paid failed for booking {booking_id}")
            return False

        logger.info(f"Booking {booking_id} confirmed")
        return True

    async def _refresh_capacity(self, event_id: uuid.UUID) -> None:
        event = await self.session.get(Event, event_id)
        if not event or event.status != EventStatus.OPEN.value:
            return

        stmt = select(func.count(Booking.id)).where(
            Booking.event_id == event_id,
            Booking.status == BookingStatus.CONFIRMED.value,
        )
        confirmed = (await self.session.execute(stmt)).scalar() or 0
        if confirmed >= event.max_participants:
            event.status = EventStatus.FULL.value
            logger.info(f"Event {event_id} is full ({confirmed}/{event.max_participants})")

    async def get_weekend_events(self, city: Optional[str], now: Optional[datetime] = None) -> WeekendEvents:
        """
        Live slots of the current weekend for a city, one per day label.

        Where a day has more than one slot the earliest is surfaced.
        ``bookings_count`` counts paid bookings only.
        """
        city = (city or "").strip()
        if not city:
            raise ValidationError("missing_city")

        now = now or datetime.now(timezone.utc)
        start, end = slot_calendar.current_weekend_bounds(now)

        try:
            events_stmt = (
                select(Event)
                .where(
                    Event.city == city,
                    Event.date_time >= start,
                    Event.date_time <= end,
                    Event.status.in_(LIVE_EVENT_STATUSES),
                )
                .order_by(Event.date_time.asc())
            )
            events = (await self.session.execute(events_stmt)).scalars().all()
            if not events:
                return WeekendEvents()

            counts_stmt = (
                select(Booking.event_id, func.count(Booking.id))
                .where(Booking.event_id.in_([e.id for e in events]), Booking.paid.is_(True))
                .group_by(Booking.event_id)
            )
            counts: Dict[uuid.UUID, int] = dict((await self.session.execute(counts_stmt)).all())
        except SQLAlchemyError:
            logger.exception(f"get_weekend_events failed for {city}")
            raise PersistenceError("failed_to_fetch_events")

        by_day: Dict[str, WeekendEvent] = {}
        for event in events:
            label = slot_calendar.day_label(event.date_time)
            if label in by_day:
                continue
            by_day[label] = WeekendEvent(
                id=event.id,
                city=event.city,
                meetup_type=event.meetup_type,
                date_time=event.date_time,
                neighborhood=event.neighborhood,
                max_participants=event.max_participants,
                status=event.status,
                bookings_count=counts.get(event.id, 0),
            )
        return WeekendEvents(**by_day)

    async def get_active_weekend_booking(
        self, user_id: uuid.UUID, now: Optional[datetime] = None
    ) -> Optional[ActiveBooking]:
        """Most recent paid booking for a slot within a week either side of now."""
        now = now or datetime.now(timezone.utc)
        start, end = slot_calendar.booking_search_bounds(now)

        stmt = (
            select(Booking)
            .join(Event, Booking.event_id == Event.id)
            .where(
                Booking.user_id == user_id,
                Booking.paid.is_(True),
                Event.date_time >= start,
                Event.date_time <= end,
            )
            .order_by(Booking.created_at.desc())
            .limit(1)
        )
        try:
            booking = (await self.session.execute(stmt)).scalars().first()
        except SQLAlchemyError:
            logger.exception(f"get_active_weekend_booking failed for user {user_id}")
            raise PersistenceError("failed_to_fetch_booking")

        if not booking:
            return None

        preferences = booking.preferences or {}
        return ActiveBooking(
            id=booking.id,
            event_id=booking.event_id,
            day=preferences.get("day", ""),
            status=booking.status,
            paid=booking.paid,
        )
