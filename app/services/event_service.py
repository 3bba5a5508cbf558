import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from sqlalchemy import select, text, update
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config.constants import DEFAULT_SLOT_CAPACITY, SLOT_CLOSE_AFTER_HOURS, WEEKEND_DAYS
from app.core.errors import NotFoundError, PersistenceError, ValidationError
from app.models.event import Event, EventStatus, MeetupType, LIVE_EVENT_PREDICATE, LIVE_EVENT_STATUSES
from app.services import slot_calendar

logger = logging.getLogger(__name__)


def meetup_type_for_day(day: str) -> str:
    return MeetupType.BRUNCH.value if day == "sunday" else MeetupType.DINNER.value


class EventService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def ensure_slot(self, city: Optional[str], day: Optional[str], now: Optional[datetime] = None) -> uuid.UUID:
        """
        Return the live slot for ``city`` on the coming ``day``, creating it if absent.

        Safe under concurrent callers: the insert is keyed on the
        (city, day_bucket) partial unique index, and a caller that loses the
        race reads back the winner's row.
        """
        city = (city or "").strip()
        if not city:
            raise ValidationError("missing_city")
        if day not in WEEKEND_DAYS:
            raise ValidationError("invalid_day")

        now = now or datetime.now(timezone.utc)
        start = slot_calendar.slot_instant(day, now)
        day_start, day_end = slot_calendar.day_bounds(start)

        try:
            existing_id = await self._find_live_slot(city, day_start, day_end)
            if existing_id:
                return existing_id

            stmt = (
                insert(Event)
                .values(
                    id=uuid.uuid4(),
                    city=city,
                    meetup_type=meetup_type_for_day(day),
                    date_time=start,
                    day_bucket=start.date(),
                    neighborhood=None,
                    max_participants=DEFAULT_SLOT_CAPACITY,
                    status=EventStatus.OPEN.value,
                )
                .on_conflict_do_nothing(
                    index_elements=[Event.city, Event.day_bucket],
                    index_where=text(LIVE_EVENT_PREDICATE),
                )
                .returning(Event.id)
            )
            created_id = (await self.session.execute(stmt)).scalar_one_or_none()
            await self.session.commit()

            if created_id:
                logger.info(f"Created {day} slot {created_id} for {city} at {start.isoformat()}")
                return created_id

            # Lost the race to a concurrent caller
            existing_id = await self._find_live_slot(city, day_start, day_end)
        except SQLAlchemyError:
            await self.session.rollback()
            logger.exception(f"ensure_slot failed for {city}/{day}")
            raise PersistenceError("failed_to_create_event")

        if not existing_id:
            raise PersistenceError("failed_to_create_event")
        return existing_id

    async def _find_live_slot(self, city: str, day_start: datetime, day_end: datetime) -> Optional[uuid.UUID]:
        stmt = (
            select(Event.id)
            .where(
                Event.city == city,
                Event.date_time >= day_start,
                Event.date_time <= day_end,
                Event.status.in_(LIVE_EVENT_STATUSES),
            )
            .order_by(Event.date_time.asc())
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_event(self, event_id: uuid.UUID) -> Event:
        try:
            event = await self.session.get(Event, event_id)
        except SQLAlchemyError:
            logger.exception(f"Failed to load event {event_id}")
            raise PersistenceError("failed_to_load_event")
        if not event:
            raise NotFoundError("event_not_found")
        return event

    async def list_upcoming(self, city: str, limit: int, now: Optional[datetime] = None) -> List[Event]:
        now = now or datetime.now(timezone.utc)
        stmt = (
            select(Event)
            .where(
                Event.city == city,
                Event.status == EventStatus.OPEN.value,
                Event.date_time >= now,
            )
            .order_by(Event.date_time.asc())
            .limit(limit)
        )
        try:
            result = await self.session.execute(stmt)
        except SQLAlchemyError:
            logger.exception(f"Failed to list events for {city}")
            raise PersistenceError("failed_to_fetch_events")
        return result.scalars().all()

    async def close_past_slots(self, now: Optional[datetime] = None) -> int:
        """Close live slots that started more than SLOT_CLOSE_AFTER_HOURS ago."""
        now = now or datetime.now(timezone.utc)
        cutoff = now - timedelta(hours=SLOT_CLOSE_AFTER_HOURS)
        stmt = (
            update(Event)
            .where(Event.status.in_(LIVE_EVENT_STATUSES), Event.date_time < cutoff)
            .values(status=EventStatus.CLOSED.value)
            .returning(Event.id)
        )
        try:
            result = await self.session.execute(stmt)
            closed = result.scalars().all()
            await self.session.commit()
        except SQLAlchemyError:
            await self.session.rollback()
            logger.exception("Failed to close past slots")
            raise PersistenceError("failed_to_close_events")

        if closed:
            logger.info(f"Closed {len(closed)} past slots")
        return len(closed)
