import uuid
import logging
from datetime import datetime, timezone
from typing import Dict, List, NamedTuple, Optional, Tuple
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from app.config.constants import REMINDER_TITLE
from app.core.config import settings
from app.core.errors import PersistenceError
from app.db.session import AsyncSessionLocal
from app.infrastructure.clients.notifier import Notifier
from app.models.booking import Booking, BookingStatus
from app.models.event import Event
from app.services import slot_calendar
from app.services.group_service import GroupService

logger = logging.getLogger(__name__)


class ReminderTarget(NamedTuple):
    booking_id: uuid.UUID
    user_id: uuid.UUID
    event_id: uuid.UUID
    meetup_type: str
    city: str
    date_time: datetime


async def send_weekend_reminders_job(now: Optional[datetime] = None) -> Dict[str, int]:
    """
    Job function to be executed by APScheduler every Friday morning.
    """
    logger.info("Starting weekend reminder job...")
    async with AsyncSessionLocal() as session:
        service = ReminderService(session, Notifier(settings.NOTIFY_WEBHOOK_URL))
        return await service.send_weekend_reminders(now)

class ReminderService:
    def __init__(self, session: AsyncSession, notifier: Notifier):
        self.session = session
        self.notifier = notifier

    async def get_weekend_bookings(self, now: datetime) -> List[Tuple[Booking, Event]]:
        """Confirmed bookings for slots of the current weekend."""
        start, end = slot_calendar.current_weekend_bounds(now)
        stmt = (
            select(Booking, Event)
            .join(Event, Booking.event_id == Event.id)
            .where(
                Booking.status == BookingStatus.CONFIRMED.value,
                Event.date_time >= start,
                Event.date_time <= end,
            )
            .order_by(Event.date_time.asc())
        )
        try:
            result = await self.session.execute(stmt)
        except SQLAlchemyError:
            logger.exception("Failed to load weekend bookings for reminders")
            raise PersistenceError("failed_to_fetch_bookings")
        return result.all()

    async def send_weekend_reminders(self, now: Optional[datetime] = None) -> Dict[str, int]:
        """
        Notify every confirmed attendee of this weekend's slots.

        A failure for one booking is logged and counted as skipped; it never
        stops the run.
        """
        now = now or datetime.now(timezone.utc)
        # Plain values, since a rollback below expires loaded rows
        targets = [
            ReminderTarget(booking.id, booking.user_id, event.id, event.meetup_type, event.city, event.date_time)
            for booking, event in await self.get_weekend_bookings(now)
        ]
        group_service = GroupService(self.session)

        sent = 0
        skipped = 0
        for target in targets:
            try:
                conversation_id = await group_service.find_member_conversation(target.user_id, target.event_id)
            except SQLAlchemyError:
                # Leave the session usable for the remaining lookups
                await self.session.rollback()
                logger.exception(f"Failed to resolve group chat for booking {target.booking_id}")
                skipped += 1
                continue

            delivered = await self.notifier.send(
                user_id=target.user_id,
                title=REMINDER_TITLE,
                body=self._reminder_body(target, has_group=conversation_id is not None),
                url=self._chat_url(conversation_id),
                tag="weekend-reminder",
            )
            if delivered:
                sent += 1
            else:
                skipped += 1

        logger.info(f"Weekend reminders complete: {sent} sent, {skipped} skipped")
        return {"sent": sent, "skipped": skipped, "total": len(targets)}

    @staticmethod
    def _chat_url(conversation_id: Optional[uuid.UUID]) -> str:
        base = settings.APP_URL.rstrip("/")
        if conversation_id:
            return f"{base}/chat/group/{conversation_id}"
        return f"{base}/events"

    @staticmethod
    def _reminder_body(target: ReminderTarget, has_group: bool) -> str:
        local = slot_calendar.to_local(target.date_time)
        body = f"Your {target.meetup_type} in {target.city} starts {local:%A} at {local:%H:%M}."
        if has_group:
            body += " Check the group chat!"
        return body
