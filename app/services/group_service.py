import logging
import uuid
from datetime import datetime
from typing import NamedTuple, Optional

from sqlalchemy import select, text
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config.constants import GROUP_NAME_SEPARATOR
from app.core.errors import EmptyGroupError, NotFoundError, PersistenceError
from app.models.booking import Booking, GROUP_ELIGIBLE_STATUSES
from app.models.event import Event
from app.models.group import ACTIVE_GROUP_PREDICATE, GroupConversation, GroupMember, GroupStatus, GroupType, MatchGroup
from app.services import slot_calendar

logger = logging.getLogger(__name__)


class GroupChat(NamedTuple):
    group_id: uuid.UUID
    conversation_id: uuid.UUID


def format_group_name(meetup_type: Optional[str], city: str, start: datetime) -> str:
    """e.g. ``Dinner · Berlin · Fri, Nov 14``"""
    local = slot_calendar.to_local(start)
    kind = (meetup_type or "meetup").capitalize()
    return GROUP_NAME_SEPARATOR.join([kind, city, f"{local:%a}, {local:%b} {local.day}"])


class GroupService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def ensure_group_and_conversation(self, event_id: uuid.UUID) -> GroupChat:
        """
        Promote an event's bookings into a group with a chat, exactly once.

        Repeated calls return the same ids. The group and its members are
        written in one transaction, so a group never exists with partial
        membership.
        """
        try:
            group_id = await self._find_active_group_id(event_id)
            if not group_id:
                group_id = await self._create_group(event_id)
            conversation_id = await self._ensure_conversation(group_id)
        except SQLAlchemyError:
            await self.session.rollback()
            logger.exception(f"Group promotion failed for event {event_id}")
            raise PersistenceError("failed_to_create_group")

        return GroupChat(group_id=group_id, conversation_id=conversation_id)

    async def _find_active_group_id(self, event_id: uuid.UUID) -> Optional[uuid.UUID]:
        stmt = select(MatchGroup.id).where(
            MatchGroup.event_id == event_id,
            MatchGroup.status == GroupStatus.ACTIVE.value,
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def _create_group(self, event_id: uuid.UUID) -> uuid.UUID:
        event = await self.session.get(Event, event_id)
        if not event:
            raise NotFoundError("event_not_found")

        stmt = (
            select(Booking.user_id)
            .where(Booking.event_id == event_id, Booking.status.in_(GROUP_ELIGIBLE_STATUSES))
            .order_by(Booking.created_at.asc())
        )
        user_ids = list(dict.fromkeys((await self.session.execute(stmt)).scalars().all()))
        if not user_ids:
            raise EmptyGroupError()

        group_stmt = (
            insert(MatchGroup)
            .values(
                id=uuid.uuid4(),
                name=format_group_name(event.meetup_type, event.city, event.date_time),
                group_type=GroupType.MIXED.value,
                status=GroupStatus.ACTIVE.value,
                match_week=slot_calendar.local_date(event.date_time),
                event_id=event_id,
            )
            .on_conflict_do_nothing(
                index_elements=[MatchGroup.event_id],
                index_where=text(ACTIVE_GROUP_PREDICATE),
            )
            .returning(MatchGroup.id)
        )
        group_id = (await self.session.execute(group_stmt)).scalar_one_or_none()

        if group_id is None:
            # A concurrent promotion created it first
            await self.session.rollback()
            group_id = await self._find_active_group_id(event_id)
            if not group_id:
                raise PersistenceError("failed_to_create_group")
            return group_id

        self.session.add_all([GroupMember(group_id=group_id, user_id=user_id) for user_id in user_ids])
        await self.session.commit()
        logger.info(f"Created group {group_id} for event {event_id} with {len(user_ids)} members")
        return group_id

    async def _ensure_conversation(self, group_id: uuid.UUID) -> uuid.UUID:
        existing_id = await self._find_conversation_id(group_id)
        if existing_id:
            return existing_id

        stmt = (
            insert(GroupConversation)
            .values(id=uuid.uuid4(), group_id=group_id)
            .on_conflict_do_nothing(index_elements=[GroupConversation.group_id])
            .returning(GroupConversation.id)
        )
        conversation_id = (await self.session.execute(stmt)).scalar_one_or_none()
        await self.session.commit()
        if conversation_id:
            return conversation_id

        conversation_id = await self._find_conversation_id(group_id)
        if not conversation_id:
            raise PersistenceError("failed_to_create_conversation")
        return conversation_id

    async def _find_conversation_id(self, group_id: uuid.UUID) -> Optional[uuid.UUID]:
        stmt = select(GroupConversation.id).where(GroupConversation.group_id == group_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def find_member_conversation(self, user_id: uuid.UUID, event_id: uuid.UUID) -> Optional[uuid.UUID]:
        """Conversation of the active group for ``event_id`` that ``user_id`` belongs to."""
        stmt = (
            select(GroupConversation.id)
            .join(MatchGroup, GroupConversation.group_id == MatchGroup.id)
            .join(GroupMember, GroupMember.group_id == MatchGroup.id)
            .where(
                MatchGroup.event_id == event_id,
                MatchGroup.status == GroupStatus.ACTIVE.value,
                GroupMember.user_id == user_id,
            )
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()
