import uuid
import enum
from sqlalchemy import Column, String, Date, Float, ForeignKey, TIMESTAMP, UniqueConstraint, Index, func, text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from app.db.base import Base

class GroupStatus(str, enum.Enum):
    ACTIVE = "active"
    ARCHIVED = "archived"

class GroupType(str, enum.Enum):
    MIXED = "mixed"
    SINGLE_GENDER = "single-gender"

# Literal for ON CONFLICT index inference, see LIVE_EVENT_PREDICATE
ACTIVE_GROUP_PREDICATE = "status = 'active'"

class MatchGroup(Base):
    __tablename__ = "match_groups"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(255))
    group_type = Column(String(50), nullable=False, default=GroupType.MIXED.value)
    status = Column(String(20), nullable=False, default=GroupStatus.ACTIVE.value)
    match_week = Column(Date, nullable=False)
    event_id = Column(UUID(as_uuid=True), ForeignKey("events.id"), nullable=True)

    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())

    event = relationship("Event", backref="groups")
    members = relationship("GroupMember", back_populates="group")

    __table_args__ = (
        Index(
            "uq_match_groups_event_active",
            "event_id",
            unique=True,
            postgresql_where=text(ACTIVE_GROUP_PREDICATE),
        ),
    )

class GroupMember(Base):
    __tablename__ = "group_members"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    group_id = Column(UUID(as_uuid=True), ForeignKey("match_groups.id"), nullable=False, index=True)
    user_id = Column(UUID(as_uuid=True), nullable=False, index=True)
    # Pairwise compatibility score against the rest of the group, if computed
    match_score = Column(Float, nullable=True)

    joined_at = Column(TIMESTAMP(timezone=True), server_default=func.now())

    group = relationship("MatchGroup", back_populates="members")

    __table_args__ = (
        UniqueConstraint("group_id", "user_id", name="uq_group_member"),
    )

class GroupConversation(Base):
    __tablename__ = "group_conversations"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    group_id = Column(UUID(as_uuid=True), ForeignKey("match_groups.id"), nullable=False, unique=True)

    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())

    group = relationship("MatchGroup", backref="conversation")
