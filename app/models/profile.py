import uuid
from sqlalchemy import Column, String, Text, TIMESTAMP, func
from sqlalchemy.dialects.postgresql import UUID, ARRAY
from app.db.base import Base

class Profile(Base):
    __tablename__ = "profiles"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), nullable=False, unique=True)
    full_name = Column(String(255))
    city = Column(String(255))
    neighborhood = Column(String(255))

    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), onupdate=func.now(), server_default=func.now())

class OnboardingPreferences(Base):
    __tablename__ = "onboarding_preferences"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), nullable=False, unique=True)
    specialty = Column(String(255))
    sports = Column(ARRAY(Text))
    social_style = Column(ARRAY(Text))
    culture_interests = Column(ARRAY(Text))
    lifestyle = Column(ARRAY(Text))
    availability_slots = Column(ARRAY(Text))

    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), onupdate=func.now(), server_default=func.now())
