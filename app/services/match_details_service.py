import logging
import uuid
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import NotFoundError, PersistenceError
from app.models.group import GroupMember, MatchGroup
from app.models.profile import OnboardingPreferences, Profile
from app.utils.compatibility import (
    CompatibilityProfile,
    average_match_score,
    calculate_match_details,
    format_slot,
    get_specialty_cluster,
)

logger = logging.getLogger(__name__)


def build_compatibility_profile(
    profile: Optional[Profile], preferences: Optional[OnboardingPreferences]
) -> CompatibilityProfile:
    data: Dict[str, Any] = {}
    if profile:
        data.update(city=profile.city, neighborhood=profile.neighborhood)
    if preferences:
        data.update(
            specialty=preferences.specialty,
            sports=preferences.sports,
            social_style=preferences.social_style,
            culture_interests=preferences.culture_interests,
            lifestyle=preferences.lifestyle,
            availability_slots=preferences.availability_slots,
        )
    return CompatibilityProfile(**data)


class MatchDetailsService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_match_details(self, user_id: uuid.UUID, group_id: uuid.UUID) -> Dict[str, Any]:
        """
        Explain a group to one of its members: shared interests, specialty
        and location overlap, shared availability and the average score.
        """
        try:
            group = await self.session.get(MatchGroup, group_id)
            if not group:
                raise NotFoundError("group_not_found")

            members_stmt = select(GroupMember).where(GroupMember.group_id == group_id)
            members: List[GroupMember] = (await self.session.execute(members_stmt)).scalars().all()
            member_ids = [m.user_id for m in members]
            # Non-members get the same answer as a missing group
            if user_id not in member_ids:
                raise NotFoundError("group_not_found")

            profiles_stmt = select(Profile).where(Profile.user_id.in_(member_ids))
            profiles = {p.user_id: p for p in (await self.session.execute(profiles_stmt)).scalars().all()}
            prefs_stmt = select(OnboardingPreferences).where(OnboardingPreferences.user_id.in_(member_ids))
            preferences = {p.user_id: p for p in (await self.session.execute(prefs_stmt)).scalars().all()}
        except SQLAlchemyError:
            logger.exception(f"Failed to load match details for group {group_id}")
            raise PersistenceError("failed_to_fetch_group")

        user = build_compatibility_profile(profiles.get(user_id), preferences.get(user_id))
        others = [m for m in members if m.user_id != user_id]
        other_profiles = [build_compatibility_profile(profiles.get(m.user_id), preferences.get(m.user_id)) for m in others]

        details = calculate_match_details(user, other_profiles)
        scores = {str(m.user_id): m.match_score for m in others}

        return {
            "group_id": str(group.id),
            "name": group.name,
            "member_count": len(member_ids),
            "match_details": details.model_dump(),
            "shared_availability_labels": [format_slot(s) for s in details.shared_availability],
            "specialty_cluster": get_specialty_cluster([user.specialty, *(p.specialty for p in other_profiles)]),
            "average_score": average_match_score(scores, list(scores)),
        }
