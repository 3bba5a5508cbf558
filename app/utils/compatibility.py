"""
Compatibility scoring between a user and the members of a group.

Pure functions: no I/O, no exceptions for empty or missing input. Missing
attributes behave like empty sets.
"""
import math
from collections import Counter
from typing import Dict, Iterable, List, Literal, Mapping, Optional

from pydantic import BaseModel, Field, field_validator

from app.config.constants import (
    AVAILABILITY_SLOT_LABELS,
    GENERAL_SPECIALTY_CLUSTER,
    MAX_SHARED_INTERESTS,
    SPECIALTY_CLUSTERS,
    SPECIALTY_MAJORITY_SHARE,
    UNKNOWN_CITY,
    VARIOUS_SPECIALTIES,
)


class CompatibilityProfile(BaseModel):
    specialty: Optional[str] = None
    sports: List[str] = Field(default_factory=list)
    social_style: List[str] = Field(default_factory=list)
    culture_interests: List[str] = Field(default_factory=list)
    lifestyle: List[str] = Field(default_factory=list)
    availability_slots: List[str] = Field(default_factory=list)
    city: Optional[str] = None
    neighborhood: Optional[str] = None

    @field_validator(
        "sports", "social_style", "culture_interests", "lifestyle", "availability_slots",
        mode="before",
    )
    @classmethod
    def none_as_empty(cls, v):
        return v or []

    @property
    def interests(self) -> List[str]:
        return [*self.sports, *self.social_style, *self.culture_interests, *self.lifestyle]


class SpecialtyMatch(BaseModel):
    type: Literal["same", "related", "different"]
    value: str


class LocationMatch(BaseModel):
    city: str
    same_neighborhood: bool
    neighborhood: Optional[str] = None


class MatchDetails(BaseModel):
    shared_interests: List[str]
    specialty_match: SpecialtyMatch
    location_match: LocationMatch
    shared_availability: List[str]


def _unique(values: Optional[Iterable[Optional[str]]]) -> List[str]:
    """Distinct truthy values in first-seen order."""
    return list(dict.fromkeys(v for v in (values or []) if v))


def calculate_specialty_match(
    user_specialty: Optional[str],
    member_specialties: Optional[Iterable[Optional[str]]],
) -> SpecialtyMatch:
    unique_specialties = _unique(member_specialties)

    if user_specialty and user_specialty in unique_specialties:
        return SpecialtyMatch(type="same", value=user_specialty)
    if len(unique_specialties) == 1:
        return SpecialtyMatch(type="related", value=unique_specialties[0])
    if unique_specialties:
        return SpecialtyMatch(type="related", value=f"{len(unique_specialties)} specialties")
    return SpecialtyMatch(type="different", value=VARIOUS_SPECIALTIES)


def calculate_location_match(
    user_city: Optional[str],
    user_neighborhood: Optional[str],
    member_cities: Optional[Iterable[Optional[str]]],
    member_neighborhoods: Optional[Iterable[Optional[str]]],
) -> LocationMatch:
    # most_common keeps first-seen order on ties
    city_counts = Counter(c for c in (member_cities or []) if c)
    neighborhoods = _unique(member_neighborhoods)

    if city_counts:
        city = city_counts.most_common(1)[0][0]
    else:
        city = user_city or UNKNOWN_CITY

    return LocationMatch(
        city=city,
        same_neighborhood=bool(user_neighborhood) and user_neighborhood in neighborhoods,
        neighborhood=user_neighborhood or (neighborhoods[0] if neighborhoods else None),
    )


def find_shared_interests(
    user_interests: Optional[Iterable[str]],
    member_interests: Optional[Iterable[str]],
) -> List[str]:
    member_set = set(member_interests or [])
    shared = [i for i in (user_interests or []) if i in member_set]
    return _unique(shared)[:MAX_SHARED_INTERESTS]


def find_shared_availability(
    user_availability: Optional[Iterable[str]],
    member_availability: Optional[Iterable[str]],
) -> List[str]:
    member_set = set(member_availability or [])
    return _unique(s for s in (user_availability or []) if s in member_set)


def calculate_match_details(
    user: CompatibilityProfile,
    members: Optional[Iterable[CompatibilityProfile]],
) -> MatchDetails:
    members = list(members or [])

    member_interests: List[str] = []
    member_availability: List[str] = []
    for member in members:
        member_interests.extend(member.interests)
        member_availability.extend(member.availability_slots)

    return MatchDetails(
        shared_interests=find_shared_interests(user.interests, member_interests),
        specialty_match=calculate_specialty_match(user.specialty, [m.specialty for m in members]),
        location_match=calculate_location_match(
            user.city,
            user.neighborhood,
            [m.city for m in members],
            [m.neighborhood for m in members],
        ),
        shared_availability=find_shared_availability(user.availability_slots, member_availability),
    )


def average_match_score(
    scores: Optional[Mapping[str, Optional[float]]],
    member_ids: Optional[Iterable[str]],
) -> Optional[float]:
    """
    Mean of the known, non-negative scores for ``member_ids``, one decimal.

    Returns None when no member has a score, which is not the same as 0.
    """
    scores = scores or {}
    known = [
        scores[m] for m in (member_ids or [])
        if scores.get(m) is not None and scores[m] >= 0
    ]
    if not known:
        return None
    # Half-up rounding, as shown to users
    return math.floor(sum(known) / len(known) * 10 + 0.5) / 10


def get_specialty_cluster(specialties: Optional[Iterable[Optional[str]]]) -> str:
    specialties = list(specialties or [])
    counts: Dict[str, int] = Counter(s for s in specialties if s)
    if not counts:
        return GENERAL_SPECIALTY_CLUSTER

    most_common, top_count = counts.most_common(1)[0]
    if len(counts) == 1 or top_count >= len(specialties) * SPECIALTY_MAJORITY_SHARE:
        return most_common

    for cluster, members in SPECIALTY_CLUSTERS:
        if any(s in members for s in specialties):
            return cluster
    return most_common


def format_slot(slot: str) -> str:
    if slot in AVAILABILITY_SLOT_LABELS:
        return AVAILABILITY_SLOT_LABELS[slot]
    return slot.replace("_", " ").title()
