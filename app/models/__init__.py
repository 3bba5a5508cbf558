from .event import Event, EventStatus, MeetupType
from .booking import Booking, BookingStatus
from .group import MatchGroup, GroupMember, GroupConversation, GroupStatus, GroupType
from .profile import Profile, OnboardingPreferences
