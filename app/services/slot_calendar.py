"""
Weekend slot calendar.

Pure date math relative to an explicit "now". All wall-clock values are in
the slot time zone (``settings.SLOT_TIMEZONE`` unless a zone is passed in).
Naive datetimes are taken to already be in that zone.
"""
from datetime import date, datetime, time, timedelta
from typing import NamedTuple, Optional, Tuple
from zoneinfo import ZoneInfo

from app.config.constants import BOOKING_SEARCH_WINDOW_DAYS, SLOT_START_TIMES, WEEKEND_DAYS
from app.core.config import settings
from app.core.errors import ValidationError

END_OF_DAY = time(23, 59, 59, 999000)


class WeekendInstants(NamedTuple):
    friday: datetime
    saturday: datetime
    sunday: datetime


def slot_timezone() -> ZoneInfo:
    return ZoneInfo(settings.SLOT_TIMEZONE)


def to_local(moment: datetime, tz: Optional[ZoneInfo] = None) -> datetime:
    tz = tz or slot_timezone()
    if moment.tzinfo is None:
        return moment.replace(tzinfo=tz)
    return moment.astimezone(tz)


def _day_of_week(day: date) -> int:
    # 0=Sunday .. 6=Saturday
    return day.isoweekday() % 7


def _at(day: date, hour: int, minute: int, tz: ZoneInfo) -> datetime:
    return datetime.combine(day, time(hour, minute), tzinfo=tz)


def next_weekend_instants(now: datetime, tz: Optional[ZoneInfo] = None) -> WeekendInstants:
    """
    Upcoming Friday 19:00, Saturday 19:00 and Sunday 12:00 relative to ``now``.

    On a Friday the slot is today's; on a Saturday or Sunday it already
    points at the following weekend.
    """
    tz = tz or slot_timezone()
    local = to_local(now, tz)
    dow = _day_of_week(local.date())

    if dow == 0:
        days_to_friday = 5
    elif dow == 6:
        days_to_friday = 6
    else:
        days_to_friday = 5 - dow

    friday = local.date() + timedelta(days=days_to_friday)
    return WeekendInstants(
        friday=_at(friday, *SLOT_START_TIMES["friday"], tz),
        saturday=_at(friday + timedelta(days=1), *SLOT_START_TIMES["saturday"], tz),
        sunday=_at(friday + timedelta(days=2), *SLOT_START_TIMES["sunday"], tz),
    )


def slot_instant(day: str, now: datetime, tz: Optional[ZoneInfo] = None) -> datetime:
    if day not in WEEKEND_DAYS:
        raise ValidationError("invalid_day")
    return getattr(next_weekend_instants(now, tz), day)


def day_bounds(moment: datetime, tz: Optional[ZoneInfo] = None) -> Tuple[datetime, datetime]:
    """Midnight-to-midnight bounds of the local calendar day containing ``moment``."""
    tz = tz or slot_timezone()
    local_day = to_local(moment, tz).date()
    return datetime.combine(local_day, time.min, tzinfo=tz), datetime.combine(local_day, END_OF_DAY, tzinfo=tz)


def local_date(moment: datetime, tz: Optional[ZoneInfo] = None) -> date:
    return to_local(moment, tz).date()


def current_weekend_bounds(now: datetime, tz: Optional[ZoneInfo] = None) -> Tuple[datetime, datetime]:
    """
    Friday 00:00 through Sunday 23:59:59.999 of the weekend ``now`` belongs to.

    Unlike ``next_weekend_instants`` this stays on the same weekend while it
    is in progress: Saturday and Sunday look back to the Friday just gone.
    """
    tz = tz or slot_timezone()
    local = to_local(now, tz)
    dow = _day_of_week(local.date())

    if dow == 0:
        days_to_friday = -2
    elif dow == 6:
        days_to_friday = -1
    else:
        days_to_friday = 5 - dow

    friday = local.date() + timedelta(days=days_to_friday)
    sunday = friday + timedelta(days=2)
    return datetime.combine(friday, time.min, tzinfo=tz), datetime.combine(sunday, END_OF_DAY, tzinfo=tz)


def booking_search_bounds(now: datetime, tz: Optional[ZoneInfo] = None) -> Tuple[datetime, datetime]:
    """Start of the day a week ago through the end of the day a week ahead."""
    tz = tz or slot_timezone()
    today = to_local(now, tz).date()
    window = timedelta(days=BOOKING_SEARCH_WINDOW_DAYS)
    return (
        datetime.combine(today - window, time.min, tzinfo=tz),
        datetime.combine(today + window, END_OF_DAY, tzinfo=tz),
    )


def day_label(moment: datetime, tz: Optional[ZoneInfo] = None) -> str:
    dow = _day_of_week(local_date(moment, tz))
    if dow == 5:
        return "friday"
    if dow == 6:
        return "saturday"
    return "sunday"
