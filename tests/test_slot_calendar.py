import pytest
from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo
from app.core.errors import ValidationError
from app.services.slot_calendar import (
    booking_search_bounds,
    current_weekend_bounds,
    day_bounds,
    day_label,
    next_weekend_instants,
    slot_instant,
)

BERLIN = ZoneInfo("Europe/Berlin")


def berlin(*args):
    return datetime(*args, tzinfo=BERLIN)


def test_next_weekend_from_wednesday():
    instants = next_weekend_instants(berlin(2025, 11, 12, 10, 30), BERLIN)

    assert instants.friday == berlin(2025, 11, 14, 19, 0)
    assert instants.saturday == berlin(2025, 11, 15, 19, 0)
    assert instants.sunday == berlin(2025, 11, 16, 12, 0)


def test_next_weekend_on_friday_is_today():
    instants = next_weekend_instants(berlin(2025, 11, 14, 22, 0), BERLIN)
    assert instants.friday == berlin(2025, 11, 14, 19, 0)


@pytest.mark.parametrize("now", [berlin(2025, 11, 15, 9, 0), berlin(2025, 11, 16, 9, 0)])
def test_next_weekend_from_weekend_points_to_following_friday(now):
    instants = next_weekend_instants(now, BERLIN)
    assert instants.friday == berlin(2025, 11, 21, 19, 0)


def test_next_weekend_is_deterministic_and_fixed_hours():
    now = berlin(2025, 3, 4, 8, 15)
    first = next_weekend_instants(now, BERLIN)
    second = next_weekend_instants(now, BERLIN)

    assert first == second
    assert (first.friday.hour, first.friday.minute) == (19, 0)
    assert (first.saturday.hour, first.saturday.minute) == (19, 0)
    assert (first.sunday.hour, first.sunday.minute) == (12, 0)
    assert first.saturday.date() == first.friday.date() + timedelta(days=1)
    assert first.sunday.date() == first.friday.date() + timedelta(days=2)
    assert first.friday.second == 0 and first.friday.microsecond == 0


def test_utc_input_is_read_in_slot_timezone():
    # 23:30 UTC on Friday is already Saturday 00:30 in Berlin
    now = datetime(2025, 11, 14, 23, 30, tzinfo=timezone.utc)
    instants = next_weekend_instants(now, BERLIN)
    assert instants.friday == berlin(2025, 11, 21, 19, 0)


def test_naive_input_is_taken_as_local():
    instants = next_weekend_instants(datetime(2025, 11, 12, 10, 0), BERLIN)
    assert instants.friday == berlin(2025, 11, 14, 19, 0)


def test_sunday_slot_across_dst_change_keeps_local_noon():
    # Berlin leaves summer time on Sunday 26 Oct 2025
    instants = next_weekend_instants(berlin(2025, 10, 22, 12, 0), BERLIN)

    assert instants.friday.utcoffset() == timedelta(hours=2)
    assert instants.sunday.utcoffset() == timedelta(hours=1)
    assert instants.sunday.hour == 12


def test_slot_instant_rejects_unknown_day():
    with pytest.raises(ValidationError) as exc:
        slot_instant("monday", berlin(2025, 11, 12), BERLIN)
    assert exc.value.reason == "invalid_day"


def test_day_bounds_cover_whole_local_day():
    start, end = day_bounds(berlin(2025, 11, 16, 12, 0), BERLIN)

    assert start == berlin(2025, 11, 16, 0, 0)
    assert end == berlin(2025, 11, 16, 23, 59, 59, 999000)


def test_current_weekend_bounds_stay_on_weekend_in_progress():
    expected = (berlin(2025, 11, 14), berlin(2025, 11, 16, 23, 59, 59, 999000))

    assert current_weekend_bounds(berlin(2025, 11, 12, 9, 0), BERLIN) == expected
    assert current_weekend_bounds(berlin(2025, 11, 15, 9, 0), BERLIN) == expected
    assert current_weekend_bounds(berlin(2025, 11, 16, 21, 0), BERLIN) == expected


def test_booking_search_bounds_reach_a_week_each_way():
    start, end = booking_search_bounds(berlin(2025, 11, 17, 8, 0), BERLIN)

    assert start == berlin(2025, 11, 10)
    assert end.date() == date(2025, 11, 24)
    assert (end.hour, end.minute) == (23, 59)


def test_day_label():
    assert day_label(berlin(2025, 11, 14, 19, 0), BERLIN) == "friday"
    assert day_label(berlin(2025, 11, 15, 19, 0), BERLIN) == "saturday"
    assert day_label(berlin(2025, 11, 16, 12, 0), BERLIN) == "sunday"
