from datetime import date, datetime, timedelta, timezone

import pytest

from weeks import (
    current_week_start,
    this_thursday,
    thursday_label,
    to_epoch_ms,
    week_start,
    week_start_ms,
)

MONDAY = datetime(2025, 10, 13)


@pytest.mark.parametrize("offset", range(7))
def test_every_day_of_the_week_maps_to_its_monday(offset):
    moment = MONDAY + timedelta(days=offset, hours=23, minutes=59, seconds=59)
    assert week_start(moment) == MONDAY


def test_week_start_is_monday_midnight():
    result = week_start(datetime(2025, 10, 16, 9, 15, 42, 1234))
    assert result.weekday() == 0
    assert (result.hour, result.minute, result.second, result.microsecond) == (0, 0, 0, 0)


def test_sunday_belongs_to_previous_monday():
    sunday = datetime(2025, 10, 19, 8)
    assert week_start(sunday) == datetime(2025, 10, 13)


def test_next_monday_starts_a_new_week():
    assert week_start(datetime(2025, 10, 20)) == datetime(2025, 10, 20)
    assert week_start_ms(datetime(2025, 10, 20)) != week_start_ms(datetime(2025, 10, 19, 23, 59))


def test_keeps_timezone_of_input():
    moment = datetime(2025, 10, 15, 12, tzinfo=timezone.utc)
    assert week_start(moment) == datetime(2025, 10, 13, tzinfo=timezone.utc)
    assert week_start_ms(moment) == 1760313600000


def test_week_start_ms_matches_epoch_ms_of_monday():
    assert week_start_ms(MONDAY + timedelta(days=3)) == to_epoch_ms(MONDAY)


def test_current_week_start_uses_given_now():
    assert current_week_start(MONDAY + timedelta(days=2)) == to_epoch_ms(MONDAY)


@pytest.mark.parametrize(
    "today, expected",
    [
        (date(2025, 10, 13), date(2025, 10, 16)),  # Monday
        (date(2025, 10, 16), date(2025, 10, 16)),  # Thursday itself
        (date(2025, 10, 17), date(2025, 10, 23)),  # Friday
        (date(2025, 10, 19), date(2025, 10, 23)),  # Sunday
    ],
)
def test_this_thursday(today, expected):
    assert this_thursday(today) == expected


def test_thursday_label():
    assert thursday_label(date(2025, 10, 14)) == "October 16, 2025"
