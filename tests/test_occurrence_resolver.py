from datetime import date, datetime, timezone

import pytest

from app.desk.services.occurrence_resolver import (
    DAY_NAMES,
    is_past_occurrence,
    occurrence_key,
    resolve_next_occurrence,
    template_weekday,
)
from tests.conftest import NOW, WEDNESDAY


def test_template_weekday_counts_from_sunday():
    assert template_weekday(date(2026, 10, 18)) == 0  # Sunday
    assert template_weekday(date(2026, 10, 21)) == WEDNESDAY
    assert template_weekday(date(2026, 10, 24)) == 6  # Saturday
    assert DAY_NAMES[WEDNESDAY] == "Wednesday"


def test_same_weekday_resolves_to_today():
    assert resolve_next_occurrence(WEDNESDAY, NOW) == date(2026, 10, 21)


def test_same_weekday_late_in_the_day_is_still_today():
    late = datetime(2026, 10, 21, 23, 59, tzinfo=timezone.utc)
    assert resolve_next_occurrence(WEDNESDAY, late) == date(2026, 10, 21)


def test_next_weekday_resolves_to_tomorrow():
    assert resolve_next_occurrence(WEDNESDAY + 1, NOW) == date(2026, 10, 22)


def test_earlier_weekday_wraps_to_next_week():
    # Monday after a Wednesday reference
    assert resolve_next_occurrence(1, NOW) == date(2026, 10, 26)
    # Sunday
    assert resolve_next_occurrence(0, NOW) == date(2026, 10, 25)


@pytest.mark.parametrize("weekday", [-1, 7, 42])
def test_out_of_range_weekday_is_rejected(weekday):
    with pytest.raises(ValueError):
        resolve_next_occurrence(weekday, NOW)


def test_occurrence_key_is_stable_and_lockable():
    first = occurrence_key(5, date(2026, 10, 21))
    second = occurrence_key(5, date(2026, 10, 21))

    assert first == second
    assert first.lock_key == (5, date(2026, 10, 21).toordinal())
    assert occurrence_key(5, date(2026, 10, 28)).lock_key != first.lock_key
    assert all(0 <= part < 2**31 for part in first.lock_key)


def test_is_past_occurrence_compares_dates_only():
    assert is_past_occurrence(date(2026, 10, 20), NOW)
    assert not is_past_occurrence(date(2026, 10, 21), NOW)
    assert not is_past_occurrence(date(2026, 10, 22), NOW)
