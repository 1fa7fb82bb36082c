"""
Resolution of weekly class templates into dated occurrences.

Weekdays follow the schedule convention used by class templates:
0 = Sunday, 1 = Monday ... 6 = Saturday.
"""
from datetime import date, datetime, timedelta
from typing import NamedTuple

from app.core.clock import local_date

DAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]


class OccurrenceKey(NamedTuple):
    """Identity of one dated instance of a class template"""
    class_id: int
    date: date

    @property
    def lock_key(self) -> tuple:
        # Two int4 values for pg_advisory_xact_lock(int, int)
        return self.class_id, self.date.toordinal()


def template_weekday(day: date) -> int:
    """Schedule weekday (Sunday = 0) of a calendar date"""
    return day.isoweekday() % 7


def resolve_next_occurrence(weekday: int, reference: datetime) -> date:
    """
    Next calendar date falling on `weekday`, counting from `reference`.

    A template on today's weekday resolves to today, whatever the time of
    day; callers that care whether it already happened compare dates.
    """
    if not 0 <= weekday <= 6:
        raise ValueError(f"weekday must be in 0..6, got {weekday}")

    today = local_date(reference)
    days_until = (weekday - template_weekday(today) + 7) % 7
    return today + timedelta(days=days_until)


def occurrence_key(class_id: int, occurrence_date: date) -> OccurrenceKey:
    return OccurrenceKey(class_id, occurrence_date)


def is_past_occurrence(occurrence_date: date, now: datetime) -> bool:
    return occurrence_date < local_date(now)
