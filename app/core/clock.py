"""Injected wall-clock source for membership and booking rules"""
from datetime import date, datetime, timezone
from typing import Protocol
from zoneinfo import ZoneInfo

from app.core.config import BUSINESS_TIMEZONE


class Clock(Protocol):
    def now(self) -> datetime:
        """Current instant, timezone-aware, in the business timezone"""
        ...


class SystemClock:
    """Reads the real wall clock"""

    def __init__(self, tz_name: str = BUSINESS_TIMEZONE):
        self.tz = ZoneInfo(tz_name)

    def now(self) -> datetime:
        return datetime.now(timezone.utc).astimezone(self.tz)


def local_date(instant: datetime) -> date:
    """Calendar date of an instant in the business timezone"""
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(ZoneInfo(BUSINESS_TIMEZONE)).date()


def to_utc(instant: datetime) -> datetime:
    """
    Normalize an instant to aware UTC.

    Instants are always written in UTC; SQLite hands them back naive.
    """
    if instant.tzinfo is None:
        return instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(timezone.utc)


system_clock = SystemClock()


def get_clock() -> Clock:
    """FastAPI dependency, overridden in tests"""
    return system_clock
