"""Time Utilities - UTC timestamps, parsing and clocks"""
from datetime import datetime, timezone, timedelta
from typing import Callable, Optional
from dateutil import parser as date_parser


# A clock is any zero-argument callable returning an aware UTC datetime
Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Get current UTC datetime"""
    return datetime.now(timezone.utc)


def format_iso(dt: datetime) -> str:
    """
    Format datetime to ISO 8601 string

    Args:
        dt: Datetime object

    Returns:
        ISO formatted string with Z suffix for UTC
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.isoformat().replace("+00:00", "Z")


def parse_iso(iso_string: str) -> datetime:
    """
    Parse ISO 8601 string to datetime

    Args:
        iso_string: ISO formatted datetime string

    Returns:
        Datetime object in UTC
    """
    dt = date_parser.isoparse(iso_string)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def ensure_aware(dt: datetime) -> datetime:
    """Treat naive datetimes as UTC"""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def next_after(candidate: datetime, previous: Optional[datetime]) -> datetime:
    """
    Return candidate, or the smallest step after previous when candidate
    does not move forward. Keeps per-entity timestamps strictly increasing.
    """
    candidate = ensure_aware(candidate)
    if previous is None:
        return candidate
    previous = ensure_aware(previous)
    if candidate <= previous:
        return previous + timedelta(microseconds=1)
    return candidate


def month_key(dt: datetime) -> str:
    """Bucket key used by monthly reports, e.g. 2024-03"""
    return ensure_aware(dt).strftime("%Y-%m")


class FrozenClock:
    """Manually advanced clock, used by tests and scripts"""

    def __init__(self, start: Optional[datetime] = None):
        self._now = ensure_aware(start) if start else utc_now()

    def __call__(self) -> datetime:
        return self._now

    def advance(self, **delta) -> datetime:
        """Move the clock forward by the given timedelta keyword arguments"""
        self._now = self._now + timedelta(**delta)
        return self._now
