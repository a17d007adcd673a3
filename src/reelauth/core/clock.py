"""Clock abstraction.

Token issuance, expiry checks and the resend debounce all read time through
a ``Clock`` so that tests can move time forward deterministically.
"""

from datetime import datetime, timedelta, timezone
from typing import Protocol


class Clock(Protocol):
    """Source of the current time."""

    def now(self) -> datetime:
        """Return the current timezone-aware UTC time."""
        ...


class SystemClock:
    """Clock backed by the system wall clock."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class FrozenClock:
    """Clock that only moves when told to.

    Example:
        clock = FrozenClock(datetime(2024, 1, 1, tzinfo=timezone.utc))
        clock.advance(seconds=30)
    """

    def __init__(self, start: datetime | None = None) -> None:
        current = start or datetime.now(timezone.utc)
        if current.tzinfo is None:
            current = current.replace(tzinfo=timezone.utc)
        self._current = current

    def now(self) -> datetime:
        return self._current

    def set(self, value: datetime) -> None:
        """Jump to an absolute point in time."""
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        self._current = value

    def advance(self, seconds: float = 0, **kwargs: float) -> datetime:
        """Move the clock forward and return the new time."""
        self._current = self._current + timedelta(seconds=seconds, **kwargs)
        return self._current


def to_timestamp(value: datetime) -> int:
    """Convert a datetime to whole Unix-epoch seconds."""
    return int(value.timestamp())


def from_timestamp(value: int) -> datetime:
    """Convert Unix-epoch seconds to a timezone-aware UTC datetime."""
    return datetime.fromtimestamp(value, tz=timezone.utc)
