"""Time source for revision bookkeeping.

Every "now" and every deprecation timestamp goes through a ``Clock`` so that
retention thresholds can be tested with fixed instants.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional, Protocol, runtime_checkable


def get_current_timestamp() -> datetime:
    """Get current UTC timestamp.

    Returns:
        Current timezone-aware UTC datetime
    """
    return datetime.now(timezone.utc)


@runtime_checkable
class Clock(Protocol):
    """Protocol for time sources."""

    def now(self) -> datetime:
        """Return the current instant as a timezone-aware UTC datetime."""
        ...


class SystemClock:
    """Wall-clock time."""

    def now(self) -> datetime:
        return get_current_timestamp()


class FixedClock:
    """Clock that only moves when told to.

    Example:
        >>> clock = FixedClock(datetime(2024, 1, 15, tzinfo=timezone.utc))
        >>> clock.advance(timedelta(minutes=10))
        >>> clock.now()
        datetime.datetime(2024, 1, 15, 0, 10, tzinfo=datetime.timezone.utc)
    """

    def __init__(self, instant: Optional[datetime] = None):
        self._instant = _as_utc(instant or get_current_timestamp())

    def now(self) -> datetime:
        return self._instant

    def set(self, instant: datetime) -> None:
        self._instant = _as_utc(instant)

    def advance(self, delta: timedelta) -> None:
        self._instant = self._instant + delta


def _as_utc(instant: datetime) -> datetime:
    # Naive datetimes are taken to be UTC
    if instant.tzinfo is None:
        return instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(timezone.utc)
