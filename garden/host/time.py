"""Time and timestamp utilities.

Everything time-dependent in the garden takes a ``Clock``: a zero-argument
callable returning an aware UTC datetime. ``now_utc`` is the real one.
"""

from datetime import datetime, timedelta, timezone
from typing import Callable

Clock = Callable[[], datetime]


def now_utc() -> datetime:
    """Get current UTC time.

    Returns:
        datetime object with UTC timezone
    """
    return datetime.now(timezone.utc)


class FixedClock:
    """Manually advanced clock for simulations and tests.

    Example:
        >>> clock = FixedClock(datetime(2025, 1, 1, tzinfo=timezone.utc))
        >>> clock.advance(minutes=16)
        >>> clock()
        datetime.datetime(2025, 1, 1, 0, 16, tzinfo=datetime.timezone.utc)
    """

    def __init__(self, start: datetime | None = None):
        self._now = start if start is not None else now_utc()

    def __call__(self) -> datetime:
        return self._now

    def advance(self, **delta: float) -> datetime:
        """Move the clock forward by ``timedelta(**delta)`` and return the new time."""
        self._now = self._now + timedelta(**delta)
        return self._now

    def set(self, when: datetime) -> None:
        self._now = when
