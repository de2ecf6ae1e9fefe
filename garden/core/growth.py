"""Growth and hydration derivations.

Pure functions over a plant's stored instants and its duration. Nothing
here reads a clock: ``now`` is always passed in, so the same inputs give
the same stage on every client.

GROWTH:
- progress = clamp((now - planted_at) / duration, 0, 1)
- stage thresholds are closed on the lower bound:
  sprout [0, .25), seedling [.25, .5), budding [.5, .75),
  blooming [.75, 1), ready [1, ...)

HYDRATION:
- linear drain from 100 to 0 over 24 hours since the last watering
- watering resets the clock, there is no partial credit
"""

import math
from datetime import datetime
from enum import Enum
from typing import NamedTuple

from ..utils import isodatetime

MS_PER_SECOND = 1000
MS_PER_MINUTE = 60 * MS_PER_SECOND
MS_PER_HOUR = 60 * MS_PER_MINUTE
MS_PER_DAY = 24 * MS_PER_HOUR

HYDRATION_WINDOW_MS = MS_PER_DAY
NEAR_FRACTION = 0.10
NEAR_ABSOLUTE_MS = MS_PER_HOUR

# Hydration below which a plant asks to be watered / is flagged as thirsty
THIRSTY_BELOW = 50
PARCHED_BELOW = 20

READY_LABEL = "Ready!"


class GrowthStage(str, Enum):
    """Growth stages in ascending order."""

    SPROUT = "sprout"
    SEEDLING = "seedling"
    BUDDING = "budding"
    BLOOMING = "blooming"
    READY = "ready"


# (lower bound, stage), checked from the top down
STAGE_THRESHOLDS = (
    (1.0, GrowthStage.READY),
    (0.75, GrowthStage.BLOOMING),
    (0.5, GrowthStage.BUDDING),
    (0.25, GrowthStage.SEEDLING),
    (0.0, GrowthStage.SPROUT),
)


class TimeRemaining(NamedTuple):
    """Countdown until a plant is ready."""

    days: int
    hours: int
    minutes: int
    seconds: int
    total_ms: int
    is_ready: bool
    is_near: bool


def _millis(instant: datetime | str) -> int:
    if isinstance(instant, str):
        instant = isodatetime.to_datetime(instant)
    return isodatetime.to_millis(instant)


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def growth_duration_ms(duration_minutes: int) -> int:
    return duration_minutes * MS_PER_MINUTE


def growth_progress(
    planted_at: datetime | str,
    duration_minutes: int,
    now: datetime | str,
) -> float:
    """Fraction of the growth period that has elapsed, clamped to [0, 1].

    A ``now`` earlier than ``planted_at`` (clock skew between clients)
    counts as no progress.
    """
    elapsed = _millis(now) - _millis(planted_at)
    progress = elapsed / growth_duration_ms(duration_minutes)
    return min(max(progress, 0.0), 1.0)


def growth_stage(
    planted_at: datetime | str,
    duration_minutes: int,
    now: datetime | str,
) -> GrowthStage:
    """Growth stage of a plant at ``now``.

    Once ``READY`` is reached it is stable: progress is clamped at 1 and
    cannot decrease as ``now`` moves forward.

    Examples:
        >>> t0 = datetime(2025, 1, 1, tzinfo=timezone.utc)
        >>> growth_stage(t0, 60, t0 + timedelta(minutes=16))
        <GrowthStage.SEEDLING: 'seedling'>
    """
    progress = growth_progress(planted_at, duration_minutes, now)
    for lower_bound, stage in STAGE_THRESHOLDS:
        if progress >= lower_bound:
            return stage
    return GrowthStage.SPROUT


def progress_percent(
    planted_at: datetime | str,
    duration_minutes: int,
    now: datetime | str,
) -> int:
    """Growth progress as a whole percentage in [0, 100]."""
    return min(_round_half_up(growth_progress(planted_at, duration_minutes, now) * 100), 100)


def hydration(last_watered_at: datetime | str, now: datetime | str) -> int:
    """Hydration level in [0, 100].

    Drains linearly from 100 at the moment of watering to 0 a day later.

    Examples:
        >>> hydration(t, t)
        100
        >>> hydration(t, t + timedelta(hours=12))
        50
    """
    elapsed = _millis(now) - _millis(last_watered_at)
    level = 100 - elapsed / HYDRATION_WINDOW_MS * 100
    return min(max(_round_half_up(level), 0), 100)


def needs_water(level: int) -> bool:
    return level < THIRSTY_BELOW


def is_parched(level: int) -> bool:
    return level < PARCHED_BELOW


def time_remaining(
    planted_at: datetime | str,
    duration_minutes: int,
    now: datetime | str,
) -> TimeRemaining:
    """Countdown until the plant is ready.

    ``is_near`` is true when under 10% of the total duration OR under one
    hour remains, whichever is more lenient.
    """
    total = growth_duration_ms(duration_minutes)
    elapsed = _millis(now) - _millis(planted_at)
    remaining = max(0, total - elapsed)

    days, rest = divmod(remaining, MS_PER_DAY)
    hours, rest = divmod(rest, MS_PER_HOUR)
    minutes, rest = divmod(rest, MS_PER_MINUTE)
    seconds = rest // MS_PER_SECOND

    is_near = remaining > 0 and (
        remaining < total * NEAR_FRACTION or remaining < NEAR_ABSOLUTE_MS
    )

    return TimeRemaining(
        days=days,
        hours=hours,
        minutes=minutes,
        seconds=seconds,
        total_ms=remaining,
        is_ready=remaining == 0,
        is_near=is_near,
    )


def _two_most_significant(units: list[tuple[int, str]], fallback: str) -> str:
    parts = [f"{value}{suffix}" for value, suffix in units if value > 0]
    if not parts:
        return fallback
    return " ".join(parts[:2])


def format_duration(minutes: int) -> str:
    """Format a duration in whole minutes for display.

    Shows the two most significant non-zero units; never negative.

    Examples:
        >>> format_duration(0)
        '0m'
        >>> format_duration(90)
        '1h 30m'
        >>> format_duration(10080)
        '7d'
    """
    minutes = max(0, int(minutes))
    days, rest = divmod(minutes, 24 * 60)
    hours, mins = divmod(rest, 60)
    return _two_most_significant([(days, "d"), (hours, "h"), (mins, "m")], "0m")


def format_countdown(remaining: TimeRemaining) -> str:
    """Format a countdown for display.

    Shows the largest non-zero unit and the one right below it, even when
    that one is zero, so the reading steps evenly as time passes.

    Examples:
        "Ready!", "3d 4h", "1d 0h", "2h 5m", "12m 0s", "42s"
    """
    if remaining.is_ready:
        return READY_LABEL
    units = [
        f"{remaining.days}d",
        f"{remaining.hours}h",
        f"{remaining.minutes}m",
        f"{remaining.seconds}s",
    ]
    for index, value in enumerate(remaining[:3]):
        if value > 0:
            return f"{units[index]} {units[index + 1]}"
    return f"{remaining.seconds}s"
