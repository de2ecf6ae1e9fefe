"""Administrative seed creation.

Seeds enter the garden only through ``create_seed``. Validation happens
before any store call, so a rejected seed leaves no trace.
"""

import logging
from dataclasses import replace
from datetime import datetime

from .config import MAX_DURATION_MINUTES, MIN_DURATION_MINUTES
from .core.growth import format_duration
from .core.lifecycle import Seed
from .core.types import SeedColor, Timestamp
from .exceptions import ValidationError
from .host.time import now_utc
from .store.base import DocumentStore

logger = logging.getLogger(__name__)

SEEDS = "seeds"


def validate_seed(
    message: str,
    duration_minutes: int,
    color: SeedColor | str,
    min_duration: int = MIN_DURATION_MINUTES,
    max_duration: int = MAX_DURATION_MINUTES,
) -> tuple[str, int, SeedColor]:
    """Validate seed parameters.

    Returns:
        (message, duration_minutes, color) normalized

    Raises:
        ValidationError: With a user-facing message on the first failure
    """
    if not isinstance(message, str) or not message.strip():
        raise ValidationError("Message cannot be empty")

    if isinstance(duration_minutes, bool) or not isinstance(duration_minutes, int):
        raise ValidationError(
            "Duration must be a whole number of minutes",
            {"duration_minutes": duration_minutes},
        )
    if duration_minutes < min_duration:
        raise ValidationError(
            f"Duration must be at least {min_duration} minute{'' if min_duration == 1 else 's'}",
            {"duration_minutes": duration_minutes, "min": min_duration},
        )
    if duration_minutes > max_duration:
        limit = "7 days" if max_duration == MAX_DURATION_MINUTES else format_duration(max_duration)
        raise ValidationError(
            f"Duration cannot exceed {limit}",
            {"duration_minutes": duration_minutes, "max": max_duration},
        )

    try:
        color = SeedColor(color)
    except ValueError:
        raise ValidationError(
            f"Unknown seed color: {color!r}",
            {"allowed": [c.value for c in SeedColor]},
        ) from None

    return message, duration_minutes, color


def create_seed(
    store: DocumentStore,
    message: str,
    duration_minutes: int,
    color: SeedColor | str,
    now: datetime | None = None,
    min_duration: int = MIN_DURATION_MINUTES,
    max_duration: int = MAX_DURATION_MINUTES,
) -> Seed:
    """Validate and write a new Seed.

    Args:
        store: Document store to write to
        message: The hidden message
        duration_minutes: Growth period in whole minutes
        color: One of the palette colors
        now: Creation instant (defaults to the current time)
        min_duration: Shortest allowed growth period (``Settings.min_duration_minutes``)
        max_duration: Longest allowed growth period (``Settings.max_duration_minutes``)

    Returns:
        The stored Seed, with its store-assigned id

    Raises:
        ValidationError: If any parameter is out of range
        TransientStoreError: If the store write fails
    """
    message, duration_minutes, color = validate_seed(
        message, duration_minutes, color, min_duration, max_duration
    )
    seed = Seed(
        id=None,
        message=message,
        duration_minutes=duration_minutes,
        color=color,
        created_at=Timestamp.from_datetime(now or now_utc()),
    )
    seed_id = store.create(SEEDS, seed.to_fields())
    logger.info("Created seed %s (%d minutes, %s)", seed_id, duration_minutes, color.value)
    return replace(seed, id=seed_id)
