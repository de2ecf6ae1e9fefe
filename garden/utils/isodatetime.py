"""ISO 8601 timestamp conversion.

All persisted instants are UTC strings with millisecond precision and a
'Z' suffix, e.g. '2025-12-23T10:30:00.000Z'. The fixed width keeps them
lexicographically ordered, which the stores rely on for ``order_by``.
"""

from datetime import datetime, timedelta, timezone

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
ONE_MS = timedelta(milliseconds=1)


def _as_utc(dt: datetime) -> datetime:
    # Naive datetimes are treated as UTC
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def to_timestamp(dt: datetime) -> str:
    """Convert datetime to an ISO 8601 UTC string.

    Args:
        dt: datetime object (naive datetimes treated as UTC)

    Returns:
        Timestamp string with millisecond precision and 'Z' suffix
    """
    dt = _as_utc(dt)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt.microsecond // 1000:03d}Z"


def to_datetime(value: str) -> datetime:
    """Parse an ISO 8601 string into an aware UTC datetime.

    Accepts the 'Z' suffix as well as explicit offsets.

    Raises:
        ValueError: If the string is not ISO 8601
    """
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return _as_utc(datetime.fromisoformat(value))


def to_millis(dt: datetime) -> int:
    """Milliseconds since the Unix epoch."""
    return (_as_utc(dt) - EPOCH) // ONE_MS
