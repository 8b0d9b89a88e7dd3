"""
Time Tool

Timezone-aware datetime helpers shared by the estimator, cache, recorder
and schemas. All instants inside the service are UTC-aware; naive values
coming from stored documents or request bodies are interpreted as UTC.

Functions:
- utcnow(): Current UTC time (aware)
- ensure_utc(value): Attach/convert a datetime to UTC
- hours_between(start, end): Signed hours from start to end
"""

from datetime import datetime, timezone


def utcnow() -> datetime:
    """Current time as a UTC-aware datetime."""
    return datetime.now(timezone.utc)


def to_iso(value: datetime) -> str:
    """Render an instant as ISO 8601 UTC with a 'Z' suffix."""
    return ensure_utc(value).isoformat().replace("+00:00", "Z")


def ensure_utc(value: datetime) -> datetime:
    """
    Return value as a UTC-aware datetime.

    Naive datetimes are assumed to already be UTC.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def hours_between(start: datetime, end: datetime) -> float:
    """Signed number of hours from start to end (negative if end is earlier)."""
    return (ensure_utc(end) - ensure_utc(start)).total_seconds() / 3600.0
