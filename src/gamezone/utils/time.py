"""Timestamp helpers.

The memory provider hands datetimes back without tzinfo; everything written
by this package is UTC, so naive values are read as UTC.
"""

from datetime import UTC, datetime


def utcnow() -> datetime:
    return datetime.now(UTC)


def as_utc(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def sort_key(value: datetime | None) -> float:
    """Numeric key for ordering possibly-missing timestamps."""
    value = as_utc(value)
    return value.timestamp() if value else 0.0
