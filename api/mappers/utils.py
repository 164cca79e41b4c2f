"""Helpers shared by the entity mappers."""

from datetime import UTC, datetime


def as_utc(value: datetime | None) -> datetime | None:
    """Normalize a datetime to timezone-aware UTC.

    Naive values are taken to already be UTC (SQLite returns them that way).
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)
