"""UTC datetime helpers.

Every datetime stored or compared by the service is timezone-aware UTC.
"""

from datetime import UTC, datetime


def utc_now() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(UTC)


def ensure_utc(dt: datetime | None) -> datetime | None:
    """Normalize a datetime to aware UTC.

    Naive values are taken to already be UTC; aware values are converted.
    None passes through.
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)
