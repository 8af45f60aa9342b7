"""UTC datetime utilities."""

from datetime import datetime, timezone

# Sort key stand-in for "no deadline"
FAR_FUTURE = datetime.max.replace(tzinfo=timezone.utc)


def utc_now() -> datetime:
    """Return timezone-aware UTC now."""
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime) -> datetime:
    """Treat naive datetimes as UTC so comparisons never mix naive and aware."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)
