from datetime import datetime, timezone


def utc_now() -> datetime:
    """Return a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_aware(value: datetime) -> datetime:
    """Treat naive datetimes coming back from the store as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def locale_date(value: datetime) -> str:
    """Render a date the way en-US ``toLocaleDateString`` does (M/D/YYYY)."""
    return f"{value.month}/{value.day}/{value.year}"
