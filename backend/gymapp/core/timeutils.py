"""
Time helpers. Every instant the app stores or compares is timezone-aware UTC;
naive values (user input without offset, SQLite reads) are taken as UTC.
"""
from datetime import datetime, timezone

from gymapp.core.errors import InvalidInput


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def parse_instant(value: str | datetime, field: str = "time") -> datetime:
    """Parse an ISO-8601 instant ('Z' suffix accepted). Raises InvalidInput."""
    if isinstance(value, datetime):
        return as_utc(value)
    if not isinstance(value, str) or not value.strip():
        raise InvalidInput(f"Invalid {field} format: {value!r}")
    raw = value.strip()
    if raw.endswith(("Z", "z")):
        raw = raw[:-1] + "+00:00"
    try:
        return as_utc(datetime.fromisoformat(raw))
    except ValueError as e:
        raise InvalidInput(f"Invalid {field} format: {value!r}") from e


def isoformat(dt: datetime | None) -> str | None:
    return as_utc(dt).isoformat() if dt else None
