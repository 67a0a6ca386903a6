"""
UTC time helpers for lifecycle bookkeeping.

All persisted timestamps are timezone-aware UTC and stored as ISO-8601
strings, so lexical order in SQLite matches chronological order.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone


def utcnow() -> datetime:
    """Return the current UTC datetime with timezone info.

    Prefer this over ``datetime.utcnow()`` (which returns naive datetimes).
    """
    return datetime.now(tz=timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Attach UTC to a naive datetime, or convert an aware one to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def days_after(start: datetime, days: int) -> datetime:
    """Return ``start`` shifted forward by ``days`` whole days, in UTC.

    Raises:
        ValueError: If ``days`` is negative.
    """
    if days < 0:
        raise ValueError(f"days must be >= 0, got {days}.")
    return ensure_utc(start) + timedelta(days=days)


def to_db(value: datetime | None) -> str | None:
    """Serialize a datetime for a TEXT column (``None`` passes through)."""
    return ensure_utc(value).isoformat() if value is not None else None


def from_db(value: str | None) -> datetime | None:
    """Parse a TEXT timestamp column back into an aware UTC datetime."""
    return ensure_utc(datetime.fromisoformat(value)) if value else None
