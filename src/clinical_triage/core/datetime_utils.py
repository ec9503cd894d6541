"""Datetime helpers shared across the application."""

from __future__ import annotations

from datetime import UTC, datetime

__all__ = [
    "display_datetime",
    "ensure_utc",
    "minutes_since",
    "serialize_datetime",
    "utc_now",
]


def utc_now() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(tz=UTC)


def ensure_utc(value: datetime | None) -> datetime | None:
    """Return ``value`` as aware UTC; naive values are assumed to be UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def serialize_datetime(value: datetime | None) -> str | None:
    """Serialise ``value`` to ISO 8601 in UTC."""
    if value is None:
        return None
    normalized = ensure_utc(value) or value
    return normalized.isoformat()


def minutes_since(value: datetime, now: datetime) -> int:
    """Return whole minutes elapsed from ``value`` to ``now``, never negative."""
    start = ensure_utc(value) or value
    end = ensure_utc(now) or now
    elapsed = (end - start).total_seconds() // 60
    return max(0, int(elapsed))


def display_datetime(value: datetime | None) -> str | None:
    """Return a user-friendly representation of ``value``."""
    if value is None:
        return None
    display = ensure_utc(value) or value
    return display.astimezone().strftime("%b %d, %Y %I:%M %p")
