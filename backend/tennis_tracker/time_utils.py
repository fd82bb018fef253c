"""Helpers for working with timezone-aware datetimes."""

from __future__ import annotations

from datetime import datetime, timezone


def coerce_utc(value: datetime | None) -> datetime | None:
    """Return a UTC-normalized datetime, assuming naive values are already UTC."""

    if value is None:
        return None

    if value.tzinfo is None or value.utcoffset() is None:
        return value.replace(tzinfo=timezone.utc)

    return value.astimezone(timezone.utc)


def naive_utc(value: datetime | None) -> datetime | None:
    """Return ``value`` converted to UTC with the tzinfo stripped.

    Columns are declared as plain ``DateTime`` so every stored timestamp is
    naive UTC; SQLite would otherwise drop the offset silently.
    """

    coerced = coerce_utc(value)
    if coerced is None:
        return None
    return coerced.replace(tzinfo=None)


def utcnow() -> datetime:
    """Return the current time as naive UTC, ready to be stored."""

    return datetime.now(timezone.utc).replace(tzinfo=None)
