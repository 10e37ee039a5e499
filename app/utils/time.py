"""Utility functions for time handling.

All timestamps are UTC and timezone-aware. They are persisted as ISO-8601
strings with microseconds and an explicit offset (``+00:00``), which keeps
lexicographic ordering in SQLite equal to chronological ordering.
"""

from __future__ import annotations

from datetime import datetime, time, timezone
from typing import Any


def utc_now() -> datetime:
    """Return current UTC time as an aware datetime."""
    return datetime.now(timezone.utc)


def iso_now(*, timespec: str | None = None) -> str:
    """Return current UTC time as an ISO8601 string (timezone-aware)."""
    if timespec:
        return utc_now().isoformat(timespec=timespec)
    return to_utc_iso(utc_now())


def to_utc_iso(dt: datetime) -> str:
    """Normalize *dt* to UTC and render it in the storage format (microseconds, ``+00:00``)."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).isoformat(timespec="microseconds")


def local_midnight_utc(now: datetime | None = None) -> datetime:
    """Return the start of the current local day, expressed in UTC."""
    local_now = (now or utc_now()).astimezone()
    midnight = datetime.combine(local_now.date(), time.min, tzinfo=local_now.tzinfo)
    return midnight.astimezone(timezone.utc)


def coerce_datetime(value: Any) -> datetime | None:
    """
    Coerce value to datetime, returning None on failure.

    Naive values are assumed to be UTC. A trailing ``Z`` is accepted.
    """
    if value is None:
        return None

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        raw = value.strip()
        if raw.endswith("Z"):
            raw = raw[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(raw)
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is not None:
        return parsed.astimezone(timezone.utc)
    return parsed.replace(tzinfo=timezone.utc)
