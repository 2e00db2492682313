# fuelfinder/utils/datetime.py
from __future__ import annotations

from datetime import UTC, datetime


def as_utc_naive(dt: datetime | None) -> datetime | None:
    if dt is None:
        return None
    if dt.tzinfo is not None:
        # normalize to UTC and drop tzinfo (columns are naive UTC)
        return dt.astimezone(UTC).replace(tzinfo=None)
    return dt


def utcnow() -> datetime:
    return datetime.now(UTC).replace(tzinfo=None)


def dt_to_iso(dt: datetime | None) -> str | None:
    dt = as_utc_naive(dt)
    return dt.isoformat(timespec="seconds") if dt else None
