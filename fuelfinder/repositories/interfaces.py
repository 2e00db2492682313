"""Repository abstractions for the service layer."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol

from fuelfinder.utils.geo import CacheKey


@dataclass
class CachedDistance:
    id: int
    key: CacheKey
    distance_km: float
    created_at: datetime
    updated_at: datetime
    expires_at: datetime

    def is_fresh(self, now: datetime) -> bool:
        return self.expires_at > now


@dataclass
class DistanceAggregate:
    total_entries: int
    expired_entries: int
    oldest_entry: datetime | None
    newest_entry: datetime | None
    last_updated: datetime | None


class DistanceRepository(Protocol):
    """Repository boundary for the ``distances`` cache table."""

    async def get(self, key: CacheKey) -> CachedDistance | None: ...

    async def add(
        self, key: CacheKey, distance_km: float, *, now: datetime, expires_at: datetime
    ) -> CachedDistance:
        """Insert a row; raises ``StoreConflictError`` when the key already exists."""
        ...

    async def refresh(
        self, record_id: int, distance_km: float, *, now: datetime, expires_at: datetime
    ) -> bool:
        """Overwrite distance and expiry in place; False when the row is gone."""
        ...

    async def delete_expired(self, now: datetime) -> int: ...

    async def count_expired(self, now: datetime) -> int: ...

    async def aggregate(self, now: datetime) -> DistanceAggregate: ...
