"""Expiry sweep and statistics over the distance cache table."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

import structlog

from fuelfinder.infra.unit_of_work import UnitOfWork
from fuelfinder.utils.datetime import utcnow


@dataclass(frozen=True)
class CleanupResult:
    deleted_count: int
    timestamp: datetime


@dataclass(frozen=True)
class CacheStatistics:
    total_entries: int
    expired_entries: int
    oldest_entry: datetime | None
    newest_entry: datetime | None
    last_updated: datetime | None
    timestamp: datetime


class CacheMaintenanceService:
    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWork],
        *,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._uow_factory = uow_factory
        self._clock = clock

    async def cleanup_expired(self) -> CleanupResult:
        """Delete every row whose ``expires_at`` is in the past."""

        now = self._clock()
        async with self._uow_factory() as uow:
            deleted = await uow.distances.delete_expired(now)
        structlog.get_logger(__name__).info("distance_cache_cleanup", deleted_count=deleted)
        return CleanupResult(deleted_count=deleted, timestamp=now)

    async def count_expired(self) -> int:
        now = self._clock()
        async with self._uow_factory() as uow:
            return await uow.distances.count_expired(now)

    async def get_statistics(self) -> CacheStatistics:
        """Read-only aggregate; expired rows are counted, not deleted."""

        now = self._clock()
        async with self._uow_factory() as uow:
            aggregate = await uow.distances.aggregate(now)
        return CacheStatistics(
            total_entries=aggregate.total_entries,
            expired_entries=aggregate.expired_entries,
            oldest_entry=aggregate.oldest_entry,
            newest_entry=aggregate.newest_entry,
            last_updated=aggregate.last_updated,
            timestamp=now,
        )


__all__ = ["CacheMaintenanceService", "CacheStatistics", "CleanupResult"]
