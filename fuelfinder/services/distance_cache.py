"""Cache-aside layer in front of the driving-distance provider.

Rows are keyed by the origin/destination pair quantized to 5 decimals, so GPS
jitter below ~1 m collapses onto one row. A fresh row is served without any
provider call; a missing or stale row is recomputed from the *unquantized*
coordinates and written back with a new expiry.

Writers for one key are serialized in-process by a per-key lock. Across
processes the unique constraint on the key arbitrates: the losing insert sees
``StoreConflictError`` and falls back to updating the winner's row.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Awaitable, Callable, Sequence
from contextlib import asynccontextmanager
from datetime import datetime, timedelta

import structlog

from fuelfinder.core.exceptions import StoreConflictError
from fuelfinder.infra.unit_of_work import UnitOfWork
from fuelfinder.repositories.interfaces import CachedDistance
from fuelfinder.services.distance_provider import DistanceProvider
from fuelfinder.utils.datetime import utcnow
from fuelfinder.utils.geo import CacheKey, Coordinates

logger = structlog.get_logger(__name__)

DEFAULT_TTL = timedelta(days=30)
DEFAULT_MAX_CONCURRENCY = 5
# write-back attempts after a lost insert race
_STORE_ATTEMPTS = 3

UsageRecorder = Callable[[str, str, int], Awaitable[None]]


class _KeyLocks:
    """Per-key asyncio locks that are dropped once nobody holds or awaits them."""

    def __init__(self) -> None:
        self._locks: dict[CacheKey, asyncio.Lock] = {}
        self._users: dict[CacheKey, int] = {}

    @asynccontextmanager
    async def hold(self, key: CacheKey) -> AsyncIterator[None]:
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._users[key] = self._users.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._users[key] -= 1
            if self._users[key] == 0:
                del self._users[key]
                del self._locks[key]

    def __len__(self) -> int:
        return len(self._locks)


class DistanceCache:
    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWork],
        provider: DistanceProvider,
        *,
        ttl: timedelta = DEFAULT_TTL,
        max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
        clock: Callable[[], datetime] = utcnow,
        usage_recorder: UsageRecorder | None = None,
    ) -> None:
        if ttl <= timedelta(0):
            raise ValueError("ttl must be positive")
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")
        self._uow_factory = uow_factory
        self._provider = provider
        self._ttl = ttl
        self._clock = clock
        self._usage_recorder = usage_recorder
        self._provider_slots = asyncio.Semaphore(max_concurrency)
        self._key_locks = _KeyLocks()

    @property
    def ttl(self) -> timedelta:
        return self._ttl

    async def get_distance(self, origin: Coordinates, destination: Coordinates) -> float:
        origin.validate()
        destination.validate()
        key = CacheKey.from_coordinates(origin, destination)

        record = await self._read(key)
        if record is not None and record.is_fresh(self._clock()):
            logger.debug("distance_cache_hit", key=list(key))
            return record.distance_km

        async with self._key_locks.hold(key):
            # Another coroutine may have refreshed the key while we waited
            record = await self._read(key)
            if record is not None and record.is_fresh(self._clock()):
                logger.debug("distance_cache_hit", key=list(key), after_wait=True)
                return record.distance_km

            logger.info(
                "distance_cache_miss",
                key=list(key),
                reason="stale" if record is not None else "missing",
            )
            distance_km = await self._fetch(origin, destination)
            await self._store(key, distance_km, record)
            return distance_km

    async def batch_get_distances(
        self, origin: Coordinates, destinations: Sequence[Coordinates]
    ) -> list[float]:
        """Distances from ``origin`` to each destination, in input order.

        Fail-fast: the first failing lookup cancels the remaining ones and its
        error propagates.
        """

        if not destinations:
            return []
        origin.validate()
        for destination in destinations:
            destination.validate()

        tasks = [asyncio.ensure_future(self.get_distance(origin, d)) for d in destinations]
        try:
            results = await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

        logger.info("distance_cache_batch", size=len(destinations))
        return list(results)

    async def _read(self, key: CacheKey) -> CachedDistance | None:
        async with self._uow_factory() as uow:
            return await uow.distances.get(key)

    async def _fetch(self, origin: Coordinates, destination: Coordinates) -> float:
        async with self._provider_slots:
            distance_km = await self._provider.fetch_distance_km(origin, destination)

        if self._usage_recorder is not None:
            try:
                await self._usage_recorder("google_maps", "distance_matrix_requests", 1)
            except Exception as exc:  # noqa: BLE001
                logger.error("cost_tracking_failed", error=str(exc))
        return distance_km

    async def _store(
        self, key: CacheKey, distance_km: float, existing: CachedDistance | None
    ) -> None:
        now = self._clock()
        expires_at = now + self._ttl

        if existing is not None:
            async with self._uow_factory() as uow:
                refreshed = await uow.distances.refresh(
                    existing.id, distance_km, now=now, expires_at=expires_at
                )
            if refreshed:
                return
            # Deleted by cleanup between our read and the update

        try:
            async with self._uow_factory() as uow:
                await uow.distances.add(key, distance_km, now=now, expires_at=expires_at)
            return
        except StoreConflictError:
            logger.info("distance_cache_conflict", key=list(key))

        # Another writer inserted the key first; last writer wins on the update.
        # Cleanup may delete the winner before we re-read it, so retry a few times.
        for attempt in range(1, _STORE_ATTEMPTS + 1):
            try:
                async with self._uow_factory() as uow:
                    winner = await uow.distances.get(key)
                    if winner is None:
                        await uow.distances.add(
                            key, distance_km, now=now, expires_at=expires_at
                        )
                        return
                    if await uow.distances.refresh(
                        winner.id, distance_km, now=now, expires_at=expires_at
                    ):
                        return
            except StoreConflictError:
                logger.info("distance_cache_conflict", key=list(key), attempt=attempt)

        # The lookup itself succeeded; only the write-back is given up
        logger.warning("distance_cache_store_skipped", key=list(key))


__all__ = ["DEFAULT_MAX_CONCURRENCY", "DEFAULT_TTL", "DistanceCache"]
