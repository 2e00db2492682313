"""SQLAlchemy implementation of the distance cache repository."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime
from decimal import Decimal

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError, InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from fuelfinder.core.exceptions import StoreConflictError, StoreUnavailableError
from fuelfinder.models.distance import DistanceRecord
from fuelfinder.repositories.interfaces import (
    CachedDistance,
    DistanceAggregate,
    DistanceRepository,
)
from fuelfinder.utils.geo import QUANTIZE_DIGITS, CacheKey


def _to_decimal(value: float) -> Decimal:
    return Decimal(f"{value:.{QUANTIZE_DIGITS}f}")


def _key_columns(key: CacheKey) -> dict[str, Decimal]:
    return {
        "from_lat": _to_decimal(key.from_lat),
        "from_lng": _to_decimal(key.from_lng),
        "to_lat": _to_decimal(key.to_lat),
        "to_lng": _to_decimal(key.to_lng),
    }


def _to_row(record: DistanceRecord) -> CachedDistance:
    return CachedDistance(
        id=int(record.id),
        key=CacheKey(
            float(record.from_lat),
            float(record.from_lng),
            float(record.to_lat),
            float(record.to_lng),
        ),
        distance_km=float(record.distance_km),
        created_at=record.created_at,
        updated_at=record.updated_at,
        expires_at=record.expires_at,
    )


@asynccontextmanager
async def translate_store_errors() -> AsyncIterator[None]:
    """Map driver-level failures onto the domain error taxonomy."""

    try:
        yield
    except IntegrityError as exc:
        raise StoreConflictError("distance cache key already exists") from exc
    except (OperationalError, InterfaceError, OSError, TimeoutError) as exc:
        # asyncpg raises connect failures (refused, DNS, timeout) unwrapped
        raise StoreUnavailableError("distance store is unavailable") from exc


class SqlAlchemyDistanceRepository(DistanceRepository):
    """Default SQLAlchemy-backed implementation."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, key: CacheKey) -> CachedDistance | None:
        stmt = select(DistanceRecord).filter_by(**_key_columns(key))
        async with translate_store_errors():
            record = (await self._session.scalars(stmt)).one_or_none()
        return _to_row(record) if record is not None else None

    async def add(
        self, key: CacheKey, distance_km: float, *, now: datetime, expires_at: datetime
    ) -> CachedDistance:
        record = DistanceRecord(
            **_key_columns(key),
            distance_km=float(distance_km),
            created_at=now,
            updated_at=now,
            expires_at=expires_at,
        )
        self._session.add(record)
        async with translate_store_errors():
            await self._session.flush()
        return _to_row(record)

    async def refresh(
        self, record_id: int, distance_km: float, *, now: datetime, expires_at: datetime
    ) -> bool:
        stmt = (
            update(DistanceRecord)
            .where(DistanceRecord.id == record_id)
            .values(distance_km=float(distance_km), updated_at=now, expires_at=expires_at)
            .execution_options(synchronize_session=False)
        )
        async with translate_store_errors():
            result = await self._session.execute(stmt)
        return (result.rowcount or 0) > 0

    async def delete_expired(self, now: datetime) -> int:
        stmt = (
            delete(DistanceRecord)
            .where(DistanceRecord.expires_at < now)
            .execution_options(synchronize_session=False)
        )
        async with translate_store_errors():
            result = await self._session.execute(stmt)
        # rowcount can be None on some drivers
        return result.rowcount or 0

    async def count_expired(self, now: datetime) -> int:
        stmt = select(func.count(DistanceRecord.id)).where(DistanceRecord.expires_at < now)
        async with translate_store_errors():
            return int((await self._session.scalar(stmt)) or 0)

    async def aggregate(self, now: datetime) -> DistanceAggregate:
        stmt = select(
            func.count(DistanceRecord.id),
            func.min(DistanceRecord.created_at),
            func.max(DistanceRecord.created_at),
            func.max(DistanceRecord.updated_at),
        )
        async with translate_store_errors():
            total, oldest, newest, last_updated = (await self._session.execute(stmt)).one()
        expired = await self.count_expired(now)
        return DistanceAggregate(
            total_entries=int(total or 0),
            expired_entries=expired,
            oldest_entry=oldest,
            newest_entry=newest,
            last_updated=last_updated,
        )
