"""Distance cache against the real SQLAlchemy store (unique constraint included)."""

from __future__ import annotations

from datetime import timedelta
from decimal import Decimal

import pytest
from sqlalchemy import func, select, update

from fuelfinder.core.exceptions import StoreConflictError, StoreUnavailableError
from fuelfinder.infra.unit_of_work import SqlAlchemyUnitOfWork
from fuelfinder.models.distance import DistanceRecord
from fuelfinder.repositories.sqlalchemy import SqlAlchemyDistanceRepository
from fuelfinder.services.distance_cache import DistanceCache
from fuelfinder.utils.geo import CacheKey, Coordinates

ORIGIN = Coordinates(0.0, 0.0)
DEST = Coordinates(0.0, 1.0)


async def _rows(session_factory) -> list[DistanceRecord]:
    async with session_factory() as s:
        return list((await s.scalars(select(DistanceRecord).order_by(DistanceRecord.id))).all())


@pytest.fixture
def cache(uow_factory, provider, clock):
    return DistanceCache(uow_factory, provider, clock=clock)


@pytest.mark.asyncio
async def test_end_to_end_hit_then_refresh_in_place(cache, provider, clock, session_factory):
    first = await cache.get_distance(ORIGIN, DEST)

    assert len(provider.calls) == 1
    (row,) = await _rows(session_factory)
    assert row.expires_at == clock.now + timedelta(days=30)
    assert float(row.to_lng) == 1.0

    clock.advance(timedelta(days=10))
    again = await cache.get_distance(ORIGIN, DEST)
    assert again == first
    assert len(provider.calls) == 1

    async with session_factory() as s:
        await s.execute(
            update(DistanceRecord).values(expires_at=clock.now - timedelta(seconds=1))
        )
        await s.commit()

    provider.routes[(0.0, 1.0)] = 115.5
    refreshed = await cache.get_distance(ORIGIN, DEST)

    assert refreshed == 115.5
    assert len(provider.calls) == 2
    (after,) = await _rows(session_factory)
    assert after.id == row.id
    assert after.distance_km == 115.5
    assert after.expires_at == clock.now + timedelta(days=30)
    assert after.updated_at == clock.now
    assert after.created_at == row.created_at


@pytest.mark.asyncio
async def test_racing_insert_from_another_writer_is_recovered(
    cache, provider, clock, session_factory
):
    async def competitor_inserts_first(*_):
        async with session_factory() as s:
            s.add(
                DistanceRecord(
                    from_lat=Decimal("0.00000"),
                    from_lng=Decimal("0.00000"),
                    to_lat=Decimal("0.00000"),
                    to_lng=Decimal("1.00000"),
                    distance_km=99.0,
                    created_at=clock.now,
                    updated_at=clock.now,
                    expires_at=clock.now + timedelta(days=30),
                )
            )
            await s.commit()

    provider.hook = competitor_inserts_first
    provider.routes[(0.0, 1.0)] = 111.0

    result = await cache.get_distance(ORIGIN, DEST)

    assert result == 111.0
    (row,) = await _rows(session_factory)
    assert row.distance_km == 111.0


@pytest.mark.asyncio
async def test_batch_persists_one_row_per_destination(cache, provider, session_factory):
    destinations = [Coordinates(0.0, 3.0), Coordinates(0.0, 1.0), Coordinates(0.0, 2.0)]

    result = await cache.batch_get_distances(ORIGIN, destinations)

    assert result == pytest.approx([333.0, 111.0, 222.0])
    rows = await _rows(session_factory)
    assert sorted(float(r.to_lng) for r in rows) == [1.0, 2.0, 3.0]

    again = await cache.batch_get_distances(ORIGIN, destinations)
    assert again == result
    assert len(provider.calls) == 3


@pytest.mark.asyncio
async def test_repository_add_raises_conflict_on_duplicate_key(session_factory, clock):
    key = CacheKey(-34.9285, 138.6007, -34.9, 138.5)
    expires_at = clock.now + timedelta(days=30)

    async with session_factory() as s:
        repo = SqlAlchemyDistanceRepository(s)
        created = await repo.add(key, 12.5, now=clock.now, expires_at=expires_at)
        await s.commit()

    assert created.key == key

    async with session_factory() as s:
        repo = SqlAlchemyDistanceRepository(s)
        with pytest.raises(StoreConflictError):
            await repo.add(key, 13.0, now=clock.now, expires_at=expires_at)
        await s.rollback()

    async with session_factory() as s:
        count = await s.scalar(select(func.count(DistanceRecord.id)))
        found = await SqlAlchemyDistanceRepository(s).get(key)

    assert count == 1
    assert found is not None
    assert found.distance_km == 12.5
    assert found.key == key


@pytest.mark.asyncio
async def test_repository_refresh_reports_missing_row(session_factory, clock):
    async with session_factory() as s:
        repo = SqlAlchemyDistanceRepository(s)
        assert await repo.refresh(12345, 1.0, now=clock.now, expires_at=clock.now) is False


@pytest.mark.asyncio
async def test_unreachable_store_is_reported_as_unavailable(
    unreachable_session_factory, provider, clock
):
    cache = DistanceCache(
        lambda: SqlAlchemyUnitOfWork(unreachable_session_factory), provider, clock=clock
    )

    with pytest.raises(StoreUnavailableError):
        await cache.get_distance(ORIGIN, DEST)

    assert provider.calls == []
