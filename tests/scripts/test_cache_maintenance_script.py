from __future__ import annotations

import json
from datetime import timedelta
from decimal import Decimal

import pytest
from sqlalchemy import func, select

from fuelfinder import db
from fuelfinder.models.distance import DistanceRecord
from fuelfinder.utils.datetime import utcnow
from scripts import cache_maintenance as cache_maintenance_script


async def _seed(session_factory, *, to_lng: str, age_days: int) -> None:
    created_at = utcnow() - timedelta(days=age_days)
    async with session_factory() as s:
        s.add(
            DistanceRecord(
                from_lat=Decimal("-34.92850"),
                from_lng=Decimal("138.60070"),
                to_lat=Decimal("-34.90000"),
                to_lng=Decimal(to_lng),
                distance_km=7.5,
                created_at=created_at,
                updated_at=created_at,
                expires_at=created_at + timedelta(days=30),
            )
        )
        await s.commit()


async def _count(session_factory) -> int:
    async with session_factory() as s:
        return await s.scalar(select(func.count(DistanceRecord.id)))


@pytest.fixture
def _bind_db(monkeypatch: pytest.MonkeyPatch, engine, session_factory) -> None:
    monkeypatch.setattr(db, "engine", engine)
    monkeypatch.setattr(db, "SessionLocal", session_factory)


@pytest.mark.asyncio
async def test_run_cleanup_deletes_expired(session_factory):
    await _seed(session_factory, to_lng="138.50000", age_days=60)
    await _seed(session_factory, to_lng="138.51000", age_days=3)

    summary = await cache_maintenance_script.run_cleanup(session_factory=session_factory)

    assert summary == {"dry_run": False, "deleted_count": 1}
    assert await _count(session_factory) == 1


@pytest.mark.asyncio
async def test_run_cleanup_dry_run_only_counts(session_factory):
    await _seed(session_factory, to_lng="138.50000", age_days=60)

    summary = await cache_maintenance_script.run_cleanup(
        dry_run=True, session_factory=session_factory
    )

    assert summary == {"dry_run": True, "expired": 1}
    assert await _count(session_factory) == 1


@pytest.mark.asyncio
async def test_collect_statistics_serializes_timestamps(session_factory):
    await _seed(session_factory, to_lng="138.50000", age_days=60)
    await _seed(session_factory, to_lng="138.51000", age_days=3)

    summary = await cache_maintenance_script.collect_statistics(session_factory=session_factory)

    assert summary["total_entries"] == 2
    assert summary["expired_entries"] == 1
    assert isinstance(summary["oldest_entry"], str)
    assert summary["oldest_entry"] < summary["newest_entry"]


@pytest.mark.asyncio
@pytest.mark.usefixtures("_bind_db")
async def test_main_prints_json_summary(session_factory, capsys):
    await _seed(session_factory, to_lng="138.50000", age_days=60)

    exit_code = await cache_maintenance_script.main([])

    assert exit_code == 0
    out = capsys.readouterr().out.strip().splitlines()[-1]
    assert json.loads(out) == {"dry_run": False, "deleted_count": 1}


@pytest.mark.asyncio
@pytest.mark.usefixtures("_bind_db")
async def test_main_stats_flag(session_factory, capsys):
    exit_code = await cache_maintenance_script.main(["--stats"])

    assert exit_code == 0
    out = capsys.readouterr().out.strip().splitlines()[-1]
    assert json.loads(out)["total_entries"] == 0


@pytest.mark.parametrize("argv", [["--dry-run"], [], ["--stats"]])
@pytest.mark.asyncio
async def test_main_returns_1_when_store_is_down(
    monkeypatch: pytest.MonkeyPatch, unreachable_engine, unreachable_session_factory, argv
):
    monkeypatch.setattr(db, "engine", unreachable_engine)
    monkeypatch.setattr(db, "SessionLocal", unreachable_session_factory)

    assert await cache_maintenance_script.main(argv) == 1


def test_stats_and_dry_run_are_exclusive():
    with pytest.raises(SystemExit):
        cache_maintenance_script._build_parser().parse_args(["--stats", "--dry-run"])
