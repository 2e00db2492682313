"""Operations helper for the distance cache.

Meant for a daily cron (``python -m scripts.cache_maintenance``). Without
flags it deletes expired rows; ``--dry-run`` only counts them and ``--stats``
prints the aggregate view. Functions return summary dictionaries so tests can
assert on the outcome.
"""

from __future__ import annotations

import argparse
import asyncio
import json
from collections.abc import Sequence

import structlog
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from fuelfinder import db
from fuelfinder.core.exceptions import StoreUnavailableError
from fuelfinder.infra.unit_of_work import SqlAlchemyUnitOfWork
from fuelfinder.logging import setup_logging
from fuelfinder.services.cache_maintenance import CacheMaintenanceService
from fuelfinder.utils.datetime import dt_to_iso

logger = structlog.get_logger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Distance cache maintenance")
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument(
        "--stats",
        action="store_true",
        help="Print cache statistics without deleting anything",
    )
    mode.add_argument(
        "--dry-run",
        action="store_true",
        help="Count expired rows without deleting them",
    )
    return parser


def _service(session_factory: async_sessionmaker[AsyncSession] | None) -> CacheMaintenanceService:
    factory = session_factory or db.SessionLocal
    return CacheMaintenanceService(lambda: SqlAlchemyUnitOfWork(factory))


async def run_cleanup(
    *,
    dry_run: bool = False,
    session_factory: async_sessionmaker[AsyncSession] | None = None,
) -> dict[str, int | bool]:
    svc = _service(session_factory)
    if dry_run:
        expired = await svc.count_expired()
        return {"dry_run": True, "expired": expired}
    result = await svc.cleanup_expired()
    return {"dry_run": False, "deleted_count": result.deleted_count}


async def collect_statistics(
    *, session_factory: async_sessionmaker[AsyncSession] | None = None
) -> dict[str, int | str | None]:
    stats = await _service(session_factory).get_statistics()
    return {
        "total_entries": stats.total_entries,
        "expired_entries": stats.expired_entries,
        "oldest_entry": dt_to_iso(stats.oldest_entry),
        "newest_entry": dt_to_iso(stats.newest_entry),
        "last_updated": dt_to_iso(stats.last_updated),
        "timestamp": dt_to_iso(stats.timestamp),
    }


async def main(argv: Sequence[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    setup_logging()
    try:
        if args.stats:
            summary = await collect_statistics()
        else:
            summary = await run_cleanup(dry_run=args.dry_run)
    except StoreUnavailableError as exc:
        logger.error("cache_maintenance_failed", error=str(exc))
        return 1
    finally:
        await db.engine.dispose()
    print(json.dumps(summary, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    raise SystemExit(asyncio.run(main()))
