from __future__ import annotations

from fastapi import APIRouter, Depends

from fuelfinder.api.deps import get_cache_maintenance_service, require_maintenance_key
from fuelfinder.schemas.cache import CacheStatisticsResponse, CleanupResponse
from fuelfinder.schemas.common import ErrorResponse
from fuelfinder.services.cache_maintenance import CacheMaintenanceService

router = APIRouter(
    prefix="/admin/cache",
    tags=["admin"],
    dependencies=[Depends(require_maintenance_key)],
    responses={401: {"model": ErrorResponse, "description": "missing or wrong maintenance key"}},
)


@router.post("/cleanup", response_model=CleanupResponse, summary="Delete expired distances")
async def cleanup_expired(
    svc: CacheMaintenanceService = Depends(get_cache_maintenance_service),
):
    result = await svc.cleanup_expired()
    return CleanupResponse(deleted_count=result.deleted_count, timestamp=result.timestamp)


@router.get(
    "/stats", response_model=CacheStatisticsResponse, summary="Distance cache statistics"
)
async def cache_statistics(
    svc: CacheMaintenanceService = Depends(get_cache_maintenance_service),
):
    stats = await svc.get_statistics()
    return CacheStatisticsResponse(
        total_entries=stats.total_entries,
        expired_entries=stats.expired_entries,
        oldest_entry=stats.oldest_entry,
        newest_entry=stats.newest_entry,
        last_updated=stats.last_updated,
        timestamp=stats.timestamp,
    )
