"""API dependency helpers and service providers."""

from __future__ import annotations

import secrets

from fastapi import Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from fuelfinder.core.config import Settings
from fuelfinder.core.exceptions import UnauthorizedError
from fuelfinder.services.cache_maintenance import CacheMaintenanceService
from fuelfinder.services.distance_cache import DistanceCache
from fuelfinder.services.station_ranking import StationFinder

__all__ = [
    "get_settings",
    "get_distance_cache",
    "get_cache_maintenance_service",
    "get_station_finder",
    "get_db_session",
    "require_maintenance_key",
]


# --- Service providers for DI (composed once in create_app) ---


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_distance_cache(request: Request) -> DistanceCache:
    return request.app.state.distance_cache


def get_cache_maintenance_service(request: Request) -> CacheMaintenanceService:
    return request.app.state.cache_maintenance


def get_station_finder(request: Request) -> StationFinder:
    return request.app.state.station_finder


async def get_db_session(request: Request) -> AsyncSession:
    async with request.app.state.session_factory() as session:
        yield session


def require_maintenance_key(
    request: Request,
    authorization: str | None = Header(default=None),
) -> None:
    """Require ``Authorization: Bearer <MAINTENANCE_KEY>`` when a key is configured."""

    expected = request.app.state.settings.maintenance_key
    if not expected:
        return
    supplied = (authorization or "").encode()
    if not secrets.compare_digest(supplied, f"Bearer {expected}".encode()):
        raise UnauthorizedError("Unauthorized")
