# fuelfinder/api/routers/distances.py
from typing import Annotated

from fastapi import APIRouter, Depends, Query

from fuelfinder.api.deps import get_distance_cache, get_settings
from fuelfinder.core.config import Settings
from fuelfinder.schemas.common import ErrorResponse
from fuelfinder.schemas.distance import (
    BatchDistanceRequest,
    BatchDistanceResponse,
    BoundingBoxResponse,
    DistanceRequest,
    DistanceResponse,
)
from fuelfinder.services.distance_cache import DistanceCache
from fuelfinder.utils.geo import Coordinates, compute_bounding_box

router = APIRouter(tags=["distances"])

_PROVIDER_ERRORS = {
    404: {"model": ErrorResponse, "description": "no driving route between the points"},
    503: {"model": ErrorResponse, "description": "distance provider or store unavailable"},
}


@router.post(
    "/distances",
    response_model=DistanceResponse,
    summary="Driving distance between two points (cached)",
    responses=_PROVIDER_ERRORS,
)
async def get_distance(
    body: DistanceRequest,
    cache: DistanceCache = Depends(get_distance_cache),
):
    distance_km = await cache.get_distance(body.origin.to_domain(), body.to.to_domain())
    return DistanceResponse(distance_km=distance_km)


@router.post(
    "/distances/batch",
    response_model=BatchDistanceResponse,
    summary="Driving distances from one origin to many destinations",
    description="Results keep the order of `to_locations`. One failing destination fails the call.",
    responses=_PROVIDER_ERRORS,
)
async def batch_get_distances(
    body: BatchDistanceRequest,
    cache: DistanceCache = Depends(get_distance_cache),
):
    distances = await cache.batch_get_distances(
        body.origin.to_domain(), [loc.to_domain() for loc in body.to_locations]
    )
    return BatchDistanceResponse(distances_km=distances)


@router.get(
    "/bounding-box",
    response_model=BoundingBoxResponse,
    summary="Latitude-corrected query rectangle around a point",
)
async def bounding_box(
    lat: Annotated[float | None, Query(ge=-90, le=90)] = None,
    lng: Annotated[float | None, Query(ge=-180, le=180)] = None,
    radius_km: Annotated[float | None, Query(description="Radius in km (> 0)")] = None,
    settings: Settings = Depends(get_settings),
):
    center = Coordinates(
        settings.home_latitude if lat is None else lat,
        settings.home_longitude if lng is None else lng,
    )
    radius = settings.default_radius_km if radius_km is None else radius_km
    box = compute_bounding_box(center, radius)
    return BoundingBoxResponse(
        ne_lat=box.ne_lat, ne_lng=box.ne_lng, sw_lat=box.sw_lat, sw_lng=box.sw_lng
    )
