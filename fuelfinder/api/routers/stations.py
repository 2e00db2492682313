from __future__ import annotations

from fastapi import APIRouter, Depends

from fuelfinder.api.deps import get_settings, get_station_finder
from fuelfinder.core.config import Settings
from fuelfinder.schemas.common import ErrorResponse
from fuelfinder.schemas.station import (
    RankedStationItem,
    RankStationsRequest,
    RankStationsResponse,
)
from fuelfinder.services.station_ranking import StationFinder
from fuelfinder.utils.geo import Coordinates

router = APIRouter(prefix="/stations", tags=["stations"])


@router.post(
    "/ranked",
    response_model=RankStationsResponse,
    summary="Nearby stations ranked by effective price per litre",
    responses={503: {"model": ErrorResponse, "description": "upstream unavailable"}},
)
async def ranked_stations(
    body: RankStationsRequest,
    finder: StationFinder = Depends(get_station_finder),
    settings: Settings = Depends(get_settings),
):
    center = (
        body.center.to_domain()
        if body.center is not None
        else Coordinates(settings.home_latitude, settings.home_longitude)
    )
    result = await finder.find_ranked(
        center,
        radius_km=settings.default_radius_km if body.radius_km is None else body.radius_km,
        fuel_type=body.fuel_type,
        fuel_economy=body.fuel_economy,
        fill_amount=body.fill_amount,
        brand_discounts={d.brand: d.discount for d in body.brand_discounts},
    )
    items = [
        RankedStationItem(
            id=r.station.id,
            name=r.station.name,
            brand=r.station.brand,
            address=r.station.address,
            latitude=r.station.latitude,
            longitude=r.station.longitude,
            distance_km=r.distance_km,
            discount=r.discount,
            price_per_litre=r.price_per_litre,
            travel_cost=r.travel_cost,
            total_cost=r.total_cost,
        )
        for r in result.items
    ]
    return RankStationsResponse(items=items, brands=result.brands)
