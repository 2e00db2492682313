"""Rank fuel outlets by effective price per litre, travel included."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass

import structlog

from fuelfinder.core.exceptions import InvalidArgumentError
from fuelfinder.services.distance_cache import DistanceCache
from fuelfinder.services.station_listing import Station, StationListingClient
from fuelfinder.utils.geo import Coordinates, compute_bounding_box

DEFAULT_FUEL_ECONOMY = 10.0  # L/100km
DEFAULT_FILL_AMOUNT = 40.0  # litres


@dataclass(frozen=True)
class RankedStation:
    station: Station
    distance_km: float
    discount: float
    price_per_litre: float
    travel_cost: float
    total_cost: float


@dataclass(frozen=True)
class RankingResult:
    items: list[RankedStation]
    brands: list[str]


def rank_stations(
    stations: Sequence[Station],
    distances_km: Sequence[float],
    *,
    fuel_type: str,
    fuel_economy: float = DEFAULT_FUEL_ECONOMY,
    fill_amount: float = DEFAULT_FILL_AMOUNT,
    brand_discounts: Mapping[str, float] | None = None,
) -> list[RankedStation]:
    """Order stations by ``total_cost`` (dollars per litre, round trip included).

    ``distances_km[i]`` belongs to ``stations[i]``; stations without a price for
    ``fuel_type`` are dropped. Discounts are cents per litre by brand.
    """

    if len(stations) != len(distances_km):
        raise InvalidArgumentError("stations and distances must have the same length")
    if not fuel_economy > 0:
        raise InvalidArgumentError(f"fuel_economy must be positive: {fuel_economy}")
    if not fill_amount > 0:
        raise InvalidArgumentError(f"fill_amount must be positive: {fill_amount}")

    discounts = brand_discounts or {}
    ranked: list[RankedStation] = []
    for station, distance_km in zip(stations, distances_km, strict=True):
        price_cents = station.price_for(fuel_type)
        if price_cents is None:
            continue
        discount = float(discounts.get(station.brand, 0.0))
        price_per_litre = (price_cents - discount) / 100.0
        travel_cost = distance_km * 2 * fuel_economy * price_per_litre / 100.0
        total_cost = (price_per_litre * fill_amount + travel_cost) / fill_amount
        ranked.append(
            RankedStation(
                station=station,
                distance_km=distance_km,
                discount=discount,
                price_per_litre=price_per_litre,
                travel_cost=travel_cost,
                total_cost=total_cost,
            )
        )

    ranked.sort(key=lambda r: r.total_cost)
    return ranked


class StationFinder:
    """Bounding box -> listing -> cached distances -> ranking."""

    def __init__(self, listing: StationListingClient, cache: DistanceCache) -> None:
        self._listing = listing
        self._cache = cache

    async def find_ranked(
        self,
        center: Coordinates,
        *,
        radius_km: float,
        fuel_type: str,
        fuel_economy: float = DEFAULT_FUEL_ECONOMY,
        fill_amount: float = DEFAULT_FILL_AMOUNT,
        brand_discounts: Mapping[str, float] | None = None,
    ) -> RankingResult:
        box = compute_bounding_box(center, radius_km)
        stations = await self._listing.fetch_stations(box)
        brands = sorted({s.brand for s in stations if s.brand})

        # Filter first so distance indices line up with the ranked stations
        priced = [s for s in stations if s.price_for(fuel_type) is not None]
        distances = await self._cache.batch_get_distances(
            center, [s.coordinates for s in priced]
        )
        items = rank_stations(
            priced,
            distances,
            fuel_type=fuel_type,
            fuel_economy=fuel_economy,
            fill_amount=fill_amount,
            brand_discounts=brand_discounts,
        )
        structlog.get_logger(__name__).info(
            "stations_ranked",
            radius_km=float(radius_km),
            fuel_type=fuel_type,
            listed=len(stations),
            ranked=len(items),
        )
        return RankingResult(items=items, brands=brands)


__all__ = ["RankedStation", "RankingResult", "StationFinder", "rank_stations"]
