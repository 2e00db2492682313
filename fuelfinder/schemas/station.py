from __future__ import annotations

from pydantic import BaseModel, Field

from fuelfinder.schemas.distance import CoordinatesIn


class BrandDiscountIn(BaseModel):
    brand: str = Field(min_length=1)
    discount: float = Field(ge=0, description="Cents per litre")


class RankStationsRequest(BaseModel):
    center: CoordinatesIn | None = Field(
        default=None, description="Search center; defaults to the configured home location"
    )
    radius_km: float | None = Field(default=None, gt=0, le=100)
    fuel_type: str = Field(min_length=1, examples=["U91"])
    fuel_economy: float = Field(default=10.0, gt=0, description="Litres per 100 km")
    fill_amount: float = Field(default=40.0, gt=0, description="Litres per fill")
    brand_discounts: list[BrandDiscountIn] = Field(default_factory=list)


class RankedStationItem(BaseModel):
    id: str
    name: str
    brand: str
    address: str
    latitude: float
    longitude: float
    distance_km: float
    discount: float
    price_per_litre: float
    travel_cost: float
    total_cost: float


class RankStationsResponse(BaseModel):
    items: list[RankedStationItem]
    brands: list[str] = Field(description="Distinct brands in the searched area")
