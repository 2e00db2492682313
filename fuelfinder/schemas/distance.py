from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from fuelfinder.utils.geo import Coordinates


class CoordinatesIn(BaseModel):
    latitude: float = Field(ge=-90, le=90, description="Latitude in decimal degrees")
    longitude: float = Field(ge=-180, le=180, description="Longitude in decimal degrees")

    def to_domain(self) -> Coordinates:
        return Coordinates(self.latitude, self.longitude)


class DistanceRequest(BaseModel):
    # "from" is a keyword, so the field is aliased
    origin: CoordinatesIn = Field(alias="from")
    to: CoordinatesIn

    model_config = ConfigDict(populate_by_name=True)


class DistanceResponse(BaseModel):
    distance_km: float = Field(description="Driving distance in kilometres")


class BatchDistanceRequest(BaseModel):
    origin: CoordinatesIn = Field(alias="from")
    to_locations: list[CoordinatesIn] = Field(min_length=1, max_length=100)

    model_config = ConfigDict(populate_by_name=True)


class BatchDistanceResponse(BaseModel):
    distances_km: list[float] = Field(description="Same order as to_locations")


class BoundingBoxResponse(BaseModel):
    ne_lat: float
    ne_lng: float
    sw_lat: float
    sw_lng: float
