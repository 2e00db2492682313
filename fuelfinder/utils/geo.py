"""Geospatial helpers: coordinate quantization and bounding boxes."""

from __future__ import annotations

import math
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import NamedTuple

from fuelfinder.core.exceptions import InvalidArgumentError

EARTH_RADIUS_KM = 6371.0
QUANTIZE_DIGITS = 5

_QUANTUM = Decimal(1).scaleb(-QUANTIZE_DIGITS)


@dataclass(frozen=True)
class Coordinates:
    latitude: float
    longitude: float

    def validate(self) -> Coordinates:
        """Return ``self`` or raise :class:`InvalidArgumentError` when out of range."""

        lat = float(self.latitude)
        lng = float(self.longitude)
        if not (math.isfinite(lat) and math.isfinite(lng)):
            raise InvalidArgumentError(f"coordinates must be finite: ({lat}, {lng})")
        if not -90.0 <= lat <= 90.0:
            raise InvalidArgumentError(f"latitude out of range: {lat}")
        if not -180.0 <= lng <= 180.0:
            raise InvalidArgumentError(f"longitude out of range: {lng}")
        return self


def quantize(coord: float) -> float:
    """Round to 5 decimal places (~1.1 m), halves away from zero.

    ``repr`` is the shortest string that round-trips the float, so a value such
    as ``1.000005`` is rounded as written rather than as its binary neighbour.
    """

    return float(Decimal(repr(float(coord))).quantize(_QUANTUM, rounding=ROUND_HALF_UP))


class CacheKey(NamedTuple):
    from_lat: float
    from_lng: float
    to_lat: float
    to_lng: float

    @classmethod
    def from_coordinates(cls, origin: Coordinates, destination: Coordinates) -> CacheKey:
        return cls(
            quantize(origin.latitude),
            quantize(origin.longitude),
            quantize(destination.latitude),
            quantize(destination.longitude),
        )


@dataclass(frozen=True)
class BoundingBox:
    ne_lat: float
    ne_lng: float
    sw_lat: float
    sw_lng: float


def compute_bounding_box(center: Coordinates, radius_km: float) -> BoundingBox:
    """Query rectangle of ``radius_km`` around ``center`` on a spherical Earth.

    Longitude degrees shrink with ``cos(latitude)``, so the box widens in
    longitude away from the equator. Boxes are not wrapped at +/-180 degrees and
    diverge near the poles; callers scope their queries accordingly.
    """

    center.validate()
    radius = float(radius_km)
    if not radius > 0:
        raise InvalidArgumentError(f"radius_km must be positive: {radius_km}")

    angular_distance = radius / EARTH_RADIUS_KM
    lat_rad = math.radians(center.latitude)

    lat_delta = angular_distance * 180.0 / math.pi
    lng_delta = angular_distance * 180.0 / (math.pi * math.cos(lat_rad))

    return BoundingBox(
        ne_lat=center.latitude + lat_delta,
        ne_lng=center.longitude + lng_delta,
        sw_lat=center.latitude - lat_delta,
        sw_lng=center.longitude - lng_delta,
    )


__all__ = [
    "EARTH_RADIUS_KM",
    "QUANTIZE_DIGITS",
    "BoundingBox",
    "CacheKey",
    "Coordinates",
    "compute_bounding_box",
    "quantize",
]
