"""Fetch fuel outlets and their prices inside a bounding box."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any

import httpx
import structlog

from fuelfinder.core.exceptions import ProviderUnavailableError
from fuelfinder.utils.geo import BoundingBox, Coordinates

logger = structlog.get_logger(__name__)

DEFAULT_TIMEOUT = 10.0


@dataclass(frozen=True)
class Station:
    id: str
    name: str
    brand: str
    address: str
    latitude: float
    longitude: float
    # fuel type -> price in cents per litre
    prices: dict[str, float] = field(default_factory=dict)

    @property
    def coordinates(self) -> Coordinates:
        return Coordinates(self.latitude, self.longitude)

    def price_for(self, fuel_type: str) -> float | None:
        return self.prices.get(fuel_type)


def _parse_prices(raw: Any) -> dict[str, float]:
    prices: dict[str, float] = {}
    if not isinstance(raw, dict):
        return prices
    for fuel_type, entry in raw.items():
        amount = entry.get("amount") if isinstance(entry, dict) else None
        if amount is None:
            continue
        try:
            prices[str(fuel_type)] = float(amount)
        except (TypeError, ValueError):
            logger.warning("station_price_invalid", fuel_type=fuel_type, amount=amount)
    return prices


def _parse_station(raw: Any) -> Station | None:
    if not isinstance(raw, dict):
        return None
    location = raw.get("location") if isinstance(raw.get("location"), dict) else {}
    try:
        # the listing reports x = longitude, y = latitude
        latitude = float(location["y"])
        longitude = float(location["x"])
    except (KeyError, TypeError, ValueError):
        logger.warning("station_location_invalid", station_id=raw.get("id"))
        return None
    return Station(
        id=str(raw.get("id", "")),
        name=str(raw.get("name") or ""),
        brand=str(raw.get("brand") or ""),
        address=str(raw.get("address") or ""),
        latitude=latitude,
        longitude=longitude,
        prices=_parse_prices(raw.get("prices")),
    )


class StationListingClient:
    """Plain passthrough to the outlet-price listing service."""

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._url = base_url.rstrip("/") + "/station/box"
        self._timeout = timeout
        self._client = client

    async def fetch_stations(self, box: BoundingBox) -> list[Station]:
        ts = int(time.time() * 1000)
        params = {
            "neLat": str(box.ne_lat),
            "neLng": str(box.ne_lng),
            "swLat": str(box.sw_lat),
            "swLng": str(box.sw_lng),
            "ts": str(ts),
            "_": str(ts - 5000),
        }
        if self._client is not None:
            response = await self._get(self._client, params)
        else:
            async with httpx.AsyncClient() as client:
                response = await self._get(client, params)

        if not response.is_success:
            raise ProviderUnavailableError(
                f"station listing failed with status {response.status_code}"
            )
        try:
            payload = response.json()
        except ValueError as exc:
            raise ProviderUnavailableError("failed to decode station listing") from exc

        message = payload.get("message") if isinstance(payload, dict) else None
        items = message.get("list") if isinstance(message, dict) else None
        stations = [s for s in (_parse_station(item) for item in items or []) if s is not None]
        logger.info("station_listing_fetched", count=len(stations))
        return stations

    async def _get(self, client: httpx.AsyncClient, params: dict[str, str]) -> httpx.Response:
        try:
            return await client.get(
                self._url,
                params=params,
                headers={"Accept": "application/json"},
                timeout=self._timeout,
            )
        except httpx.RequestError as exc:
            logger.warning("station_listing_request_failed", error=str(exc))
            raise ProviderUnavailableError(f"station listing request failed: {exc}") from exc


__all__ = ["Station", "StationListingClient"]
