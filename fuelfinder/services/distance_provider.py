"""Driving-distance lookups against the Google Distance Matrix API."""

from __future__ import annotations

from typing import Any, Protocol

import httpx
import structlog

from fuelfinder.core.exceptions import (
    ConfigurationError,
    NoRouteFoundError,
    ProviderUnavailableError,
)
from fuelfinder.utils.geo import Coordinates

logger = structlog.get_logger(__name__)

_DISTANCE_MATRIX_URL = "https://maps.googleapis.com/maps/api/distancematrix/json"
_USER_AGENT = "FuelFinder/0.1"
DEFAULT_TIMEOUT = 10.0


class DistanceProvider(Protocol):
    """One call resolves one origin/destination pair to kilometres."""

    async def fetch_distance_km(self, origin: Coordinates, destination: Coordinates) -> float: ...


def _latlng(point: Coordinates) -> str:
    return f"{point.latitude},{point.longitude}"


def _extract_distance_km(payload: Any) -> float:
    if not isinstance(payload, dict):
        raise ProviderUnavailableError("distance matrix returned an unexpected payload")

    status = payload.get("status")
    if status != "OK":
        message = payload.get("error_message") or status or "unknown status"
        raise ProviderUnavailableError(f"distance matrix request failed: {message}")

    rows = payload.get("rows") or []
    elements = (rows[0].get("elements") or []) if rows and isinstance(rows[0], dict) else []
    element = elements[0] if elements and isinstance(elements[0], dict) else None
    if element is None:
        raise NoRouteFoundError("distance matrix returned no element for the pair")

    element_status = element.get("status", "OK")
    distance = element.get("distance") if isinstance(element.get("distance"), dict) else None
    if element_status != "OK" or distance is None or distance.get("value") is None:
        raise NoRouteFoundError(f"no driving route between the points ({element_status})")

    try:
        meters = float(distance["value"])
    except (TypeError, ValueError) as exc:
        raise NoRouteFoundError(f"invalid distance value: {distance['value']!r}") from exc
    return meters / 1000.0


class GoogleDistanceMatrixClient(DistanceProvider):
    """Thin adapter over the Distance Matrix endpoint in driving mode.

    No retries here: callers decide, and the cache deliberately does not retry
    against a rate-limited upstream.
    """

    def __init__(
        self,
        api_key: str | None,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        client: httpx.AsyncClient | None = None,
        url: str = _DISTANCE_MATRIX_URL,
    ) -> None:
        if not api_key:
            raise ConfigurationError("GOOGLE_MAPS_API_KEY is not configured")
        self._api_key = api_key
        self._timeout = timeout
        self._client = client
        self._url = url

    async def fetch_distance_km(self, origin: Coordinates, destination: Coordinates) -> float:
        params = {
            "origins": _latlng(origin),
            "destinations": _latlng(destination),
            "mode": "driving",
            "units": "metric",
            "key": self._api_key,
        }
        if self._client is not None:
            response = await self._get(self._client, params)
        else:
            # Short-lived client per call, as the geocoding helpers do
            async with httpx.AsyncClient() as client:
                response = await self._get(client, params)

        if not response.is_success:
            logger.warning("distance_matrix_http_error", status=response.status_code)
            raise ProviderUnavailableError(
                f"distance matrix request failed with status {response.status_code}"
            )

        try:
            payload = response.json()
        except ValueError as exc:
            logger.warning("distance_matrix_invalid_json")
            raise ProviderUnavailableError("failed to decode distance matrix response") from exc

        distance_km = _extract_distance_km(payload)
        logger.debug("distance_matrix_ok", distance_km=distance_km)
        return distance_km

    async def _get(self, client: httpx.AsyncClient, params: dict[str, str]) -> httpx.Response:
        try:
            return await client.get(
                self._url,
                params=params,
                headers={"User-Agent": _USER_AGENT},
                timeout=self._timeout,
            )
        except httpx.RequestError as exc:
            # TimeoutException is a RequestError
            logger.warning("distance_matrix_request_failed", error=str(exc))
            raise ProviderUnavailableError(f"distance matrix request failed: {exc}") from exc


__all__ = ["DistanceProvider", "GoogleDistanceMatrixClient"]
