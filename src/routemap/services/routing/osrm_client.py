"""HTTP client for computing road itineraries with OSRM."""

from __future__ import annotations

import logging
import time
from typing import Any, Optional, Sequence

import httpx

from ...config import settings
from ...models.domain import Itinerary, LatLng

logger = logging.getLogger(__name__)


def to_osrm_coordinates(coordinates: Sequence[LatLng]) -> str:
    """Format (lat, lng) pairs as OSRM's "lng,lat;lng,lat" path parameter."""
    return ";".join(f"{lng},{lat}" for lat, lng in coordinates)


def from_osrm_coordinates(coordinates: Sequence[Sequence[float]]) -> tuple[LatLng, ...]:
    """Convert GeoJSON [lng, lat] positions back to (lat, lng) pairs."""
    return tuple((float(position[1]), float(position[0])) for position in coordinates)


class OSRMClient:
    def __init__(
        self,
        base_url: str | None = None,
        profile: str | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
        backoff_seconds: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = base_url or settings.osrm_base_url
        if not self.base_url:
            raise ValueError("OSRM base URL is not configured.")
        self.base_url = self.base_url.rstrip("/")
        self.profile = profile or settings.osrm_profile
        self.timeout = timeout if timeout is not None else settings.osrm_timeout_seconds
        self.max_retries = max_retries if max_retries is not None else settings.osrm_max_retries
        self.backoff_seconds = backoff_seconds if backoff_seconds is not None else settings.osrm_backoff_seconds
        self._transport = transport

    def _get_client(self) -> httpx.Client:
        return httpx.Client(
            timeout=httpx.Timeout(self.timeout, connect=5.0),
            transport=self._transport,
        )

    def _request_route(self, coordinates: Sequence[LatLng]) -> Optional[dict[str, Any]]:
        """Call the route endpoint, retrying transient transport errors."""
        url = f"{self.base_url}/route/v1/{self.profile}/{to_osrm_coordinates(coordinates)}"
        params = {
            "overview": "full",  # full geometry, not simplified
            "geometries": "geojson",
            "steps": "false",
        }

        client = self._get_client()
        try:
            attempt = 0
            while True:
                try:
                    response = client.get(url, params=params)
                    response.raise_for_status()
                    return response.json()
                except httpx.HTTPStatusError as exc:
                    attempt += 1
                    if attempt > self.max_retries:
                        logger.warning(f"OSRM route request failed with status {exc.response.status_code}")
                        return None
                    time.sleep(self.backoff_seconds * attempt)
                except (httpx.TimeoutException, httpx.NetworkError) as exc:
                    attempt += 1
                    if attempt > self.max_retries:
                        logger.warning(f"OSRM service at {self.base_url} unreachable: {exc}")
                        return None
                    wait_time = self.backoff_seconds * (2 ** (attempt - 1))
                    logger.debug(f"OSRM route error, retrying in {wait_time:.1f}s (attempt {attempt}/{self.max_retries})")
                    time.sleep(wait_time)
                except (httpx.HTTPError, ValueError) as exc:
                    logger.warning(f"OSRM route request failed: {exc}")
                    return None
        finally:
            client.close()

    def calculate(self, coordinates: Sequence[LatLng]) -> Optional[Itinerary]:
        """Compute a road itinerary through ``coordinates`` in order.

        Returns ``None`` when fewer than two coordinates are given or when the
        routing service fails in any way; callers fall back to straight lines.
        """
        if len(coordinates) < 2:
            logger.debug("Not enough points to compute an itinerary")
            return None

        data = self._request_route(coordinates)
        if not isinstance(data, dict):
            return None

        if data.get("code") != "Ok" or not data.get("routes"):
            logger.warning(f"No itinerary found: {data.get('code')} {data.get('message', '')}".rstrip())
            return None

        route = data["routes"][0]
        try:
            path = from_osrm_coordinates(route["geometry"]["coordinates"])
            distance_km = round(float(route["distance"]) / 1000, 2)
            duration_min = round(float(route["duration"]) / 60)
        except (KeyError, TypeError, ValueError, IndexError) as exc:
            logger.warning(f"Malformed OSRM route response: {exc}")
            return None

        logger.info(f"Itinerary computed: {distance_km} km, {duration_min} min, {len(path)} points")
        return Itinerary(coordinates=path, distance_km=distance_km, duration_min=duration_min)


def build_waypoints(
    stops: Sequence[LatLng],
    driver_position: LatLng | None = None,
) -> list[LatLng]:
    """Itinerary waypoints: the driver first (when known), then the stops."""
    if driver_position is not None:
        return [driver_position, *stops]
    return list(stops)


def check_health(base_url: str | None = None, transport: httpx.BaseTransport | None = None) -> bool:
    """Check OSRM availability with a minimal two-point route request."""
    base = base_url or settings.osrm_base_url
    if not base:
        return False
    # Two points in central Brussels
    test_coords = "4.351710,50.850340;4.357180,50.845500"
    url = f"{base.rstrip('/')}/route/v1/{settings.osrm_profile}/{test_coords}"
    try:
        with httpx.Client(timeout=5.0, transport=transport) as client:
            response = client.get(url, params={"overview": "false"})
            response.raise_for_status()
            return response.json().get("code") == "Ok"
    except (httpx.HTTPError, ValueError):
        return False
