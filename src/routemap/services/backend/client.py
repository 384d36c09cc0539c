"""HTTP client for the delivery-management backend."""

from __future__ import annotations

import logging
from typing import Any, Sequence

import httpx
from pydantic import ValidationError

from ...config import settings
from ...models.domain import DeliveryPoint, DeliveryStatus, Route, RouteStatus
from ...schemas.routes import RouteModel
from ..sequencing import to_persistable_payload

logger = logging.getLogger(__name__)


class BackendError(Exception):
    """A backend call failed; carries the HTTP status when there was one."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class BackendClient:
    def __init__(
        self,
        base_url: str | None = None,
        token: str | None = None,
        timeout: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = (base_url or settings.backend_base_url).rstrip("/")
        self.token = token if token is not None else settings.backend_token
        self.timeout = timeout if timeout is not None else settings.backend_timeout_seconds
        self._transport = transport

    def _get_client(self) -> httpx.Client:
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return httpx.Client(
            base_url=self.base_url,
            timeout=self.timeout,
            headers=headers,
            transport=self._transport,
        )

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        with self._get_client() as client:
            try:
                response = client.request(method, path, **kwargs)
                response.raise_for_status()
            except httpx.HTTPStatusError as exc:
                detail = _error_detail(exc.response)
                logger.error(f"Backend {method} {path} failed ({exc.response.status_code}): {detail}")
                raise BackendError(detail, status_code=exc.response.status_code) from exc
            except httpx.HTTPError as exc:
                logger.error(f"Backend {method} {path} unreachable: {exc}")
                raise BackendError(
                    f"Unable to reach the backend at {self.base_url}: {exc}"
                ) from exc

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise BackendError(f"Backend returned invalid JSON for {method} {path}.") from exc

    def get_route(self, route_id: int) -> Route:
        data = self._request("GET", f"/routes/{route_id}")
        return _parse_route(data, f"/routes/{route_id}")

    def get_driver_routes(self) -> list[Route]:
        data = self._request("GET", "/routes/driver") or []
        if not isinstance(data, list):
            raise BackendError("Backend returned an invalid route list for /routes/driver.")
        return [_parse_route(item, "/routes/driver") for item in data]

    def update_route_status(self, route_id: int, status: RouteStatus) -> Any:
        return self._request("PUT", f"/routes/{route_id}/status", params={"status": RouteStatus(status).value})

    def update_points_order(self, route_id: int, points: Sequence[DeliveryPoint]) -> Any:
        payload = {"orderedPoints": to_persistable_payload(points)}
        return self._request("PUT", f"/routes/{route_id}/delivery-points/order", json=payload)

    def update_delivery_point_status(self, route_id: int, point_id: int, status: DeliveryStatus) -> Any:
        return self._request(
            "PUT",
            f"/routes/{route_id}/delivery-points/{point_id}/status",
            params={"status": DeliveryStatus(status).value},
        )

    def update_driver_location(self, latitude: float, longitude: float) -> Any:
        return self._request("PUT", "/driver/profile", json={"latitude": latitude, "longitude": longitude})

    def optimize_route(self, route_id: int) -> Any:
        """Server-side optimization; the algorithm is opaque to this client."""
        return self._request("POST", f"/routes/{route_id}/optimize")

    def optimize_route_with_fixed_points(self, route_id: int) -> Any:
        return self._request("POST", f"/routes/optimization/{route_id}/with-fixed-points")


def _error_detail(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    if isinstance(data, dict):
        return str(data.get("message") or data.get("error") or data)
    return str(data)


def _parse_route(data: Any, path: str) -> Route:
    try:
        return RouteModel.model_validate(data).to_domain()
    except ValidationError as exc:
        logger.error(f"Backend GET {path} returned an invalid route payload: {exc.error_count()} error(s)")
        raise BackendError(f"Backend returned an invalid route payload for {path}.") from exc
