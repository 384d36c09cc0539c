"""Endpoints that work on routes stored by the delivery backend."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from ...schemas.render import RenderModelResponse
from ...schemas.routes import OrderedPointModel
from ...schemas.sequence import OrderPayloadResponse, SequenceRequest
from ...services.backend.client import BackendClient, BackendError
from ...services.geocoding.resolver import GeocodeResolver
from ...services.pipeline import build_render_model
from ...services.routing.osrm_client import OSRMClient
from ...services.sequencing import to_persistable_payload
from ..deps import get_backend_client, get_itinerary_client, get_resolver

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/routes", tags=["routes"])


def _backend_failure(exc: BackendError) -> HTTPException:
    if exc.status_code == status.HTTP_404_NOT_FOUND:
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=f"Backend request failed: {exc}")


@router.get("/{route_id}/render", response_model=RenderModelResponse, status_code=status.HTTP_200_OK)
def render_stored_route(
    route_id: int,
    backend: BackendClient = Depends(get_backend_client),
    resolver: GeocodeResolver = Depends(get_resolver),
    itinerary_client: OSRMClient = Depends(get_itinerary_client),
) -> RenderModelResponse:
    try:
        route = backend.get_route(route_id)
    except BackendError as exc:
        raise _backend_failure(exc) from exc
    model = build_render_model(route, resolver=resolver, itinerary_client=itinerary_client)
    return RenderModelResponse.from_domain(model)


@router.put("/{route_id}/order", response_model=OrderPayloadResponse, status_code=status.HTTP_200_OK)
def save_order(
    route_id: int,
    payload: SequenceRequest,
    backend: BackendClient = Depends(get_backend_client),
) -> OrderPayloadResponse:
    """Persist the client's manual sequence (order plus start/end flags)."""
    points = [point.to_domain() for point in payload.points]
    try:
        backend.update_points_order(route_id, points)
    except BackendError as exc:
        raise _backend_failure(exc) from exc
    logger.info(f"Saved order of {len(points)} point(s) for route {route_id}")
    return OrderPayloadResponse(
        ordered_points=[OrderedPointModel.model_validate(item) for item in to_persistable_payload(points)]
    )
