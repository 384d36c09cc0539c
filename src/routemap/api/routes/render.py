"""Render-model endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from ...schemas.render import RenderModelResponse, RenderRequest
from ...services.export import render_model_to_geojson
from ...services.geocoding.resolver import GeocodeResolver
from ...services.pipeline import RenderModel, build_render_model
from ...services.routing.osrm_client import OSRMClient
from ..deps import get_itinerary_client, get_resolver

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/render", tags=["render"])


def _render(payload: RenderRequest, resolver: GeocodeResolver, itinerary_client: OSRMClient) -> RenderModel:
    try:
        return build_render_model(
            payload.route.to_domain(),
            payload.driver_position,
            resolver=resolver,
            itinerary_client=itinerary_client,
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc


@router.post("", response_model=RenderModelResponse, status_code=status.HTTP_200_OK)
def render(
    payload: RenderRequest,
    resolver: GeocodeResolver = Depends(get_resolver),
    itinerary_client: OSRMClient = Depends(get_itinerary_client),
) -> RenderModelResponse:
    model = _render(payload, resolver, itinerary_client)
    logger.info(
        f"Rendered route {model.route_id}: {len(model.stops)} stop(s), "
        f"{len(model.unlocated)} unlocated, fallback={model.uses_fallback}"
    )
    return RenderModelResponse.from_domain(model)


@router.post("/geojson", status_code=status.HTTP_200_OK)
def render_geojson(
    payload: RenderRequest,
    resolver: GeocodeResolver = Depends(get_resolver),
    itinerary_client: OSRMClient = Depends(get_itinerary_client),
) -> dict:
    return render_model_to_geojson(_render(payload, resolver, itinerary_client))
