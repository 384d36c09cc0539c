"""External navigation deep links."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from ...schemas.render import NavigationRequest, NavigationResponse
from ...services.geocoding.resolver import GeocodeResolver
from ...services.navigation import navigation_url
from ...services.pipeline import resolve_stops
from ..deps import get_resolver

router = APIRouter(tags=["navigation"])


@router.post("/navigation", response_model=NavigationResponse, status_code=status.HTTP_200_OK)
def navigation(
    payload: NavigationRequest,
    resolver: GeocodeResolver = Depends(get_resolver),
) -> NavigationResponse:
    route = payload.route.to_domain()
    stops, _ = resolve_stops(route.delivery_points, resolver)
    origin = payload.driver_position if payload.driver_position is not None else route.driver_position
    return NavigationResponse(app=payload.app, url=navigation_url(payload.app, stops, origin))
