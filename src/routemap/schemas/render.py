"""Render-model request/response schemas."""

from __future__ import annotations

from typing import List, Literal, Optional, Tuple

from pydantic import Field

from ..models.domain import DeliveryStatus, StyledSegment
from ..services.pipeline import RenderModel
from .routes import CamelModel, RouteModel


class RenderRequest(CamelModel):
    route: RouteModel
    driver_position: Optional[Tuple[float, float]] = Field(
        default=None,
        description="Live driver position [lat, lng]; overrides the route's own driver position.",
    )


class ResolvedStopModel(CamelModel):
    id: int
    position: Tuple[float, float]
    client_name: str
    address: str
    status: DeliveryStatus
    sequence_order: Optional[int] = None


class UnlocatedStopModel(CamelModel):
    id: int
    client_name: str
    address: str
    status: DeliveryStatus


class ItineraryModel(CamelModel):
    coordinates: List[Tuple[float, float]]
    distance_km: float
    duration_min: int


class StyledSegmentModel(CamelModel):
    index: int
    positions: Tuple[Tuple[float, float], Tuple[float, float]]
    color: str
    opacity: float
    weight: int
    dashed: bool

    @classmethod
    def from_domain(cls, styled: StyledSegment) -> "StyledSegmentModel":
        return cls(
            index=styled.segment.index,
            positions=styled.segment.positions,
            color=styled.segment.color,
            opacity=styled.opacity,
            weight=styled.weight,
            dashed=styled.dashed,
        )


class ViewportModel(CamelModel):
    center: Tuple[float, float]
    zoom: int


class RenderModelResponse(CamelModel):
    route_id: int
    stops: List[ResolvedStopModel]
    unlocated: List[UnlocatedStopModel]
    driver_position: Optional[Tuple[float, float]] = None
    itinerary: Optional[ItineraryModel] = None
    segments: List[StyledSegmentModel]
    fallback_segments: List[StyledSegmentModel]
    uses_fallback: bool
    viewport: ViewportModel
    next_stop_index: int
    completion_percent: int
    straight_line_km: float

    @classmethod
    def from_domain(cls, model: RenderModel) -> "RenderModelResponse":
        itinerary = None
        if model.itinerary is not None:
            itinerary = ItineraryModel(
                coordinates=list(model.itinerary.coordinates),
                distance_km=model.itinerary.distance_km,
                duration_min=model.itinerary.duration_min,
            )
        return cls(
            route_id=model.route_id,
            stops=[
                ResolvedStopModel(
                    id=stop.id,
                    position=stop.position,
                    client_name=stop.client_name,
                    address=stop.address,
                    status=stop.status,
                    sequence_order=stop.sequence_order,
                )
                for stop in model.stops
            ],
            unlocated=[
                UnlocatedStopModel(
                    id=stop.id,
                    client_name=stop.client_name,
                    address=stop.address,
                    status=stop.status,
                )
                for stop in model.unlocated
            ],
            driver_position=model.driver_position,
            itinerary=itinerary,
            segments=[StyledSegmentModel.from_domain(item) for item in model.segments],
            fallback_segments=[StyledSegmentModel.from_domain(item) for item in model.fallback_segments],
            uses_fallback=model.uses_fallback,
            viewport=ViewportModel(center=model.viewport.center, zoom=model.viewport.zoom),
            next_stop_index=model.next_stop_index,
            completion_percent=model.completion_percent,
            straight_line_km=model.straight_line_km,
        )


class NavigationRequest(RenderRequest):
    app: Literal["google", "waze", "apple"] = "google"


class NavigationResponse(CamelModel):
    app: str
    url: Optional[str] = None
