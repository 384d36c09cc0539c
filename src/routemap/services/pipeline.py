"""Route x driver position -> render model.

The pipeline composes geocoding, ordering, itinerary, progress styling and
viewport derivation. :class:`RouteMapSession` is the stateful consumer that
keeps the latest result and discards computations that were superseded by a
new route or a newer driver position.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional, Protocol, Sequence

from ..models.domain import (
    DeliveryPoint,
    Itinerary,
    LatLng,
    ResolvedStop,
    Route,
    StyledSegment,
    UnlocatedStop,
    Viewport,
)
from .geocoding.resolver import GeocodeResolver, resolve_sequentially
from .geospatial import path_length_km
from .progress import (
    completion_percent,
    fallback_segments,
    next_stop_index,
    segment,
    style_segments,
    waypoint_progress,
)
from .routing.osrm_client import build_waypoints
from .sequencing import sort_points
from .tracking import GeolocationProvider, LiveTrackingController, TrackingNotice
from .viewport import compute_bounds

logger = logging.getLogger(__name__)


class ItineraryCalculator(Protocol):
    def calculate(self, coordinates: Sequence[LatLng]) -> Optional[Itinerary]:
        ...


@dataclass(slots=True)
class RenderModel:
    route_id: int
    stops: list[ResolvedStop]
    unlocated: list[UnlocatedStop]
    driver_position: Optional[LatLng]
    itinerary: Optional[Itinerary]
    segments: list[StyledSegment]
    fallback_segments: list[StyledSegment]
    viewport: Viewport
    next_stop_index: int
    completion_percent: int
    straight_line_km: float = 0.0

    @property
    def uses_fallback(self) -> bool:
        return self.itinerary is None

    @property
    def visible_segments(self) -> list[StyledSegment]:
        """The layer the map should draw: road itinerary, else straight lines."""
        return self.fallback_segments if self.uses_fallback else self.segments


def _to_resolved(point: DeliveryPoint, position: LatLng) -> ResolvedStop:
    return ResolvedStop(
        id=point.id,
        position=position,
        client_name=point.client_name,
        address=point.address.formatted(),
        status=point.delivery_status,
        sequence_order=point.sequence_order,
        planned_time=point.planned_time,
        actual_time=point.actual_time,
        phone=point.client_phone_number,
        notes=point.client_note,
    )


def _to_unlocated(point: DeliveryPoint) -> UnlocatedStop:
    return UnlocatedStop(
        id=point.id,
        client_name=point.client_name,
        address=point.address.formatted() if point.address else "",
        status=point.delivery_status,
    )


def resolve_stops(
    points: Sequence[DeliveryPoint],
    resolver: GeocodeResolver | None,
    *,
    spacing_seconds: float | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> tuple[list[ResolvedStop], list[UnlocatedStop]]:
    """Place every point on the map, geocoding those without coordinates.

    Points that cannot be located are returned separately, in order, so list
    views can still show them.
    """
    ordered = sort_points(points)
    missing = [point for point in ordered if point.address is None or point.address.coordinates is None]

    if missing and resolver is not None:
        found = resolve_sequentially(
            resolver,
            [point.address for point in missing],
            spacing_seconds=spacing_seconds,
            sleep=sleep,
        )
        geocoded = {point.id: position for point, position in zip(missing, found)}
    else:
        geocoded = {}

    stops: list[ResolvedStop] = []
    unlocated: list[UnlocatedStop] = []
    for point in ordered:
        position = point.address.coordinates if point.address is not None else None
        if position is None:
            position = geocoded.get(point.id)
        if position is None:
            unlocated.append(_to_unlocated(point))
            continue
        stops.append(_to_resolved(point, position))

    if unlocated:
        logger.warning(f"{len(unlocated)} delivery point(s) could not be located and are left off the map")
    return stops, unlocated


def render_stops(
    route_id: int,
    stops: Sequence[ResolvedStop],
    unlocated: Sequence[UnlocatedStop],
    driver_position: Optional[LatLng],
    itinerary_client: ItineraryCalculator | None,
    *,
    points: Sequence[DeliveryPoint] = (),
) -> RenderModel:
    """Itinerary, styled segments and viewport for already-resolved stops."""
    positions = [stop.position for stop in stops]
    waypoints = build_waypoints(positions, driver_position)

    itinerary = itinerary_client.calculate(waypoints) if itinerary_client is not None else None
    if itinerary is None and len(waypoints) >= 2:
        logger.info(f"Route {route_id}: no road itinerary, drawing straight-line fallback")

    next_index = next_stop_index(stops)
    style_next, style_total = waypoint_progress(next_index, len(stops), driver_position is not None)
    segments = style_segments(segment(itinerary.coordinates), style_next, style_total) if itinerary else []
    fallback = fallback_segments(waypoints, style_next, style_total)

    bounds_positions = list(positions)
    if driver_position is not None:
        bounds_positions.append(driver_position)

    return RenderModel(
        route_id=route_id,
        stops=list(stops),
        unlocated=list(unlocated),
        driver_position=driver_position,
        itinerary=itinerary,
        segments=segments,
        fallback_segments=fallback,
        viewport=compute_bounds(bounds_positions),
        next_stop_index=next_index,
        completion_percent=completion_percent(points),
        straight_line_km=round(path_length_km(waypoints), 2),
    )


def build_render_model(
    route: Route,
    driver_position: Optional[LatLng] = None,
    *,
    resolver: GeocodeResolver | None,
    itinerary_client: ItineraryCalculator | None,
    spacing_seconds: float | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> RenderModel:
    """Pure pipeline entry point: Route x driver position -> RenderModel."""
    position = driver_position if driver_position is not None else route.driver_position
    stops, unlocated = resolve_stops(
        route.delivery_points, resolver, spacing_seconds=spacing_seconds, sleep=sleep
    )
    return render_stops(
        route.id, stops, unlocated, position, itinerary_client, points=route.delivery_points
    )


@dataclass(frozen=True, slots=True)
class ComputationTicket:
    """Identity of the inputs a pipeline run was started for."""

    route_id: int
    route_generation: int
    position_generation: int


class RouteMapSession:
    """Holds the render model for the route currently on screen.

    Every run is tagged with a :class:`ComputationTicket`; results whose
    ticket no longer matches the session (new route loaded, newer driver
    position) are dropped on arrival.
    """

    def __init__(
        self,
        resolver: GeocodeResolver | None,
        itinerary_client: ItineraryCalculator | None,
        *,
        spacing_seconds: float | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.resolver = resolver
        self.itinerary_client = itinerary_client
        self.spacing_seconds = spacing_seconds
        self._sleep = sleep

        self.route: Route | None = None
        self.driver_position: LatLng | None = None
        self.model: RenderModel | None = None
        self._stops: list[ResolvedStop] | None = None
        self._unlocated: list[UnlocatedStop] = []
        self._route_generation = 0
        self._position_generation = 0

    def load_route(self, route: Route) -> ComputationTicket:
        self.route = route
        if route.driver_position is not None:
            self.driver_position = route.driver_position
        self.model = None
        self._stops = None
        self._unlocated = []
        self._route_generation += 1
        return self.begin()

    def begin(self) -> ComputationTicket:
        if self.route is None:
            raise RuntimeError("No route loaded.")
        return ComputationTicket(self.route.id, self._route_generation, self._position_generation)

    def is_current_route(self, ticket: ComputationTicket) -> bool:
        return (
            self.route is not None
            and ticket.route_id == self.route.id
            and ticket.route_generation == self._route_generation
        )

    def is_current(self, ticket: ComputationTicket) -> bool:
        return self.is_current_route(ticket) and ticket.position_generation == self._position_generation

    def commit(self, ticket: ComputationTicket, model: RenderModel) -> bool:
        if not self.is_current(ticket):
            logger.debug(f"Discarding stale render model for route {ticket.route_id}")
            return False
        self.model = model
        return True

    def refresh(self) -> RenderModel | None:
        """Geocode the current route (once) and render it."""
        ticket = self.begin()
        if self._stops is None:
            stops, unlocated = resolve_stops(
                self.route.delivery_points,
                self.resolver,
                spacing_seconds=self.spacing_seconds,
                sleep=self._sleep,
            )
            if not self.is_current_route(ticket):
                logger.debug(f"Discarding stale geocoding result for route {ticket.route_id}")
                return None
            self._stops, self._unlocated = stops, unlocated
        return self._render()

    def update_driver_position(self, position: LatLng) -> RenderModel | None:
        """Re-enter the pipeline for a new driver position; the last one wins."""
        self.driver_position = position
        self._position_generation += 1
        if self.route is None or self._stops is None:
            return None
        return self._render()

    def create_tracker(
        self,
        provider: GeolocationProvider,
        on_notice: Callable[[TrackingNotice], None] | None = None,
        **kwargs,
    ) -> LiveTrackingController:
        return LiveTrackingController(
            provider,
            on_update=self.update_driver_position,
            on_notice=on_notice,
            **kwargs,
        )

    def _render(self) -> RenderModel | None:
        ticket = self.begin()
        model = render_stops(
            self.route.id,
            self._stops,
            self._unlocated,
            self.driver_position,
            self.itinerary_client,
            points=self.route.delivery_points,
        )
        return model if self.commit(ticket, model) else None
