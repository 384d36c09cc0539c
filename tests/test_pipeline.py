import httpx
import pytest

from routemap.models.domain import Address, DeliveryPoint, DeliveryStatus, Itinerary, Route
from routemap.services.geocoding.resolver import GeocodeCache, GeocodeResolver
from routemap.services.pipeline import RouteMapSession, build_render_model, resolve_stops
from routemap.services.progress import ACTIVE_STYLE, TRAVERSED_STYLE, segment, style_segments
from routemap.services.routing.osrm_client import OSRMClient
from routemap.services.tracking import PositionFix

POSITIONS = [(50.85, 4.35), (50.86, 4.36), (50.87, 4.37)]


def _point(
    pid: int,
    status: DeliveryStatus = DeliveryStatus.PENDING,
    position: tuple[float, float] | None = None,
    street: str = "Rue Neuve 1",
    order: int | None = None,
) -> DeliveryPoint:
    lat, lng = position if position is not None else (None, None)
    return DeliveryPoint(
        id=pid,
        client_name=f"Client {pid}",
        address=Address(street=street, city="Brussels", postal_code="1000", latitude=lat, longitude=lng),
        delivery_status=status,
        sequence_order=pid if order is None else order,
    )


def _route(route_id: int = 1, driver_position=None) -> Route:
    statuses = [DeliveryStatus.COMPLETED, DeliveryStatus.IN_PROGRESS, DeliveryStatus.PENDING]
    return Route(
        id=route_id,
        delivery_points=[_point(i, statuses[i], POSITIONS[i]) for i in range(3)],
        driver_position=driver_position,
    )


class DummyItinerary:
    def __init__(self, itinerary: Itinerary | None = None) -> None:
        self.itinerary = itinerary
        self.calls: list = []

    def calculate(self, coordinates):
        self.calls.append(list(coordinates))
        if self.itinerary is None:
            return None
        return self.itinerary


def _through_stops() -> Itinerary:
    return Itinerary(coordinates=tuple(POSITIONS), distance_km=2.6, duration_min=6)


def _no_sleep(seconds: float) -> None:
    pass


def test_progress_highlights_leg_to_next_stop() -> None:
    model = build_render_model(_route(), resolver=None, itinerary_client=DummyItinerary(_through_stops()))

    assert model.next_stop_index == 1
    assert not model.uses_fallback
    assert len(model.segments) == 2
    first, second = model.segments
    assert (second.opacity, second.weight) == (ACTIVE_STYLE.opacity, ACTIVE_STYLE.weight)
    assert first.opacity == TRAVERSED_STYLE.opacity
    assert model.completion_percent == 33


def test_unreachable_routing_falls_back_to_dashed_lines() -> None:
    def _down(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("unreachable", request=request)

    client = OSRMClient(base_url="http://osrm.test", max_retries=0, transport=httpx.MockTransport(_down))

    model = build_render_model(_route(), resolver=None, itinerary_client=client)

    assert model.itinerary is None
    assert model.uses_fallback
    assert model.segments == []
    assert model.visible_segments == model.fallback_segments
    solid = style_segments(segment(POSITIONS), model.next_stop_index, 3)
    assert [item.segment.positions for item in model.fallback_segments] == [
        (POSITIONS[0], POSITIONS[1]),
        (POSITIONS[1], POSITIONS[2]),
    ]
    for plain, dashed in zip(solid, model.fallback_segments):
        assert dashed.dashed
        assert dashed.weight == max(plain.weight - 1, 2)


def test_driver_position_leads_the_itinerary() -> None:
    itinerary_client = DummyItinerary()
    driver = (50.80, 4.30)

    model = build_render_model(_route(), driver, resolver=None, itinerary_client=itinerary_client)

    assert itinerary_client.calls == [[driver, *POSITIONS]]
    assert model.driver_position == driver
    assert len(model.fallback_segments) == 3
    assert [item.opacity for item in model.fallback_segments] == [0.25, 0.25, 1.0]
    assert model.viewport.center == pytest.approx((50.835, 4.335))


def test_driver_leg_keeps_one_active_fallback_segment() -> None:
    statuses = [DeliveryStatus.COMPLETED, DeliveryStatus.PENDING, DeliveryStatus.PENDING]
    route = Route(id=4, delivery_points=[_point(i, statuses[i], POSITIONS[i]) for i in range(3)])

    model = build_render_model(route, (50.80, 4.30), resolver=None, itinerary_client=DummyItinerary())

    assert model.next_stop_index == 1
    assert [(item.opacity, item.weight) for item in model.fallback_segments] == [
        (0.25, 2),
        (0.25, 2),
        (1.0, 5),
    ]


def test_driver_leg_keeps_one_active_itinerary_segment() -> None:
    driver = (50.80, 4.30)
    itinerary = Itinerary(coordinates=(driver, *POSITIONS), distance_km=8.1, duration_min=14)

    model = build_render_model(_route(), driver, resolver=None, itinerary_client=DummyItinerary(itinerary))

    active = [item.segment.index for item in model.segments if item.opacity == ACTIVE_STYLE.opacity]
    assert active == [2]
    assert (model.segments[2].opacity, model.segments[2].weight) == (ACTIVE_STYLE.opacity, ACTIVE_STYLE.weight)


def test_route_driver_position_is_used_when_none_given() -> None:
    driver = (50.80, 4.30)

    model = build_render_model(_route(driver_position=driver), resolver=None, itinerary_client=DummyItinerary())

    assert model.driver_position == driver


def test_resolve_stops_geocodes_and_reports_unlocated() -> None:
    calls: list = []

    def _handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json=[{"lat": "50.9", "lon": "4.4"}])

    resolver = GeocodeResolver(
        cache=GeocodeCache(max_entries=10),
        base_url="http://geocoder.test",
        transport=httpx.MockTransport(_handler),
    )
    points = [
        _point(3, street=""),
        _point(2),
        _point(1, position=(50.85, 4.35)),
    ]

    stops, unlocated = resolve_stops(points, resolver, spacing_seconds=1.0, sleep=_no_sleep)

    assert [stop.id for stop in stops] == [1, 2]
    assert stops[1].position == (50.9, 4.4)
    assert stops[0].address == "Rue Neuve 1, Brussels, 1000"
    assert [stop.id for stop in unlocated] == [3]
    assert len(calls) == 1


def test_resolve_stops_without_resolver_leaves_points_unlocated() -> None:
    stops, unlocated = resolve_stops([_point(1)], None)

    assert stops == []
    assert [stop.id for stop in unlocated] == [1]


def test_empty_route_renders_default_view() -> None:
    model = build_render_model(Route(id=5), resolver=None, itinerary_client=DummyItinerary())

    assert model.stops == []
    assert model.fallback_segments == []
    assert model.next_stop_index == -1
    assert model.viewport.zoom == 13


def test_session_discards_results_for_replaced_route() -> None:
    session = RouteMapSession(None, DummyItinerary(_through_stops()), sleep=_no_sleep)
    ticket = session.load_route(_route(1))
    stale = build_render_model(_route(1), resolver=None, itinerary_client=DummyItinerary())

    session.load_route(_route(2))

    assert session.commit(ticket, stale) is False
    assert session.model is None


def test_session_discards_results_for_older_driver_position() -> None:
    session = RouteMapSession(None, DummyItinerary(), sleep=_no_sleep)
    session.load_route(_route(1))
    session.refresh()
    ticket = session.begin()

    session.update_driver_position((50.80, 4.30))

    assert not session.is_current(ticket)
    assert session.is_current_route(ticket)
    assert session.model.driver_position == (50.80, 4.30)


def test_session_drops_geocoding_result_when_route_changes_midway() -> None:
    session = RouteMapSession(None, DummyItinerary(), sleep=_no_sleep)

    class SwitchingResolver:
        spacer = None

        def resolve(self, address, spacer=None):
            session.load_route(_route(2))
            return (50.9, 4.4)

    session.resolver = SwitchingResolver()
    session.load_route(Route(id=1, delivery_points=[_point(9)]))

    assert session.refresh() is None
    assert session.route.id == 2
    assert session.model is None


def test_session_refresh_and_position_updates() -> None:
    itinerary_client = DummyItinerary()
    session = RouteMapSession(None, itinerary_client, sleep=_no_sleep)

    assert session.update_driver_position((50.80, 4.30)) is None

    session.load_route(_route(1))
    model = session.refresh()

    assert model is session.model
    assert model.driver_position == (50.80, 4.30)
    assert itinerary_client.calls[-1][0] == (50.80, 4.30)

    updated = session.update_driver_position((50.81, 4.31))
    assert updated.driver_position == (50.81, 4.31)
    assert itinerary_client.calls[-1] == [(50.81, 4.31), *POSITIONS]


def test_tracker_feeds_session() -> None:
    class Provider:
        def current_position(self) -> PositionFix:
            return PositionFix(50.82, 4.32)

    session = RouteMapSession(None, DummyItinerary(), sleep=_no_sleep)
    session.load_route(_route(1))
    session.refresh()

    tracker = session.create_tracker(Provider(), debounce_seconds=0)
    tracker.start(now=0.0)

    assert session.model.driver_position == (50.82, 4.32)
    assert session.model.fallback_segments[0].segment.positions[0] == (50.82, 4.32)
