import pytest

from routemap.models.domain import DeliveryStatus, ResolvedStop
from routemap.services.navigation import (
    apple_maps_url,
    google_maps_url,
    navigation_url,
    single_point_url,
    waze_url,
)


def _stop(index: int, lat: float, lng: float, status: DeliveryStatus = DeliveryStatus.PENDING) -> ResolvedStop:
    return ResolvedStop(
        id=index,
        position=(lat, lng),
        client_name=f"Client {index}",
        address="Street, City, 1000",
        status=status,
        sequence_order=index,
    )


STOPS = [_stop(0, 50.1, 4.1), _stop(1, 50.2, 4.2), _stop(2, 50.3, 4.3)]


def test_google_maps_url_from_first_stop() -> None:
    assert google_maps_url(STOPS) == (
        "https://www.google.com/maps/dir/?api=1&origin=50.1,4.1&destination=50.3,4.3"
        "&waypoints=50.2,4.2&travelmode=driving"
    )


def test_google_maps_url_from_driver_position() -> None:
    assert google_maps_url(STOPS, origin=(50.0, 4.0)) == (
        "https://www.google.com/maps/dir/?api=1&origin=50.0,4.0&destination=50.3,4.3"
        "&waypoints=50.1,4.1|50.2,4.2&travelmode=driving"
    )


def test_google_maps_url_two_stops_has_no_waypoints() -> None:
    url = google_maps_url(STOPS[:2])

    assert "waypoints" not in url


def test_waze_targets_first_open_stop() -> None:
    stops = [
        _stop(0, 50.1, 4.1, DeliveryStatus.COMPLETED),
        _stop(1, 50.2, 4.2, DeliveryStatus.IN_PROGRESS),
        _stop(2, 50.3, 4.3),
    ]

    assert navigation_url("waze", stops) == "https://waze.com/ul?ll=50.2,4.2&navigate=yes"


def test_waze_falls_back_to_first_stop_when_all_done() -> None:
    stops = [_stop(0, 50.1, 4.1, DeliveryStatus.COMPLETED)]

    assert navigation_url("waze", stops) == waze_url((50.1, 4.1))


def test_apple_maps_targets_last_stop() -> None:
    assert apple_maps_url(STOPS) == "http://maps.apple.com/?daddr=50.3,4.3&dirflg=d"


@pytest.mark.parametrize("app", ["google", "waze", "apple"])
def test_no_stops_means_no_link(app: str) -> None:
    assert navigation_url(app, []) is None


def test_single_point_url() -> None:
    assert single_point_url((50.1, 4.1)).endswith("destination=50.1,4.1&travelmode=driving")
    assert single_point_url((50.1, 4.1), "apple") == "http://maps.apple.com/?daddr=50.1,4.1&dirflg=d"


def test_unknown_app() -> None:
    with pytest.raises(ValueError):
        single_point_url((50.1, 4.1), "bing")
    with pytest.raises(ValueError):
        navigation_url("bing", STOPS)
