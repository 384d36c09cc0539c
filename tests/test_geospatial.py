import pytest

from routemap.services.geospatial import haversine_km, is_valid_position, path_length_km


def test_haversine_brussels_to_antwerp() -> None:
    assert haversine_km(50.8503, 4.3517, 51.2194, 4.4025) == pytest.approx(41.2, abs=0.5)


def test_path_length_sums_legs() -> None:
    path = [(50.0, 4.0), (50.1, 4.0), (50.2, 4.0)]

    assert path_length_km(path) == pytest.approx(2 * haversine_km(50.0, 4.0, 50.1, 4.0))
    assert path_length_km(path[:1]) == 0


@pytest.mark.parametrize(
    ("lat", "lon", "valid"),
    [(0.0, 0.0, True), (90.0, 180.0, True), (90.1, 0.0, False), (0.0, -180.5, False)],
)
def test_is_valid_position(lat: float, lon: float, valid: bool) -> None:
    assert is_valid_position(lat, lon) is valid
