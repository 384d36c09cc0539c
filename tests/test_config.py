import pytest
from pydantic import ValidationError

from routemap.config import Settings


def test_defaults() -> None:
    config = Settings(_env_file=None)

    assert config.api_prefix == "/api"
    assert config.geocode_spacing_seconds >= 1.0
    assert config.default_center == (48.8566, 2.3522)
    assert config.default_zoom == 13
    assert config.osrm_max_retries == 0


def test_origins_accept_comma_separated_and_json() -> None:
    assert Settings(_env_file=None, frontend_allowed_origins="http://a.test, http://b.test").frontend_allowed_origins == (
        "http://a.test",
        "http://b.test",
    )
    assert Settings(_env_file=None, frontend_allowed_origins='["http://c.test"]').frontend_allowed_origins == (
        "http://c.test",
    )


def test_default_center_parsing() -> None:
    assert Settings(_env_file=None, default_center="50.85, 4.35").default_center == (50.85, 4.35)

    with pytest.raises(ValidationError):
        Settings(_env_file=None, default_center="50.85")


def test_geocode_spacing_cannot_go_below_one_second() -> None:
    with pytest.raises(ValidationError):
        Settings(_env_file=None, geocode_spacing_seconds=0.5)


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ROUTEMAP_OSRM_BASE_URL", "http://localhost:5000")
    monkeypatch.setenv("ROUTEMAP_RECENTER_ZOOM", "16")

    config = Settings(_env_file=None)

    assert config.osrm_base_url == "http://localhost:5000"
    assert config.recenter_zoom == 16
