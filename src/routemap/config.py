"""Application configuration and settings management."""

from typing import Any, Literal, Optional

import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="ROUTEMAP_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "Route Map Pipeline API"
    api_prefix: str = "/api"
    frontend_allowed_origins: tuple[str, ...] = Field(
        default=(
            "http://localhost:5173",
            "http://127.0.0.1:5173",
        ),
        description="Permitted web origins for browser clients (CORS).",
    )

    # Delivery backend (routes, drivers, delivery points)
    backend_base_url: str = Field(
        default="http://localhost:8080/api",
        description="Base URL of the delivery-management REST backend.",
    )
    backend_timeout_seconds: float = Field(default=10.0, gt=0.0)
    backend_token: Optional[str] = Field(
        default=None,
        description="Bearer token forwarded to the backend, if any.",
    )

    # Geocoding (Nominatim-compatible search endpoint)
    geocoder_base_url: str = Field(
        default="https://nominatim.openstreetmap.org",
        description="Base URL for the geocoding service.",
    )
    geocoder_user_agent: str = Field(
        default="RouteMapClient/1.0",
        description="Descriptive client identifier required by the geocoding provider.",
    )
    geocoder_default_country: str = "Belgium"
    geocoder_timeout_seconds: float = Field(default=10.0, gt=0.0)
    geocode_spacing_seconds: float = Field(
        default=1.0,
        ge=1.0,
        description="Minimum delay between two network geocoding lookups.",
    )
    geocode_cache_max_entries: int = Field(default=1024, ge=1)

    # Road routing (OSRM)
    osrm_base_url: Optional[str] = Field(
        default="https://router.project-osrm.org",
        description="Base URL for the OSRM routing service (e.g., http://localhost:5000).",
    )
    osrm_profile: Literal["driving", "driving-hgv"] = Field(
        default="driving",
        description="OSRM profile to use when computing itineraries.",
    )
    osrm_timeout_seconds: float = Field(default=15.0, gt=0.0)
    osrm_max_retries: int = Field(default=0, ge=0)
    osrm_backoff_seconds: float = Field(default=1.0, ge=0.0)

    # Live tracking
    tracking_poll_interval_seconds: float = Field(default=30.0, gt=0.0)
    recenter_zoom: int = Field(default=15, ge=1, le=19)
    position_debounce_seconds: float = Field(
        default=0.0,
        ge=0.0,
        description="Trailing-edge debounce for position-triggered recalculation (0 disables).",
    )

    # Map defaults
    default_center: tuple[float, float] = Field(
        default=(48.8566, 2.3522),
        description="Map center used when there is nothing to display.",
    )
    default_zoom: int = Field(default=13, ge=1, le=19)

    @field_validator("frontend_allowed_origins", mode="before")
    @classmethod
    def _parse_str_tuple_from_env(cls, value: Any) -> tuple[str, ...]:
        """Parse string tuple from environment variable (comma-separated or JSON array)."""
        if isinstance(value, tuple):
            return value
        if isinstance(value, list):
            return tuple(str(item) for item in value)
        if isinstance(value, str):
            # Try JSON first
            try:
                parsed = json.loads(value)
                if isinstance(parsed, list):
                    return tuple(str(item) for item in parsed)
            except (json.JSONDecodeError, TypeError):
                pass
            if "," in value:
                return tuple(item.strip() for item in value.split(",") if item.strip())
            if value.strip():
                return (value.strip(),)
        return tuple()

    @field_validator("default_center", mode="before")
    @classmethod
    def _parse_center_from_env(cls, value: Any) -> tuple[float, float]:
        """Parse a "lat,lng" pair from environment variable (comma-separated or JSON array)."""
        if isinstance(value, str):
            try:
                parsed = json.loads(value)
            except (json.JSONDecodeError, TypeError):
                parsed = [item.strip() for item in value.split(",") if item.strip()]
            value = parsed
        if isinstance(value, (list, tuple)) and len(value) == 2:
            return (float(value[0]), float(value[1]))
        raise ValueError("default_center must be a latitude,longitude pair.")


settings = Settings()
