"""Lazily built service singletons shared by the HTTP endpoints."""

from __future__ import annotations

from functools import lru_cache

from ..config import settings
from ..services.backend.client import BackendClient
from ..services.geocoding.resolver import GeocodeCache, GeocodeResolver, RequestSpacer
from ..services.routing.osrm_client import OSRMClient


@lru_cache(maxsize=1)
def get_geocode_cache() -> GeocodeCache:
    return GeocodeCache(max_entries=settings.geocode_cache_max_entries)


@lru_cache(maxsize=1)
def get_resolver() -> GeocodeResolver:
    # One spacer for every request thread.
    return GeocodeResolver(
        cache=get_geocode_cache(),
        spacer=RequestSpacer(settings.geocode_spacing_seconds),
    )


@lru_cache(maxsize=1)
def get_itinerary_client() -> OSRMClient:
    return OSRMClient()


def get_backend_client() -> BackendClient:
    return BackendClient()
