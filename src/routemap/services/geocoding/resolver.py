"""Address geocoding against a Nominatim-compatible search service."""

from __future__ import annotations

import logging
import threading
import time
from collections import OrderedDict
from typing import Callable, Iterable, Optional

import httpx

from ...config import settings
from ...models.domain import Address, LatLng

logger = logging.getLogger(__name__)

_MISSING = object()


class GeocodeCache:
    """Bounded, thread-safe LRU cache of geocoding results.

    ``None`` is a legitimate cached value: it records an address the provider
    could not match, so the lookup is not repeated during the session.
    """

    def __init__(self, max_entries: int | None = None) -> None:
        self.max_entries = max_entries if max_entries is not None else settings.geocode_cache_max_entries
        if self.max_entries < 1:
            raise ValueError("Geocode cache must hold at least one entry.")
        self._entries: OrderedDict[str, Optional[LatLng]] = OrderedDict()
        self._lock = threading.Lock()

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def get(self, key: str, default=None):
        with self._lock:
            value = self._entries.get(key, _MISSING)
            if value is _MISSING:
                return default
            self._entries.move_to_end(key)
            return value

    def put(self, key: str, value: Optional[LatLng]) -> None:
        with self._lock:
            self._entries[key] = value
            self._entries.move_to_end(key)
            while len(self._entries) > self.max_entries:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug(f"Evicted geocode cache entry '{evicted}'")

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()


class RequestSpacer:
    """Keeps consecutive provider requests at least ``spacing_seconds`` apart.

    One instance is shared by every caller that talks to the same provider;
    callers queue on the lock while the spacer sleeps.
    """

    def __init__(
        self,
        spacing_seconds: float | None = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.spacing_seconds = spacing_seconds if spacing_seconds is not None else settings.geocode_spacing_seconds
        self._sleep = sleep
        self._clock = clock
        self._last_request_at: float | None = None
        self._lock = threading.Lock()

    def wait(self) -> None:
        """Block until the next request may go out, then claim the slot."""
        with self._lock:
            if self._last_request_at is not None:
                remaining = self.spacing_seconds - (self._clock() - self._last_request_at)
                if remaining > 0:
                    self._sleep(remaining)
            self._last_request_at = self._clock()


def cache_key(address: Address) -> str:
    """Exact, case-sensitive key built from the four address parts."""
    return "|".join(
        part or ""
        for part in (address.street, address.city, address.postal_code, address.country)
    )


def is_geocodable(address: Address | None) -> bool:
    if address is None:
        return False
    return bool((address.street or "").strip()) and bool((address.city or "").strip())


def build_query(address: Address, default_country: str | None = None) -> str:
    country = address.country or default_country or settings.geocoder_default_country
    parts = [address.street, address.postal_code, address.city, country]
    return ", ".join(part for part in parts if part)


class GeocodeResolver:
    """Resolve postal addresses to (lat, lng) with an injected cache.

    When built with a :class:`RequestSpacer`, every network lookup goes
    through it, so resolvers shared across threads still respect the
    provider's rate limit. Without one, :func:`resolve_sequentially` spaces
    the lookups of a single batch.
    """

    def __init__(
        self,
        cache: GeocodeCache | None = None,
        base_url: str | None = None,
        user_agent: str | None = None,
        default_country: str | None = None,
        timeout: float | None = None,
        transport: httpx.BaseTransport | None = None,
        spacer: RequestSpacer | None = None,
    ) -> None:
        self.cache = cache if cache is not None else GeocodeCache()
        self.base_url = (base_url or settings.geocoder_base_url).rstrip("/")
        self.user_agent = user_agent or settings.geocoder_user_agent
        self.default_country = default_country or settings.geocoder_default_country
        self.timeout = timeout if timeout is not None else settings.geocoder_timeout_seconds
        self.spacer = spacer
        self._transport = transport

    def _get_client(self) -> httpx.Client:
        return httpx.Client(
            timeout=httpx.Timeout(self.timeout, connect=5.0),
            headers={"User-Agent": self.user_agent},
            transport=self._transport,
        )

    def resolve(self, address: Address | None, spacer: RequestSpacer | None = None) -> Optional[LatLng]:
        if not is_geocodable(address):
            logger.warning(f"Address cannot be geocoded (missing street or city): {address}")
            return None

        key = cache_key(address)
        cached = self.cache.get(key, _MISSING)
        if cached is not _MISSING:
            logger.debug(f"Geocode cache hit for '{key}'")
            return cached

        query = build_query(address, self.default_country)
        params = {"q": query, "format": "json", "limit": 1, "addressdetails": 1}

        gate = spacer if spacer is not None else self.spacer
        if gate is not None:
            gate.wait()
        logger.info(f"Geocoding '{query}'")

        client = self._get_client()
        try:
            response = client.get(f"{self.base_url}/search", params=params)
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            # Transport failures are not cached so a later attempt may succeed.
            logger.warning(f"Geocoding request failed for '{query}': {exc}")
            return None
        finally:
            client.close()

        if not isinstance(data, list) or not data:
            logger.warning(f"No geocoding match for '{query}'")
            self.cache.put(key, None)
            return None

        try:
            coords = (float(data[0]["lat"]), float(data[0]["lon"]))
        except (KeyError, TypeError, ValueError) as exc:
            logger.warning(f"Malformed geocoding result for '{query}': {exc}")
            return None

        self.cache.put(key, coords)
        return coords

    def clear_cache(self) -> None:
        self.cache.clear()


def resolve_sequentially(
    resolver: GeocodeResolver,
    addresses: Iterable[Address | None],
    *,
    spacing_seconds: float | None = None,
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> list[Optional[LatLng]]:
    """Resolve addresses one after another, spacing network lookups.

    Cache hits and unusable addresses do not wait. Batch geocoding of N
    uncached addresses therefore takes at least (N - 1) * spacing seconds.
    A resolver that carries its own spacer keeps using it, so concurrent
    batches share one rate limit.
    """
    spacer = resolver.spacer
    if spacer is None:
        spacer = RequestSpacer(spacing_seconds, sleep=sleep, clock=clock)
    return [resolver.resolve(address, spacer=spacer) for address in addresses]
