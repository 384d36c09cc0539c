"""Deep links that hand a route over to an external navigation app."""

from __future__ import annotations

from typing import Literal, Optional, Sequence

from ..models.domain import DeliveryStatus, LatLng, ResolvedStop

NavigationApp = Literal["google", "waze", "apple"]


def _fmt(position: LatLng) -> str:
    return f"{position[0]},{position[1]}"


def google_maps_url(stops: Sequence[ResolvedStop], origin: Optional[LatLng] = None) -> Optional[str]:
    """Multi-stop Google Maps directions, starting at ``origin`` or the first stop."""
    if not stops:
        return None

    origin_coords = _fmt(origin) if origin is not None else _fmt(stops[0].position)
    destination = _fmt(stops[-1].position)
    # With an explicit origin the first stop becomes a waypoint too.
    intermediate = stops[0 if origin is not None else 1 : -1]
    waypoints = "|".join(_fmt(stop.position) for stop in intermediate)

    url = f"https://www.google.com/maps/dir/?api=1&origin={origin_coords}&destination={destination}"
    if waypoints:
        url += f"&waypoints={waypoints}"
    return url + "&travelmode=driving"


def waze_url(destination: Optional[LatLng]) -> Optional[str]:
    """Waze only supports a single destination."""
    if destination is None:
        return None
    return f"https://waze.com/ul?ll={_fmt(destination)}&navigate=yes"


def apple_maps_url(stops: Sequence[ResolvedStop]) -> Optional[str]:
    if not stops:
        return None
    return f"http://maps.apple.com/?daddr={_fmt(stops[-1].position)}&dirflg=d"


def single_point_url(position: LatLng, app: NavigationApp = "google") -> str:
    if app == "google":
        return f"https://www.google.com/maps/dir/?api=1&destination={_fmt(position)}&travelmode=driving"
    if app == "waze":
        return waze_url(position)
    if app == "apple":
        return f"http://maps.apple.com/?daddr={_fmt(position)}&dirflg=d"
    raise ValueError(f"Unknown navigation app '{app}'.")


def navigation_url(
    app: NavigationApp,
    stops: Sequence[ResolvedStop],
    origin: Optional[LatLng] = None,
) -> Optional[str]:
    if app == "google":
        return google_maps_url(stops, origin)
    if app == "waze":
        if not stops:
            return None
        upcoming = next(
            (
                stop
                for stop in stops
                if stop.status in (DeliveryStatus.PENDING, DeliveryStatus.IN_PROGRESS)
            ),
            stops[0],
        )
        return waze_url(upcoming.position)
    if app == "apple":
        return apple_maps_url(stops)
    raise ValueError(f"Unknown navigation app '{app}'.")
