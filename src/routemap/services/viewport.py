"""Map viewport (center and zoom) derivation."""

from __future__ import annotations

from typing import Sequence

from shapely.geometry import MultiPoint

from ..config import settings
from ..models.domain import LatLng, Viewport

# (range threshold in degrees, zoom). Evaluated in ascending order; the last
# matching threshold wins.
ZOOM_THRESHOLDS: tuple[tuple[float, int], ...] = (
    (0.2, 10),
    (0.5, 9),
    (1.0, 8),
    (2.0, 7),
    (5.0, 6),
)


def zoom_for_range(max_range: float, default_zoom: int | None = None) -> int:
    zoom = default_zoom if default_zoom is not None else settings.default_zoom
    for threshold, threshold_zoom in ZOOM_THRESHOLDS:
        if max_range > threshold:
            zoom = threshold_zoom
    return zoom


def compute_bounds(positions: Sequence[LatLng]) -> Viewport:
    """Center on the bounding box of ``positions`` and pick a discrete zoom.

    The live driver position, when known, is expected to be part of
    ``positions``.
    """
    if not positions:
        return Viewport(center=tuple(settings.default_center), zoom=settings.default_zoom)

    # shapely works in (x, y) = (lng, lat)
    min_lng, min_lat, max_lng, max_lat = MultiPoint([(lng, lat) for lat, lng in positions]).bounds

    center = ((min_lat + max_lat) / 2, (min_lng + max_lng) / 2)
    max_range = max(max_lat - min_lat, max_lng - min_lng)
    return Viewport(center=center, zoom=zoom_for_range(max_range))
