"""GeoJSON export of a rendered route map."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Sequence

from ...models.domain import LatLng, StyledSegment
from ..pipeline import RenderModel


def linestring_to_wkt(coordinates: Sequence[LatLng]) -> str:
    """Convert linestring coordinates to WKT format.

    Args:
        coordinates: List of [lat, lon] pairs

    Returns:
        WKT LINESTRING string
    """
    if not coordinates or len(coordinates) < 2:
        raise ValueError("LineString must have at least 2 coordinates")

    # WKT uses lon,lat order (x,y)
    coord_pairs = [f"{lon} {lat}" for lat, lon in coordinates]
    return f"LINESTRING({','.join(coord_pairs)})"


def _point_geometry(position: LatLng) -> Dict[str, Any]:
    return {"type": "Point", "coordinates": [position[1], position[0]]}


def _segment_feature(styled: StyledSegment, layer: str) -> Dict[str, Any]:
    positions = styled.segment.positions
    return {
        "type": "Feature",
        "geometry": {
            "type": "LineString",
            "coordinates": [[lng, lat] for lat, lng in positions],
        },
        "properties": {
            "layer": layer,
            "index": styled.segment.index,
            "color": styled.segment.color,
            "opacity": styled.opacity,
            "weight": styled.weight,
            "dashed": styled.dashed,
            "wkt": linestring_to_wkt(positions),
        },
    }


def render_model_to_geojson(model: RenderModel) -> Dict[str, Any]:
    """Convert a render model to a GeoJSON FeatureCollection.

    Stops and the driver become Point features; the layer the map should draw
    (road itinerary or straight-line fallback) becomes LineString features.
    """
    features: List[Dict[str, Any]] = []

    for order, stop in enumerate(model.stops, start=1):
        features.append(
            {
                "type": "Feature",
                "geometry": _point_geometry(stop.position),
                "properties": {
                    "kind": "stop",
                    "id": stop.id,
                    "order": order,
                    "clientName": stop.client_name,
                    "address": stop.address,
                    "status": stop.status.value,
                    "isNext": order - 1 == model.next_stop_index,
                },
            }
        )

    if model.driver_position is not None:
        features.append(
            {
                "type": "Feature",
                "geometry": _point_geometry(model.driver_position),
                "properties": {"kind": "driver"},
            }
        )

    layer = "fallback" if model.uses_fallback else "itinerary"
    features.extend(_segment_feature(styled, layer) for styled in model.visible_segments)

    properties: Dict[str, Any] = {
        "routeId": model.route_id,
        "nextStopIndex": model.next_stop_index,
        "completionPercent": model.completion_percent,
        "unlocated": [stop.id for stop in model.unlocated],
        "center": list(model.viewport.center),
        "zoom": model.viewport.zoom,
    }
    if model.itinerary is not None:
        properties["distanceKm"] = model.itinerary.distance_km
        properties["durationMin"] = model.itinerary.duration_min

    return {"type": "FeatureCollection", "features": features, "properties": properties}


def save_geojson(collection: Dict[str, Any], output_path: Path) -> None:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with output_path.open("w", encoding="utf-8") as f:
        json.dump(collection, f, indent=2, ensure_ascii=False)
