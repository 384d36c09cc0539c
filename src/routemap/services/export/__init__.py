"""Export services."""

from .geojson import linestring_to_wkt, render_model_to_geojson, save_geojson

__all__ = [
    "render_model_to_geojson",
    "linestring_to_wkt",
    "save_geojson",
]
