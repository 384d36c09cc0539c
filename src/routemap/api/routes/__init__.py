"""Route group exports."""

from . import health, navigation, render, routes, sequence

__all__ = ["health", "render", "sequence", "navigation", "routes"]
