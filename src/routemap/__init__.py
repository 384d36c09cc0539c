"""Route map rendering and progress-tracking pipeline."""

__version__ = "0.1.0"
