"""Progress-based segment coloring and emphasis."""

from __future__ import annotations

from typing import Sequence

from ..models.domain import (
    DeliveryPoint,
    DeliveryStatus,
    LatLng,
    ResolvedStop,
    Segment,
    SegmentStyle,
    StyledSegment,
)

GRADIENT_START = "#4caf50"  # green
GRADIENT_MIDDLE = "#ffa000"  # amber
GRADIENT_END = "#ff1744"  # red
SINGLE_SEGMENT_COLOR = "#1976d2"

ACTIVE_TOLERANCE = 0.05

TRAVERSED_STYLE = SegmentStyle(opacity=0.25, weight=3)
ACTIVE_STYLE = SegmentStyle(opacity=1.0, weight=6)
UPCOMING_STYLE = SegmentStyle(opacity=0.6, weight=4)

MIN_FALLBACK_WEIGHT = 2


def _hex_to_rgb(color: str) -> tuple[int, int, int]:
    value = color.lstrip("#")
    return int(value[0:2], 16), int(value[2:4], 16), int(value[4:6], 16)


def _mix(start: str, end: str, t: float) -> str:
    r1, g1, b1 = _hex_to_rgb(start)
    r2, g2, b2 = _hex_to_rgb(end)
    channels = (round(a + (b - a) * t) for a, b in ((r1, r2), (g1, g2), (b1, b2)))
    return "#" + "".join(f"{channel:02x}" for channel in channels)


def gradient_color(t: float) -> str:
    """Green at 0, amber at 0.5, red at 1."""
    t = min(max(t, 0.0), 1.0)
    if t <= 0.5:
        return _mix(GRADIENT_START, GRADIENT_MIDDLE, t / 0.5)
    return _mix(GRADIENT_MIDDLE, GRADIENT_END, (t - 0.5) / 0.5)


def segment_color(index: int, total_segments: int) -> str:
    if total_segments == 1:
        return SINGLE_SEGMENT_COLOR
    return gradient_color(index / (total_segments - 1))


def segment(path: Sequence[LatLng]) -> list[Segment]:
    """Split a path into consecutive-pair segments colored by position."""
    total = len(path) - 1
    if total < 1:
        return []
    return [
        Segment(positions=(tuple(path[i]), tuple(path[i + 1])), color=segment_color(i, total), index=i)
        for i in range(total)
    ]


def next_stop_index(stops: Sequence[ResolvedStop | DeliveryPoint]) -> int:
    """Index of the first stop that is neither completed nor failed, or -1."""
    for index, stop in enumerate(stops):
        status = stop.status if isinstance(stop, ResolvedStop) else stop.delivery_status
        if not DeliveryStatus(status).is_terminal:
            return index
    return -1


def progress_ratio(next_index: int, total_stops: int) -> float:
    if next_index < 0:
        return 1.0
    return min(next_index / max(total_stops - 1, 1), 1.0)


def waypoint_progress(next_index: int, total_stops: int, driver_leading: bool) -> tuple[int, int]:
    """Next-stop index and stop count in the itinerary's waypoint space.

    When the driver position is waypoint 0, stop ``k`` is waypoint ``k + 1``.
    """
    if not driver_leading or next_index < 0:
        return next_index, total_stops
    return next_index + 1, total_stops + 1


def visual_style(
    segment_index: int,
    total_segments: int,
    next_index: int,
    total_stops: int,
) -> SegmentStyle:
    """Emphasis of a segment relative to where the driver should be.

    A segment's normalized position is where it starts along the path
    (``segment_index / total_segments``), so segment ``i`` of an N-stop route
    lines up with stop ``i``. When every stop is terminal the whole route is
    traversed.
    """
    if next_index < 0:
        return TRAVERSED_STYLE

    ratio = progress_ratio(next_index, total_stops)
    position = segment_index / max(total_segments, 1)

    if position < ratio - ACTIVE_TOLERANCE:
        return TRAVERSED_STYLE
    if abs(position - ratio) <= ACTIVE_TOLERANCE:
        return ACTIVE_STYLE
    return UPCOMING_STYLE


def style_segments(
    segments: Sequence[Segment],
    next_index: int,
    total_stops: int,
    *,
    dashed: bool = False,
) -> list[StyledSegment]:
    total = len(segments)
    styled: list[StyledSegment] = []
    for item in segments:
        style = visual_style(item.index, total, next_index, total_stops)
        weight = max(style.weight - 1, MIN_FALLBACK_WEIGHT) if dashed else style.weight
        styled.append(StyledSegment(segment=item, opacity=style.opacity, weight=weight, dashed=dashed))
    return styled


def fallback_segments(
    positions: Sequence[LatLng],
    next_index: int,
    total_stops: int,
) -> list[StyledSegment]:
    """Dashed straight lines between raw positions, used when no itinerary exists."""
    return style_segments(segment(positions), next_index, total_stops, dashed=True)


def completion_percent(points: Sequence[DeliveryPoint]) -> int:
    if not points:
        return 0
    done = sum(1 for point in points if DeliveryStatus(point.delivery_status).is_terminal)
    return round(done / len(points) * 100)
