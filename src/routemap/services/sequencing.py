"""Manual stop sequencing: ordering, start/end flags and reset.

All operations return new lists of copied points; inputs are left untouched.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Sequence

from ..models.domain import DeliveryPoint


def _sort_key(point: DeliveryPoint) -> tuple[int, int, str]:
    # Points with no explicit order go after every ordered point.
    if point.sequence_order is None:
        return (1, 0, point.client_name or "")
    return (0, point.sequence_order, point.client_name or "")


def sort_points(points: Sequence[DeliveryPoint]) -> list[DeliveryPoint]:
    """Rendering order: ``sequence_order`` ascending, ties by client name."""
    return sorted(points, key=_sort_key)


def _renumber(points: list[DeliveryPoint]) -> list[DeliveryPoint]:
    return [replace(point, sequence_order=index) for index, point in enumerate(points)]


def reorder(points: Sequence[DeliveryPoint], from_index: int, to_index: int) -> list[DeliveryPoint]:
    """Swap the points at ``from_index`` and ``to_index``, then renumber 0..N-1."""
    size = len(points)
    for index in (from_index, to_index):
        if not 0 <= index < size:
            raise IndexError(f"Index {index} out of range for {size} points.")

    reordered = list(points)
    reordered[from_index], reordered[to_index] = reordered[to_index], reordered[from_index]
    return _renumber(reordered)


def move_up(points: Sequence[DeliveryPoint], index: int) -> list[DeliveryPoint]:
    if index == 0:
        return [replace(point) for point in points]
    return reorder(points, index, index - 1)


def move_down(points: Sequence[DeliveryPoint], index: int) -> list[DeliveryPoint]:
    if index == len(points) - 1:
        return [replace(point) for point in points]
    return reorder(points, index, index + 1)


def _index_of(points: Sequence[DeliveryPoint], point_id: int) -> int:
    for index, point in enumerate(points):
        if point.id == point_id:
            return index
    raise KeyError(f"Delivery point {point_id} not found.")


def set_start(points: Sequence[DeliveryPoint], point_id: int) -> list[DeliveryPoint]:
    """Toggle the start flag on ``point_id``; at most one point holds it.

    Toggling off clears the flag on every point.
    """
    claim = not points[_index_of(points, point_id)].is_start_point
    return [replace(point, is_start_point=claim and point.id == point_id) for point in points]


def set_end(points: Sequence[DeliveryPoint], point_id: int) -> list[DeliveryPoint]:
    """Toggle the end flag on ``point_id``; at most one point holds it."""
    claim = not points[_index_of(points, point_id)].is_end_point
    return [replace(point, is_end_point=claim and point.id == point_id) for point in points]


def reset(points: Sequence[DeliveryPoint]) -> list[DeliveryPoint]:
    """Restore original array order as ``sequence_order`` and clear both flags."""
    return [
        replace(point, sequence_order=index, is_start_point=False, is_end_point=False)
        for index, point in enumerate(points)
    ]


def start_point(points: Sequence[DeliveryPoint]) -> DeliveryPoint | None:
    return next((point for point in points if point.is_start_point), None)


def end_point(points: Sequence[DeliveryPoint]) -> DeliveryPoint | None:
    return next((point for point in points if point.is_end_point), None)


def to_persistable_payload(points: Sequence[DeliveryPoint]) -> list[dict]:
    """Project points to the backend's ordering payload."""
    return [
        {
            "id": point.id,
            "sequenceOrder": point.sequence_order,
            "isStartPoint": bool(point.is_start_point),
            "isEndPoint": bool(point.is_end_point),
        }
        for point in points
    ]
