"""Domain models for routes, delivery points and the derived map layers."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

LatLng = tuple[float, float]
"""A (latitude, longitude) pair. Every module outside the OSRM adapter uses this order."""


class DeliveryStatus(str, Enum):
    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"

    @property
    def is_terminal(self) -> bool:
        return self in (DeliveryStatus.COMPLETED, DeliveryStatus.FAILED)


class RouteStatus(str, Enum):
    PLANNED = "PLANNED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


@dataclass(slots=True)
class Address:
    """Postal address, optionally carrying coordinates supplied by the backend."""

    street: Optional[str]
    city: Optional[str]
    postal_code: Optional[str] = None
    country: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None

    @property
    def coordinates(self) -> Optional[LatLng]:
        if self.latitude is None or self.longitude is None:
            return None
        return (self.latitude, self.longitude)

    def formatted(self) -> str:
        return f"{self.street or ''}, {self.city or ''}, {self.postal_code or ''}"


@dataclass(slots=True)
class DeliveryPoint:
    """A stop on a route tied to a client and an address."""

    id: int
    client_name: str
    address: Address
    delivery_status: DeliveryStatus = DeliveryStatus.PENDING
    client_phone_number: Optional[str] = None
    client_note: Optional[str] = None
    planned_time: Optional[datetime] = None
    actual_time: Optional[datetime] = None
    sequence_order: Optional[int] = None
    is_start_point: bool = False
    is_end_point: bool = False


@dataclass(slots=True)
class Route:
    id: int
    status: RouteStatus = RouteStatus.PLANNED
    delivery_points: list[DeliveryPoint] = field(default_factory=list)
    driver_position: Optional[LatLng] = None
    name: Optional[str] = None


@dataclass(frozen=True, slots=True)
class ResolvedStop:
    """A delivery point after its address has been converted to coordinates."""

    id: int
    position: LatLng
    client_name: str
    address: str
    status: DeliveryStatus
    sequence_order: Optional[int]
    planned_time: Optional[datetime] = None
    actual_time: Optional[datetime] = None
    phone: Optional[str] = None
    notes: Optional[str] = None


@dataclass(frozen=True, slots=True)
class UnlocatedStop:
    """A delivery point whose address could not be placed on the map."""

    id: int
    client_name: str
    address: str
    status: DeliveryStatus


@dataclass(frozen=True, slots=True)
class Itinerary:
    coordinates: tuple[LatLng, ...]
    distance_km: float
    duration_min: int


@dataclass(frozen=True, slots=True)
class Segment:
    positions: tuple[LatLng, LatLng]
    color: str
    index: int


@dataclass(frozen=True, slots=True)
class SegmentStyle:
    opacity: float
    weight: int


@dataclass(frozen=True, slots=True)
class StyledSegment:
    segment: Segment
    opacity: float
    weight: int
    dashed: bool = False


@dataclass(frozen=True, slots=True)
class Viewport:
    center: LatLng
    zoom: int
