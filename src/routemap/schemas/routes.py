"""Wire schemas for routes and delivery points as served by the backend."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ..models.domain import Address, DeliveryPoint, DeliveryStatus, Route, RouteStatus


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AddressModel(CamelModel):
    street: Optional[str] = None
    city: Optional[str] = None
    postal_code: Optional[str] = None
    country: Optional[str] = None
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)

    def to_domain(self) -> Address:
        return Address(
            street=self.street,
            city=self.city,
            postal_code=self.postal_code,
            country=self.country,
            latitude=self.latitude,
            longitude=self.longitude,
        )

    @classmethod
    def from_domain(cls, address: Address) -> "AddressModel":
        return cls(
            street=address.street,
            city=address.city,
            postal_code=address.postal_code,
            country=address.country,
            latitude=address.latitude,
            longitude=address.longitude,
        )


class DeliveryPointModel(CamelModel):
    id: int
    client_name: str
    client_phone_number: Optional[str] = None
    client_note: Optional[str] = None
    address: AddressModel
    delivery_status: DeliveryStatus = DeliveryStatus.PENDING
    planned_time: Optional[datetime] = None
    actual_time: Optional[datetime] = None
    sequence_order: Optional[int] = None
    is_start_point: bool = False
    is_end_point: bool = False

    def to_domain(self) -> DeliveryPoint:
        return DeliveryPoint(
            id=self.id,
            client_name=self.client_name,
            address=self.address.to_domain(),
            delivery_status=self.delivery_status,
            client_phone_number=self.client_phone_number,
            client_note=self.client_note,
            planned_time=self.planned_time,
            actual_time=self.actual_time,
            sequence_order=self.sequence_order,
            is_start_point=self.is_start_point,
            is_end_point=self.is_end_point,
        )

    @classmethod
    def from_domain(cls, point: DeliveryPoint) -> "DeliveryPointModel":
        return cls(
            id=point.id,
            client_name=point.client_name,
            client_phone_number=point.client_phone_number,
            client_note=point.client_note,
            address=AddressModel.from_domain(point.address),
            delivery_status=point.delivery_status,
            planned_time=point.planned_time,
            actual_time=point.actual_time,
            sequence_order=point.sequence_order,
            is_start_point=point.is_start_point,
            is_end_point=point.is_end_point,
        )


class DriverModel(CamelModel):
    """Subset of the backend's driver payload embedded in a route."""

    id: Optional[int] = None
    username: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None


class RouteModel(CamelModel):
    id: int
    name: Optional[str] = None
    status: RouteStatus = RouteStatus.PLANNED
    delivery_points: List[DeliveryPointModel] = Field(default_factory=list)
    driver_position: Optional[Tuple[float, float]] = None
    driver: Optional[DriverModel] = None

    def to_domain(self) -> Route:
        position = self.driver_position
        if position is None and self.driver and self.driver.latitude is not None and self.driver.longitude is not None:
            position = (self.driver.latitude, self.driver.longitude)
        return Route(
            id=self.id,
            name=self.name,
            status=self.status,
            delivery_points=[point.to_domain() for point in self.delivery_points],
            driver_position=position,
        )


class OrderedPointModel(CamelModel):
    id: int
    sequence_order: Optional[int] = None
    is_start_point: bool = False
    is_end_point: bool = False
