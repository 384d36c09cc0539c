"""Stop-sequencing request/response schemas."""

from __future__ import annotations

from typing import List

from pydantic import Field

from .routes import CamelModel, DeliveryPointModel, OrderedPointModel


class SequenceRequest(CamelModel):
    points: List[DeliveryPointModel]


class ReorderRequest(SequenceRequest):
    from_index: int = Field(..., ge=0)
    to_index: int = Field(..., ge=0)


class PointFlagRequest(SequenceRequest):
    point_id: int


class SequenceResponse(CamelModel):
    points: List[DeliveryPointModel]


class OrderPayloadResponse(CamelModel):
    ordered_points: List[OrderedPointModel]
