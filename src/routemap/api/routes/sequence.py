"""Stop-sequencing endpoints.

Each operation takes the client's current point list and returns the edited,
renumbered list; nothing is persisted until the payload is sent upstream.
"""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, status

from ...schemas.routes import DeliveryPointModel, OrderedPointModel
from ...schemas.sequence import (
    OrderPayloadResponse,
    PointFlagRequest,
    ReorderRequest,
    SequenceRequest,
    SequenceResponse,
)
from ...services import sequencing

router = APIRouter(prefix="/sequence", tags=["sequence"])


def _points(payload: SequenceRequest):
    return [point.to_domain() for point in payload.points]


def _response(points) -> SequenceResponse:
    return SequenceResponse(points=[DeliveryPointModel.from_domain(point) for point in points])


@router.post("/reorder", response_model=SequenceResponse)
def reorder(payload: ReorderRequest) -> SequenceResponse:
    try:
        points = sequencing.reorder(
            sequencing.sort_points(_points(payload)), payload.from_index, payload.to_index
        )
    except IndexError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return _response(points)


@router.post("/set-start", response_model=SequenceResponse)
def set_start(payload: PointFlagRequest) -> SequenceResponse:
    try:
        points = sequencing.set_start(_points(payload), payload.point_id)
    except KeyError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Delivery point {payload.point_id} not found",
        ) from exc
    return _response(points)


@router.post("/set-end", response_model=SequenceResponse)
def set_end(payload: PointFlagRequest) -> SequenceResponse:
    try:
        points = sequencing.set_end(_points(payload), payload.point_id)
    except KeyError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Delivery point {payload.point_id} not found",
        ) from exc
    return _response(points)


@router.post("/reset", response_model=SequenceResponse)
def reset(payload: SequenceRequest) -> SequenceResponse:
    return _response(sequencing.reset(_points(payload)))


@router.post("/payload", response_model=OrderPayloadResponse)
def order_payload(payload: SequenceRequest) -> OrderPayloadResponse:
    ordered = sequencing.to_persistable_payload(_points(payload))
    return OrderPayloadResponse(ordered_points=[OrderedPointModel.model_validate(item) for item in ordered])
