"""Pydantic schemas for request/response validation"""

from app.schemas.reservation import (
    ReservationCreate,
    ReservationUpdate,
    ReservationStatusUpdate,
    ReservationResponse,
    ReservationListResponse,
    ReservationDeleteResponse,
    TableRef,
    AreaRef,
)

__all__ = [
    "ReservationCreate",
    "ReservationUpdate",
    "ReservationStatusUpdate",
    "ReservationResponse",
    "ReservationListResponse",
    "ReservationDeleteResponse",
    "TableRef",
    "AreaRef",
]
