"""Reservation schemas"""

from datetime import date, datetime, time
from typing import Optional, List
from uuid import UUID
from pydantic import BaseModel, Field

from app.models.reservation import ReservationStatus


class ReservationCreate(BaseModel):
    """Create reservation request"""
    customer_name: str = Field(..., min_length=2, max_length=100)
    phone: Optional[str] = Field(None, max_length=20)
    number_of_people: int = Field(..., ge=1)
    reservation_date: date
    start_time: time
    table_id: Optional[UUID] = None
    area_id: Optional[UUID] = None
    status: Optional[ReservationStatus] = None
    notes: Optional[str] = Field(None, max_length=500)


class ReservationUpdate(BaseModel):
    """Partial reservation update"""
    customer_name: Optional[str] = Field(None, min_length=2, max_length=100)
    phone: Optional[str] = Field(None, max_length=20)
    number_of_people: Optional[int] = Field(None, ge=1)
    reservation_date: Optional[date] = None
    start_time: Optional[time] = None
    table_id: Optional[UUID] = None
    area_id: Optional[UUID] = None
    status: Optional[ReservationStatus] = None
    notes: Optional[str] = Field(None, max_length=500)


class ReservationStatusUpdate(BaseModel):
    """Status change request; a missing status is reported by the store"""
    status: Optional[str] = None


class TableRef(BaseModel):
    id: UUID
    name: Optional[str] = None
    number: Optional[int] = None

    class Config:
        from_attributes = True


class AreaRef(BaseModel):
    id: UUID
    name: Optional[str] = None

    class Config:
        from_attributes = True


class ReservationResponse(BaseModel):
    """Reservation response with resolved table/area"""
    id: UUID
    restaurant_id: UUID
    table_id: Optional[UUID]
    area_id: Optional[UUID]
    customer_name: str
    phone: Optional[str]
    number_of_people: int
    reservation_date: date
    start_time: time
    status: ReservationStatus
    notes: Optional[str]
    created_at: datetime
    updated_at: datetime
    table: Optional[TableRef] = None
    area: Optional[AreaRef] = None

    class Config:
        from_attributes = True


class ReservationListResponse(BaseModel):
    """Paginated reservation list"""
    items: List[ReservationResponse]
    page: int
    limit: int
    total: int
    total_pages: int = Field(..., serialization_alias="totalPages")


class ReservationDeleteResponse(BaseModel):
    success: bool = True
    message: str = "Reservation deleted successfully"
