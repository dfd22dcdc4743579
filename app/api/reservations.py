"""Reservation management API endpoints"""

from datetime import date
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.reservations.query import ReservationFilters
from app.reservations.store import ReservationStore
from app.schemas.reservation import (
    ReservationCreate,
    ReservationUpdate,
    ReservationStatusUpdate,
    ReservationResponse,
    ReservationListResponse,
    ReservationDeleteResponse,
)
from app.api.auth import get_current_restaurant_id

router = APIRouter()


def get_reservation_store(db: AsyncSession = Depends(get_db)) -> ReservationStore:
    """Reservation store bound to the request's session"""
    return ReservationStore(db)


@router.get("", response_model=ReservationListResponse)
async def list_reservations(
    page: Optional[str] = None,
    limit: Optional[str] = None,
    date: Optional[date] = None,
    status: Optional[str] = None,
    area_id: Optional[UUID] = None,
    table_id: Optional[UUID] = None,
    restaurant_id: UUID = Depends(get_current_restaurant_id),
    store: ReservationStore = Depends(get_reservation_store),
):
    """List reservations ordered by date and start time"""
    result = await store.list(
        restaurant_id,
        page=page,
        limit=limit,
        filters=ReservationFilters(
            date=date,
            status=status or None,
            area_id=area_id,
            table_id=table_id,
        ),
    )

    return ReservationListResponse(
        items=[ReservationResponse.model_validate(item) for item in result.items],
        page=result.page,
        limit=result.limit,
        total=result.total,
        total_pages=result.total_pages,
    )


@router.get("/today", response_model=List[ReservationResponse])
async def list_today_reservations(
    restaurant_id: UUID = Depends(get_current_restaurant_id),
    store: ReservationStore = Depends(get_reservation_store),
):
    """Reservations on the restaurant's current local date"""
    return await store.list_today(restaurant_id)


@router.get("/upcoming", response_model=List[ReservationResponse])
async def list_upcoming_reservations(
    days: Optional[str] = None,
    restaurant_id: UUID = Depends(get_current_restaurant_id),
    store: ReservationStore = Depends(get_reservation_store),
):
    """Pending and confirmed reservations within the next ``days`` days"""
    return await store.list_upcoming(restaurant_id, days)


@router.get("/{reservation_id}", response_model=ReservationResponse)
async def get_reservation(
    reservation_id: UUID,
    restaurant_id: UUID = Depends(get_current_restaurant_id),
    store: ReservationStore = Depends(get_reservation_store),
):
    """Get reservation details"""
    return await store.get_by_id(restaurant_id, reservation_id)


@router.post("", response_model=ReservationResponse, status_code=status.HTTP_201_CREATED)
async def create_reservation(
    reservation_data: ReservationCreate,
    restaurant_id: UUID = Depends(get_current_restaurant_id),
    store: ReservationStore = Depends(get_reservation_store),
):
    """Create a new reservation for the caller's restaurant"""
    return await store.create(
        restaurant_id,
        reservation_data.model_dump(exclude_none=True),
    )


@router.put("/{reservation_id}", response_model=ReservationResponse)
async def update_reservation(
    reservation_id: UUID,
    reservation_data: ReservationUpdate,
    restaurant_id: UUID = Depends(get_current_restaurant_id),
    store: ReservationStore = Depends(get_reservation_store),
):
    """Update reservation"""
    return await store.update(
        restaurant_id,
        reservation_id,
        reservation_data.model_dump(exclude_unset=True),
    )


@router.patch("/{reservation_id}/status", response_model=ReservationResponse)
async def update_reservation_status(
    reservation_id: UUID,
    status_data: ReservationStatusUpdate,
    restaurant_id: UUID = Depends(get_current_restaurant_id),
    store: ReservationStore = Depends(get_reservation_store),
):
    """Move a reservation to a new status"""
    return await store.update_status(restaurant_id, reservation_id, status_data.status)


@router.delete("/{reservation_id}", response_model=ReservationDeleteResponse)
async def delete_reservation(
    reservation_id: UUID,
    restaurant_id: UUID = Depends(get_current_restaurant_id),
    store: ReservationStore = Depends(get_reservation_store),
):
    """Permanently remove a reservation (administrative, not a cancellation)"""
    await store.delete(restaurant_id, reservation_id)
    return ReservationDeleteResponse()
