"""Table slot conflict detection"""

from datetime import date, time
from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.reservation import Reservation, ACTIVE_STATUSES

EXACT = "exact"
OVERLAP = "overlap"
CONFLICT_MODES = (EXACT, OVERLAP)


def validate_mode(mode: str) -> str:
    if mode not in CONFLICT_MODES:
        raise ValueError(f"Unknown conflict mode: {mode}")
    return mode


def _minutes(value: time) -> int:
    return value.hour * 60 + value.minute


def slots_overlap(first: time, second: time, duration_minutes: int) -> bool:
    """Two seatings of equal length overlap iff their starts are closer than that length"""
    return abs(_minutes(first) - _minutes(second)) < duration_minutes


async def has_conflict(
    db: AsyncSession,
    restaurant_id: UUID,
    table_id: Optional[UUID],
    reservation_date: date,
    start_time: time,
    exclude_reservation_id: Optional[UUID] = None,
    mode: str = EXACT,
    duration_minutes: int = 90,
) -> bool:
    """
    Check whether another active reservation already holds the table.

    ``exact`` mode only matches an identical start time (fixed seating
    slots). ``overlap`` mode treats every reservation as lasting
    ``duration_minutes`` and matches any intersecting seating on the same
    date. Unseated reservations (no table) never conflict. ``mode`` is
    expected to have passed ``validate_mode``.
    """
    if table_id is None:
        return False

    query = select(Reservation.id, Reservation.start_time).where(
        Reservation.restaurant_id == restaurant_id,
        Reservation.table_id == table_id,
        Reservation.reservation_date == reservation_date,
        Reservation.status.in_([status.value for status in ACTIVE_STATUSES]),
    )
    if exclude_reservation_id is not None:
        query = query.where(Reservation.id != exclude_reservation_id)

    if mode != OVERLAP:
        result = await db.execute(
            query.where(Reservation.start_time == start_time.replace(second=0, microsecond=0)).limit(1)
        )
        return result.first() is not None

    result = await db.execute(query)
    return any(
        slots_overlap(existing_start, start_time, duration_minutes)
        for _, existing_start in result.all()
    )
