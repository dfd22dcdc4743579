"""Filtered, paginated reservation reads"""

import datetime
import math
from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence
from uuid import UUID

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.models.reservation import Reservation

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 20


@dataclass
class ReservationFilters:
    """Optional narrowing criteria; ``None`` means not applied"""
    date: Optional[datetime.date] = None
    status: Optional[str] = None
    area_id: Optional[UUID] = None
    table_id: Optional[UUID] = None
    date_from: Optional[datetime.date] = None
    date_to: Optional[datetime.date] = None
    statuses: Sequence[str] = field(default_factory=tuple)


@dataclass
class Page:
    """One page of results plus totals for the whole filtered set"""
    items: List[Reservation]
    page: int
    limit: int
    total: int
    total_pages: int


def coerce_positive_int(value: Any, default: int) -> int:
    """Parse a query parameter, falling back to ``default`` if missing, non-numeric or < 1"""
    if value is None or isinstance(value, bool):
        return default
    try:
        parsed = int(str(value).strip())
    except ValueError:
        return default
    return parsed if parsed >= 1 else default


def count_pages(total: int, limit: int) -> int:
    return math.ceil(total / limit) if total else 0


def _apply_filters(query: Select, restaurant_id: UUID, filters: Optional[ReservationFilters]) -> Select:
    query = query.where(Reservation.restaurant_id == restaurant_id)
    if filters is None:
        return query

    if filters.date is not None:
        query = query.where(Reservation.reservation_date == filters.date)
    if filters.date_from is not None:
        query = query.where(Reservation.reservation_date >= filters.date_from)
    if filters.date_to is not None:
        query = query.where(Reservation.reservation_date <= filters.date_to)
    if filters.status:
        query = query.where(Reservation.status == filters.status)
    if filters.statuses:
        query = query.where(Reservation.status.in_(list(filters.statuses)))
    if filters.area_id is not None:
        query = query.where(Reservation.area_id == filters.area_id)
    if filters.table_id is not None:
        query = query.where(Reservation.table_id == filters.table_id)
    return query


def _ordered(query: Select) -> Select:
    # created_at/id only break ties so equal slots keep a stable order across pages
    return query.order_by(
        Reservation.reservation_date.asc(),
        Reservation.start_time.asc(),
        Reservation.created_at.asc(),
        Reservation.id.asc(),
    )


def reservation_select() -> Select:
    """Base select with table/area references eagerly resolved"""
    return select(Reservation).options(
        selectinload(Reservation.table),
        selectinload(Reservation.area),
    )


async def list_reservations(
    db: AsyncSession,
    restaurant_id: UUID,
    page: int = DEFAULT_PAGE,
    limit: int = DEFAULT_LIMIT,
    filters: Optional[ReservationFilters] = None,
) -> Page:
    """Return one page ordered by (reservation_date, start_time) ascending"""
    if page < 1 or limit < 1:
        raise ValueError("page and limit must be >= 1")

    count_query = _apply_filters(
        select(func.count(Reservation.id)), restaurant_id, filters
    )
    total = (await db.execute(count_query)).scalar() or 0

    offset = (page - 1) * limit
    query = _ordered(_apply_filters(reservation_select(), restaurant_id, filters))
    result = await db.execute(query.offset(offset).limit(limit))

    return Page(
        items=list(result.scalars().all()),
        page=page,
        limit=limit,
        total=total,
        total_pages=count_pages(total, limit),
    )


async def fetch_reservations(
    db: AsyncSession,
    restaurant_id: UUID,
    filters: Optional[ReservationFilters] = None,
) -> List[Reservation]:
    """Return every matching reservation in slot order, unpaginated"""
    query = _ordered(_apply_filters(reservation_select(), restaurant_id, filters))
    result = await db.execute(query)
    return list(result.scalars().all())
