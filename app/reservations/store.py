"""
Reservation store

Composes the time-window, conflict and lifecycle rules around the
persistence session. Double booking is prevented by the partial unique
index ``uq_reservations_active_slot``: the conflict check before each
write gives a friendly early answer, and a write that still trips the
index (a concurrent booking won the race) is rolled back and reported as
``SlotConflict``.
"""

import dataclasses
import hashlib
from contextlib import asynccontextmanager
from datetime import date, datetime, time, timedelta, timezone
from typing import Any, Callable, Dict, List, Mapping, Optional
from uuid import UUID

import structlog
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.models.reservation import Reservation, ReservationStatus, ACTIVE_STATUSES
from app.models.restaurant import Restaurant, Area, Table
from app.reservations import conflicts, lifecycle
from app.reservations.errors import NotFound, SlotConflict, StorageError, ValidationError
from app.reservations.query import (
    Page,
    ReservationFilters,
    coerce_positive_int,
    fetch_reservations,
    list_reservations,
    reservation_select,
)
from app.reservations.time_window import local_now, validate_time_window

logger = structlog.get_logger()

WRITABLE_FIELDS = frozenset({
    "table_id",
    "area_id",
    "customer_name",
    "phone",
    "number_of_people",
    "reservation_date",
    "start_time",
    "status",
    "notes",
})
REQUIRED_FIELDS = ("customer_name", "reservation_date", "start_time")
NOT_NULL_FIELDS = REQUIRED_FIELDS + ("number_of_people", "status")
ACTIVE_VALUES = frozenset(status.value for status in ACTIVE_STATUSES)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _mask_phone(phone: Optional[str]) -> Optional[str]:
    if not phone:
        return None
    return f"***{phone[-4:]}"


def _slot_time(value: time) -> time:
    """Slots are minute-granular and timezone-naive"""
    return value.replace(second=0, microsecond=0, tzinfo=None)


def _advisory_key(table_id: UUID, reservation_date: date) -> int:
    digest = hashlib.blake2b(
        f"{table_id}:{reservation_date.isoformat()}".encode(), digest_size=8
    ).digest()
    return int.from_bytes(digest, "big", signed=True)


class ReservationStore:
    """
    Reservation operations scoped to one restaurant per call.

    ``clock`` returns the current instant (timezone-aware); tests inject a
    fixed one. Conflict strategy and seating length default to the
    application settings.
    """

    def __init__(
        self,
        db: AsyncSession,
        conflict_mode: Optional[str] = None,
        duration_minutes: Optional[int] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.db = db
        self.conflict_mode = conflict_mode or settings.reservation_conflict_mode
        self.duration_minutes = duration_minutes or settings.reservation_duration_minutes
        self.clock = clock or _utcnow

        conflicts.validate_mode(self.conflict_mode)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @asynccontextmanager
    async def _storage_guard(self, action: str, **context):
        """Translate driver/ORM failures into StorageError"""
        try:
            yield
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("Reservation storage failure", action=action, error=str(e), **context)
            raise StorageError(f"Failed to {action} reservation") from e

    def _timestamp(self) -> datetime:
        # Columns store naive UTC
        return self.clock().astimezone(timezone.utc).replace(tzinfo=None)

    async def local_now(self, restaurant_id: UUID) -> datetime:
        """Current wall-clock time in the restaurant's timezone"""
        result = await self.db.execute(
            select(Restaurant.timezone).where(Restaurant.id == restaurant_id)
        )
        row = result.first()
        if row is None:
            raise NotFound("Restaurant not found")
        return local_now(row.timezone or settings.default_timezone, self.clock())

    async def _today(self, restaurant_id: UUID) -> date:
        return (await self.local_now(restaurant_id)).date()

    async def _get(self, restaurant_id: UUID, reservation_id: UUID) -> Reservation:
        result = await self.db.execute(
            reservation_select()
            .where(
                Reservation.id == reservation_id,
                Reservation.restaurant_id == restaurant_id,
            )
            .execution_options(populate_existing=True)
        )
        reservation = result.scalar_one_or_none()
        if reservation is None:
            raise NotFound(f"Reservation {reservation_id} not found")
        return reservation

    async def _ensure_references(self, restaurant_id: UUID, fields: Mapping[str, Any]) -> None:
        """Tables and areas must belong to the booking restaurant"""
        for field_name, model, label in (("table_id", Table, "Table"), ("area_id", Area, "Area")):
            ref_id = fields.get(field_name)
            if ref_id is None:
                continue
            result = await self.db.execute(
                select(model.id).where(model.id == ref_id, model.restaurant_id == restaurant_id)
            )
            if result.first() is None:
                raise ValidationError(f"{label} {ref_id} not found for this restaurant")

    async def _lock_table_day(self, table_id: Optional[UUID], reservation_date: date) -> None:
        """
        Serialize check-then-write per table and day on PostgreSQL.

        The unique index only covers identical start times; the
        transaction-scoped advisory lock also covers overlap mode.
        """
        if table_id is None or self.db.get_bind().dialect.name != "postgresql":
            return
        await self.db.execute(
            select(func.pg_advisory_xact_lock(_advisory_key(table_id, reservation_date)))
        )

    async def _ensure_slot_free(
        self,
        restaurant_id: UUID,
        table_id: Optional[UUID],
        reservation_date: date,
        start_time: time,
        exclude_reservation_id: Optional[UUID] = None,
    ) -> None:
        await self._lock_table_day(table_id, reservation_date)
        taken = await conflicts.has_conflict(
            self.db,
            restaurant_id,
            table_id,
            reservation_date,
            start_time,
            exclude_reservation_id=exclude_reservation_id,
            mode=self.conflict_mode,
            duration_minutes=self.duration_minutes,
        )
        if taken:
            logger.info(
                "Reservation slot conflict",
                restaurant_id=str(restaurant_id),
                table_id=str(table_id),
                reservation_date=reservation_date.isoformat(),
                start_time=start_time.strftime("%H:%M"),
            )
            raise SlotConflict()

    async def _commit_slot(
        self,
        restaurant_id: UUID,
        table_id: Optional[UUID],
        reservation_date: date,
        start_time: time,
        exclude_reservation_id: Optional[UUID] = None,
    ) -> None:
        """Commit, reporting a lost race on the active-slot index as SlotConflict"""
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            lost_race = await conflicts.has_conflict(
                self.db,
                restaurant_id,
                table_id,
                reservation_date,
                start_time,
                exclude_reservation_id=exclude_reservation_id,
                mode=conflicts.EXACT,
            )
            if lost_race:
                logger.info(
                    "Concurrent booking took the slot",
                    restaurant_id=str(restaurant_id),
                    table_id=str(table_id),
                    reservation_date=reservation_date.isoformat(),
                    start_time=start_time.strftime("%H:%M"),
                )
                raise SlotConflict() from e
            raise

    def _clean(self, data: Mapping[str, Any]) -> Dict[str, Any]:
        unknown = set(data) - WRITABLE_FIELDS
        if unknown:
            raise ValidationError(f"Unknown reservation fields: {', '.join(sorted(unknown))}")

        cleaned = dict(data)
        for field_name in NOT_NULL_FIELDS:
            if field_name in cleaned and cleaned[field_name] in (None, ""):
                raise ValidationError(f"{field_name} is required")
        if "start_time" in cleaned:
            cleaned["start_time"] = _slot_time(cleaned["start_time"])
        if "status" in cleaned:
            cleaned["status"] = lifecycle.parse_status(cleaned["status"]).value
        return cleaned

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_by_id(self, restaurant_id: UUID, reservation_id: UUID) -> Reservation:
        """Single reservation with table/area resolved"""
        async with self._storage_guard("fetch", reservation_id=str(reservation_id)):
            return await self._get(restaurant_id, reservation_id)

    async def list(
        self,
        restaurant_id: UUID,
        page: Any = None,
        limit: Any = None,
        filters: Optional[ReservationFilters] = None,
    ) -> Page:
        """Paginated reservations ordered by date then start time"""
        page = coerce_positive_int(page, 1)
        limit = min(
            coerce_positive_int(limit, settings.reservation_page_size),
            settings.reservation_max_page_size,
        )
        if filters is not None and filters.status:
            filters = dataclasses.replace(
                filters, status=lifecycle.parse_status(filters.status).value
            )

        async with self._storage_guard("list", restaurant_id=str(restaurant_id)):
            return await list_reservations(self.db, restaurant_id, page, limit, filters)

    async def list_today(self, restaurant_id: UUID) -> List[Reservation]:
        """Every reservation on the restaurant's current local date"""
        async with self._storage_guard("list", restaurant_id=str(restaurant_id)):
            today = await self._today(restaurant_id)
            return await fetch_reservations(
                self.db, restaurant_id, ReservationFilters(date=today)
            )

    async def list_upcoming(self, restaurant_id: UUID, days: Any = None) -> List[Reservation]:
        """Active reservations from today through today + ``days`` (inclusive)"""
        days = coerce_positive_int(days, settings.upcoming_days_default)
        async with self._storage_guard("list", restaurant_id=str(restaurant_id)):
            today = await self._today(restaurant_id)
            return await fetch_reservations(
                self.db,
                restaurant_id,
                ReservationFilters(
                    date_from=today,
                    date_to=today + timedelta(days=days),
                    statuses=tuple(sorted(ACTIVE_VALUES)),
                ),
            )

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def create(self, restaurant_id: UUID, data: Mapping[str, Any]) -> Reservation:
        """
        Book a reservation.

        The status defaults to ``pending``; only ``pending`` or
        ``confirmed`` may be requested up front.
        """
        fields = self._clean(data)
        missing = [name for name in REQUIRED_FIELDS if fields.get(name) in (None, "")]
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

        fields.setdefault("status", ReservationStatus.PENDING.value)
        if fields["status"] not in ACTIVE_VALUES:
            raise ValidationError("New reservations must be 'pending' or 'confirmed'")

        reservation_date = fields["reservation_date"]
        start_time = fields["start_time"]
        table_id = fields.get("table_id")

        async with self._storage_guard("create", restaurant_id=str(restaurant_id)):
            validate_time_window(reservation_date, start_time, await self.local_now(restaurant_id))
            await self._ensure_references(restaurant_id, fields)
            await self._ensure_slot_free(restaurant_id, table_id, reservation_date, start_time)

            now = self._timestamp()
            reservation = Reservation(
                restaurant_id=restaurant_id,
                created_at=now,
                updated_at=now,
                **fields,
            )
            self.db.add(reservation)
            await self._commit_slot(restaurant_id, table_id, reservation_date, start_time)

            logger.info(
                "Reservation created",
                restaurant_id=str(restaurant_id),
                reservation_id=str(reservation.id),
                table_id=str(table_id) if table_id else None,
                reservation_date=reservation_date.isoformat(),
                start_time=start_time.strftime("%H:%M"),
                status=reservation.status,
                phone=_mask_phone(fields.get("phone")),
            )
            return await self._get(restaurant_id, reservation.id)

    async def update(
        self,
        restaurant_id: UUID,
        reservation_id: UUID,
        changes: Mapping[str, Any],
    ) -> Reservation:
        """Apply a partial update; sending the current status is not a transition"""
        fields = self._clean(changes)
        async with self._storage_guard("update", reservation_id=str(reservation_id)):
            reservation = await self._get(restaurant_id, reservation_id)
            return await self._apply(reservation, fields, strict_status=False)

    async def update_status(
        self,
        restaurant_id: UUID,
        reservation_id: UUID,
        status: Optional[str],
    ) -> Reservation:
        """Move a reservation through its lifecycle"""
        if status is None or not str(status).strip():
            raise ValidationError("Status is required")

        fields = self._clean({"status": str(status).strip()})
        async with self._storage_guard("update status of", reservation_id=str(reservation_id)):
            reservation = await self._get(restaurant_id, reservation_id)
            return await self._apply(reservation, fields, strict_status=True)

    async def _apply(
        self,
        reservation: Reservation,
        fields: Dict[str, Any],
        strict_status: bool,
    ) -> Reservation:
        restaurant_id = reservation.restaurant_id
        previous_status = reservation.status

        if "status" in fields and (strict_status or fields["status"] != previous_status):
            lifecycle.ensure_transition(previous_status, fields["status"])

        new_date = fields.get("reservation_date", reservation.reservation_date)
        new_time = fields.get("start_time", _slot_time(reservation.start_time))
        new_table = fields.get("table_id", reservation.table_id)
        new_status = fields.get("status", previous_status)

        rescheduled = (
            new_date != reservation.reservation_date
            or new_time != _slot_time(reservation.start_time)
        )
        if rescheduled:
            validate_time_window(new_date, new_time, await self.local_now(restaurant_id))

        await self._ensure_references(restaurant_id, fields)

        touches_slot = bool({"table_id", "reservation_date", "start_time"} & fields.keys())
        if touches_slot and new_status in ACTIVE_VALUES:
            await self._ensure_slot_free(
                restaurant_id,
                new_table,
                new_date,
                new_time,
                exclude_reservation_id=reservation.id,
            )

        for field_name, value in fields.items():
            setattr(reservation, field_name, value)
        reservation.updated_at = self._timestamp()

        await self._commit_slot(
            restaurant_id,
            new_table,
            new_date,
            new_time,
            exclude_reservation_id=reservation.id,
        )

        logger.info(
            "Reservation updated",
            restaurant_id=str(restaurant_id),
            reservation_id=str(reservation.id),
            fields=sorted(fields),
            previous_status=previous_status,
            status=new_status,
        )
        return await self._get(restaurant_id, reservation.id)

    async def delete(self, restaurant_id: UUID, reservation_id: UUID) -> None:
        """Hard-delete a reservation regardless of its status"""
        async with self._storage_guard("delete", reservation_id=str(reservation_id)):
            reservation = await self._get(restaurant_id, reservation_id)
            await self.db.delete(reservation)
            await self.db.commit()

        logger.info(
            "Reservation deleted",
            restaurant_id=str(restaurant_id),
            reservation_id=str(reservation_id),
            status=reservation.status,
        )
