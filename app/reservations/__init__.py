"""Reservation slot allocation, lifecycle and queries"""

from app.reservations.errors import (
    ReservationError,
    ValidationError,
    TimeWindowError,
    PastDate,
    PastTime,
    SlotConflict,
    InvalidTransition,
    NotFound,
    Forbidden,
    StorageError,
)
from app.reservations.query import ReservationFilters, Page
from app.reservations.store import ReservationStore

__all__ = [
    "ReservationError",
    "ValidationError",
    "TimeWindowError",
    "PastDate",
    "PastTime",
    "SlotConflict",
    "InvalidTransition",
    "NotFound",
    "Forbidden",
    "StorageError",
    "ReservationFilters",
    "Page",
    "ReservationStore",
]
