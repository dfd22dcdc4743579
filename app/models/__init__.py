"""Database models"""

from app.models.restaurant import Restaurant, Area, Table
from app.models.reservation import Reservation, ReservationStatus, ACTIVE_STATUSES
from app.models.user import User

__all__ = [
    "Restaurant",
    "Area",
    "Table",
    "Reservation",
    "ReservationStatus",
    "ACTIVE_STATUSES",
    "User",
]
