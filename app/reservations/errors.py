"""Reservation error taxonomy

Every failure the reservation core can report is a ``ReservationError``
subclass with a stable ``kind`` so callers can branch on it without
inspecting messages. ``status_code`` is the HTTP status the web layer
renders it with.
"""


class ReservationError(Exception):
    """Base reservation error"""
    kind = "reservation_error"
    status_code = 400
    default_message = "Reservation error"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(ReservationError):
    """Malformed or missing input"""
    kind = "validation_error"
    default_message = "Validation error"


class TimeWindowError(ReservationError):
    """Requested date/time lies in the past"""
    kind = "time_window_error"


class PastDate(TimeWindowError):
    kind = "past_date"
    default_message = "Reservation date is in the past"


class PastTime(TimeWindowError):
    kind = "past_time"
    default_message = "Reservation time has already passed"


class SlotConflict(ReservationError):
    """Table already held by an active reservation"""
    kind = "slot_conflict"
    status_code = 409
    default_message = "Table is already reserved for this time"


class InvalidTransition(ReservationError):
    kind = "invalid_transition"
    status_code = 409
    default_message = "Invalid status transition"


class NotFound(ReservationError):
    kind = "not_found"
    status_code = 404
    default_message = "Reservation not found"


class Forbidden(ReservationError):
    kind = "forbidden"
    status_code = 403
    default_message = "Restaurant access required"


class StorageError(ReservationError):
    """Opaque persistence failure"""
    kind = "storage_error"
    status_code = 500
    default_message = "Storage failure"
