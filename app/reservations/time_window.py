"""Reject bookings whose date/time has already passed"""

from datetime import date, datetime, time, timezone
from typing import Optional
from zoneinfo import ZoneInfo

from app.reservations.errors import PastDate, PastTime


def local_now(tz_name: str, now: Optional[datetime] = None) -> datetime:
    """
    Convert ``now`` (defaults to the current instant) to the restaurant's
    wall clock. Naive datetimes are taken to be UTC.
    """
    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now.astimezone(ZoneInfo(tz_name))


def validate_time_window(
    reservation_date: date,
    start_time: Optional[time],
    now: datetime,
) -> None:
    """
    Raise PastDate/PastTime if the slot is not in the future.

    ``now`` must already be restaurant-local (see ``local_now``); only its
    calendar date and wall-clock time are used. A start time equal to the
    current minute counts as missed.
    """
    today = now.date()

    if reservation_date < today:
        raise PastDate(
            f"Reservation date {reservation_date.isoformat()} is before today ({today.isoformat()})"
        )

    if reservation_date == today and start_time is not None:
        current = now.time().replace(second=0, microsecond=0, tzinfo=None)
        requested = start_time.replace(second=0, microsecond=0, tzinfo=None)
        if requested <= current:
            raise PastTime(
                f"Reservation time {requested.strftime('%H:%M')} has already passed "
                f"(now {current.strftime('%H:%M')})"
            )
