"""Tests for past date/time rejection"""

from datetime import date, datetime, time, timedelta, timezone

import pytest

from app.reservations.errors import PastDate, PastTime, TimeWindowError
from app.reservations.time_window import local_now, validate_time_window

NOW = datetime(2026, 3, 10, 12, 30, 45)


def test_future_date_is_accepted():
    validate_time_window(date(2026, 3, 11), time(9, 0), NOW)


def test_yesterday_is_rejected():
    with pytest.raises(PastDate) as exc_info:
        validate_time_window(date(2026, 3, 9), time(20, 0), NOW)

    assert exc_info.value.kind == "past_date"
    assert isinstance(exc_info.value, TimeWindowError)


def test_past_date_is_rejected_without_time():
    with pytest.raises(PastDate):
        validate_time_window(date(2025, 12, 31), None, NOW)


def test_today_without_time_is_accepted():
    validate_time_window(date(2026, 3, 10), None, NOW)


def test_today_earlier_time_is_rejected():
    with pytest.raises(PastTime) as exc_info:
        validate_time_window(date(2026, 3, 10), time(11, 0), NOW)

    assert exc_info.value.kind == "past_time"


def test_today_current_minute_is_rejected():
    """A booking for the minute that is already running counts as missed"""
    with pytest.raises(PastTime):
        validate_time_window(date(2026, 3, 10), time(12, 30), NOW)


def test_today_next_minute_is_accepted():
    validate_time_window(date(2026, 3, 10), time(12, 31), NOW)


def test_local_now_uses_restaurant_calendar_day():
    """01:30 UTC is still the previous evening in Sao Paulo"""
    utc_now = datetime(2026, 3, 11, 1, 30, tzinfo=timezone.utc)

    now = local_now("America/Sao_Paulo", utc_now)

    assert now.date() == date(2026, 3, 10)
    assert now.time().replace(tzinfo=None) == time(22, 30)
    # A late booking tonight is still valid even though UTC has rolled over
    validate_time_window(date(2026, 3, 10), time(23, 0), now)
    with pytest.raises(PastDate):
        validate_time_window(now.date() - timedelta(days=1), None, now)


def test_local_now_treats_naive_as_utc():
    now = local_now("Asia/Tokyo", datetime(2026, 3, 10, 20, 0))

    assert now.date() == date(2026, 3, 11)
    assert now.hour == 5
