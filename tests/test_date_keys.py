"""
Tests for timezone-safe calendar day keys.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo

import pytest

from homestay.application.exceptions import InvalidRangeError
from homestay.application.utils.date_keys import (
    add_days,
    compare,
    first_day_of_month,
    is_after,
    is_before,
    is_same_day,
    is_valid_key,
    is_weekend,
    iter_nights,
    month_key,
    month_window,
    nights_between,
    parse_key,
    shift_month,
    to_key,
)


def test_to_key_uses_local_calendar_fields():
    """Just after midnight in UTC+7 is still the previous day in UTC; the key must not shift."""
    early = datetime(2025, 6, 14, 0, 30, tzinfo=ZoneInfo("Asia/Ho_Chi_Minh"))
    assert early.astimezone(timezone.utc).day == 13
    assert to_key(early) == "2025-06-14"

    late = datetime(2025, 6, 14, 23, 30, tzinfo=ZoneInfo("America/Los_Angeles"))
    assert late.astimezone(timezone.utc).day == 15
    assert to_key(late) == "2025-06-14"


def test_round_trip_is_stable_across_timezones():
    """Test that any time of a day in any timezone maps back to the same key."""
    key = "2025-03-09"
    for tz_name in ("UTC", "Asia/Ho_Chi_Minh", "America/Los_Angeles", "Pacific/Kiritimati", "Pacific/Pago_Pago"):
        day = parse_key(key)
        for hour in (0, 12, 23):
            moment = datetime(day.year, day.month, day.day, hour, 59, tzinfo=ZoneInfo(tz_name))
            assert to_key(moment) == key


def test_to_key_zero_pads_and_accepts_dates_and_keys():
    """Test that dates and existing keys produce zero-padded keys."""
    assert to_key(date(2025, 1, 5)) == "2025-01-05"
    assert to_key("2025-01-05") == "2025-01-05"


def test_invalid_keys_are_rejected():
    """Test that malformed or impossible keys raise InvalidRangeError."""
    for bad in ("2025-1-5", "2025-02-30", "yesterday", "", "2025/01/05"):
        assert is_valid_key(bad) is False
        with pytest.raises(InvalidRangeError):
            parse_key(bad)
    with pytest.raises(InvalidRangeError):
        to_key(12345)  # type: ignore[arg-type]


def test_compare_and_ordering_helpers():
    """Test that keys compare in calendar order."""
    assert compare("2025-06-09", "2025-06-10") == -1
    assert compare("2025-06-10", "2025-06-10") == 0
    assert compare("2025-12-31", "2025-06-10") == 1
    assert is_before("2025-06-09", "2025-06-10")
    assert is_after("2026-01-01", "2025-12-31")
    assert is_same_day("2025-06-10", to_key(datetime(2025, 6, 10, 18, 0)))


def test_add_days_crosses_month_and_leap_day():
    """Test that adding days crosses month, leap day and year boundaries."""
    assert add_days("2024-02-28", 1) == "2024-02-29"
    assert add_days("2024-02-29", 1) == "2024-03-01"
    assert add_days("2025-01-01", -1) == "2024-12-31"


def test_nights_exclude_checkout_day():
    """Test that night counts and iteration exclude the checkout day."""
    assert nights_between("2025-06-10", "2025-06-15") == 5
    assert list(iter_nights("2025-06-30", "2025-07-02")) == ["2025-06-30", "2025-07-01"]
    assert list(iter_nights("2025-06-10", "2025-06-10")) == []


def test_weekend_defaults_to_saturday_night():
    """Test that only Saturday is a weekend night unless configured."""
    assert is_weekend("2025-06-14") is True  # Saturday
    assert is_weekend("2025-06-13") is False  # Friday
    assert is_weekend("2025-06-15") is False  # Sunday
    assert is_weekend("2025-06-15", (5, 6)) is True


def test_month_helpers():
    """Test that month keys, first days, shifts and windows are computed."""
    assert month_key("2025-06-14") == "2025-06"
    assert month_key("2025-06") == "2025-06"
    assert first_day_of_month("2025-06") == "2025-06-01"
    assert shift_month("2025-12", 1) == "2026-01"
    assert shift_month("2025-01", -1) == "2024-12"
    assert month_window("2025-02") == ("2025-02-01", "2025-03-01")
    with pytest.raises(InvalidRangeError):
        month_key("2025-13")
