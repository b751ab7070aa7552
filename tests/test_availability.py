"""
Tests for range bookability decisions.
"""

from __future__ import annotations

import pytest

from homestay.application.exceptions import InvalidRangeError, UnavailableError
from homestay.application.use_cases.availability import describe_reason, is_range_bookable, require_bookable
from homestay.domain.entities.availability import AvailabilityResult, UnavailableReason
from homestay.domain.entities.interval import Interval

TODAY = "2025-06-01"


def test_stay_over_a_booked_night_reports_the_conflict():
    """Test that a stay covering a booked night is rejected with that night listed."""
    result = is_range_bookable(
        Interval("2025-06-10", "2025-06-15"),
        blocked_dates=[],
        booked_intervals=[Interval("2025-06-12", "2025-06-13")],
        minimum_stay=1,
        today=TODAY,
    )
    assert result.bookable is False
    assert result.reason is UnavailableReason.date_unavailable
    assert result.conflicting_dates == ["2025-06-12"]


def test_checkout_on_a_booked_or_blocked_day_is_allowed():
    """Test that the checkout day may be booked or blocked."""
    result = is_range_bookable(
        Interval("2025-06-10", "2025-06-12"),
        blocked_dates=["2025-06-12"],
        booked_intervals=[Interval("2025-06-12", "2025-06-14")],
        minimum_stay=1,
        today=TODAY,
    )
    assert result == AvailabilityResult(bookable=True)


def test_blocked_nights_conflict():
    """Test that admin-blocked nights make a stay unavailable."""
    result = is_range_bookable(Interval("2025-06-10", "2025-06-13"), ["2025-06-11"], [], 1, TODAY)
    assert result.reason is UnavailableReason.date_unavailable
    assert result.conflicting_dates == ["2025-06-11"]


def test_checks_run_in_order():
    """Test that range shape, minimum stay and past checks run before conflicts."""
    booked = [Interval("2025-05-01", "2025-07-01")]

    reversed_range = is_range_bookable(Interval("2025-06-12", "2025-06-10"), [], booked, 3, TODAY)
    assert reversed_range.reason is UnavailableReason.invalid_range

    garbage = is_range_bookable(Interval("tomorrow", "2025-06-10"), [], booked, 1, TODAY)
    assert garbage.reason is UnavailableReason.invalid_range

    too_short = is_range_bookable(Interval("2025-05-20", "2025-05-21"), [], booked, 3, TODAY)
    assert too_short.reason is UnavailableReason.below_minimum_stay

    past = is_range_bookable(Interval("2025-05-20", "2025-05-25"), [], booked, 3, TODAY)
    assert past.reason is UnavailableReason.in_past


def test_check_in_today_is_in_the_past():
    """Test that checking in today counts as in the past."""
    result = is_range_bookable(Interval(TODAY, "2025-06-03"), [], [], 1, TODAY)
    assert result.reason is UnavailableReason.in_past


def test_require_bookable_maps_reasons_to_errors():
    """Test that negative results raise InvalidRangeError or UnavailableError."""
    ok = AvailabilityResult(bookable=True)
    assert require_bookable(ok) is ok

    with pytest.raises(InvalidRangeError):
        require_bookable(AvailabilityResult(bookable=False, reason=UnavailableReason.invalid_range))

    with pytest.raises(UnavailableError) as excinfo:
        require_bookable(
            AvailabilityResult(
                bookable=False,
                reason=UnavailableReason.date_unavailable,
                conflicting_dates=["2025-06-12"],
            )
        )
    assert excinfo.value.reason == "date_unavailable"
    assert excinfo.value.conflicting_dates == ["2025-06-12"]
    assert "2025-06-12" in str(excinfo.value)


def test_describe_reason():
    """Test that reasons map to user hints and unknown reasons pass through."""
    assert describe_reason(None) == ""
    assert "longer stay" in describe_reason(UnavailableReason.below_minimum_stay)
    assert describe_reason("in_past") == describe_reason(UnavailableReason.in_past)
    assert describe_reason("something_else") == "something_else"
