"""
Tests for the check-in/checkout selection state machine.
"""

from __future__ import annotations

import pytest

from homestay.application.exceptions import InvalidRangeError
from homestay.application.use_cases.availability import is_range_bookable
from homestay.application.use_cases.selection import RangeSelectionMachine
from homestay.domain.entities.availability import AvailabilityResult, UnavailableReason
from homestay.domain.entities.interval import Interval
from homestay.domain.entities.selection_state import SelectionState, SelectionStatus


def test_three_clicks_complete_then_restart():
    """Test that two clicks make a range and a third starts a new one."""
    machine = RangeSelectionMachine()
    assert machine.status is SelectionStatus.empty

    assert machine.select_date("2025-06-10") == SelectionState(start="2025-06-10")
    assert machine.select_date("2025-06-12") == SelectionState(start="2025-06-10", end="2025-06-12")
    assert machine.status is SelectionStatus.complete

    # a third click always starts over, even on a later day
    assert machine.select_date("2025-06-15") == SelectionState(start="2025-06-15")


def test_click_on_or_before_start_moves_the_start():
    """Test that clicking on or before the start moves the start."""
    machine = RangeSelectionMachine()
    machine.select_date("2025-06-10")
    assert machine.select_date("2025-06-10") == SelectionState(start="2025-06-10")
    assert machine.select_date("2025-06-08") == SelectionState(start="2025-06-08")


def test_blocked_clicks_are_ignored_in_every_state():
    """Test that blocked days never change the selection."""
    blocked = {"2025-06-11", "2025-06-20"}
    machine = RangeSelectionMachine(is_blocked=lambda d: d in blocked)

    assert machine.select_date("2025-06-11").status is SelectionStatus.empty
    machine.select_date("2025-06-10")
    assert machine.select_date("2025-06-20") == SelectionState(start="2025-06-10")
    machine.select_date("2025-06-12")
    assert machine.select_date("2025-06-11") == SelectionState(start="2025-06-10", end="2025-06-12")


def test_booked_night_can_end_a_stay_but_not_start_one():
    """Test that a booked night can be a checkout but not a check-in."""
    booked_nights = {"2025-06-12", "2025-06-13"}
    machine = RangeSelectionMachine(can_check_in=lambda d: d not in booked_nights)

    assert machine.select_date("2025-06-12").status is SelectionStatus.empty
    machine.select_date("2025-06-10")
    assert machine.select_date("2025-06-12") == SelectionState(start="2025-06-10", end="2025-06-12")


def test_veto_keeps_start_and_records_reason():
    """Test that a vetoed range keeps the start and exposes the reason."""
    booked = [Interval("2025-06-12", "2025-06-13")]

    def veto(stay: Interval) -> AvailabilityResult:
        return is_range_bookable(stay, [], booked, 1, "2025-06-01")

    machine = RangeSelectionMachine(veto=veto)
    machine.select_date("2025-06-10")
    state = machine.select_date("2025-06-15")

    assert state == SelectionState(start="2025-06-10")
    assert machine.last_rejection is UnavailableReason.date_unavailable

    # the next accepted click clears the rejection
    assert machine.select_date("2025-06-12") == SelectionState(start="2025-06-10", end="2025-06-12")
    assert machine.last_rejection is None


def test_explicit_check_in_and_check_out():
    """Test that explicit check-in and checkout picks keep or drop the other end."""
    machine = RangeSelectionMachine()
    assert machine.select_check_out("2025-06-14") == SelectionState(start="2025-06-14")
    machine.clear()

    machine.select_check_in("2025-06-10")
    assert machine.select_check_out("2025-06-14") == SelectionState(start="2025-06-10", end="2025-06-14")

    # moving check-in keeps the checkout while it is still later
    assert machine.select_check_in("2025-06-11") == SelectionState(start="2025-06-11", end="2025-06-14")
    # and drops it once it is not
    assert machine.select_check_in("2025-06-14") == SelectionState(start="2025-06-14")


def test_seed_and_clear():
    """Test that seeding loads a selection and clear empties it."""
    machine = RangeSelectionMachine(initial=SelectionState(start="2025-06-10", end="2025-06-12"))
    assert machine.status is SelectionStatus.complete

    assert machine.seed("2025-07-01") == SelectionState(start="2025-07-01")
    with pytest.raises(InvalidRangeError):
        machine.seed("2025-07-05", "2025-07-05")

    assert machine.clear() == SelectionState()
    assert machine.status is SelectionStatus.empty


def test_invalid_date_raises():
    """Test that a non-key date raises InvalidRangeError."""
    machine = RangeSelectionMachine()
    with pytest.raises(InvalidRangeError):
        machine.select_date("06/10/2025")
