"""
Tests for the 42-cell month grid.
"""

from __future__ import annotations

from homestay.application.use_cases.calendar import GRID_DAYS, build_calendar_days, grid_start
from homestay.application.utils.date_keys import add_days, weekday
from homestay.domain.entities.interval import Interval
from homestay.domain.entities.selection_state import SelectionState


def _by_date(days):
    return {d.date: d for d in days}


def test_grid_always_has_42_cells_starting_on_sunday():
    """Test that every month renders 42 consecutive days starting on a Sunday."""
    for month in ("2025-02", "2025-06", "2025-07", "2025-08", "2026-02", "2024-02"):
        days = build_calendar_days(month, [], [], "2025-01-01")
        assert len(days) == GRID_DAYS
        assert weekday(days[0].date) == 6  # Sunday
        for previous, current in zip(days, days[1:]):
            assert add_days(previous.date, 1) == current.date


def test_grid_start_examples():
    """Test that the grid starts on the Sunday on or before the 1st."""
    assert grid_start("2025-07") == "2025-06-29"  # July 1st 2025 is a Tuesday
    assert grid_start("2025-08") == "2025-07-27"  # August 1st 2025 is a Friday
    assert grid_start("2026-02") == "2026-02-01"  # already a Sunday


def test_flags_for_booked_blocked_past_and_today():
    """Test that booked, blocked, past and today flags are set per day."""
    days = _by_date(
        build_calendar_days(
            "2025-06",
            blocked_dates=["2025-06-20"],
            booked_intervals=[Interval("2025-06-12", "2025-06-14")],
            today="2025-06-10",
        )
    )

    assert days["2025-06-09"].is_past and days["2025-06-09"].is_blocked
    assert days["2025-06-10"].is_today and not days["2025-06-10"].is_past

    assert days["2025-06-12"].is_booked and days["2025-06-13"].is_booked
    assert not days["2025-06-14"].is_booked  # checkout day is free
    assert days["2025-06-14"].is_available

    assert days["2025-06-20"].is_blocked and not days["2025-06-20"].is_available
    assert days["2025-06-11"].is_available


def test_out_of_month_cells_are_never_available():
    """Test that leading and trailing days are never available."""
    days = build_calendar_days("2025-07", [], [], "2025-01-01")
    leading = [d for d in days if d.date < "2025-07-01"]
    trailing = [d for d in days if d.date > "2025-07-31"]
    assert [d.date for d in leading] == ["2025-06-29", "2025-06-30"]
    assert all(not d.is_current_month and not d.is_available for d in leading + trailing)


def test_selection_highlight_includes_both_endpoints():
    """Test that the highlight covers check-in through checkout inclusive."""
    days = _by_date(
        build_calendar_days(
            "2025-06",
            [],
            [],
            "2025-06-01",
            SelectionState(start="2025-06-10", end="2025-06-13"),
        )
    )
    assert days["2025-06-10"].is_range_start
    assert days["2025-06-13"].is_range_end
    for key in ("2025-06-10", "2025-06-11", "2025-06-12", "2025-06-13"):
        assert days[key].is_in_range
    assert not days["2025-06-09"].is_in_range
    assert not days["2025-06-14"].is_in_range


def test_start_only_selection_marks_start_without_range():
    """Test that a lone start is marked without a range highlight."""
    days = _by_date(build_calendar_days("2025-06", [], [], "2025-06-01", SelectionState(start="2025-06-10")))
    assert days["2025-06-10"].is_range_start
    assert not any(d.is_in_range or d.is_range_end for d in days.values())


def test_malformed_inputs_are_skipped_and_grid_is_idempotent():
    """Test that bad entries are ignored and the same input builds the same grid."""
    blocked = ["2025-06-20", "garbage", None]
    booked = [Interval("2025-06-12", "2025-06-14"), {"start": "2025-06-16"}, ("2025-06-25", "2025-06-25")]
    first = build_calendar_days("2025-06", blocked, booked, "2025-06-01")
    second = build_calendar_days("2025-06", blocked, booked, "2025-06-01")
    assert first == second
    assert sum(d.is_booked for d in first) == 2
    assert _by_date(first)["2025-06-20"].is_blocked
