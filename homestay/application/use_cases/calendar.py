from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from homestay.application.utils.date_keys import add_days, first_day_of_month, month_key, weekday
from homestay.application.utils.intervals import coerce_dates, coerce_intervals, covers_date, merge
from homestay.domain.entities.day_cell import DayCell
from homestay.domain.entities.interval import Interval
from homestay.domain.entities.selection_state import SelectionState

GRID_DAYS = 42  # 6 full weeks, so the grid never reflows between months

logger = logging.getLogger(__name__)


def grid_start(displayed_month: str) -> str:
    """Sunday on or before the first day of the month."""
    first = first_day_of_month(displayed_month)
    # date.weekday(): Monday=0 .. Sunday=6
    return add_days(first, -((weekday(first) + 1) % 7))


def build_calendar_days(
    displayed_month: str,
    blocked_dates: Iterable[Any] | None,
    booked_intervals: Iterable[Any] | None,
    today: str,
    selection: SelectionState | None = None,
) -> list[DayCell]:
    """
    Build the 42-cell availability grid for a displayed month.

    Malformed blocked/booked entries are skipped rather than failing the
    whole grid. The selection highlight includes both endpoints even though
    bookings treat the checkout day as free.
    """
    current_month = month_key(displayed_month)
    blocked = coerce_dates(blocked_dates)
    booked = merge(coerce_intervals(booked_intervals))
    selection = selection or SelectionState()
    highlight = _highlight_interval(selection)

    days: list[DayCell] = []
    current = grid_start(current_month)
    for _ in range(GRID_DAYS):
        is_current_month = current[:7] == current_month
        is_past = current < today
        is_blocked = current in blocked or is_past
        is_booked = covers_date(booked, current)
        days.append(
            DayCell(
                date=current,
                is_current_month=is_current_month,
                is_past=is_past,
                is_today=current == today,
                is_blocked=is_blocked,
                is_booked=is_booked,
                is_available=is_current_month and not is_blocked and not is_booked,
                is_range_start=selection.start is not None and current == selection.start,
                is_range_end=selection.end is not None and current == selection.end,
                is_in_range=highlight is not None and covers_date([highlight], current),
            )
        )
        current = add_days(current, 1)

    logger.debug(
        "Calendar grid built",
        extra={"month": current_month, "blocked": len(blocked), "booked": len(booked)},
    )
    return days


def _highlight_interval(selection: SelectionState) -> Interval | None:
    if selection.start is None or selection.end is None:
        return None
    # widen by one day so the half-open check includes the checkout day
    return Interval(start=selection.start, end=add_days(selection.end, 1))
