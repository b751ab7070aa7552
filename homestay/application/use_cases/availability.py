from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from homestay.application.exceptions import InvalidRangeError, UnavailableError
from homestay.application.utils.date_keys import is_valid_key, iter_nights, nights_between
from homestay.application.utils.intervals import coerce_dates, coerce_intervals, covers_date, merge
from homestay.domain.entities.availability import AvailabilityResult, UnavailableReason
from homestay.domain.entities.interval import Interval

REASON_HINTS = {
    UnavailableReason.invalid_range: "Choose a checkout date after the check-in date.",
    UnavailableReason.below_minimum_stay: "This room requires a longer stay.",
    UnavailableReason.in_past: "Check-in must be after today.",
    UnavailableReason.date_unavailable: "Some of the selected nights are already booked or blocked.",
}


def is_range_bookable(
    stay: Interval,
    blocked_dates: Iterable[Any] | None,
    booked_intervals: Iterable[Any] | None,
    minimum_stay: int,
    today: str,
) -> AvailabilityResult:
    """
    Decide whether a stay [start, end) can be booked.

    Checks run in order: range shape, minimum stay, check-in after today,
    then every occupied night (checkout day excluded) against blocked dates
    and booked intervals.
    """
    if not (is_valid_key(stay.start) and is_valid_key(stay.end)) or not stay.is_valid:
        return AvailabilityResult(bookable=False, reason=UnavailableReason.invalid_range)

    if nights_between(stay.start, stay.end) < minimum_stay:
        return AvailabilityResult(bookable=False, reason=UnavailableReason.below_minimum_stay)

    if not stay.start > today:
        return AvailabilityResult(bookable=False, reason=UnavailableReason.in_past)

    blocked = coerce_dates(blocked_dates)
    booked = merge(coerce_intervals(booked_intervals))
    conflicts = [night for night in iter_nights(stay.start, stay.end) if night in blocked or covers_date(booked, night)]
    if conflicts:
        return AvailabilityResult(
            bookable=False,
            reason=UnavailableReason.date_unavailable,
            conflicting_dates=conflicts,
        )

    return AvailabilityResult(bookable=True)


def require_bookable(result: AvailabilityResult) -> AvailabilityResult:
    """Raise the matching engine error for a negative result."""
    if result.bookable:
        return result
    if result.reason is UnavailableReason.invalid_range:
        raise InvalidRangeError(describe_reason(result.reason))
    raise UnavailableError(
        result.reason.value if result.reason else "unavailable",
        result.conflicting_dates,
    )


def describe_reason(reason: UnavailableReason | str | None) -> str:
    if reason is None:
        return ""
    try:
        return REASON_HINTS[UnavailableReason(reason)]
    except ValueError:
        return str(reason)
