from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from homestay.domain.entities.interval import Interval


class UnavailableReason(str, Enum):
    invalid_range = "invalid_range"
    below_minimum_stay = "below_minimum_stay"
    in_past = "in_past"
    date_unavailable = "date_unavailable"


@dataclass(frozen=True)
class AvailabilityResult:
    bookable: bool
    reason: UnavailableReason | None = None
    conflicting_dates: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class AvailabilitySnapshot:
    """Booked/blocked data for one room over a window, as fetched from the store."""

    room_id: str
    booked_intervals: tuple[Interval, ...] = ()
    blocked_dates: frozenset[str] = frozenset()
