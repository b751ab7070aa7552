from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class DayCell:
    date: str  # DateKey
    is_current_month: bool
    is_past: bool
    is_today: bool
    is_blocked: bool  # admin-blocked or past
    is_booked: bool  # covered by a booked interval
    is_available: bool
    is_range_start: bool = False
    is_range_end: bool = False
    is_in_range: bool = False  # inclusive of both selection endpoints
