from __future__ import annotations

from abc import ABC, abstractmethod

from homestay.domain.entities.interval import Interval
from homestay.domain.entities.rate_rule import RateRule


class BookingStorePort(ABC):
    @abstractmethod
    async def fetch_booked_intervals(self, room_id: str, start: str, end: str) -> list[Interval]:
        """
        Fetch reservations (confirmed, checked-in or pending) touching [start, end).

        Entries may overlap when upstream data is inconsistent; callers treat
        the list as the union of its coverage. Raises UpstreamFetchError.
        """
        raise NotImplementedError

    @abstractmethod
    async def fetch_blocked_dates(self, room_id: str, start: str, end: str) -> frozenset[str]:
        """Fetch admin-blocked single days within [start, end). Raises UpstreamFetchError."""
        raise NotImplementedError

    @abstractmethod
    async def fetch_rate_rule(self, room_id: str) -> RateRule:
        """Fetch the room's nightly rates, seasonal rules and minimum stay. Raises UpstreamFetchError."""
        raise NotImplementedError

    @abstractmethod
    async def fetch_holiday_dates(self) -> frozenset[str]:
        """Fetch holiday DateKeys; identical for all rooms. Raises UpstreamFetchError."""
        raise NotImplementedError
