from __future__ import annotations

import itertools
import logging
from collections.abc import Callable
from dataclasses import dataclass

from homestay.application.exceptions import UpstreamFetchError
from homestay.application.ports.booking_store import BookingStorePort
from homestay.application.utils.intervals import make_interval, overlaps
from homestay.domain.entities.interval import Interval
from homestay.domain.entities.rate_rule import RateRule

BookingListener = Callable[[str], None]

ACTIVE_STATUSES = ("confirmed", "checked_in", "pending")


@dataclass(frozen=True)
class StoredBooking:
    booking_id: str
    room_id: str
    stay: Interval
    status: str = "confirmed"


class MemoryBookingStore(BookingStorePort):
    def __init__(
        self,
        rates: dict[str, RateRule] | None = None,
        holidays: set[str] | None = None,
    ) -> None:
        self._bookings: dict[str, StoredBooking] = {}
        self._booking_ids = itertools.count(1)
        self._blocked: dict[str, set[str]] = {}
        self._rates: dict[str, RateRule] = dict(rates or {})
        self._holidays: set[str] = set(holidays or ())
        self._listeners: list[BookingListener] = []
        self._failing: bool = False
        self.fetch_calls: dict[str, int] = {}
        self._logger = logging.getLogger(__name__)

    async def fetch_booked_intervals(self, room_id: str, start: str, end: str) -> list[Interval]:
        self._record("booked_intervals")
        window = make_interval(start, end)
        return [
            booking.stay
            for booking in self._bookings.values()
            if booking.room_id == room_id and booking.status in ACTIVE_STATUSES and overlaps(booking.stay, window)
        ]

    async def fetch_blocked_dates(self, room_id: str, start: str, end: str) -> frozenset[str]:
        self._record("blocked_dates")
        return frozenset(d for d in self._blocked.get(room_id, set()) if start <= d < end)

    async def fetch_rate_rule(self, room_id: str) -> RateRule:
        self._record("rate_rule")
        rule = self._rates.get(room_id)
        if rule is None:
            raise UpstreamFetchError(f"No rate rule for room {room_id}")
        return rule

    async def fetch_holiday_dates(self) -> frozenset[str]:
        self._record("holiday_dates")
        return frozenset(self._holidays)

    def subscribe(self, listener: BookingListener) -> None:
        """Register a mutation listener, called with the room id after create/cancel."""
        self._listeners.append(listener)

    def add_booking(self, room_id: str, start: str, end: str, status: str = "confirmed") -> str:
        booking_id = f"booking_{next(self._booking_ids)}"
        self._bookings[booking_id] = StoredBooking(
            booking_id=booking_id,
            room_id=room_id,
            stay=make_interval(start, end),
            status=status,
        )
        self._logger.info("Booking stored", extra={"room_id": room_id, "range": f"{start}_{end}"})
        self._notify(room_id)
        return booking_id

    def cancel_booking(self, booking_id: str) -> bool:
        booking = self._bookings.pop(booking_id, None)
        if booking is None:
            return False
        self._logger.info("Booking cancelled", extra={"room_id": booking.room_id, "booking_id": booking_id})
        self._notify(booking.room_id)
        return True

    def block_date(self, room_id: str, date: str) -> None:
        self._blocked.setdefault(room_id, set()).add(date)
        self._notify(room_id)

    def set_rate_rule(self, room_id: str, rule: RateRule) -> None:
        self._rates[room_id] = rule

    def add_holiday(self, date: str) -> None:
        self._holidays.add(date)

    def set_failing(self, failing: bool) -> None:
        """Make every fetch raise UpstreamFetchError (outage simulation for dev/tests)."""
        self._failing = failing

    def _record(self, name: str) -> None:
        if self._failing:
            raise UpstreamFetchError(f"Memory store unavailable ({name})")
        self.fetch_calls[name] = self.fetch_calls.get(name, 0) + 1

    def _notify(self, room_id: str) -> None:
        for listener in self._listeners:
            listener(room_id)
