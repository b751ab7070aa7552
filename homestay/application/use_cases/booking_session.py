from __future__ import annotations

import logging
from collections.abc import Callable
from zoneinfo import ZoneInfo

from homestay.application.exceptions import InvalidRangeError, StaleDataError
from homestay.application.ports.booking_store import BookingStorePort
from homestay.application.use_cases.availability import is_range_bookable, require_bookable
from homestay.application.use_cases.calendar import GRID_DAYS, build_calendar_days, grid_start
from homestay.application.use_cases.pricing import price
from homestay.application.use_cases.selection import RangeSelectionMachine
from homestay.application.utils.date_keys import (
    SATURDAY,
    add_days,
    is_valid_key,
    month_key,
    shift_month,
    today_key,
)
from homestay.application.utils.intervals import covers_date, make_interval, merge
from homestay.domain.entities.availability import AvailabilityResult, AvailabilitySnapshot, UnavailableReason
from homestay.domain.entities.day_cell import DayCell
from homestay.domain.entities.interval import Interval
from homestay.domain.entities.pricing import PricingAdjustments, PricingResult
from homestay.domain.entities.rate_rule import RateRule
from homestay.domain.entities.selection_state import SelectionState
from homestay.infrastructure.cache.availability_cache import AvailabilityCache, CacheKey

GLOBAL_CACHE_SCOPE = "*"


class BookingSession:
    """
    Availability, selection and pricing for one guest browsing one room.

    Owns the selection state; shares the AvailabilityCache with other
    sessions. Only the store calls are asynchronous, everything else is
    computed from immutable snapshots.
    """

    def __init__(
        self,
        room_id: str,
        store: BookingStorePort,
        cache: AvailabilityCache,
        timezone: ZoneInfo | None = None,
        default_minimum_stay: int = 1,
        weekend_days: tuple[int, ...] = (SATURDAY,),
        commit_max_age: float = 30.0,
        reference_ttl: float = 3600.0,
        today: Callable[[], str] | None = None,
        initial_selection: SelectionState | None = None,
    ) -> None:
        self._room_id = room_id
        self._store = store
        self._cache = cache
        self._timezone = timezone
        self._default_minimum_stay = default_minimum_stay
        self._weekend_days = tuple(weekend_days)
        self._commit_max_age = commit_max_age
        self._reference_ttl = reference_ttl
        self._today = today or (lambda: today_key(self._timezone))
        self._snapshots: dict[str, AvailabilitySnapshot] = {}
        self._rate_rule: RateRule | None = None
        self._month_seq = 0
        self._displayed_month: str | None = None
        self._calendar_days: list[DayCell] = []
        self._machine = RangeSelectionMachine(
            is_blocked=self._is_blocked,
            can_check_in=self._can_check_in,
            veto=self._veto,
            initial=initial_selection,
        )
        self._logger = logging.getLogger(__name__)

    @property
    def room_id(self) -> str:
        return self._room_id

    @property
    def selection(self) -> SelectionState:
        return self._machine.state

    @property
    def last_rejection(self) -> UnavailableReason | None:
        return self._machine.last_rejection

    @property
    def displayed_month(self) -> str | None:
        return self._displayed_month

    @property
    def calendar_days(self) -> list[DayCell]:
        return list(self._calendar_days)

    async def get_calendar_days(self, month: str | None = None) -> list[DayCell]:
        """
        Return the 42-day grid for month (default: the current month).

        The newest request wins: if another month was requested while this
        one was loading, the result is returned but not applied to the
        session's displayed month.
        """
        target = month_key(month or self._displayed_month or self._today())
        self._month_seq += 1
        seq = self._month_seq

        snapshot = await self._month_snapshot(target)
        days = self._build_days(target, snapshot)

        if seq == self._month_seq:
            self._displayed_month = target
            self._calendar_days = days
        else:
            self._logger.info(
                "Discarding superseded calendar response",
                extra={"room_id": self._room_id, "month": target},
            )
        return days

    async def navigate(self, direction: str) -> list[DayCell]:
        """Move the displayed month one step "next" or "prev"."""
        if direction not in ("next", "prev"):
            raise ValueError(f"Unknown calendar direction: {direction!r}")
        current = self._displayed_month or month_key(self._today())
        return await self.get_calendar_days(shift_month(current, 1 if direction == "next" else -1))

    def select(self, date: str) -> SelectionState:
        state = self._machine.select_date(date)
        self._refresh_days()
        return state

    def select_check_in(self, date: str) -> SelectionState:
        state = self._machine.select_check_in(date)
        self._refresh_days()
        return state

    def select_check_out(self, date: str) -> SelectionState:
        state = self._machine.select_check_out(date)
        self._refresh_days()
        return state

    def seed_selection(self, start: str, end: str | None = None) -> SelectionState:
        state = self._machine.seed(start, end)
        self._refresh_days()
        return state

    def clear_selection(self) -> SelectionState:
        state = self._machine.clear()
        self._refresh_days()
        return state

    async def check_availability(self, stay: Interval | None = None) -> AvailabilityResult:
        stay = stay or self._selected_interval()
        if not self._is_well_formed(stay):
            return AvailabilityResult(bookable=False, reason=UnavailableReason.invalid_range)
        snapshot = await self._range_snapshot(stay)
        minimum_stay = await self._minimum_stay()
        return self._evaluate(stay, snapshot, minimum_stay)

    async def quote(
        self,
        stay: Interval | None = None,
        adjustments: PricingAdjustments | None = None,
    ) -> PricingResult:
        stay = stay or self._selected_interval()
        if not self._is_well_formed(stay):
            return PricingResult()
        rate_rule = await self._load_rate_rule()
        holidays = await self._cache.get_or_load(
            CacheKey(GLOBAL_CACHE_SCOPE, "holidays", "all"),
            self._store.fetch_holiday_dates,
            self._reference_ttl,
        )
        return price(stay, rate_rule, holidays, self._weekend_days, adjustments)

    async def validate_for_booking(self, stay: Interval | None = None) -> AvailabilityResult:
        """
        Final check before committing a booking.

        Data older than the commit bound (or never loaded) forces a re-fetch
        instead of trusting the cache. Raises InvalidRangeError or
        UnavailableError when the stay cannot be booked.
        """
        stay = stay or self._selected_interval()
        if not self._is_well_formed(stay):
            raise InvalidRangeError(f"Cannot book an empty or reversed range: [{stay.start}, {stay.end})")

        cache_key = CacheKey(self._room_id, "range", stay.key)
        try:
            snapshot = self._cache.require_fresh(cache_key, self._commit_max_age)
        except StaleDataError as e:
            self._logger.info(
                "Re-fetching availability before booking",
                extra={"room_id": self._room_id, "range": stay.key, "reason": str(e)},
            )
            snapshot = await self._range_snapshot(stay, force=True)

        minimum_stay = await self._minimum_stay()
        return require_bookable(self._evaluate(stay, snapshot, minimum_stay))

    def on_booking_changed(self, room_id: str) -> None:
        """Drop everything known about room_id after a booking was created or cancelled."""
        self._cache.invalidate(room_id)
        if room_id != self._room_id:
            return
        self._snapshots.clear()
        self._rate_rule = None

    def forget_room_data(self) -> None:
        """Drop this session's local snapshots (the shared cache was invalidated elsewhere)."""
        self._snapshots.clear()
        self._rate_rule = None

    async def _month_snapshot(self, month: str) -> AvailabilitySnapshot:
        start = grid_start(month)
        end = add_days(start, GRID_DAYS)

        async def load() -> AvailabilitySnapshot:
            return await self._fetch_snapshot(start, end)

        snapshot = await self._cache.get_month(self._room_id, month, load)
        self._snapshots[month] = snapshot
        return snapshot

    async def _range_snapshot(self, stay: Interval, force: bool = False) -> AvailabilitySnapshot:
        async def load() -> AvailabilitySnapshot:
            return await self._fetch_snapshot(stay.start, stay.end)

        return await self._cache.get_range(self._room_id, stay.key, load, force=force)

    async def _fetch_snapshot(self, start: str, end: str) -> AvailabilitySnapshot:
        booked = await self._store.fetch_booked_intervals(self._room_id, start, end)
        blocked = await self._store.fetch_blocked_dates(self._room_id, start, end)
        return AvailabilitySnapshot(
            room_id=self._room_id,
            booked_intervals=tuple(merge(booked)),
            blocked_dates=frozenset(blocked),
        )

    async def _load_rate_rule(self) -> RateRule:
        rule = await self._cache.get_or_load(
            CacheKey(self._room_id, "rate", "current"),
            lambda: self._store.fetch_rate_rule(self._room_id),
            self._reference_ttl,
        )
        self._rate_rule = rule
        return rule

    async def _minimum_stay(self) -> int:
        rule = await self._load_rate_rule()
        return max(rule.minimum_stay, self._default_minimum_stay)

    def _evaluate(self, stay: Interval, snapshot: AvailabilitySnapshot, minimum_stay: int) -> AvailabilityResult:
        result = is_range_bookable(
            stay,
            snapshot.blocked_dates,
            snapshot.booked_intervals,
            minimum_stay,
            self._today(),
        )
        self._logger.info(
            "Availability checked",
            extra={
                "room_id": self._room_id,
                "range": stay.key,
                "reason": result.reason.value if result.reason else None,
            },
        )
        return result

    def _build_days(self, month: str, snapshot: AvailabilitySnapshot) -> list[DayCell]:
        return build_calendar_days(
            month,
            snapshot.blocked_dates,
            snapshot.booked_intervals,
            self._today(),
            self._machine.state,
        )

    def _refresh_days(self) -> None:
        month = self._displayed_month
        if month is not None and month in self._snapshots:
            self._calendar_days = self._build_days(month, self._snapshots[month])

    def _selected_interval(self) -> Interval:
        state = self._machine.state
        if not state.is_complete:
            raise InvalidRangeError("Select both a check-in and a checkout date first")
        return make_interval(state.start, state.end)

    def _is_well_formed(self, stay: Interval) -> bool:
        return is_valid_key(stay.start) and is_valid_key(stay.end) and stay.is_valid

    def _known_blocked(self) -> set[str]:
        blocked: set[str] = set()
        for snapshot in self._snapshots.values():
            blocked.update(snapshot.blocked_dates)
        return blocked

    def _known_booked(self) -> list[Interval]:
        return merge(i for snapshot in self._snapshots.values() for i in snapshot.booked_intervals)

    def _is_blocked(self, date: str) -> bool:
        return date < self._today() or date in self._known_blocked()

    def _can_check_in(self, date: str) -> bool:
        # check-in must be after today and the first night must be free
        return date > self._today() and not covers_date(self._known_booked(), date)

    def _veto(self, stay: Interval) -> AvailabilityResult:
        minimum_stay = max(
            self._rate_rule.minimum_stay if self._rate_rule else 1,
            self._default_minimum_stay,
        )
        return is_range_bookable(stay, self._known_blocked(), self._known_booked(), minimum_stay, self._today())
