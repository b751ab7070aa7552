from __future__ import annotations

import logging
from collections.abc import Callable

from homestay.application.exceptions import InvalidRangeError
from homestay.application.utils.date_keys import to_key
from homestay.domain.entities.availability import AvailabilityResult, UnavailableReason
from homestay.domain.entities.interval import Interval
from homestay.domain.entities.selection_state import SelectionState, SelectionStatus

DatePredicate = Callable[[str], bool]
RangeVeto = Callable[[Interval], AvailabilityResult]


class RangeSelectionMachine:
    """Turn single-day clicks into a committed check-in/checkout range.

    EMPTY -> START_ONLY on the first valid click, START_ONLY -> COMPLETE on a
    later day, and any click on a COMPLETE range starts a fresh one.
    Blocked days are ignored in every state; a day whose night is taken
    can end a stay but not start one.
    """

    def __init__(
        self,
        is_blocked: DatePredicate | None = None,
        can_check_in: DatePredicate | None = None,
        veto: RangeVeto | None = None,
        initial: SelectionState | None = None,
    ) -> None:
        self._is_blocked = is_blocked or (lambda _date: False)
        self._can_check_in = can_check_in or (lambda _date: True)
        self._veto = veto
        self._state = SelectionState()
        self._last_rejection: UnavailableReason | None = None
        self._logger = logging.getLogger(__name__)
        if initial is not None and initial.start is not None:
            self.seed(initial.start, initial.end)

    @property
    def state(self) -> SelectionState:
        return self._state

    @property
    def status(self) -> SelectionStatus:
        return self._state.status

    @property
    def last_rejection(self) -> UnavailableReason | None:
        """Reason the last completing click was vetoed, if it was."""
        return self._last_rejection

    def select_date(self, date: str) -> SelectionState:
        key = to_key(date)
        self._last_rejection = None

        if self._is_blocked(key):
            return self._state

        status = self._state.status
        if status is SelectionStatus.start_only and key > self._state.start:
            return self._complete(Interval(start=self._state.start, end=key))

        # EMPTY, a click on or before the start, or a third click: start over
        return self._restart(key)

    def select_check_in(self, date: str) -> SelectionState:
        """Set the check-in day, keeping the checkout only if it is still after it."""
        key = to_key(date)
        self._last_rejection = None
        if self._is_blocked(key) or not self._can_check_in(key):
            return self._state
        end = self._state.end
        if end is not None and end > key:
            return self._complete(Interval(start=key, end=end), fallback=SelectionState(start=key))
        self._state = SelectionState(start=key)
        return self._state

    def select_check_out(self, date: str) -> SelectionState:
        """Set the checkout day; without an earlier check-in the click becomes the new start."""
        key = to_key(date)
        self._last_rejection = None
        start = self._state.start
        if start is None or key <= start:
            return self.select_date(key) if start is None else self._restart(key)
        # the checkout day itself is free, so a blocked checkout day is allowed here
        return self._complete(Interval(start=start, end=key))

    def seed(self, start: str, end: str | None = None) -> SelectionState:
        """Load an existing selection, e.g. when modifying a booking."""
        start_key = to_key(start)
        end_key = to_key(end) if end is not None else None
        if end_key is not None and end_key <= start_key:
            raise InvalidRangeError(f"Selection must end after it starts: {start_key} -> {end_key}")
        self._state = SelectionState(start=start_key, end=end_key)
        self._last_rejection = None
        return self._state

    def clear(self) -> SelectionState:
        self._state = SelectionState()
        self._last_rejection = None
        return self._state

    def _restart(self, key: str) -> SelectionState:
        if self._is_blocked(key) or not self._can_check_in(key):
            return self._state
        self._state = SelectionState(start=key)
        return self._state

    def _complete(self, stay: Interval, fallback: SelectionState | None = None) -> SelectionState:
        if self._veto is not None:
            verdict = self._veto(stay)
            if not verdict.bookable:
                self._last_rejection = verdict.reason
                self._logger.info(
                    "Range selection vetoed",
                    extra={"range": stay.key, "reason": verdict.reason.value if verdict.reason else None},
                )
                if fallback is not None:
                    self._state = fallback
                return self._state
        self._state = SelectionState(start=stay.start, end=stay.end)
        return self._state
