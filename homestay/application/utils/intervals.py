from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from homestay.application.exceptions import InvalidRangeError
from homestay.application.utils.date_keys import is_valid_key, parse_key, to_key
from homestay.domain.entities.interval import Interval

logger = logging.getLogger(__name__)

_START_FIELDS = ("start", "check_in_date", "startDate")
_END_FIELDS = ("end", "check_out_date", "endDate")


def make_interval(start: str, end: str) -> Interval:
    """Build a validated half-open interval. Raises InvalidRangeError if empty or reversed."""
    start_key = to_key(start)
    end_key = to_key(end)
    interval = Interval(start=start_key, end=end_key)
    if not interval.is_valid:
        raise InvalidRangeError(f"Interval must end after it starts: [{start_key}, {end_key})")
    return interval


def covers_date(intervals: Iterable[Interval], date: str) -> bool:
    """True if date falls in [start, end) of any interval; checkout days are free."""
    return any(interval.start <= date < interval.end for interval in intervals)


def overlaps(a: Interval, b: Interval) -> bool:
    return a.start < b.end and b.start < a.end


def merge(intervals: Iterable[Interval]) -> list[Interval]:
    """Sort by start and coalesce touching or overlapping intervals."""
    ordered = sorted(i for i in intervals if i.is_valid)
    merged: list[Interval] = []
    for interval in ordered:
        if merged and interval.start <= merged[-1].end:
            last = merged[-1]
            if interval.end > last.end:
                merged[-1] = Interval(start=last.start, end=interval.end)
            continue
        merged.append(interval)
    return merged


def coerce_intervals(raw: Iterable[Any] | None) -> list[Interval]:
    """Turn fetched booking entries into valid intervals, skipping malformed ones."""
    intervals: list[Interval] = []
    for entry in raw or []:
        start, end = _interval_bounds(entry)
        if not (is_valid_key(start) and is_valid_key(end)):
            logger.warning("Skipping malformed booked interval", extra={"error": repr(entry)})
            continue
        interval = Interval(start=start, end=end)
        if not interval.is_valid:
            logger.warning("Skipping empty booked interval", extra={"error": repr(entry)})
            continue
        intervals.append(interval)
    return intervals


def coerce_dates(raw: Iterable[Any] | None) -> frozenset[str]:
    """Turn fetched blocked-date entries into DateKeys, skipping malformed ones."""
    dates: set[str] = set()
    for entry in raw or []:
        key = _date_value(entry)
        if key is None:
            logger.warning("Skipping malformed blocked date", extra={"error": repr(entry)})
            continue
        dates.add(key)
    return frozenset(dates)


def _interval_bounds(entry: Any) -> tuple[Any, Any]:
    if isinstance(entry, Interval):
        return entry.start, entry.end
    if isinstance(entry, Mapping):
        start = next((entry[f] for f in _START_FIELDS if entry.get(f)), None)
        end = next((entry[f] for f in _END_FIELDS if entry.get(f)), None)
        return _date_value(start), _date_value(end)
    if isinstance(entry, (tuple, list)) and len(entry) == 2:
        return _date_value(entry[0]), _date_value(entry[1])
    return None, None


def _date_value(value: Any) -> str | None:
    if isinstance(value, str):
        # API payloads sometimes carry full timestamps; keep the calendar part only
        candidate = value[:10]
        return candidate if is_valid_key(candidate) else None
    if value is None:
        return None
    try:
        key = to_key(value)
        parse_key(key)
        return key
    except InvalidRangeError:
        return None
