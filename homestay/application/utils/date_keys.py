from __future__ import annotations

import re
from datetime import date, datetime, timedelta
from typing import Iterator
from zoneinfo import ZoneInfo

from homestay.application.exceptions import InvalidRangeError

DATE_KEY_PATTERN = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")
MONTH_KEY_PATTERN = re.compile(r"^(\d{4})-(\d{2})$")

SATURDAY = 5
SUNDAY = 6


def to_key(value: date | datetime | str) -> str:
    """Return the YYYY-MM-DD key of a calendar day.

    Datetimes contribute their own local year/month/day; they are never
    converted to UTC first, so 23:30 on the 14th in UTC+7 stays the 14th.
    """
    if isinstance(value, str):
        parse_key(value)
        return value
    if isinstance(value, (date, datetime)):
        return f"{value.year:04d}-{value.month:02d}-{value.day:02d}"
    raise InvalidRangeError(f"Cannot derive a date key from {value!r}")


def parse_key(key: str) -> date:
    """Parse a DateKey into a date. Raises InvalidRangeError for anything else."""
    if not isinstance(key, str):
        raise InvalidRangeError(f"Date key must be a string, got {key!r}")
    match = DATE_KEY_PATTERN.match(key)
    if not match:
        raise InvalidRangeError(f"Invalid date key: {key!r}")
    try:
        return date(int(match.group(1)), int(match.group(2)), int(match.group(3)))
    except ValueError as e:
        raise InvalidRangeError(f"Invalid date key: {key!r}") from e


def is_valid_key(key: object) -> bool:
    if not isinstance(key, str):
        return False
    try:
        parse_key(key)
    except InvalidRangeError:
        return False
    return True


def compare(a: str, b: str) -> int:
    # zero-padded keys sort lexicographically in calendar order
    if a < b:
        return -1
    if a > b:
        return 1
    return 0


def add_days(key: str, n: int) -> str:
    return to_key(parse_key(key) + timedelta(days=n))


def is_before(a: str, b: str) -> bool:
    return compare(a, b) < 0


def is_after(a: str, b: str) -> bool:
    return compare(a, b) > 0


def is_same_day(a: str, b: str) -> bool:
    return compare(a, b) == 0


def nights_between(start: str, end: str) -> int:
    """Number of nights in [start, end); negative when end precedes start."""
    return (parse_key(end) - parse_key(start)).days


def iter_nights(start: str, end: str) -> Iterator[str]:
    """Yield every occupied night in [start, end), checkout day excluded."""
    current = parse_key(start)
    stop = parse_key(end)
    while current < stop:
        yield to_key(current)
        current += timedelta(days=1)


def weekday(key: str) -> int:
    return parse_key(key).weekday()


def is_weekend(key: str, weekend_days: tuple[int, ...] | frozenset[int] = (SATURDAY,)) -> bool:
    return weekday(key) in weekend_days


def today_key(timezone: ZoneInfo | None = None) -> str:
    return to_key(datetime.now(timezone))


def month_key(value: date | datetime | str) -> str:
    """Return the YYYY-MM key of the month containing value (date, datetime, DateKey or MonthKey)."""
    if isinstance(value, str) and MONTH_KEY_PATTERN.match(value):
        parse_month_key(value)
        return value
    return to_key(value)[:7]


def parse_month_key(key: str) -> tuple[int, int]:
    match = MONTH_KEY_PATTERN.match(key) if isinstance(key, str) else None
    if not match:
        raise InvalidRangeError(f"Invalid month key: {key!r}")
    year, month = int(match.group(1)), int(match.group(2))
    if not 1 <= month <= 12:
        raise InvalidRangeError(f"Invalid month key: {key!r}")
    return year, month


def first_day_of_month(month: str) -> str:
    year, month_num = parse_month_key(month_key(month))
    return f"{year:04d}-{month_num:02d}-01"


def shift_month(month: str, n: int) -> str:
    year, month_num = parse_month_key(month_key(month))
    index = year * 12 + (month_num - 1) + n
    return f"{index // 12:04d}-{index % 12 + 1:02d}"


def month_window(month: str) -> tuple[str, str]:
    """Half-open [first day, first day of next month) window for a month."""
    key = month_key(month)
    return first_day_of_month(key), first_day_of_month(shift_month(key, 1))
