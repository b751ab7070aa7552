#!/usr/bin/env python3
"""
Interactive local availability harness (no HTTP, no booking API).

Usage:
  python3 scripts/browse_local.py

What it does:
- Seeds an in-memory store with one room, a few bookings and a holiday
- Renders the month grid the same way the API builds it
- Lets you click dates, check availability, quote and book the selection
"""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from homestay.application.exceptions import BookingEngineError
from homestay.application.use_cases.availability import describe_reason
from homestay.application.use_cases.booking_session import BookingSession
from homestay.application.utils.date_keys import add_days, today_key
from homestay.domain.entities.day_cell import DayCell
from homestay.domain.entities.rate_rule import RateRule
from homestay.infrastructure.cache.availability_cache import AvailabilityCache
from homestay.infrastructure.store.memory_store import MemoryBookingStore

ROOM_ID = "101"


def _seed_store() -> MemoryBookingStore:
    today = today_key()
    store = MemoryBookingStore(
        rates={ROOM_ID: RateRule(base_price=500000, weekend_price=700000, holiday_price=900000, minimum_stay=1)},
        holidays={add_days(today, 20)},
    )
    store.add_booking(ROOM_ID, add_days(today, 3), add_days(today, 6))
    store.add_booking(ROOM_ID, add_days(today, 10), add_days(today, 12), status="pending")
    store.block_date(ROOM_ID, add_days(today, 15))
    return store


def _cell(day: DayCell) -> str:
    label = day.date[8:]
    if not day.is_current_month:
        return f" {label} "
    if day.is_range_start or day.is_range_end:
        return f"[{label}]"
    if day.is_in_range:
        return f"<{label}>"
    if day.is_booked:
        return " xx "
    if day.is_blocked:
        return " -- "
    return f" {label} "


def _print_grid(month: str, days: list[DayCell]) -> None:
    print(f"\n{month}")
    print("  ".join(f" {name}" for name in ("Su", "Mo", "Tu", "We", "Th", "Fr", "Sa")))
    for week in range(6):
        print(" ".join(_cell(d) for d in days[week * 7 : week * 7 + 7]))
    print("legend: xx booked, -- blocked/past, [dd] selected endpoint, <dd> in range")


def _print_help() -> None:
    print("Commands: next, prev, click YYYY-MM-DD, clear, check, quote, book, help, quit")


async def _run() -> None:
    store = _seed_store()
    cache = AvailabilityCache(month_ttl=600, range_ttl=120)
    session = BookingSession(room_id=ROOM_ID, store=store, cache=cache)
    store.subscribe(session.on_booking_changed)

    _print_help()
    days = await session.get_calendar_days()
    _print_grid(session.displayed_month or "", days)

    while True:
        try:
            line = input("> ").strip()
        except (EOFError, KeyboardInterrupt):
            print()
            return
        if not line:
            continue
        command, _, arg = line.partition(" ")
        try:
            if command in ("quit", "exit"):
                return
            if command == "help":
                _print_help()
            elif command in ("next", "prev"):
                days = await session.navigate(command)
                _print_grid(session.displayed_month or "", days)
            elif command == "click":
                state = session.select(arg.strip())
                print(f"selection: {state.start} -> {state.end} ({state.status.value})")
                if session.last_rejection:
                    print(f"rejected: {describe_reason(session.last_rejection)}")
                _print_grid(session.displayed_month or "", session.calendar_days)
            elif command == "clear":
                session.clear_selection()
                _print_grid(session.displayed_month or "", session.calendar_days)
            elif command == "check":
                result = await session.check_availability()
                print(f"bookable={result.bookable} reason={result.reason.value if result.reason else None}")
            elif command == "quote":
                result = await session.quote()
                for night in result.nightly_breakdown:
                    print(f"  {night.date} {night.kind:<8} {night.price:>12,.0f}")
                print(f"  nights={result.nights} total={result.final_amount:,.0f}")
            elif command == "book":
                await session.validate_for_booking()
                state = session.selection
                booking_id = store.add_booking(ROOM_ID, state.start, state.end)
                print(f"booked {booking_id}")
                session.clear_selection()
                days = await session.get_calendar_days()
                _print_grid(session.displayed_month or "", days)
            else:
                print(f"Unknown command: {command}")
        except BookingEngineError as e:
            print(f"error: {e}")


def main() -> None:
    asyncio.run(_run())


if __name__ == "__main__":
    main()
