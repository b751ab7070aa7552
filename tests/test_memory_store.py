"""
Tests for the in-process booking store used in dev and tests.
"""

from __future__ import annotations

import asyncio

import pytest

from homestay.application.exceptions import UpstreamFetchError
from homestay.domain.entities.interval import Interval
from homestay.domain.entities.rate_rule import RateRule
from homestay.infrastructure.store.memory_store import MemoryBookingStore


def test_booking_ids_are_not_reused_after_cancel():
    """Test that a booking made after a cancellation never takes a live booking's id."""
    store = MemoryBookingStore()
    first = store.add_booking("101", "2030-01-01", "2030-01-03")
    second = store.add_booking("101", "2030-02-01", "2030-02-03")
    assert store.cancel_booking(first) is True
    third = store.add_booking("101", "2030-03-01", "2030-03-03")

    assert len({first, second, third}) == 3
    intervals = asyncio.run(store.fetch_booked_intervals("101", "2030-01-01", "2030-04-01"))
    assert sorted(intervals) == [Interval("2030-02-01", "2030-02-03"), Interval("2030-03-01", "2030-03-03")]


def test_cancel_unknown_booking_returns_false():
    """Test that cancelling an unknown id is reported rather than raised."""
    assert MemoryBookingStore().cancel_booking("booking_99") is False


def test_only_active_statuses_occupy_nights():
    """Test that cancelled-style statuses are not returned as booked."""
    store = MemoryBookingStore()
    store.add_booking("101", "2030-01-01", "2030-01-03", status="pending")
    store.add_booking("101", "2030-01-05", "2030-01-07", status="cancelled")
    store.add_booking("102", "2030-01-01", "2030-01-03")

    intervals = asyncio.run(store.fetch_booked_intervals("101", "2030-01-01", "2030-02-01"))
    assert intervals == [Interval("2030-01-01", "2030-01-03")]


def test_mutations_notify_listeners():
    """Test that add, cancel and block each notify subscribers with the room id."""
    store = MemoryBookingStore()
    seen: list[str] = []
    store.subscribe(seen.append)

    booking_id = store.add_booking("101", "2030-01-01", "2030-01-03")
    store.cancel_booking(booking_id)
    store.block_date("102", "2030-01-10")
    assert seen == ["101", "101", "102"]


def test_missing_rate_rule_and_outage_raise_upstream_errors():
    """Test that an unknown room's rates and a simulated outage both raise UpstreamFetchError."""
    store = MemoryBookingStore(rates={"101": RateRule(base_price=100)})
    with pytest.raises(UpstreamFetchError):
        asyncio.run(store.fetch_rate_rule("102"))

    store.set_failing(True)
    with pytest.raises(UpstreamFetchError):
        asyncio.run(store.fetch_rate_rule("101"))
