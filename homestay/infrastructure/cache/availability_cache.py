from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, NamedTuple

from homestay.application.exceptions import StaleDataError


class CacheKey(NamedTuple):
    room_id: str
    kind: str  # "month", "range", "holidays"
    key: str  # MonthKey, interval key, ...


@dataclass(frozen=True)
class CacheEntry:
    value: Any
    fetched_at: float
    expires_at: float


@dataclass
class CacheStats:
    hits: int = 0
    misses: int = 0
    loads: int = 0
    invalidations: int = 0


class AvailabilityCache:
    """
    Time-bounded memoization of fetched availability data.

    Entries expire lazily: an expired entry is a miss on the next read, with
    no background refresh. invalidate(room_id) drops a room immediately and
    keeps loads started before it from writing their (possibly stale) result.
    Concurrent reads of the same key share one loader call, and a forced
    reload supersedes any load already in flight for that key.
    """

    def __init__(
        self,
        month_ttl: float = 600.0,
        range_ttl: float = 120.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._month_ttl = month_ttl
        self._range_ttl = range_ttl
        self._clock = clock
        self._entries: dict[CacheKey, CacheEntry] = {}
        self._in_flight: dict[CacheKey, asyncio.Future[Any]] = {}
        self._generation: dict[str, int] = {}
        self._tokens: dict[CacheKey, int] = {}  # newest load per key; older loads never store
        self.stats = CacheStats()
        self._logger = logging.getLogger(__name__)

    async def get_month(
        self,
        room_id: str,
        month: str,
        loader: Callable[[], Awaitable[Any]],
        force: bool = False,
    ) -> Any:
        return await self.get_or_load(CacheKey(room_id, "month", month), loader, self._month_ttl, force=force)

    async def get_range(
        self,
        room_id: str,
        range_key: str,
        loader: Callable[[], Awaitable[Any]],
        force: bool = False,
    ) -> Any:
        return await self.get_or_load(CacheKey(room_id, "range", range_key), loader, self._range_ttl, force=force)

    async def get_or_load(
        self,
        cache_key: CacheKey,
        loader: Callable[[], Awaitable[Any]],
        ttl: float,
        force: bool = False,
    ) -> Any:
        if force:
            self._entries.pop(cache_key, None)
            self._in_flight.pop(cache_key, None)
        else:
            entry = self._live_entry(cache_key)
            if entry is not None:
                self.stats.hits += 1
                return entry.value

        self.stats.misses += 1
        task = self._in_flight.get(cache_key)
        if task is None:
            generation = self._generation.get(cache_key.room_id, 0)
            token = self._next_token(cache_key)
            task = asyncio.ensure_future(self._load(cache_key, loader, ttl, generation, token))
            self._in_flight[cache_key] = task
            task.add_done_callback(lambda done: self._forget(cache_key, done))
        # shield so one cancelled caller does not cancel the shared load
        return await asyncio.shield(task)

    def peek(self, cache_key: CacheKey) -> Any | None:
        entry = self._live_entry(cache_key)
        return entry.value if entry is not None else None

    def age(self, cache_key: CacheKey) -> float | None:
        entry = self._live_entry(cache_key)
        if entry is None:
            return None
        return self._clock() - entry.fetched_at

    def require_fresh(self, cache_key: CacheKey, max_age: float) -> Any:
        """Return a cached value no older than max_age seconds, else raise StaleDataError."""
        entry = self._live_entry(cache_key)
        if entry is None:
            raise StaleDataError(f"No availability data loaded for {cache_key.kind} {cache_key.key}")
        age = self._clock() - entry.fetched_at
        if age > max_age:
            raise StaleDataError(
                f"Availability data for {cache_key.kind} {cache_key.key} is {age:.1f}s old",
                age_seconds=age,
            )
        return entry.value

    def invalidate(self, room_id: str) -> int:
        """Drop every entry for a room now, not just at expiry. Returns the number dropped."""
        self._generation[room_id] = self._generation.get(room_id, 0) + 1
        stale = [k for k in self._entries if k.room_id == room_id]
        for k in stale:
            del self._entries[k]
        for k in [k for k in self._in_flight if k.room_id == room_id]:
            del self._in_flight[k]
        self.stats.invalidations += 1
        self._logger.info("Availability cache invalidated", extra={"room_id": room_id, "dropped": len(stale)})
        return len(stale)

    def invalidate_key(self, cache_key: CacheKey) -> None:
        self._next_token(cache_key)
        self._entries.pop(cache_key, None)
        self._in_flight.pop(cache_key, None)

    def clear(self) -> None:
        for room_id in {k.room_id for k in self._entries} | {k.room_id for k in self._in_flight}:
            self._generation[room_id] = self._generation.get(room_id, 0) + 1
        self._entries.clear()
        self._in_flight.clear()

    def __len__(self) -> int:
        return sum(1 for k in list(self._entries) if self._live_entry(k) is not None)

    def _live_entry(self, cache_key: CacheKey) -> CacheEntry | None:
        entry = self._entries.get(cache_key)
        if entry is None:
            return None
        if self._clock() >= entry.expires_at:
            del self._entries[cache_key]
            return None
        return entry

    async def _load(
        self,
        cache_key: CacheKey,
        loader: Callable[[], Awaitable[Any]],
        ttl: float,
        generation: int,
        token: int,
    ) -> Any:
        self.stats.loads += 1
        value = await loader()
        if self._tokens.get(cache_key) != token:
            self._logger.info(
                "Discarding load superseded by a newer load",
                extra={"room_id": cache_key.room_id, "key": cache_key.key},
            )
            return value
        if self._generation.get(cache_key.room_id, 0) != generation:
            self._logger.info(
                "Discarding load superseded by invalidation",
                extra={"room_id": cache_key.room_id, "key": cache_key.key},
            )
            return value
        now = self._clock()
        self._entries[cache_key] = CacheEntry(value=value, fetched_at=now, expires_at=now + ttl)
        return value

    def _next_token(self, cache_key: CacheKey) -> int:
        token = self._tokens.get(cache_key, 0) + 1
        self._tokens[cache_key] = token
        return token

    def _forget(self, cache_key: CacheKey, task: asyncio.Future[Any]) -> None:
        if self._in_flight.get(cache_key) is task:
            del self._in_flight[cache_key]
        if not task.cancelled():
            # mark the exception as retrieved; awaiting callers re-raise it
            task.exception()
