from __future__ import annotations

import uuid
from collections.abc import Callable

from homestay.application.ports.session_store import SessionStorePort
from homestay.application.use_cases.booking_session import BookingSession

SessionFactory = Callable[[str], BookingSession]


class MemorySessionStore(SessionStorePort):
    def __init__(self, factory: SessionFactory, max_sessions: int = 1000) -> None:
        self._factory = factory
        self._sessions: dict[str, BookingSession] = {}
        self._max_sessions = max_sessions

    def get_or_create(self, session_id: str | None, room_id: str) -> tuple[str, BookingSession]:
        if session_id:
            session = self._sessions.get(session_id)
            if session is not None and session.room_id == room_id:
                return session_id, session

        session_id = session_id or uuid.uuid4().hex
        session = self._factory(room_id)
        self._sessions[session_id] = session
        if len(self._sessions) > self._max_sessions:
            # dicts keep insertion order: drop the oldest session
            oldest = next(iter(self._sessions))
            del self._sessions[oldest]
        return session_id, session

    def get(self, session_id: str) -> BookingSession | None:
        return self._sessions.get(session_id)

    def drop(self, session_id: str) -> None:
        self._sessions.pop(session_id, None)

    def sessions_for_room(self, room_id: str) -> list[BookingSession]:
        return [s for s in self._sessions.values() if s.room_id == room_id]
