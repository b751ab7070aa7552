from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from homestay.application.use_cases.booking_session import BookingSession


class SessionStorePort(ABC):
    @abstractmethod
    def get_or_create(self, session_id: str | None, room_id: str) -> tuple[str, "BookingSession"]:
        """Return (session_id, session), creating a fresh browsing session when unknown."""
        raise NotImplementedError

    @abstractmethod
    def get(self, session_id: str) -> "BookingSession | None":
        raise NotImplementedError

    @abstractmethod
    def drop(self, session_id: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def sessions_for_room(self, room_id: str) -> list["BookingSession"]:
        raise NotImplementedError
