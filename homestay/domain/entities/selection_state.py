from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class SelectionStatus(str, Enum):
    empty = "empty"
    start_only = "start_only"
    complete = "complete"


@dataclass(frozen=True)
class SelectionState:
    start: str | None = None  # DateKey
    end: str | None = None  # DateKey, only set together with start and after it

    @property
    def status(self) -> SelectionStatus:
        if self.start is None:
            return SelectionStatus.empty
        if self.end is None:
            return SelectionStatus.start_only
        return SelectionStatus.complete

    @property
    def is_complete(self) -> bool:
        return self.status is SelectionStatus.complete
