from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, order=True)
class Interval:
    """Half-open stay interval [start, end); the checkout day is not occupied."""

    start: str  # DateKey, check-in day
    end: str  # DateKey, checkout day (free)

    @property
    def is_valid(self) -> bool:
        return self.start < self.end

    @property
    def key(self) -> str:
        return f"{self.start}_{self.end}"
