from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class SeasonalRule:
    """Nightly rate multiplier for a season; both start_date and end_date are priced by it."""

    name: str
    start_date: str  # DateKey, inclusive
    end_date: str  # DateKey, inclusive
    multiplier: float = 1.0
    priority: int = 1  # higher wins when seasons overlap
    status: str = "active"

    def __post_init__(self) -> None:
        if self.multiplier < 0:
            raise ValueError(f"multiplier must be non-negative, got {self.multiplier}")
        if self.end_date < self.start_date:
            raise ValueError(f"Season {self.name!r} ends before it starts: {self.start_date} > {self.end_date}")

    @property
    def is_active(self) -> bool:
        return self.status == "active"

    def covers(self, date: str) -> bool:
        return self.start_date <= date <= self.end_date


@dataclass(frozen=True)
class RateRule:
    base_price: float
    weekend_price: float | None = None
    holiday_price: float | None = None
    minimum_stay: int = 1
    seasonal_rules: tuple[SeasonalRule, ...] = ()

    def __post_init__(self) -> None:
        for name in ("base_price", "weekend_price", "holiday_price"):
            value = getattr(self, name)
            if value is not None and value < 0:
                raise ValueError(f"{name} must be non-negative, got {value}")
        if self.minimum_stay < 1:
            raise ValueError(f"minimum_stay must be at least 1, got {self.minimum_stay}")
