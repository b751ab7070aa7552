class BookingEngineError(RuntimeError):
    """Base class for availability and booking engine failures."""
    pass


class InvalidRangeError(BookingEngineError, ValueError):
    """Raised for malformed, zero-length or reversed date ranges (caller bug, never retried)."""
    pass


class UnavailableError(BookingEngineError):
    """Raised when a stay conflicts with booked or blocked dates."""

    def __init__(self, reason: str, conflicting_dates: list[str] | None = None) -> None:
        self.reason = reason
        self.conflicting_dates = list(conflicting_dates or [])
        message = f"Range is not bookable: {reason}"
        if self.conflicting_dates:
            message += f" ({', '.join(self.conflicting_dates)})"
        super().__init__(message)


class StaleDataError(BookingEngineError):
    """Raised when availability data is too old (or not loaded) for a booking commit."""

    def __init__(self, message: str, age_seconds: float | None = None) -> None:
        self.age_seconds = age_seconds
        super().__init__(message)


class UpstreamFetchError(BookingEngineError):
    """Raised when the booking/rate store fails (timeouts, network errors, bad payloads)."""
    pass
