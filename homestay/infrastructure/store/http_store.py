from __future__ import annotations

import logging
from typing import Any

import httpx

from homestay.application.exceptions import UpstreamFetchError
from homestay.application.ports.booking_store import BookingStorePort
from homestay.application.utils.date_keys import to_key
from homestay.application.utils.intervals import coerce_dates, coerce_intervals
from homestay.core.config import settings
from homestay.domain.entities.interval import Interval
from homestay.domain.entities.rate_rule import RateRule, SeasonalRule


class HttpBookingStore(BookingStorePort):
    """Booking/rate store backed by the homestay REST API."""

    def __init__(
        self,
        base_url: str | None = None,
        api_token: str | None = None,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._base_url = (base_url or settings.BOOKING_API_BASE_URL or "").rstrip("/")
        self._api_token = api_token or settings.BOOKING_API_TOKEN
        self._client = client or httpx.AsyncClient(timeout=timeout or settings.BOOKING_API_TIMEOUT_SECONDS)
        self._logger = logging.getLogger(__name__)

        if not self._base_url:
            raise ValueError("BOOKING_API_BASE_URL is required for the HTTP booking store")

    async def fetch_booked_intervals(self, room_id: str, start: str, end: str) -> list[Interval]:
        data = await self._get(f"/rooms/{room_id}/booked-dates", {"start_date": start, "end_date": end})
        return coerce_intervals(data.get("booked_ranges", []))

    async def fetch_blocked_dates(self, room_id: str, start: str, end: str) -> frozenset[str]:
        data = await self._get(f"/rooms/{room_id}/blocked-dates", {"start_date": start, "end_date": end})
        return coerce_dates(data.get("blocked_dates", []))

    async def fetch_rate_rule(self, room_id: str) -> RateRule:
        data = await self._get(f"/rooms/{room_id}")
        room = data.get("room", data)
        try:
            return RateRule(
                base_price=float(room["price_per_night"]),
                weekend_price=_optional_price(room.get("weekend_price")),
                holiday_price=_optional_price(room.get("holiday_price")),
                minimum_stay=int(room.get("minimum_stay") or 1),
                seasonal_rules=self._seasonal_rules(room.get("seasonal_pricing") or data.get("seasonal_pricing") or []),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise UpstreamFetchError(f"Invalid rate data for room {room_id}: {e}") from e

    async def fetch_holiday_dates(self) -> frozenset[str]:
        data = await self._get("/holidays")
        return coerce_dates(data.get("holidays", []))

    def _seasonal_rules(self, raw: list[Any]) -> tuple[SeasonalRule, ...]:
        rules: list[SeasonalRule] = []
        for entry in raw:
            try:
                rules.append(
                    SeasonalRule(
                        name=str(entry.get("season_name") or entry.get("name") or "season"),
                        start_date=to_key(str(entry["start_date"])[:10]),
                        end_date=to_key(str(entry["end_date"])[:10]),
                        multiplier=float(entry.get("multiplier", 1.0)),
                        priority=int(entry.get("priority") or 0),
                        status=str(entry.get("status") or "active"),
                    )
                )
            except (AttributeError, KeyError, TypeError, ValueError) as e:
                self._logger.warning("Skipping malformed seasonal rule", extra={"error": f"{entry!r}: {e}"})
        return tuple(rules)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _get(self, path: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        url = f"{self._base_url}{path}"
        headers = {"Authorization": f"Bearer {self._api_token}"} if self._api_token else {}
        try:
            response = await self._client.get(url, params=params, headers=headers)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPError as e:
            self._logger.error("Booking API request failed", extra={"error": str(e), "path": path})
            raise UpstreamFetchError(f"Booking API request to {path} failed: {e}") from e
        except ValueError as e:
            self._logger.error("Booking API returned invalid JSON", extra={"error": str(e), "path": path})
            raise UpstreamFetchError(f"Booking API returned invalid JSON for {path}") from e

        # responses are wrapped as {"success": ..., "data": {...}, "message": ...}
        data = payload.get("data", payload) if isinstance(payload, dict) else None
        if not isinstance(data, dict):
            raise UpstreamFetchError(f"Unexpected Booking API payload for {path}")
        return data


def _optional_price(value: Any) -> float | None:
    if value in (None, ""):
        return None
    return float(value)
