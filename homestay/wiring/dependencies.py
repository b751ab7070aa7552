from functools import lru_cache
import logging
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from homestay.core.config import settings
from homestay.application.ports.booking_store import BookingStorePort
from homestay.application.ports.session_store import SessionStorePort
from homestay.application.use_cases.booking_session import BookingSession
from homestay.infrastructure.cache.availability_cache import AvailabilityCache
from homestay.infrastructure.store.http_store import HttpBookingStore
from homestay.infrastructure.store.memory_store import MemoryBookingStore
from homestay.infrastructure.store.session_store import MemorySessionStore


@lru_cache
def get_booking_store() -> BookingStorePort:
    logger = logging.getLogger(__name__)
    if settings.STORE_PROVIDER.lower() == "http" and settings.BOOKING_API_BASE_URL:
        logger.info("Using HttpBookingStore", extra={"base_url": settings.BOOKING_API_BASE_URL})
        return HttpBookingStore()

    if settings.ENV.lower() not in {"dev", "local", "test"}:
        raise ValueError("BOOKING_API_BASE_URL and STORE_PROVIDER=http are required outside dev/local.")

    logger.info("Using MemoryBookingStore (ENV=%s)", settings.ENV)
    store = MemoryBookingStore()
    store.subscribe(on_booking_changed)
    return store


@lru_cache
def get_availability_cache() -> AvailabilityCache:
    return AvailabilityCache(
        month_ttl=settings.MONTH_CACHE_TTL_SECONDS,
        range_ttl=settings.RANGE_CACHE_TTL_SECONDS,
    )


def get_timezone() -> ZoneInfo:
    try:
        return ZoneInfo(settings.BUSINESS_TIMEZONE)
    except (ZoneInfoNotFoundError, ValueError):
        logging.getLogger(__name__).warning("Unknown timezone, falling back to UTC", extra={"tz": settings.BUSINESS_TIMEZONE})
        return ZoneInfo("UTC")


def build_booking_session(room_id: str) -> BookingSession:
    return BookingSession(
        room_id=room_id,
        store=get_booking_store(),
        cache=get_availability_cache(),
        timezone=get_timezone(),
        default_minimum_stay=settings.DEFAULT_MINIMUM_STAY,
        weekend_days=tuple(settings.WEEKEND_DAYS),
        commit_max_age=settings.BOOKING_COMMIT_MAX_AGE_SECONDS,
        reference_ttl=settings.HOLIDAY_CACHE_TTL_SECONDS,
    )


@lru_cache
def get_session_store() -> SessionStorePort:
    return MemorySessionStore(factory=build_booking_session)


def on_booking_changed(
    room_id: str,
    cache: AvailabilityCache | None = None,
    sessions: SessionStorePort | None = None,
) -> int:
    """Mutation hook: a booking for room_id was created or cancelled."""
    if cache is None:
        cache = get_availability_cache()
    if sessions is None:
        sessions = get_session_store()
    dropped = cache.invalidate(room_id)
    for session in sessions.sessions_for_room(room_id):
        session.forget_room_data()
    return dropped


def get_container() -> dict[str, object]:
    return {
        "store": get_booking_store(),
        "cache": get_availability_cache(),
        "sessions": get_session_store(),
    }
