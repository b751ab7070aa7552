import logging

from fastapi import APIRouter, Depends, HTTPException, Query

from homestay.api.v1.schemas import (
    AvailabilityRequestSchema,
    AvailabilityResponseSchema,
    BookingChangedResponseSchema,
    CalendarResponseSchema,
    ChargeSchema,
    DayCellSchema,
    NightlyRateSchema,
    QuoteRequestSchema,
    QuoteResponseSchema,
    RangeSchema,
    SelectionSchema,
    SelectMode,
    SelectRequestSchema,
)
from homestay.application.exceptions import (
    InvalidRangeError,
    StaleDataError,
    UnavailableError,
    UpstreamFetchError,
)
from homestay.application.ports.session_store import SessionStorePort
from homestay.application.use_cases.availability import describe_reason
from homestay.application.use_cases.booking_session import BookingSession
from homestay.domain.entities.availability import AvailabilityResult
from homestay.domain.entities.interval import Interval
from homestay.domain.entities.pricing import DiscountCode, PricingAdjustments, TaxRule
from homestay.infrastructure.cache.availability_cache import AvailabilityCache
from homestay.wiring.dependencies import get_availability_cache, get_session_store, on_booking_changed

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/rooms/{room_id}/calendar", response_model=CalendarResponseSchema)
async def calendar(
    room_id: str,
    month: str | None = Query(None, pattern=r"^\d{4}-\d{2}$"),
    session_id: str | None = None,
    sessions: SessionStorePort = Depends(get_session_store),
):
    session_id, session = sessions.get_or_create(session_id, room_id)
    try:
        days = await session.get_calendar_days(month)
    except InvalidRangeError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except UpstreamFetchError as e:
        raise HTTPException(status_code=502, detail=str(e))

    return CalendarResponseSchema(
        session_id=session_id,
        month=session.displayed_month or month or "",
        days=[DayCellSchema(**vars(day)) for day in days],
    )


@router.post("/rooms/{room_id}/selection", response_model=SelectionSchema)
def select(
    room_id: str,
    req: SelectRequestSchema,
    sessions: SessionStorePort = Depends(get_session_store),
):
    session_id, session = sessions.get_or_create(req.session_id, room_id)
    try:
        if req.mode is SelectMode.check_in:
            session.select_check_in(req.date)
        elif req.mode is SelectMode.check_out:
            session.select_check_out(req.date)
        else:
            session.select(req.date)
    except InvalidRangeError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _selection(session_id, session)


@router.delete("/rooms/{room_id}/selection", response_model=SelectionSchema)
def clear_selection(
    room_id: str,
    session_id: str | None = None,
    sessions: SessionStorePort = Depends(get_session_store),
):
    session_id, session = sessions.get_or_create(session_id, room_id)
    session.clear_selection()
    return _selection(session_id, session)


@router.post("/rooms/{room_id}/availability", response_model=AvailabilityResponseSchema)
async def check_availability(
    room_id: str,
    req: AvailabilityRequestSchema,
    sessions: SessionStorePort = Depends(get_session_store),
):
    _, session = sessions.get_or_create(req.session_id, room_id)
    try:
        result = await session.check_availability(_interval(req.range))
    except InvalidRangeError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except UpstreamFetchError as e:
        raise HTTPException(status_code=502, detail=str(e))
    return _availability(result)


@router.post("/rooms/{room_id}/validate", response_model=AvailabilityResponseSchema)
async def validate_for_booking(
    room_id: str,
    req: AvailabilityRequestSchema,
    sessions: SessionStorePort = Depends(get_session_store),
):
    _, session = sessions.get_or_create(req.session_id, room_id)
    try:
        result = await session.validate_for_booking(_interval(req.range))
    except InvalidRangeError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except UnavailableError as e:
        raise HTTPException(
            status_code=409,
            detail={"reason": e.reason, "hint": describe_reason(e.reason), "conflicting_dates": e.conflicting_dates},
        )
    except StaleDataError as e:
        raise HTTPException(status_code=503, detail=str(e))
    except UpstreamFetchError as e:
        raise HTTPException(status_code=502, detail=str(e))
    return _availability(result)


@router.post("/rooms/{room_id}/quote", response_model=QuoteResponseSchema)
async def quote(
    room_id: str,
    req: QuoteRequestSchema,
    sessions: SessionStorePort = Depends(get_session_store),
):
    _, session = sessions.get_or_create(req.session_id, room_id)
    adjustments = PricingAdjustments(
        tax_amount=req.tax_amount,
        discount_amount=req.discount_amount,
        tax_rules=tuple(TaxRule(**r.model_dump()) for r in req.tax_rules),
        discount_codes=tuple(DiscountCode(**c.model_dump()) for c in req.discount_codes),
    )
    try:
        result = await session.quote(_interval(req.range), adjustments)
    except InvalidRangeError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except UpstreamFetchError as e:
        raise HTTPException(status_code=502, detail=str(e))

    return QuoteResponseSchema(
        nights=result.nights,
        nightly_breakdown=[
            NightlyRateSchema(date=n.date, price=n.price, kind=n.kind, season=n.season) for n in result.nightly_breakdown
        ],
        base_amount=result.base_amount,
        tax_amount=result.tax_amount,
        discount_amount=result.discount_amount,
        final_amount=result.final_amount,
        applied_taxes=[ChargeSchema(name=c.name, amount=c.amount) for c in result.applied_taxes],
        applied_discounts=[ChargeSchema(name=c.name, amount=c.amount) for c in result.applied_discounts],
    )


@router.post("/rooms/{room_id}/booking-changed", response_model=BookingChangedResponseSchema)
def booking_changed(
    room_id: str,
    sessions: SessionStorePort = Depends(get_session_store),
    cache: AvailabilityCache = Depends(get_availability_cache),
):
    dropped = on_booking_changed(room_id, cache=cache, sessions=sessions)
    logger.info("Booking change received", extra={"room_id": room_id})
    return BookingChangedResponseSchema(room_id=room_id, invalidated=dropped)


def _interval(schema: RangeSchema | None) -> Interval | None:
    if schema is None:
        return None
    return Interval(start=schema.start, end=schema.end)


def _selection(session_id: str, session: BookingSession) -> SelectionSchema:
    state = session.selection
    rejection = session.last_rejection
    return SelectionSchema(
        session_id=session_id,
        start=state.start,
        end=state.end,
        status=state.status.value,
        rejection=rejection.value if rejection else None,
    )


def _availability(result: AvailabilityResult) -> AvailabilityResponseSchema:
    reason = result.reason.value if result.reason else None
    return AvailabilityResponseSchema(
        bookable=result.bookable,
        reason=reason,
        hint=describe_reason(result.reason) or None,
        conflicting_dates=result.conflicting_dates,
    )
