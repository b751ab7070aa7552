from enum import Enum
from pydantic import BaseModel, Field

DATE_KEY = r"^\d{4}-\d{2}-\d{2}$"


class SelectMode(str, Enum):
    click = "click"
    check_in = "check_in"
    check_out = "check_out"


class DayCellSchema(BaseModel):
    date: str
    is_current_month: bool
    is_past: bool
    is_today: bool
    is_blocked: bool
    is_booked: bool
    is_available: bool
    is_range_start: bool
    is_range_end: bool
    is_in_range: bool


class CalendarResponseSchema(BaseModel):
    session_id: str
    month: str
    days: list[DayCellSchema]


class SelectRequestSchema(BaseModel):
    session_id: str | None = None
    date: str = Field(pattern=DATE_KEY)
    mode: SelectMode = SelectMode.click


class SelectionSchema(BaseModel):
    session_id: str
    start: str | None = None
    end: str | None = None
    status: str
    rejection: str | None = None


class RangeSchema(BaseModel):
    start: str = Field(pattern=DATE_KEY)
    end: str = Field(pattern=DATE_KEY)


class AvailabilityRequestSchema(BaseModel):
    session_id: str | None = None
    range: RangeSchema | None = None  # defaults to the session's selection


class AvailabilityResponseSchema(BaseModel):
    bookable: bool
    reason: str | None = None
    hint: str | None = None
    conflicting_dates: list[str] = Field(default_factory=list)


class TaxRuleSchema(BaseModel):
    name: str
    rate: float = Field(ge=0)
    tax_type: str = "percentage"
    enabled: bool = True


class DiscountCodeSchema(BaseModel):
    code: str
    value: float = Field(ge=0)
    discount_type: str = "percentage"
    max_amount: float | None = None
    min_order_amount: float = 0.0
    valid: bool = True


class QuoteRequestSchema(BaseModel):
    session_id: str | None = None
    range: RangeSchema | None = None
    tax_amount: float | None = Field(default=None, ge=0)
    discount_amount: float | None = Field(default=None, ge=0)
    tax_rules: list[TaxRuleSchema] = Field(default_factory=list)
    discount_codes: list[DiscountCodeSchema] = Field(default_factory=list)


class NightlyRateSchema(BaseModel):
    date: str
    price: float
    kind: str
    season: str | None = None


class ChargeSchema(BaseModel):
    name: str
    amount: float


class QuoteResponseSchema(BaseModel):
    nights: int
    nightly_breakdown: list[NightlyRateSchema]
    base_amount: float
    tax_amount: float
    discount_amount: float
    final_amount: float
    applied_taxes: list[ChargeSchema] = Field(default_factory=list)
    applied_discounts: list[ChargeSchema] = Field(default_factory=list)


class BookingChangedResponseSchema(BaseModel):
    room_id: str
    invalidated: int
