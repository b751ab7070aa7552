from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class NightlyRate:
    date: str  # DateKey of the night
    price: float
    kind: str = "base"  # "base", "weekend", "holiday", "seasonal"
    season: str | None = None  # name of the seasonal rule applied, if any


@dataclass(frozen=True)
class TaxRule:
    name: str
    rate: float
    tax_type: str = "percentage"  # "percentage", "fixed"
    enabled: bool = True


@dataclass(frozen=True)
class DiscountCode:
    code: str
    value: float
    discount_type: str = "percentage"  # "percentage", "fixed"
    max_amount: float | None = None
    min_order_amount: float = 0.0
    valid: bool = True


@dataclass(frozen=True)
class PricingAdjustments:
    """Tax and discount inputs supplied by the external pricing/discount service.

    Explicit amounts override the rule-based computation.
    """

    tax_amount: float | None = None
    discount_amount: float | None = None
    tax_rules: tuple[TaxRule, ...] = ()
    discount_codes: tuple[DiscountCode, ...] = ()


@dataclass(frozen=True)
class AppliedCharge:
    name: str
    amount: float


@dataclass(frozen=True)
class PricingResult:
    nights: int = 0
    nightly_breakdown: list[NightlyRate] = field(default_factory=list)
    base_amount: float = 0
    tax_amount: float = 0
    discount_amount: float = 0
    final_amount: float = 0
    applied_taxes: list[AppliedCharge] = field(default_factory=list)
    applied_discounts: list[AppliedCharge] = field(default_factory=list)
