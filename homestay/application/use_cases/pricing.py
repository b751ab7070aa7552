from __future__ import annotations

import logging
from collections.abc import Iterable

from homestay.application.utils.date_keys import SATURDAY, is_valid_key, is_weekend, iter_nights
from homestay.domain.entities.interval import Interval
from homestay.domain.entities.pricing import (
    AppliedCharge,
    NightlyRate,
    PricingAdjustments,
    PricingResult,
)
from homestay.domain.entities.rate_rule import RateRule, SeasonalRule

logger = logging.getLogger(__name__)


def find_seasonal_rule(date: str, seasonal_rules: Iterable[SeasonalRule]) -> SeasonalRule | None:
    """Highest-priority active season covering date; earlier rules win ties."""
    for rule in sorted(seasonal_rules, key=lambda r: r.priority, reverse=True):
        if rule.is_active and rule.covers(date):
            return rule
    return None


def nightly_rate(
    date: str,
    rate_rule: RateRule,
    holiday_dates: frozenset[str] | set[str],
    weekend_days: Iterable[int] = (SATURDAY,),
    seasonal_rules: Iterable[SeasonalRule] | None = None,
) -> NightlyRate:
    """
    Price one night: holiday beats weekend beats base, each falling back to the next.

    A covering season then scales that rate. Base nights in a season are
    reported as "seasonal"; holiday and weekend nights keep their kind.
    """
    if date in holiday_dates:
        kind = "holiday"
        price = _first_set(rate_rule.holiday_price, rate_rule.weekend_price, rate_rule.base_price)
    elif is_weekend(date, tuple(weekend_days)):
        kind = "weekend"
        price = _first_set(rate_rule.weekend_price, rate_rule.base_price)
    else:
        kind = "base"
        price = rate_rule.base_price

    rules = rate_rule.seasonal_rules if seasonal_rules is None else seasonal_rules
    season = find_seasonal_rule(date, rules)
    if season is None:
        return NightlyRate(date=date, price=price, kind=kind)
    return NightlyRate(
        date=date,
        price=round(price * season.multiplier, 2),
        kind="seasonal" if kind == "base" else kind,
        season=season.name,
    )


def price(
    stay: Interval,
    rate_rule: RateRule,
    holiday_dates: Iterable[str] | None = None,
    weekend_days: Iterable[int] = (SATURDAY,),
    adjustments: PricingAdjustments | None = None,
    seasonal_rules: Iterable[SeasonalRule] | None = None,
) -> PricingResult:
    """
    Quote a stay night by night over [start, end).

    Seasons default to the ones carried by rate_rule. An empty or invalid
    range yields a zero-valued result; whether zero nights is acceptable is
    the caller's decision.
    """
    if not (is_valid_key(stay.start) and is_valid_key(stay.end)) or not stay.is_valid:
        return PricingResult()

    holidays = frozenset(holiday_dates or ())
    weekend = tuple(weekend_days)
    seasons = tuple(rate_rule.seasonal_rules if seasonal_rules is None else seasonal_rules)
    breakdown = [
        nightly_rate(night, rate_rule, holidays, weekend, seasons) for night in iter_nights(stay.start, stay.end)
    ]
    base_amount = sum(night.price for night in breakdown)

    adjustments = adjustments or PricingAdjustments()
    tax_amount, applied_taxes = _taxes(base_amount, adjustments)
    discount_amount, applied_discounts = _discounts(base_amount + tax_amount, adjustments)

    result = PricingResult(
        nights=len(breakdown),
        nightly_breakdown=breakdown,
        base_amount=base_amount,
        tax_amount=tax_amount,
        discount_amount=discount_amount,
        final_amount=base_amount + tax_amount - discount_amount,
        applied_taxes=applied_taxes,
        applied_discounts=applied_discounts,
    )
    logger.debug("Stay priced", extra={"range": stay.key, "nights": result.nights, "total": result.final_amount})
    return result


def _first_set(*values: float | None) -> float:
    for value in values:
        if value is not None:
            return value
    return 0


def _taxes(subtotal: float, adjustments: PricingAdjustments) -> tuple[float, list[AppliedCharge]]:
    if adjustments.tax_amount is not None:
        amount = max(0.0, adjustments.tax_amount)
        return amount, [AppliedCharge(name="external", amount=amount)]

    applied: list[AppliedCharge] = []
    for rule in adjustments.tax_rules:
        if not rule.enabled:
            continue
        if rule.tax_type == "percentage":
            amount = round(subtotal * rule.rate / 100, 2)
        else:
            amount = rule.rate
        applied.append(AppliedCharge(name=rule.name, amount=max(0.0, amount)))
    return sum(charge.amount for charge in applied), applied


def _discounts(total: float, adjustments: PricingAdjustments) -> tuple[float, list[AppliedCharge]]:
    if adjustments.discount_amount is not None:
        amount = min(max(0.0, adjustments.discount_amount), total)
        return amount, [AppliedCharge(name="external", amount=amount)]

    applied: list[AppliedCharge] = []
    remaining = total
    for code in adjustments.discount_codes:
        if not code.valid or total < code.min_order_amount:
            continue
        if code.discount_type == "percentage":
            amount = round(total * code.value / 100, 2)
            if code.max_amount is not None:
                amount = min(amount, code.max_amount)
        else:
            amount = code.value
        # never discount below zero
        amount = min(max(0.0, amount), remaining)
        remaining -= amount
        applied.append(AppliedCharge(name=code.code, amount=amount))
    return sum(charge.amount for charge in applied), applied
