"""Monetary Calculator.

Three parallel views are computed for every entry:
  earned  billable revenue   (earned_rate, hourly_rate, or EARNED amounts / hours)
  cost    internal cost      (cost_rate, or COST amounts / hours)
  profit  earned - cost      (always derived)

Direct rate fields are per hour in minor units (cents); typed amounts are in
major units. Everything returned here is per hour / per entry in major units
and unrounded.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Iterable

from overtime_tool.engine.numbers import safe_decimal, to_decimal
from overtime_tool.models import ZERO, Amount, AmountBreakdown, AmountDisplay, TimeEntry

CENTS = Decimal("100")
ONE = Decimal("1")


@dataclass(frozen=True)
class RateVector:
    earned: Decimal
    cost: Decimal

    @property
    def profit(self) -> Decimal:
        return self.earned - self.cost


def extract_rate(field: Any) -> Decimal:
    """Rate in cents from a number, numeric string, or {"amount": n}; 0 if absent."""
    if isinstance(field, dict):
        field = field.get("amount")
    return safe_decimal(field)


def sum_amounts(amounts: Iterable[Amount], amount_type: str) -> Decimal:
    wanted = amount_type.upper()
    total = ZERO
    for amount in amounts:
        if str(amount.type or "").strip().upper() != wanted:
            continue
        value = to_decimal(amount.value)
        if value is not None:
            total += value
    return total


def rate_from_amounts(amounts: Iterable[Amount], amount_type: str, duration: Decimal) -> Decimal:
    """Hourly rate in major units implied by the entry's typed amounts."""
    if duration <= 0:
        return ZERO
    return sum_amounts(amounts, amount_type) / duration


def extract_rates(entry: TimeEntry, duration: Decimal) -> RateVector:
    """Hourly earned/cost rates in major units; non-billable entries earn nothing."""
    if entry.is_billable:
        earned = extract_rate(entry.earned_rate) or extract_rate(entry.hourly_rate)
        earned = earned / CENTS if earned else rate_from_amounts(entry.amounts, "EARNED", duration)
    else:
        earned = ZERO

    cost = extract_rate(entry.cost_rate)
    cost = cost / CENTS if cost else rate_from_amounts(entry.amounts, "COST", duration)

    return RateVector(earned=earned, cost=cost)


def breakdown(
    rate: Decimal,
    regular: Decimal,
    overtime: Decimal,
    tier2_hours: Decimal,
    multiplier: Decimal,
    tier2_multiplier: Decimal,
) -> AmountBreakdown:
    # tier-1 premium covers all overtime; tier-2 adds on top for tier-2 hours only
    return AmountBreakdown(
        rate=rate,
        regular_amount=regular * rate,
        overtime_amount_base=overtime * rate,
        tier1_premium=overtime * rate * (multiplier - ONE),
        tier2_premium=tier2_hours * rate * (tier2_multiplier - multiplier),
        overtime_rate=rate * multiplier,
    )


def calculate_amounts(
    regular: Decimal,
    overtime: Decimal,
    tier2_hours: Decimal,
    rates: RateVector,
    multiplier: Decimal,
    tier2_multiplier: Decimal,
) -> dict[AmountDisplay, AmountBreakdown]:
    return {
        view: breakdown(rate, regular, overtime, tier2_hours, multiplier, tier2_multiplier)
        for view, rate in (
            (AmountDisplay.EARNED, rates.earned),
            (AmountDisplay.COST, rates.cost),
            (AmountDisplay.PROFIT, rates.profit),
        )
    }
