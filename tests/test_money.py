"""Tests for rate extraction and the three monetary views."""

import pytest
from decimal import Decimal

from overtime_tool.engine.money import RateVector, calculate_amounts, extract_rate, extract_rates
from overtime_tool.models import Amount, AmountDisplay, TimeEntry


def _make_entry(**kwargs) -> TimeEntry:
    defaults = dict(id="e1", user_id="u1", start="2026-01-12T09:00:00Z", duration="PT8H")
    defaults.update(kwargs)
    return TimeEntry(**defaults)


class TestExtractRate:
    @pytest.mark.parametrize("field", [5000, "5000", {"amount": 5000}, {"amount": "5000"}, Decimal("5000")])
    def test_accepted_shapes(self, field):
        assert extract_rate(field) == Decimal("5000")

    @pytest.mark.parametrize("field", [None, "n/a", {}, {"currency": "USD"}, True])
    def test_unusable_is_zero(self, field):
        assert extract_rate(field) == Decimal("0")


class TestExtractRates:
    def test_cents_become_major_units(self):
        rates = extract_rates(_make_entry(earned_rate=5000, cost_rate={"amount": 3000}), Decimal("8"))
        assert rates.earned == Decimal("50")
        assert rates.cost == Decimal("30")
        assert rates.profit == Decimal("20")

    def test_hourly_rate_fallback(self):
        rates = extract_rates(_make_entry(hourly_rate={"amount": 4000}), Decimal("8"))
        assert rates.earned == Decimal("40")

    def test_earned_rate_beats_hourly_rate(self):
        rates = extract_rates(_make_entry(earned_rate=5000, hourly_rate=4000), Decimal("8"))
        assert rates.earned == Decimal("50")

    def test_amounts_fallback(self):
        entry = _make_entry(amounts=(
            Amount("EARNED", 400), Amount("cost", "240"), Amount("OTHER", 999),
        ))
        rates = extract_rates(entry, Decimal("8"))
        assert rates.earned == Decimal("50")
        assert rates.cost == Decimal("30")

    def test_amounts_with_zero_duration(self):
        entry = _make_entry(amounts=(Amount("EARNED", 400),))
        assert extract_rates(entry, Decimal("0")).earned == Decimal("0")

    def test_non_billable_earns_nothing(self):
        rates = extract_rates(_make_entry(billable=False, earned_rate=5000, cost_rate=3000), Decimal("8"))
        assert rates.earned == Decimal("0")
        assert rates.cost == Decimal("30")
        assert rates.profit == Decimal("-30")

    def test_no_rate_data(self):
        rates = extract_rates(_make_entry(), Decimal("8"))
        assert rates == RateVector(earned=Decimal("0"), cost=Decimal("0"))


class TestCalculateAmounts:
    def test_regular_and_tier1(self):
        rates = RateVector(earned=Decimal("50"), cost=Decimal("30"))
        amounts = calculate_amounts(
            Decimal("8"), Decimal("2"), Decimal("0"), rates, Decimal("1.5"), Decimal("2"),
        )
        earned = amounts[AmountDisplay.EARNED]
        assert earned.regular_amount == Decimal("400")
        assert earned.overtime_amount_base == Decimal("100")
        assert earned.tier1_premium == Decimal("50")
        assert earned.tier2_premium == Decimal("0")
        assert earned.overtime_rate == Decimal("75")
        assert earned.total_with_ot == Decimal("550")

        cost = amounts[AmountDisplay.COST]
        assert cost.total_with_ot == Decimal("330")

        profit = amounts[AmountDisplay.PROFIT]
        assert profit.rate == Decimal("20")
        assert profit.total_with_ot == earned.total_with_ot - cost.total_with_ot

    def test_tier2_premium(self):
        rates = RateVector(earned=Decimal("50"), cost=Decimal("0"))
        amounts = calculate_amounts(
            Decimal("0"), Decimal("2"), Decimal("1"), rates, Decimal("1.5"), Decimal("2"),
        )
        earned = amounts[AmountDisplay.EARNED]
        assert earned.tier1_premium == Decimal("50")
        assert earned.tier2_premium == Decimal("25")
        assert earned.total_with_ot == Decimal("175")

    def test_break_hours_are_paid_at_base_rate(self):
        rates = RateVector(earned=Decimal("50"), cost=Decimal("30"))
        amounts = calculate_amounts(
            Decimal("1"), Decimal("0"), Decimal("0"), rates, Decimal("1.5"), Decimal("2"),
        )
        assert amounts[AmountDisplay.EARNED].total_with_ot == Decimal("50")
        assert amounts[AmountDisplay.EARNED].tier1_premium == Decimal("0")
