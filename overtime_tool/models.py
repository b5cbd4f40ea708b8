"""Canonical Data Model for the overtime analysis engine.

Inputs are frozen snapshots. Hours and money are Decimal throughout; rounding
happens only at the aggregation boundary (see engine.calculator).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

ZERO = Decimal("0")

WEEKDAYS = ("MONDAY", "TUESDAY", "WEDNESDAY", "THURSDAY", "FRIDAY", "SATURDAY", "SUNDAY")


class EntryClass(Enum):
    WORK = "work"
    BREAK = "break"
    PTO = "pto"


class OverrideMode(Enum):
    GLOBAL = "global"
    WEEKLY = "weekly"
    PER_DAY = "perDay"


class AmountDisplay(Enum):
    EARNED = "earned"
    COST = "cost"
    PROFIT = "profit"


# ---------------------------------------------------------------------------
# Inputs
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Amount:
    """One typed monetary amount reported for an entry (major currency units)."""
    type: str
    value: Any = None


@dataclass(frozen=True)
class TimeEntry:
    """Single tracked interval as delivered by the time-tracking export.

    Numeric and timestamp fields are kept raw; the engine parses them and
    degrades to zero instead of raising.
    """
    id: str
    user_id: Optional[str]
    start: Any = None
    end: Any = None
    duration: Any = None
    type: Optional[str] = None
    billable: Optional[bool] = None
    user_name: Optional[str] = None
    # Per-hour rates in minor currency units (cents)
    earned_rate: Any = None
    cost_rate: Any = None
    hourly_rate: Any = None
    amounts: tuple[Amount, ...] = ()
    project_id: Optional[str] = None
    client_id: Optional[str] = None
    task_id: Optional[str] = None
    description: Optional[str] = None

    @property
    def is_billable(self) -> bool:
        # Missing flag counts as billable
        return self.billable is not False


@dataclass(frozen=True)
class User:
    id: str
    name: str


@dataclass(frozen=True)
class UserProfile:
    """Per-user capacity hours and working weekdays."""
    capacity_hours: Any = None
    working_days: Optional[frozenset[str]] = None


@dataclass(frozen=True)
class Holiday:
    name: str = ""
    project_id: Optional[str] = None


@dataclass(frozen=True)
class TimeOffInfo:
    is_full_day: bool = False
    hours: Decimal = ZERO


@dataclass(frozen=True)
class OverrideValues:
    """Override values at one granularity. Any value may be a numeric-like string."""
    capacity: Any = None
    multiplier: Any = None
    tier2_threshold: Any = None
    tier2_multiplier: Any = None


@dataclass(frozen=True)
class Override(OverrideValues):
    """Per-user override. Only the granularity selected by `mode` is consulted."""
    mode: OverrideMode = OverrideMode.GLOBAL
    per_day: dict[date, OverrideValues] = field(default_factory=dict)
    weekly: dict[str, OverrideValues] = field(default_factory=dict)


@dataclass(frozen=True)
class CalculationParams:
    daily_threshold: Decimal = Decimal("8")
    weekly_threshold: Decimal = Decimal("40")
    overtime_multiplier: Decimal = Decimal("1.5")
    tier2_threshold_hours: Decimal = ZERO
    tier2_multiplier: Decimal = Decimal("2")


@dataclass(frozen=True)
class CalculationConfig:
    use_profile_capacity: bool = True
    use_profile_working_days: bool = True
    apply_holidays: bool = True
    apply_time_off: bool = True
    enable_tiered_ot: bool = False
    amount_display: AmountDisplay = AmountDisplay.EARNED
    timezone: Optional[str] = None


@dataclass(frozen=True)
class DateRange:
    start: date
    end: date

    def days(self) -> list[date]:
        """All calendar dates in the range, both ends inclusive."""
        span = (self.end - self.start).days
        return [date.fromordinal(self.start.toordinal() + i) for i in range(span + 1)]


@dataclass(frozen=True)
class Snapshot:
    """Everything one invocation of the engine needs."""
    entries: list[TimeEntry] = field(default_factory=list)
    users: list[User] = field(default_factory=list)
    profiles: dict[str, UserProfile] = field(default_factory=dict)
    holidays: dict[str, dict[date, Holiday]] = field(default_factory=dict)
    time_off: dict[str, dict[date, TimeOffInfo]] = field(default_factory=dict)
    overrides: dict[str, Override] = field(default_factory=dict)
    config: CalculationConfig = field(default_factory=CalculationConfig)
    params: CalculationParams = field(default_factory=CalculationParams)
    date_range: Optional[DateRange] = None


# ---------------------------------------------------------------------------
# Outputs
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AmountBreakdown:
    """Money for one view (earned, cost or profit) of one entry."""
    rate: Decimal = ZERO
    regular_amount: Decimal = ZERO
    overtime_amount_base: Decimal = ZERO
    tier1_premium: Decimal = ZERO
    tier2_premium: Decimal = ZERO
    overtime_rate: Decimal = ZERO

    @property
    def base_amount(self) -> Decimal:
        return self.regular_amount + self.overtime_amount_base

    @property
    def total_with_ot(self) -> Decimal:
        return self.regular_amount + self.overtime_amount_base + self.tier1_premium + self.tier2_premium

    @property
    def total_no_ot(self) -> Decimal:
        return self.regular_amount


@dataclass(frozen=True)
class EntryAnalysis:
    classification: EntryClass
    duration: Decimal
    regular: Decimal
    overtime: Decimal
    tier1_hours: Decimal
    tier2_hours: Decimal
    is_billable: bool
    amounts: dict[AmountDisplay, AmountBreakdown]
    primary: AmountDisplay = AmountDisplay.EARNED
    tags: tuple[str, ...] = ()

    @property
    def is_break(self) -> bool:
        return self.classification is EntryClass.BREAK

    @property
    def primary_amounts(self) -> AmountBreakdown:
        return self.amounts[self.primary]

    @property
    def amount(self) -> Decimal:
        return self.primary_amounts.total_with_ot

    # Primary-view shortcuts
    @property
    def hourly_rate(self) -> Decimal:
        return self.primary_amounts.rate

    @property
    def overtime_rate(self) -> Decimal:
        return self.primary_amounts.overtime_rate

    @property
    def regular_amount(self) -> Decimal:
        return self.primary_amounts.regular_amount

    @property
    def overtime_amount_base(self) -> Decimal:
        return self.primary_amounts.overtime_amount_base

    @property
    def tier1_premium(self) -> Decimal:
        return self.primary_amounts.tier1_premium

    @property
    def tier2_premium(self) -> Decimal:
        return self.primary_amounts.tier2_premium

    @property
    def total_with_ot(self) -> Decimal:
        return self.primary_amounts.total_with_ot

    @property
    def total_no_ot(self) -> Decimal:
        return self.primary_amounts.total_no_ot

    @property
    def profit(self) -> Decimal:
        return self.amounts[AmountDisplay.PROFIT].total_with_ot


@dataclass(frozen=True)
class AnalyzedEntry:
    """An input entry paired with its computed analysis."""
    entry: TimeEntry
    analysis: EntryAnalysis


@dataclass(frozen=True)
class DayMeta:
    capacity: Decimal
    base_capacity: Decimal
    is_holiday: bool = False
    holiday_name: str = ""
    holiday_project_id: Optional[str] = None
    is_non_working: bool = False
    is_time_off: bool = False
    time_off_hours: Decimal = ZERO


@dataclass
class DayData:
    meta: DayMeta
    entries: list[AnalyzedEntry] = field(default_factory=list)


@dataclass
class UserTotals:
    """Running totals for one user; rounded once when the user is finished."""
    regular: Decimal = ZERO
    overtime: Decimal = ZERO
    total: Decimal = ZERO
    breaks: Decimal = ZERO
    billable_worked: Decimal = ZERO
    non_billable_worked: Decimal = ZERO
    billable_ot: Decimal = ZERO
    non_billable_ot: Decimal = ZERO
    tier1_hours: Decimal = ZERO
    tier2_hours: Decimal = ZERO
    vacation_entry_hours: Decimal = ZERO
    expected_capacity: Decimal = ZERO
    holiday_hours: Decimal = ZERO
    time_off_hours: Decimal = ZERO
    holiday_count: int = 0
    time_off_count: int = 0

    amount: Decimal = ZERO
    amount_base: Decimal = ZERO
    amount_earned: Decimal = ZERO
    amount_cost: Decimal = ZERO
    amount_profit: Decimal = ZERO
    amount_earned_base: Decimal = ZERO
    amount_cost_base: Decimal = ZERO
    amount_profit_base: Decimal = ZERO
    ot_premium: Decimal = ZERO
    ot_premium_tier2: Decimal = ZERO
    ot_premium_earned: Decimal = ZERO
    ot_premium_cost: Decimal = ZERO
    ot_premium_profit: Decimal = ZERO
    ot_premium_tier2_earned: Decimal = ZERO
    ot_premium_tier2_cost: Decimal = ZERO
    ot_premium_tier2_profit: Decimal = ZERO

    @property
    def profit(self) -> Decimal:
        return self.amount_profit


HOUR_FIELDS = (
    "regular", "overtime", "total", "breaks",
    "billable_worked", "non_billable_worked", "billable_ot", "non_billable_ot",
    "tier1_hours", "tier2_hours", "vacation_entry_hours",
    "expected_capacity", "holiday_hours", "time_off_hours",
)

CURRENCY_FIELDS = (
    "amount", "amount_base",
    "amount_earned", "amount_cost", "amount_profit",
    "amount_earned_base", "amount_cost_base", "amount_profit_base",
    "ot_premium", "ot_premium_tier2",
    "ot_premium_earned", "ot_premium_cost", "ot_premium_profit",
    "ot_premium_tier2_earned", "ot_premium_tier2_cost", "ot_premium_tier2_profit",
)


@dataclass
class UserAnalysis:
    user_id: str
    user_name: str
    days: dict[date, DayData] = field(default_factory=dict)
    totals: UserTotals = field(default_factory=UserTotals)
    undated_entries: list[AnalyzedEntry] = field(default_factory=list)


class SnapshotError(ValueError):
    """Raised by the loaders when a snapshot is structurally unusable."""
    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__(f"Snapshot could not be loaded ({len(errors)} error(s)):\n" +
                         "\n".join(f"  - {e}" for e in errors))


class StrictValidationError(Exception):
    """Raised when strict validation of a snapshot fails."""
    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__(f"Strict validation failed with {len(errors)} error(s):\n" +
                         "\n".join(f"  - {e}" for e in errors))
