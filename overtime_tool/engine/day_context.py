"""Day Context Adjuster.

Turns a user-day's base capacity into its effective capacity:

1. holiday                  -> 0
2. non-working weekday      -> 0
3. full-day time off        -> 0
4. partial time off         -> max(0, base - time-off hours)
5. otherwise                -> base

Holidays and time off are detected from two sources. Reference data is used
when the matching apply flag is on; entry type tags are used only when it is
off, so the two sources never both fire for the same signal.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Sequence

from overtime_tool.engine.classifier import entry_duration_hours, is_holiday_tag, is_time_off_tag
from overtime_tool.models import ZERO, CalculationConfig, DayMeta, Holiday, TimeEntry, TimeOffInfo


@dataclass(frozen=True)
class TimeOffSignal:
    is_full_day: bool
    hours: Decimal


# --- structured reference data -------------------------------------------


def holiday_from_reference(holiday: Optional[Holiday], config: CalculationConfig) -> Optional[Holiday]:
    return holiday if config.apply_holidays else None


def time_off_from_reference(
    time_off: Optional[TimeOffInfo], config: CalculationConfig,
) -> Optional[TimeOffSignal]:
    if not config.apply_time_off or time_off is None:
        return None
    # time off never adds capacity
    return TimeOffSignal(is_full_day=time_off.is_full_day, hours=max(ZERO, time_off.hours))


# --- inference from entry tags ---------------------------------------------


def holiday_from_entries(entries: Sequence[TimeEntry], config: CalculationConfig) -> bool:
    if config.apply_holidays:
        return False
    return any(is_holiday_tag(e.type) for e in entries)


def time_off_from_entries(
    entries: Sequence[TimeEntry], config: CalculationConfig,
) -> Optional[TimeOffSignal]:
    if config.apply_time_off:
        return None
    tagged = [e for e in entries if is_time_off_tag(e.type)]
    if not tagged:
        return None
    hours = sum((entry_duration_hours(e) for e in tagged), ZERO)
    return TimeOffSignal(is_full_day=False, hours=hours)


def adjust_day(
    base_capacity: Decimal,
    *,
    holiday: Optional[Holiday],
    time_off: Optional[TimeOffInfo],
    working_day: bool,
    entries: Sequence[TimeEntry],
    config: CalculationConfig,
) -> DayMeta:
    """Effective capacity and day flags for one user-day."""
    reference_holiday = holiday_from_reference(holiday, config)
    is_holiday = reference_holiday is not None or holiday_from_entries(entries, config)

    time_off_signal = time_off_from_reference(time_off, config) or time_off_from_entries(entries, config)
    is_time_off = time_off_signal is not None

    if is_holiday or not working_day:
        capacity = ZERO
    elif time_off_signal is not None and time_off_signal.is_full_day:
        capacity = ZERO
    elif time_off_signal is not None:
        capacity = max(ZERO, base_capacity - time_off_signal.hours)
    else:
        capacity = max(ZERO, base_capacity)

    return DayMeta(
        capacity=capacity,
        base_capacity=base_capacity,
        is_holiday=is_holiday,
        holiday_name=reference_holiday.name if reference_holiday else "",
        holiday_project_id=reference_holiday.project_id if reference_holiday else None,
        is_non_working=not working_day,
        is_time_off=is_time_off,
        time_off_hours=time_off_signal.hours if time_off_signal else ZERO,
    )
