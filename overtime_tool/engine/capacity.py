"""Capacity Resolver.

Resolves, per user and date, the four values the day calculation needs:
base capacity, tier-1 multiplier, tier-2 threshold and tier-2 multiplier.

Each value walks the same precedence chain independently:
  1. per-day override for the exact date  (mode == perDay)
  2. weekly override for the weekday      (mode == weekly)
  3. the user's global override
  4. profile capacity                     (capacity only, use_profile_capacity)
  5. global default from CalculationParams

A level whose value does not parse to a finite number is skipped.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Iterator, Optional

from overtime_tool.engine.numbers import to_decimal
from overtime_tool.models import (
    WEEKDAYS,
    CalculationConfig,
    CalculationParams,
    Override,
    OverrideMode,
    OverrideValues,
    UserProfile,
)

logger = logging.getLogger(__name__)

_DEFAULTS = CalculationParams()


@dataclass(frozen=True)
class DayParameters:
    capacity: Decimal
    multiplier: Decimal
    tier2_threshold: Decimal
    tier2_multiplier: Decimal


def weekday_key(day: date) -> str:
    return WEEKDAYS[day.weekday()]


def _override_levels(override: Optional[Override], day: date) -> Iterator[OverrideValues]:
    """Override levels that apply to `day`, most specific first."""
    if override is None:
        return
    if override.mode is OverrideMode.PER_DAY and day in override.per_day:
        yield override.per_day[day]
    if override.mode is OverrideMode.WEEKLY and weekday_key(day) in override.weekly:
        yield override.weekly[weekday_key(day)]
    yield override


def resolve_with_fallback(
    field_name: str,
    override: Optional[Override],
    day: date,
    *fallbacks: object,
) -> Optional[Decimal]:
    """First finite value of `field_name` across the override levels, then `fallbacks`."""
    for level in _override_levels(override, day):
        raw = getattr(level, field_name)
        value = to_decimal(raw)
        if value is not None:
            return value
        if raw is not None:
            logger.debug("Ignoring unparseable %s override %r for %s", field_name, raw, day)
    for raw in fallbacks:
        value = to_decimal(raw)
        if value is not None:
            return value
    return None


def resolve_day_parameters(
    user_id: str,
    day: date,
    overrides: dict[str, Override],
    profiles: dict[str, UserProfile],
    config: CalculationConfig,
    params: CalculationParams,
) -> DayParameters:
    override = overrides.get(user_id)

    profile_capacity = None
    if config.use_profile_capacity and user_id in profiles:
        profile_capacity = profiles[user_id].capacity_hours

    capacity = resolve_with_fallback(
        "capacity", override, day, profile_capacity, params.daily_threshold,
    )
    multiplier = resolve_with_fallback(
        "multiplier", override, day, params.overtime_multiplier,
    )
    tier2_threshold = resolve_with_fallback(
        "tier2_threshold", override, day, params.tier2_threshold_hours,
    )
    tier2_multiplier = resolve_with_fallback(
        "tier2_multiplier", override, day, params.tier2_multiplier,
    )

    return DayParameters(
        capacity=capacity if capacity is not None else _DEFAULTS.daily_threshold,
        multiplier=multiplier if multiplier is not None else _DEFAULTS.overtime_multiplier,
        tier2_threshold=tier2_threshold if tier2_threshold is not None else _DEFAULTS.tier2_threshold_hours,
        tier2_multiplier=tier2_multiplier if tier2_multiplier is not None else _DEFAULTS.tier2_multiplier,
    )


def is_working_day(
    user_id: str,
    day: date,
    profiles: dict[str, UserProfile],
    config: CalculationConfig,
) -> bool:
    """Days outside the profile's working days are non-working; no data means working."""
    if not config.use_profile_working_days:
        return True
    profile = profiles.get(user_id)
    if profile is None or profile.working_days is None:
        return True
    return weekday_key(day) in profile.working_days
