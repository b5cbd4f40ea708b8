"""Overtime & billable analysis: orchestration and aggregation.

For every user and every date in the report range:
  resolve capacity -> adjust for day context -> classify and sort entries
  -> tail attribution -> tier split -> money -> accumulate totals.

The calculation is pure: same snapshot in, same result out. Bad data never
raises; it degrades to zero or to the next precedence level. Totals are
rounded once per user (hours 4 dp, currency 2 dp) after all summing is done.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from datetime import date, tzinfo
from typing import Optional

from overtime_tool.engine.allocator import allocate_day, split_overtime_tiers
from overtime_tool.engine.capacity import is_working_day, resolve_day_parameters
from overtime_tool.engine.classifier import (
    classify_entry,
    entry_date,
    entry_duration_hours,
    resolve_timezone,
    start_sort_key,
)
from overtime_tool.engine.day_context import adjust_day
from overtime_tool.engine.money import calculate_amounts, extract_rates
from overtime_tool.engine.numbers import round_currency, round_hours
from overtime_tool.models import (
    CURRENCY_FIELDS,
    HOUR_FIELDS,
    ZERO,
    AmountBreakdown,
    AmountDisplay,
    AnalyzedEntry,
    DateRange,
    DayData,
    DayMeta,
    EntryAnalysis,
    EntryClass,
    Snapshot,
    TimeEntry,
    UserAnalysis,
    UserTotals,
)

logger = logging.getLogger(__name__)

UNKNOWN_USER_ID = "unknown"
UNKNOWN_USER_NAME = "Unknown"


def calculate_analysis(snapshot: Snapshot) -> list[UserAnalysis]:
    """Build one UserAnalysis per user, sorted by user name."""
    tz = resolve_timezone(snapshot.config.timezone)

    # Group entries by user, keeping input order
    by_user: dict[str, list[TimeEntry]] = defaultdict(list)
    entry_dates: list[date] = []
    for entry in snapshot.entries:
        if entry is None:
            continue
        by_user[entry.user_id or UNKNOWN_USER_ID].append(entry)
        day = entry_date(entry, tz)
        if day is not None:
            entry_dates.append(day)

    date_range = snapshot.date_range
    if date_range is None:
        if not entry_dates:
            logger.info("No date range and no dated entries; nothing to analyze")
            return []
        date_range = DateRange(start=min(entry_dates), end=max(entry_dates))
    all_dates = date_range.days()

    analyses: dict[str, UserAnalysis] = {}
    for user in snapshot.users:
        if user.id not in analyses:
            analyses[user.id] = UserAnalysis(user_id=user.id, user_name=user.name)
    for user_id, user_entries in by_user.items():
        if user_id not in analyses:
            name = next((e.user_name for e in user_entries if e.user_name), UNKNOWN_USER_NAME)
            analyses[user_id] = UserAnalysis(user_id=user_id, user_name=name)

    for user_id, analysis in analyses.items():
        _analyze_user(analysis, by_user.get(user_id, []), all_dates, snapshot, tz)

    logger.info(
        "Analyzed %d user(s) over %d day(s) from %s to %s (%d entries)",
        len(analyses), len(all_dates), date_range.start, date_range.end, len(snapshot.entries),
    )
    return sorted(analyses.values(), key=lambda a: (a.user_name.casefold(), a.user_name, a.user_id))


def _analyze_user(
    analysis: UserAnalysis,
    entries: list[TimeEntry],
    all_dates: list[date],
    snapshot: Snapshot,
    tz: Optional[tzinfo],
) -> None:
    user_id = analysis.user_id
    config = snapshot.config

    by_date: dict[date, list[TimeEntry]] = defaultdict(list)
    for entry in entries:
        day = entry_date(entry, tz)
        if day is None:
            logger.debug("Entry %s has no usable start timestamp", entry.id)
            analysis.undated_entries.append(_undated(entry))
        else:
            by_date[day].append(entry)

    # Cumulative overtime for the tier-2 threshold, carried across all days
    accumulated_ot = ZERO

    for day in all_dates:
        params = resolve_day_parameters(
            user_id, day, snapshot.overrides, snapshot.profiles, config, snapshot.params,
        )
        day_entries = sorted(by_date.get(day, []), key=start_sort_key)
        meta = adjust_day(
            params.capacity,
            holiday=snapshot.holidays.get(user_id, {}).get(day),
            time_off=snapshot.time_off.get(user_id, {}).get(day),
            working_day=is_working_day(user_id, day, snapshot.profiles, config),
            entries=day_entries,
            config=config,
        )

        durations = [entry_duration_hours(e) for e in day_entries]
        classes = [classify_entry(e) for e in day_entries]
        splits = allocate_day(zip(classes, durations), meta.capacity)
        tiered = config.enable_tiered_ot and params.tier2_multiplier > params.multiplier

        day_data = DayData(meta=meta)
        for entry, entry_class, duration, split in zip(day_entries, classes, durations, splits):
            tiers = split_overtime_tiers(split.overtime, accumulated_ot, params.tier2_threshold, tiered)
            accumulated_ot = tiers.accumulated

            rates = extract_rates(entry, duration)
            entry_analysis = EntryAnalysis(
                classification=entry_class,
                duration=duration,
                regular=split.regular,
                overtime=split.overtime,
                tier1_hours=tiers.tier1,
                tier2_hours=tiers.tier2,
                is_billable=entry.is_billable,
                amounts=calculate_amounts(
                    split.regular, split.overtime, tiers.tier2,
                    rates, params.multiplier, params.tier2_multiplier,
                ),
                primary=config.amount_display,
                tags=_tags(meta, entry_class),
            )
            day_data.entries.append(AnalyzedEntry(entry=entry, analysis=entry_analysis))
            _add_entry(analysis.totals, entry_analysis)

        analysis.days[day] = day_data
        _add_day(analysis.totals, meta)

    _round_totals(analysis.totals)


def _tags(meta: DayMeta, entry_class: EntryClass) -> tuple[str, ...]:
    tags = []
    if meta.is_holiday:
        tags.append("HOLIDAY")
    if meta.is_non_working:
        tags.append("OFF-DAY")
    if meta.is_time_off:
        tags.append("TIME-OFF")
    if entry_class is EntryClass.BREAK:
        tags.append("BREAK")
    return tuple(tags)


def _undated(entry: TimeEntry) -> AnalyzedEntry:
    """Entry that cannot be placed on a day: kept in the output with zeroed analysis."""
    return AnalyzedEntry(
        entry=entry,
        analysis=EntryAnalysis(
            classification=classify_entry(entry),
            duration=ZERO,
            regular=ZERO,
            overtime=ZERO,
            tier1_hours=ZERO,
            tier2_hours=ZERO,
            is_billable=entry.is_billable,
            amounts={view: AmountBreakdown() for view in AmountDisplay},
        ),
    )


def _add_entry(totals: UserTotals, analysis: EntryAnalysis) -> None:
    regular, overtime = analysis.regular, analysis.overtime

    totals.total += analysis.duration
    totals.regular += regular
    if analysis.classification is EntryClass.BREAK:
        totals.breaks += analysis.duration
    elif analysis.classification is EntryClass.PTO:
        totals.vacation_entry_hours += analysis.duration
    else:
        totals.overtime += overtime
        totals.tier1_hours += analysis.tier1_hours
        totals.tier2_hours += analysis.tier2_hours

    if analysis.is_billable:
        totals.billable_worked += regular
        totals.billable_ot += overtime
    else:
        totals.non_billable_worked += regular
        totals.non_billable_ot += overtime

    primary = analysis.primary_amounts
    earned = analysis.amounts[AmountDisplay.EARNED]
    cost = analysis.amounts[AmountDisplay.COST]
    profit = analysis.amounts[AmountDisplay.PROFIT]

    totals.amount += primary.total_with_ot
    totals.amount_base += primary.base_amount
    totals.amount_earned += earned.total_with_ot
    totals.amount_earned_base += earned.base_amount
    totals.amount_cost += cost.total_with_ot
    totals.amount_cost_base += cost.base_amount
    totals.amount_profit += profit.total_with_ot
    totals.amount_profit_base += profit.base_amount

    totals.ot_premium += primary.tier1_premium
    totals.ot_premium_earned += earned.tier1_premium
    totals.ot_premium_cost += cost.tier1_premium
    totals.ot_premium_profit += profit.tier1_premium
    totals.ot_premium_tier2 += primary.tier2_premium
    totals.ot_premium_tier2_earned += earned.tier2_premium
    totals.ot_premium_tier2_cost += cost.tier2_premium
    totals.ot_premium_tier2_profit += profit.tier2_premium


def _add_day(totals: UserTotals, meta: DayMeta) -> None:
    totals.expected_capacity += meta.capacity
    if meta.is_holiday:
        totals.holiday_count += 1
        # what the day would have held without the holiday
        totals.holiday_hours += meta.base_capacity
    if meta.is_time_off:
        totals.time_off_count += 1
        totals.time_off_hours += meta.time_off_hours


def _round_totals(totals: UserTotals) -> None:
    for name in HOUR_FIELDS:
        setattr(totals, name, round_hours(getattr(totals, name)))
    for name in CURRENCY_FIELDS:
        setattr(totals, name, round_currency(getattr(totals, name)))
