"""Regular/overtime allocation.

Tail attribution (per day): overtime goes to the chronologically last work
hours of the day. Work entries fill capacity in start order; the entry that
crosses the boundary is split. Breaks and PTO are always regular and never
count toward capacity.

Tier split (per user, across the whole report range): overtime hours are
tier-1 until the user's cumulative overtime reaches the tier-2 threshold,
tier-2 after it. The running total is threaded explicitly by the caller.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable

from overtime_tool.models import ZERO, EntryClass


@dataclass(frozen=True)
class HourSplit:
    regular: Decimal
    overtime: Decimal


@dataclass(frozen=True)
class TierSplit:
    tier1: Decimal
    tier2: Decimal
    accumulated: Decimal


def split_work(duration: Decimal, accumulated: Decimal, capacity: Decimal) -> HourSplit:
    """Split one work entry given the work hours already logged that day."""
    if accumulated >= capacity:
        return HourSplit(regular=ZERO, overtime=duration)
    if accumulated + duration <= capacity:
        return HourSplit(regular=duration, overtime=ZERO)
    regular = capacity - accumulated
    return HourSplit(regular=regular, overtime=duration - regular)


def allocate_day(items: Iterable[tuple[EntryClass, Decimal]], capacity: Decimal) -> list[HourSplit]:
    """Apply tail attribution to a day's (class, duration) pairs, already in start order."""
    splits: list[HourSplit] = []
    accumulated = ZERO
    for entry_class, duration in items:
        if entry_class is not EntryClass.WORK:
            splits.append(HourSplit(regular=duration, overtime=ZERO))
            continue
        splits.append(split_work(duration, accumulated, capacity))
        accumulated += duration
    return splits


def split_overtime_tiers(
    overtime: Decimal,
    accumulated: Decimal,
    threshold: Decimal,
    enabled: bool,
) -> TierSplit:
    """One step of the per-user tier fold.

    `accumulated` is the user's overtime before this entry; the returned
    `accumulated` includes it, whether or not tiering is enabled.
    """
    after = accumulated + overtime
    if not enabled or overtime <= 0:
        return TierSplit(tier1=overtime, tier2=ZERO, accumulated=after)
    if accumulated >= threshold:
        return TierSplit(tier1=ZERO, tier2=overtime, accumulated=after)
    if after <= threshold:
        return TierSplit(tier1=overtime, tier2=ZERO, accumulated=after)
    tier1 = threshold - accumulated
    return TierSplit(tier1=tier1, tier2=overtime - tier1, accumulated=after)
