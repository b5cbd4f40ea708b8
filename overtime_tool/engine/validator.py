"""Snapshot validation.

The calculation itself never rejects data. This pass reports what it will
silently degrade, so callers can surface it or, in strict mode, refuse to
produce a report.
"""

from __future__ import annotations

from collections import defaultdict
from datetime import date
from decimal import Decimal

from overtime_tool.engine.classifier import entry_date, entry_duration_hours, parse_timestamp, resolve_timezone
from overtime_tool.engine.numbers import to_decimal
from overtime_tool.models import Snapshot, StrictValidationError

MAX_DAILY_HOURS = Decimal("24")


def validate_snapshot(snapshot: Snapshot, strict: bool = False) -> list[str]:
    """Return human-readable warnings; raise StrictValidationError instead when strict."""
    warnings: list[str] = []
    tz = resolve_timezone(snapshot.config.timezone)

    if not snapshot.entries and not snapshot.users:
        warnings.append("Snapshot has no entries and no users")

    # --- Per-entry checks ---
    seen_ids: set[str] = set()
    daily_totals: dict[tuple[str, date], Decimal] = defaultdict(Decimal)
    for entry in snapshot.entries:
        label = f"Entry {entry.id or '<no id>'}"
        if entry.id and entry.id in seen_ids:
            warnings.append(f"{label}: duplicate id")
        seen_ids.add(entry.id)

        if not entry.user_id:
            warnings.append(f"{label}: missing user id (grouped under 'unknown')")

        day = entry_date(entry, tz)
        if day is None:
            warnings.append(f"{label}: start timestamp {entry.start!r} is missing or malformed")
            continue

        if entry.end is not None and parse_timestamp(entry.end) is None:
            warnings.append(f"{label}: end timestamp {entry.end!r} is malformed")

        duration = entry_duration_hours(entry)
        if duration == 0:
            warnings.append(f"{label} on {day}: duration resolves to 0h")
        if duration > MAX_DAILY_HOURS:
            warnings.append(f"{label} on {day}: duration={duration}h > 24")

        if snapshot.date_range and not (snapshot.date_range.start <= day <= snapshot.date_range.end):
            warnings.append(f"{label} on {day}: outside the report range and will be ignored")

        daily_totals[(str(entry.user_id or "unknown"), day)] += duration

    for (user_id, day), total in sorted(daily_totals.items()):
        if total > MAX_DAILY_HOURS:
            warnings.append(f"User {user_id} on {day}: tracked total={total}h > 24")

    # --- Override checks ---
    for user_id, override in snapshot.overrides.items():
        levels = [("global", override)]
        levels += [(str(d), values) for d, values in override.per_day.items()]
        levels += [(weekday, values) for weekday, values in override.weekly.items()]
        for where, values in levels:
            for name in ("capacity", "multiplier", "tier2_threshold", "tier2_multiplier"):
                raw = getattr(values, name)
                if raw is not None and to_decimal(raw) is None:
                    warnings.append(
                        f"Override for {user_id} ({where}): {name}={raw!r} is not a number and is ignored"
                    )

    if snapshot.date_range and snapshot.date_range.start > snapshot.date_range.end:
        warnings.append(
            f"Date range start {snapshot.date_range.start} is after end {snapshot.date_range.end}"
        )

    if strict and warnings:
        raise StrictValidationError(warnings)

    return warnings
