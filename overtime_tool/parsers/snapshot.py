"""Snapshot loader: JSON documents -> engine models.

Accepts the shape produced by the time-tracking export, with camelCase or
snake_case keys:

    {
      "entries":    [{"id", "userId", "userName", "type", "billable",
                      "timeInterval": {"start", "end", "duration"},
                      "earnedRate", "costRate", "hourlyRate", "amounts": [...],
                      "projectId", "clientId", "taskId", "description"}, ...],
      "users":      [{"id", "name"}, ...],
      "profiles":   {userId: {"workCapacityHours", "workingDays"}},
      "holidays":   {userId: {"YYYY-MM-DD": {"name", "projectId"}}},
      "timeOff":    {userId: {"YYYY-MM-DD": {"isFullDay", "hours"}}},
      "overrides":  {userId: {"mode", "capacity", "multiplier", "tier2Threshold",
                              "tier2Multiplier", "perDayOverrides", "weeklyOverrides"}},
      "config":     {...}, "calcParams": {...}, "dateRange": {"start", "end"}
    }

Only structurally unusable input raises SnapshotError; odd values are kept
raw and left to the engine, which degrades them silently.
"""

from __future__ import annotations

import json
import logging
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Any, Optional

from overtime_tool.engine.classifier import parse_iso_duration
from overtime_tool.engine.numbers import safe_decimal, to_decimal
from overtime_tool.models import (
    Amount,
    AmountDisplay,
    CalculationConfig,
    CalculationParams,
    DateRange,
    Holiday,
    Override,
    OverrideMode,
    OverrideValues,
    Snapshot,
    SnapshotError,
    TimeEntry,
    TimeOffInfo,
    User,
    UserProfile,
)

logger = logging.getLogger(__name__)


def _get(obj: dict, *keys: str, default: Any = None) -> Any:
    """First present key among the alternatives (camelCase / snake_case)."""
    for key in keys:
        if key in obj and obj[key] is not None:
            return obj[key]
    return default


def _as_dict(value: Any) -> dict:
    return value if isinstance(value, dict) else {}


def _as_id(value: Any) -> Optional[str]:
    """User ids as strings, matching the JSON object keys of the reference maps."""
    if value is None or value == "":
        return None
    return str(value)


def _parse_date_key(value: Any) -> Optional[date]:
    """YYYY-MM-DD, or the date part of an ISO timestamp."""
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or len(value.strip()) < 10:
        return None
    try:
        return date.fromisoformat(value.strip()[:10])
    except ValueError:
        return None


def _as_bool(value: Any, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


# ---------------------------------------------------------------------------
# Entries and users
# ---------------------------------------------------------------------------


def parse_entry(raw: dict, index: int = 0) -> TimeEntry:
    interval = _as_dict(_get(raw, "timeInterval", "time_interval"))
    project = _as_dict(raw.get("project"))

    amounts = []
    for item in raw.get("amounts") or []:
        if isinstance(item, dict):
            amounts.append(Amount(
                type=str(_get(item, "type", "amountType", "amount_type", default="")),
                value=_get(item, "value", "amount"),
            ))

    billable = raw.get("billable")
    return TimeEntry(
        id=str(_get(raw, "id", "_id", default=f"entry-{index}")),
        user_id=_as_id(_get(raw, "userId", "user_id")),
        user_name=_get(raw, "userName", "user_name"),
        start=_get(interval, "start", default=raw.get("start")),
        end=_get(interval, "end", default=raw.get("end")),
        duration=_get(interval, "duration", default=raw.get("duration")),
        type=raw.get("type"),
        billable=None if billable is None else _as_bool(billable, True),
        earned_rate=_get(raw, "earnedRate", "earned_rate"),
        cost_rate=_get(raw, "costRate", "cost_rate"),
        hourly_rate=_get(raw, "hourlyRate", "hourly_rate"),
        amounts=tuple(amounts),
        project_id=_get(raw, "projectId", "project_id", default=project.get("id")),
        client_id=_get(raw, "clientId", "client_id"),
        task_id=_get(raw, "taskId", "task_id"),
        description=raw.get("description"),
    )


def parse_entries(raw_entries: Any) -> list[TimeEntry]:
    if raw_entries is None:
        return []
    if not isinstance(raw_entries, list):
        raise SnapshotError([f"'entries' must be a list, got {type(raw_entries).__name__}"])

    errors: list[str] = []
    entries: list[TimeEntry] = []
    for i, raw in enumerate(raw_entries):
        if not isinstance(raw, dict):
            errors.append(f"entries[{i}] must be an object, got {type(raw).__name__}")
            continue
        entries.append(parse_entry(raw, i))

    if errors:
        raise SnapshotError(errors)
    return entries


def parse_users(raw_users: Any) -> list[User]:
    users = []
    for raw in raw_users or []:
        user_id = _as_id(raw.get("id")) if isinstance(raw, dict) else None
        if user_id is not None:
            users.append(User(id=user_id, name=str(raw.get("name") or user_id)))
    return users


# ---------------------------------------------------------------------------
# Reference data
# ---------------------------------------------------------------------------


def _parse_working_days(value: Any, user_id: str) -> Optional[frozenset[str]]:
    if value is None:
        return None
    if isinstance(value, str):
        value = value.split(",")
    elif not isinstance(value, (list, tuple, set, frozenset)):
        logger.warning("Ignoring workingDays for %s: expected a list, got %r", user_id, value)
        return None
    return frozenset(str(d).strip().upper() for d in value if str(d).strip())


def parse_profiles(raw_profiles: Any) -> dict[str, UserProfile]:
    profiles = {}
    for user_id, raw in _as_dict(raw_profiles).items():
        if not isinstance(raw, dict):
            continue
        capacity = _get(raw, "workCapacityHours", "capacityHours", "capacity_hours")
        if capacity is None and isinstance(raw.get("workCapacity"), str):
            capacity = parse_iso_duration(raw["workCapacity"])
        profiles[user_id] = UserProfile(
            capacity_hours=capacity,
            working_days=_parse_working_days(_get(raw, "workingDays", "working_days"), user_id),
        )
    return profiles


def _per_user_dates(raw_map: Any, label: str) -> dict[str, dict[date, dict]]:
    result: dict[str, dict[date, dict]] = {}
    for user_id, days in _as_dict(raw_map).items():
        if not isinstance(days, dict):
            continue
        for key, value in days.items():
            day = _parse_date_key(key)
            if day is None:
                logger.warning("Skipping %s for %s: bad date key %r", label, user_id, key)
                continue
            result.setdefault(user_id, {})[day] = value if isinstance(value, dict) else {}
    return result


def parse_holidays(raw_holidays: Any) -> dict[str, dict[date, Holiday]]:
    return {
        user_id: {
            day: Holiday(name=str(raw.get("name") or ""), project_id=_get(raw, "projectId", "project_id"))
            for day, raw in days.items()
        }
        for user_id, days in _per_user_dates(raw_holidays, "holiday").items()
    }


def parse_time_off(raw_time_off: Any) -> dict[str, dict[date, TimeOffInfo]]:
    return {
        user_id: {
            day: TimeOffInfo(
                is_full_day=_as_bool(_get(raw, "isFullDay", "is_full_day"), False),
                hours=safe_decimal(raw.get("hours")),
            )
            for day, raw in days.items()
        }
        for user_id, days in _per_user_dates(raw_time_off, "time off").items()
    }


def _override_values(raw: dict) -> dict[str, Any]:
    return {
        "capacity": raw.get("capacity"),
        "multiplier": raw.get("multiplier"),
        "tier2_threshold": _get(raw, "tier2Threshold", "tier2_threshold"),
        "tier2_multiplier": _get(raw, "tier2Multiplier", "tier2_multiplier"),
    }


def _parse_mode(value: Any) -> OverrideMode:
    text = str(value or "global").strip()
    for mode in OverrideMode:
        if text.lower() in (mode.value.lower(), mode.name.lower()):
            return mode
    logger.warning("Unknown override mode %r; treating as global", value)
    return OverrideMode.GLOBAL


def parse_overrides(raw_overrides: Any) -> dict[str, Override]:
    overrides = {}
    for user_id, raw in _as_dict(raw_overrides).items():
        if not isinstance(raw, dict):
            continue
        per_day = {}
        for key, values in _as_dict(_get(raw, "perDayOverrides", "per_day")).items():
            day = _parse_date_key(key)
            if day is not None and isinstance(values, dict):
                per_day[day] = OverrideValues(**_override_values(values))
        weekly = {
            str(key).strip().upper(): OverrideValues(**_override_values(values))
            for key, values in _as_dict(_get(raw, "weeklyOverrides", "weekly")).items()
            if isinstance(values, dict)
        }
        overrides[user_id] = Override(
            mode=_parse_mode(raw.get("mode")),
            per_day=per_day,
            weekly=weekly,
            **_override_values(raw),
        )
    return overrides


# ---------------------------------------------------------------------------
# Config, params, range
# ---------------------------------------------------------------------------


def parse_config(raw: Any) -> CalculationConfig:
    raw = _as_dict(raw)
    defaults = CalculationConfig()
    display = str(_get(raw, "amountDisplay", "amount_display", default="earned")).strip().lower()
    try:
        amount_display = AmountDisplay(display)
    except ValueError:
        logger.warning("Unknown amount display %r; using earned", display)
        amount_display = AmountDisplay.EARNED
    return CalculationConfig(
        use_profile_capacity=_as_bool(
            _get(raw, "useProfileCapacity", "use_profile_capacity"), defaults.use_profile_capacity),
        use_profile_working_days=_as_bool(
            _get(raw, "useProfileWorkingDays", "use_profile_working_days"), defaults.use_profile_working_days),
        apply_holidays=_as_bool(_get(raw, "applyHolidays", "apply_holidays"), defaults.apply_holidays),
        apply_time_off=_as_bool(_get(raw, "applyTimeOff", "apply_time_off"), defaults.apply_time_off),
        enable_tiered_ot=_as_bool(_get(raw, "enableTieredOT", "enable_tiered_ot"), defaults.enable_tiered_ot),
        amount_display=amount_display,
        timezone=_get(raw, "timezone", "timeZone"),
    )


def parse_params(raw: Any) -> CalculationParams:
    raw = _as_dict(raw)
    defaults = CalculationParams()

    def pick(default: Decimal, *keys: str) -> Decimal:
        value = to_decimal(_get(raw, *keys))
        return default if value is None else value

    return CalculationParams(
        daily_threshold=pick(defaults.daily_threshold, "dailyThreshold", "daily_threshold"),
        weekly_threshold=pick(defaults.weekly_threshold, "weeklyThreshold", "weekly_threshold"),
        overtime_multiplier=pick(defaults.overtime_multiplier, "overtimeMultiplier", "overtime_multiplier"),
        tier2_threshold_hours=pick(defaults.tier2_threshold_hours, "tier2ThresholdHours", "tier2_threshold_hours"),
        tier2_multiplier=pick(defaults.tier2_multiplier, "tier2Multiplier", "tier2_multiplier"),
    )


def parse_date_range(raw: Any) -> Optional[DateRange]:
    if not raw:
        return None
    if not isinstance(raw, dict):
        raise SnapshotError([f"Invalid dateRange: {raw!r}"])
    start = _parse_date_key(raw.get("start"))
    end = _parse_date_key(raw.get("end"))
    if start is None or end is None:
        raise SnapshotError([f"Invalid dateRange: {raw!r}"])
    return DateRange(start=start, end=end)


def parse_snapshot(data: Any) -> Snapshot:
    if not isinstance(data, dict):
        raise SnapshotError([f"Snapshot must be a JSON object, got {type(data).__name__}"])
    return Snapshot(
        entries=parse_entries(data.get("entries")),
        users=parse_users(data.get("users")),
        profiles=parse_profiles(data.get("profiles")),
        holidays=parse_holidays(data.get("holidays")),
        time_off=parse_time_off(_get(data, "timeOff", "time_off")),
        overrides=parse_overrides(data.get("overrides")),
        config=parse_config(data.get("config")),
        params=parse_params(_get(data, "calcParams", "params")),
        date_range=parse_date_range(_get(data, "dateRange", "date_range")),
    )


def load_snapshot(path: str | Path) -> Snapshot:
    """Read and parse a snapshot JSON file."""
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise SnapshotError([f"{path.name} is not valid JSON: {e}"]) from e
    logger.info("Loaded snapshot %s", path)
    return parse_snapshot(data)
