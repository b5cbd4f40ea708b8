"""Entry classification, timestamps and durations.

Type tags map onto a closed set of classes:
- BREAK                                         -> EntryClass.BREAK
- HOLIDAY, TIME_OFF (and their *_TIME_ENTRY forms) -> EntryClass.PTO
- anything else, including no tag or REGULAR    -> EntryClass.WORK

Only WORK entries accumulate toward capacity or can receive overtime.
"""

from __future__ import annotations

import logging
import re
from datetime import date, datetime, time, timezone, tzinfo
from decimal import Decimal
from typing import Any, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from overtime_tool.engine.numbers import to_decimal
from overtime_tool.models import ZERO, EntryClass, TimeEntry

logger = logging.getLogger(__name__)

HOLIDAY_TAGS = frozenset({"HOLIDAY", "HOLIDAY_TIME_ENTRY"})
TIME_OFF_TAGS = frozenset({"TIME_OFF", "TIME_OFF_TIME_ENTRY"})
BREAK_TAGS = frozenset({"BREAK"})

_ISO_DURATION = re.compile(
    r"^P(?:(?P<days>\d+(?:\.\d+)?)D)?"
    r"(?:T(?:(?P<hours>\d+(?:\.\d+)?)H)?(?:(?P<minutes>\d+(?:\.\d+)?)M)?(?:(?P<seconds>\d+(?:\.\d+)?)S)?)?$",
    re.IGNORECASE,
)

_SECONDS_PER_HOUR = Decimal("3600")


def normalize_tag(tag: Any) -> str:
    """Upper-case, trim, and fold spaces/hyphens to underscores."""
    if tag is None:
        return ""
    return re.sub(r"[\s\-]+", "_", str(tag).strip().upper())


def is_holiday_tag(tag: Any) -> bool:
    return normalize_tag(tag) in HOLIDAY_TAGS


def is_time_off_tag(tag: Any) -> bool:
    return normalize_tag(tag) in TIME_OFF_TAGS


def classify_entry(entry: TimeEntry) -> EntryClass:
    tag = normalize_tag(entry.type)
    if tag in BREAK_TAGS:
        return EntryClass.BREAK
    if tag in HOLIDAY_TAGS or tag in TIME_OFF_TAGS:
        return EntryClass.PTO
    return EntryClass.WORK


def parse_iso_duration(value: Any) -> Decimal:
    """Hours in an ISO-8601 duration such as PT8H30M; 0 when malformed."""
    if not isinstance(value, str):
        return ZERO
    match = _ISO_DURATION.match(value.strip())
    if not match or value.strip().upper() in ("P", "PT"):
        return ZERO
    parts = {k: Decimal(v) if v else ZERO for k, v in match.groupdict().items()}
    return (
        parts["days"] * 24
        + parts["hours"]
        + parts["minutes"] / 60
        + parts["seconds"] / _SECONDS_PER_HOUR
    )


def parse_duration(value: Any) -> Decimal:
    """Hours from an ISO duration string or a plain numeric hours value."""
    if isinstance(value, str) and value.strip().upper().startswith("P"):
        return parse_iso_duration(value)
    hours = to_decimal(value)
    if hours is None or hours < 0:
        return ZERO
    return hours


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse an ISO-8601 instant or a bare YYYY-MM-DD date; None when malformed."""
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time())
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def resolve_timezone(name: Optional[str]) -> Optional[tzinfo]:
    if not name:
        return None
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown timezone %r; using each timestamp's own offset", name)
        return None


def entry_date(entry: TimeEntry, tz: Optional[tzinfo] = None) -> Optional[date]:
    """Calendar date an entry belongs to: the date of its start.

    Entries that run past midnight stay on their start date.
    """
    start = parse_timestamp(entry.start)
    if start is None:
        return None
    if tz is not None and start.tzinfo is not None:
        start = start.astimezone(tz)
    return start.date()


def _as_aware(moment: datetime) -> datetime:
    # naive timestamps are compared as if recorded in UTC
    return moment if moment.tzinfo is not None else moment.replace(tzinfo=timezone.utc)


def start_sort_key(entry: TimeEntry) -> datetime:
    start = parse_timestamp(entry.start)
    if start is None:
        return datetime.min.replace(tzinfo=timezone.utc)
    return _as_aware(start)


def entry_duration_hours(entry: TimeEntry) -> Decimal:
    """Duration in hours: explicit duration, else end minus start, else 0."""
    duration = parse_duration(entry.duration)
    if duration != 0:
        return duration

    start = parse_timestamp(entry.start)
    end = parse_timestamp(entry.end)
    if start is None or end is None:
        if entry.duration is not None or entry.end is not None:
            logger.debug("Entry %s has no usable duration; counting 0h", entry.id)
        return ZERO
    seconds = (_as_aware(end) - _as_aware(start)).total_seconds()
    if seconds <= 0:
        logger.debug("Entry %s ends before it starts; counting 0h", entry.id)
        return ZERO
    return Decimal(str(seconds)) / _SECONDS_PER_HOUR
