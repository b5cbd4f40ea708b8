"""Analysis report.

Turns engine output into a JSON-ready dict: per-user totals, per-day meta
and per-entry analysis. Per-entry values are rounded here, at the reporting
boundary (hours 4 dp, currency 2 dp); user totals arrive already rounded.
"""

from __future__ import annotations

import json
from datetime import date, datetime
from decimal import Decimal
from pathlib import Path
from typing import Any, Optional

from overtime_tool.engine.numbers import round_currency, round_hours
from overtime_tool.models import (
    CURRENCY_FIELDS,
    HOUR_FIELDS,
    ZERO,
    AmountBreakdown,
    AnalyzedEntry,
    DayMeta,
    UserAnalysis,
    UserTotals,
)


class DecimalEncoder(json.JSONEncoder):
    """JSON encoder that handles Decimal and date values."""
    def default(self, obj):
        if isinstance(obj, Decimal):
            return float(obj)
        if isinstance(obj, (date, datetime)):
            return obj.isoformat()
        return super().default(obj)


def _hours(value: Decimal) -> float:
    return float(round_hours(value))


def _money(value: Decimal) -> float:
    return float(round_currency(value))


def totals_dict(totals: UserTotals) -> dict[str, Any]:
    result: dict[str, Any] = {name: float(getattr(totals, name)) for name in HOUR_FIELDS}
    result.update({name: float(getattr(totals, name)) for name in CURRENCY_FIELDS})
    result["profit"] = float(totals.profit)
    result["holiday_count"] = totals.holiday_count
    result["time_off_count"] = totals.time_off_count
    return result


def _breakdown_dict(b: AmountBreakdown) -> dict[str, float]:
    return {
        "rate": _money(b.rate),
        "overtime_rate": _money(b.overtime_rate),
        "regular_amount": _money(b.regular_amount),
        "overtime_amount_base": _money(b.overtime_amount_base),
        "tier1_premium": _money(b.tier1_premium),
        "tier2_premium": _money(b.tier2_premium),
        "base_amount": _money(b.base_amount),
        "total_with_ot": _money(b.total_with_ot),
    }


def entry_dict(item: AnalyzedEntry) -> dict[str, Any]:
    entry, analysis = item.entry, item.analysis
    return {
        "id": entry.id,
        "start": entry.start,
        "end": entry.end,
        "type": entry.type,
        "classification": analysis.classification.value,
        "billable": analysis.is_billable,
        "project_id": entry.project_id,
        "client_id": entry.client_id,
        "task_id": entry.task_id,
        "description": entry.description,
        "duration": _hours(analysis.duration),
        "regular": _hours(analysis.regular),
        "overtime": _hours(analysis.overtime),
        "tier1_hours": _hours(analysis.tier1_hours),
        "tier2_hours": _hours(analysis.tier2_hours),
        "amount": _money(analysis.amount),
        "profit": _money(analysis.profit),
        "tags": list(analysis.tags),
        "amounts": {view.value: _breakdown_dict(b) for view, b in analysis.amounts.items()},
    }


def _meta_dict(meta: DayMeta) -> dict[str, Any]:
    return {
        "capacity": _hours(meta.capacity),
        "base_capacity": _hours(meta.base_capacity),
        "is_holiday": meta.is_holiday,
        "holiday_name": meta.holiday_name,
        "holiday_project_id": meta.holiday_project_id,
        "is_non_working": meta.is_non_working,
        "is_time_off": meta.is_time_off,
        "time_off_hours": _hours(meta.time_off_hours),
    }


def user_dict(analysis: UserAnalysis, include_entries: bool = True) -> dict[str, Any]:
    data: dict[str, Any] = {
        "user_id": analysis.user_id,
        "user_name": analysis.user_name,
        "totals": totals_dict(analysis.totals),
    }
    if include_entries:
        data["days"] = [
            {
                "date": day.isoformat(),
                "meta": _meta_dict(day_data.meta),
                "entries": [entry_dict(e) for e in day_data.entries],
            }
            for day, day_data in analysis.days.items()
        ]
        data["undated_entries"] = [entry_dict(e) for e in analysis.undated_entries]
    return data


def generate_report_dict(
    analyses: list[UserAnalysis],
    warnings: Optional[list[str]] = None,
    include_entries: bool = True,
) -> dict[str, Any]:
    """Build the report dictionary from engine output (no file I/O)."""
    all_dates = sorted({day for a in analyses for day in a.days})

    def grand(name: str) -> Decimal:
        return sum((getattr(a.totals, name) for a in analyses), ZERO)

    return {
        "users": [user_dict(a, include_entries) for a in analyses],
        "summary": {
            "total_users": len(analyses),
            "regular": float(grand("regular")),
            "overtime": float(grand("overtime")),
            "total": float(grand("total")),
            "expected_capacity": float(grand("expected_capacity")),
            "amount": float(grand("amount")),
            "amount_earned": float(grand("amount_earned")),
            "amount_cost": float(grand("amount_cost")),
            "amount_profit": float(grand("amount_profit")),
        },
        "date_range": {
            "start": all_dates[0].isoformat() if all_dates else None,
            "end": all_dates[-1].isoformat() if all_dates else None,
            "total_dates": len(all_dates),
        },
        "warnings": list(warnings or []),
    }


def generate_report(
    analyses: list[UserAnalysis],
    output_path: str | Path,
    warnings: Optional[list[str]] = None,
) -> Path:
    """Write the report JSON file."""
    output_path = Path(output_path)
    report = generate_report_dict(analyses, warnings)
    output_path.write_text(json.dumps(report, indent=2, cls=DecimalEncoder), encoding="utf-8")
    return output_path
