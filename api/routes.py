"""API routes for the Overtime Analysis service."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Body, Query

from overtime_tool.engine import calculate_analysis, validate_snapshot
from overtime_tool.models import SnapshotError, StrictValidationError
from overtime_tool.parsers import parse_snapshot
from overtime_tool.report import generate_report_dict

from api.schemas import (
    AnalysisSummary,
    AnalyzeResponse,
    DateRange,
    UserSummary,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1")


@router.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "ok"}


@router.post("/analyze", response_model=AnalyzeResponse)
def analyze(
    snapshot: dict = Body(..., description="Snapshot JSON: entries, users, reference data, config"),
    strict: bool = Query(False, description="Fail on any data warning"),
    include_entries: bool = Query(True, description="Include per-day/per-entry detail in the report"),
):
    """Run the overtime analysis over a posted snapshot.

    Returns per-user totals, an overall summary, the full report dict and
    any data warnings the validator raised.
    """
    try:
        # Step 1: Parse snapshot
        data = parse_snapshot(snapshot)

        # Step 2: Validate
        warnings = validate_snapshot(data, strict=strict)

        # Step 3: Calculate
        analyses = calculate_analysis(data)

    except SnapshotError as e:
        return AnalyzeResponse(success=False, error_type="snapshot_error", errors=e.errors)
    except StrictValidationError as e:
        return AnalyzeResponse(success=False, error_type="validation_error", errors=e.errors)

    report = generate_report_dict(analyses, warnings, include_entries=include_entries)

    users = []
    for a in analyses:
        t = a.totals
        users.append(UserSummary(
            user_id=a.user_id,
            user_name=a.user_name,
            regular_hours=float(t.regular),
            overtime_hours=float(t.overtime),
            total_hours=float(t.total),
            break_hours=float(t.breaks),
            billable_worked=float(t.billable_worked),
            non_billable_worked=float(t.non_billable_worked),
            billable_ot=float(t.billable_ot),
            non_billable_ot=float(t.non_billable_ot),
            tier1_hours=float(t.tier1_hours),
            tier2_hours=float(t.tier2_hours),
            expected_capacity=float(t.expected_capacity),
            holiday_count=t.holiday_count,
            time_off_count=t.time_off_count,
            amount=float(t.amount),
            amount_earned=float(t.amount_earned),
            amount_cost=float(t.amount_cost),
            amount_profit=float(t.amount_profit),
            ot_premium=float(t.ot_premium),
            ot_premium_tier2=float(t.ot_premium_tier2),
        ))

    summary = AnalysisSummary(
        total_users=len(analyses),
        total_regular_hours=report["summary"]["regular"],
        total_overtime_hours=report["summary"]["overtime"],
        total_hours=report["summary"]["total"],
        total_amount=report["summary"]["amount"],
        amount_display=data.config.amount_display.value,
        date_range=DateRange(
            start=report["date_range"]["start"],
            end=report["date_range"]["end"],
        ),
    )
    logger.info("Analyzed %d user(s), %d warning(s)", len(analyses), len(warnings))

    return AnalyzeResponse(
        success=True,
        summary=summary,
        users=users,
        report=report,
        warnings=warnings,
    )
