"""Pydantic response models for the Overtime API."""

from __future__ import annotations

from pydantic import BaseModel


class UserSummary(BaseModel):
    user_id: str
    user_name: str
    regular_hours: float
    overtime_hours: float
    total_hours: float
    break_hours: float
    billable_worked: float
    non_billable_worked: float
    billable_ot: float
    non_billable_ot: float
    tier1_hours: float
    tier2_hours: float
    expected_capacity: float
    holiday_count: int
    time_off_count: int
    amount: float
    amount_earned: float
    amount_cost: float
    amount_profit: float
    ot_premium: float
    ot_premium_tier2: float


class DateRange(BaseModel):
    start: str | None = None
    end: str | None = None


class AnalysisSummary(BaseModel):
    total_users: int
    total_regular_hours: float
    total_overtime_hours: float
    total_hours: float
    total_amount: float
    amount_display: str
    date_range: DateRange


class AnalyzeResponse(BaseModel):
    success: bool
    summary: AnalysisSummary | None = None
    users: list[UserSummary] | None = None
    report: dict | None = None
    warnings: list[str] | None = None
    error_type: str | None = None
    errors: list[str] | None = None
