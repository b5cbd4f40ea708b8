"""Tests for the JSON analysis report."""

import json
from decimal import Decimal
from datetime import date

from overtime_tool.engine.calculator import calculate_analysis
from overtime_tool.models import DateRange, Snapshot, TimeEntry, User
from overtime_tool.report import DecimalEncoder, generate_report, generate_report_dict


def _make_analyses():
    entries = [
        TimeEntry(id="e1", user_id="u1", user_name="Alice", start="2026-01-12T09:00:00Z",
                  duration="PT10H", earned_rate=5000, cost_rate=3000),
        TimeEntry(id="e2", user_id="u2", user_name="Bob", start="2026-01-12T09:00:00Z",
                  duration="PT20M", earned_rate=1000),
    ]
    return calculate_analysis(Snapshot(
        entries=entries,
        users=[User(id="u3", name="Carol")],
        date_range=DateRange(start=date(2026, 1, 12), end=date(2026, 1, 13)),
    ))


class TestReportDict:
    def test_structure(self):
        report = generate_report_dict(_make_analyses(), warnings=["w1"])
        assert [u["user_name"] for u in report["users"]] == ["Alice", "Bob", "Carol"]
        assert report["summary"]["total_users"] == 3
        assert report["date_range"] == {"start": "2026-01-12", "end": "2026-01-13", "total_dates": 2}
        assert report["warnings"] == ["w1"]

    def test_totals_and_summary(self):
        report = generate_report_dict(_make_analyses())
        alice = report["users"][0]
        assert alice["totals"]["regular"] == 8.0
        assert alice["totals"]["overtime"] == 2.0
        assert alice["totals"]["amount_earned"] == 550.0
        assert alice["totals"]["amount_cost"] == 330.0
        assert alice["totals"]["profit"] == 220.0
        assert report["summary"]["overtime"] == 2.0
        # capacity: 2 days x 8h for each of 3 users
        assert report["summary"]["expected_capacity"] == 48.0

    def test_entries_are_rounded(self):
        report = generate_report_dict(_make_analyses())
        bob = report["users"][1]
        entry = bob["days"][0]["entries"][0]
        assert entry["duration"] == 0.3333
        assert entry["amount"] == 3.33
        assert entry["amounts"]["earned"]["rate"] == 10.0
        assert bob["days"][0]["meta"]["capacity"] == 8.0

    def test_entries_can_be_omitted(self):
        report = generate_report_dict(_make_analyses(), include_entries=False)
        assert "days" not in report["users"][0]
        assert "totals" in report["users"][0]

    def test_empty(self):
        report = generate_report_dict([])
        assert report["users"] == []
        assert report["date_range"]["start"] is None


class TestReportFile:
    def test_writes_json(self, tmp_path):
        out = generate_report(_make_analyses(), tmp_path / "report.json", ["w1"])
        data = json.loads(out.read_text(encoding="utf-8"))
        assert data["summary"]["total_users"] == 3
        assert data["warnings"] == ["w1"]

    def test_encoder_handles_decimal_and_dates(self):
        text = json.dumps({"d": date(2026, 1, 12), "n": Decimal("1.50")}, cls=DecimalEncoder)
        assert json.loads(text) == {"d": "2026-01-12", "n": 1.5}
