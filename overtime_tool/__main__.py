"""CLI entry point.

Usage:
    python -m overtime_tool \
        --snapshot "snapshot.json" \
        --out "Overtime_Report.json" \
        --amount-display earned \
        --tiered \
        --strict
"""

from __future__ import annotations

import dataclasses
from datetime import date
from pathlib import Path
from typing import Optional

import typer

from overtime_tool.models import AmountDisplay, DateRange, SnapshotError, StrictValidationError


def analyze(
    snapshot: str = typer.Option(..., "--snapshot", help="Path to the snapshot JSON (entries + reference data)"),
    out: str = typer.Option("Overtime_Report.json", "--out", help="Output report JSON file path"),
    strict: bool = typer.Option(False, "--strict/--no-strict", help="Fail on any data warning (default: False)"),
    amount_display: Optional[str] = typer.Option(None, "--amount-display", help="Primary amount view: earned, cost or profit"),
    tiered: Optional[bool] = typer.Option(None, "--tiered/--no-tiered", help="Enable tier-2 overtime premiums"),
    start: Optional[str] = typer.Option(None, "--start", help="Report start date (YYYY-MM-DD)"),
    end: Optional[str] = typer.Option(None, "--end", help="Report end date (YYYY-MM-DD)"),
    log_level: str = typer.Option("WARNING", "--log-level", help="Logging level"),
) -> None:
    """Compute regular/overtime hours and premiums from a time-tracking snapshot."""
    from overtime_tool.engine import calculate_analysis, validate_snapshot
    from overtime_tool.logging_config import setup_logging
    from overtime_tool.parsers import load_snapshot
    from overtime_tool.report import generate_report

    setup_logging(log_level)

    snapshot_path = Path(snapshot)
    out_path = Path(out)
    if not snapshot_path.exists():
        typer.echo(f"ERROR: Snapshot file not found: {snapshot_path}", err=True)
        raise typer.Exit(1)

    typer.echo(f"Snapshot: {snapshot_path}")
    typer.echo(f"Strict mode: {strict}")
    typer.echo("")

    try:
        # Step 1: Load snapshot
        typer.echo("Loading snapshot...")
        data = load_snapshot(snapshot_path)
        data = _apply_options(data, amount_display, tiered, start, end)
        typer.echo(f"  Entries: {len(data.entries)}")
        typer.echo(f"  Users: {len(data.users)}")
        typer.echo(f"  Overrides: {len(data.overrides)}")

        # Step 2: Validate
        typer.echo("\nValidating snapshot...")
        warnings = validate_snapshot(data, strict=strict)
        for warning in warnings:
            typer.echo(f"  WARNING: {warning}")
        typer.echo(f"  {len(warnings)} warning(s)")

        # Step 3: Calculate
        typer.echo("\nCalculating overtime...")
        analyses = calculate_analysis(data)

        for analysis in analyses:
            t = analysis.totals
            typer.echo(f"  {analysis.user_name}:")
            typer.echo(f"    Regular:  {t.regular}h  (capacity {t.expected_capacity}h)")
            typer.echo(f"    Overtime: {t.overtime}h  (tier-1 {t.tier1_hours}h, tier-2 {t.tier2_hours}h)")
            typer.echo(f"    Billable: {t.billable_worked}h + {t.billable_ot}h OT")
            typer.echo(f"    Amount:   {t.amount}  (premiums {t.ot_premium} + {t.ot_premium_tier2})")

        # Step 4: Write report
        typer.echo(f"\nWriting report: {out_path}...")
        generate_report(analyses, out_path, warnings)
        typer.echo(f"  Report saved to: {out_path}")

        typer.echo("\nSUCCESS: Overtime report generated.")

    except StrictValidationError as e:
        typer.echo("\nSTRICT VALIDATION FAILED:", err=True)
        for error in e.errors:
            typer.echo(f"  ERROR: {error}", err=True)
        typer.echo("\nReport NOT generated (strict mode).", err=True)
        raise typer.Exit(1)

    except SnapshotError as e:
        typer.echo("\nSNAPSHOT ERROR:", err=True)
        for error in e.errors:
            typer.echo(f"  ERROR: {error}", err=True)
        raise typer.Exit(1)


def _apply_options(data, amount_display, tiered, start, end):
    """Command-line options take precedence over the snapshot's own config."""
    config = data.config
    if amount_display is not None:
        try:
            config = dataclasses.replace(config, amount_display=AmountDisplay(amount_display.lower()))
        except ValueError:
            raise SnapshotError([f"Unknown amount display: {amount_display!r}"])
    if tiered is not None:
        config = dataclasses.replace(config, enable_tiered_ot=tiered)

    date_range = data.date_range
    if start or end:
        try:
            range_start = date.fromisoformat(start) if start else (date_range.start if date_range else None)
            range_end = date.fromisoformat(end) if end else (date_range.end if date_range else None)
        except ValueError as e:
            raise SnapshotError([f"Invalid --start/--end: {e}"])
        if range_start is None or range_end is None:
            raise SnapshotError(["--start and --end must both be given when the snapshot has no dateRange"])
        date_range = DateRange(start=range_start, end=range_end)

    return dataclasses.replace(data, config=config, date_range=date_range)


def main() -> None:
    typer.run(analyze)


if __name__ == "__main__":
    main()
