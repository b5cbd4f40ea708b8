"""Overtime calculation engine and snapshot validation."""
from overtime_tool.engine.validator import validate_snapshot
from overtime_tool.engine.calculator import calculate_analysis

__all__ = ["validate_snapshot", "calculate_analysis"]
