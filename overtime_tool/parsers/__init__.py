"""Snapshot loading layer."""
from overtime_tool.parsers.snapshot import load_snapshot, parse_snapshot

__all__ = ["load_snapshot", "parse_snapshot"]
