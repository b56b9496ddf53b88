"""Structural diff exports."""

from gauge_watch.diff.engine import diff_indexed, diff_values, iter_fields, touched

__all__ = [
    "diff_indexed",
    "diff_values",
    "iter_fields",
    "touched",
]
