"""Event classification exports."""

from gauge_watch.events.classifier import (
    EventClassifier,
    bond_duration_days,
    parse_duration_seconds,
    pool_id_from_denom,
)

__all__ = [
    "EventClassifier",
    "bond_duration_days",
    "parse_duration_seconds",
    "pool_id_from_denom",
]
