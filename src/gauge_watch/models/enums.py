"""Enumerations shared across the package."""

from enum import Enum


class EventType(str, Enum):
    NEW_EXTERNAL_GAUGE = "NEW_EXTERNAL_GAUGE"
    NEW_INTERNAL_GAUGE = "NEW_INTERNAL_GAUGE"
    NEW_SUPERFLUID_GAUGE = "NEW_SUPERFLUID_GAUGE"
    NEAR_EXPIRATION = "NEAR_EXPIRATION"


class RunStatus(str, Enum):
    COMPLETED = "completed"
    BOOTSTRAPPED = "bootstrapped"
    RATE_LIMITED = "rate_limited"
    NO_DATA = "no_data"
    FAILED = "failed"
