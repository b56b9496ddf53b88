"""Notable events produced by the classifier."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from gauge_watch.models.enums import EventType


@dataclass(frozen=True)
class NotableEvent:
    type: EventType
    pool_id: str
    bond_duration_days: float
    remaining_days: int
    gauge: dict[str, Any]
    starts_in_days: Optional[int] = None

    @property
    def gauge_id(self) -> str:
        return str(self.gauge.get("id", ""))

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "type": self.type.value,
            "poolId": self.pool_id,
            "bondDurationDays": self.bond_duration_days,
            "remainingDays": self.remaining_days,
        }
        if self.starts_in_days is not None:
            payload["startsInDays"] = self.starts_in_days
        payload["gauge"] = self.gauge
        return payload
