"""Model exports."""

from gauge_watch.models.enums import EventType, RunStatus
from gauge_watch.models.event import NotableEvent
from gauge_watch.models.gauge import Coin, DistributeTo, Gauge

__all__ = ["Coin", "DistributeTo", "EventType", "Gauge", "NotableEvent", "RunStatus"]
