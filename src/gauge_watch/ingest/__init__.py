"""Remote data ingestion."""

from gauge_watch.ingest.gauges import GaugeClient, is_rate_limit_ok
from gauge_watch.ingest.reference import ReferenceData

__all__ = ["GaugeClient", "ReferenceData", "is_rate_limit_ok"]
