"""Snapshot storage and indexing."""

from gauge_watch.data.indexer import index_gauges, snapshot_gauges
from gauge_watch.data.store import SnapshotStore

__all__ = ["SnapshotStore", "index_gauges", "snapshot_gauges"]
