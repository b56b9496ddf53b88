"""Index raw gauge lists by gauge id."""

from __future__ import annotations

import logging
from typing import Any, Iterable


logger = logging.getLogger(__name__)


def index_gauges(data_list: Iterable[dict[str, Any]]) -> dict[str, dict[str, Any]]:
    """Map ``str(gauge["id"])`` to the raw record; a duplicate id overwrites the earlier one."""
    indexed: dict[str, dict[str, Any]] = {}
    for gauge in data_list:
        if not isinstance(gauge, dict) or gauge.get("id") is None:
            logger.warning("Skipping gauge record without id: %r", gauge)
            continue
        key = str(gauge["id"])
        if key in indexed:
            logger.debug("Duplicate gauge id %s; keeping the later record.", key)
        indexed[key] = gauge
    return indexed


def snapshot_gauges(snapshot: dict[str, Any] | None) -> list[dict[str, Any]]:
    if not snapshot:
        return []
    data = snapshot.get("data")
    return data if isinstance(data, list) else []
