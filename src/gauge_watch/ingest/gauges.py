"""Gauge list ingestion from the chain REST API."""

from __future__ import annotations

import logging
import time
from typing import Any, Optional

import httpx

from gauge_watch.errors import FetchError


logger = logging.getLogger(__name__)


class GaugeClient:
    """Fetch the raw gauge snapshot ``{"data": [...], ...}`` with retries."""

    def __init__(
        self,
        url: str,
        timeout: float = 30.0,
        max_retries: int = 3,
        transport: Optional[httpx.BaseTransport] = None,
        backoff_s: float = 0.5,
    ) -> None:
        if not url:
            raise ValueError("Gauges API url is required")
        self.url = url
        self.timeout = timeout
        self.max_retries = max(1, max_retries)
        self.transport = transport
        self.backoff_s = backoff_s

    def fetch(self) -> dict[str, Any]:
        last_error: Optional[Exception] = None
        for attempt in range(1, self.max_retries + 1):
            try:
                payload = self._get()
                if not isinstance(payload, dict) or not isinstance(payload.get("data"), list):
                    raise FetchError(f"Response from {self.url} has no data list")
                logger.info("Fetched %d gauges from API.", len(payload["data"]))
                return payload
            except (httpx.HTTPError, ValueError, FetchError) as exc:
                last_error = exc
                logger.warning(
                    "Gauge fetch attempt %d/%d failed: %s", attempt, self.max_retries, exc
                )
                if attempt < self.max_retries:
                    time.sleep(self.backoff_s * attempt)
        raise FetchError(f"Gauge fetch failed: {last_error}") from last_error

    def _get(self) -> Any:
        with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
            response = client.get(self.url, headers={"Accept": "application/json"})
        response.raise_for_status()
        return response.json()


def is_rate_limit_ok(age_seconds: Optional[float], rate_limit_seconds: int) -> bool:
    """True when the cached snapshot is missing or older than the limit."""
    if age_seconds is None:
        return True
    return age_seconds > rate_limit_seconds
