"""Shared fixtures for gauge watch tests."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

import pytest

from gauge_watch.config import Settings


FIXED_NOW = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


def make_gauge(
    gauge_id: int | str,
    *,
    denom: str = "gamm/pool/1",
    duration: str = "1209600s",
    is_perpetual: bool = False,
    num_epochs: int = 14,
    filled_epochs: int = 0,
    coins: Optional[list[dict[str, Any]]] = None,
    start_time: str = "2024-03-02T17:00:00.000000000Z",
) -> dict[str, Any]:
    return {
        "id": str(gauge_id),
        "is_perpetual": is_perpetual,
        "distribute_to": {
            "lock_query_type": "ByDuration",
            "denom": denom,
            "duration": duration,
            "timestamp": "1970-01-01T00:00:00Z",
        },
        "coins": coins if coins is not None else [{"denom": "ibc/ATOM", "amount": "1000000"}],
        "start_time": start_time,
        "num_epochs_paid_over": str(num_epochs),
        "filled_epochs": str(filled_epochs),
        "distributed_coins": [],
    }


@pytest.fixture
def gauge_factory():
    return make_gauge


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        cache_dir=str(tmp_path / "cache"),
        rate_limit_seconds=-1,
        http_max_retries=2,
        database_url=f"sqlite:///{tmp_path / 'ledger.db'}",
        telegram_pause_s=0,
    )
