"""Turn gauge deltas into notable events."""

from __future__ import annotations

import logging
import re
from datetime import datetime
from typing import Any, Callable, Mapping, Optional

from pydantic import ValidationError

from gauge_watch.diff.engine import iter_fields, touched
from gauge_watch.models.enums import EventType
from gauge_watch.models.event import NotableEvent
from gauge_watch.models.gauge import Gauge
from gauge_watch.utils.time import SECONDS_PER_DAY, parse_timestamp, utc_now


logger = logging.getLogger(__name__)


POOL_ID_SENTINEL = "NaN"
_DIGITS = re.compile(r"\d+")


def pool_id_from_denom(denom: Optional[str]) -> str:
    """First run of digits in ``denom``, or ``"NaN"`` when there is none."""
    match = _DIGITS.search(denom or "")
    if not match:
        logger.warning("No pool id in distribute_to denom %r", denom)
        return POOL_ID_SENTINEL
    return str(int(match.group(0)))


def parse_duration_seconds(duration: str) -> int:
    """``"1209600s"`` -> ``1209600``. Raises ``ValueError`` when malformed."""
    text = (duration or "").strip()
    if len(text) < 2 or not text[-1].isalpha():
        raise ValueError(f"Malformed duration: {duration!r}")
    return int(text[:-1])


def bond_duration_days(duration: str) -> float:
    days = parse_duration_seconds(duration) / SECONDS_PER_DAY
    return int(days) if days.is_integer() else days


def superfluid_pool_key(denom: str, marker: str) -> Optional[str]:
    """Pool id when ``denom`` targets ``/<pool>/<marker>``, else ``None``."""
    if marker not in (denom or ""):
        return None
    pool_id = pool_id_from_denom(denom)
    if f"/{pool_id}/{marker}" not in denom:
        return None
    return pool_id


def _gauge_order(gauge_id: str) -> tuple[int, int, str]:
    if gauge_id.isdigit():
        return (0, int(gauge_id), gauge_id)
    return (1, 0, gauge_id)


class EventClassifier:
    """Apply the notable-event rules to one run's deltas.

    Two independent checks run per delta: near expiration (only when the
    delta touches ``filled_epochs``) and new gauge (only when the delta
    carries ``id``). A failure on one gauge is logged and skipped.
    """

    def __init__(
        self,
        native_denom: str = "uosmo",
        superfluid_marker: str = "superbonding",
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.native_denom = native_denom
        self.superfluid_marker = superfluid_marker
        self.clock = clock

    def classify(
        self,
        deltas: Mapping[str, Any],
        new_indexed: Mapping[str, Mapping[str, Any]],
    ) -> list[NotableEvent]:
        events: list[NotableEvent] = []
        for gauge_id, delta in iter_fields(deltas):
            if not isinstance(delta, Mapping):
                continue
            raw = new_indexed.get(gauge_id)
            if raw is None:
                logger.warning("Delta for gauge %s has no gauge in the new snapshot.", gauge_id)
                continue
            try:
                gauge = Gauge.model_validate(raw)
            except ValidationError as exc:
                logger.warning("Gauge %s failed validation; skipping: %s", gauge_id, exc)
                continue

            if touched(delta, "filled_epochs"):
                try:
                    event = self.near_expiration(gauge, raw)
                except (ValueError, TypeError, KeyError) as exc:
                    logger.warning("Near-expiration check failed for gauge %s: %s", gauge_id, exc)
                    event = None
                if event:
                    events.append(event)

            if touched(delta, "id"):
                try:
                    event = self.new_gauge(gauge, raw, new_indexed)
                except (ValueError, TypeError, KeyError) as exc:
                    logger.warning("New-gauge check failed for gauge %s: %s", gauge_id, exc)
                    event = None
                if event:
                    events.append(event)
        return events

    def near_expiration(self, gauge: Gauge, raw: Mapping[str, Any]) -> Optional[NotableEvent]:
        if gauge.is_perpetual:
            return None
        bond_days = bond_duration_days(gauge.distribute_to.duration)
        remaining = gauge.remaining_days
        if bond_days != remaining:
            return None
        return NotableEvent(
            type=EventType.NEAR_EXPIRATION,
            pool_id=pool_id_from_denom(gauge.distribute_to.denom),
            bond_duration_days=bond_days,
            remaining_days=remaining,
            gauge=dict(raw),
        )

    def new_gauge(
        self,
        gauge: Gauge,
        raw: Mapping[str, Any],
        new_indexed: Mapping[str, Mapping[str, Any]],
    ) -> Optional[NotableEvent]:
        remaining = gauge.remaining_days
        if remaining < 0:
            logger.info(
                "Gauge %s has filled_epochs past num_epochs_paid_over; ignoring.", gauge.id
            )
            return None
        bond_days = bond_duration_days(gauge.distribute_to.duration)
        denom = gauge.distribute_to.denom
        pool_id = pool_id_from_denom(denom)

        if self.superfluid_marker in denom:
            if not self._is_first_superfluid(gauge.id, denom, new_indexed):
                logger.debug("Pool %s already has a superfluid gauge; gauge %s suppressed.", pool_id, gauge.id)
                return None
            event_type = EventType.NEW_SUPERFLUID_GAUGE
        elif gauge.is_perpetual and gauge.first_coin_denom == self.native_denom:
            event_type = EventType.NEW_INTERNAL_GAUGE
        elif gauge.is_perpetual and not gauge.coins:
            # placeholder gauge for internal incentives
            return None
        else:
            event_type = EventType.NEW_EXTERNAL_GAUGE

        return NotableEvent(
            type=event_type,
            pool_id=pool_id,
            bond_duration_days=bond_days,
            remaining_days=remaining,
            gauge=dict(raw),
            starts_in_days=self._starts_in_days(gauge),
        )

    def _is_first_superfluid(
        self,
        gauge_id: str,
        denom: str,
        new_indexed: Mapping[str, Mapping[str, Any]],
    ) -> bool:
        pool_key = superfluid_pool_key(denom, self.superfluid_marker)
        if pool_key is None:
            return True
        own_order = _gauge_order(gauge_id)
        for other_id, other in new_indexed.items():
            other_id = str(other_id)
            if other_id == gauge_id:
                continue
            other_denom = ((other or {}).get("distribute_to") or {}).get("denom") or ""
            if superfluid_pool_key(other_denom, self.superfluid_marker) != pool_key:
                continue
            if _gauge_order(other_id) < own_order:
                return False
        return True

    def _starts_in_days(self, gauge: Gauge) -> Optional[int]:
        if not gauge.start_time:
            return None
        try:
            start = parse_timestamp(gauge.start_time)
        except ValueError:
            logger.warning("Gauge %s has unparseable start_time %r", gauge.id, gauge.start_time)
            return None
        seconds = (start - self.clock()).total_seconds()
        return round(seconds / SECONDS_PER_DAY)
