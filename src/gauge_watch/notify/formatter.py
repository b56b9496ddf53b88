"""Render notable events as Telegram HTML messages."""

from __future__ import annotations

import html
import logging
from datetime import datetime, timedelta
from typing import Callable, Iterable, Optional

from gauge_watch.config import Settings
from gauge_watch.ingest.reference import ReferenceData
from gauge_watch.models.enums import EventType
from gauge_watch.models.event import NotableEvent
from gauge_watch.utils.time import local_now, parse_timestamp


logger = logging.getLogger(__name__)


HEADINGS = {
    EventType.NEAR_EXPIRATION: "⚠️ LP Incentives expiring soon!",
    EventType.NEW_EXTERNAL_GAUGE: "💰 New External Incentives Added!",
    EventType.NEW_INTERNAL_GAUGE: "💰 New Internal (🧪 $OSMO) Incentives Added!",
    EventType.NEW_SUPERFLUID_GAUGE: "🌟 Superfluid Staking Enabled!",
}


def time_until_epoch(
    start_time: str | datetime,
    now: datetime,
    epoch_hour: int,
    epoch_minute: int = 16,
) -> str:
    """Countdown to the first epoch at or after ``start_time`` as ``"Xd, Yh, Zm"``.

    The epoch hour is interpreted in the timezone of ``now``.
    """
    start = parse_timestamp(start_time).astimezone(now.tzinfo)
    if start < now:
        start = now
    epoch = start.replace(hour=epoch_hour, minute=epoch_minute, second=0, microsecond=0)
    if epoch <= start:
        epoch += timedelta(days=1)
    total_minutes = int((epoch - now).total_seconds() // 60)
    days, rest = divmod(total_minutes, 24 * 60)
    hours, minutes = divmod(rest, 60)
    return f"{days}d, {hours}h, {minutes}m"


class NotificationFormatter:
    def __init__(
        self,
        settings: Settings,
        reference: Optional[ReferenceData] = None,
        clock: Callable[[], datetime] = local_now,
    ) -> None:
        self.settings = settings
        self.reference = reference
        self.clock = clock

    def render(self, events: Iterable[NotableEvent]) -> list[str]:
        """Messages in event order; anything not rendered is logged."""
        messages: list[str] = []
        for event in events:
            if not self.should_notify(event):
                logger.info(
                    "Not notifying %s for pool %s: %s-day duration not enabled.",
                    event.type.value,
                    event.pool_id,
                    event.bond_duration_days,
                )
                continue
            text = self.format(event)
            if text is None:
                logger.warning("No template for event type %s; dropped.", event.type)
                continue
            messages.append(text)
        return messages

    def should_notify(self, event: NotableEvent) -> bool:
        if event.type is not EventType.NEAR_EXPIRATION:
            return True
        return event.bond_duration_days in self.settings.notify_near_expiration_days

    def format(self, event: NotableEvent) -> Optional[str]:
        heading = HEADINGS.get(event.type)
        if heading is None:
            return None
        lines = [f"<i>{heading}</i>", "", f"Pool: {self._pool_label(event.pool_id)}"]

        if event.type is EventType.NEW_SUPERFLUID_GAUGE:
            return "\n".join(lines)

        lines.append(f"Unbonding duration: <b>{event.bond_duration_days} days</b>")
        if event.type is EventType.NEAR_EXPIRATION:
            lines.append(f"Remaining incentives: <b>{event.remaining_days} days</b>")
            return "\n".join(lines)

        rewards = self._rewards_label(event)
        if rewards:
            lines.append(f"Rewards: <b>{rewards}</b>")
        start_time = event.gauge.get("start_time")
        if start_time:
            try:
                countdown = time_until_epoch(start_time, self.clock(), self.settings.epoch_hour)
                lines.append(f"Next epoch in: <b>{countdown}</b>")
            except ValueError as exc:
                logger.warning("Unable to compute next epoch for gauge %s: %s", event.gauge_id, exc)
        lines.append(f"Incentive duration: <b>{event.remaining_days} days</b>")
        return "\n".join(lines)

    def _pool_label(self, pool_id: str) -> str:
        url = self.settings.pool_url_template.format(pool_id=pool_id)
        label = f'<b><a href="{html.escape(url, quote=True)}">{html.escape(pool_id)}</a></b>'
        if self.reference is not None:
            symbols = self.reference.pool_symbols(pool_id)
            if symbols:
                label += f" ({html.escape('/'.join(symbols))})"
        return label

    def _rewards_label(self, event: NotableEvent) -> str:
        denoms = [
            coin.get("denom")
            for coin in event.gauge.get("coins") or []
            if isinstance(coin, dict) and coin.get("denom")
        ]
        if not denoms:
            return ""
        symbols = []
        for denom in denoms:
            symbol = self.reference.resolve_asset_symbol(denom) if self.reference else None
            symbols.append(symbol or denom)
        return html.escape(", ".join(symbols))
