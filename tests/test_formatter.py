from __future__ import annotations

import dataclasses
import logging
from datetime import datetime, timezone

import pytest

from gauge_watch.models.enums import EventType
from gauge_watch.models.event import NotableEvent
from gauge_watch.notify.formatter import NotificationFormatter, time_until_epoch

from conftest import FIXED_NOW, make_gauge


class FakeReference:
    def pool_symbols(self, pool_id):
        return {"1": ["ATOM", "OSMO"]}.get(pool_id)

    def resolve_asset_symbol(self, denom):
        return {"ibc/ATOM": "ATOM", "uosmo": "OSMO"}.get(denom)


def event(event_type, *, bond=14, remaining=14, gauge=None):
    return NotableEvent(
        type=event_type,
        pool_id="1",
        bond_duration_days=bond,
        remaining_days=remaining,
        gauge=gauge or make_gauge(5),
        starts_in_days=1,
    )


@pytest.fixture
def formatter(settings):
    return NotificationFormatter(settings, reference=FakeReference(), clock=lambda: FIXED_NOW)


@pytest.mark.parametrize(
    "start, now, expected",
    [
        ("2024-03-02T17:00:00Z", FIXED_NOW, "1d, 7h, 16m"),
        ("2024-01-01T00:00:00Z", FIXED_NOW, "0d, 7h, 16m"),
        ("2024-01-01T00:00:00Z", datetime(2024, 3, 1, 20, 0, tzinfo=timezone.utc), "0d, 23h, 16m"),
    ],
)
def test_time_until_epoch(start, now, expected):
    assert time_until_epoch(start, now, epoch_hour=19) == expected


def test_external_gauge_message(formatter):
    text = formatter.format(event(EventType.NEW_EXTERNAL_GAUGE, remaining=30))
    assert text.startswith("<i>💰 New External Incentives Added!</i>")
    assert 'href="https://app.osmosis.zone/pool/1"' in text
    assert "(ATOM/OSMO)" in text
    assert "Unbonding duration: <b>14 days</b>" in text
    assert "Rewards: <b>ATOM</b>" in text
    assert "Next epoch in: <b>1d, 7h, 16m</b>" in text
    assert "Incentive duration: <b>30 days</b>" in text


def test_internal_gauge_message(formatter):
    gauge = make_gauge(6, is_perpetual=True, coins=[{"denom": "uosmo", "amount": "1"}])
    text = formatter.format(event(EventType.NEW_INTERNAL_GAUGE, gauge=gauge))
    assert "New Internal" in text
    assert "Rewards: <b>OSMO</b>" in text


def test_superfluid_message_is_short(formatter):
    text = formatter.format(event(EventType.NEW_SUPERFLUID_GAUGE))
    assert "Superfluid Staking Enabled!" in text
    assert "Unbonding" not in text


def test_near_expiration_message(formatter):
    text = formatter.format(event(EventType.NEAR_EXPIRATION, bond=7, remaining=7))
    assert "expiring soon" in text
    assert "Remaining incentives: <b>7 days</b>" in text
    assert "Next epoch" not in text


def test_render_keeps_order_and_filters_disabled_durations(settings, caplog):
    settings = dataclasses.replace(settings, notify_near_expiration_days=(14,))
    formatter = NotificationFormatter(settings, clock=lambda: FIXED_NOW)
    events = [
        event(EventType.NEW_SUPERFLUID_GAUGE),
        event(EventType.NEAR_EXPIRATION, bond=7, remaining=7),
        event(EventType.NEAR_EXPIRATION, bond=14, remaining=14),
        event(EventType.NEW_EXTERNAL_GAUGE),
    ]
    with caplog.at_level(logging.INFO):
        messages = formatter.render(events)
    assert len(messages) == 3
    assert "Superfluid" in messages[0]
    assert "Remaining incentives: <b>14 days</b>" in messages[1]
    assert "External" in messages[2]
    assert "7-day duration not enabled" in caplog.text


def test_pool_label_without_reference(settings):
    formatter = NotificationFormatter(settings, clock=lambda: FIXED_NOW)
    text = formatter.format(event(EventType.NEW_SUPERFLUID_GAUGE))
    assert text.endswith('<b><a href="https://app.osmosis.zone/pool/1">1</a></b>')


def test_bad_start_time_is_logged_not_raised(formatter, caplog):
    gauge = make_gauge(8, start_time="not-a-time")
    text = formatter.format(event(EventType.NEW_EXTERNAL_GAUGE, gauge=gauge))
    assert "Next epoch" not in text
    assert "Unable to compute next epoch" in caplog.text
