"""Notification formatting and delivery."""

from gauge_watch.notify.formatter import NotificationFormatter, time_until_epoch
from gauge_watch.notify.telegram import TelegramNotifier

__all__ = ["NotificationFormatter", "TelegramNotifier", "time_until_epoch"]
