"""Telegram delivery with retries and pacing."""

from __future__ import annotations

import logging
import time
from typing import Iterable, Optional, Sequence

import httpx

from gauge_watch.errors import NotificationError


logger = logging.getLogger(__name__)


TELEGRAM_API_BASE = "https://api.telegram.org"


class TelegramNotifier:
    """Send HTML messages to every configured chat."""

    def __init__(
        self,
        token: str,
        chat_ids: Sequence[str],
        max_retries: int = 3,
        pause_seconds: float = 1.0,
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None,
        api_base: str = TELEGRAM_API_BASE,
    ) -> None:
        if not token:
            raise ValueError("Telegram bot token is required")
        if not chat_ids:
            raise ValueError("At least one Telegram chat id is required")
        self.token = token
        self.chat_ids = tuple(chat_ids)
        self.max_retries = max(1, max_retries)
        self.pause_seconds = pause_seconds
        self.timeout = timeout
        self.transport = transport
        self.api_base = api_base.rstrip("/")

    def send(self, text: str) -> int:
        """Send ``text`` to all chats; returns how many accepted it."""
        delivered = 0
        with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
            for chat_id in self.chat_ids:
                try:
                    self._send_one(client, chat_id, text)
                    delivered += 1
                except NotificationError as exc:
                    logger.error("Telegram notification to %s failed: %s", chat_id, exc)
        return delivered

    def send_batch(self, texts: Iterable[str]) -> int:
        sent = 0
        for idx, text in enumerate(texts):
            if idx and self.pause_seconds > 0:
                time.sleep(self.pause_seconds)
            if self.send(text):
                sent += 1
        logger.info("Telegram batch finished: %d messages delivered.", sent)
        return sent

    def _send_one(self, client: httpx.Client, chat_id: str, text: str) -> None:
        url = f"{self.api_base}/bot{self.token}/sendMessage"
        payload = {
            "chat_id": chat_id,
            "text": text,
            "parse_mode": "HTML",
            "disable_web_page_preview": True,
        }
        last_error: Optional[str] = None
        for attempt in range(1, self.max_retries + 1):
            try:
                response = client.post(url, json=payload)
                body = response.json()
                if not isinstance(body, dict):
                    body = {}
                if response.status_code == 200 and body.get("ok"):
                    logger.debug("Telegram notification sent to %s.", chat_id)
                    return
                last_error = str(body.get("description") or response.status_code)
                retry_after = (body.get("parameters") or {}).get("retry_after")
            except (httpx.HTTPError, ValueError) as exc:
                last_error = str(exc)
                retry_after = None
            if attempt < self.max_retries:
                time.sleep(float(retry_after) if retry_after else 0.5 * attempt)
        raise NotificationError(last_error or "unknown error")
