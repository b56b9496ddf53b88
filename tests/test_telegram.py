from __future__ import annotations

import json

import httpx
import pytest

from gauge_watch.notify.telegram import TelegramNotifier


def make_notifier(handler, chat_ids=("-100", "-200"), **kwargs):
    return TelegramNotifier(
        "TOKEN",
        chat_ids,
        transport=httpx.MockTransport(handler),
        pause_seconds=0,
        **kwargs,
    )


def test_send_posts_html_to_every_chat():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append((request.url.path, json.loads(request.content)))
        return httpx.Response(200, json={"ok": True})

    notifier = make_notifier(handler)
    assert notifier.send("<b>hi</b>") == 2
    assert [path for path, _ in seen] == ["/botTOKEN/sendMessage"] * 2
    assert [body["chat_id"] for _, body in seen] == ["-100", "-200"]
    assert all(body["parse_mode"] == "HTML" for _, body in seen)


def test_send_retries_then_succeeds(monkeypatch):
    monkeypatch.setattr("gauge_watch.notify.telegram.time.sleep", lambda _: None)
    calls = {"n": 0}

    def handler(request: httpx.Request) -> httpx.Response:
        calls["n"] += 1
        if calls["n"] == 1:
            return httpx.Response(429, json={"ok": False, "parameters": {"retry_after": 1}})
        return httpx.Response(200, json={"ok": True})

    notifier = make_notifier(handler, chat_ids=("-100",))
    assert notifier.send("x") == 1
    assert calls["n"] == 2


def test_failed_chat_is_logged_and_skipped(monkeypatch, caplog):
    monkeypatch.setattr("gauge_watch.notify.telegram.time.sleep", lambda _: None)

    def handler(request: httpx.Request) -> httpx.Response:
        if json.loads(request.content)["chat_id"] == "-100":
            return httpx.Response(400, json={"ok": False, "description": "chat not found"})
        return httpx.Response(200, json={"ok": True})

    notifier = make_notifier(handler, max_retries=2)
    assert notifier.send("x") == 1
    assert "chat not found" in caplog.text


def test_send_batch_keeps_order():
    texts = []

    def handler(request: httpx.Request) -> httpx.Response:
        texts.append(json.loads(request.content)["text"])
        return httpx.Response(200, json={"ok": True})

    notifier = make_notifier(handler, chat_ids=("-1",))
    assert notifier.send_batch(["a", "b", "c"]) == 3
    assert texts == ["a", "b", "c"]


def test_requires_token_and_chats():
    with pytest.raises(ValueError):
        TelegramNotifier("", ["-1"])
    with pytest.raises(ValueError):
        TelegramNotifier("TOKEN", [])
