"""Time helpers."""

from __future__ import annotations

from datetime import datetime, timezone
import time


SECONDS_PER_DAY = 86400


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def utc_now_s() -> int:
    return int(time.time())


def parse_timestamp(value: str | datetime) -> datetime:
    """Parse an RFC 3339 timestamp as returned by the chain REST API.

    Nanosecond fractions are truncated to microseconds and naive values are
    assumed to be UTC.
    """
    if isinstance(value, datetime):
        parsed = value
    else:
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        if "." in text:
            head, _, rest = text.partition(".")
            digits = ""
            while rest and rest[0].isdigit():
                digits += rest[0]
                rest = rest[1:]
            text = f"{head}.{digits[:6].ljust(6, '0')}{rest}"
        parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def local_now() -> datetime:
    return datetime.now().astimezone()
