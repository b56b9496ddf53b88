"""Configuration loader for Gauge Watch."""

from dataclasses import dataclass
import os
from typing import Tuple

from dotenv import load_dotenv


DEFAULT_GAUGES_API_URL = (
    "https://lcd.osmosis.zone/osmosis/incentives/v1beta1/gauges?pagination.limit=9999"
)
DEFAULT_ASSET_LIST_URL = (
    "https://raw.githubusercontent.com/osmosis-labs/assetlists/main/"
    "osmosis-1/osmosis-1.assetlist.json"
)
DEFAULT_POOL_LIST_URL = (
    "https://lcd.osmosis.zone/osmosis/poolmanager/v1beta1/all-pools"
)


def _get_bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "y", "on"}


def _get_csv(value: str | None, default: Tuple[str, ...]) -> Tuple[str, ...]:
    if not value:
        return default
    return tuple(item.strip() for item in value.split(",") if item.strip())


def _get_float(value: str | None, default: float) -> float:
    if value is None or value == "":
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _get_int(value: str | None, default: int) -> int:
    if value is None or value == "":
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _get_int_csv(value: str | None, default: Tuple[int, ...]) -> Tuple[int, ...]:
    items = _get_csv(value, default=())
    if not items:
        return default
    parsed = []
    for item in items:
        try:
            parsed.append(int(item))
        except ValueError:
            continue
    return tuple(parsed)


@dataclass(frozen=True)
class Settings:
    gauges_api_url: str = DEFAULT_GAUGES_API_URL
    rate_limit_seconds: int = 60
    http_timeout_s: float = 30.0
    http_max_retries: int = 3
    cache_dir: str = "cache"
    epoch_hour: int = 19
    native_denom: str = "uosmo"
    superfluid_marker: str = "superbonding"
    pool_url_template: str = "https://app.osmosis.zone/pool/{pool_id}"
    telegram_enabled: bool = False
    telegram_bot_token: str = ""
    telegram_chat_ids: Tuple[str, ...] = ()
    telegram_pause_s: float = 1.0
    deltas_to_file: bool = True
    deltas_to_stdout: bool = False
    deltas_to_db: bool = False
    database_url: str = "sqlite:///data/gauge_watch.db"
    ignore_empty_data: bool = False
    skip_api_fetch: bool = False
    skip_save_old_gauges: bool = False
    skip_save_gauges: bool = False
    skip_save_indexed_gauges: bool = False
    notify_near_expiration_days: Tuple[int, ...] = (14, 7, 1)
    asset_list_url: str = DEFAULT_ASSET_LIST_URL
    pool_list_url: str = DEFAULT_POOL_LIST_URL
    reference_ttl_seconds: int = 86400
    debug: bool = False

    @classmethod
    def from_env(cls) -> "Settings":
        load_dotenv()
        return cls(
            gauges_api_url=os.getenv("GAUGES_API_URL", DEFAULT_GAUGES_API_URL),
            rate_limit_seconds=_get_int(os.getenv("RATE_LIMIT_SECONDS"), 60),
            http_timeout_s=_get_float(os.getenv("HTTP_TIMEOUT_S"), 30.0),
            http_max_retries=_get_int(os.getenv("HTTP_MAX_RETRIES"), 3),
            cache_dir=os.getenv("CACHE_DIR", "cache"),
            epoch_hour=_get_int(os.getenv("EPOCH_HOUR"), 19),
            native_denom=os.getenv("NATIVE_DENOM", "uosmo"),
            superfluid_marker=os.getenv("SUPERFLUID_MARKER", "superbonding"),
            pool_url_template=os.getenv(
                "POOL_URL_TEMPLATE", "https://app.osmosis.zone/pool/{pool_id}"
            ),
            telegram_enabled=_get_bool(os.getenv("TELEGRAM_ENABLED"), default=False),
            telegram_bot_token=os.getenv("TELEGRAM_BOT_TOKEN", ""),
            telegram_chat_ids=_get_csv(os.getenv("TELEGRAM_CHAT_IDS"), default=()),
            telegram_pause_s=_get_float(os.getenv("TELEGRAM_PAUSE_S"), 1.0),
            deltas_to_file=_get_bool(os.getenv("DELTAS_TO_FILE"), default=True),
            deltas_to_stdout=_get_bool(os.getenv("DELTAS_TO_STDOUT"), default=False),
            deltas_to_db=_get_bool(os.getenv("DELTAS_TO_DB"), default=False),
            database_url=os.getenv("DATABASE_URL", "sqlite:///data/gauge_watch.db"),
            ignore_empty_data=_get_bool(os.getenv("IGNORE_EMPTY_DATA")),
            skip_api_fetch=_get_bool(os.getenv("SKIP_API_FETCH")),
            skip_save_old_gauges=_get_bool(os.getenv("SKIP_SAVE_OLD_GAUGES")),
            skip_save_gauges=_get_bool(os.getenv("SKIP_SAVE_GAUGES")),
            skip_save_indexed_gauges=_get_bool(os.getenv("SKIP_SAVE_INDEXED_GAUGES")),
            notify_near_expiration_days=_get_int_csv(
                os.getenv("NOTIFY_NEAR_EXPIRATION_DAYS"), default=(14, 7, 1)
            ),
            asset_list_url=os.getenv("ASSET_LIST_URL", DEFAULT_ASSET_LIST_URL),
            pool_list_url=os.getenv("POOL_LIST_URL", DEFAULT_POOL_LIST_URL),
            reference_ttl_seconds=_get_int(os.getenv("REFERENCE_TTL_SECONDS"), 86400),
            debug=_get_bool(os.getenv("DEBUG")),
        )
