"""Poll gauges, diff against the previous snapshot and notify on notable events."""

from __future__ import annotations

import argparse
import dataclasses
import logging
from pathlib import Path
import sys
import time

sys.path.append(str(Path(__file__).resolve().parents[1] / "src"))

from gauge_watch.config import Settings
from gauge_watch.errors import GaugeWatchError
from gauge_watch.models.enums import RunStatus
from gauge_watch.pipeline import GaugeWatcher


logger = logging.getLogger(__name__)


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Watch incentive gauges for notable changes.")
    parser.add_argument(
        "--cache-dir",
        default=None,
        help="Snapshot directory (default: CACHE_DIR or ./cache).",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Do not rotate snapshots and do not send Telegram messages.",
    )
    parser.add_argument(
        "--use-cache",
        action="store_true",
        help="Read gauges from the cached snapshot instead of the API.",
    )
    parser.add_argument(
        "--loop",
        action="store_true",
        help="Run continuously with sleep interval.",
    )
    parser.add_argument(
        "--interval",
        type=int,
        default=3600,
        help="Loop interval seconds (default: 3600).",
    )
    parser.add_argument("--debug", action="store_true", help="Verbose logging.")
    return parser.parse_args()


def build_settings(args: argparse.Namespace) -> Settings:
    settings = Settings.from_env()
    overrides: dict = {}
    if args.cache_dir:
        overrides["cache_dir"] = args.cache_dir
    if args.dry_run:
        overrides["skip_save_old_gauges"] = True
        overrides["telegram_enabled"] = False
    if args.use_cache:
        overrides["skip_api_fetch"] = True
    if args.debug:
        overrides["debug"] = True
    return dataclasses.replace(settings, **overrides) if overrides else settings


def run_once(settings: Settings) -> RunStatus:
    result = GaugeWatcher(settings).run()
    logger.info(
        "Run %s: %d deltas, %d events, %d messages sent.",
        result.status.value,
        len(result.deltas),
        len(result.events),
        result.messages_sent,
    )
    return result.status


def main() -> int:
    args = parse_args()
    settings = build_settings(args)
    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    if settings.debug:
        logger.debug("Debug logging enabled.")

    if not args.loop:
        try:
            run_once(settings)
        except GaugeWatchError as exc:
            logger.error("Run aborted: %s", exc)
            return 1
        return 0

    while True:
        try:
            run_once(settings)
        except Exception as exc:  # pragma: no cover - keep the loop alive
            logger.exception("Run failed: %s", exc)
        time.sleep(args.interval)


if __name__ == "__main__":
    sys.exit(main())
