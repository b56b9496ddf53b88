"""Print notable events recorded in the run ledger."""

from __future__ import annotations

from pathlib import Path
import argparse
import json
import sys
from datetime import datetime, timezone

sys.path.append(str(Path(__file__).resolve().parents[1] / "src"))

from gauge_watch.config import Settings
from gauge_watch.db.recorder import RunRecorder


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Show recent notable events")
    parser.add_argument("--limit", type=int, default=20, help="Max rows (default 20)")
    parser.add_argument("--type", default=None, help="Filter by event type")
    parser.add_argument("--json", action="store_true", help="Output JSON")
    return parser.parse_args()


def utc_iso(ts_s: int | None) -> str | None:
    if ts_s is None:
        return None
    return datetime.fromtimestamp(ts_s, tz=timezone.utc).isoformat()


def main() -> None:
    args = parse_args()
    settings = Settings.from_env()
    recorder = RunRecorder(settings.database_url)
    rows = recorder.recent_events(limit=args.limit, event_type=args.type)
    if args.json:
        print(json.dumps(rows, indent=2))
        return
    for row in rows:
        print(
            f"{utc_iso(row['created_at'])}  {row['event_type']:<22} "
            f"gauge={row['gauge_id']} pool={row['pool_id']} "
            f"bond={row['bond_duration_days']}d remaining={row['remaining_days']}d"
        )


if __name__ == "__main__":
    main()
