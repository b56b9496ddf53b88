"""Sqlite run ledger: schema upgrades plus runs, deltas and notable events.

The schema version lives in ``PRAGMA user_version``; each file in
``migrations/`` named ``NNN_<name>.sql`` raises it to ``NNN``.
"""

from __future__ import annotations

from contextlib import contextmanager
import json
import logging
from pathlib import Path
import sqlite3
from typing import Any, Iterable, Iterator, Mapping, Optional

from gauge_watch.errors import StoreError
from gauge_watch.models.event import NotableEvent
from gauge_watch.utils.time import utc_now_s


logger = logging.getLogger(__name__)

MIGRATIONS_DIR = Path(__file__).parent / "migrations"
SQLITE_PREFIX = "sqlite://"


def ledger_path(database_url: str) -> str:
    """Filesystem path (or ``:memory:``) behind a ``sqlite://`` URL."""
    if not database_url.startswith(SQLITE_PREFIX):
        raise ValueError(f"Run ledger needs a sqlite:// DATABASE_URL, got {database_url!r}")
    path = database_url[len(SQLITE_PREFIX) :]
    if path.startswith("/"):
        # sqlite:///relative/x.db -> relative/x.db, sqlite:////abs/x.db -> /abs/x.db
        path = path[1:]
    return path or ":memory:"


@contextmanager
def open_ledger(database_url: str) -> Iterator[sqlite3.Connection]:
    """Connection that commits on success, rolls back on error and always closes."""
    path = ledger_path(database_url)
    if path != ":memory:":
        Path(path).parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(path)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    try:
        with conn:
            yield conn
    finally:
        conn.close()


def pending_migrations(current_version: int) -> list[tuple[int, Path]]:
    found = []
    for path in MIGRATIONS_DIR.glob("*.sql"):
        prefix = path.stem.split("_", 1)[0]
        if prefix.isdigit() and int(prefix) > current_version:
            found.append((int(prefix), path))
    return sorted(found)


def migrate(database_url: str) -> list[int]:
    """Bring the ledger schema up to date; returns the versions applied."""
    applied: list[int] = []
    with open_ledger(database_url) as conn:
        version = conn.execute("PRAGMA user_version").fetchone()[0]
        for target, path in pending_migrations(version):
            conn.executescript(path.read_text(encoding="utf-8"))
            # PRAGMA does not accept bound parameters.
            conn.execute(f"PRAGMA user_version = {int(target)}")
            logger.info("Ledger schema upgraded to version %d (%s)", target, path.name)
            applied.append(target)
    return applied


class RunRecorder:
    """Write one row per run into watch_runs plus its deltas and events."""

    def __init__(self, database_url: str, auto_migrate: bool = True) -> None:
        self.database_url = database_url
        if auto_migrate:
            try:
                migrate(database_url)
            except sqlite3.Error as exc:
                raise StoreError(f"Unable to prepare run ledger {database_url}: {exc}") from exc

    def start_run(self) -> int:
        with open_ledger(self.database_url) as conn:
            cur = conn.execute(
                "INSERT INTO watch_runs (started_at, status) VALUES (?, ?)",
                (utc_now_s(), "running"),
            )
            return int(cur.lastrowid)

    def finish_run(
        self,
        run_id: int,
        status: str,
        *,
        gauges_seen: int = 0,
        deltas_count: int = 0,
        events_count: int = 0,
        error: str | None = None,
    ) -> None:
        with open_ledger(self.database_url) as conn:
            conn.execute(
                """
                UPDATE watch_runs
                SET ended_at = ?, status = ?, gauges_seen = ?, deltas_count = ?,
                    events_count = ?, error = ?
                WHERE id = ?
                """,
                (utc_now_s(), status, gauges_seen, deltas_count, events_count, error, run_id),
            )

    def run_summary(self, run_id: int) -> Optional[dict]:
        with open_ledger(self.database_url) as conn:
            row = conn.execute("SELECT * FROM watch_runs WHERE id = ?", (run_id,)).fetchone()
        return dict(row) if row else None

    def record_deltas(self, run_id: int, deltas: Mapping[str, Any]) -> int:
        rows = [
            (run_id, str(gauge_id), json.dumps(delta))
            for gauge_id, delta in deltas.items()
        ]
        if not rows:
            return 0
        with open_ledger(self.database_url) as conn:
            conn.executemany(
                "INSERT INTO gauge_deltas (run_id, gauge_id, delta_json) VALUES (?, ?, ?)",
                rows,
            )
        return len(rows)

    def record_events(self, run_id: int, events: Iterable[NotableEvent]) -> int:
        now = utc_now_s()
        rows = [
            (
                run_id,
                event.type.value,
                event.gauge_id,
                event.pool_id,
                event.bond_duration_days,
                event.remaining_days,
                event.starts_in_days,
                now,
            )
            for event in events
        ]
        if not rows:
            return 0
        with open_ledger(self.database_url) as conn:
            conn.executemany(
                """
                INSERT INTO notable_events
                (run_id, event_type, gauge_id, pool_id, bond_duration_days,
                 remaining_days, starts_in_days, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                rows,
            )
        return len(rows)

    def recent_events(self, limit: int = 20, event_type: Optional[str] = None) -> list[dict]:
        clause = ""
        params: tuple = (limit,)
        if event_type:
            clause = "WHERE event_type = ?"
            params = (event_type, limit)
        with open_ledger(self.database_url) as conn:
            rows = conn.execute(
                f"""
                SELECT run_id, event_type, gauge_id, pool_id, bond_duration_days,
                       remaining_days, starts_in_days, created_at
                FROM notable_events
                {clause}
                ORDER BY id DESC
                LIMIT ?
                """,
                params,
            ).fetchall()
        return [dict(row) for row in rows]
