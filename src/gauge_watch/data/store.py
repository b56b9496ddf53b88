"""File-backed snapshot store for the current and previous gauge generations."""

from __future__ import annotations

import json
import logging
import shutil
import time
from pathlib import Path
from typing import Any, Optional

from gauge_watch.errors import StoreError


logger = logging.getLogger(__name__)


CURRENT_FILE = "gauges.json"
PREVIOUS_FILE = "gauges-old.json"
INDEXED_FILE = "indexed-gauges.json"
DELTAS_FILE = "deltas.json"
EVENTS_FILE = "notable-events.json"


class SnapshotStore:
    """Two generations of raw gauge snapshots plus per-run artifacts.

    ``promote_current_to_previous`` is the only rotation primitive. Reads fail
    open: a missing or unreadable generation is reported as ``None``.
    """

    def __init__(
        self,
        cache_dir: str | Path,
        *,
        persist_current: bool = True,
        persist_previous: bool = True,
    ) -> None:
        self.cache_dir = Path(cache_dir)
        self.persist_current = persist_current
        self.persist_previous = persist_previous

    @property
    def current_path(self) -> Path:
        return self.cache_dir / CURRENT_FILE

    @property
    def previous_path(self) -> Path:
        return self.cache_dir / PREVIOUS_FILE

    def ensure_ready(self) -> None:
        try:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StoreError(f"Unable to create cache dir {self.cache_dir}: {exc}") from exc

    def load_current(self) -> Optional[dict[str, Any]]:
        return self._load_snapshot(self.current_path)

    def load_previous(self) -> Optional[dict[str, Any]]:
        return self._load_snapshot(self.previous_path)

    def save_current(self, snapshot: dict[str, Any]) -> bool:
        if not self.persist_current:
            logger.debug("Current snapshot persistence disabled; not saving %s", CURRENT_FILE)
            return False
        self._write_json(self.current_path, snapshot)
        logger.info("Current snapshot saved to %s", self.current_path)
        return True

    def promote_current_to_previous(self) -> bool:
        """Copy the current generation over the previous one."""
        if not self.persist_previous:
            logger.debug("Previous snapshot persistence disabled; not rotating.")
            return False
        if not self.current_path.exists():
            logger.warning("No current snapshot at %s to promote.", self.current_path)
            return False
        try:
            shutil.copyfile(self.current_path, self.previous_path)
        except OSError as exc:
            raise StoreError(
                f"Unable to copy {self.current_path} to {self.previous_path}: {exc}"
            ) from exc
        logger.info("Promoted %s to %s", CURRENT_FILE, PREVIOUS_FILE)
        return True

    def current_age_seconds(self) -> Optional[float]:
        try:
            mtime = self.current_path.stat().st_mtime
        except FileNotFoundError:
            return None
        except OSError as exc:
            logger.warning("Unable to stat %s: %s", self.current_path, exc)
            return None
        return time.time() - mtime

    def write_artifact(self, name: str, payload: Any) -> Path:
        path = self.cache_dir / name
        self._write_json(path, payload)
        logger.info("%s saved.", path)
        return path

    def read_artifact(self, name: str) -> Optional[Any]:
        path = self.cache_dir / name
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return None
        except (OSError, ValueError) as exc:
            logger.warning("Unable to read %s: %s", path, exc)
            return None

    def _load_snapshot(self, path: Path) -> Optional[dict[str, Any]]:
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.info("Snapshot %s not found.", path)
            return None
        except (OSError, UnicodeDecodeError) as exc:
            logger.error("Unable to read snapshot %s: %s", path, exc)
            return None
        try:
            payload = json.loads(raw)
        except json.JSONDecodeError as exc:
            logger.error("Snapshot %s is not valid JSON: %s", path, exc)
            return None
        if not isinstance(payload, dict) or not isinstance(payload.get("data"), list):
            logger.error("Snapshot %s has no data list.", path)
            return None
        return payload

    def _write_json(self, path: Path, payload: Any) -> None:
        tmp_path = path.with_suffix(path.suffix + ".tmp")
        try:
            tmp_path.write_text(json.dumps(payload), encoding="utf-8")
            tmp_path.replace(path)
        except (OSError, TypeError, ValueError) as exc:
            tmp_path.unlink(missing_ok=True)
            raise StoreError(f"Unable to write {path}: {exc}") from exc
