"""One poll-diff-classify-notify run."""

from __future__ import annotations

from dataclasses import dataclass, field
import json
import logging
from typing import Any, Optional

from gauge_watch.config import Settings
from gauge_watch.data.indexer import index_gauges, snapshot_gauges
from gauge_watch.data.store import DELTAS_FILE, EVENTS_FILE, INDEXED_FILE, SnapshotStore
from gauge_watch.db.recorder import RunRecorder
from gauge_watch.diff.engine import diff_indexed
from gauge_watch.errors import FetchError
from gauge_watch.events.classifier import EventClassifier
from gauge_watch.ingest.gauges import GaugeClient, is_rate_limit_ok
from gauge_watch.ingest.reference import ReferenceData
from gauge_watch.models.enums import RunStatus
from gauge_watch.models.event import NotableEvent
from gauge_watch.notify.formatter import NotificationFormatter
from gauge_watch.notify.telegram import TelegramNotifier


logger = logging.getLogger(__name__)


@dataclass
class RunResult:
    status: RunStatus
    deltas: dict[str, Any] = field(default_factory=dict)
    events: list[NotableEvent] = field(default_factory=list)
    messages_sent: int = 0


class GaugeWatcher:
    """Wire the collaborators for a single batch run.

    Every collaborator can be injected; the defaults are built from
    ``settings``. The snapshot rotation happens exactly once per run.
    """

    def __init__(
        self,
        settings: Settings,
        store: Optional[SnapshotStore] = None,
        client: Optional[GaugeClient] = None,
        classifier: Optional[EventClassifier] = None,
        formatter: Optional[NotificationFormatter] = None,
        notifier: Optional[TelegramNotifier] = None,
        recorder: Optional[RunRecorder] = None,
    ) -> None:
        self.settings = settings
        self.store = store or SnapshotStore(
            settings.cache_dir,
            persist_current=not settings.skip_save_gauges,
            persist_previous=not settings.skip_save_old_gauges,
        )
        self.client = client
        if self.client is None and not settings.skip_api_fetch:
            self.client = GaugeClient(
                settings.gauges_api_url,
                timeout=settings.http_timeout_s,
                max_retries=settings.http_max_retries,
            )
        self.classifier = classifier or EventClassifier(
            native_denom=settings.native_denom,
            superfluid_marker=settings.superfluid_marker,
        )
        self.formatter = formatter
        self.notifier = notifier
        if settings.telegram_enabled:
            if self.formatter is None:
                reference = ReferenceData(
                    settings.asset_list_url,
                    settings.pool_list_url,
                    settings.cache_dir,
                    ttl_seconds=settings.reference_ttl_seconds,
                    timeout=settings.http_timeout_s,
                )
                self.formatter = NotificationFormatter(settings, reference=reference)
            if self.notifier is None:
                self.notifier = TelegramNotifier(
                    settings.telegram_bot_token,
                    settings.telegram_chat_ids,
                    max_retries=settings.http_max_retries,
                    pause_seconds=settings.telegram_pause_s,
                )
        self.recorder = recorder
        if self.recorder is None and settings.deltas_to_db:
            self.recorder = RunRecorder(settings.database_url)

    def run(self) -> RunResult:
        self.store.ensure_ready()

        if not self.settings.skip_api_fetch:
            age = self.store.current_age_seconds()
            if not is_rate_limit_ok(age, self.settings.rate_limit_seconds):
                logger.warning(
                    "Rate limit: current snapshot is %.0fs old; wait %ss between runs.",
                    age,
                    self.settings.rate_limit_seconds,
                )
                return RunResult(status=RunStatus.RATE_LIMITED)

        current = self._acquire_current()
        if current is None:
            if not self.settings.ignore_empty_data:
                return RunResult(status=RunStatus.NO_DATA)
            logger.warning("Continuing with an empty gauge list (ignore_empty_data).")
            current = {"data": []}

        previous = self.store.load_previous()
        if previous is None:
            logger.info("No previous snapshot; saving baseline and exiting.")
            self.store.promote_current_to_previous()
            return RunResult(status=RunStatus.BOOTSTRAPPED)

        run_id = self.recorder.start_run() if self.recorder else None
        try:
            result = self._process(current, previous, run_id)
        except Exception as exc:
            if self.recorder and run_id is not None:
                self.recorder.finish_run(run_id, RunStatus.FAILED.value, error=str(exc))
            raise

        self.store.promote_current_to_previous()

        if self.notifier is not None and self.formatter is not None and result.events:
            messages = self.formatter.render(result.events)
            result.messages_sent = self.notifier.send_batch(messages)
        return result

    def _acquire_current(self) -> Optional[dict[str, Any]]:
        if self.settings.skip_api_fetch:
            logger.debug("skip_api_fetch set; reading gauges from the local cache.")
            current = self.store.load_current()
            if current is None:
                logger.error("No cached gauges to read.")
            return current

        try:
            current = self.client.fetch()
        except FetchError as exc:
            logger.error("Unable to fetch gauges: %s", exc)
            return None
        self.store.save_current(current)
        return current

    def _process(
        self,
        current: dict[str, Any],
        previous: dict[str, Any],
        run_id: Optional[int],
    ) -> RunResult:
        new_indexed = index_gauges(snapshot_gauges(current))
        old_indexed = index_gauges(snapshot_gauges(previous))

        if not self.settings.skip_save_indexed_gauges:
            self.store.write_artifact(INDEXED_FILE, new_indexed)

        deltas = diff_indexed(old_indexed, new_indexed)
        logger.info("%d of %d gauges changed.", len(deltas), len(new_indexed))
        if self.settings.deltas_to_stdout:
            logger.info("Delta preview: %s", json.dumps(deltas, indent=2))
        if self.settings.deltas_to_file:
            self.store.write_artifact(DELTAS_FILE, deltas)

        events = self.classifier.classify(deltas, new_indexed)
        logger.info("%d notable events.", len(events))
        self.store.write_artifact(EVENTS_FILE, {"data": [event.to_dict() for event in events]})

        if self.recorder and run_id is not None:
            self.recorder.record_deltas(run_id, deltas)
            self.recorder.record_events(run_id, events)
            self.recorder.finish_run(
                run_id,
                RunStatus.COMPLETED.value,
                gauges_seen=len(new_indexed),
                deltas_count=len(deltas),
                events_count=len(events),
            )
        return RunResult(status=RunStatus.COMPLETED, deltas=deltas, events=events)
