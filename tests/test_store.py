from __future__ import annotations

import json

import pytest

from gauge_watch.data.store import SnapshotStore
from gauge_watch.errors import StoreError

from conftest import make_gauge


@pytest.fixture
def store(tmp_path) -> SnapshotStore:
    store = SnapshotStore(tmp_path / "cache")
    store.ensure_ready()
    return store


def test_missing_generations_are_not_found(store):
    assert store.load_current() is None
    assert store.load_previous() is None
    assert store.current_age_seconds() is None


def test_save_and_promote(store):
    snapshot = {"data": [make_gauge(1)]}
    assert store.save_current(snapshot)
    assert store.load_current() == snapshot
    assert store.load_previous() is None

    assert store.promote_current_to_previous()
    assert store.load_previous() == snapshot
    assert store.current_age_seconds() is not None


def test_promote_without_current_is_noop(store):
    assert store.promote_current_to_previous() is False
    assert store.load_previous() is None


def test_promote_respects_persist_override(tmp_path):
    store = SnapshotStore(tmp_path, persist_previous=False)
    store.save_current({"data": []})
    assert store.promote_current_to_previous() is False
    assert not store.previous_path.exists()


def test_save_current_respects_persist_override(tmp_path):
    store = SnapshotStore(tmp_path, persist_current=False)
    assert store.save_current({"data": []}) is False
    assert not store.current_path.exists()


def test_corrupt_snapshot_fails_open(store, caplog):
    store.previous_path.write_text("{not json", encoding="utf-8")
    assert store.load_previous() is None
    assert "not valid JSON" in caplog.text


def test_snapshot_without_data_list_is_not_found(store):
    store.current_path.write_text(json.dumps({"data": None}), encoding="utf-8")
    assert store.load_current() is None


def test_artifacts_round_trip(store):
    store.write_artifact("deltas.json", {"1": {"filled_epochs": ["1", "2"]}})
    assert store.read_artifact("deltas.json") == {"1": {"filled_epochs": ["1", "2"]}}
    assert store.read_artifact("missing.json") is None


def test_unwritable_cache_dir_is_fatal(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("x", encoding="utf-8")
    store = SnapshotStore(blocker / "cache")
    with pytest.raises(StoreError):
        store.ensure_ready()


def test_undecodable_snapshot_fails_open(store, caplog):
    store.previous_path.write_bytes(b'{"data": ["\xff\xfe"]}')
    assert store.load_previous() is None
    assert "Unable to read snapshot" in caplog.text


def test_undecodable_artifact_reads_as_missing(store):
    (store.cache_dir / "deltas.json").write_bytes(b"\xff\xfe\x00")
    assert store.read_artifact("deltas.json") is None


def test_failed_write_leaves_no_temp_file(store):
    with pytest.raises(StoreError):
        store.write_artifact("deltas.json", {"bad": object()})
    assert not (store.cache_dir / "deltas.json.tmp").exists()
    assert not (store.cache_dir / "deltas.json").exists()


def test_failed_replace_removes_temp_file(store):
    store.current_path.mkdir()
    (store.current_path / "occupied").write_text("x", encoding="utf-8")
    with pytest.raises(StoreError):
        store.save_current({"data": []})
    assert not (store.cache_dir / "gauges.json.tmp").exists()
