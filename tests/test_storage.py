from __future__ import annotations

import json

import pytest

from form_collector import config
from form_collector.errors import PersistenceFailure
from form_collector.records import SubmissionRecord
from form_collector.storage import FileStore, MemoryStore, SubmissionLog, decode_records, encode_records


def _record(name: str, ts: str, **extra) -> SubmissionRecord:
    return SubmissionRecord(
        name=name,
        email=f"{name.lower()}@x.com",
        age=extra.get("age", ""),
        gender=extra.get("gender", "other"),
        bio=extra.get("bio", ""),
        hobbies=tuple(extra.get("hobbies", ())),
        profile_url=extra.get("profile_url"),
        timestamp=ts,
    )


def test_absent_key_loads_empty(store):
    log = SubmissionLog(store)
    assert log.records == ()
    assert len(log) == 0


def test_persist_then_reload_preserves_order_and_fields(store):
    log = SubmissionLog(store)
    first = _record("Ana", "2026-01-01T00:00:00.000Z", hobbies=["coding"], age="30")
    second = _record("Ben", "2026-01-01T00:00:01.000Z", profile_url="data:image/png;base64,AAAA")
    third = _record("Cy", "2026-01-01T00:00:02.000Z", bio="hi")
    for rec in (first, second, third):
        log.prepend(rec)
    reloaded = SubmissionLog(store)
    assert reloaded.records == (third, second, first)


def test_storage_holds_camel_case_json(store):
    log = SubmissionLog(store)
    log.prepend(_record("Ana", "2026-01-01T00:00:00.000Z"))
    raw = json.loads(store.load(config.STORAGE_KEY).decode("utf-8"))
    assert raw[0]["profileUrl"] is None
    assert set(raw[0]) == {"name", "email", "age", "gender", "bio", "hobbies", "profileUrl", "timestamp"}


def test_delete_removes_matching_record(store):
    log = SubmissionLog(store)
    keep = _record("Ana", "2026-01-01T00:00:00.000Z")
    drop = _record("Ben", "2026-01-01T00:00:01.000Z")
    log.prepend(keep)
    log.prepend(drop)
    assert log.delete(drop.timestamp)
    assert log.records == (keep,)
    assert SubmissionLog(store).records == (keep,)


def test_delete_unknown_timestamp_is_noop(store):
    log = SubmissionLog(store)
    log.prepend(_record("Ana", "2026-01-01T00:00:00.000Z"))
    before = store.load(config.STORAGE_KEY)
    assert log.delete("1999-01-01T00:00:00.000Z") is False
    assert len(log) == 1
    assert store.load(config.STORAGE_KEY) == before


def test_failed_write_leaves_memory_unchanged():
    store = MemoryStore(quota_bytes=16)
    log = SubmissionLog(store)
    with pytest.raises(PersistenceFailure):
        log.prepend(_record("Ana", "2026-01-01T00:00:00.000Z"))
    assert log.records == ()
    assert store.load(config.STORAGE_KEY) is None


def test_memory_store_snapshot_round_trip(store):
    SubmissionLog(store).prepend(_record("Ana", "2026-01-01T00:00:00.000Z"))
    snapshot = store.snapshot()
    assert isinstance(snapshot[config.STORAGE_KEY], str)
    restored = MemoryStore.from_snapshot(snapshot)
    assert SubmissionLog(restored).records == SubmissionLog(store).records


def test_memory_store_from_bad_snapshot():
    assert MemoryStore.from_snapshot(None).snapshot() == {}
    assert MemoryStore.from_snapshot({"k": 3}).snapshot() == {}


def test_file_store_round_trip(tmp_path):
    store = FileStore(tmp_path / "local")
    assert store.load("missing") is None
    store.save("entries", b"[]")
    assert store.load("entries") == b"[]"
    assert store.path_for("entries").exists()
    assert [p.name for p in (tmp_path / "local").iterdir()] == ["entries.json"]


def test_file_store_write_failure_raises(tmp_path):
    blocker = tmp_path / "not_a_dir"
    blocker.write_text("x", encoding="utf-8")
    with pytest.raises(PersistenceFailure):
        FileStore(blocker).save("entries", b"[]")


def test_file_store_backs_submission_log(tmp_path):
    log = SubmissionLog(FileStore(tmp_path))
    rec = _record("Ana", "2026-01-01T00:00:00.000Z")
    log.prepend(rec)
    assert SubmissionLog(FileStore(tmp_path)).records == (rec,)


def test_decode_tolerates_empty_and_non_list():
    assert decode_records(None) == []
    assert decode_records(b"") == []
    assert decode_records(b'{"a": 1}') == []
    assert decode_records(encode_records([])) == []
