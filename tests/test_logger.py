from __future__ import annotations

import csv
import io

from form_collector import config
from form_collector.logger import (
    append_jsonl,
    build_csv_content,
    read_jsonl,
    session_log_path,
    write_event,
)
from form_collector.records import SubmissionRecord


def test_write_event_appends_jsonl(tmp_path):
    write_event("abc", "submit", data_dir=tmp_path, timestamp="t1")
    write_event("abc", "delete", data_dir=tmp_path, timestamp="t1")
    records = read_jsonl(session_log_path("abc", tmp_path))
    assert [r["event"] for r in records] == ["submit", "delete"]
    assert records[0]["schema_version"] == config.SCHEMA_VERSION
    assert records[0]["session_id"] == "abc"
    assert records[1]["seq"] == records[0]["seq"] + 1
    assert records[0]["timestamp"] == "t1"


def test_missing_session_id_logged_as_unknown(tmp_path):
    record = write_event("", "reset", data_dir=tmp_path, mode="streamlit")
    assert record["session_id"] == "unknown"
    assert record["mode"] == "streamlit"
    assert session_log_path("", tmp_path).name == "session_unknown.jsonl"


def test_write_failure_is_reported_not_raised(tmp_path, capsys):
    blocker = tmp_path / "file"
    blocker.write_text("x", encoding="utf-8")
    write_event("abc", "submit", data_dir=blocker)
    assert "[form-log]" in capsys.readouterr().out


def test_read_jsonl_skips_bad_lines(tmp_path):
    path = tmp_path / "log.jsonl"
    append_jsonl(path, {"event": "ok"})
    with path.open("a", encoding="utf-8") as fh:
        fh.write("{broken\n\n")
    append_jsonl(path, {"event": "later"})
    assert [r["event"] for r in read_jsonl(path)] == ["ok", "later"]
    assert read_jsonl(tmp_path / "absent.jsonl") == []


def test_build_csv_content():
    assert build_csv_content([]) is None
    rec = SubmissionRecord("Ana", "ana@x.com", "30", "female", "hi", ("coding", "music"), None, "t1")
    rows = list(csv.DictReader(io.StringIO(build_csv_content([rec]))))
    assert list(rows[0]) == config.CSV_COLUMNS
    assert rows[0]["hobbies"] == "coding;music"
    assert rows[0]["profileUrl"] == ""
