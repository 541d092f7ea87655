from __future__ import annotations

import json

from form_collector.records import SubmissionRecord
from form_collector.viewer import clipboard_text, copy_record, decode_data_url, format_when, table_rows

RECORD = SubmissionRecord(
    name="Ana",
    email="ana@x.com",
    age="30",
    gender="female",
    bio="",
    hobbies=("coding", "music"),
    profile_url=None,
    timestamp="2026-01-01T12:00:00.000Z",
)


def test_clipboard_text_is_record_json():
    assert json.loads(clipboard_text(RECORD)) == RECORD.to_dict()


def test_copy_record_hands_text_to_writer():
    written = []
    assert copy_record(RECORD, written.append)
    assert written == [clipboard_text(RECORD)]


def test_copy_failure_is_ignored(capsys):
    def denied(_text):
        raise PermissionError("clipboard permission denied")

    assert copy_record(RECORD, denied) is False
    assert "[form-clipboard]" in capsys.readouterr().out


def test_table_rows_format():
    (row,) = table_rows([RECORD])
    assert row["hobbies"] == "coding, music"
    assert row["gender"] == "Female"
    assert row["profile"] is None
    assert row["timestamp"] == RECORD.timestamp
    assert row["when"] != RECORD.timestamp


def test_format_when_passes_through_garbage():
    assert format_when("not a time") == "not a time"


def test_decode_data_url():
    assert decode_data_url("data:image/png;base64,aGVsbG8=") == b"hello"
    assert decode_data_url(None) is None
    assert decode_data_url("https://example.com/x.png") is None
