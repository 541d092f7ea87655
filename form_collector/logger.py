from __future__ import annotations

import csv
import io
import json
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from . import config
from .records import SubmissionRecord

_SESSION_LOG_STATE: Dict[str, Dict[str, Any]] = {}


def safe_session_id(session_id: Optional[str]) -> str:
    return session_id if isinstance(session_id, str) and session_id else "unknown"


def next_seq_and_elapsed(session_id: str) -> Dict[str, Any]:
    state = _SESSION_LOG_STATE.setdefault(session_id, {"seq": 0, "last_ms": None})
    now_ms = int(time.time() * 1000)
    seq = state["seq"] + 1
    state["seq"] = seq
    elapsed = 0
    if state["last_ms"] is not None:
        elapsed = max(now_ms - state["last_ms"], 0)
    state["last_ms"] = now_ms
    ts = datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
    return {"seq": seq, "elapsed_time_ms": elapsed, "t_server_iso": ts}


def base_record(session_id: str, event: str, *, mode: str = config.APP_MODE, **extras: Any) -> Dict[str, Any]:
    safe_id = safe_session_id(session_id)
    timing = next_seq_and_elapsed(safe_id)
    record: Dict[str, Any] = {
        "schema_version": config.SCHEMA_VERSION,
        "session_id": safe_id,
        "t_server_iso": timing["t_server_iso"],
        "seq": timing["seq"],
        "event": event,
        "elapsed_time_ms": timing["elapsed_time_ms"],
        "mode": mode,
    }
    record.update(extras)
    return record


def session_log_path(session_id: str, data_dir: Optional[Path] = None) -> Path:
    return (data_dir or config.DATA_DIR) / f"session_{safe_session_id(session_id)}.jsonl"


def append_jsonl(path: Path, record: Dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("a", encoding="utf-8") as fh:
        fh.write(json.dumps(record, ensure_ascii=False) + "\n")
        fh.flush()


def read_jsonl(path: Path) -> List[Dict[str, Any]]:
    if not path.exists():
        return []
    records: List[Dict[str, Any]] = []
    with path.open("r", encoding="utf-8") as fh:
        for line in fh:
            line = line.strip()
            if not line:
                continue
            try:
                records.append(json.loads(line))
            except json.JSONDecodeError:
                continue
    return records


def write_event(
    session_id: str,
    event: str,
    *,
    data_dir: Optional[Path] = None,
    mode: str = config.APP_MODE,
    **extras: Any,
) -> Dict[str, Any]:
    record = base_record(session_id, event, mode=mode, **extras)
    try:
        append_jsonl(session_log_path(session_id, data_dir), record)
    except Exception as exc:
        print("[form-log]", exc, record)
    return record


def build_csv_content(records: Sequence[SubmissionRecord]) -> Optional[str]:
    if not records:
        return None
    columns = list(config.CSV_COLUMNS)
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=columns, extrasaction="ignore")
    writer.writeheader()
    for rec in records:
        row = rec.to_dict()
        row["hobbies"] = ";".join(rec.hobbies)
        row["profileUrl"] = "yes" if rec.profile_url else ""
        writer.writerow({col: row.get(col) for col in columns})
    return buffer.getvalue()
