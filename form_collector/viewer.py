from __future__ import annotations

import base64
import binascii
import json
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Optional

from . import config
from .records import SubmissionRecord


def clipboard_text(record: SubmissionRecord) -> str:
    return json.dumps(record.to_dict(), ensure_ascii=False)


def copy_record(record: SubmissionRecord, writer: Callable[[str], Any]) -> bool:
    """Hand a record's JSON to a clipboard writer; failures are not fatal."""
    try:
        writer(clipboard_text(record))
    except Exception as exc:
        print("[form-clipboard]", exc)
        return False
    return True


def format_when(timestamp: str) -> str:
    try:
        moment = datetime.fromisoformat(timestamp.replace("Z", "+00:00"))
    except (AttributeError, ValueError):
        return timestamp
    return moment.astimezone().strftime(config.SUBMITTED_AT_FORMAT)


def table_rows(records: Iterable[SubmissionRecord]) -> List[Dict[str, Any]]:
    rows = []
    for rec in records:
        rows.append(
            {
                "timestamp": rec.timestamp,
                "name": rec.name,
                "email": rec.email,
                "age": rec.age,
                "gender": rec.gender.capitalize(),
                "hobbies": ", ".join(rec.hobbies),
                "profile": rec.profile_url,
                "when": format_when(rec.timestamp),
            }
        )
    return rows


def decode_data_url(url: Optional[str]) -> Optional[bytes]:
    if not url or not url.startswith("data:"):
        return None
    _, sep, payload = url.partition(",")
    if not sep:
        return None
    try:
        return base64.b64decode(payload)
    except (binascii.Error, ValueError):
        return None
