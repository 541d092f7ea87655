"""JSON array file behind the HTTP form endpoint."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List


def read_submissions(path: Path) -> List[Dict[str, Any]]:
    path = Path(path)
    if not path.exists():
        return []
    text = path.read_text(encoding="utf-8")
    if text.strip() == "":
        return []
    return json.loads(text)


def write_submissions(path: Path, submissions: List[Dict[str, Any]]) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + ".tmp")
    tmp.write_text(json.dumps(submissions, indent=2, ensure_ascii=False), encoding="utf-8")
    tmp.replace(path)


def append_submission(path: Path, entry: Dict[str, Any]) -> List[Dict[str, Any]]:
    submissions = read_submissions(path)
    submissions.append(entry)
    write_submissions(path, submissions)
    return submissions
