"""Key-value persistence and the submission log kept on top of it."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, List, Optional, Protocol, Sequence, Tuple

from . import config
from .errors import PersistenceFailure
from .records import SubmissionRecord


class KeyValueStore(Protocol):
    def load(self, key: str) -> Optional[bytes]:
        ...

    def save(self, key: str, data: bytes) -> None:
        ...


class MemoryStore:
    """Dict-backed store mirrored into a browser ``dcc.Store``."""

    def __init__(self, entries: Optional[Dict[str, bytes]] = None, *, quota_bytes: Optional[int] = None) -> None:
        self._entries: Dict[str, bytes] = dict(entries or {})
        self.quota_bytes = quota_bytes

    @classmethod
    def from_snapshot(cls, snapshot: Optional[Dict[str, str]], *, quota_bytes: Optional[int] = None) -> "MemoryStore":
        entries: Dict[str, bytes] = {}
        if isinstance(snapshot, dict):
            for key, text in snapshot.items():
                if isinstance(text, str):
                    entries[key] = text.encode("utf-8")
        return cls(entries, quota_bytes=quota_bytes)

    def snapshot(self) -> Dict[str, str]:
        return {key: data.decode("utf-8") for key, data in self._entries.items()}

    def load(self, key: str) -> Optional[bytes]:
        return self._entries.get(key)

    def save(self, key: str, data: bytes) -> None:
        if self.quota_bytes is not None:
            used = sum(len(v) for k, v in self._entries.items() if k != key)
            if used + len(data) > self.quota_bytes:
                raise PersistenceFailure(f"storage quota of {self.quota_bytes} bytes exceeded")
        self._entries[key] = bytes(data)


class FileStore:
    """One ``<key>.json`` file per key under ``root``."""

    def __init__(self, root: Path) -> None:
        self.root = Path(root)

    def path_for(self, key: str) -> Path:
        return self.root / f"{key}.json"

    def load(self, key: str) -> Optional[bytes]:
        path = self.path_for(key)
        if not path.exists():
            return None
        return path.read_bytes()

    def save(self, key: str, data: bytes) -> None:
        path = self.path_for(key)
        tmp = path.with_suffix(path.suffix + ".tmp")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_bytes(data)
            tmp.replace(path)
        except OSError as exc:
            raise PersistenceFailure(f"could not write {path}: {exc}") from exc


def encode_records(records: Sequence[SubmissionRecord]) -> bytes:
    return json.dumps([rec.to_dict() for rec in records], ensure_ascii=False).encode("utf-8")


def decode_records(data: Optional[bytes]) -> List[SubmissionRecord]:
    if not data:
        return []
    raw = json.loads(data.decode("utf-8"))
    if not isinstance(raw, list):
        return []
    return [SubmissionRecord.from_dict(item) for item in raw if isinstance(item, dict)]


class SubmissionLog:
    """Newest-first submissions, rewritten in full on every change."""

    def __init__(self, store: KeyValueStore, key: str = config.STORAGE_KEY) -> None:
        self.store = store
        self.key = key
        self._records: Tuple[SubmissionRecord, ...] = tuple(decode_records(store.load(key)))

    @property
    def records(self) -> Tuple[SubmissionRecord, ...]:
        return self._records

    @property
    def timestamps(self) -> List[str]:
        return [rec.timestamp for rec in self._records]

    def __len__(self) -> int:
        return len(self._records)

    def find(self, timestamp: str) -> Optional[SubmissionRecord]:
        for rec in self._records:
            if rec.timestamp == timestamp:
                return rec
        return None

    def _persist(self, records: Tuple[SubmissionRecord, ...]) -> None:
        # Memory only changes once the store accepted the write.
        self.store.save(self.key, encode_records(records))
        self._records = records

    def prepend(self, record: SubmissionRecord) -> None:
        self._persist((record, *self._records))

    def delete(self, timestamp: str) -> bool:
        remaining = tuple(rec for rec in self._records if rec.timestamp != timestamp)
        if len(remaining) == len(self._records):
            return False
        self._persist(remaining)
        return True
