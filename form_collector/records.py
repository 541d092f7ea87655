from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Tuple

from .form_state import FormState


@dataclass(frozen=True)
class SubmissionRecord:
    name: str
    email: str
    age: str
    gender: str
    bio: str
    hobbies: Tuple[str, ...] = field(default_factory=tuple)
    profile_url: Optional[str] = None
    timestamp: str = ""

    @classmethod
    def from_form(cls, state: FormState, profile_url: Optional[str], timestamp: str) -> "SubmissionRecord":
        return cls(
            name=state.name,
            email=state.email,
            age=state.age,
            gender=state.gender,
            bio=state.bio,
            hobbies=tuple(state.hobbies),
            profile_url=profile_url,
            timestamp=timestamp,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "email": self.email,
            "age": self.age,
            "gender": self.gender,
            "bio": self.bio,
            "hobbies": list(self.hobbies),
            "profileUrl": self.profile_url,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "SubmissionRecord":
        hobbies = raw.get("hobbies") or []
        return cls(
            name=raw.get("name", ""),
            email=raw.get("email", ""),
            age=raw.get("age", ""),
            gender=raw.get("gender", ""),
            bio=raw.get("bio", ""),
            hobbies=tuple(hobbies),
            profile_url=raw.get("profileUrl"),
            timestamp=raw.get("timestamp", ""),
        )


def _format_timestamp(moment: datetime) -> str:
    ts = moment.astimezone(timezone.utc).isoformat(timespec="milliseconds")
    return ts.replace("+00:00", "Z")


def _parse_timestamp(value: str) -> Optional[datetime]:
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except (TypeError, ValueError, AttributeError):
        return None
    # Stored values without an offset are UTC.
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def next_timestamp(existing: List[str], now: Optional[datetime] = None) -> str:
    """Return a millisecond ISO timestamp later than every one in ``existing``."""
    moment = now or datetime.now(timezone.utc)
    parsed = [p for p in (_parse_timestamp(ts) for ts in existing) if p is not None]
    if parsed:
        latest = max(parsed)
        if moment <= latest:
            moment = latest + timedelta(milliseconds=1)
    candidate = _format_timestamp(moment)
    taken = set(existing)
    while candidate in taken:
        moment += timedelta(milliseconds=1)
        candidate = _format_timestamp(moment)
    return candidate
