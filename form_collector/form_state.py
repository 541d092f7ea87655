"""In-progress form state and the field editor operations that mutate it."""

from __future__ import annotations

import base64
import binascii
import mimetypes
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, List, Optional

from . import config
from .errors import EncodingFailure


@dataclass(frozen=True)
class ProfileImage:
    filename: str
    content_type: str = config.DEFAULT_CONTENT_TYPE
    data: Optional[bytes] = field(default=None, repr=False)
    path: Optional[Path] = None

    @classmethod
    def from_bytes(cls, data: bytes, filename: str, content_type: Optional[str] = None) -> "ProfileImage":
        return cls(filename=filename, content_type=content_type or _guess_type(filename), data=data)

    @classmethod
    def from_path(cls, path: Path, content_type: Optional[str] = None) -> "ProfileImage":
        path = Path(path)
        return cls(filename=path.name, content_type=content_type or _guess_type(path.name), path=path)

    @classmethod
    def from_data_url(cls, contents: str, filename: Optional[str]) -> "ProfileImage":
        """Build from the ``data:<type>;base64,<payload>`` string a browser upload produces."""
        header, sep, payload = contents.partition(",")
        if not sep or not header.startswith("data:"):
            raise ValueError("upload contents are not a data URL")
        content_type = header[len("data:"):].split(";", 1)[0] or None
        try:
            data = base64.b64decode(payload, validate=True)
        except binascii.Error as exc:
            raise ValueError("upload contents are not valid base64") from exc
        name = filename or "upload"
        return cls(filename=name, content_type=content_type or _guess_type(name), data=data)

    def read(self) -> bytes:
        if self.data is not None:
            return self.data
        if self.path is None:
            raise EncodingFailure(f"{self.filename}: no image data")
        try:
            return self.path.read_bytes()
        except OSError as exc:
            raise EncodingFailure(f"{self.filename}: {exc}") from exc


def _guess_type(filename: str) -> str:
    guessed, _ = mimetypes.guess_type(filename)
    return guessed or config.DEFAULT_CONTENT_TYPE


@dataclass(frozen=True)
class FormState:
    name: str = ""
    email: str = ""
    age: str = ""
    gender: str = ""
    bio: str = ""
    hobbies: List[str] = field(default_factory=list)
    agree: bool = False
    profile: Optional[ProfileImage] = None

    def is_default(self) -> bool:
        return self == FormState()


def default_form_state() -> FormState:
    return FormState(**{k: (list(v) if isinstance(v, list) else v) for k, v in config.DEFAULT_FORM.items()})


def change_field(state: FormState, name: str, value: Any) -> FormState:
    if name not in config.SCALAR_FIELDS:
        raise ValueError(f"unknown form field: {name!r}")
    return replace(state, **{name: "" if value is None else str(value)})


def set_agree(state: FormState, checked: bool) -> FormState:
    return replace(state, agree=bool(checked))


def toggle_hobby(state: FormState, value: str, checked: bool) -> FormState:
    if value not in config.HOBBY_OPTIONS:
        return state
    hobbies = list(state.hobbies)
    if checked:
        if value in hobbies:
            return state
        hobbies.append(value)
    else:
        if value not in hobbies:
            return state
        hobbies = [h for h in hobbies if h != value]
    return replace(state, hobbies=hobbies)


def set_hobbies(state: FormState, values: Optional[List[str]]) -> FormState:
    """Apply a full checklist value as a series of per-tag toggles."""
    selected = list(values or [])
    for hobby in list(state.hobbies):
        if hobby not in selected:
            state = toggle_hobby(state, hobby, False)
    for hobby in selected:
        state = toggle_hobby(state, hobby, True)
    return state


def select_profile(state: FormState, profile: Optional[ProfileImage]) -> FormState:
    return replace(state, profile=profile)
