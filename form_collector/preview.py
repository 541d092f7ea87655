"""Preview handles for the selected profile image.

A ``PreviewRegistry`` plays the part of the browser's object-URL table: each
handle maps a ``blob:`` token to the image it was created from until it is
revoked. ``PreviewManager`` keeps at most one live handle per form and
releases the superseded one on every path that replaces or clears the image.
"""

from __future__ import annotations

import threading
import uuid
from typing import Dict, Optional

from . import config
from .form_state import ProfileImage


class PreviewHandle:
    def __init__(self, registry: "PreviewRegistry", token: str, profile: ProfileImage):
        self._registry = registry
        self.token = token
        self.profile = profile
        self.released = False

    @property
    def url(self) -> str:
        return f"{config.PREVIEW_ROUTE}/{self.token}"

    def release(self) -> None:
        if self.released:
            return
        self.released = True
        self._registry.revoke(self.token)

    def __repr__(self) -> str:
        state = "released" if self.released else "live"
        return f"<PreviewHandle {self.token} {state}>"


class PreviewRegistry:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._entries: Dict[str, ProfileImage] = {}

    def create(self, profile: ProfileImage) -> PreviewHandle:
        token = f"{config.PREVIEW_TOKEN_PREFIX}{uuid.uuid4().hex}"
        with self._lock:
            self._entries[token] = profile
        return PreviewHandle(self, token, profile)

    def revoke(self, token: str) -> None:
        with self._lock:
            self._entries.pop(token, None)

    def resolve(self, token: str) -> Optional[ProfileImage]:
        with self._lock:
            return self._entries.get(token)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class PreviewManager:
    def __init__(self, registry: Optional[PreviewRegistry] = None) -> None:
        self.registry = registry if registry is not None else PreviewRegistry()
        self._current: Optional[PreviewHandle] = None

    @property
    def current(self) -> Optional[PreviewHandle]:
        return self._current

    @property
    def url(self) -> Optional[str]:
        return self._current.url if self._current is not None else None

    def sync(self, profile: Optional[ProfileImage]) -> Optional[PreviewHandle]:
        if self._current is not None and profile is self._current.profile:
            return self._current
        self.release()
        if profile is None:
            return None
        self._current = self.registry.create(profile)
        return self._current

    def release(self) -> None:
        handle, self._current = self._current, None
        if handle is not None:
            handle.release()
