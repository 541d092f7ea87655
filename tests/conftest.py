from __future__ import annotations

from typing import Optional

import pytest

from form_collector.controller import FormController
from form_collector.errors import PersistenceFailure
from form_collector.form_state import ProfileImage
from form_collector.preview import PreviewRegistry
from form_collector.storage import MemoryStore

PNG_BYTES = b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR"


class FailingStore(MemoryStore):
    """Store whose writes always fail, as a full localStorage would."""

    def save(self, key: str, data: bytes) -> None:
        raise PersistenceFailure("quota exceeded")


@pytest.fixture()
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture()
def registry() -> PreviewRegistry:
    return PreviewRegistry()


@pytest.fixture()
def controller(store: MemoryStore, registry: PreviewRegistry) -> FormController:
    return FormController(store, registry=registry)


@pytest.fixture()
def profile() -> ProfileImage:
    return ProfileImage.from_bytes(PNG_BYTES, "me.png")


def fill_valid(ctrl: FormController, name: str = "Ana", email: str = "ana@x.com", gender: Optional[str] = "female"):
    ctrl.change("name", name)
    ctrl.change("email", email)
    ctrl.change("gender", gender)
    ctrl.set_agree(True)
    return ctrl.state
