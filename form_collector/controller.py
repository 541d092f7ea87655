"""Form controller: field edits, preview sync and the submit transaction."""

from __future__ import annotations

from typing import Any, List, Optional

from . import form_state as editor
from .encoding import encode_profile
from .form_state import FormState, ProfileImage, default_form_state
from .preview import PreviewManager, PreviewRegistry
from .records import SubmissionRecord, next_timestamp
from .storage import KeyValueStore, SubmissionLog
from .validation import ValidationResult, has_errors, validate


class FormController:
    def __init__(self, store: KeyValueStore, *, registry: Optional[PreviewRegistry] = None) -> None:
        self.log = SubmissionLog(store)
        self.preview = PreviewManager(registry)
        self.state: FormState = default_form_state()
        self.errors: ValidationResult = {}

    @property
    def submissions(self):
        return self.log.records

    def load_log(self, store: KeyValueStore) -> None:
        """Re-read the submission log from ``store``; the form is left alone."""
        self.log = SubmissionLog(store)

    # Field editor

    def change(self, name: str, value: Any) -> FormState:
        self.state = editor.change_field(self.state, name, value)
        return self.state

    def set_agree(self, checked: bool) -> FormState:
        self.state = editor.set_agree(self.state, checked)
        return self.state

    def toggle_hobby(self, value: str, checked: bool) -> FormState:
        self.state = editor.toggle_hobby(self.state, value, checked)
        return self.state

    def set_hobbies(self, values: Optional[List[str]]) -> FormState:
        self.state = editor.set_hobbies(self.state, values)
        return self.state

    def select_file(self, profile: Optional[ProfileImage]) -> FormState:
        self.state = editor.select_profile(self.state, profile)
        self.preview.sync(self.state.profile)
        return self.state

    # Submission

    async def submit(self) -> Optional[SubmissionRecord]:
        """Validate, encode, persist and reset.

        Returns ``None`` when validation fails. Encoding and persistence
        errors propagate and leave the form as it was.
        """
        self.errors = validate(self.state)
        if has_errors(self.errors):
            return None

        snapshot = self.state
        profile_url = await encode_profile(snapshot.profile)
        record = SubmissionRecord.from_form(
            snapshot,
            profile_url,
            next_timestamp(self.log.timestamps),
        )
        self.log.prepend(record)
        self._clear()
        return record

    def reset(self) -> None:
        self._clear()

    def _clear(self) -> None:
        self.state = default_form_state()
        self.preview.release()
        self.errors = {}

    def delete(self, timestamp: str) -> bool:
        return self.log.delete(timestamp)
