from __future__ import annotations

import math
import re
from typing import Dict

from . import config
from .form_state import FormState

_EMAIL_RE = re.compile(config.EMAIL_PATTERN)
_NUMBER_RE = re.compile(r"\s*[+-]?([0-9]+\.?[0-9]*|\.[0-9]+)([eE][+-]?[0-9]+)?\s*")

ValidationResult = Dict[str, str]


def _is_positive_number(raw: str) -> bool:
    # Plain decimal or exponent notation only: no "inf", no "1_000".
    if not _NUMBER_RE.fullmatch(raw):
        return False
    try:
        num = float(raw)
    except (TypeError, ValueError):
        return False
    if not math.isfinite(num):
        return False
    return num > 0


def validate(state: FormState) -> ValidationResult:
    """Check every rule and collect the failing fields.

    All checks run on each call so the result always reflects the full form.
    ``bio``, ``hobbies`` and ``profile`` are never validated.
    """
    errors: ValidationResult = {}
    if not state.name.strip():
        errors["name"] = config.ERROR_MESSAGES["name"]
    if not state.email.strip():
        errors["email"] = config.ERROR_MESSAGES["email_required"]
    elif not _EMAIL_RE.fullmatch(state.email):
        errors["email"] = config.ERROR_MESSAGES["email_invalid"]
    if state.age and not _is_positive_number(state.age):
        errors["age"] = config.ERROR_MESSAGES["age"]
    if state.gender not in config.GENDER_OPTIONS:
        errors["gender"] = config.ERROR_MESSAGES["gender"]
    if not state.agree:
        errors["agree"] = config.ERROR_MESSAGES["agree"]
    return errors


def has_errors(result: ValidationResult) -> bool:
    # Key presence counts, even with an empty message.
    return len(result) > 0
