"""Exceptions raised by the form collector core."""

from __future__ import annotations


class FormCollectorError(Exception):
    """Base class for form collector failures."""


class EncodingFailure(FormCollectorError):
    """The selected profile image could not be read for encoding."""


class PersistenceFailure(FormCollectorError):
    """The durable storage write did not complete."""
