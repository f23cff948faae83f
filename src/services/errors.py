"""Moderation error taxonomy.

Every failure is surfaced to the caller as-is; nothing here is retried.
``user_message()`` is what the app shows: the failure category plus the cause.
"""
from __future__ import annotations

from typing import Optional


class ModerationError(Exception):
    kind = "moderation_error"

    def __init__(self, message: str, *, action: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.action = action  # e.g. "submit report", "block user"

    def user_message(self) -> str:
        if self.action:
            return f"Failed to {self.action}: {self.message}"
        return self.message


class ValidationError(ModerationError):
    """Caller-supplied identifiers missing or malformed."""
    kind = "validation_error"


class NotFoundError(ModerationError):
    """Report target does not exist at write time."""
    kind = "not_found"


class InvalidTransitionError(ModerationError):
    """Report status change other than pending -> reviewed/dismissed."""
    kind = "invalid_transition"


class StorageError(ModerationError):
    """Underlying read/write failure."""
    kind = "storage_error"


class StorageTimeoutError(StorageError):
    kind = "storage_timeout"
