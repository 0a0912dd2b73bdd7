from __future__ import annotations

from typing import Optional


class CalendarError(RuntimeError):
    """Base class for every recoverable failure raised by the calendar core."""


class DraftValidationError(CalendarError):
    """Raised when a dialog draft fails local validation."""


class ConflictError(CalendarError):
    """Raised when a proposed time range overlaps another booking of the same owner."""


class PermissionDeniedError(CalendarError):
    """Raised when the current user may not modify an event."""


class PersistenceError(CalendarError):
    """Raised when the storage backend rejects or fails a call."""


class InvalidTransitionError(CalendarError):
    """Raised when a dialog is asked to move between two states it cannot connect."""


def describe_error(exc: Optional[BaseException], fallback: str) -> str:
    """Return the message worth showing to a user for ``exc``, or ``fallback``."""

    if exc is None:
        return fallback
    message = getattr(exc, "message", None) or str(exc)
    message = message.strip() if isinstance(message, str) else ""
    return message or fallback
