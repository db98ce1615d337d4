"""Error taxonomy for the Reminders bridge.

Every failure the bridge reports to its callers is a ``RemindersError``.
``str(exc)`` is the human-readable message placed in the ``{error: ...}``
envelope.
"""

from typing import Iterable, Optional


class RemindersError(Exception):
    """Base exception for all Reminders bridge errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class AccessDeniedError(RemindersError):
    """Raised when access to the reminder store was not granted."""

    def __init__(self, detail: Optional[str] = None):
        message = "Access to Reminders was denied"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class BackendUnavailableError(RemindersError):
    """Raised when the native bridge library cannot be loaded on this host."""

    def __init__(self, reason: str):
        super().__init__(f"Reminders backend unavailable: {reason}")
        self.reason = reason


class ListNotFoundError(RemindersError):
    def __init__(self, name: str):
        super().__init__(f"List not found: {name}")
        self.name = name


class ReminderNotFoundError(RemindersError):
    def __init__(self, title: str):
        super().__init__(f"Reminder not found: {title}")
        self.title = title


class FetchFailedError(RemindersError):
    def __init__(self):
        super().__init__("Failed to fetch reminders")


class SaveFailedError(RemindersError):
    def __init__(self, reason: str):
        super().__init__(f"Failed to save: {reason}")
        self.reason = reason


class InvalidDateError(RemindersError):
    def __init__(self, text: str):
        super().__init__(f"Invalid date: {text} (expected format: yyyy-MM-dd HH:mm)")
        self.text = text


class InvalidEnumError(RemindersError):
    def __init__(self, field: str, value: str, allowed: Iterable[str]):
        allowed = list(allowed)
        super().__init__(f"Invalid {field}: {value} ({'/'.join(allowed)})")
        self.field = field
        self.value = value
        self.allowed = allowed


class InvalidValueError(RemindersError):
    """Raised when a numeric argument is outside its accepted range."""

    def __init__(self, field: str, value, constraint: str):
        super().__init__(f"Invalid {field}: {value} (must be {constraint})")
        self.field = field
        self.value = value
        self.constraint = constraint


class ProjectionError(RemindersError):
    """Raised when a native reminder cannot be projected into the entity model."""

    def __init__(self, title: str, reason: str):
        super().__init__(f"Could not read reminder {title!r}: {reason}")
        self.title = title
        self.reason = reason


class ScriptingError(RemindersError):
    """Failure reported by the scripting backend.

    The backend has no structured error model, so the message is its raw
    diagnostic output.
    """

    def __init__(self, diagnostic: str):
        super().__init__(diagnostic)
        self.diagnostic = diagnostic


VALIDATION_ERRORS = (InvalidDateError, InvalidEnumError, InvalidValueError)
