"""Exception types shared by the timer core and its collaborators."""

from __future__ import annotations

from typing import Any

_MISSING = object()


class PulsoError(Exception):
    """Base class for all Pulso errors."""


class PersistenceError(PulsoError):
    """A storage call could not be completed."""


class PersistenceUnavailable(PersistenceError):
    """Storage layer is not initialized or the call failed."""


class SessionNotFound(PersistenceError):
    """An update referenced a session id that does not exist."""

    def __init__(self, session_id: int):
        super().__init__(f"Session not found: {session_id}")
        self.session_id = session_id


class InvalidSettingsValue(PulsoError):
    """A settings change named an unknown field or a value it cannot take."""

    def __init__(self, field_name: str, value: Any = _MISSING):
        if value is _MISSING:
            message = f"Unknown setting: {field_name}"
        else:
            message = f"Invalid value for {field_name}: {value!r}"
        super().__init__(message)
        self.field_name = field_name
        self.value = None if value is _MISSING else value
