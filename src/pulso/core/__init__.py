"""Core configuration, errors and application wiring."""

from pulso.core.config import Config, get_config
from pulso.core.errors import (
    InvalidSettingsValue,
    PersistenceError,
    PersistenceUnavailable,
    PulsoError,
    SessionNotFound,
)

__all__ = [
    "Config",
    "get_config",
    "InvalidSettingsValue",
    "PersistenceError",
    "PersistenceUnavailable",
    "PulsoError",
    "SessionNotFound",
]
