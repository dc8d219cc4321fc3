"""Settings singleton with immediate persistence and change notification."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from pulso.core.errors import InvalidSettingsValue, PersistenceError
from pulso.focus.models import Settings

if TYPE_CHECKING:
    from pulso.storage.base import PersistenceService

logger = logging.getLogger(__name__)

SettingsListener = Callable[[Settings], None]


class SettingsStore:
    """Holds the current :class:`Settings` and writes every change through.

    Usage:
        store = SettingsStore(persistence)
        await store.load()
        store.subscribe(timer.apply_settings)
        await store.update(work_duration=50)
    """

    def __init__(self, persistence: PersistenceService, settings: Settings | None = None):
        self.persistence = persistence
        self._settings = settings.model_copy() if settings else Settings()
        self._listeners: list[SettingsListener] = []

    @property
    def settings(self) -> Settings:
        return self._settings.model_copy()

    def subscribe(self, listener: SettingsListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def load(self) -> Settings:
        """Read settings from storage; keep the current ones if that fails."""
        try:
            self._settings = await self.persistence.get_settings()
        except PersistenceError as e:
            logger.warning(f"Using default settings, could not load: {e}")
        self._notify()
        return self.settings

    async def update(self, **changes: Any) -> Settings:
        """Apply clamped changes, persist the changed fields, notify listeners."""
        for key in changes:
            if key not in Settings.model_fields:
                raise InvalidSettingsValue(key)

        updated = self._settings.model_copy()
        for key, value in changes.items():
            try:
                setattr(updated, key, value)
            except ValidationError as e:
                raise InvalidSettingsValue(key, value) from e

        changed = {
            key: getattr(updated, key)
            for key in changes
            if getattr(updated, key) != getattr(self._settings, key)
        }
        if not changed:
            return self.settings

        self._settings = updated
        try:
            await self.persistence.update_settings(changed)
        except PersistenceError as e:
            logger.error(f"Could not save settings {sorted(changed)}: {e}")

        self._notify()
        return self.settings

    async def set(self, name: str, value: Any) -> Settings:
        """Change one field."""
        return await self.update(**{name: value})

    def _notify(self) -> None:
        settings = self.settings
        for listener in list(self._listeners):
            try:
                listener(settings)
            except Exception as e:
                logger.error(f"Error in settings listener: {e}")
