"""In-process persistence service.

Used by the test suite and by ``pulso run --memory`` for a throwaway timer
that leaves no history behind.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import replace
from datetime import datetime
from typing import Any

from pydantic import ValidationError

from pulso.core.errors import InvalidSettingsValue, PersistenceUnavailable, SessionNotFound
from pulso.focus.catalog import DEFAULT_ACHIEVEMENTS, sorted_catalog
from pulso.focus.models import (
    Achievement,
    AchievementDefinition,
    SessionRecord,
    SessionType,
    Settings,
)


class MemoryPersistence:
    """Dict-backed implementation of the persistence contract.

    Set ``available = False`` to make every call raise
    :class:`PersistenceUnavailable`, which is how storage outages are
    simulated.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        sessions: list[SessionRecord] | None = None,
        catalog: tuple[AchievementDefinition, ...] = DEFAULT_ACHIEVEMENTS,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.available = True
        self._settings = settings.model_copy() if settings else Settings()
        self._sessions: dict[int, SessionRecord] = {}
        self._next_id = 1
        self._catalog = sorted_catalog(catalog)
        self._unlocks: dict[str, datetime] = {}
        self._clock = clock

        for record in sessions or []:
            self.add_record(record)

    def _check(self) -> None:
        if not self.available:
            raise PersistenceUnavailable("Storage offline")

    def add_record(self, record: SessionRecord) -> int:
        """Insert a prepared record as-is (history seeding)."""
        session_id = self._next_id
        self._next_id += 1
        self._sessions[session_id] = replace(record, id=session_id)
        return session_id

    @property
    def sessions(self) -> list[SessionRecord]:
        """All records in insertion order."""
        return list(self._sessions.values())

    async def create_session(
        self, timestamp: int, duration: int, session_type: SessionType
    ) -> int:
        self._check()
        return self.add_record(
            SessionRecord(timestamp=timestamp, duration=duration, type=session_type)
        )

    async def update_session(
        self, session_id: int, completed: bool, actual_duration: int | None = None
    ) -> None:
        self._check()
        record = self._sessions.get(session_id)
        if record is None:
            raise SessionNotFound(session_id)
        duration = record.duration if actual_duration is None else actual_duration
        self._sessions[session_id] = replace(record, completed=completed, duration=duration)

    async def get_sessions(self, limit: int | None = None) -> list[SessionRecord]:
        self._check()
        ordered = sorted(
            self._sessions.values(), key=lambda s: (s.timestamp, s.id or 0), reverse=True
        )
        return ordered[:limit] if limit is not None else ordered

    async def get_sessions_by_date_range(self, start: int, end: int) -> list[SessionRecord]:
        sessions = await self.get_sessions()
        return [s for s in sessions if start <= s.timestamp <= end]

    async def get_settings(self) -> Settings:
        self._check()
        return self._settings.model_copy()

    async def update_settings(self, changes: dict[str, Any]) -> None:
        self._check()
        updated = self._settings.model_copy()
        for key, value in changes.items():
            if key not in Settings.model_fields:
                raise InvalidSettingsValue(key)
            try:
                setattr(updated, key, value)
            except ValidationError as e:
                raise InvalidSettingsValue(key, value) from e
        self._settings = updated

    async def get_achievements(self) -> list[Achievement]:
        self._check()
        return [
            Achievement.from_definition(definition, self._unlocks.get(definition.id))
            for definition in self._catalog
        ]

    async def unlock_achievement(self, achievement_id: str) -> bool:
        self._check()
        if achievement_id in self._unlocks:
            return False
        self._unlocks[achievement_id] = self._clock()
        return True
