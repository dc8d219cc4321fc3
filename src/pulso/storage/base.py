"""Contract between the timer core and whatever stores its data."""

from __future__ import annotations

from typing import Any, Protocol

from pulso.focus.models import Achievement, SessionRecord, SessionType, Settings


class PersistenceService(Protocol):
    """Session, settings and achievement storage.

    Implementations raise :class:`~pulso.core.errors.PersistenceUnavailable`
    when the backing store cannot be reached and
    :class:`~pulso.core.errors.SessionNotFound` for updates to unknown ids.
    """

    async def create_session(
        self, timestamp: int, duration: int, session_type: SessionType
    ) -> int:
        """Store an incomplete session and return its id."""
        ...

    async def update_session(
        self, session_id: int, completed: bool, actual_duration: int | None = None
    ) -> None:
        """Set the completed flag and, if given, the corrected duration."""
        ...

    async def get_sessions(self, limit: int | None = None) -> list[SessionRecord]:
        """Sessions newest first."""
        ...

    async def get_sessions_by_date_range(self, start: int, end: int) -> list[SessionRecord]:
        """Sessions with ``start <= timestamp <= end`` (epoch ms), newest first."""
        ...

    async def get_settings(self) -> Settings:
        ...

    async def update_settings(self, changes: dict[str, Any]) -> None:
        """Persist only the given fields."""
        ...

    async def get_achievements(self) -> list[Achievement]:
        """Catalog joined with unlock state, ordered by threshold."""
        ...

    async def unlock_achievement(self, achievement_id: str) -> bool:
        """Unlock once; return False if it was already unlocked."""
        ...
