"""SQLite-backed persistence service."""

from __future__ import annotations

import json
import logging
import sqlite3
from collections.abc import Callable
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
from pulso.storage.database import Database

logger = logging.getLogger(__name__)


class SqlitePersistence:
    """Stores sessions, settings and achievement unlocks in a :class:`Database`.

    Usage:
        db = await init_database(config.db_path)
        store = SqlitePersistence(db)
        session_id = await store.create_session(now_ms, 1500, SessionType.WORK)
    """

    def __init__(
        self,
        db: Database,
        catalog: tuple[AchievementDefinition, ...] = DEFAULT_ACHIEVEMENTS,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.db = db
        self._catalog = sorted_catalog(catalog)
        self._clock = clock

    async def _run(self, operation: str, coro: Any) -> Any:
        """Await a database call, translating driver errors."""
        try:
            return await coro
        except sqlite3.Error as e:
            raise PersistenceUnavailable(f"{operation} failed: {e}") from e

    # Sessions
    async def create_session(
        self, timestamp: int, duration: int, session_type: SessionType
    ) -> int:
        record = SessionRecord(timestamp=timestamp, duration=duration, type=session_type)
        session_id = await self._run(
            "create_session", self.db.insert("sessions", record.to_db_dict())
        )
        if not session_id:
            raise PersistenceUnavailable("Failed to create session: no ID returned")
        logger.debug(f"Created {session_type.value} session {session_id}")
        return session_id

    async def update_session(
        self, session_id: int, completed: bool, actual_duration: int | None = None
    ) -> None:
        if actual_duration is not None:
            changed = await self._run(
                "update_session",
                self.db.execute_update(
                    "UPDATE sessions SET completed = ?, duration = ? WHERE id = ?",
                    (completed, actual_duration, session_id),
                ),
            )
        else:
            changed = await self._run(
                "update_session",
                self.db.execute_update(
                    "UPDATE sessions SET completed = ? WHERE id = ?",
                    (completed, session_id),
                ),
            )
        if changed == 0:
            raise SessionNotFound(session_id)

    async def get_sessions(self, limit: int | None = None) -> list[SessionRecord]:
        if limit is not None:
            rows = await self._run(
                "get_sessions",
                self.db.fetch_all(
                    "SELECT * FROM sessions ORDER BY timestamp DESC, id DESC LIMIT ?",
                    (limit,),
                ),
            )
        else:
            rows = await self._run(
                "get_sessions",
                self.db.fetch_all("SELECT * FROM sessions ORDER BY timestamp DESC, id DESC"),
            )
        return [SessionRecord.from_db_row(row) for row in rows]

    async def get_sessions_by_date_range(self, start: int, end: int) -> list[SessionRecord]:
        rows = await self._run(
            "get_sessions_by_date_range",
            self.db.fetch_all(
                """SELECT * FROM sessions
                   WHERE timestamp >= ? AND timestamp <= ?
                   ORDER BY timestamp DESC, id DESC""",
                (start, end),
            ),
        )
        return [SessionRecord.from_db_row(row) for row in rows]

    # Settings
    async def get_settings(self) -> Settings:
        row = await self._run(
            "get_settings", self.db.fetch_one("SELECT * FROM settings WHERE id = 1")
        )
        if row is None:
            raise PersistenceUnavailable("Settings not found")
        row.pop("id", None)
        return Settings.model_validate(row)

    async def update_settings(self, changes: dict[str, Any]) -> None:
        if not changes:
            return

        for key in changes:
            if key not in Settings.model_fields:
                raise InvalidSettingsValue(key)
        try:
            validated = Settings.model_validate(changes)
        except ValidationError as e:
            key = str(e.errors()[0]["loc"][0])
            raise InvalidSettingsValue(key, changes.get(key)) from e

        fields: list[str] = []
        values: list[Any] = []
        for key in changes:
            value = getattr(validated, key)
            fields.append(f"{key} = ?")
            if key == "youtube_playlists":
                values.append(json.dumps(list(value)))
            elif isinstance(value, bool):
                values.append(1 if value else 0)
            else:
                values.append(value)

        await self._run(
            "update_settings",
            self.db.execute_update(
                f"UPDATE settings SET {', '.join(fields)} WHERE id = 1", tuple(values)
            ),
        )

    # Achievements
    async def get_achievements(self) -> list[Achievement]:
        rows = await self._run(
            "get_achievements",
            self.db.fetch_all("SELECT achievement_id, unlocked_at FROM achievement_unlocks"),
        )
        unlocks = {
            row["achievement_id"]: datetime.fromisoformat(row["unlocked_at"]) for row in rows
        }
        return [
            Achievement.from_definition(definition, unlocks.get(definition.id))
            for definition in self._catalog
        ]

    async def unlock_achievement(self, achievement_id: str) -> bool:
        changed = await self._run(
            "unlock_achievement",
            self.db.execute_update(
                """INSERT INTO achievement_unlocks (achievement_id, unlocked_at)
                   VALUES (?, ?)
                   ON CONFLICT(achievement_id) DO NOTHING""",
                (achievement_id, self._clock().isoformat()),
            ),
        )
        return changed > 0
