"""Tests for the SQLite and in-memory persistence services."""

from datetime import datetime

import pytest
from conftest import finish_phase

from pulso.core.errors import InvalidSettingsValue, PersistenceUnavailable, SessionNotFound
from pulso.focus.models import Phase, SessionType, Settings
from pulso.focus.pomodoro import PomodoroTimer
from pulso.storage.database import Database, init_database
from pulso.storage.memory import MemoryPersistence
from pulso.storage.sqlite import SqlitePersistence

UNLOCKED_AT = datetime(2026, 10, 18, 9, 30)


@pytest.fixture
async def db(tmp_path):
    database = await init_database(tmp_path / "pulso.db")
    yield database
    await database.close()


@pytest.fixture
def sqlite_store(db):
    return SqlitePersistence(db, clock=lambda: UNLOCKED_AT)


class TestDatabase:
    async def test_schema_created(self, db):
        tables = await db.fetch_all("SELECT name FROM sqlite_master WHERE type = 'table'")
        names = {row["name"] for row in tables}

        assert {"schema_version", "sessions", "achievement_unlocks", "settings"} <= names
        assert await db.check_integrity()

    async def test_reconnect_keeps_settings_row(self, tmp_path):
        path = tmp_path / "pulso.db"
        first = await init_database(path)
        await first.close()

        second = await init_database(path)
        rows = await second.fetch_all("SELECT id FROM settings")
        await second.close()

        assert rows == [{"id": 1}]

    async def test_unconnected_database_is_unavailable(self, tmp_path):
        store = SqlitePersistence(Database(tmp_path / "never.db"))

        with pytest.raises(PersistenceUnavailable):
            await store.get_sessions()

    async def test_backup(self, db, tmp_path):
        backup_path = db.backup(tmp_path / "backups")

        assert backup_path.exists()


class TestSqliteSessions:
    async def test_create_and_update(self, sqlite_store):
        session_id = await sqlite_store.create_session(1_000, 1500, SessionType.WORK)

        await sqlite_store.update_session(session_id, True, 900)

        [record] = await sqlite_store.get_sessions()
        assert record.id == session_id
        assert record.timestamp == 1_000
        assert record.duration == 900
        assert record.type == SessionType.WORK
        assert record.completed

    async def test_update_without_duration_keeps_planned(self, sqlite_store):
        session_id = await sqlite_store.create_session(1_000, 300, SessionType.SHORT_BREAK)

        await sqlite_store.update_session(session_id, True)

        [record] = await sqlite_store.get_sessions()
        assert record.duration == 300

    async def test_update_unknown_session(self, sqlite_store):
        with pytest.raises(SessionNotFound):
            await sqlite_store.update_session(42, True, 10)

    async def test_sessions_newest_first(self, sqlite_store):
        for timestamp in (3_000, 1_000, 2_000):
            await sqlite_store.create_session(timestamp, 60, SessionType.WORK)

        sessions = await sqlite_store.get_sessions()
        assert [s.timestamp for s in sessions] == [3_000, 2_000, 1_000]

        limited = await sqlite_store.get_sessions(limit=2)
        assert [s.timestamp for s in limited] == [3_000, 2_000]

    async def test_date_range_is_inclusive(self, sqlite_store):
        for timestamp in (1_000, 2_000, 3_000, 4_000):
            await sqlite_store.create_session(timestamp, 60, SessionType.WORK)

        sessions = await sqlite_store.get_sessions_by_date_range(2_000, 3_000)

        assert [s.timestamp for s in sessions] == [3_000, 2_000]

    async def test_zero_limit_returns_nothing(self, sqlite_store):
        await sqlite_store.create_session(1_000, 60, SessionType.WORK)

        assert await sqlite_store.get_sessions(limit=0) == []


class TestSqliteSettings:
    async def test_defaults(self, sqlite_store):
        assert await sqlite_store.get_settings() == Settings()

    async def test_partial_update_round_trip(self, sqlite_store):
        await sqlite_store.update_settings(
            {
                "work_duration": 50,
                "auto_start_work": True,
                "youtube_playlists": ["https://example.com/a", "https://example.com/b"],
            }
        )

        settings = await sqlite_store.get_settings()

        assert settings.work_duration == 50
        assert settings.auto_start_work is True
        assert settings.short_break_duration == 5
        assert settings.youtube_playlists == ["https://example.com/a", "https://example.com/b"]

    async def test_update_clamps(self, sqlite_store):
        await sqlite_store.update_settings({"pomodoros_until_long_break": 99})

        settings = await sqlite_store.get_settings()

        assert settings.pomodoros_until_long_break == 10

    async def test_unknown_key(self, sqlite_store):
        with pytest.raises(InvalidSettingsValue):
            await sqlite_store.update_settings({"colour": "red"})

    async def test_invalid_value(self, sqlite_store):
        with pytest.raises(InvalidSettingsValue) as exc_info:
            await sqlite_store.update_settings({"auto_start_breaks": "maybe"})

        assert exc_info.value.field_name == "auto_start_breaks"
        assert (await sqlite_store.get_settings()) == Settings()


class TestSqliteAchievements:
    async def test_catalog_starts_locked(self, sqlite_store):
        achievements = await sqlite_store.get_achievements()

        assert len(achievements) == 11
        assert not any(a.unlocked for a in achievements)

    async def test_unlock_once(self, sqlite_store):
        assert await sqlite_store.unlock_achievement("first_session")
        assert not await sqlite_store.unlock_achievement("first_session")

        achievements = {a.id: a for a in await sqlite_store.get_achievements()}
        assert achievements["first_session"].unlocked
        assert achievements["first_session"].unlocked_at == UNLOCKED_AT
        assert not achievements["ten_sessions"].unlocked


class TestTimerWithSqlite:
    async def test_full_work_session_is_persisted(self, sqlite_store):
        timer = PomodoroTimer(sqlite_store, settings=Settings(work_duration=1))
        await timer.start()
        await finish_phase(timer)

        assert timer.state == Phase.SHORT_BREAK
        work, short_break = sorted(await sqlite_store.get_sessions(), key=lambda s: s.id)
        assert work.completed and work.duration == 60
        assert short_break.type == SessionType.SHORT_BREAK
        assert not short_break.completed

        achievements = {a.id: a for a in await sqlite_store.get_achievements()}
        assert achievements["first_session"].unlocked


class TestMemoryPersistence:
    async def test_outage_raises(self):
        store = MemoryPersistence()
        store.available = False

        with pytest.raises(PersistenceUnavailable):
            await store.create_session(0, 60, SessionType.WORK)

    async def test_update_unknown_session(self):
        with pytest.raises(SessionNotFound):
            await MemoryPersistence().update_session(7, True)

    async def test_unlock_once(self):
        store = MemoryPersistence(clock=lambda: UNLOCKED_AT)

        assert await store.unlock_achievement("streak_3")
        assert not await store.unlock_achievement("streak_3")

    async def test_zero_limit_returns_nothing(self):
        store = MemoryPersistence()
        await store.create_session(0, 60, SessionType.WORK)

        assert await store.get_sessions(limit=0) == []
        assert len(await store.get_sessions()) == 1
