"""Tests for settings clamping and the settings store."""

import pytest

from pulso.core.errors import InvalidSettingsValue
from pulso.focus.models import SETTING_BOUNDS, Settings, clamp_setting
from pulso.focus.settings import SettingsStore
from pulso.storage.memory import MemoryPersistence


class TestClamping:
    def test_defaults(self):
        settings = Settings()

        assert settings.work_duration == 25
        assert settings.short_break_duration == 5
        assert settings.long_break_duration == 15
        assert settings.pomodoros_until_long_break == 4
        assert settings.max_cycles == 0
        assert settings.notification_volume == 50
        assert settings.youtube_playlists == []

    @pytest.mark.parametrize("field_name", sorted(SETTING_BOUNDS))
    def test_out_of_range_values_clamp_to_bounds(self, field_name):
        low, high = SETTING_BOUNDS[field_name]

        assert getattr(Settings(**{field_name: low - 1}), field_name) == low
        assert getattr(Settings(**{field_name: high + 1}), field_name) == high

    def test_non_numeric_becomes_minimum(self):
        assert Settings(work_duration="abc").work_duration == 1
        assert Settings(max_cycles=None).max_cycles == 0

    def test_numeric_strings_are_parsed(self):
        assert Settings(work_duration="30").work_duration == 30
        assert Settings(work_duration="45.9").work_duration == 45

    def test_assignment_is_clamped(self):
        settings = Settings()

        settings.notification_volume = 150

        assert settings.notification_volume == 100

    def test_playlists_accept_json_text(self):
        settings = Settings(youtube_playlists='["https://example.com/list"]')

        assert settings.youtube_playlists == ["https://example.com/list"]

    def test_clamp_setting(self):
        assert clamp_setting(7, 1, 10) == 7
        assert clamp_setting(float("inf"), 1, 10) == 1
        assert clamp_setting([], 1, 10) == 1


class TestSettingsStore:
    @pytest.fixture
    def persistence(self):
        return MemoryPersistence()

    @pytest.fixture
    def store(self, persistence):
        return SettingsStore(persistence)

    async def test_load_reads_storage(self, persistence, store):
        await persistence.update_settings({"work_duration": 45})

        settings = await store.load()

        assert settings.work_duration == 45

    async def test_load_keeps_current_when_storage_is_down(self, persistence):
        store = SettingsStore(persistence, Settings(work_duration=33))
        persistence.available = False

        settings = await store.load()

        assert settings.work_duration == 33

    async def test_update_persists_clamped_value(self, persistence, store):
        settings = await store.update(work_duration=500, auto_start_breaks=True)

        assert settings.work_duration == 120
        assert settings.auto_start_breaks
        stored = await persistence.get_settings()
        assert stored.work_duration == 120
        assert stored.auto_start_breaks

    async def test_update_notifies_listeners(self, store):
        seen = []
        store.subscribe(seen.append)

        await store.set("short_break_duration", 10)

        assert [s.short_break_duration for s in seen] == [10]

    async def test_unchanged_values_do_not_notify(self, store):
        seen = []
        store.subscribe(seen.append)

        await store.update(work_duration=25)

        assert seen == []

    async def test_unknown_key_raises(self, persistence, store):
        with pytest.raises(InvalidSettingsValue) as exc_info:
            await store.update(tempo=3)

        assert exc_info.value.field_name == "tempo"
        assert (await persistence.get_settings()) == Settings()

    async def test_storage_failure_still_applies_in_memory(self, persistence, store):
        persistence.available = False

        settings = await store.update(work_duration=50)

        assert settings.work_duration == 50

    async def test_unsubscribe(self, store):
        seen = []
        unsubscribe = store.subscribe(seen.append)
        unsubscribe()

        await store.update(work_duration=50)

        assert seen == []

    async def test_invalid_boolean_raises(self, persistence, store):
        with pytest.raises(InvalidSettingsValue) as exc_info:
            await store.update(auto_start_breaks="maybe")

        assert exc_info.value.field_name == "auto_start_breaks"
        assert exc_info.value.value == "maybe"
        assert "Invalid value" in str(exc_info.value)
        assert store.settings == Settings()
        assert (await persistence.get_settings()) == Settings()

    async def test_memory_storage_rejects_invalid_value_whole(self, persistence):
        with pytest.raises(InvalidSettingsValue):
            await persistence.update_settings({"work_duration": 50, "auto_start_work": "maybe"})

        assert (await persistence.get_settings()).work_duration == 25
