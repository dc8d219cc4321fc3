from __future__ import annotations

from datetime import datetime

import pytest

from pulso.focus.models import Achievement, SessionRecord, SessionType, Settings
from pulso.focus.pomodoro import PomodoroTimer
from pulso.storage.memory import MemoryPersistence


def ms(moment: datetime) -> int:
    """Epoch milliseconds for a local datetime."""
    return int(moment.timestamp() * 1000)


def work(moment: datetime, duration: int = 25 * 60, completed: bool = True) -> SessionRecord:
    return SessionRecord(
        timestamp=ms(moment), duration=duration, type=SessionType.WORK, completed=completed
    )


class RecordingNotifier:
    """Notification sink that remembers what it was asked to do."""

    def __init__(self) -> None:
        self.sounds: list[int] = []
        self.announced: list[Achievement] = []
        self.errors: list[str] = []

    def play_completion_sound(self, volume: int) -> None:
        self.sounds.append(volume)

    def announce_achievements(self, achievements: list[Achievement]) -> None:
        self.announced.extend(achievements)

    def report_error(self, message: str) -> None:
        self.errors.append(message)


async def finish_phase(timer: PomodoroTimer) -> None:
    """Tick until the current countdown reaches zero."""
    for _ in range(timer.context.time_remaining):
        await timer.tick()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def persistence() -> MemoryPersistence:
    return MemoryPersistence()


@pytest.fixture
def make_timer(persistence, notifier):
    def factory(**settings) -> PomodoroTimer:
        return PomodoroTimer(persistence, notifier=notifier, settings=Settings(**settings))

    return factory
