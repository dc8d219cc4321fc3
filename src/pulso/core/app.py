"""Wires storage, settings, the timer and its tick driver together."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pulso.core.config import Config, get_config
from pulso.focus.achievements import AchievementEvaluator
from pulso.focus.models import Phase
from pulso.focus.pomodoro import PomodoroTimer
from pulso.focus.settings import SettingsStore
from pulso.focus.ticker import Ticker
from pulso.storage.database import Database, init_database
from pulso.storage.memory import MemoryPersistence
from pulso.storage.sqlite import SqlitePersistence

if TYPE_CHECKING:
    from pulso.notifications.base import NotificationSink
    from pulso.storage.base import PersistenceService

logger = logging.getLogger(__name__)


class PulsoApp:
    """Owns the lifecycle of every component.

    Usage:
        async with PulsoApp(notifier=ConsoleNotifier()) as pulso:
            await pulso.timer.start()
            ...
    """

    def __init__(
        self,
        config: Config | None = None,
        notifier: NotificationSink | None = None,
        in_memory: bool = False,
    ):
        self.config = config or get_config()
        self.notifier = notifier
        self.in_memory = in_memory

        # Initialized in start()
        self.db: Database | None = None
        self.persistence: PersistenceService | None = None
        self.settings_store: SettingsStore | None = None
        self.evaluator: AchievementEvaluator | None = None
        self.timer: PomodoroTimer | None = None
        self.ticker: Ticker | None = None

        self._unsubscribe_settings = None

    async def start(self) -> None:
        """Open storage, load settings and build the timer (not ticking yet)."""
        if self.timer is not None:
            logger.warning("Pulso already started")
            return

        if self.in_memory:
            self.persistence = MemoryPersistence()
        else:
            self.config.ensure_directories()
            self.db = await init_database(self.config.db_path)
            self.persistence = SqlitePersistence(self.db)

        self.settings_store = SettingsStore(self.persistence)
        settings = await self.settings_store.load()

        self.evaluator = AchievementEvaluator(self.persistence)
        self.timer = PomodoroTimer(
            self.persistence,
            notifier=self.notifier,
            evaluator=self.evaluator,
            settings=settings,
        )
        self._unsubscribe_settings = self.settings_store.subscribe(self.timer.apply_settings)

        self.ticker = Ticker(self.timer, self.config.tick_interval_seconds)
        self.ticker.start()

        logger.info("Pulso started")

    async def close(self) -> None:
        """Stop ticking, finalize any active session and close storage."""
        if self.ticker:
            await self.ticker.stop()
            self.ticker = None

        if self.timer and self.timer.state != Phase.IDLE:
            await self.timer.stop()

        if self._unsubscribe_settings:
            self._unsubscribe_settings()
            self._unsubscribe_settings = None

        if self.db:
            await self.db.close()
            self.db = None

        self.timer = None
        logger.info("Pulso stopped")

    async def __aenter__(self) -> PulsoApp:
        await self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()
