"""Periodic driver that advances a timer once per interval."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pulso.focus.pomodoro import PomodoroTimer

logger = logging.getLogger(__name__)


class Ticker:
    """Calls ``timer.tick()`` every ``interval`` seconds on the running loop.

    Ticks are awaited one at a time; a slow tick delays the next one rather
    than overlapping it.
    """

    def __init__(self, timer: PomodoroTimer, interval: float = 1.0):
        self.timer = timer
        self.interval = interval
        self._task: asyncio.Task | None = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.is_running:
            return
        self._task = asyncio.create_task(self._tick_loop())

    async def stop(self) -> None:
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

    async def _tick_loop(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            try:
                await self.timer.tick()
            except Exception as e:
                logger.error(f"Error in timer tick: {e}")
