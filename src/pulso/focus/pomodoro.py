"""Pomodoro timer state machine with persisted session records.

The machine never sleeps or reads the wall clock for its countdown: an
external driver (see :class:`pulso.focus.ticker.Ticker`) calls :meth:`tick`
once per second. Commands and ticks are serialized on one asyncio lock, so
every transition, including its storage calls, finishes before the next one
starts.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from pulso.core.errors import PersistenceError, SessionNotFound
from pulso.focus.achievements import AchievementEvaluator
from pulso.focus.models import Phase, SessionType, Settings, TimerContext

if TYPE_CHECKING:
    from pulso.notifications.base import NotificationSink
    from pulso.storage.base import PersistenceService

logger = logging.getLogger(__name__)

Listener = Callable[[TimerContext], None]


def _now_ms() -> int:
    return int(time.time() * 1000)


class PomodoroTimer:
    """Work/break state machine.

    Usage:
        timer = PomodoroTimer(persistence, notifier)
        await timer.load_settings()
        unsubscribe = timer.subscribe(lambda ctx: print(ctx.time_remaining_display))

        await timer.start()
        await timer.tick()    # driven once per second
        await timer.pause()
        await timer.start()   # resume
        await timer.skip()    # finish current phase now
        await timer.stop()    # back to idle
    """

    def __init__(
        self,
        persistence: PersistenceService,
        notifier: NotificationSink | None = None,
        evaluator: AchievementEvaluator | None = None,
        settings: Settings | None = None,
        clock: Callable[[], int] = _now_ms,
    ):
        self.persistence = persistence
        self.notifier = notifier
        self.evaluator = evaluator if evaluator is not None else AchievementEvaluator(persistence)
        self._clock = clock
        self._settings = settings.model_copy() if settings else Settings()

        self._phase = Phase.IDLE
        self._time_remaining = self._settings.work_duration * 60
        self._session_count = 0
        self._is_running = False
        self._state_before_pause: Phase | None = None

        # Active record: storage owns it, we only keep its id and planned length
        self._current_session_id: int | None = None
        self._planned_duration = 0

        self._listeners: list[Listener] = []
        self._lock = asyncio.Lock()

    @property
    def context(self) -> TimerContext:
        """Current snapshot (copies settings so listeners cannot mutate them)."""
        return TimerContext(
            state=self._phase,
            time_remaining=self._time_remaining,
            current_session=self._session_count,
            settings=self._settings.model_copy(),
            is_running=self._is_running,
        )

    @property
    def state(self) -> Phase:
        return self._phase

    @property
    def is_running(self) -> bool:
        """Whether the countdown is ticking."""
        return self._is_running

    @property
    def current_session_id(self) -> int | None:
        return self._current_session_id

    @property
    def settings(self) -> Settings:
        return self._settings.model_copy()

    # ----- Subscriptions -----
    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener``; it is called now and after every state change."""
        self._listeners.append(listener)
        self._call_listener(listener, self.context)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _broadcast(self) -> None:
        context = self.context
        for listener in list(self._listeners):
            self._call_listener(listener, context)

    @staticmethod
    def _call_listener(listener: Listener, context: TimerContext) -> None:
        try:
            listener(context)
        except Exception as e:
            logger.error(f"Error in timer listener: {e}")

    # ----- Settings -----
    def apply_settings(self, settings: Settings) -> None:
        """Take new settings.

        While idle the displayed countdown follows the new work duration at
        once; otherwise the running phase keeps its length and the new values
        apply from the next phase.
        """
        self._settings = settings.model_copy()
        if self._phase == Phase.IDLE:
            self._time_remaining = self._settings.work_duration * 60
        self._broadcast()

    async def load_settings(self) -> Settings:
        """Read settings from storage, falling back to the current ones."""
        try:
            settings = await self.persistence.get_settings()
        except PersistenceError as e:
            self._report_error("Could not load settings", e)
            settings = self._settings
        self.apply_settings(settings)
        return self.settings

    # ----- Commands -----
    async def start(self) -> None:
        """Start from idle, resume from pause, or begin a waiting phase."""
        async with self._lock:
            if self._phase == Phase.IDLE:
                self._session_count += 1
                await self._enter_phase(Phase.WORK)
                logger.info(f"Pomodoro timer started: work session {self._session_count}")
            elif self._phase == Phase.PAUSED:
                self._restore_paused_phase()
                logger.info(f"Pomodoro timer resumed: {self._phase.value}")
            elif self._is_running:
                return

            self._is_running = True
            self._broadcast()

    async def resume(self) -> None:
        """Resume a paused timer; no-op in any other state."""
        async with self._lock:
            if self._phase != Phase.PAUSED:
                return
            self._restore_paused_phase()
            self._is_running = True
            logger.info(f"Pomodoro timer resumed: {self._phase.value}")
            self._broadcast()

    async def pause(self) -> None:
        """Pause a work or break phase."""
        async with self._lock:
            if not self._phase.is_active:
                return

            self._is_running = False
            self._state_before_pause = self._phase
            self._phase = Phase.PAUSED

            logger.info("Pomodoro timer paused")
            self._broadcast()

    async def stop(self) -> None:
        """Finalize the active record with its elapsed time and return to idle."""
        async with self._lock:
            self._is_running = False
            await self._finalize_session(self._elapsed_seconds())
            self._reset_to_idle()

            logger.info("Pomodoro timer stopped")
            self._broadcast()

    async def skip(self) -> None:
        """Finish the current phase now and start the next one."""
        async with self._lock:
            if self._phase == Phase.PAUSED:
                self._restore_paused_phase()
            if not self._phase.is_active:
                return

            skipped = self._phase
            self._is_running = False
            await self._finalize_session(self._elapsed_seconds())
            await self._check_achievements()
            await self._advance(force_start=True)

            logger.info(f"Skipped {skipped.value}, now {self._phase.value}")
            self._broadcast()

    async def tick(self) -> None:
        """Advance the countdown by one second."""
        async with self._lock:
            if not self._is_running:
                return

            self._time_remaining = max(0, self._time_remaining - 1)
            if self._time_remaining == 0:
                await self._complete_phase()

            self._broadcast()

    # ----- Transitions -----
    async def _complete_phase(self) -> None:
        """Handle a countdown that ran to zero."""
        finished = self._phase
        self._is_running = False

        await self._finalize_session(self._planned_duration)

        if self._settings.notification_sound:
            self._notify("play_completion_sound", self._settings.notification_volume)

        await self._check_achievements()
        await self._advance(force_start=False)

        logger.info(f"{finished.value} complete, now {self._phase.value}")

    async def _advance(self, force_start: bool) -> None:
        """Move from the finished phase to the next one.

        The long-break decision uses the count reached when the finished work
        session started, so every Nth work session is followed by a long
        break.
        """
        settings = self._settings

        if self._phase == Phase.WORK:
            if self._session_count % settings.pomodoros_until_long_break == 0:
                next_phase = Phase.LONG_BREAK
            else:
                next_phase = Phase.SHORT_BREAK
            await self._enter_phase(next_phase)
            self._is_running = force_start or settings.auto_start_breaks
            return

        if settings.max_cycles > 0 and self._session_count >= settings.max_cycles:
            logger.info(f"Reached {settings.max_cycles} cycles, stopping")
            self._reset_to_idle()
            return

        self._session_count += 1
        await self._enter_phase(Phase.WORK)
        self._is_running = force_start or settings.auto_start_work

    async def _enter_phase(self, phase: Phase) -> None:
        """Set up the countdown for ``phase`` and open its session record."""
        duration = self._settings.phase_seconds(phase)

        self._phase = phase
        self._time_remaining = duration
        self._planned_duration = duration
        self._current_session_id = await self._create_session(phase, duration)

    def _restore_paused_phase(self) -> None:
        self._phase = self._state_before_pause or Phase.WORK
        self._state_before_pause = None

    def _reset_to_idle(self) -> None:
        self._phase = Phase.IDLE
        self._state_before_pause = None
        self._is_running = False
        self._session_count = 0
        self._time_remaining = self._settings.work_duration * 60
        self._current_session_id = None
        self._planned_duration = 0

    def _elapsed_seconds(self) -> int:
        return max(0, self._planned_duration - self._time_remaining)

    # ----- Side effects -----
    async def _create_session(self, phase: Phase, duration: int) -> int | None:
        try:
            return await self.persistence.create_session(
                self._clock(), duration, SessionType.for_phase(phase)
            )
        except PersistenceError as e:
            self._report_error("Could not save session", e)
            return None

    async def _finalize_session(self, duration: int) -> None:
        """Mark the active record completed with ``duration`` seconds."""
        session_id = self._current_session_id
        if session_id is None:
            return
        self._current_session_id = None

        try:
            await self.persistence.update_session(session_id, True, duration)
        except SessionNotFound as e:
            logger.warning(f"{e}, record not updated")
        except PersistenceError as e:
            self._report_error("Could not update session", e)

    async def _check_achievements(self) -> None:
        if self.evaluator is None:
            return
        try:
            unlocked = await self.evaluator.check()
        except Exception as e:
            logger.error(f"Achievement check failed: {e}")
            return
        if unlocked:
            self._notify("announce_achievements", unlocked)

    def _report_error(self, message: str, error: Exception) -> None:
        logger.error(f"{message}: {error}")
        self._notify("report_error", message)

    def _notify(self, method: str, *args: Any) -> None:
        if self.notifier is None:
            return
        try:
            getattr(self.notifier, method)(*args)
        except Exception as e:
            logger.error(f"Error in notifier {method}: {e}")

    def get_summary(self) -> dict[str, Any]:
        """Summary of the current state for display."""
        context = self.context
        return {
            "phase": context.state.value,
            "is_running": context.is_running,
            "time_remaining": context.time_remaining_display,
            "current_session": context.current_session,
            "session_id": self._current_session_id,
        }
