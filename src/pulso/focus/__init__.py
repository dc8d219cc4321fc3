"""Pomodoro timer state machine, statistics and achievements."""

from pulso.focus.achievements import AchievementEvaluator
from pulso.focus.models import (
    Achievement,
    Phase,
    SessionRecord,
    SessionType,
    Settings,
    Statistics,
    TimerContext,
)
from pulso.focus.pomodoro import PomodoroTimer
from pulso.focus.settings import SettingsStore
from pulso.focus.statistics import calculate_streaks, compute_statistics
from pulso.focus.ticker import Ticker

__all__ = [
    "Achievement",
    "AchievementEvaluator",
    "calculate_streaks",
    "compute_statistics",
    "Phase",
    "PomodoroTimer",
    "SessionRecord",
    "SessionType",
    "Settings",
    "SettingsStore",
    "Statistics",
    "Ticker",
    "TimerContext",
]
