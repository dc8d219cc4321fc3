"""Pulso - Pomodoro focus timer with history, streaks and achievements."""

__version__ = "0.3.0"
