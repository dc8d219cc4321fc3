"""Contract for sound and user-visible events raised by the timer."""

from __future__ import annotations

from typing import Protocol

from pulso.focus.models import Achievement


class NotificationSink(Protocol):
    def play_completion_sound(self, volume: int) -> None:
        """Play the end-of-phase sound at ``volume`` (0-100)."""
        ...

    def announce_achievements(self, achievements: list[Achievement]) -> None:
        """Show newly unlocked achievements."""
        ...

    def report_error(self, message: str) -> None:
        """Show a non-blocking error notice."""
        ...
