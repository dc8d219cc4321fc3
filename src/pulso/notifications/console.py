"""Terminal notification sink using Rich, with optional desktop notifications."""

from __future__ import annotations

import logging
import subprocess
import sys

from rich.console import Console

from pulso.focus.models import Achievement

logger = logging.getLogger(__name__)


class ConsoleNotifier:
    """Rings the terminal bell and prints achievement/error notices.

    When ``desktop`` is set, achievements are also raised as native
    notifications (``notify-send`` on Linux, ``osascript`` on macOS).
    """

    def __init__(self, console: Console | None = None, desktop: bool = False):
        self.console = console or Console()
        self.desktop = desktop

    def play_completion_sound(self, volume: int) -> None:
        if volume <= 0:
            return
        self.console.bell()

    def announce_achievements(self, achievements: list[Achievement]) -> None:
        for achievement in achievements:
            self.console.print(
                f"[bold magenta]Achievement unlocked![/bold magenta] "
                f"{achievement.icon} {achievement.name} - {achievement.description}"
            )
            if self.desktop:
                self._show_native_notification("Achievement unlocked", achievement.name)

    def report_error(self, message: str) -> None:
        self.console.print(f"[yellow]Warning:[/yellow] {message}")

    def _show_native_notification(self, title: str, message: str) -> None:
        system = sys.platform.lower()

        try:
            if system == "darwin":
                script = f'display notification "{message}" with title "{title}"'
                subprocess.run(["osascript", "-e", script], capture_output=True, timeout=5)
            elif system.startswith("linux"):
                subprocess.run(["notify-send", title, message], capture_output=True, timeout=5)
        except (OSError, subprocess.SubprocessError) as e:
            logger.debug(f"Desktop notification failed: {e}")
