"""CLI commands for Pulso using Typer."""

from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from pulso import __version__
from pulso.core.app import PulsoApp
from pulso.core.config import get_config
from pulso.core.errors import PulsoError
from pulso.focus.models import Phase, Settings, TimerContext
from pulso.notifications.console import ConsoleNotifier
from pulso.quotes import get_random_quote

app = typer.Typer(
    name="pulso",
    help="Pomodoro focus timer with history, streaks and achievements.",
    add_completion=False,
)

console = Console()

PHASE_STYLES = {
    Phase.IDLE: ("Idle", "dim"),
    Phase.WORK: ("Focus", "red"),
    Phase.SHORT_BREAK: ("Short break", "green"),
    Phase.LONG_BREAK: ("Long break", "blue"),
    Phase.PAUSED: ("Paused", "yellow"),
}

COMMAND_HELP = "[dim]Commands: (s)tart/resume, (p)ause, (k) skip, (x) stop, (q)uit[/dim]"


def setup_logging(log_level: str, log_file: Path | None = None) -> None:
    """Configure logging for the application."""
    level = getattr(logging, log_level.upper(), logging.INFO)

    handlers: list[logging.Handler] = [logging.StreamHandler()]

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=handlers,
    )

    # Reduce noise from external libraries
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)


def format_duration(seconds: float) -> str:
    """Format a duration in human-readable format."""
    if seconds < 60:
        return f"{seconds:.0f}s"
    elif seconds < 3600:
        return f"{seconds / 60:.0f}m"
    hours, remainder = divmod(int(seconds), 3600)
    return f"{hours}h {remainder // 60}m"


def _run_async(coro):
    """Run a coroutine, turning Pulso errors into a clean exit."""
    try:
        return asyncio.run(coro)
    except PulsoError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)


class StatusPrinter:
    """Timer listener that prints phase changes and minute marks."""

    def __init__(self) -> None:
        self._last: TimerContext | None = None

    def __call__(self, context: TimerContext) -> None:
        last = self._last
        self._last = context

        label, style = PHASE_STYLES[context.state]
        phase_changed = last is None or last.state != context.state
        if phase_changed:
            console.print(
                f"[{style}]{label}[/{style}] #{context.current_session} "
                f"{context.time_remaining_display}"
                + ("" if context.is_running or context.state == Phase.IDLE else "  (press s to start)")
            )
            if context.state in (Phase.SHORT_BREAK, Phase.LONG_BREAK) and (
                last is None or last.state != Phase.PAUSED
            ) and context.settings.show_motivational_quotes:
                console.print(f'[italic]"{get_random_quote()}"[/italic]')
        elif context.is_running and context.time_remaining % 60 == 0:
            console.print(f"[{style}]{label}[/{style}] {context.time_remaining_display} left")


@app.command()
def run(
    memory: bool = typer.Option(
        False,
        "--memory",
        help="Keep history in memory only (nothing is saved)",
    ),
    log_level: str = typer.Option(
        "WARNING",
        "--log-level",
        "-l",
        help="Log level (DEBUG, INFO, WARNING, ERROR)",
    ),
) -> None:
    """Run the timer in the foreground and start a focus session."""
    config = get_config()
    setup_logging(log_level, config.log_dir / "pulso.log" if not memory else None)

    async def run_timer() -> None:
        pulso = PulsoApp(
            config=config,
            notifier=ConsoleNotifier(console, desktop=config.desktop_notifications),
            in_memory=memory,
        )
        await pulso.start()
        done = asyncio.Event()
        loop = asyncio.get_running_loop()

        async def handle(line: str) -> None:
            command = line.strip().lower()[:1]
            if command == "s":
                await pulso.timer.start()
            elif command == "p":
                await pulso.timer.pause()
            elif command == "k":
                await pulso.timer.skip()
            elif command == "x":
                await pulso.timer.stop()
            elif command == "q":
                done.set()
            elif command:
                console.print(COMMAND_HELP)

        pending: set[asyncio.Task] = set()

        def on_done(task: asyncio.Task) -> None:
            pending.discard(task)
            if not task.cancelled() and task.exception() is not None:
                console.print(f"[red]Command failed: {task.exception()}[/red]")

        def on_input() -> None:
            line = sys.stdin.readline()
            if not line:
                done.set()
                return
            task = asyncio.create_task(handle(line))
            pending.add(task)
            task.add_done_callback(on_done)

        try:
            pulso.timer.subscribe(StatusPrinter())
            await pulso.timer.start()

            console.print(COMMAND_HELP)
            try:
                loop.add_reader(sys.stdin, on_input)
            except (NotImplementedError, ValueError):
                console.print("[dim]Interactive commands unavailable; press Ctrl+C to stop[/dim]")

            await done.wait()
        finally:
            try:
                loop.remove_reader(sys.stdin)
            except (NotImplementedError, ValueError):
                pass
            if pending:
                await asyncio.gather(*pending, return_exceptions=True)
            summary = pulso.timer.get_summary()
            await pulso.close()
            console.print(f"\n[yellow]Stopped[/yellow] after {summary['current_session']} work session(s)")

    try:
        _run_async(run_timer())
    except KeyboardInterrupt:
        pass


@app.command()
def stats() -> None:
    """Show totals, streaks and recent session counts."""
    config = get_config()

    async def load():
        async with PulsoApp(config=config) as pulso:
            return await pulso.evaluator.get_statistics()

    statistics = _run_async(load())

    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("Metric", style="dim")
    table.add_column("Value")

    table.add_row("Sessions", str(statistics.total_sessions))
    table.add_row("Focus time", format_duration(statistics.total_work_time))
    table.add_row("Break time", format_duration(statistics.total_break_time))
    table.add_row("Current streak", f"{statistics.current_streak} day(s)")
    table.add_row("Longest streak", f"{statistics.longest_streak} day(s)")
    table.add_row("Today", str(statistics.sessions_today))
    table.add_row("Last 7 days", str(statistics.sessions_this_week))
    table.add_row("Last 30 days", str(statistics.sessions_this_month))

    console.print(Panel(table, title="Statistics", border_style="green"))


@app.command()
def achievements() -> None:
    """List achievements and when they were unlocked."""
    config = get_config()

    async def load():
        async with PulsoApp(config=config) as pulso:
            return await pulso.persistence.get_achievements()

    rows = _run_async(load())

    table = Table(title="Achievements", show_header=True, header_style="bold cyan")
    table.add_column("")
    table.add_column("Name")
    table.add_column("Description")
    table.add_column("Unlocked")

    for achievement in rows:
        if achievement.unlocked and achievement.unlocked_at:
            unlocked = f"[green]{achievement.unlocked_at:%Y-%m-%d}[/green]"
        else:
            unlocked = "[dim]-[/dim]"
        table.add_row(achievement.icon, achievement.name, achievement.description, unlocked)

    console.print(table)


@app.command()
def history(
    limit: int = typer.Option(20, "--limit", "-n", help="Number of sessions to show"),
) -> None:
    """Show recent sessions, newest first."""
    config = get_config()

    async def load():
        async with PulsoApp(config=config) as pulso:
            return await pulso.persistence.get_sessions(limit)

    sessions = _run_async(load())

    if not sessions:
        console.print("[dim]No sessions yet[/dim]")
        return

    table = Table(title="Recent Sessions", show_header=True, header_style="bold cyan")
    table.add_column("Started")
    table.add_column("Type")
    table.add_column("Duration", justify="right")
    table.add_column("Status")

    for session in sessions:
        label, style = PHASE_STYLES[Phase(session.type.value)]
        status = "[green]Complete[/green]" if session.completed else "[yellow]Open[/yellow]"
        table.add_row(
            session.started_at.strftime("%Y-%m-%d %H:%M"),
            f"[{style}]{label}[/{style}]",
            format_duration(session.duration),
            status,
        )

    console.print(table)


@app.command()
def settings(
    changes: list[str] = typer.Argument(
        None,
        help="Changes as KEY=VALUE, e.g. work_duration=50 auto_start_breaks=true",
    ),
) -> None:
    """Show settings, or change them with KEY=VALUE pairs."""
    config = get_config()

    parsed: dict[str, str] = {}
    for change in changes or []:
        key, sep, value = change.partition("=")
        if not sep:
            console.print(f"[red]Expected KEY=VALUE, got '{change}'[/red]")
            raise typer.Exit(1)
        parsed[key.strip()] = value.strip()

    async def manage() -> Settings:
        async with PulsoApp(config=config) as pulso:
            if parsed:
                values: dict[str, object] = dict(parsed)
                if "youtube_playlists" in values:
                    values["youtube_playlists"] = [
                        p.strip() for p in parsed["youtube_playlists"].split(",") if p.strip()
                    ]
                return await pulso.settings_store.update(**values)
            return pulso.settings_store.settings

    current = _run_async(manage())

    table = Table(title="Settings", show_header=True, header_style="bold cyan")
    table.add_column("Setting")
    table.add_column("Value")
    for key, value in current.model_dump().items():
        table.add_row(key, str(value))
    console.print(table)


@app.command(name="config")
def show_config(
    write: bool = typer.Option(False, "--write", help="Write the current config to its YAML file"),
) -> None:
    """Show where Pulso keeps its files."""
    config = get_config()

    if write:
        path = config.save()
        console.print(f"[green]Config written to {path}[/green]")

    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_row("Config file", str(config.config_file))
    table.add_row("Database", str(config.db_path))
    table.add_row("Logs", str(config.log_dir))
    table.add_row("Log level", config.log_level)
    table.add_row("Tick interval", f"{config.tick_interval_seconds}s")
    console.print(Panel(table, title=f"Pulso {__version__}", border_style="blue"))


@app.callback()
def main_callback() -> None:
    """Pulso - Pomodoro focus timer."""
    pass


if __name__ == "__main__":
    app()
