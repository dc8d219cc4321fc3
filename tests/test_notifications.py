"""Tests for the console notification sink and quotes."""

import io
import random

from rich.console import Console

from pulso.focus.catalog import DEFAULT_ACHIEVEMENTS
from pulso.focus.models import Achievement
from pulso.notifications.console import ConsoleNotifier
from pulso.quotes import QUOTES, get_random_quote


def make_notifier() -> tuple[ConsoleNotifier, io.StringIO]:
    output = io.StringIO()
    console = Console(file=output, force_terminal=False, width=120)
    return ConsoleNotifier(console), output


def test_announce_prints_each_achievement():
    notifier, output = make_notifier()
    achievements = [Achievement.from_definition(d) for d in DEFAULT_ACHIEVEMENTS[:2]]

    notifier.announce_achievements(achievements)

    text = output.getvalue()
    assert "First Steps" in text
    assert "Getting Started" in text


def test_report_error_prints_warning():
    notifier, output = make_notifier()

    notifier.report_error("Could not save session")

    assert "Could not save session" in output.getvalue()


def test_silent_volume_does_not_ring():
    notifier, output = make_notifier()

    notifier.play_completion_sound(0)

    assert output.getvalue() == ""


def test_random_quote_comes_from_list():
    assert get_random_quote(random.Random(3)) in QUOTES
