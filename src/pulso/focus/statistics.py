"""Statistics derived from session history.

Everything here is a pure function of the session list and "now", so the
same numbers come out whether the history was read from SQLite or from an
in-memory store.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date, datetime, timedelta

from pulso.focus.models import SessionRecord, SessionType, Statistics


def _epoch_ms(moment: datetime) -> int:
    return int(moment.timestamp() * 1000)


def local_date(record: SessionRecord) -> date:
    """Local calendar date a session started on."""
    return record.started_at.date()


def calculate_streaks(dates: Iterable[date], today: date) -> tuple[int, int]:
    """Return ``(current_streak, longest_streak)`` for a set of active dates.

    Dates are deduplicated and walked newest first. A one-day gap extends the
    running streak; any other gap closes it. The current streak only starts
    when the newest date is today or yesterday, and once any gap larger than
    one day is seen it stays at zero for the rest of the walk.
    """
    ordered = sorted(set(dates), reverse=True)
    if not ordered:
        return 0, 0

    current_streak = 0
    longest_streak = 0
    streak = 0
    previous: date | None = None

    for day in ordered:
        if previous is None:
            streak = 1
            if (today - day).days <= 1:
                current_streak = 1
        else:
            gap = (previous - day).days
            if gap == 1:
                streak += 1
                if current_streak > 0:
                    current_streak += 1
            else:
                longest_streak = max(longest_streak, streak)
                streak = 1
                current_streak = 0
        previous = day

    longest_streak = max(longest_streak, streak)
    return current_streak, longest_streak


def compute_statistics(
    sessions: Iterable[SessionRecord], now: datetime | None = None
) -> Statistics:
    """Derive totals, rolling-window counts and streaks.

    Only completed sessions count. ``sessions_today`` is anchored at local
    midnight; the week and month counts are rolling 7 and 30 day windows.
    """
    now = now or datetime.now()
    completed = [s for s in sessions if s.completed]

    midnight_ms = _epoch_ms(now.replace(hour=0, minute=0, second=0, microsecond=0))
    week_ago_ms = _epoch_ms(now - timedelta(days=7))
    month_ago_ms = _epoch_ms(now - timedelta(days=30))

    total_work_time = sum(s.duration for s in completed if s.type == SessionType.WORK)
    total_break_time = sum(s.duration for s in completed if s.type.is_break)

    work_dates = [local_date(s) for s in completed if s.type == SessionType.WORK]
    current_streak, longest_streak = calculate_streaks(work_dates, now.date())

    return Statistics(
        total_sessions=len(completed),
        total_work_time=total_work_time,
        total_break_time=total_break_time,
        current_streak=current_streak,
        longest_streak=longest_streak,
        sessions_today=sum(1 for s in completed if s.timestamp >= midnight_ms),
        sessions_this_week=sum(1 for s in completed if s.timestamp >= week_ago_ms),
        sessions_this_month=sum(1 for s in completed if s.timestamp >= month_ago_ms),
    )
