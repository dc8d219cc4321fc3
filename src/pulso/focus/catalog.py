"""Built-in achievement catalog.

The catalog is fixed; only unlock state is stored.
"""

from __future__ import annotations

from pulso.focus.models import AchievementDefinition, CriteriaType, UnlockCriteria


def _define(
    id: str, name: str, description: str, icon: str, kind: CriteriaType, value: int
) -> AchievementDefinition:
    return AchievementDefinition(
        id=id,
        name=name,
        description=description,
        icon=icon,
        unlock_criteria=UnlockCriteria(type=kind, value=value),
    )


SESSIONS = CriteriaType.SESSIONS_COMPLETED
STREAK = CriteriaType.STREAK_DAYS
HOURS = CriteriaType.TOTAL_HOURS

DEFAULT_ACHIEVEMENTS: tuple[AchievementDefinition, ...] = (
    _define("first_session", "First Steps", "Complete your first pomodoro session", "🌱", SESSIONS, 1),
    _define("ten_sessions", "Getting Started", "Complete 10 pomodoro sessions", "🔥", SESSIONS, 10),
    _define("fifty_sessions", "Dedicated", "Complete 50 pomodoro sessions", "⭐", SESSIONS, 50),
    _define("hundred_sessions", "Centurion", "Complete 100 pomodoro sessions", "💯", SESSIONS, 100),
    _define("five_hundred_sessions", "Master", "Complete 500 pomodoro sessions", "👑", SESSIONS, 500),
    _define("streak_3", "Consistent", "Maintain a 3-day streak", "📅", STREAK, 3),
    _define("streak_7", "Week Warrior", "Maintain a 7-day streak", "🗓️", STREAK, 7),
    _define("streak_30", "Monthly Master", "Maintain a 30-day streak", "📆", STREAK, 30),
    _define("ten_hours", "Ten Hours", "Accumulate 10 hours of focus time", "⏰", HOURS, 10),
    _define("fifty_hours", "Fifty Hours", "Accumulate 50 hours of focus time", "⏳", HOURS, 50),
    _define("hundred_hours", "Hundred Hours", "Accumulate 100 hours of focus time", "🏆", HOURS, 100),
)


def sorted_catalog(
    catalog: tuple[AchievementDefinition, ...] = DEFAULT_ACHIEVEMENTS,
) -> list[AchievementDefinition]:
    """Catalog ordered by threshold, the order achievements are listed in."""
    return sorted(catalog, key=lambda a: a.unlock_criteria.value)
