"""Achievement unlocking against freshly computed statistics."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime
from typing import TYPE_CHECKING

from pulso.focus.models import Achievement, CriteriaType, Statistics
from pulso.focus.statistics import compute_statistics

if TYPE_CHECKING:
    from pulso.storage.base import PersistenceService

logger = logging.getLogger(__name__)


def meets_criteria(achievement: Achievement, stats: Statistics) -> bool:
    """Whether ``stats`` satisfies the achievement's unlock threshold."""
    criteria = achievement.unlock_criteria
    if criteria.type == CriteriaType.SESSIONS_COMPLETED:
        return stats.total_sessions >= criteria.value
    if criteria.type == CriteriaType.STREAK_DAYS:
        return stats.current_streak >= criteria.value
    if criteria.type == CriteriaType.TOTAL_HOURS:
        return stats.total_work_hours >= criteria.value
    return False


class AchievementEvaluator:
    """Unlocks every achievement whose criterion is met, exactly once.

    Usage:
        evaluator = AchievementEvaluator(persistence)
        newly_unlocked = await evaluator.check()
    """

    def __init__(
        self,
        persistence: PersistenceService,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.persistence = persistence
        self._clock = clock

    async def get_statistics(self) -> Statistics:
        """Statistics over the full session history."""
        sessions = await self.persistence.get_sessions()
        return compute_statistics(sessions, self._clock())

    async def check(self) -> list[Achievement]:
        """Unlock qualifying achievements and return only the new ones."""
        stats = await self.get_statistics()
        achievements = await self.persistence.get_achievements()

        unlocked_ids: list[str] = []
        for achievement in achievements:
            if achievement.unlocked or not meets_criteria(achievement, stats):
                continue

            # False when another check unlocked it first
            if await self.persistence.unlock_achievement(achievement.id):
                unlocked_ids.append(achievement.id)
                logger.info(f"Achievement unlocked: {achievement.id}")

        if not unlocked_ids:
            return []

        # Announce the unlock time storage recorded, not our own clock
        stored = {a.id: a for a in await self.persistence.get_achievements()}
        return [stored[achievement_id] for achievement_id in unlocked_ids]
