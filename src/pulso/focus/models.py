"""Data models for the Pomodoro timer, its history and achievements."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

logger = logging.getLogger(__name__)


class Phase(str, Enum):
    """Current phase of the timer state machine."""
    IDLE = "IDLE"
    WORK = "WORK"
    SHORT_BREAK = "SHORT_BREAK"
    LONG_BREAK = "LONG_BREAK"
    PAUSED = "PAUSED"

    @property
    def is_active(self) -> bool:
        """Whether this phase counts down (work or a break)."""
        return self in (Phase.WORK, Phase.SHORT_BREAK, Phase.LONG_BREAK)


class SessionType(str, Enum):
    """Kind of a persisted session record."""
    WORK = "WORK"
    SHORT_BREAK = "SHORT_BREAK"
    LONG_BREAK = "LONG_BREAK"

    @property
    def is_break(self) -> bool:
        return self is not SessionType.WORK

    @classmethod
    def for_phase(cls, phase: Phase) -> SessionType:
        return cls(phase.value)


class CriteriaType(str, Enum):
    """What an achievement's threshold is compared against."""
    SESSIONS_COMPLETED = "sessions_completed"
    STREAK_DAYS = "streak_days"
    TOTAL_HOURS = "total_hours"


@dataclass
class SessionRecord:
    """One work or break interval.

    ``duration`` starts as the planned length in seconds and is corrected to
    the elapsed time when the interval ends early.
    """
    id: int | None = None
    timestamp: int = 0  # epoch milliseconds, session start
    duration: int = 0
    type: SessionType = SessionType.WORK
    completed: bool = False
    created_at: str | None = None

    @property
    def started_at(self) -> datetime:
        """Session start as a local datetime."""
        return datetime.fromtimestamp(self.timestamp / 1000)

    @classmethod
    def from_db_row(cls, row: dict[str, Any]) -> SessionRecord:
        """Create from database row."""
        return cls(
            id=row.get("id"),
            timestamp=int(row.get("timestamp", 0)),
            duration=int(row.get("duration", 0)),
            type=SessionType(row.get("type", "WORK")),
            completed=bool(row.get("completed", False)),
            created_at=row.get("created_at"),
        )

    def to_db_dict(self) -> dict[str, Any]:
        """Convert to dictionary for database storage."""
        return {
            "timestamp": self.timestamp,
            "duration": self.duration,
            "type": self.type.value,
            "completed": self.completed,
        }


# Inclusive (min, max) for every numeric setting
SETTING_BOUNDS: dict[str, tuple[int, int]] = {
    "work_duration": (1, 120),
    "short_break_duration": (1, 60),
    "long_break_duration": (1, 120),
    "pomodoros_until_long_break": (1, 10),
    "max_cycles": (0, 100),
    "notification_volume": (0, 100),
}


def clamp_setting(value: Any, low: int, high: int) -> int:
    """Clamp user input into ``[low, high]``; non-numeric input becomes ``low``."""
    try:
        number = int(float(value))
    except (TypeError, ValueError, OverflowError):
        return low
    return max(low, min(high, number))


class Settings(BaseModel):
    """User-facing timer settings (singleton).

    Durations are in minutes. Out-of-range numbers are clamped rather than
    rejected, on construction and on assignment.
    """

    model_config = ConfigDict(validate_assignment=True)

    work_duration: int = 25
    short_break_duration: int = 5
    long_break_duration: int = 15
    pomodoros_until_long_break: int = 4
    max_cycles: int = 0  # 0 = run until stopped
    auto_start_breaks: bool = False
    auto_start_work: bool = False
    notification_sound: bool = True
    notification_volume: int = 50
    show_title_bar: bool = True
    show_motivational_quotes: bool = True
    youtube_playlists: list[str] = Field(default_factory=list)

    @field_validator(*SETTING_BOUNDS, mode="before")
    @classmethod
    def _clamp(cls, value: Any, info: ValidationInfo) -> int:
        low, high = SETTING_BOUNDS[info.field_name]
        clamped = clamp_setting(value, low, high)
        if clamped != value:
            logger.debug(f"Clamped {info.field_name}: {value!r} -> {clamped}")
        return clamped

    @field_validator("youtube_playlists", mode="before")
    @classmethod
    def _parse_playlists(cls, value: Any) -> Any:
        if isinstance(value, str):
            return json.loads(value or "[]")
        return value

    def phase_seconds(self, phase: Phase) -> int:
        """Planned length of ``phase`` in seconds."""
        if phase == Phase.SHORT_BREAK:
            return self.short_break_duration * 60
        if phase == Phase.LONG_BREAK:
            return self.long_break_duration * 60
        return self.work_duration * 60


@dataclass(frozen=True)
class UnlockCriteria:
    """Threshold an achievement is unlocked at."""
    type: CriteriaType
    value: int


@dataclass(frozen=True)
class AchievementDefinition:
    """Immutable catalog entry."""
    id: str
    name: str
    description: str
    icon: str
    unlock_criteria: UnlockCriteria


@dataclass(frozen=True)
class Achievement:
    """Catalog entry joined with its unlock state."""
    id: str
    name: str
    description: str
    icon: str
    unlock_criteria: UnlockCriteria
    unlocked: bool = False
    unlocked_at: datetime | None = None

    @classmethod
    def from_definition(
        cls, definition: AchievementDefinition, unlocked_at: datetime | None = None
    ) -> Achievement:
        return cls(
            id=definition.id,
            name=definition.name,
            description=definition.description,
            icon=definition.icon,
            unlock_criteria=definition.unlock_criteria,
            unlocked=unlocked_at is not None,
            unlocked_at=unlocked_at,
        )


@dataclass(frozen=True)
class Statistics:
    """Totals derived from session history. Times are in seconds."""
    total_sessions: int = 0
    total_work_time: int = 0
    total_break_time: int = 0
    current_streak: int = 0
    longest_streak: int = 0
    sessions_today: int = 0
    sessions_this_week: int = 0
    sessions_this_month: int = 0

    @property
    def total_work_hours(self) -> float:
        return self.total_work_time / 3600


@dataclass(frozen=True)
class TimerContext:
    """Externally observable snapshot of the timer."""
    state: Phase = Phase.IDLE
    time_remaining: int = 25 * 60
    current_session: int = 0
    settings: Settings = field(default_factory=Settings)
    is_running: bool = False

    @property
    def time_remaining_display(self) -> str:
        """Format time remaining as MM:SS."""
        minutes, seconds = divmod(self.time_remaining, 60)
        return f"{minutes:02d}:{seconds:02d}"
