"""
LifeTune — Data Models.

Profile, habit log entries and goals. All three are stored as JSON blobs in
the local key-value store, so each model knows how to turn itself into a
plain dict and back. Timestamps are timezone-aware UTC datetimes.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from src.core.habits import HabitType
from src.core.projection import as_utc


class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"
    OTHER = "other"


def _ts(moment: datetime) -> str:
    return moment.isoformat()


def _parse_ts(raw: str) -> datetime:
    return as_utc(datetime.fromisoformat(raw))


@dataclass
class Profile:
    """The single user profile of this installation."""

    birth_date: datetime
    gender: Gender
    country: str                       # key into the country table, free text
    baseline_life_expectancy: float    # years, fixed at creation
    current_life_expectancy: float     # years, baseline + habit effects
    last_updated: datetime
    nickname: str = ""

    def to_dict(self) -> dict:
        return {
            "nickname": self.nickname,
            "birth_date": _ts(self.birth_date),
            "gender": self.gender.value,
            "country": self.country,
            "baseline_life_expectancy": self.baseline_life_expectancy,
            "current_life_expectancy": self.current_life_expectancy,
            "last_updated": _ts(self.last_updated),
        }

    @classmethod
    def from_dict(cls, data: dict) -> Profile:
        return cls(
            nickname=data.get("nickname", ""),
            birth_date=_parse_ts(data["birth_date"]),
            gender=Gender(data["gender"]),
            country=data["country"],
            baseline_life_expectancy=float(data["baseline_life_expectancy"]),
            current_life_expectancy=float(data["current_life_expectancy"]),
            last_updated=_parse_ts(data["last_updated"]),
        )


@dataclass(frozen=True)
class HabitEntry:
    """One recorded habit action. Immutable once logged."""

    id: str
    timestamp: datetime
    habit_type: HabitType
    raw_value: float
    life_extension_hours: float   # signed, computed at creation

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "timestamp": _ts(self.timestamp),
            "habit_type": self.habit_type.value,
            "raw_value": self.raw_value,
            "life_extension_hours": self.life_extension_hours,
        }

    @classmethod
    def from_dict(cls, data: dict) -> HabitEntry:
        return cls(
            id=data["id"],
            timestamp=_parse_ts(data["timestamp"]),
            habit_type=HabitType(data["habit_type"]),
            raw_value=float(data["raw_value"]),
            life_extension_hours=float(data["life_extension_hours"]),
        )


@dataclass
class Goal:
    """A target value for one habit type with a deadline.

    `is_completed` is rewritten on every progress update, so it can flip
    back to False if progress drops below the target again.
    """

    id: str
    title: str
    habit_type: HabitType
    target_value: float
    deadline: datetime
    created_at: datetime
    current_value: float = 0.0
    is_completed: bool = False

    @property
    def progress(self) -> float:
        """current / target clamped to [0, 1]; 0 when the target is not positive."""
        if self.target_value <= 0:
            return 0.0
        return min(max(self.current_value / self.target_value, 0.0), 1.0)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "habit_type": self.habit_type.value,
            "target_value": self.target_value,
            "current_value": self.current_value,
            "deadline": _ts(self.deadline),
            "is_completed": self.is_completed,
            "created_at": _ts(self.created_at),
        }

    @classmethod
    def from_dict(cls, data: dict) -> Goal:
        return cls(
            id=data["id"],
            title=data["title"],
            habit_type=HabitType(data["habit_type"]),
            target_value=float(data["target_value"]),
            current_value=float(data.get("current_value", 0.0)),
            deadline=_parse_ts(data["deadline"]),
            is_completed=bool(data.get("is_completed", False)),
            created_at=_parse_ts(data["created_at"]),
        )
