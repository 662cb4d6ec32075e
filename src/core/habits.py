"""Habit scoring — pure business logic.

Maps a recorded habit value to a signed number of hours of life extension
(positive) or reduction (negative), using fixed per-habit formulas.

No I/O: this module only transforms data. Range validation lives here too,
but scoring never validates; callers must check `is_valid_habit_value` first.
"""

from __future__ import annotations

import math
from enum import Enum


class HabitType(str, Enum):
    """Category of a logged behaviour."""

    SLEEP = "sleep"          # hours slept
    STEPS = "steps"          # step count
    EXERCISE = "exercise"    # minutes
    DIET = "diet"            # 1-10 diet quality score
    STRESS = "stress"        # 1-10 stress level, lower is better
    SMOKING = "smoking"      # days without smoking
    ALCOHOL = "alcohol"      # drinks cut back


# Inclusive (min, max) of accepted values per habit type
VALID_RANGES: dict[HabitType, tuple[float, float]] = {
    HabitType.SLEEP: (0, 24),
    HabitType.STEPS: (0, 50000),
    HabitType.EXERCISE: (0, 480),
    HabitType.DIET: (1, 10),
    HabitType.STRESS: (1, 10),
    HabitType.SMOKING: (0, 365),
    HabitType.ALCOHOL: (0, 100),
}


def is_valid_habit_value(habit_type: HabitType, value: float) -> bool:
    """True when value is a finite number inside the type's valid range."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    if not math.isfinite(value):
        return False
    low, high = VALID_RANGES[HabitType(habit_type)]
    return low <= value <= high


def _score_sleep(hours: float) -> float:
    if 7 <= hours <= 8:
        return 0.5
    if hours < 6 or hours > 9:
        return -0.5
    return 0.1


def _score_steps(steps: float) -> float:
    if steps >= 8000:
        return 0.3
    if steps >= 6000:
        return 0.1
    return -0.1


def score(habit_type: HabitType, value: float) -> float:
    """Return the signed life-extension hours for one habit entry."""
    habit_type = HabitType(habit_type)
    if habit_type is HabitType.SLEEP:
        return _score_sleep(value)
    if habit_type is HabitType.STEPS:
        return _score_steps(value)
    if habit_type is HabitType.EXERCISE:
        return value * 0.01
    if habit_type is HabitType.DIET:
        return value * 0.1
    if habit_type is HabitType.STRESS:
        return (11 - value) * 0.1
    if habit_type is HabitType.SMOKING:
        return value * 0.1
    return value * 0.05  # alcohol
