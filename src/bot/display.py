"""Presentation metadata for habit types and countdown formatting.

The core HabitType is a plain enum; everything a user sees about a habit
(label, emoji, unit, hint) is looked up here by the same tag.
"""

from __future__ import annotations

from dataclasses import dataclass

from src.core.habits import HabitType
from src.core.projection import RemainingTime


@dataclass(frozen=True)
class HabitDisplay:
    label: str
    emoji: str
    unit: str
    description: str
    default_value: float


HABIT_DISPLAY: dict[HabitType, HabitDisplay] = {
    HabitType.SLEEP: HabitDisplay(
        "Better sleep", "🛏", "h",
        "Hours slept. 7-8 hours is the sweet spot.", 7.0,
    ),
    HabitType.STEPS: HabitDisplay(
        "More steps", "🚶", "steps",
        "Today's step count. 8000+ steps counts most.", 8000,
    ),
    HabitType.EXERCISE: HabitDisplay(
        "Exercise", "❤️", "min",
        "Minutes of exercise.", 30,
    ),
    HabitType.DIET: HabitDisplay(
        "Healthier diet", "🥗", "",
        "Diet quality score from 1 to 10.", 7,
    ),
    HabitType.STRESS: HabitDisplay(
        "Less stress", "🧠", "",
        "Stress level from 1 to 10, lower is better.", 5,
    ),
    HabitType.SMOKING: HabitDisplay(
        "Quit smoking", "🚭", "days",
        "Days without smoking.", 1,
    ),
    HabitType.ALCOHOL: HabitDisplay(
        "Less alcohol", "🍷", "drinks",
        "Drinks cut back.", 0,
    ),
}

# Extra words users may type instead of the enum value
_HABIT_ALIASES: dict[str, HabitType] = {
    "walk": HabitType.STEPS,
    "walking": HabitType.STEPS,
    "step": HabitType.STEPS,
    "workout": HabitType.EXERCISE,
    "food": HabitType.DIET,
    "smoke": HabitType.SMOKING,
    "drinks": HabitType.ALCOHOL,
    "drink": HabitType.ALCOHOL,
}


def parse_habit_type(text: str) -> HabitType | None:
    """Parse a user-typed habit name ('sleep', 'Steps', 'walk'); None if unknown."""
    name = text.strip().lower()
    try:
        return HabitType(name)
    except ValueError:
        return _HABIT_ALIASES.get(name)


def format_value(habit_type: HabitType, value: float) -> str:
    unit = HABIT_DISPLAY[habit_type].unit
    return f"{value:g} {unit}".rstrip()


def format_hours(hours: float) -> str:
    """Signed hours, e.g. '+0.5 h' / '-0.1 h'."""
    return f"{hours:+.1f} h"


def format_remaining_time(remaining: RemainingTime) -> str:
    return (
        f"{remaining.days:,} days {remaining.hours:02d}:"
        f"{remaining.minutes:02d}:{remaining.seconds:02d}"
    )
