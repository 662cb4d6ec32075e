"""Prompt builders for the AI coach.

Turns profile, habit log and goal statistics into the user message sent to
the chat-completion proxy. Pure functions: no I/O, no clock reads.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from src.core.projection import age_in_years

if TYPE_CHECKING:
    from src.data.models import Goal, HabitEntry, Profile

SYSTEM_PROMPT = (
    "You are the AI coach of the LifeTune app, an expert in health and habit "
    "improvement. Reply to the user's situation or question with kind, "
    "specific and practical advice or encouragement in 1-2 sentences."
)

_RECENT_LIMIT = 7


def _entry_lines(entries: list[HabitEntry]) -> str:
    return "\n".join(f"- {e.habit_type.value}: {e.raw_value:.1f}" for e in entries)


def build_advice_prompt(profile: Profile, entries: list[HabitEntry], now: datetime) -> str:
    """Daily advice prompt from profile stats and the last 7 entries."""
    recent = entries[-_RECENT_LIMIT:]
    total = sum(e.life_extension_hours for e in entries)
    return (
        "User information:\n"
        f"- Age: {age_in_years(profile.birth_date, now)}\n"
        f"- Gender: {profile.gender.value}\n"
        f"- Current projected life expectancy: {int(profile.current_life_expectancy)} years\n"
        f"- Total life extension: {total:.1f} hours\n"
        f"- Recent improvement records: {len(recent)}\n"
        "\n"
        "Recent habit improvements:\n"
        f"{_entry_lines(recent)}\n"
        "\n"
        "Based on the information above, give the user encouragement and one "
        "concrete piece of advice for today in 1-2 sentences."
    )


def build_goal_review_prompt(goals: list[Goal], entries: list[HabitEntry]) -> str:
    """Goal review prompt: active/completed counts and each active goal's progress."""
    active = [g for g in goals if not g.is_completed]
    completed = [g for g in goals if g.is_completed]
    goal_lines = "\n".join(f"- {g.title}: {int(g.progress * 100)}% complete" for g in active)
    return (
        "User goal status:\n"
        f"- Active goals: {len(active)}\n"
        f"- Completed goals: {len(completed)}\n"
        f"- Recent improvement records: {len(entries[-_RECENT_LIMIT:])}\n"
        "\n"
        "Active goals:\n"
        f"{goal_lines}\n"
        "\n"
        "Based on the information above, give encouragement and concrete "
        "advice for reaching these goals."
    )


def build_chat_context(profile: Profile | None, entries: list[HabitEntry], now: datetime) -> str:
    """Short background block attached to free-form chat questions."""
    if profile is None:
        return ""
    recent = entries[-5:]
    total = sum(e.life_extension_hours for e in entries)
    lines = [
        f"Age: {age_in_years(profile.birth_date, now)}",
        f"Gender: {profile.gender.value}",
        f"Projected life expectancy: {profile.current_life_expectancy:.1f} years",
        f"Total life extension: {total:.1f} hours",
    ]
    if recent:
        lines.append("Recent records: " + ", ".join(
            f"{e.habit_type.value} {e.raw_value:g}" for e in recent
        ))
    return "\n".join(lines)


def build_chat_prompt(user_message: str, context: str = "") -> str:
    """Free-form question prompt with optional background context."""
    extra = f"Additional information: {context}\n" if context else ""
    return (
        f"User question: {user_message}\n"
        f"{extra}"
        "\n"
        "As a health and habit-improvement expert, answer kindly with "
        "specific advice or encouragement in 1-2 sentences."
    )
