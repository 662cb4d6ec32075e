"""Tests for src.bot.display — habit labels and countdown formatting."""

from src.bot.display import (
    HABIT_DISPLAY,
    format_hours,
    format_remaining_time,
    format_value,
    parse_habit_type,
)
from src.core.habits import HabitType
from src.core.projection import RemainingTime


class TestParseHabitType:
    def test_enum_values(self):
        for habit_type in HabitType:
            assert parse_habit_type(habit_type.value) is habit_type

    def test_case_and_whitespace(self):
        assert parse_habit_type("  Sleep ") is HabitType.SLEEP

    def test_aliases(self):
        assert parse_habit_type("walk") is HabitType.STEPS
        assert parse_habit_type("workout") is HabitType.EXERCISE
        assert parse_habit_type("drinks") is HabitType.ALCOHOL

    def test_unknown(self):
        assert parse_habit_type("knitting") is None


def test_every_habit_has_display_metadata():
    assert set(HABIT_DISPLAY) == set(HabitType)


def test_format_value_with_and_without_unit():
    assert format_value(HabitType.STEPS, 8000.0) == "8000 steps"
    assert format_value(HabitType.SLEEP, 7.5) == "7.5 h"
    assert format_value(HabitType.DIET, 7.0) == "7"


def test_format_hours_is_signed():
    assert format_hours(0.5) == "+0.5 h"
    assert format_hours(-0.1) == "-0.1 h"
    assert format_hours(0) == "+0.0 h"


def test_format_remaining_time():
    remaining = RemainingTime(days=12345, hours=3, minutes=4, seconds=5, total_seconds=0)
    assert format_remaining_time(remaining) == "12,345 days 03:04:05"
