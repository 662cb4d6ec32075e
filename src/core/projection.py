"""Life projection — remaining-time math.

Recomputed on demand from wall-clock time; nothing here is persisted.
No I/O: this module only transforms data.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone

DAYS_PER_YEAR = 365.25
SECONDS_PER_DAY = 86400
SECONDS_PER_YEAR = DAYS_PER_YEAR * SECONDS_PER_DAY


@dataclass(frozen=True)
class RemainingTime:
    """Remaining lifetime split into display fields (hours are 0-23)."""

    days: int
    hours: int
    minutes: int
    seconds: int
    total_seconds: float


def as_utc(moment: datetime) -> datetime:
    """Treat naive datetimes as UTC; convert aware ones to UTC."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def hours_to_years(hours: float) -> float:
    """Convert a life-extension delta in hours to years."""
    return hours / 24 / DAYS_PER_YEAR


def remaining_seconds(
    life_expectancy_years: float, birth_date: datetime, now: datetime,
) -> float:
    """Seconds left until birth_date + life expectancy; never negative."""
    lived = (as_utc(now) - as_utc(birth_date)).total_seconds()
    return max(0.0, life_expectancy_years * SECONDS_PER_YEAR - lived)


def split_seconds(total: float) -> RemainingTime:
    """Decompose a second count into days / hours / minutes / seconds."""
    whole = int(total)
    return RemainingTime(
        days=whole // SECONDS_PER_DAY,
        hours=(whole % SECONDS_PER_DAY) // 3600,
        minutes=(whole % 3600) // 60,
        seconds=whole % 60,
        total_seconds=total,
    )


def remaining_time(
    life_expectancy_years: float, birth_date: datetime, now: datetime,
) -> RemainingTime:
    """Remaining lifetime at `now` as display fields."""
    return split_seconds(remaining_seconds(life_expectancy_years, birth_date, now))


def age_in_years(birth_date: datetime, now: datetime) -> int:
    """Whole years lived, using 365.25-day years."""
    lived = (as_utc(now) - as_utc(birth_date)).total_seconds()
    return max(0, int(lived / SECONDS_PER_YEAR))
