"""
LifeTune — Life Data Manager.

Owns the profile, the append-only habit log and the goal list. Every
mutation validates its input, applies the habit scoring, updates the
projection and writes all three pieces of state to the key-value store.

Validation and not-found failures never escape this class: every public
mutation returns an OperationResult the caller must check. Persistence
failures are logged and reported on the result, but the in-memory mutation
stays applied.
"""

from __future__ import annotations

import calendar
import json
import logging
import uuid
from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, Any, Callable

from src.core import countries, habits
from src.core.errors import LifeTuneError, NotFoundError, PersistenceError, ValidationError
from src.core.habits import HabitType
from src.core.projection import RemainingTime, as_utc, hours_to_years, remaining_time
from src.data.models import Gender, Goal, HabitEntry, Profile

from src.ports.storage_port import STORAGE_ERRORS

if TYPE_CHECKING:
    from src.ports.storage_port import KeyValueStore

logger = logging.getLogger(__name__)

PROFILE_KEY = "profile"
HABIT_LOG_KEY = "habit_log"
GOALS_KEY = "goals"


@dataclass
class OperationResult:
    """Outcome of a data manager mutation."""

    success: bool
    value: Any = None
    error: LifeTuneError | None = None
    persistence_error: PersistenceError | None = None

    @property
    def error_message(self) -> str:
        return str(self.error) if self.error else ""


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _one_month_before(moment: datetime) -> datetime:
    """Same day-of-month one calendar month earlier, clamped to month length."""
    year, month = moment.year, moment.month - 1
    if month == 0:
        year, month = year - 1, 12
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def _parse_habit_type(habit_type: HabitType | str) -> HabitType:
    try:
        return HabitType(habit_type)
    except ValueError:
        raise ValidationError(f"Unknown habit type: {habit_type!r}") from None


def _check_habit_value(habit_type: HabitType, value: float, field: str = "value") -> None:
    if not habits.is_valid_habit_value(habit_type, value):
        low, high = habits.VALID_RANGES[habit_type]
        raise ValidationError(
            f"{habit_type.value} {field} must be between {low:g} and {high:g}, got {value!r}"
        )


class LifeDataManager:
    """Single owner of LifeTune's profile, habit log and goals."""

    def __init__(
        self,
        store: KeyValueStore,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._store = store
        self._clock = clock or _utc_now

        self.profile: Profile | None = None
        self.habit_log: list[HabitEntry] = []
        self.goals: list[Goal] = []
        self.total_life_extension_hours: float = 0.0
        self.load_errors: list[PersistenceError] = []

        self.load()

    def _now(self) -> datetime:
        return as_utc(self._clock())

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def _read_key(self, key: str, decode: Callable[[Any], Any]) -> Any:
        """Read and decode one key. Returns None if absent; raises PersistenceError."""
        try:
            raw = self._store.get(key)
        except STORAGE_ERRORS as exc:
            raise PersistenceError(key, f"read failed: {exc}") from exc
        if raw is None:
            return None
        try:
            return decode(json.loads(raw))
        except (ValueError, KeyError, TypeError, AttributeError) as exc:
            raise PersistenceError(key, f"decode failed: {exc}") from exc

    def load(self) -> list[PersistenceError]:
        """Reload state from the store, key by key.

        A key that fails to decode leaves its piece of state at the default.
        The failures are returned (and kept in `load_errors`), never raised.
        """
        self.profile = None
        self.habit_log = []
        self.goals = []
        self.load_errors = []

        loaders: list[tuple[str, Callable[[Any], Any], str]] = [
            (PROFILE_KEY, Profile.from_dict, "profile"),
            (HABIT_LOG_KEY, lambda items: [HabitEntry.from_dict(i) for i in items], "habit_log"),
            (GOALS_KEY, lambda items: [Goal.from_dict(i) for i in items], "goals"),
        ]
        for key, decode, attr in loaders:
            try:
                value = self._read_key(key, decode)
            except PersistenceError as exc:
                logger.error("Failed to load '%s': %s", key, exc)
                self.load_errors.append(exc)
                continue
            if value is not None:
                setattr(self, attr, value)

        self._recalculate_total()
        logger.debug(
            "Loaded state: profile=%s, %d habit entries, %d goals",
            self.profile is not None, len(self.habit_log), len(self.goals),
        )
        return self.load_errors

    def _save(self) -> PersistenceError | None:
        """Write profile, habit log and goals. Returns the first failure, if any."""
        writes: list[tuple[str, Callable[[], str | None]]] = [
            (
                PROFILE_KEY,
                lambda: json.dumps(self.profile.to_dict(), ensure_ascii=False)
                if self.profile else None,
            ),
            (
                HABIT_LOG_KEY,
                lambda: json.dumps([e.to_dict() for e in self.habit_log], ensure_ascii=False),
            ),
            (
                GOALS_KEY,
                lambda: json.dumps([g.to_dict() for g in self.goals], ensure_ascii=False),
            ),
        ]
        first_error: PersistenceError | None = None
        for key, encode in writes:
            try:
                payload = encode()
                if payload is None:
                    self._store.delete(key)
                else:
                    self._store.set(key, payload)
            except (*STORAGE_ERRORS, TypeError, ValueError) as exc:
                error = PersistenceError(key, f"write failed: {exc}")
                logger.error("Failed to persist '%s': %s", key, exc)
                if first_error is None:
                    first_error = error
        return first_error

    def _commit(self, value: Any = None) -> OperationResult:
        return OperationResult(success=True, value=value, persistence_error=self._save())

    def _recalculate_total(self) -> None:
        self.total_life_extension_hours = sum(e.life_extension_hours for e in self.habit_log)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def initialize_profile(
        self,
        birth_date: datetime,
        gender: Gender | str,
        country: str,
        nickname: str = "",
    ) -> OperationResult:
        """Create the profile with baseline = current = table expectancy."""
        try:
            profile = self._build_profile(birth_date, gender, country, nickname)
        except ValidationError as exc:
            logger.info("Profile rejected: %s", exc)
            return OperationResult(success=False, error=exc)

        self.profile = profile
        logger.info(
            "Profile initialized: %s/%s, baseline %.1f years",
            profile.country, profile.gender.value, profile.baseline_life_expectancy,
        )
        return self._commit(profile)

    def _build_profile(
        self, birth_date: datetime, gender: Gender | str, country: str, nickname: str,
    ) -> Profile:
        country = (country or "").strip()
        if not country:
            raise ValidationError("Country must not be empty")
        try:
            gender = Gender(gender)
        except ValueError:
            raise ValidationError(f"Unknown gender: {gender!r}") from None

        now = self._now()
        birth_date = as_utc(birth_date)
        if birth_date >= now:
            raise ValidationError("Birth date must be in the past")

        baseline = countries.expectancy_for(gender, country)
        return Profile(
            nickname=nickname.strip(),
            birth_date=birth_date,
            gender=gender,
            country=country,
            baseline_life_expectancy=baseline,
            current_life_expectancy=baseline,
            last_updated=now,
        )

    def set_nickname(self, nickname: str) -> OperationResult:
        """Change the profile's display name."""
        if self.profile is None:
            return OperationResult(success=False, error=NotFoundError("No profile has been set up"))
        self.profile.nickname = nickname.strip()
        self.profile.last_updated = self._now()
        return self._commit(self.profile)

    def record_habit(self, habit_type: HabitType | str, value: float) -> OperationResult:
        """Log a habit entry and apply its life-extension delta to the profile."""
        try:
            habit_type = _parse_habit_type(habit_type)
            _check_habit_value(habit_type, value)
        except ValidationError as exc:
            logger.info("Habit rejected: %s", exc)
            return OperationResult(success=False, error=exc)

        now = self._now()
        delta = habits.score(habit_type, value)
        entry = HabitEntry(
            id=str(uuid.uuid4()),
            timestamp=now,
            habit_type=habit_type,
            raw_value=float(value),
            life_extension_hours=delta,
        )
        self.habit_log.append(entry)

        if self.profile is not None:
            self.profile.current_life_expectancy += hours_to_years(delta)
            self.profile.last_updated = now
        else:
            logger.debug("No profile yet; habit logged without projection update")

        self.total_life_extension_hours += delta
        logger.info("Habit recorded: %s=%g → %+.2f h", habit_type.value, value, delta)
        return self._commit(entry)

    def add_goal(
        self,
        title: str,
        habit_type: HabitType | str,
        target_value: float,
        deadline: datetime,
    ) -> OperationResult:
        """Append a new goal with zero progress."""
        now = self._now()
        try:
            title = (title or "").strip()
            if not title:
                raise ValidationError("Goal title must not be empty")
            habit_type = _parse_habit_type(habit_type)
            _check_habit_value(habit_type, target_value, field="target")
            deadline = as_utc(deadline)
            if deadline <= now:
                raise ValidationError("Goal deadline must be in the future")
        except ValidationError as exc:
            logger.info("Goal rejected: %s", exc)
            return OperationResult(success=False, error=exc)

        goal = Goal(
            id=str(uuid.uuid4()),
            title=title,
            habit_type=habit_type,
            target_value=float(target_value),
            current_value=0.0,
            deadline=deadline,
            is_completed=False,
            created_at=now,
        )
        self.goals.append(goal)
        logger.info("Goal added: '%s' (%s → %g)", title, habit_type.value, target_value)
        return self._commit(goal)

    def update_goal_progress(self, goal_id: str, new_value: float) -> OperationResult:
        """Set a goal's current value and recompute its completion flag."""
        goal = self.get_goal(goal_id)
        if goal is None:
            return OperationResult(success=False, error=NotFoundError(f"Goal {goal_id} not found"))
        try:
            _check_habit_value(goal.habit_type, new_value)
        except ValidationError as exc:
            logger.info("Goal progress rejected: %s", exc)
            return OperationResult(success=False, error=exc)

        goal.current_value = float(new_value)
        goal.is_completed = goal.current_value >= goal.target_value
        logger.info(
            "Goal '%s' progress %g/%g (completed=%s)",
            goal.title, goal.current_value, goal.target_value, goal.is_completed,
        )
        return self._commit(goal)

    def reset_all(self) -> OperationResult:
        """Clear profile, habit log, goals and the running total."""
        self.profile = None
        self.habit_log = []
        self.goals = []
        self.total_life_extension_hours = 0.0
        logger.info("All LifeTune data reset")
        return self._commit()

    # ------------------------------------------------------------------
    # Queries (read-only)
    # ------------------------------------------------------------------

    def get_current_remaining_time(self, now: datetime | None = None) -> RemainingTime | None:
        """Remaining lifetime at `now`, or None before the profile exists."""
        if self.profile is None:
            return None
        return remaining_time(
            self.profile.current_life_expectancy,
            self.profile.birth_date,
            as_utc(now) if now else self._now(),
        )

    def get_goal(self, goal_id: str) -> Goal | None:
        return next((g for g in self.goals if g.id == goal_id), None)

    def weekly_improvements(self, now: datetime | None = None) -> list[HabitEntry]:
        """Entries from the last 7 days."""
        since = (as_utc(now) if now else self._now()) - timedelta(days=7)
        return [e for e in self.habit_log if e.timestamp >= since]

    def monthly_improvements(self, now: datetime | None = None) -> list[HabitEntry]:
        """Entries from the last calendar month."""
        since = _one_month_before(as_utc(now) if now else self._now())
        return [e for e in self.habit_log if e.timestamp >= since]

    def improvements_by_type(self) -> dict[HabitType, list[HabitEntry]]:
        grouped: dict[HabitType, list[HabitEntry]] = defaultdict(list)
        for entry in self.habit_log:
            grouped[entry.habit_type].append(entry)
        return dict(grouped)

    def positive_improvements(self) -> list[HabitEntry]:
        """Entries that extended the projection."""
        return [e for e in self.habit_log if e.life_extension_hours > 0]

    def negative_improvements(self) -> list[HabitEntry]:
        """Entries that shortened the projection."""
        return [e for e in self.habit_log if e.life_extension_hours < 0]

    def recent_improvements(self, limit: int = 7) -> list[HabitEntry]:
        if limit <= 0:
            return []
        return self.habit_log[-limit:]

    def active_goals(self) -> list[Goal]:
        return [g for g in self.goals if not g.is_completed]

    def completed_goals(self) -> list[Goal]:
        return [g for g in self.goals if g.is_completed]

    @property
    def gained_hours(self) -> float:
        return sum(e.life_extension_hours for e in self.positive_improvements())

    @property
    def lost_hours(self) -> float:
        return -sum(e.life_extension_hours for e in self.negative_improvements())

    @property
    def net_life_change_hours(self) -> float:
        return self.total_life_extension_hours
