"""Tracker - the operations the API and MCP tools invoke.

Validates raw input, calls the pure core, and persists through the store.
Validation happens before any write. Store errors propagate unchanged.
"""

import logging
import math
from typing import Any

from ..core.clock import Clock, SystemClock
from ..core.consumption import build_log_entry
from ..core.macros import calculate_daily_totals
from ..core.models import BodyMetrics, DailySummary, DaySummary, Food, LogEntry, UserProfile
from ..core.profile import body_metrics, merge_profile
from ..core.reports import generate_history, history_range
from ..core.units import DEFAULT_SERVING_SIZE, InvalidQuantityError, resolve_servings
from .auth import Session
from .store import NutritionStore


logger = logging.getLogger(__name__)

GENDERS = ("male", "female")


class TrackerInputError(ValueError):
    """Input is missing or malformed. Nothing was written."""


class TrackerNotFoundError(LookupError):
    """The record does not exist or belongs to another user."""


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _parse_number(value: Any, label: str) -> float:
    """Parse a number entered as a number or a numeric string."""
    if isinstance(value, bool):
        raise TrackerInputError(f"{label} must be a number")
    try:
        result = float(value)
    except (TypeError, ValueError):
        raise TrackerInputError(f"{label} must be a number") from None
    if not math.isfinite(result):
        raise TrackerInputError(f"{label} must be a number")
    return result


def _optional_number(value: Any, label: str) -> float | None:
    return None if _is_blank(value) else _parse_number(value, label)


class NutritionTracker:
    """Food catalog, daily log and profile operations for one store."""

    def __init__(self, store: NutritionStore, clock: Clock | None = None) -> None:
        self.store = store
        self.clock = clock or SystemClock()

    # ==================== Food Catalog ====================

    def add_food(
        self,
        session: Session,
        name: Any,
        protein: Any,
        carbs: Any,
        calories: Any,
        serving_size: Any = DEFAULT_SERVING_SIZE,
    ) -> Food:
        """Add a food to the user's catalog. Macros are per serving.

        Raises:
            TrackerInputError: If a field is missing or not numeric
        """
        if any(_is_blank(v) for v in (name, protein, carbs, calories, serving_size)):
            raise TrackerInputError("Please fill in all fields")

        food = Food(
            user_id=session.user_id,
            name=str(name).strip(),
            protein=_parse_number(protein, "Protein"),
            carbs=_parse_number(carbs, "Carbs"),
            calories=_parse_number(calories, "Calories"),
            serving_size=_parse_number(serving_size, "Serving size"),
            created_at=self.clock.now(),
        )
        return self.store.add_food(food)

    def list_foods(self, session: Session) -> list[Food]:
        return self.store.get_user_foods(session.user_id)

    def delete_food(self, session: Session, food_id: str) -> None:
        """Delete one of the user's foods. Logged entries keep their snapshot."""
        food = self.store.get_food(food_id)
        if food is None or food.user_id != session.user_id:
            raise TrackerNotFoundError("Food not found")
        self.store.delete_food(food_id)

    # ==================== Daily Log ====================

    def log_consumption(
        self,
        session: Session,
        food_id: Any,
        servings: Any = None,
        grams: Any = None,
    ) -> LogEntry:
        """Log a quantity of a catalog food against today.

        Grams (or ml) take precedence over servings when both are given.

        Args:
            session: The signed-in user
            food_id: ID of one of the user's foods
            servings: Number of servings
            grams: Amount in grams/ml

        Returns:
            The saved entry

        Raises:
            TrackerInputError: If the food or quantity is missing or invalid
        """
        if _is_blank(food_id) or (_is_blank(servings) and _is_blank(grams)):
            raise TrackerInputError("Please select a food and enter servings or grams")

        servings_value = _optional_number(servings, "Servings")
        grams_value = _optional_number(grams, "Grams")

        food = self.store.get_food(str(food_id))
        if food is None or food.user_id != session.user_id:
            raise TrackerInputError("Selected food was not found")

        try:
            final_servings = resolve_servings(food.serving_size, servings_value, grams_value)
        except InvalidQuantityError as e:
            raise TrackerInputError(str(e)) from e

        entry = build_log_entry(
            user_id=session.user_id,
            food=food,
            servings=final_servings,
            date_key=self.clock.today(),
            created_at=self.clock.now(),
        )
        return self.store.add_log_entry(entry)

    def refresh(self, session: Session) -> list[LogEntry]:
        """Fetch today's entries. Callers decide how often to refresh."""
        return self.store.get_logs_for_date(session.user_id, self.clock.today())

    def daily_summary(self, session: Session) -> DailySummary:
        """Today's entries and their totals."""
        today = self.clock.today()
        entries = self.store.get_logs_for_date(session.user_id, today)
        return DailySummary(date=today, entries=entries, totals=calculate_daily_totals(entries))

    def delete_log_entry(self, session: Session, log_id: str) -> None:
        entry = self.store.get_log_entry(log_id)
        if entry is None or entry.user_id != session.user_id:
            raise TrackerNotFoundError("Log entry not found")
        self.store.delete_log_entry(log_id)

    def history(self, session: Session, days: int = 7) -> list[DaySummary]:
        """Per-day totals for the last ``days`` days, today included."""
        try:
            start, end = history_range(self.clock.today(), days)
        except ValueError as e:
            raise TrackerInputError(str(e)) from e
        entries = self.store.get_logs_range(session.user_id, start, end)
        return generate_history(entries, start, end)

    # ==================== Profile ====================

    def save_profile(self, session: Session, gender: Any, height: Any, weight: Any) -> UserProfile:
        """Create or update the user's profile.

        Reads the existing profile, then writes; the two calls are not atomic,
        so concurrent saves for the same user can race.

        Raises:
            TrackerInputError: If a field is missing or invalid
        """
        if _is_blank(gender) or _is_blank(height) or _is_blank(weight):
            raise TrackerInputError("Please fill in all fields")
        if gender not in GENDERS:
            raise TrackerInputError("Gender must be 'male' or 'female'")

        height_value = _parse_number(height, "Height")
        weight_value = _parse_number(weight, "Weight")

        existing = self.store.get_profile(session.user_id)
        profile = merge_profile(
            existing,
            user_id=session.user_id,
            gender=gender,
            height=height_value,
            weight=weight_value,
            now=self.clock.now(),
        )
        if existing is None:
            return self.store.add_profile(profile)
        return self.store.update_profile(profile)

    def get_profile(self, session: Session) -> UserProfile | None:
        return self.store.get_profile(session.user_id)

    def metrics(self, profile: UserProfile) -> BodyMetrics:
        """BMI, category and reminder flag for a loaded profile."""
        return body_metrics(profile, self.clock.now())
