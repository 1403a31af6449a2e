"""Consumption - building daily log entries.

All functions are pure: same input always produces same output, no side effects.
"""

from datetime import datetime

from .macros import scale_macros
from .models import Food, LogEntry


def build_log_entry(
    user_id: str,
    food: Food,
    servings: float,
    date_key: str,
    created_at: datetime,
) -> LogEntry:
    """Create an unsaved log entry snapshotting the food at logging time.

    Args:
        user_id: Owner of the entry
        food: The food consumed (must already be saved, so it has an ID)
        servings: Number of servings consumed
        date_key: Local calendar day (YYYY-MM-DD) the entry belongs to
        created_at: Logging instant

    Returns:
        LogEntry with scaled macros and grams, without an ID
    """
    scaled = scale_macros(food, servings)
    return LogEntry(
        user_id=user_id,
        date=date_key,
        food_id=food.id,
        food_name=food.name,
        servings=servings,
        grams=scaled.grams,
        protein=scaled.protein,
        carbs=scaled.carbs,
        calories=scaled.calories,
        created_at=created_at,
    )
