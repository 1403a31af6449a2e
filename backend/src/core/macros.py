"""Macro Calculations - Pure functions for nutrition math.

All functions are pure: same input always produces same output, no side effects.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable

from .models import DailyTotals, Food, LogEntry, ScaledMacros
from .units import to_grams


def scale_macros(food: Food, servings: float) -> ScaledMacros:
    """Scale a food's per-serving macros to the quantity consumed.

    No rounding happens here; see round_for_display.

    Args:
        food: The food being consumed
        servings: Number of servings consumed

    Returns:
        ScaledMacros with protein, carbs, calories and grams
    """
    return ScaledMacros(
        protein=food.protein * servings,
        carbs=food.carbs * servings,
        calories=food.calories * servings,
        grams=to_grams(servings, food.serving_size),
    )


def calculate_daily_totals(entries: Iterable[LogEntry]) -> DailyTotals:
    """Sum macros across log entries.

    The caller supplies only the entries of the day it wants; nothing is
    filtered here.

    Args:
        entries: Log entries to sum

    Returns:
        DailyTotals (all zeros for no entries)
    """
    entries = list(entries)
    return DailyTotals(
        total_protein=sum(e.protein for e in entries),
        total_carbs=sum(e.carbs for e in entries),
        total_calories=sum(e.calories for e in entries),
    )


def _round_half_up(value: float, step: str) -> float:
    return float(Decimal(value).quantize(Decimal(step), rounding=ROUND_HALF_UP))


def round_for_display(totals: DailyTotals) -> DailyTotals:
    """Round totals for rendering: 0.1 g for protein/carbs, whole calories.

    Exact ties round away from zero (82.5 kcal shows as 83).
    """
    return DailyTotals(
        total_protein=_round_half_up(totals.total_protein, "0.1"),
        total_carbs=_round_half_up(totals.total_carbs, "0.1"),
        total_calories=_round_half_up(totals.total_calories, "1"),
    )
