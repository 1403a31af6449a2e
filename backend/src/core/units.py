"""Unit Conversion - Servings <-> grams/ml.

All functions are pure: same input always produces same output, no side effects.
"""

from typing import Optional


DEFAULT_SERVING_SIZE = 100.0


class InvalidQuantityError(ValueError):
    """Raised when neither a serving count nor an amount is supplied."""


def effective_serving_size(serving_size: Optional[float]) -> float:
    """Return the serving size to convert with.

    Missing or zero serving sizes fall back to 100 (grams or ml).
    """
    return serving_size or DEFAULT_SERVING_SIZE


def to_servings(amount: float, serving_size: Optional[float]) -> float:
    """Convert grams/ml to a number of servings."""
    return amount / effective_serving_size(serving_size)


def to_grams(servings: float, serving_size: Optional[float]) -> float:
    """Convert a number of servings to grams/ml."""
    return servings * effective_serving_size(serving_size)


def resolve_servings(
    serving_size: Optional[float],
    servings: Optional[float] = None,
    amount: Optional[float] = None,
) -> float:
    """Resolve a consumption quantity to a canonical serving count.

    An amount in grams/ml takes precedence over a serving count.

    Args:
        serving_size: The food's grams/ml per serving
        servings: Number of servings, if entered that way
        amount: Grams/ml consumed, if entered that way

    Returns:
        Number of servings consumed

    Raises:
        InvalidQuantityError: If neither servings nor amount is given
    """
    if amount is not None:
        return to_servings(amount, serving_size)
    if servings is not None:
        return servings
    raise InvalidQuantityError("Enter a number of servings or an amount in grams")
