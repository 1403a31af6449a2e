"""Profile & BMI - Pure functions for body metrics and the weight reminder.

All functions are pure: same input always produces same output, no side effects.
"""

from datetime import datetime, timedelta
from typing import Optional

from .models import BmiCategory, BodyMetrics, Gender, UserProfile


WEIGHT_UPDATE_INTERVAL = timedelta(days=14)


def calculate_bmi(height_cm: Optional[float], weight_kg: Optional[float]) -> Optional[float]:
    """Calculate body-mass index.

    Args:
        height_cm: Height in centimeters
        weight_kg: Weight in kilograms

    Returns:
        weight / height_m^2, or None if either input is missing or not positive
    """
    if not height_cm or not weight_kg or height_cm <= 0 or weight_kg <= 0:
        return None
    height_m = height_cm / 100
    return weight_kg / (height_m * height_m)


def bmi_category(bmi: float) -> BmiCategory:
    """Classify a BMI. Boundary values belong to the higher category."""
    if bmi < 18.5:
        return BmiCategory.UNDERWEIGHT
    if bmi < 25:
        return BmiCategory.NORMAL
    if bmi < 30:
        return BmiCategory.OVERWEIGHT
    return BmiCategory.OBESE


def is_weight_update_due(last_weight_update: Optional[datetime], now: datetime) -> bool:
    """True when more than 14 days passed since the weight was last changed.

    Exactly 14 days is not due yet. Without a recorded update the reminder
    never fires.
    """
    if last_weight_update is None:
        return False
    return now - last_weight_update > WEIGHT_UPDATE_INTERVAL


def body_metrics(profile: UserProfile, now: datetime) -> BodyMetrics:
    """Derive BMI, its category and the reminder flag from a profile."""
    bmi = calculate_bmi(profile.height, profile.weight)
    return BodyMetrics(
        bmi=bmi,
        category=bmi_category(bmi) if bmi is not None else None,
        weight_update_due=is_weight_update_due(profile.last_weight_update, now),
    )


def merge_profile(
    existing: Optional[UserProfile],
    user_id: str,
    gender: Gender,
    height: float,
    weight: float,
    now: datetime,
) -> UserProfile:
    """Build the profile record to write for a save.

    A first save stamps every timestamp with ``now``. Later saves keep the
    ID and created_at, refresh updated_at, and move last_weight_update only
    when the weight differs from the stored one (exact comparison).

    Args:
        existing: The stored profile, or None
        user_id: Owner of the profile
        gender: "male" or "female"
        height: Height in cm
        weight: Weight in kg
        now: Save instant

    Returns:
        UserProfile ready to insert (no ID) or update (existing ID)
    """
    if existing is None:
        return UserProfile(
            user_id=user_id,
            gender=gender,
            height=height,
            weight=weight,
            last_weight_update=now,
            created_at=now,
            updated_at=now,
        )

    if existing.weight != weight:
        last_weight_update = now
    else:
        last_weight_update = existing.last_weight_update or now

    return UserProfile(
        id=existing.id,
        user_id=user_id,
        gender=gender,
        height=height,
        weight=weight,
        last_weight_update=last_weight_update,
        created_at=existing.created_at,
        updated_at=now,
    )


class WeightReminder:
    """Visibility of the "time to update your weight" prompt.

    Hidden -> Shown when a loaded profile is overdue; back to Hidden on
    dismiss or after a weight save. Dismissal is not remembered, so the next
    load shows it again while still overdue.
    """

    def __init__(self) -> None:
        self.visible = False

    def profile_loaded(self, profile: Optional[UserProfile], now: datetime) -> bool:
        """Show the prompt if the profile is overdue. Never hides it; only
        dismiss or weight_saved do."""
        if profile is not None and is_weight_update_due(profile.last_weight_update, now):
            self.visible = True
        return self.visible

    def dismiss(self) -> None:
        self.visible = False

    def weight_saved(self) -> None:
        self.visible = False
