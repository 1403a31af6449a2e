"""Core Data Models - Pydantic models for type safety.

All models are value objects with no behavior beyond validation. Stored
documents use camelCase field names (``userId``, ``servingSize``...), so every
model accepts both the Python name and the camelCase alias.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


Gender = Literal["male", "female"]


def utc_now() -> datetime:
    """Current instant as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


class DocumentModel(BaseModel):
    """Base for models persisted as documents."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: Optional[str] = Field(default=None, description="Document ID, assigned by the store")

    def to_document(self) -> dict:
        """Serialize to a stored document (camelCase, without the ID)."""
        return self.model_dump(by_alias=True, exclude={"id"})


class Food(DocumentModel):
    """A food definition in a user's personal catalog. Macros are per serving."""

    user_id: str = Field(min_length=1)
    name: str = Field(min_length=1, description="Name of the food")
    protein: float = Field(description="Protein in grams per serving")
    carbs: float = Field(description="Carbohydrates in grams per serving")
    calories: float = Field(description="Calories per serving")
    serving_size: float = Field(default=100, description="Grams or ml in one serving")
    created_at: datetime = Field(default_factory=utc_now)


class LogEntry(DocumentModel):
    """A single consumption record for one calendar day.

    Name and macros are snapshots taken at logging time, already scaled by the
    quantity consumed. The entry does not follow later changes to the food.
    """

    user_id: str = Field(min_length=1)
    date: str = Field(pattern=r"^\d{4}-\d{2}-\d{2}$", description="Local calendar day (YYYY-MM-DD)")
    food_id: str
    food_name: str
    servings: float
    grams: float
    protein: float
    carbs: float
    calories: float
    created_at: datetime = Field(default_factory=utc_now)


class UserProfile(DocumentModel):
    """Body measurements used for BMI and the weight reminder."""

    user_id: str = Field(min_length=1)
    gender: Gender
    height: float = Field(description="Height in cm")
    weight: float = Field(description="Weight in kg")
    last_weight_update: Optional[datetime] = Field(default=None, description="When weight last changed")
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class ScaledMacros(BaseModel):
    """Macros for a consumed quantity of a food."""

    protein: float
    carbs: float
    calories: float
    grams: float


class DailyTotals(BaseModel):
    """Summed macros of a set of log entries."""

    total_protein: float = 0.0
    total_carbs: float = 0.0
    total_calories: float = 0.0


class DailySummary(BaseModel):
    """A day's log entries with their (unrounded) totals."""

    date: str
    entries: list[LogEntry] = Field(default_factory=list)
    totals: DailyTotals = Field(default_factory=DailyTotals)


class DaySummary(BaseModel):
    """Totals for one daily bucket."""

    date: str
    totals: DailyTotals
    entry_count: int = Field(ge=0)


class BmiCategory(str, Enum):
    UNDERWEIGHT = "Underweight"
    NORMAL = "Normal"
    OVERWEIGHT = "Overweight"
    OBESE = "Obese"


class BodyMetrics(BaseModel):
    """Values derived from a profile. BMI fields are None when undefined."""

    bmi: Optional[float] = None
    category: Optional[BmiCategory] = None
    weight_update_due: bool = False


class User(BaseModel):
    """User record stored in Firestore."""

    email: str
    api_key_hash: str = Field(description="SHA256 hash of API key - never store plaintext")
    created_at: datetime = Field(default_factory=utc_now)
