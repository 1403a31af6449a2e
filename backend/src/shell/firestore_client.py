"""Firestore Client - Persistence for foods, daily logs, profiles and users.

This module handles all database I/O. All I/O is contained here; business
logic is in the core module. Errors are logged and re-raised unchanged so the
caller decides what the user sees.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, TypeVar

from google.cloud import firestore

from ..core.models import DocumentModel, Food, LogEntry, User, UserProfile, utc_now


logger = logging.getLogger(__name__)

FOODS = "foods"
DAILY_LOGS = "dailyLogs"
PROFILES = "profiles"
USERS = "users"

M = TypeVar("M", bound=DocumentModel)


@dataclass
class FirestoreConfig:
    """Configuration for Firestore client.

    Attributes:
        project_id: GCP project ID (None for default)
        database: Firestore database name (None for default database)
    """

    project_id: str | None = None
    database: str | None = None


def to_instant(value: Any) -> datetime | None:
    """Normalize a stored timestamp to an aware UTC datetime.

    Firestore returns DatetimeWithNanoseconds (a datetime subclass); older
    documents may hold naive datetimes, which are taken as UTC.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _from_snapshot(model: type[M], snapshot: firestore.DocumentSnapshot) -> M:
    """Build a model from a document, normalizing its timestamps."""
    data = snapshot.to_dict() or {}
    data["id"] = snapshot.id
    for name, key in (("created_at", "createdAt"), ("updated_at", "updatedAt")):
        if name in model.model_fields:
            data[key] = to_instant(data.get(key)) or utc_now()
    if "lastWeightUpdate" in data:
        data["lastWeightUpdate"] = to_instant(data["lastWeightUpdate"])
    return model.model_validate(data)


class NutritionFirestoreClient:
    """Client for persisting nutrition data to Firestore.

    Document structure (top-level collections, scoped by the userId field):
        foods/{auto_id}: { userId, name, protein, carbs, calories, servingSize, createdAt }
        dailyLogs/{auto_id}: { userId, date, foodId, foodName, servings, grams, ... }
        profiles/{auto_id}: { userId, gender, height, weight, lastWeightUpdate, ... }
        users/{user_id}: { email, api_key_hash, created_at }
    """

    def __init__(self, config: FirestoreConfig | None = None) -> None:
        """Initialize Firestore client.

        Args:
            config: Firestore configuration
        """
        self.config = config or FirestoreConfig()
        self._client: firestore.Client | None = None

    @property
    def client(self) -> firestore.Client:
        """Lazy initialization of Firestore client."""
        if self._client is None:
            kwargs: dict[str, Any] = {}
            if self.config.project_id:
                kwargs["project"] = self.config.project_id
            if self.config.database:
                kwargs["database"] = self.config.database
            self._client = firestore.Client(**kwargs)
        return self._client

    def _collection(self, name: str) -> firestore.CollectionReference:
        return self.client.collection(name)

    def _insert(self, collection: str, model: M) -> M:
        """Write a new document with a generated ID and return the saved model."""
        ref = self._collection(collection).document()
        ref.set(model.to_document())
        return model.model_copy(update={"id": ref.id})

    def _get(self, collection: str, model: type[M], doc_id: str) -> M | None:
        doc = self._collection(collection).document(doc_id).get()
        if not doc.exists:
            return None
        return _from_snapshot(model, doc)

    def _query_user(self, collection: str, user_id: str) -> firestore.Query:
        return self._collection(collection).where(
            filter=firestore.FieldFilter("userId", "==", user_id)
        )

    # ==================== Food Operations ====================

    def add_food(self, food: Food) -> Food:
        """Add a food to the user's catalog.

        Args:
            food: Unsaved food

        Returns:
            The food with its generated ID
        """
        logger.info("Adding food for %s: %s", food.user_id[:8], food.name)
        try:
            return self._insert(FOODS, food)
        except Exception as e:
            logger.error("Error adding food: %s", str(e))
            raise

    def get_food(self, food_id: str) -> Food | None:
        """Fetch a food by ID, or None if it does not exist."""
        try:
            return self._get(FOODS, Food, food_id)
        except Exception as e:
            logger.error("Error getting food: %s", str(e))
            raise

    def get_user_foods(self, user_id: str) -> list[Food]:
        """Fetch every food owned by a user."""
        logger.debug("Fetching foods for user: %s", user_id[:8])
        try:
            query = self._query_user(FOODS, user_id)
            return [_from_snapshot(Food, doc) for doc in query.stream()]
        except Exception as e:
            logger.error("Error getting foods: %s", str(e))
            raise

    def delete_food(self, food_id: str) -> None:
        """Delete a food. Log entries created from it are kept."""
        logger.info("Deleting food: %s", food_id)
        try:
            self._collection(FOODS).document(food_id).delete()
        except Exception as e:
            logger.error("Error deleting food: %s", str(e))
            raise

    # ==================== Daily Log Operations ====================

    def add_log_entry(self, entry: LogEntry) -> LogEntry:
        """Persist a new log entry.

        Args:
            entry: Unsaved entry

        Returns:
            The entry with its generated ID
        """
        logger.info("Logging %s for %s on %s", entry.food_name, entry.user_id[:8], entry.date)
        try:
            return self._insert(DAILY_LOGS, entry)
        except Exception as e:
            logger.error("Error logging food: %s", str(e))
            raise

    def get_log_entry(self, log_id: str) -> LogEntry | None:
        """Fetch a log entry by ID, or None if it does not exist."""
        try:
            return self._get(DAILY_LOGS, LogEntry, log_id)
        except Exception as e:
            logger.error("Error getting log entry: %s", str(e))
            raise

    def get_logs_for_date(self, user_id: str, date_key: str) -> list[LogEntry]:
        """Fetch a user's entries for one calendar day.

        Args:
            user_id: The user's ID
            date_key: Day in YYYY-MM-DD form

        Returns:
            Entries for that day (may be empty)
        """
        logger.debug("Fetching logs for %s on %s", user_id[:8], date_key)
        try:
            query = self._query_user(DAILY_LOGS, user_id).where(
                filter=firestore.FieldFilter("date", "==", date_key)
            )
            return [_from_snapshot(LogEntry, doc) for doc in query.stream()]
        except Exception as e:
            logger.error("Error getting today logs: %s", str(e))
            raise

    def get_logs_range(self, user_id: str, start: str, end: str) -> list[LogEntry]:
        """Fetch a user's entries between two date keys (inclusive).

        Needs a composite index on (userId, date).
        """
        logger.debug("Fetching logs for %s from %s to %s", user_id[:8], start, end)
        try:
            query = (
                self._query_user(DAILY_LOGS, user_id)
                .where(filter=firestore.FieldFilter("date", ">=", start))
                .where(filter=firestore.FieldFilter("date", "<=", end))
                .order_by("date")
            )
            logs = [_from_snapshot(LogEntry, doc) for doc in query.stream()]
            logger.debug("Found %d log entries in range", len(logs))
            return logs
        except Exception as e:
            logger.error("Error getting logs range: %s", str(e))
            raise

    def delete_log_entry(self, log_id: str) -> None:
        """Delete a log entry."""
        logger.info("Deleting log entry: %s", log_id)
        try:
            self._collection(DAILY_LOGS).document(log_id).delete()
        except Exception as e:
            logger.error("Error deleting log entry: %s", str(e))
            raise

    # ==================== Profile Operations ====================

    def get_profile(self, user_id: str) -> UserProfile | None:
        """Fetch the user's profile (the first match), or None."""
        logger.debug("Fetching profile for user: %s", user_id[:8])
        try:
            for doc in self._query_user(PROFILES, user_id).limit(1).stream():
                return _from_snapshot(UserProfile, doc)
            return None
        except Exception as e:
            logger.error("Error getting profile: %s", str(e))
            raise

    def add_profile(self, profile: UserProfile) -> UserProfile:
        """Insert a new profile."""
        logger.info("Creating profile for user: %s", profile.user_id[:8])
        try:
            return self._insert(PROFILES, profile)
        except Exception as e:
            logger.error("Error saving profile: %s", str(e))
            raise

    def update_profile(self, profile: UserProfile) -> UserProfile:
        """Overwrite the fields of an existing profile document."""
        logger.info("Updating profile for user: %s", profile.user_id[:8])
        try:
            self._collection(PROFILES).document(profile.id).update(profile.to_document())
            return profile
        except Exception as e:
            logger.error("Error saving profile: %s", str(e))
            raise

    # ==================== User Operations ====================

    def add_user(self, user_id: str, user: User) -> None:
        """Create the user record keyed by the hashed API key."""
        self._collection(USERS).document(user_id).set(user.model_dump())

    def get_user(self, user_id: str) -> User | None:
        """Fetch a user record, or None."""
        doc = self._collection(USERS).document(user_id).get()
        if not doc.exists:
            return None
        return User(**doc.to_dict())
