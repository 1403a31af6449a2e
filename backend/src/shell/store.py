"""Document Store boundary.

The tracker talks to persistence only through this interface. Every
implementation assigns document IDs on insert and returns timestamps as
timezone-aware UTC datetimes.
"""

from typing import Protocol

from ..core.models import Food, LogEntry, User, UserProfile
from .config import Settings


class NutritionStore(Protocol):
    # Foods
    def add_food(self, food: Food) -> Food: ...

    def get_food(self, food_id: str) -> Food | None: ...

    def get_user_foods(self, user_id: str) -> list[Food]: ...

    def delete_food(self, food_id: str) -> None: ...

    # Daily logs
    def add_log_entry(self, entry: LogEntry) -> LogEntry: ...

    def get_log_entry(self, log_id: str) -> LogEntry | None: ...

    def get_logs_for_date(self, user_id: str, date_key: str) -> list[LogEntry]: ...

    def get_logs_range(self, user_id: str, start: str, end: str) -> list[LogEntry]: ...

    def delete_log_entry(self, log_id: str) -> None: ...

    # Profiles
    def get_profile(self, user_id: str) -> UserProfile | None: ...

    def add_profile(self, profile: UserProfile) -> UserProfile: ...

    def update_profile(self, profile: UserProfile) -> UserProfile: ...

    # Users
    def add_user(self, user_id: str, user: User) -> None: ...

    def get_user(self, user_id: str) -> User | None: ...


def create_store(settings: Settings) -> NutritionStore:
    """Create the store selected by settings.store_backend."""
    if settings.store_backend == "memory":
        from .memory_store import InMemoryStore

        return InMemoryStore()

    from .firestore_client import FirestoreConfig, NutritionFirestoreClient

    return NutritionFirestoreClient(
        FirestoreConfig(
            project_id=settings.firestore_project,
            database=settings.firestore_database,
        )
    )
