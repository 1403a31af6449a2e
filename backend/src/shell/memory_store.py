"""In-memory store for development and testing.

Data is lost when the process stops. Models are copied on the way in and
out so callers cannot mutate stored state.
"""

import uuid

from ..core.models import Food, LogEntry, User, UserProfile


def _new_id() -> str:
    return uuid.uuid4().hex[:20]


class InMemoryStore:
    """Dictionary-backed implementation of NutritionStore."""

    def __init__(self) -> None:
        self._foods: dict[str, Food] = {}
        self._logs: dict[str, LogEntry] = {}
        self._profiles: dict[str, UserProfile] = {}
        self._users: dict[str, User] = {}

    # Foods

    def add_food(self, food: Food) -> Food:
        saved = food.model_copy(update={"id": _new_id()}, deep=True)
        self._foods[saved.id] = saved
        return saved.model_copy(deep=True)

    def get_food(self, food_id: str) -> Food | None:
        food = self._foods.get(food_id)
        return food.model_copy(deep=True) if food else None

    def get_user_foods(self, user_id: str) -> list[Food]:
        return [f.model_copy(deep=True) for f in self._foods.values() if f.user_id == user_id]

    def delete_food(self, food_id: str) -> None:
        self._foods.pop(food_id, None)

    # Daily logs

    def add_log_entry(self, entry: LogEntry) -> LogEntry:
        saved = entry.model_copy(update={"id": _new_id()}, deep=True)
        self._logs[saved.id] = saved
        return saved.model_copy(deep=True)

    def get_log_entry(self, log_id: str) -> LogEntry | None:
        entry = self._logs.get(log_id)
        return entry.model_copy(deep=True) if entry else None

    def get_logs_for_date(self, user_id: str, date_key: str) -> list[LogEntry]:
        return [
            e.model_copy(deep=True)
            for e in self._logs.values()
            if e.user_id == user_id and e.date == date_key
        ]

    def get_logs_range(self, user_id: str, start: str, end: str) -> list[LogEntry]:
        logs = [
            e.model_copy(deep=True)
            for e in self._logs.values()
            if e.user_id == user_id and start <= e.date <= end
        ]
        return sorted(logs, key=lambda e: e.date)

    def delete_log_entry(self, log_id: str) -> None:
        self._logs.pop(log_id, None)

    # Profiles

    def get_profile(self, user_id: str) -> UserProfile | None:
        for profile in self._profiles.values():
            if profile.user_id == user_id:
                return profile.model_copy(deep=True)
        return None

    def add_profile(self, profile: UserProfile) -> UserProfile:
        saved = profile.model_copy(update={"id": _new_id()}, deep=True)
        self._profiles[saved.id] = saved
        return saved.model_copy(deep=True)

    def update_profile(self, profile: UserProfile) -> UserProfile:
        if profile.id not in self._profiles:
            raise KeyError(f"No profile with id {profile.id}")
        self._profiles[profile.id] = profile.model_copy(deep=True)
        return profile

    # Users

    def add_user(self, user_id: str, user: User) -> None:
        self._users[user_id] = user.model_copy(deep=True)

    def get_user(self, user_id: str) -> User | None:
        user = self._users.get(user_id)
        return user.model_copy(deep=True) if user else None
