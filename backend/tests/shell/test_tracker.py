"""Tests for tracker operations against the in-memory store."""

from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest

from src.shell.tracker import NutritionTracker, TrackerInputError, TrackerNotFoundError


@pytest.fixture
def chicken(tracker, session):
    return tracker.add_food(session, "Chicken breast", 30, 0, 165, 150)


class TestFoodCatalog:
    """Tests for add_food, list_foods and delete_food."""

    def test_add_food_assigns_id(self, tracker, session, clock):
        """A new food gets an ID, the owner and the clock's time."""
        food = tracker.add_food(session, "Rice", 2.7, 28, 130)
        assert food.id
        assert food.user_id == session.user_id
        assert food.serving_size == 100
        assert food.created_at == clock.now()

    def test_numeric_strings_accepted(self, tracker, session):
        """Form values arrive as strings and are parsed."""
        food = tracker.add_food(session, "Oats", "13.5", "66", "389", "40")
        assert food.protein == 13.5
        assert food.serving_size == 40

    @pytest.mark.parametrize("field", ["name", "protein", "carbs", "calories", "serving_size"])
    def test_missing_field_rejected(self, tracker, session, store, field):
        """Any missing field aborts without writing."""
        values = dict(name="Rice", protein=2.7, carbs=28, calories=130, serving_size=100)
        values[field] = ""
        with pytest.raises(TrackerInputError, match="fill in all fields"):
            tracker.add_food(session, **values)
        assert store.get_user_foods(session.user_id) == []

    def test_non_numeric_rejected(self, tracker, session):
        """Non-numeric macros are rejected."""
        with pytest.raises(TrackerInputError, match="Protein must be a number"):
            tracker.add_food(session, "Rice", "lots", 28, 130)

    @pytest.mark.parametrize("field", ["protein", "carbs", "calories", "serving_size"])
    @pytest.mark.parametrize("value", ["nan", "inf", "-Infinity", float("nan")])
    def test_non_finite_rejected(self, tracker, session, store, field, value):
        """NaN and infinity are not numbers and nothing is written."""
        values = dict(name="Rice", protein=2.7, carbs=28, calories=130, serving_size=100)
        values[field] = value
        with pytest.raises(TrackerInputError, match="must be a number"):
            tracker.add_food(session, **values)
        assert store.get_user_foods(session.user_id) == []

    def test_list_only_own_foods(self, tracker, session, other_session):
        """Each user sees only their own catalog."""
        tracker.add_food(session, "Mine", 1, 1, 1)
        tracker.add_food(other_session, "Theirs", 1, 1, 1)
        assert [f.name for f in tracker.list_foods(session)] == ["Mine"]

    def test_delete_food(self, tracker, session, chicken):
        """Deleting removes the food from the catalog."""
        tracker.delete_food(session, chicken.id)
        assert tracker.list_foods(session) == []

    def test_delete_other_users_food(self, tracker, other_session, chicken):
        """Another user's food cannot be deleted."""
        with pytest.raises(TrackerNotFoundError):
            tracker.delete_food(other_session, chicken.id)

    def test_delete_missing_food(self, tracker, session):
        """Unknown IDs are not found."""
        with pytest.raises(TrackerNotFoundError):
            tracker.delete_food(session, "nope")


class TestLogConsumption:
    """Tests for log_consumption."""

    def test_log_by_grams(self, tracker, session, chicken):
        """150 g of chicken logs one serving with the per-serving macros."""
        entry = tracker.log_consumption(session, chicken.id, grams=150)
        assert entry.id
        assert entry.servings == 1.0
        assert entry.grams == 150
        assert entry.protein == 30
        assert entry.carbs == 0
        assert entry.calories == 165

    def test_log_by_servings(self, tracker, session, chicken):
        """Servings are used directly."""
        entry = tracker.log_consumption(session, chicken.id, servings="2")
        assert entry.servings == 2
        assert entry.grams == 300
        assert entry.calories == 330

    def test_grams_win_over_servings(self, tracker, session, chicken):
        """Grams take precedence when both are supplied."""
        entry = tracker.log_consumption(session, chicken.id, servings=3, grams=75)
        assert entry.servings == 0.5

    def test_blank_servings_with_grams(self, tracker, session, chicken):
        """An emptied servings field does not block a grams entry."""
        entry = tracker.log_consumption(session, chicken.id, servings="", grams="300")
        assert entry.servings == 2

    def test_dated_today(self, tracker, session, chicken, clock):
        """Entries use the clock's local date key and instant."""
        entry = tracker.log_consumption(session, chicken.id, servings=1)
        assert entry.date == "2026-03-01"
        assert entry.created_at == clock.now()

    def test_missing_quantity(self, tracker, session, chicken, store):
        """No servings and no grams is a validation error with no write."""
        with pytest.raises(TrackerInputError, match="servings or grams"):
            tracker.log_consumption(session, chicken.id)
        assert store.get_logs_for_date(session.user_id, "2026-03-01") == []

    @pytest.mark.parametrize("quantity", [{"servings": "nan"}, {"servings": "inf"}, {"grams": "Infinity"}, {"grams": float("nan")}])
    def test_non_finite_quantity(self, tracker, session, chicken, store, quantity):
        """NaN or infinite quantities are rejected with no write."""
        with pytest.raises(TrackerInputError, match="must be a number"):
            tracker.log_consumption(session, chicken.id, **quantity)
        assert store.get_logs_for_date(session.user_id, "2026-03-01") == []

    def test_missing_food(self, tracker, session):
        """No food selected is a validation error."""
        with pytest.raises(TrackerInputError):
            tracker.log_consumption(session, "", servings=1)

    def test_unknown_food(self, tracker, session):
        """Unknown food IDs are rejected."""
        with pytest.raises(TrackerInputError, match="not found"):
            tracker.log_consumption(session, "missing", servings=1)

    def test_other_users_food(self, tracker, other_session, chicken):
        """Foods of another user cannot be logged."""
        with pytest.raises(TrackerInputError):
            tracker.log_consumption(other_session, chicken.id, servings=1)

    def test_snapshot_survives_food_deletion(self, tracker, session, chicken):
        """Deleting the food leaves logged entries untouched."""
        tracker.log_consumption(session, chicken.id, servings=1)
        tracker.delete_food(session, chicken.id)
        entries = tracker.refresh(session)
        assert len(entries) == 1
        assert entries[0].food_name == "Chicken breast"
        assert entries[0].protein == 30

    def test_store_error_propagates(self, clock, session, chicken):
        """Persistence errors reach the caller unchanged."""
        store = MagicMock()
        store.get_food.return_value = chicken
        store.add_log_entry.side_effect = RuntimeError("unavailable")
        tracker = NutritionTracker(store, clock)

        with pytest.raises(RuntimeError, match="unavailable"):
            tracker.log_consumption(session, chicken.id, servings=1)
        store.add_log_entry.assert_called_once()


class TestDailySummary:
    """Tests for refresh, daily_summary, delete_log_entry and history."""

    def test_two_entries_sum(self, tracker, session):
        """Two entries of 10 g and 20 g protein total 30 g."""
        a = tracker.add_food(session, "A", 10, 0, 0)
        b = tracker.add_food(session, "B", 20, 0, 0)
        tracker.log_consumption(session, a.id, servings=1)
        tracker.log_consumption(session, b.id, servings=1)

        summary = tracker.daily_summary(session)
        assert summary.date == "2026-03-01"
        assert len(summary.entries) == 2
        assert summary.totals.total_protein == 30

    def test_empty_day(self, tracker, session):
        """A day without entries totals zero."""
        summary = tracker.daily_summary(session)
        assert summary.entries == []
        assert summary.totals.total_calories == 0

    def test_only_today(self, tracker, session, chicken, clock):
        """Yesterday's entries are not part of today's summary."""
        clock.set(clock.now() - timedelta(days=1), "2026-02-28")
        tracker.log_consumption(session, chicken.id, servings=1)
        clock.set(clock.now() + timedelta(days=1), "2026-03-01")
        tracker.log_consumption(session, chicken.id, servings=2)

        summary = tracker.daily_summary(session)
        assert len(summary.entries) == 1
        assert summary.totals.total_calories == 330

    def test_delete_log_entry(self, tracker, session, chicken):
        """Deleted entries leave the day's totals."""
        entry = tracker.log_consumption(session, chicken.id, servings=1)
        tracker.delete_log_entry(session, entry.id)
        assert tracker.refresh(session) == []

    def test_delete_other_users_entry(self, tracker, session, other_session, chicken):
        """Another user's entry cannot be deleted."""
        entry = tracker.log_consumption(session, chicken.id, servings=1)
        with pytest.raises(TrackerNotFoundError):
            tracker.delete_log_entry(other_session, entry.id)

    def test_history(self, tracker, session, chicken, clock):
        """History buckets entries per day within the window."""
        for day, today in ((9, "2026-02-20"), (2, "2026-02-27"), (0, "2026-03-01"), (0, "2026-03-01")):
            clock.set(datetime(2026, 3, 1, 12, tzinfo=timezone.utc) - timedelta(days=day), today)
            tracker.log_consumption(session, chicken.id, servings=1)
        clock.set(datetime(2026, 3, 1, 12, tzinfo=timezone.utc), "2026-03-01")

        history = tracker.history(session, days=7)
        assert [(d.date, d.entry_count) for d in history] == [("2026-02-27", 1), ("2026-03-01", 2)]
        assert history[1].totals.total_calories == 330

    def test_history_invalid_days(self, tracker, session):
        """A non-positive window is a validation error."""
        with pytest.raises(TrackerInputError):
            tracker.history(session, days=0)

    def test_history_days_out_of_range(self, tracker, session):
        """A window reaching before year 1 is a validation error."""
        with pytest.raises(TrackerInputError, match="out of range"):
            tracker.history(session, days=99999999)


class TestProfile:
    """Tests for save_profile, get_profile and metrics."""

    def test_first_save(self, tracker, session, clock):
        """A first save inserts a profile stamped with now."""
        profile = tracker.save_profile(session, "male", 180, 70)
        assert profile.id
        assert profile.created_at == clock.now()
        assert profile.last_weight_update == clock.now()
        assert tracker.get_profile(session) == profile

    def test_weight_reminder_sequence(self, tracker, session, clock):
        """Same weight keeps last_weight_update; a new weight refreshes it."""
        first = datetime(2026, 3, 1, 12, tzinfo=timezone.utc)
        tracker.save_profile(session, "male", 180, 70)

        clock.set(first + timedelta(days=1))
        profile = tracker.save_profile(session, "male", 180, 70)
        assert profile.last_weight_update == first
        assert profile.updated_at == first + timedelta(days=1)

        clock.set(first + timedelta(days=2))
        profile = tracker.save_profile(session, "male", 180, "71")
        assert profile.last_weight_update == first + timedelta(days=2)
        assert profile.created_at == first

    def test_single_profile_per_user(self, tracker, session, store):
        """Repeated saves update the same record."""
        first = tracker.save_profile(session, "female", 165, 60)
        second = tracker.save_profile(session, "female", 166, 61)
        assert first.id == second.id
        assert store.get_profile(session.user_id).height == 166

    def test_no_profile(self, tracker, session):
        """Users without a profile get None."""
        assert tracker.get_profile(session) is None

    @pytest.mark.parametrize("gender,height,weight", [
        ("", 180, 70),
        ("male", None, 70),
        ("male", 180, ""),
        ("robot", 180, 70),
        ("male", "tall", 70),
        ("male", "nan", 70),
        ("male", 180, "inf"),
        ("female", float("inf"), 60),
    ])
    def test_invalid_input(self, tracker, session, gender, height, weight):
        """Bad profile input is rejected before any write."""
        with pytest.raises(TrackerInputError):
            tracker.save_profile(session, gender, height, weight)
        assert tracker.get_profile(session) is None

    def test_metrics_due_after_two_weeks(self, tracker, session, clock):
        """The reminder flag turns on after 14 days without a weight change."""
        profile = tracker.save_profile(session, "male", 180, 90)
        clock.set(clock.now() + timedelta(days=14))
        assert tracker.metrics(profile).weight_update_due is False
        clock.set(clock.now() + timedelta(milliseconds=1))
        metrics = tracker.metrics(profile)
        assert metrics.weight_update_due is True
        assert metrics.category.value == "Overweight"
