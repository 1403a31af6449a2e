"""MCP Server - Tool definitions for assistant integration.

Exposes the tracker operations as MCP tools. Handles authentication via the
session the auth middleware stores for each request.
"""

import logging
from typing import Any, Callable

from mcp.server.fastmcp import FastMCP
from mcp.server.transport_security import TransportSecuritySettings

from ..core.macros import round_for_display
from ..core.models import Gender
from .context import get_tracker, require_session
from .tracker import TrackerInputError, TrackerNotFoundError


logger = logging.getLogger(__name__)

transport_security = TransportSecuritySettings(
    enable_dns_rebinding_protection=True,
    allowed_hosts=[
        "localhost:*",
        "127.0.0.1:*",
        "*.run.app:*",
        "*.run.app",
    ],
)

# Initialize FastMCP server with stateless HTTP for cloud deployments
mcp = FastMCP(
    "nutritrack",
    instructions="""NutriTrack - Personal nutrition tracker.

Foods live in the user's catalog with per-serving protein, carbs and calories.
Use list_foods to find a food ID before calling log_food.
After logging, show the updated totals from get_today.
If get_profile reports weight_update_due, ask the user for their current weight.""",
    stateless_http=True,
    transport_security=transport_security,
)


def _run(failure: str, operation: Callable[[], Any]) -> Any:
    """Run a tracker call, turning errors into an error payload."""
    try:
        return operation()
    except (TrackerInputError, TrackerNotFoundError) as e:
        return {"error": str(e)}
    except Exception as e:
        logger.error("%s: %s", failure, str(e))
        return {"error": f"{failure}. Please try again."}


# ==================== Food Catalog Tools ====================


@mcp.tool()
def add_food(
    name: str,
    protein: float,
    carbs: float,
    calories: float,
    serving_size: float = 100,
) -> dict:
    """Add a food to the user's catalog.

    Args:
        name: Name of the food (e.g., "Chicken breast")
        protein: Protein in grams per serving
        carbs: Carbohydrates in grams per serving
        calories: Calories per serving
        serving_size: Grams or ml in one serving (default 100)

    Returns:
        The saved food with its ID
    """
    session = require_session()
    tracker = get_tracker()

    def operation() -> dict:
        food = tracker.add_food(session, name, protein, carbs, calories, serving_size)
        return food.model_dump(mode="json")

    return _run("Failed to add food", operation)


@mcp.tool()
def list_foods() -> Any:
    """List the foods in the user's catalog with their per-serving macros."""
    session = require_session()
    tracker = get_tracker()

    def operation() -> list[dict]:
        return [
            {
                "id": f.id,
                "name": f.name,
                "protein": f.protein,
                "carbs": f.carbs,
                "calories": f.calories,
                "serving_size": f.serving_size,
            }
            for f in tracker.list_foods(session)
        ]

    return _run("Failed to load foods", operation)


@mcp.tool()
def delete_food(food_id: str) -> dict:
    """Delete a food from the catalog. Entries already logged are kept.

    Args:
        food_id: The ID of the food to delete
    """
    session = require_session()
    tracker = get_tracker()

    def operation() -> dict:
        tracker.delete_food(session, food_id)
        return {"success": True}

    return _run("Failed to delete food", operation)


# ==================== Logging Tools ====================


@mcp.tool()
def log_food(food_id: str, servings: float | None = None, grams: float | None = None) -> dict:
    """Log a catalog food against today. Give servings or grams (grams win).

    Args:
        food_id: ID of the food, from list_foods
        servings: Number of servings eaten
        grams: Grams (or ml) eaten

    Returns:
        The created entry and today's totals
    """
    session = require_session()
    tracker = get_tracker()

    def operation() -> dict:
        entry = tracker.log_consumption(session, food_id, servings, grams)
        summary = tracker.daily_summary(session)
        return {
            "entry": entry.model_dump(mode="json"),
            "totals": round_for_display(summary.totals).model_dump(),
        }

    return _run("Failed to log food", operation)


@mcp.tool()
def get_today() -> dict:
    """Get today's log entries with protein, carbs and calorie totals."""
    session = require_session()
    tracker = get_tracker()

    def operation() -> dict:
        summary = tracker.daily_summary(session)
        return {
            "date": summary.date,
            "entries": [
                {
                    "id": e.id,
                    "food_name": e.food_name,
                    "servings": e.servings,
                    "grams": e.grams,
                    "protein": e.protein,
                    "carbs": e.carbs,
                    "calories": e.calories,
                }
                for e in summary.entries
            ],
            "totals": round_for_display(summary.totals).model_dump(),
        }

    return _run("Failed to load today's logs", operation)


@mcp.tool()
def delete_log_entry(log_id: str) -> dict:
    """Remove an entry from the daily log.

    Args:
        log_id: The ID of the entry to remove
    """
    session = require_session()
    tracker = get_tracker()

    def operation() -> dict:
        tracker.delete_log_entry(session, log_id)
        return {"success": True}

    return _run("Failed to delete log entry", operation)


@mcp.tool()
def get_history(days: int = 7) -> dict:
    """Per-day totals for the last N days (today included). Empty days are left out.

    Args:
        days: How many days to cover (default 7)
    """
    session = require_session()
    tracker = get_tracker()

    def operation() -> dict:
        return {"days": [s.model_dump() for s in tracker.history(session, days)]}

    return _run("Failed to load history", operation)


# ==================== Profile Tools ====================


@mcp.tool()
def save_profile(gender: Gender, height: float, weight: float) -> dict:
    """Save the user's gender, height (cm) and weight (kg).

    Returns:
        The saved profile with BMI, BMI category and reminder flag
    """
    session = require_session()
    tracker = get_tracker()

    def operation() -> dict:
        profile = tracker.save_profile(session, gender, height, weight)
        return {
            "profile": profile.model_dump(mode="json"),
            "metrics": tracker.metrics(profile).model_dump(mode="json"),
        }

    return _run("Failed to save profile", operation)


@mcp.tool()
def get_profile() -> dict:
    """Get the user's profile, BMI, BMI category and whether a weigh-in is due."""
    session = require_session()
    tracker = get_tracker()

    def operation() -> dict:
        profile = tracker.get_profile(session)
        if profile is None:
            return {"error": "No profile found. Use save_profile first."}
        return {
            "profile": profile.model_dump(mode="json"),
            "metrics": tracker.metrics(profile).model_dump(mode="json"),
        }

    return _run("Failed to load profile", operation)
