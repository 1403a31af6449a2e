"""HTTP API - JSON routes for the web client.

Every route under /api needs a session, set on ``request.state`` by the auth
middleware. Store calls are blocking, so they run in the threadpool.
"""

import functools
import logging
from typing import Any, Awaitable, Callable

from starlette.concurrency import run_in_threadpool
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route

from ..core.macros import round_for_display
from ..core.models import UserProfile
from .auth import Session
from .context import get_tracker
from .tracker import TrackerInputError, TrackerNotFoundError


logger = logging.getLogger(__name__)

Handler = Callable[[Request, Session], Awaitable[Any]]


def tracker_endpoint(failure: str, status_code: int = 200) -> Callable[[Handler], Callable]:
    """Wrap a handler with session lookup and error-to-response mapping.

    Args:
        failure: Message shown when the store fails, e.g. "Failed to add food"
        status_code: Status for a successful response
    """

    def decorator(handler: Handler) -> Callable:
        @functools.wraps(handler)
        async def endpoint(request: Request) -> JSONResponse:
            session = getattr(request.state, "session", None)
            if session is None:
                return JSONResponse({"error": "Authentication required"}, status_code=401)
            try:
                payload = await handler(request, session)
            except TrackerInputError as e:
                return JSONResponse({"error": str(e)}, status_code=400)
            except TrackerNotFoundError as e:
                return JSONResponse({"error": str(e)}, status_code=404)
            except Exception as e:
                logger.error("%s: %s", failure, str(e))
                return JSONResponse({"error": f"{failure}. Please try again."}, status_code=500)
            return JSONResponse(payload, status_code=status_code)

        return endpoint

    return decorator


async def _json_body(request: Request) -> dict:
    try:
        body = await request.json()
    except ValueError:
        raise TrackerInputError("Request body must be JSON") from None
    if not isinstance(body, dict):
        raise TrackerInputError("Request body must be a JSON object")
    return body


def _profile_payload(profile: UserProfile | None) -> dict:
    if profile is None:
        return {"profile": None, "metrics": None}
    metrics = get_tracker().metrics(profile)
    return {
        "profile": profile.model_dump(mode="json"),
        "metrics": metrics.model_dump(mode="json"),
    }


# ==================== Foods ====================


@tracker_endpoint("Failed to load foods")
async def list_foods(request: Request, session: Session) -> dict:
    foods = await run_in_threadpool(get_tracker().list_foods, session)
    return {"foods": [f.model_dump(mode="json") for f in foods]}


@tracker_endpoint("Failed to add food", status_code=201)
async def create_food(request: Request, session: Session) -> dict:
    body = await _json_body(request)
    food = await run_in_threadpool(
        get_tracker().add_food,
        session,
        body.get("name"),
        body.get("protein"),
        body.get("carbs"),
        body.get("calories"),
        body.get("serving_size", 100),
    )
    return food.model_dump(mode="json")


@tracker_endpoint("Failed to delete food")
async def remove_food(request: Request, session: Session) -> dict:
    await run_in_threadpool(get_tracker().delete_food, session, request.path_params["food_id"])
    return {"success": True}


# ==================== Daily Log ====================


@tracker_endpoint("Failed to load today's logs")
async def today(request: Request, session: Session) -> dict:
    summary = await run_in_threadpool(get_tracker().daily_summary, session)
    return {
        "date": summary.date,
        "entries": [e.model_dump(mode="json") for e in summary.entries],
        "totals": summary.totals.model_dump(),
        "display_totals": round_for_display(summary.totals).model_dump(),
    }


@tracker_endpoint("Failed to log food", status_code=201)
async def create_log_entry(request: Request, session: Session) -> dict:
    body = await _json_body(request)
    entry = await run_in_threadpool(
        get_tracker().log_consumption,
        session,
        body.get("food_id"),
        body.get("servings"),
        body.get("grams"),
    )
    return entry.model_dump(mode="json")


@tracker_endpoint("Failed to delete log entry")
async def remove_log_entry(request: Request, session: Session) -> dict:
    await run_in_threadpool(get_tracker().delete_log_entry, session, request.path_params["log_id"])
    return {"success": True}


@tracker_endpoint("Failed to load history")
async def history(request: Request, session: Session) -> dict:
    raw_days = request.query_params.get("days", "7")
    try:
        days = int(raw_days)
    except ValueError:
        raise TrackerInputError("days must be a whole number") from None
    summaries = await run_in_threadpool(get_tracker().history, session, days)
    return {"days": [s.model_dump() for s in summaries]}


# ==================== Profile ====================


@tracker_endpoint("Failed to load profile")
async def get_profile(request: Request, session: Session) -> dict:
    profile = await run_in_threadpool(get_tracker().get_profile, session)
    return _profile_payload(profile)


@tracker_endpoint("Failed to save profile")
async def put_profile(request: Request, session: Session) -> dict:
    body = await _json_body(request)
    profile = await run_in_threadpool(
        get_tracker().save_profile,
        session,
        body.get("gender"),
        body.get("height"),
        body.get("weight"),
    )
    return _profile_payload(profile)


routes = [
    Route("/api/foods", list_foods, methods=["GET"]),
    Route("/api/foods", create_food, methods=["POST"]),
    Route("/api/foods/{food_id}", remove_food, methods=["DELETE"]),
    Route("/api/logs/today", today, methods=["GET"]),
    Route("/api/logs", create_log_entry, methods=["POST"]),
    Route("/api/logs/{log_id}", remove_log_entry, methods=["DELETE"]),
    Route("/api/history", history, methods=["GET"]),
    Route("/api/profile", get_profile, methods=["GET"]),
    Route("/api/profile", put_profile, methods=["PUT"]),
]
