"""Lazy-initialized clients shared by the HTTP routes and MCP tools."""

import logging
from contextvars import ContextVar

from ..core.clock import Clock, SystemClock
from .auth import AuthClient, Session
from .config import Settings
from .store import NutritionStore, create_store
from .tracker import NutritionTracker


logger = logging.getLogger(__name__)

# Session of the request being handled, set by the auth middleware
current_session: ContextVar[Session | None] = ContextVar("current_session", default=None)

_settings: Settings | None = None
_store: NutritionStore | None = None
_tracker: NutritionTracker | None = None
_auth_client: AuthClient | None = None


def get_settings() -> Settings:
    """Get or load settings from the environment."""
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
    return _settings


def get_store() -> NutritionStore:
    """Get or create the configured store."""
    global _store
    if _store is None:
        settings = get_settings()
        logger.info("Using %s store", settings.store_backend)
        _store = create_store(settings)
    return _store


def get_tracker() -> NutritionTracker:
    """Get or create the tracker."""
    global _tracker
    if _tracker is None:
        _tracker = NutritionTracker(get_store())
    return _tracker


def get_auth_client() -> AuthClient:
    """Get or create Auth client."""
    global _auth_client
    if _auth_client is None:
        _auth_client = AuthClient(get_store())
    return _auth_client


def use_store(store: NutritionStore, clock: Clock | None = None) -> NutritionTracker:
    """Replace the shared store (and clock); used by tests and local runs."""
    global _store, _tracker, _auth_client
    _store = store
    _tracker = NutritionTracker(store, clock or SystemClock())
    _auth_client = AuthClient(store)
    return _tracker


def require_session() -> Session:
    """Get the session of the current request.

    Raises:
        RuntimeError: If no user is authenticated
    """
    session = current_session.get()
    if session is None:
        raise RuntimeError("No authenticated user. Ensure API key is provided.")
    return session
