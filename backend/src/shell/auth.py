"""Authentication - API keys and the signed-in session.

An API key identifies a user; its hash is the opaque user ID every other
operation is scoped by. Plaintext keys are never stored.
"""

import hashlib
import logging
import secrets
from dataclasses import dataclass

from ..core.models import User
from .store import NutritionStore


logger = logging.getLogger(__name__)

# API key prefix for identification
API_KEY_PREFIX = "ntk_"
MIN_API_KEY_LENGTH = 40


@dataclass(frozen=True)
class Session:
    """The signed-in user, passed explicitly into every tracker operation."""

    user_id: str


def generate_api_key() -> str:
    """Generate a cryptographically secure API key.

    Returns:
        API key in format: ntk_<random_chars>
    """
    return f"{API_KEY_PREFIX}{secrets.token_urlsafe(32)}"


def hash_api_key(api_key: str) -> str:
    """Hash an API key into a user ID (SHA256, first 32 hex chars)."""
    return hashlib.sha256(api_key.encode()).hexdigest()[:32]


def validate_api_key_format(api_key: str | None) -> bool:
    """Check if API key has the expected prefix and length."""
    if not api_key or not api_key.startswith(API_KEY_PREFIX):
        return False
    return len(api_key) >= MIN_API_KEY_LENGTH


def parse_bearer(authorization: str | None) -> str | None:
    """Extract the token from an ``Authorization: Bearer <token>`` header."""
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


class AuthClient:
    """Registers users and turns API keys into sessions."""

    def __init__(self, store: NutritionStore) -> None:
        self._store = store

    def register_user(self, email: str) -> tuple[str, str]:
        """Register a new user and generate their API key.

        Args:
            email: User's email address

        Returns:
            Tuple of (api_key, user_id) - api_key is only returned once!
        """
        logger.info("Registering new user: %s", email)

        api_key = generate_api_key()
        user_id = hash_api_key(api_key)
        self._store.add_user(user_id, User(email=email, api_key_hash=user_id))

        logger.info("User registered successfully: %s", user_id[:8])
        return api_key, user_id

    def authenticate(self, api_key: str | None) -> Session | None:
        """Resolve an API key to a session.

        Returns:
            Session if the key belongs to a registered user, None otherwise
        """
        if not validate_api_key_format(api_key):
            logger.warning("Invalid API key format")
            return None

        user_id = hash_api_key(api_key)
        try:
            if self._store.get_user(user_id) is None:
                logger.warning("API key not found in database")
                return None
        except Exception as e:
            logger.error("Error validating API key: %s", str(e))
            return None

        logger.debug("API key validated for user: %s", user_id[:8])
        return Session(user_id=user_id)
