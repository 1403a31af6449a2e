"""Configuration - environment-driven settings for the server and the store."""

import os
from dataclasses import dataclass, field
from typing import Mapping


DEFAULT_CORS_ORIGINS = ["http://localhost:5173"]


def _split_csv(value: str) -> list[str]:
    return [part.strip() for part in value.split(",") if part.strip()]


@dataclass
class Settings:
    """Runtime settings.

    Attributes:
        store_backend: "firestore" or "memory"
        firestore_project: GCP project ID (None for default)
        firestore_database: Firestore database name
        host: Interface to bind
        port: Port to bind
        base_url: Public URL of the service, used in registration responses
        cors_origins: Origins allowed to call the API from a browser
        log_level: Root logging level name
    """

    store_backend: str = "firestore"
    firestore_project: str | None = None
    firestore_database: str = "nutritrack"
    host: str = "0.0.0.0"
    port: int = 8080
    base_url: str = "http://localhost:8080"
    cors_origins: list[str] = field(default_factory=lambda: list(DEFAULT_CORS_ORIGINS))
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Settings":
        """Read settings from environment variables.

        Raises:
            ValueError: If STORE_BACKEND or PORT is invalid
        """
        env = os.environ if environ is None else environ

        store_backend = env.get("STORE_BACKEND", "firestore").lower()
        if store_backend not in ("firestore", "memory"):
            raise ValueError(
                f"Invalid STORE_BACKEND value: {store_backend}. "
                "Expected 'firestore' or 'memory'"
            )

        cors = env.get("CORS_ORIGINS")

        return cls(
            store_backend=store_backend,
            firestore_project=env.get("FIRESTORE_PROJECT") or None,
            firestore_database=env.get("FIRESTORE_DATABASE", "nutritrack"),
            host=env.get("HOST", "0.0.0.0"),
            port=int(env.get("PORT", 8080)),
            base_url=env.get("BASE_URL", "http://localhost:8080"),
            cors_origins=_split_csv(cors) if cors else list(DEFAULT_CORS_ORIGINS),
            log_level=env.get("LOG_LEVEL", "INFO").upper(),
        )
